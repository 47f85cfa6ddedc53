"""
Query group configuration data classes.

A QueryGroup names one logical query; its revisions are the versions being
compared, in declaration order.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from qbench.errors import ConfigError


@dataclass(frozen=True)
class Revision:

    name: str
    query: str
    pre_script: Optional[str] = None
    post_script: Optional[str] = None


@dataclass(frozen=True)
class QueryGroup:

    name: str
    revisions: Tuple[Revision, ...]

    def __post_init__(self):
        if not self.revisions:
            raise ConfigError(f"Query group '{self.name}' has no revisions")
        seen = set()
        for revision in self.revisions:
            if revision.name in seen:
                raise ConfigError(
                    f"Query group '{self.name}' declares revision '{revision.name}' more than once"
                )
            seen.add(revision.name)
