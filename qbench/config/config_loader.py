"""
Configuration loader for revision benchmarks.

This module provides the ConfigLoader class, which discovers benchmark files in
a directory, parses them (YAML, TOML or JSON, chosen by file extension) and
merges their query groups into one ordered list.
"""
import json
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

from qbench.config.query_group import QueryGroup, Revision
from qbench.errors import ConfigError
from qbench.util.file_utils import find_files
from qbench.util.log_config import setup_logger

logger = setup_logger(__name__)

DEFAULT_PATTERN = "*.toml"

REVISION_KEYS = {"name", "query", "pre_script", "post_script"}


def _parse_yaml(text: str) -> Any:
    return yaml.safe_load(text)


def _parse_toml(text: str) -> Any:
    return tomllib.loads(text)


def _parse_json(text: str) -> Any:
    return json.loads(text)


PARSERS = {
    ".yaml": _parse_yaml,
    ".yml": _parse_yaml,
    ".toml": _parse_toml,
    ".json": _parse_json,
}


class ConfigLoader:

    def __init__(self, config_dir: Union[str, Path], pattern: str = DEFAULT_PATTERN):
        self.config_dir = Path(config_dir)
        self.pattern = pattern
        self.files: List[Path] = []
        self.query_groups = self._load_config()

    def _load_config(self) -> List[QueryGroup]:
        """
        Load and merge every matching configuration file.

        Files are merged in sorted path order; within a file, groups keep
        their declaration order.

        Returns:
            List[QueryGroup]: merged query groups

        Raises:
            ConfigError: if no file matches, a file cannot be parsed, or the
                merged configuration is invalid
        """
        try:
            self.files = find_files(self.config_dir, self.pattern)
        except OSError as e:
            raise ConfigError(f"Cannot read benchmark directory {self.config_dir}", details=str(e)) from e

        if not self.files:
            raise ConfigError(
                f"No benchmark files matching '{self.pattern}' in {self.config_dir.resolve()}"
            )

        groups: List[QueryGroup] = []
        names = set()
        for path in self.files:
            for group in self.parse_file(path):
                if group.name in names:
                    raise ConfigError(f"Query group '{group.name}' is declared more than once",
                                      details=str(path))
                names.add(group.name)
                groups.append(group)
            logger.debug(f"Loaded benchmark file: {path}")

        logger.info(f"Loaded {len(groups)} query group(s) from {len(self.files)} file(s)")
        return groups

    @staticmethod
    def parse_file(path: Path) -> List[QueryGroup]:
        parser = PARSERS.get(path.suffix.lower())
        if parser is None:
            raise ConfigError(f"Unsupported file extension: {path}",
                              details=f"supported: {', '.join(sorted(PARSERS))}")
        try:
            data = parser(path.read_text(encoding="utf-8"))
        except (OSError, ValueError, yaml.YAMLError) as e:
            # tomllib.TOMLDecodeError and json.JSONDecodeError are ValueErrors
            raise ConfigError(f"Failed to parse benchmark file: {path}", details=str(e)) from e
        return parse_document(data, source=str(path))


def parse_document(data: Any, source: str = "<memory>") -> List[QueryGroup]:
    """Build query groups from an already-parsed document."""
    if not isinstance(data, dict) or "queries" not in data:
        raise ConfigError(f"Benchmark file has no 'queries' list: {source}")
    queries = data["queries"]
    if not isinstance(queries, list):
        raise ConfigError(f"'queries' must be a list: {source}")
    return [_parse_group(raw, source) for raw in queries]


def _parse_group(raw: Any, source: str) -> QueryGroup:
    if not isinstance(raw, dict) or not isinstance(raw.get("name"), str):
        raise ConfigError(f"Every query group needs a string 'name': {source}")
    revisions = raw.get("revisions")
    if not isinstance(revisions, list):
        raise ConfigError(f"Query group '{raw['name']}' needs a 'revisions' list: {source}")
    return QueryGroup(
        name=raw["name"],
        revisions=tuple(_parse_revision(raw["name"], rev, source) for rev in revisions),
    )


def _parse_revision(group: str, raw: Any, source: str) -> Revision:
    if not isinstance(raw, dict):
        raise ConfigError(f"Revision of '{group}' must be a table/object: {source}")
    unknown = set(raw) - REVISION_KEYS
    if unknown:
        raise ConfigError(f"Unknown revision keys in '{group}': {', '.join(sorted(unknown))}",
                          details=source)
    fields: Dict[str, Any] = {}
    for key in ("name", "query"):
        value = raw.get(key)
        if key == "name" and isinstance(value, (int, float)) and not isinstance(value, bool):
            # YAML reads an unquoted 1.0 as a float
            value = str(value)
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"Revision of '{group}' needs a non-empty '{key}'", details=source)
        fields[key] = value
    for key in ("pre_script", "post_script"):
        value = raw.get(key)
        if value is not None and not isinstance(value, str):
            raise ConfigError(f"'{key}' of {group}/{fields['name']} must be a string", details=source)
        # blank scripts are treated as absent
        fields[key] = value if value and value.strip() else None
    return Revision(**fields)
