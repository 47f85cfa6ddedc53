"""qbench - benchmark revisions of the same SQL query and detect regressions."""

__version__ = "0.2.0"
