"""
Tests for benchmark file discovery and parsing.
"""
import json

import pytest

from qbench.config.config_loader import ConfigLoader, parse_document
from qbench.errors import ConfigError

TOML_DOC = '''
[[queries]]
name = "lookup"

[[queries.revisions]]
name = "1.0.0"
query = "SELECT * FROM t WHERE name LIKE '%foo%';"
pre_script = """
CREATE TABLE t (id INTEGER, name TEXT);
INSERT INTO t VALUES (1, 'foo');
"""
post_script = "DROP TABLE t;"

[[queries.revisions]]
name = "2.0.0"
query = "SELECT id FROM t WHERE name LIKE '%foo%';"
'''

YAML_DOC = """
queries:
  - name: totals
    revisions:
      - name: 1.0
        query: SELECT SUM(a) FROM t
      - name: "2"
        query: SELECT TOTAL(a) FROM t
        post_script: "   "
"""


def _write(directory, name, text):
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


class TestConfigLoader:

    def test_toml_document(self, tmp_path):
        _write(tmp_path, "bench.toml", TOML_DOC)
        groups = ConfigLoader(tmp_path).query_groups

        assert [g.name for g in groups] == ["lookup"]
        first, second = groups[0].revisions
        assert first.name == "1.0.0"
        assert "CREATE TABLE t" in first.pre_script
        assert first.post_script == "DROP TABLE t;"
        assert second.pre_script is None and second.post_script is None

    def test_yaml_document(self, tmp_path):
        """Numeric YAML names become strings and blank scripts are dropped."""
        _write(tmp_path, "bench.yaml", YAML_DOC)
        groups = ConfigLoader(tmp_path, pattern="*.yaml").query_groups

        revisions = groups[0].revisions
        assert [r.name for r in revisions] == ["1.0", "2"]
        assert revisions[1].post_script is None

    def test_json_document(self, tmp_path):
        doc = {"queries": [{"name": "j", "revisions": [{"name": "a", "query": "SELECT 1"}]}]}
        _write(tmp_path, "bench.json", json.dumps(doc))
        groups = ConfigLoader(tmp_path, pattern="*.json").query_groups
        assert groups[0].revisions[0].query == "SELECT 1"

    def test_files_merge_in_sorted_order(self, tmp_path):
        for file_name, group in (("b.toml", "second"), ("a.toml", "first"), ("c.TOML", "third")):
            _write(tmp_path, file_name,
                   f'[[queries]]\nname = "{group}"\n[[queries.revisions]]\nname = "r"\nquery = "SELECT 1"\n')
        loader = ConfigLoader(tmp_path)

        assert [g.name for g in loader.query_groups] == ["first", "second", "third"]
        assert [p.name for p in loader.files] == ["a.toml", "b.toml", "c.TOML"]

    def test_duplicate_group_across_files(self, tmp_path):
        body = '[[queries]]\nname = "same"\n[[queries.revisions]]\nname = "r"\nquery = "SELECT 1"\n'
        _write(tmp_path, "a.toml", body)
        _write(tmp_path, "b.toml", body)
        with pytest.raises(ConfigError, match="more than once"):
            ConfigLoader(tmp_path)

    def test_no_matching_files(self, tmp_path):
        _write(tmp_path, "notes.txt", "nothing here")
        with pytest.raises(ConfigError, match="No benchmark files"):
            ConfigLoader(tmp_path)

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ConfigError):
            ConfigLoader(tmp_path / "missing")

    def test_unparseable_file(self, tmp_path):
        _write(tmp_path, "broken.toml", "[[queries]\nname = ")
        with pytest.raises(ConfigError, match="Failed to parse"):
            ConfigLoader(tmp_path)

    def test_unsupported_extension(self, tmp_path):
        _write(tmp_path, "bench.txt", "queries: []")
        with pytest.raises(ConfigError, match="Unsupported file extension"):
            ConfigLoader(tmp_path, pattern="*.txt")


class TestParseDocument:

    def test_requires_queries(self):
        with pytest.raises(ConfigError):
            parse_document({"revisions": []})
        with pytest.raises(ConfigError):
            parse_document({"queries": {"name": "x"}})

    def test_empty_revisions(self):
        with pytest.raises(ConfigError, match="no revisions"):
            parse_document({"queries": [{"name": "g", "revisions": []}]})

    def test_duplicate_revision_names(self):
        revisions = [{"name": "r", "query": "SELECT 1"}, {"name": "r", "query": "SELECT 2"}]
        with pytest.raises(ConfigError, match="more than once"):
            parse_document({"queries": [{"name": "g", "revisions": revisions}]})

    def test_missing_query(self):
        with pytest.raises(ConfigError, match="'query'"):
            parse_document({"queries": [{"name": "g", "revisions": [{"name": "r"}]}]})

    def test_unknown_revision_key(self):
        revisions = [{"name": "r", "query": "SELECT 1", "setup": "x"}]
        with pytest.raises(ConfigError, match="setup"):
            parse_document({"queries": [{"name": "g", "revisions": revisions}]})

    def test_declaration_order_kept(self):
        revisions = [{"name": n, "query": "SELECT 1"} for n in ("z", "a", "m")]
        groups = parse_document({"queries": [{"name": "g", "revisions": revisions}]})
        assert [r.name for r in groups[0].revisions] == ["z", "a", "m"]
