"""
End-to-end tests of the qbench command against SQLite.
"""
import json

import pytest

from qbench.cli.cli import descriptor_from_args, parse_args, settings_from_args
from qbench.cli.main import EXIT_FAILURE, EXIT_OK, EXIT_REGRESSION, EXIT_TIMEOUT, main
from qbench.consts.Classification import Statistic
from qbench.consts.EngineType import EngineType
from qbench.errors import ConfigError

SETUP = '''
pre_script = """
CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT);
INSERT INTO t (name) VALUES ('foo'), ('bar');
"""
post_script = "DROP TABLE t;"
'''

BENCH = f'''
[[queries]]
name = "lookup"

[[queries.revisions]]
name = "1.0.0"
query = "SELECT id FROM t WHERE name = 'foo';"
{SETUP}

[[queries.revisions]]
name = "2.0.0"
query = """
WITH RECURSIVE n(i) AS (SELECT 1 UNION ALL SELECT i + 1 FROM n WHERE i < 300000)
SELECT COUNT(*) FROM n JOIN t ON t.id = n.i % 2 + 1;
"""
{SETUP}
'''


SAME_COST = f'''
[[queries]]
name = "lookup"

[[queries.revisions]]
name = "1.0.0"
query = "SELECT id FROM t WHERE name = 'foo';"
{SETUP}

[[queries.revisions]]
name = "1.0.1"
query = "SELECT id FROM t WHERE name = 'foo';"
{SETUP}
'''


@pytest.fixture
def bench_dir(tmp_path):
    directory = tmp_path / "bench"
    directory.mkdir()
    (directory / "lookup.toml").write_text(BENCH, encoding="utf-8")
    return directory


@pytest.fixture
def same_cost_dir(tmp_path):
    directory = tmp_path / "same"
    directory.mkdir()
    (directory / "lookup.toml").write_text(SAME_COST, encoding="utf-8")
    return directory


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'bench.db'}"


class TestArguments:

    def test_defaults(self):
        args = parse_args(["-u", "sqlite:///x.db"])
        settings = settings_from_args(args)
        assert args.bench_dir == "./"
        assert args.pattern == "*.toml"
        assert settings.iterations == 5
        assert settings.threshold == pytest.approx(0.05)
        assert settings.statistic is Statistic.MEAN
        assert settings.max_concurrency == 1

    def test_threshold_is_percent(self):
        args = parse_args(["-u", "sqlite:///x.db", "--threshold", "12.5", "-c", "4", "--statistic", "median"])
        settings = settings_from_args(args)
        assert settings.threshold == pytest.approx(0.125)
        assert settings.max_concurrency == 4
        assert settings.statistic is Statistic.MEDIAN

    def test_discrete_connection_options(self):
        args = parse_args(["--engine", "postgres", "--host", "db", "--port", "5433", "--user", "u"])
        descriptor = descriptor_from_args(args)
        assert descriptor.engine is EngineType.POSTGRES
        assert (descriptor.host, descriptor.port, descriptor.database) == ("db", 5433, "postgres")

    def test_missing_connection(self):
        with pytest.raises(ConfigError):
            descriptor_from_args(parse_args([]))
        with pytest.raises(ConfigError):
            descriptor_from_args(parse_args(["--engine", "sqlite"]))


class TestMain:

    def test_regression_exit_code(self, bench_dir, db_url, tmp_path):
        out = tmp_path / "report.json"
        csv_path = tmp_path / "report.csv"
        code = main(["-u", db_url, "-d", str(bench_dir), "-i", "3",
                     "--output", str(out), "--csv", str(csv_path)])

        assert code == EXIT_REGRESSION
        data = json.loads(out.read_text(encoding="utf-8"))
        revisions = data["queries"][0]["revisions"]
        assert [r["status"] for r in revisions] == ["Completed", "Completed"]
        assert revisions[1]["classification"] == "Regressed"
        assert csv_path.exists()

    def test_no_regression_exit_code(self, same_cost_dir, db_url, tmp_path):
        out = tmp_path / "report.json"
        # both revisions run the same query; the median ignores a single slow outlier
        code = main(["-u", db_url, "-d", str(same_cost_dir), "-i", "5", "--statistic", "median",
                     "--threshold", "1000000", "--output", str(out)])
        assert code == EXIT_OK
        revisions = json.loads(out.read_text(encoding="utf-8"))["queries"][0]["revisions"]
        assert [r["status"] for r in revisions] == ["Completed", "Completed"]

    def test_rollback_mode(self, same_cost_dir, db_url):
        code = main(["-u", db_url, "-d", str(same_cost_dir), "-i", "5", "--statistic", "median",
                     "--threshold", "1000000", "--rollback"])
        assert code == EXIT_OK

    def test_bad_bench_dir(self, tmp_path, db_url):
        assert main(["-u", db_url, "-d", str(tmp_path / "missing")]) == EXIT_FAILURE

    def test_bad_url(self, bench_dir):
        assert main(["-u", "mysql://root@localhost/db", "-d", str(bench_dir)]) == EXIT_FAILURE

    def test_no_revision_connects(self, bench_dir, tmp_path):
        url = f"sqlite:///{tmp_path / 'missing' / 'bench.db'}"
        assert main(["-u", url, "-d", str(bench_dir), "-i", "1"]) == EXIT_FAILURE

    def test_duckdb_rollback_rejected(self, bench_dir, tmp_path):
        url = f"duckdb:///{tmp_path / 'bench.duckdb'}"
        assert main(["-u", url, "-d", str(bench_dir), "--rollback"]) == EXIT_FAILURE

    def test_timeout_exit_code(self, bench_dir, db_url):
        code = main(["-u", db_url, "-d", str(bench_dir), "-i", "1", "--timeout", "0.000000001"])
        assert code == EXIT_TIMEOUT
