"""Tests for the check, config and analyse command handlers."""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import yaml

from cli_analyse import run_analyse
from cli_check import evaluate, run_check
from cli_config import format_value, run_config
from common.config import ConfigService
from common.errors import RepositoryNotFoundError
from constants import PackageManagers
from versioning.models import CheckType, DependencyDiff, DiffResult, PackageChange

NPM = PackageManagers.NPM


def _result(*changes):
    return DiffResult(diffs=(DependencyDiff("package-lock.json", NPM, "abc1234", "def5678", tuple(changes)),))


def _check_args(package, check_type=CheckType.ANY, quiet=False):
    return SimpleNamespace(PACKAGE=package, CHECK_TYPE=check_type, QUIET=quiet,
                           INCLUDE=None, EXCLUDE=None, NO_CACHE=True)


class TestEvaluate:
    """Test the check predicates."""

    def test_no_change_is_false(self):
        assert not evaluate(None, CheckType.ANY)

    def test_status_match(self):
        change = PackageChange.updated("a", NPM, "1.0.0", "2.0.0")

        assert evaluate(change, CheckType.ANY)
        assert evaluate(change, CheckType.UPDATED)
        assert not evaluate(change, CheckType.DOWNGRADED)
        assert not evaluate(change, CheckType.ADDED)


@patch("cli_check.setup_cache")
@patch("cli_check.GitRepository")
@patch("cli_check.DiffCalculator")
class TestRunCheck:
    """Test exit codes and output of the check command."""

    def test_true(self, mock_calculator, _git, _cache, capsys):
        mock_calculator.return_value.run.return_value = _result(PackageChange.added("react", NPM, "18.2.0"))

        assert run_check(_check_args("react", CheckType.ADDED)) == 0
        assert capsys.readouterr().out == "true\n"
        options = mock_calculator.call_args[0][1]
        assert options.skip_release_count is True

    def test_false(self, mock_calculator, _git, _cache, capsys):
        mock_calculator.return_value.run.return_value = _result(PackageChange.added("react", NPM, "18.2.0"))

        assert run_check(_check_args("react", CheckType.REMOVED)) == 1
        assert capsys.readouterr().out == "false\n"

    def test_unknown_package_quiet(self, mock_calculator, _git, _cache, capsys):
        mock_calculator.return_value.run.return_value = _result()

        assert run_check(_check_args("vue", quiet=True)) == 1
        assert capsys.readouterr().out == ""

    def test_error_is_exit_two(self, _calculator, mock_git, _cache, capsys):
        mock_git.side_effect = RepositoryNotFoundError("Not a git repository")

        assert run_check(_check_args("react")) == 2
        assert "Not a git repository" in capsys.readouterr().err


class TestRunConfig:
    """Test the config command."""

    @pytest.fixture
    def config(self, tmp_path):
        return ConfigService(str(tmp_path / "config.yaml"))

    def test_dump_all(self, config, capsys):
        assert run_config(SimpleNamespace(KEY=None, VALUE=None), config) == 0

        assert yaml.safe_load(capsys.readouterr().out)["cache"]["min-time"] == 300

    def test_read_key(self, config, capsys):
        assert run_config(SimpleNamespace(KEY="cache.enabled", VALUE=None), config) == 0
        assert capsys.readouterr().out == "true\n"

    def test_missing_key(self, config, capsys):
        assert run_config(SimpleNamespace(KEY="nope", VALUE=None), config) == 1
        assert "Configuration key 'nope' not found" in capsys.readouterr().err

    def test_set_key(self, config, capsys):
        assert run_config(SimpleNamespace(KEY="cache.max-time", VALUE="3600"), config) == 0

        assert capsys.readouterr().out == "Configuration updated: cache.max-time = 3600\n"
        assert ConfigService(config.config_path).get("cache.max-time") == 3600

    def test_format_value(self):
        assert format_value(False) == "false"
        assert format_value(12) == "12"
        assert format_value({"a": 1}) == "a: 1"


@patch("cli_analyse.setup_cache")
@patch("cli_analyse.GitRepository")
class TestRunAnalyse:
    """Test the analyse command output."""

    @staticmethod
    def _args(output_format):
        return SimpleNamespace(OUTPUT_FORMAT=output_format, NO_PROGRESS=True, INCLUDE=None, EXCLUDE=None,
                               NO_CACHE=False, IGNORE_LAST=False, FROM_COMMIT=None, TO_COMMIT=None)

    def test_json_error(self, mock_git, _cache, capsys):
        mock_git.side_effect = RepositoryNotFoundError("Not a git repository")

        assert run_analyse(self._args("json")) == 1
        assert json.loads(capsys.readouterr().out) == {"error": "Not a git repository"}

    def test_text_error(self, mock_git, _cache, capsys):
        mock_git.side_effect = RepositoryNotFoundError("Not a git repository")

        assert run_analyse(self._args("text")) == 1
        assert capsys.readouterr().err.strip() == "Error: Not a git repository"

    def test_usage_error(self, _git, _cache, capsys):
        args = self._args("json")
        args.INCLUDE = "npmjs"
        args.EXCLUDE = "composer"

        assert run_analyse(args) == 1
        assert "error" in json.loads(capsys.readouterr().out)

    def test_renders_result(self, _git, _cache, capsys):
        calculator = MagicMock()
        calculator.run.return_value = _result(PackageChange.added("react", NPM, "18.2.0"))

        with patch("cli_analyse.DiffCalculator", return_value=calculator):
            assert run_analyse(self._args("json")) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["diffs"][0]["changes"][0]["name"] == "react"
