"""Tests for the text, markdown and JSON renderers."""

import json

import pytest

from common.errors import UsageError
from constants import PackageManagers
from outputs import JsonOutput, MarkdownOutput, TextOutput, get_formatter
from versioning.models import DependencyDiff, DiffResult, PackageChange, SemverLevel

NPM = PackageManagers.NPM


@pytest.fixture
def result():
    changes = (
        PackageChange.updated("lodash", NPM, "4.17.15", "4.17.21").with_enrichment(3, SemverLevel.PATCH),
        PackageChange.removed("moment", NPM, "2.29.1"),
        PackageChange.added("react", NPM, "18.2.0"),
    )
    diff = DependencyDiff("package-lock.json", NPM, "abc1234", "def5678", changes)
    return DiffResult(diffs=(diff,))


class TestGetFormatter:
    """Test renderer selection."""

    def test_known_formats(self):
        assert isinstance(get_formatter("text"), TextOutput)
        assert isinstance(get_formatter("JSON"), JsonOutput)
        assert isinstance(get_formatter("markdown"), MarkdownOutput)

    def test_unknown_format(self):
        with pytest.raises(UsageError, match="Invalid format"):
            get_formatter("xml")


class TestTextOutput:
    """Test the terminal renderer."""

    def test_plain_listing(self, result):
        output = TextOutput(use_ansi=False).format(result)

        assert output == (
            "package-lock.json between abc1234 and def5678\n"
            "\n"
            "↑ lodash : 4.17.15 => 4.17.21 (3 releases)\n"
            "× moment : 2.29.1\n"
            "+ react  : 18.2.0"
        )

    def test_ansi_colours(self, result):
        output = TextOutput(use_ansi=True).format(result)

        assert "\x1b[" in output
        assert "lodash" in output

    def test_single_release_is_not_mentioned(self):
        change = PackageChange.updated("a", NPM, "1.0.0", "1.0.1").with_enrichment(1, SemverLevel.PATCH)
        diff = DependencyDiff("package-lock.json", NPM, "abc1234", "def5678", (change,))

        output = TextOutput(use_ansi=False).format(DiffResult(diffs=(diff,)))

        assert "release" not in output

    def test_no_diffs(self):
        output = TextOutput(use_ansi=False).format(DiffResult())

        assert output == "No recent changes and no commit logs found for composer.lock, package-lock.json"

    def test_empty_diff_and_uncommitted_header(self):
        diff = DependencyDiff("composer.lock", PackageManagers.COMPOSER, "abc1234", None)

        output = TextOutput(use_ansi=False).format(DiffResult(diffs=(diff,), has_uncommitted_changes=True))

        assert output.splitlines() == [
            "Uncommitted changes detected on composer.lock",
            "",
            "composer.lock between abc1234 and uncommitted changes",
            "",
            " → No dependencies changes detected",
        ]

    def test_new_file(self):
        diff = DependencyDiff("package-lock.json", NPM, None, "def5678",
                              (PackageChange.added("a", NPM, "1.0.0"),), is_new=True)

        output = TextOutput(use_ansi=False).format(DiffResult(diffs=(diff,)))

        assert output.splitlines()[0] == "package-lock.json created at def5678"


class TestMarkdownOutput:
    """Test the markdown renderer."""

    def test_sections(self, result):
        output = MarkdownOutput().format(result)

        assert output == (
            "# Dependency Changes\n"
            "\n"
            "## package-lock.json\n"
            "*Changes from `abc1234` to `def5678`*\n"
            "\n"
            "### Added\n"
            "- **react** `18.2.0`\n"
            "\n"
            "### Removed\n"
            "- **moment** `2.29.1`\n"
            "\n"
            "### Updated\n"
            "- **lodash** `4.17.15` → `4.17.21` (3 releases) *patch*"
        )

    def test_no_changes(self):
        diff = DependencyDiff("composer.lock", PackageManagers.COMPOSER, "abc1234", "def5678")

        assert MarkdownOutput().format(DiffResult(diffs=(diff,))) == "No dependency changes detected."
        assert MarkdownOutput().format(DiffResult()) == "No dependency changes detected."

    def test_new_file_and_uncommitted_note(self):
        diff = DependencyDiff("composer.lock", PackageManagers.COMPOSER, None, None,
                              (PackageChange.added("a/b", PackageManagers.COMPOSER, "1.0.0"),), is_new=True)

        output = MarkdownOutput().format(DiffResult(diffs=(diff,), has_uncommitted_changes=True))

        assert "> **Note:** Showing uncommitted changes" in output
        assert "*File created*" in output


class TestJsonOutput:
    """Test the JSON renderer."""

    def test_document_shape(self, result):
        data = json.loads(JsonOutput().format(result))

        assert data["has_uncommitted_changes"] is False
        diff = data["diffs"][0]
        assert diff["filename"] == "package-lock.json"
        assert diff["type"] == "npmjs"
        assert diff["from_commit"] == "abc1234"
        assert diff["is_new"] is False
        assert diff["changes"][0] == {
            "name": "lodash",
            "type": "npmjs",
            "from": "4.17.15",
            "to": "4.17.21",
            "status": "updated",
            "release_count": 3,
            "semver": "patch",
        }
        assert diff["changes"][1]["to"] is None

    def test_empty_result(self):
        assert json.loads(JsonOutput().format(DiffResult())) == {"has_uncommitted_changes": False, "diffs": []}

    def test_error(self):
        assert json.loads(JsonOutput.format_error("boom")) == {"error": "boom"}
