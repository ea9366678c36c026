"""Tests for compute_diff."""

import json
import random

import pytest

from analysis.diff_engine import compute_diff
from constants import PackageManagers
from registry.composer.lockfile_parser import extract_versions as composer_versions
from registry.npm.lockfile_parser import extract_versions as npm_versions
from versioning.models import ChangeStatus, SemverLevel
from versioning.semver import classify

COMPOSER = PackageManagers.COMPOSER
NPM = PackageManagers.NPM


def _rows(changes):
    return [(c.name, c.status, c.from_version, c.to_version) for c in changes]


class TestDiffProperties:
    """Properties that hold for any pair of maps."""

    @pytest.mark.parametrize("packages", [
        {},
        {"a": "1.0.0"},
        {"a": "1.0.0", "b": "dev-main", "c": "v2.0.0"},
    ])
    def test_identical_maps_have_no_changes(self, packages):
        assert compute_diff(packages, dict(packages), NPM) == []

    def test_every_differing_name_appears_once(self):
        previous = {"a": "1.0.0", "b": "1.0.0", "c": "1.0.0", "d": "1.0.0"}
        current = {"a": "1.0.0", "b": "2.0.0", "c": "0.9.0", "e": "1.0.0"}

        names = [c.name for c in compute_diff(previous, current, NPM)]

        assert names == ["b", "c", "d", "e"]

    def test_added_and_removed_have_one_side_only(self):
        changes = compute_diff({"old": "1.0.0"}, {"new": "1.0.0"}, COMPOSER)

        for change in changes:
            if change.status is ChangeStatus.ADDED:
                assert change.from_version is None and change.to_version is not None
            if change.status is ChangeStatus.REMOVED:
                assert change.to_version is None and change.from_version is not None

    def test_order_does_not_depend_on_insertion_order(self):
        names = [f"pkg-{i:02d}" for i in range(30)]
        previous = {n: "1.0.0" for n in names[:20]}
        current = {n: "1.1.0" for n in names[10:]}
        shuffled = list(current.items())
        random.Random(7).shuffle(shuffled)

        first = compute_diff(previous, current, NPM)
        second = compute_diff(dict(reversed(list(previous.items()))), dict(shuffled), NPM)

        assert first == second
        assert [c.name for c in first] == sorted(c.name for c in first)

    def test_sort_is_code_point_order(self):
        """Uppercase sorts before lowercase and '@' before letters."""
        changes = compute_diff({}, {"b": "1", "B": "1", "@scope/a": "1", "a": "1"}, NPM)

        assert [c.name for c in changes] == ["@scope/a", "B", "a", "b"]

    def test_empty_previous_everything_added(self):
        changes = compute_diff({}, {"x": "1.0.0", "y": "2.0.0"}, NPM)

        assert {c.status for c in changes} == {ChangeStatus.ADDED}

    def test_empty_current_everything_removed(self):
        changes = compute_diff({"x": "1.0.0", "y": "2.0.0"}, {}, NPM)

        assert {c.status for c in changes} == {ChangeStatus.REMOVED}

    def test_unparseable_versions_still_classified(self):
        """Branch versions never raise and always get a direction."""
        changes = compute_diff({"a": "dev-main", "b": "1.0.0"}, {"a": "dev-next", "b": "dev-main"}, COMPOSER)

        assert [c.status for c in changes] == [ChangeStatus.UPDATED, ChangeStatus.UPDATED]

    def test_changes_carry_kind_and_no_enrichment(self):
        change = compute_diff({"a": "1.0.0"}, {"a": "1.0.1"}, COMPOSER)[0]

        assert change.type is COMPOSER
        assert change.release_count is None
        assert change.semver is None


class TestDiffScenarios:
    """End to end scenarios through the extractors."""

    def test_basic_update_remove_add(self):
        previous = {"a": "1.0.0", "b": "2.0.0"}
        current = {"a": "1.1.0", "c": "1.0.0"}

        assert _rows(compute_diff(previous, current, NPM)) == [
            ("a", ChangeStatus.UPDATED, "1.0.0", "1.1.0"),
            ("b", ChangeStatus.REMOVED, "2.0.0", None),
            ("c", ChangeStatus.ADDED, None, "1.0.0"),
        ]

    def test_unparseable_previous_composer_lock(self):
        current = json.dumps({"packages": [{"name": "monolog/monolog", "version": "3.5.0"}]})

        changes = compute_diff(composer_versions("{broken"), composer_versions(current), COMPOSER)

        assert _rows(changes) == [("monolog/monolog", ChangeStatus.ADDED, None, "3.5.0")]

    def test_npm_mixed_changes(self):
        def lock(versions):
            return json.dumps({"packages": {
                "": {"name": "app"},
                **{f"node_modules/{name}": {"version": v} for name, v in versions.items()},
            }})

        previous = lock({"lodash": "4.17.15", "moment": "2.29.1", "axios": "0.21.1"})
        current = lock({"lodash": "4.17.21", "axios": "0.20.0", "react": "18.2.0"})

        changes = compute_diff(npm_versions(previous), npm_versions(current), NPM)
        by_name = {c.name: c for c in changes}

        assert [c.name for c in changes] == ["axios", "lodash", "moment", "react"]
        assert by_name["react"].status is ChangeStatus.ADDED
        assert by_name["moment"].status is ChangeStatus.REMOVED
        assert by_name["lodash"].status is ChangeStatus.UPDATED
        assert by_name["axios"].status is ChangeStatus.DOWNGRADED
        assert classify("4.17.15", "4.17.21") is SemverLevel.PATCH
        assert classify("0.21.1", "0.20.0") is SemverLevel.MINOR
