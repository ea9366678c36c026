"""Integration tests for GitRepository and DiffCalculator on a real repository."""

import json
import os
import shutil
import subprocess

import pytest

from analysis.orchestrator import DiffCalculator, DiffOptions
from common.errors import RepositoryNotFoundError
from repository.git import GitRepository
from versioning.models import ChangeStatus

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def _git(cwd, *args):
    env = dict(os.environ, GIT_CONFIG_NOSYSTEM="1", HOME=str(cwd))
    subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, env=env)


def _npm_lock(versions):
    packages = {"": {"name": "app"}}
    packages.update({f"node_modules/{k}": {"version": v} for k, v in versions.items()})
    return json.dumps({"lockfileVersion": 3, "packages": packages}, indent=2)


def _commit(repo, message):
    _git(repo, "add", "-A")
    _git(repo, "-c", "user.name=Test", "-c", "user.email=test@example.com",
         "commit", "-q", "--no-gpg-sign", "-m", message)


@pytest.fixture
def repo(tmp_path):
    root = tmp_path / "project"
    root.mkdir()
    _git(root, "init", "-q")
    (root / "README.md").write_text("readme\n")
    _commit(root, "initial")
    (root / "package-lock.json").write_text(_npm_lock({"lodash": "4.17.15", "moment": "2.29.1"}))
    _commit(root, "add lockfile")
    (root / "package-lock.json").write_text(_npm_lock({"lodash": "4.17.21", "react": "18.2.0"}))
    _commit(root, "update lockfile")
    return root


class TestGitRepository:
    """Test the git queries."""

    def test_outside_repository_raises(self, tmp_path, monkeypatch):
        outside = tmp_path / "plain"
        outside.mkdir()
        monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))

        with pytest.raises(RepositoryNotFoundError):
            GitRepository(cwd=str(outside))

    def test_root_and_relative_dir(self, repo):
        sub = repo / "sub"
        sub.mkdir()

        git = GitRepository(cwd=str(sub))

        assert os.path.realpath(git.root) == os.path.realpath(str(repo))
        assert git.relative_current_dir == "sub"
        assert GitRepository(cwd=str(repo)).relative_current_dir == ""

    def test_commit_log_newest_first(self, repo):
        git = GitRepository(cwd=str(repo))

        commits = git.commits_touching("package-lock.json")

        assert len(commits) == 2
        assert git.commits_touching("package-lock.json", commits[1]) == [commits[1]]
        assert git.commits_touching("missing.lock") == []

    def test_content_at_commit_and_working_tree(self, repo):
        git = GitRepository(cwd=str(repo))
        newest, oldest = git.commits_touching("package-lock.json")

        assert "4.17.15" in git.content_at("package-lock.json", oldest)
        assert "4.17.21" in git.content_at("package-lock.json", newest)
        assert git.content_at("package-lock.json", "0000000") == ""
        assert "react" in git.working_tree_content("package-lock.json")
        assert git.working_tree_content("nope.json") == ""

    def test_uncommitted_detection(self, repo):
        git = GitRepository(cwd=str(repo))
        assert not git.has_uncommitted_change("package-lock.json")

        (repo / "package-lock.json").write_text(_npm_lock({"lodash": "4.17.21"}))
        (repo / "composer.lock").write_text("{}")

        assert git.has_uncommitted_change("package-lock.json")
        assert git.has_uncommitted_change("composer.lock")

    def test_resolve_commit(self, repo):
        git = GitRepository(cwd=str(repo))

        head = git.resolve_commit("HEAD")

        assert head and len(head) == 40
        assert git.short_hash(head) == git.commits_touching("package-lock.json")[0]
        assert git.resolve_commit("does-not-exist") is None


class TestDiffOnRealRepository:
    """End to end diff without network access."""

    def test_last_commit_diff(self, repo):
        calculator = DiffCalculator(GitRepository(cwd=str(repo)), DiffOptions(skip_release_count=True))

        result = calculator.run()

        assert len(result.diffs) == 1
        statuses = {c.name: c.status for c in result.diffs[0].changes}
        assert statuses == {
            "lodash": ChangeStatus.UPDATED,
            "moment": ChangeStatus.REMOVED,
            "react": ChangeStatus.ADDED,
        }

    def test_working_tree_diff(self, repo):
        (repo / "package-lock.json").write_text(_npm_lock({"lodash": "4.17.20", "react": "18.2.0"}))
        calculator = DiffCalculator(GitRepository(cwd=str(repo)), DiffOptions(skip_release_count=True))

        result = calculator.run()

        assert result.has_uncommitted_changes
        lodash = result.find_change("lodash")
        assert lodash.status is ChangeStatus.DOWNGRADED
        assert result.diffs[0].to_commit is None
