"""Tests for the WorktreeKeeper facade and hooks"""
import logging
import os
import shutil
import stat

import pytest

from git_wt.config import ConfigStore, Settings
from git_wt.core import WorktreeKeeper
from git_wt.exceptions import (
    ConfigError,
    GitOperationError,
    NotARepositoryError,
    WorktreeInUseError,
    WorktreeNotFoundError,
)
from git_wt.models.branch import ProvenanceKind
from git_wt.services.repository_locator import RepositoryLocator

from conftest import FakeCommandRunner


def write_hook(path, body):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n" + body + "\n")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


@pytest.fixture
def keeper(git_repo):
    return WorktreeKeeper(git_repo.working_dir, settings=Settings(worktree_directory="../trees", auto_fetch=False))


class TestKeeperInit:
    """Test WorktreeKeeper construction."""

    def test_detects_settings_without_config_file(self, git_repo):
        keeper = WorktreeKeeper(git_repo.working_dir)

        assert str(keeper.context.root_dir) == git_repo.working_dir
        assert keeper.settings == Settings()

    def test_loads_config_file(self, git_repo, temp_dir):
        (temp_dir / "test_repo" / ".wtconfig.json").write_text('{"worktreeDir": "../elsewhere", "autoFetch": false}')

        keeper = WorktreeKeeper(git_repo.working_dir)

        assert keeper.settings.worktree_directory == "../elsewhere"
        assert keeper.settings.auto_fetch is False

    def test_invalid_config_file(self, git_repo, temp_dir):
        (temp_dir / "test_repo" / ".wtconfig.json").write_text('{"confirmDelete": "please"}')

        with pytest.raises(ConfigError):
            WorktreeKeeper(git_repo.working_dir)

    def test_outside_repository(self, temp_dir, monkeypatch):
        locator = RepositoryLocator()
        monkeypatch.setattr(locator, "_check_directory", lambda directory: None)

        with pytest.raises(NotARepositoryError):
            WorktreeKeeper(temp_dir, locator=locator)

    def test_detects_worktree_directory_from_layout(self, git_repo, temp_dir):
        git_repo.git.worktree('add', '-b', 'a', str(temp_dir / "trees" / "a"))
        git_repo.git.worktree('add', '-b', 'b', str(temp_dir / "trees" / "b"))

        keeper = WorktreeKeeper(git_repo.working_dir)

        assert keeper.settings.worktree_directory == "../trees"


class TestKeeperWorktrees:
    """Test create, find and remove through the facade."""

    def test_create_uses_configured_directory(self, keeper, temp_dir):
        result = keeper.create_worktree("feature/login")

        assert result.provenance.kind is ProvenanceKind.NEW
        assert result.path == str(temp_dir / "trees" / "feature" / "login")
        assert (temp_dir / "trees" / "feature" / "login" / "README.md").exists()

    def test_find_by_branch_directory_and_path(self, keeper, temp_dir):
        keeper.create_worktree("feature")
        path = str(temp_dir / "trees" / "feature")

        assert keeper.find_worktree("feature").path == path
        assert keeper.worktree_dir("feature") == path
        assert keeper.find_worktree(path).branch_name == "feature"

    def test_find_unknown(self, keeper):
        with pytest.raises(WorktreeNotFoundError, match="no-such-branch"):
            keeper.worktree_dir("no-such-branch")

    def test_remove(self, keeper, temp_dir):
        keeper.create_worktree("feature")

        removed = keeper.remove_worktree("feature", cwd=temp_dir)

        assert removed.branch_name == "feature"
        assert not (temp_dir / "trees" / "feature").exists()

    def test_remove_refuses_current_worktree(self, keeper, temp_dir):
        keeper.create_worktree("feature")
        inside = temp_dir / "trees" / "feature" / "sub"
        inside.mkdir()

        with pytest.raises(WorktreeInUseError):
            keeper.remove_worktree("feature", cwd=inside)

        assert (temp_dir / "trees" / "feature").exists()

    def test_remove_main_worktree_fails(self, keeper, temp_dir):
        with pytest.raises(GitOperationError):
            keeper.remove_worktree("main", cwd=temp_dir)

    def test_missing_worktrees(self, keeper, temp_dir):
        keeper.create_worktree("gone")
        shutil.rmtree(temp_dir / "trees" / "gone")

        records = keeper.list_worktrees()

        assert keeper.missing_worktrees(records) == [str(temp_dir / "trees" / "gone")]
        keeper.prune_worktrees()
        assert [r.branch_name for r in keeper.list_worktrees()] == ["main"]


class TestHooks:
    """Test post-create and post-remove hooks."""

    def test_post_create_hook(self, git_repo, temp_dir):
        root = temp_dir / "test_repo"
        write_hook(root / "hooks" / "post-create.sh", 'env | grep "^WT_" | sort > hook-env.txt')
        settings = Settings(worktree_directory="../trees", auto_fetch=False, post_create_hook="hooks/post-create.sh")
        keeper = WorktreeKeeper(root, settings=settings)

        keeper.create_worktree("hooked")

        env_lines = (temp_dir / "trees" / "hooked" / "hook-env.txt").read_text().splitlines()
        assert "WT_BRANCH=hooked" in env_lines
        assert f"WT_WORKTREE_PATH={temp_dir / 'trees' / 'hooked'}" in env_lines
        assert f"WT_ROOT_DIR={root}" in env_lines

    def test_post_remove_hook_runs_in_root(self, git_repo, temp_dir):
        root = temp_dir / "test_repo"
        settings = Settings(
            worktree_directory="../trees",
            auto_fetch=False,
            post_remove_hook='sh -c "echo $WT_BRANCH > removed.txt"',
        )
        keeper = WorktreeKeeper(root, settings=settings)
        keeper.create_worktree("short-lived")

        keeper.remove_worktree("short-lived", cwd=temp_dir)

        assert (root / "removed.txt").read_text().strip() == "short-lived"

    def test_hook_failure_is_a_warning(self, git_repo, temp_dir, caplog):
        settings = Settings(worktree_directory="../trees", auto_fetch=False, post_create_hook="false")
        keeper = WorktreeKeeper(temp_dir / "test_repo", settings=settings)

        with caplog.at_level(logging.WARNING):
            result = keeper.create_worktree("still-created")

        assert os.path.isdir(result.path)
        assert any("Hook 'false' failed" in r.getMessage() for r in caplog.records)

    def test_unexecutable_hook_is_a_warning(self, git_repo, temp_dir, caplog):
        root = temp_dir / "test_repo"
        hook = root / "hooks" / "post-create.sh"
        hook.parent.mkdir()
        hook.write_text("#!/bin/sh\ntouch ran.txt\n")
        hook.chmod(0o644)
        settings = Settings(worktree_directory="../trees", auto_fetch=False, post_create_hook="hooks/post-create.sh")
        keeper = WorktreeKeeper(root, settings=settings)

        with caplog.at_level(logging.WARNING):
            result = keeper.create_worktree("plain-file-hook")

        assert os.path.isdir(result.path)
        assert not os.path.exists(os.path.join(result.path, "ran.txt"))
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert any("Hook 'hooks/post-create.sh' failed" in r.getMessage() for r in warnings)


class TestRunInWorktree:
    """Test running commands inside a branch's worktree."""

    def test_creates_missing_worktree(self, keeper, temp_dir):
        exit_code = keeper.run_in_worktree("task", ["sh", "-c", "pwd > where.txt"])

        assert exit_code == 0
        where = temp_dir / "trees" / "task" / "where.txt"
        assert where.read_text().strip() == str(temp_dir / "trees" / "task")

    def test_returns_command_exit_code(self, keeper):
        keeper.create_worktree("task")
        assert keeper.run_in_worktree("task", ["sh", "-c", "exit 7"]) == 7

    def test_uses_existing_worktree(self, git_repo, temp_dir):
        existing = temp_dir / "existing"
        existing.mkdir()
        runner = FakeCommandRunner(attached_exit_code=5)
        runner.respond(
            ("worktree", "list", "--porcelain"),
            stdout=f"worktree {temp_dir / 'test_repo'}\nHEAD abc\nbranch refs/heads/main\n\n"
                   f"worktree {existing}\nHEAD def\nbranch refs/heads/existing\n",
        )
        keeper = WorktreeKeeper(temp_dir / "test_repo", runner=runner, settings=Settings(auto_fetch=False))

        assert keeper.run_in_worktree("existing", ["make", "test"]) == 5
        assert runner.attached_calls == [
            {"executable": "make", "args": ["test"], "cwd": str(existing), "env": None},
        ]
        assert not runner.called_with("worktree", "add")


class TestKeeperConfig:
    """Test settings access through the facade."""

    def test_set_and_get(self, keeper):
        keeper.set_config_value("confirmDelete", "true")

        assert keeper.get_config_value("confirmDelete") is True
        assert ConfigStore().load(keeper.context).confirm_before_delete is True

    def test_set_keeps_current_values(self, keeper):
        settings = keeper.set_config_value("defaultBranch", "trunk")

        assert settings.worktree_directory == "../trees"
        assert settings.default_branch_name == "trunk"
