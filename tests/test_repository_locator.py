"""Tests for repository detection"""
import pytest

from git_wt.exceptions import InvalidRepositoryError, NotARepositoryError
from git_wt.models.repository import LayoutKind, RepositoryContext
from git_wt.services.repository_locator import RepositoryLocator


class TestLocate:
    """Test walking up to the enclosing repository."""

    def test_standard_repository(self, git_repo):
        root = git_repo.working_dir
        context = RepositoryLocator().locate(root)

        assert context.layout_kind is LayoutKind.STANDARD
        assert str(context.root_dir) == root
        assert context.metadata_dir == context.root_dir / ".git"
        assert context.bare_dir is None

    def test_from_subdirectory(self, git_repo, temp_dir):
        nested = temp_dir / "test_repo" / "src" / "pkg"
        nested.mkdir(parents=True)

        context = RepositoryLocator().locate(nested)

        assert context.root_dir == temp_dir / "test_repo"

    def test_bare_layout_three_levels_down(self, temp_dir):
        """Detection from deep inside a bare-layout root stops at the root."""
        root = temp_dir / "project"
        (root / ".bare").mkdir(parents=True)
        (root / ".git").write_text("gitdir: ./.bare\n")
        deep = root / "feature" / "src" / "module"
        deep.mkdir(parents=True)

        context = RepositoryLocator().locate(deep)

        assert context.layout_kind is LayoutKind.BARE
        assert context.root_dir == root
        assert context.metadata_dir == root / ".bare"
        assert context.bare_dir == root / ".bare"

    def test_bare_dir_wins_over_git_directory(self, temp_dir):
        root = temp_dir / "both"
        (root / ".bare").mkdir(parents=True)
        (root / ".git").mkdir()

        context = RepositoryLocator().locate(root)

        assert context.layout_kind is LayoutKind.BARE

    def test_linked_file_wins_over_parent_git_directory(self, temp_dir):
        outer = temp_dir / "outer"
        (outer / ".git").mkdir(parents=True)
        linked = outer / "linked"
        linked.mkdir()
        (linked / ".git").write_text("gitdir: ../.git/worktrees/linked\n")

        context = RepositoryLocator().locate(linked)

        assert context.layout_kind is LayoutKind.LINKED_FILE
        assert context.root_dir == linked
        assert context.metadata_dir == outer / ".git" / "worktrees" / "linked"
        assert context.bare_dir is None

    def test_linked_file_to_bare_store(self, temp_dir):
        root = temp_dir / "store"
        root.mkdir()
        bare = temp_dir / "elsewhere" / ".bare"
        bare.mkdir(parents=True)
        (root / ".git").write_text(f"gitdir: {bare}\n")

        context = RepositoryLocator().locate(root)

        assert context.layout_kind is LayoutKind.LINKED_FILE
        assert context.bare_dir == bare

    def test_git_file_without_gitdir_is_skipped(self, temp_dir):
        outer = temp_dir / "outer"
        (outer / ".git").mkdir(parents=True)
        inner = outer / "inner"
        inner.mkdir()
        (inner / ".git").write_text("not a link file\n")

        context = RepositoryLocator().locate(inner)

        assert context.layout_kind is LayoutKind.STANDARD
        assert context.root_dir == outer

    def test_no_repository(self, temp_dir, monkeypatch):
        locator = RepositoryLocator()
        # Stop the walk before it reaches any repository above the temp dir
        monkeypatch.setattr(locator, "_check_directory", lambda directory: None)

        with pytest.raises(NotARepositoryError) as exc_info:
            locator.locate(temp_dir)

        assert exc_info.value.exit_code == 3
        assert str(temp_dir) in str(exc_info.value)

    def test_real_linked_worktree(self, git_repo, temp_dir):
        worktree_path = temp_dir / "linked-wt"
        git_repo.git.worktree('add', '-b', 'linked', str(worktree_path))

        context = RepositoryLocator().locate(worktree_path)

        assert context.layout_kind is LayoutKind.LINKED_FILE
        assert context.root_dir == worktree_path
        assert context.metadata_dir.parent.name == "worktrees"


class TestValidate:
    """Test repository validation."""

    def test_valid_standard(self, git_repo):
        locator = RepositoryLocator()
        locator.validate(locator.locate(git_repo.working_dir))

    def test_valid_bare_layout(self, bare_layout):
        locator = RepositoryLocator()
        context = locator.locate(bare_layout)
        locator.validate(context)
        assert context.layout_kind is LayoutKind.BARE

    def test_missing_metadata_dir(self, temp_dir):
        context = RepositoryContext(
            root_dir=temp_dir,
            metadata_dir=temp_dir / "gone",
            layout_kind=LayoutKind.LINKED_FILE,
        )
        with pytest.raises(InvalidRepositoryError, match="Git directory not found"):
            RepositoryLocator().validate(context)

    def test_bare_without_config(self, temp_dir):
        (temp_dir / ".bare").mkdir()
        context = RepositoryLocator().locate(temp_dir)

        with pytest.raises(InvalidRepositoryError, match="missing config") as exc_info:
            RepositoryLocator().validate(context)

        assert exc_info.value.exit_code == 5
