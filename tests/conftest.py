"""Pytest fixtures for git-wt tests"""
import tempfile
from pathlib import Path
import pytest
import git

from git_wt.config import Settings
from git_wt.models.repository import LayoutKind, RepositoryContext
from git_wt.services.command_runner import CommandResult, CommandRunner


class FakeCommandRunner(CommandRunner):
    """CommandRunner that records calls and replays scripted results.

    Responses are keyed by argument tuples with any leading
    `--git-dir <path>` removed; the longest key that prefixes the actual
    arguments wins. Unscripted git commands succeed with empty output.
    """

    def __init__(self, responses=None, default=None, attached_exit_code=0):
        self.responses = dict(responses or {})
        self.default = default or CommandResult(stdout="", stderr="", exit_code=0)
        self.attached_exit_code = attached_exit_code
        self.calls = []
        self.attached_calls = []

    @staticmethod
    def strip_git_dir(args):
        args = list(args)
        if len(args) >= 2 and args[0] == "--git-dir":
            return tuple(args[2:])
        return tuple(args)

    def respond(self, args, stdout="", stderr="", exit_code=0):
        self.responses[tuple(args)] = CommandResult(stdout=stdout, stderr=stderr, exit_code=exit_code)

    def run(self, executable, args, cwd=None, env=None):
        stripped = self.strip_git_dir(args)
        self.calls.append({"executable": executable, "args": stripped, "cwd": cwd, "env": env})
        matches = [key for key in self.responses if stripped[:len(key)] == key]
        if matches:
            return self.responses[max(matches, key=len)]
        return self.default

    def run_attached(self, executable, args, cwd=None, env=None):
        self.attached_calls.append({"executable": executable, "args": list(args), "cwd": cwd, "env": env})
        return self.attached_exit_code

    def called_with(self, *prefix):
        """Return the recorded calls whose arguments start with `prefix`."""
        return [call for call in self.calls if call["args"][:len(prefix)] == prefix]


def commit_file(repo, name, content, message):
    """Write a file in a repository's working tree and commit it."""
    path = Path(repo.working_dir) / name
    path.write_text(content)
    repo.index.add([name])
    return repo.index.commit(message)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def settings():
    """Settings that never touch the network."""
    return Settings(auto_fetch=False)


@pytest.fixture
def fake_runner():
    """Create a FakeCommandRunner with no scripted responses."""
    return FakeCommandRunner()


@pytest.fixture
def fake_context(temp_dir):
    """A RepositoryContext for tests that never reach a real git."""
    return RepositoryContext(
        root_dir=temp_dir,
        metadata_dir=temp_dir / ".git",
        layout_kind=LayoutKind.STANDARD,
    )


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository for testing."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    # Initialize repository
    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    # Create initial commit on main branch
    commit_file(repo, "README.md", "# Test Repository\n", "Initial commit")

    # Rename master to main if needed
    repo.git.branch('-M', 'main')

    yield repo

    # Cleanup
    repo.close()


@pytest.fixture
def remote_repo(temp_dir):
    """Create a bare repository to act as origin."""
    remote_path = temp_dir / "origin.git"
    repo = git.Repo.init(remote_path, bare=True)
    repo.git.symbolic_ref('HEAD', 'refs/heads/main')

    yield repo

    repo.close()


@pytest.fixture
def git_repo_with_remote(git_repo, remote_repo):
    """Create a Git repository whose main branch is pushed to origin."""
    git_repo.create_remote('origin', remote_repo.git_dir)
    git_repo.git.push('-u', 'origin', 'main')

    yield git_repo


@pytest.fixture
def seeded_remote(git_repo_with_remote, remote_repo):
    """A bare origin carrying main and a 'develop' branch with its own commit."""
    repo = git_repo_with_remote
    repo.git.checkout('-b', 'develop')
    commit_file(repo, "develop.txt", "develop\n", "Develop work")
    repo.git.push('origin', 'develop')
    repo.git.checkout('main')
    repo.git.branch('-D', 'develop')

    yield remote_repo


@pytest.fixture
def bare_layout(temp_dir, seeded_remote):
    """Create the bare worktree layout: <root>/.bare plus a <root>/.git link file."""
    root = temp_dir / "project"
    root.mkdir()
    bare_dir = root / ".bare"
    git.Repo.clone_from(seeded_remote.git_dir, bare_dir, bare=True).close()
    (root / ".git").write_text("gitdir: ./.bare\n")

    bare = git.Repo(bare_dir)
    bare.git.config('remote.origin.fetch', '+refs/heads/*:refs/remotes/origin/*')
    bare.git.fetch('origin')
    bare.close()

    yield root
