from pathlib import Path
import shutil
import subprocess
import sys
import threading

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def _clear_shutdown_flag():
    from group_mirror.core.process_control import clear_shutdown_request

    clear_shutdown_request()
    yield
    clear_shutdown_request()


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


class CancelAfterFirstCheck(threading.Event):
    """Unset when a git command starts, set by the time it has exited."""

    def __init__(self):
        super().__init__()
        self.checks = 0

    def is_set(self):
        self.checks += 1
        return self.checks > 1


def git(*args, cwd=None):
    """Run git for test setup and return stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        check=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )
    return result.stdout.strip()


class RemoteRepo:
    """A bare repository plus a working copy used to push upstream changes."""

    def __init__(self, root: Path, name: str):
        self.bare = root / f"{name}.git"
        self.work = root / f"{name}-work"
        git("init", "--bare", str(self.bare))
        git("--git-dir", str(self.bare), "symbolic-ref", "HEAD", "refs/heads/main")
        git("init", str(self.work))
        git("symbolic-ref", "HEAD", "refs/heads/main", cwd=self.work)
        git("remote", "add", "origin", str(self.bare), cwd=self.work)
        self.commit("README.md", f"# {name}\n", "initial commit")
        git("push", "origin", "main", cwd=self.work)

    @property
    def url(self) -> str:
        return str(self.bare)

    def commit(self, filename: str, content: str, message: str) -> str:
        (self.work / filename).write_text(content, encoding="utf-8")
        git("add", filename, cwd=self.work)
        git("commit", "-m", message, cwd=self.work)
        return git("rev-parse", "HEAD", cwd=self.work)

    def push(self, force: bool = False) -> None:
        args = ["push", "origin", "main"]
        if force:
            args.insert(1, "--force")
        git(*args, cwd=self.work)

    def head(self) -> str:
        return git("--git-dir", str(self.bare), "rev-parse", "refs/heads/main")


@pytest.fixture
def git_env(tmp_path, monkeypatch):
    """Isolate git from the user's global configuration."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Mirror Test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "mirror@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Mirror Test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "mirror@example.com")
    return home


@pytest.fixture
def make_remote(tmp_path, git_env):
    remotes_dir = tmp_path / "remotes"
    remotes_dir.mkdir()

    def _make(name: str = "project") -> RemoteRepo:
        return RemoteRepo(remotes_dir, name)

    return _make
