# 仓库克隆/更新模块：单个仓库的状态机
#
# 主要功能：
#   - mirror_repository()：本地不存在则克隆，已存在则智能更新
#   - clone_with_fallback()：首选协议失败时回退到另一协议
#   - update_repo()：fetch -> 默认分支 -> stash -> checkout -> pull（失败则 reset --hard）
#
# 特性：
#   - 按 full_path 保留分组层级（base_dir/group/sub/project）
#   - 克隆失败时只清理本次克隆创建的目录
#   - verbose 模式下直接输出 git 自身的 stdout/stderr

import os
import shutil
import threading
from pathlib import Path
from typing import List, Optional, Tuple

from ..domain.errors import GitCommandError, PathValidationError
from ..domain.models import (
    CLONED,
    FAILED,
    METHOD_HTTPS,
    METHOD_SSH,
    UPDATED,
    MirrorOptions,
    OperationResult,
    RepositoryRef,
)
from ..infra.logger import log_debug, log_info, log_warning
from .git import run_git
from .path_guard import resolve_repo_dir

REMOTE = "origin"
STASH_MESSAGE = "group-mirror auto-stash"


class UpdateError(Exception):
    """A fatal step of the smart update failed."""


class CloneError(Exception):
    """Every clone URL failed."""


def format_size(size: int) -> str:
    """Human-readable size using 1024 multiples."""
    kb = 1024
    mb = kb * 1024
    gb = mb * 1024
    if size >= gb:
        return f"{size / gb:.1f} GB"
    if size >= mb:
        return f"{size / mb:.1f} MB"
    if size >= kb:
        return f"{size / kb:.0f} KB"
    return f"{size} B"


def is_git_repo(repo_dir) -> bool:
    """A directory is an existing clone iff it has a ``.git`` directory."""
    return (Path(repo_dir) / ".git").is_dir()


def clone_urls(repo: RepositoryRef, use_ssh: bool) -> List[Tuple[str, str]]:
    """``[(method, url), ...]``: primary transport first, then the fallback."""
    if use_ssh:
        return [(METHOD_SSH, repo.ssh_url), (METHOD_HTTPS, repo.clone_url)]
    return [(METHOD_HTTPS, repo.clone_url), (METHOD_SSH, repo.ssh_url)]


def _cleanup_failed_directory(target_path: Path) -> None:
    if not target_path.exists():
        return
    try:
        shutil.rmtree(target_path)
    except OSError as exc:
        log_warning(f"could not remove partial clone {target_path}: {exc}")


def clone_repo(
    url: str,
    repo_dir: str,
    verbose: bool = False,
    cancel_event: Optional[threading.Event] = None,
) -> None:
    """Clone ``url`` into ``repo_dir``; a partial directory is removed on failure."""
    target = Path(repo_dir)
    target.parent.mkdir(parents=True, exist_ok=True)
    existed = target.exists()
    try:
        run_git(["clone", url, str(target)], verbose=verbose, cancel_event=cancel_event)
    except GitCommandError:
        if not existed:
            _cleanup_failed_directory(target)
        raise


def clone_with_fallback(
    repo: RepositoryRef,
    repo_dir: str,
    options: MirrorOptions,
    cancel_event: Optional[threading.Event] = None,
) -> str:
    """Clone with the preferred transport, retrying once with the other.

    Returns:
        The transport method that succeeded.

    Raises:
        CloneError: both transports failed (or the only one available did).
    """
    (primary_method, primary_url), (fallback_method, fallback_url) = clone_urls(
        repo, options.use_ssh
    )

    try:
        clone_repo(primary_url, repo_dir, options.verbose, cancel_event)
        return primary_method
    except GitCommandError as exc:
        primary_error = exc

    if not fallback_url or primary_error.reason == "canceled":
        raise CloneError(f"clone failed: {primary_error}") from primary_error

    log_warning(
        f"{repo.full_path}: {primary_method.upper()} failed, trying {fallback_method.upper()}..."
    )
    try:
        clone_repo(fallback_url, repo_dir, options.verbose, cancel_event)
    except GitCommandError as fallback_error:
        raise CloneError(
            f"clone failed ({primary_method.upper()}: {primary_error}, "
            f"{fallback_method.upper()}: {fallback_error})"
        ) from fallback_error
    return fallback_method


def default_branch(repo_dir: str, cancel_event: Optional[threading.Event] = None) -> str:
    """Remote default branch, from the symbolic ``origin/HEAD`` reference."""
    output = run_git(
        ["rev-parse", "--abbrev-ref", f"{REMOTE}/HEAD"],
        repo_dir=repo_dir,
        capture_stdout=True,
        cancel_event=cancel_event,
    )
    ref = output.strip()
    prefix = f"{REMOTE}/"
    if ref.startswith(prefix):
        ref = ref[len(prefix):]
    if not ref or ref == "HEAD":
        raise UpdateError(f"failed to get default branch: {REMOTE}/HEAD is not set")
    return ref


def has_local_changes(repo_dir: str, cancel_event: Optional[threading.Event] = None) -> bool:
    output = run_git(
        ["status", "--porcelain"],
        repo_dir=repo_dir,
        capture_stdout=True,
        cancel_event=cancel_event,
    )
    return bool(output.strip())


def stash_changes(repo_dir: str, cancel_event: Optional[threading.Event] = None) -> None:
    """Best-effort stash; never fatal.

    A failure here is indistinguishable from having nothing to stash, so it
    is only surfaced at debug level.
    """
    try:
        run_git(
            ["stash", "push", "-m", STASH_MESSAGE],
            repo_dir=repo_dir,
            cancel_event=cancel_event,
        )
    except GitCommandError as exc:
        log_debug(f"stash skipped in {repo_dir}: {exc}")


def checkout_branch(
    repo_dir: str,
    branch: str,
    cancel_event: Optional[threading.Event] = None,
) -> None:
    """Switch to ``branch``, creating a tracking branch from the remote if needed."""
    try:
        run_git(["checkout", branch], repo_dir=repo_dir, cancel_event=cancel_event)
        return
    except GitCommandError as exc:
        if exc.reason == "canceled":
            raise
        log_debug(f"local checkout of {branch} failed, creating from {REMOTE}: {exc}")

    try:
        run_git(
            ["checkout", "-b", branch, f"{REMOTE}/{branch}"],
            repo_dir=repo_dir,
            cancel_event=cancel_event,
        )
    except GitCommandError as exc:
        raise UpdateError(f"branch {branch} not found locally or on remote") from exc


def pull_or_reset(
    repo_dir: str,
    branch: str,
    verbose: bool = False,
    cancel_event: Optional[threading.Event] = None,
) -> None:
    """Pull the remote branch; on failure hard-reset to the remote tip."""
    try:
        run_git(
            ["pull", REMOTE, branch],
            repo_dir=repo_dir,
            verbose=verbose,
            cancel_event=cancel_event,
        )
        return
    except GitCommandError as exc:
        pull_error = exc

    if pull_error.reason == "canceled":
        raise UpdateError(f"git pull failed: {pull_error}") from pull_error

    log_debug(f"pull failed in {repo_dir} ({pull_error.reason}), resetting to {REMOTE}/{branch}")
    try:
        run_git(
            ["reset", "--hard", f"{REMOTE}/{branch}"],
            repo_dir=repo_dir,
            cancel_event=cancel_event,
        )
    except GitCommandError as reset_error:
        raise UpdateError(f"git pull and reset failed: {pull_error}") from reset_error


def update_repo(
    repo_dir: str,
    verbose: bool = False,
    cancel_event: Optional[threading.Event] = None,
) -> str:
    """Bring an existing clone in line with its remote; returns the branch.

    Raises:
        UpdateError: fetch, branch detection, checkout or pull-and-reset failed.
    """
    try:
        run_git(["fetch", "--all"], repo_dir=repo_dir, verbose=verbose, cancel_event=cancel_event)
    except GitCommandError as exc:
        raise UpdateError(f"git fetch failed: {exc}") from exc

    try:
        branch = default_branch(repo_dir, cancel_event)
    except GitCommandError as exc:
        raise UpdateError(f"failed to get default branch: {exc}") from exc

    try:
        dirty = has_local_changes(repo_dir, cancel_event)
    except GitCommandError as exc:
        raise UpdateError(f"git status failed: {exc}") from exc
    if dirty:
        stash_changes(repo_dir, cancel_event)

    try:
        checkout_branch(repo_dir, branch, cancel_event)
    except (GitCommandError, UpdateError) as exc:
        raise UpdateError(f"failed to checkout {branch}: {exc}") from exc

    pull_or_reset(repo_dir, branch, verbose, cancel_event)
    return branch


def mirror_repository(
    repo: RepositoryRef,
    options: MirrorOptions,
    cancel_event: Optional[threading.Event] = None,
) -> OperationResult:
    """Clone or update one repository under ``options.base_dir``.

    Never raises for per-repository problems; they are returned as a
    ``failed`` result with the cause attached.
    """
    try:
        repo_dir = resolve_repo_dir(options.base_dir, repo.full_path)
    except PathValidationError as exc:
        return OperationResult(repository=repo, outcome=FAILED, error=exc)

    size_str = f" ({format_size(repo.size)})" if repo.size > 0 else ""

    if is_git_repo(repo_dir):
        log_info(f"↻ {repo.full_path}{size_str}")
        try:
            update_repo(repo_dir, options.verbose, cancel_event)
        except UpdateError as exc:
            error = UpdateError(f"update failed: {exc}")
            error.__cause__ = exc
            return OperationResult(repository=repo, outcome=FAILED, error=error)
        return OperationResult(repository=repo, outcome=UPDATED)

    log_info(f"↓ {repo.full_path}{size_str}")
    try:
        method = clone_with_fallback(repo, repo_dir, options, cancel_event)
    except (CloneError, OSError) as exc:
        return OperationResult(repository=repo, outcome=FAILED, error=exc)
    log_debug(f"{repo.full_path} cloned over {method.upper()} into {os.path.abspath(repo_dir)}")
    return OperationResult(repository=repo, outcome=CLONED)
