"""Thin wrapper around the system ``git`` executable."""

import os
import shutil
import subprocess
import threading
from typing import Dict, List, Optional, Sequence

from ..domain.errors import GitCommandError
from .process_control import resolve_cancel_event, terminate_process, tracked_process

GIT = "git"


def git_executable() -> Optional[str]:
    return shutil.which(GIT)


def classify_git_error(stderr_text: str) -> str:
    """Map common git stderr output to concise reason tags."""
    text = (stderr_text or "").lower()
    if not text:
        return "unknown"
    if "not a git repository" in text:
        return "not_git_repo"
    if "couldn't find remote ref" in text or "no such remote" in text:
        return "remote_ref_missing"
    if "your local changes" in text or "would be overwritten" in text:
        return "local_changes_conflict"
    if "refusing to merge unrelated histories" in text:
        return "unrelated_histories"
    if (
        "not possible to fast-forward" in text
        or "cannot fast-forward" in text
        or "divergent branches" in text
    ):
        return "not_fast_forward"
    if "could not resolve host" in text or "failed to connect" in text or "timed out" in text:
        return "network_error"
    if (
        "authentication failed" in text
        or "permission denied" in text
        or "could not read username" in text
    ):
        return "auth_error"
    return "unknown"


def _git_env(extra: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
    if not extra:
        return None
    env = dict(os.environ)
    env.update(extra)
    return env


def run_git(
    args: Sequence[str],
    repo_dir: Optional[str] = None,
    verbose: bool = False,
    capture_stdout: bool = False,
    timeout: Optional[float] = None,
    env: Optional[Dict[str, str]] = None,
    cancel_event: Optional[threading.Event] = None,
) -> str:
    """Run one git command and return its stdout (empty unless captured).

    In verbose mode git's own output streams straight to the terminal;
    otherwise stdout is discarded and stderr is kept for the error message.

    Raises:
        GitCommandError: non-zero exit, timeout or cancellation.
    """
    command: List[str] = [GIT]
    if repo_dir is not None:
        command += ["-C", str(repo_dir)]
    command += list(args)

    cancel = resolve_cancel_event(cancel_event)
    if cancel.is_set():
        raise GitCommandError(command, None, "operation canceled", reason="canceled")

    if capture_stdout:
        stdout = subprocess.PIPE
    else:
        stdout = None if verbose else subprocess.DEVNULL
    stderr = None if verbose else subprocess.PIPE

    with tracked_process(
        command,
        stdout=stdout,
        stderr=stderr,
        stdin=subprocess.DEVNULL,
        env=_git_env(env),
        text=True,
    ) as process:
        try:
            out, err = process.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            terminate_process(process)
            process.communicate()
            raise GitCommandError(command, None, f"timed out after {timeout}s", reason="timeout")

    if process.returncode != 0:
        if cancel.is_set():
            raise GitCommandError(
                command, process.returncode, "operation canceled", reason="canceled"
            )
        raise GitCommandError(command, process.returncode, err or "", reason=classify_git_error(err or ""))

    return out or ""
