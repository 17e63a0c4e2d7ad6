"""Tracked git subprocesses and the run-wide cancellation signal.

Every git child started by a mirror run is registered here so that Ctrl-C can
kill in-flight clones and pulls instead of waiting for them to finish.
"""

import platform
import subprocess
import threading
from contextlib import contextmanager
from typing import Iterator, Optional, Set


IS_WINDOWS = platform.system() == "Windows"

_running: Set[subprocess.Popen] = set()
_running_lock = threading.Lock()
_cancel_all = threading.Event()


@contextmanager
def tracked_process(command, **popen_kwargs) -> Iterator[subprocess.Popen]:
    """Start ``command`` and keep it registered until the block exits."""
    process = subprocess.Popen(command, **popen_kwargs)
    with _running_lock:
        _running.add(process)
    try:
        yield process
    finally:
        with _running_lock:
            _running.discard(process)


def terminate_process(process: subprocess.Popen, timeout: float = 2.0) -> None:
    """Stop ``process`` (its whole tree on Windows), killing it if it lingers."""
    if process.poll() is not None:
        return

    try:
        if IS_WINDOWS:
            # git spawns helpers (ssh, git-remote-https) that terminate() would orphan
            subprocess.run(
                ["taskkill", "/F", "/T", "/PID", str(process.pid)],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        else:
            process.terminate()
    except OSError:
        return

    try:
        process.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        try:
            process.kill()
        except OSError:
            pass


def request_shutdown() -> None:
    """Cancel the run: pending repositories are skipped, running git is killed."""
    _cancel_all.set()
    with _running_lock:
        running = list(_running)
    for process in running:
        terminate_process(process)


def clear_shutdown_request() -> None:
    _cancel_all.clear()


def resolve_cancel_event(cancel_event: Optional[threading.Event]) -> threading.Event:
    """The caller's event, or the process-wide one set by ``request_shutdown``."""
    return cancel_event if cancel_event is not None else _cancel_all
