import subprocess
import sys
import threading
import time

import pytest

from conftest import CancelAfterFirstCheck, requires_git
from group_mirror.core.git import run_git
from group_mirror.core.process_control import (
    clear_shutdown_request,
    request_shutdown,
    resolve_cancel_event,
    tracked_process,
)
from group_mirror.domain.errors import GitCommandError


def test_request_shutdown_kills_tracked_processes():
    sleeper = [sys.executable, "-c", "import time; time.sleep(30)"]
    with tracked_process(sleeper, stdout=subprocess.DEVNULL) as process:
        threading.Timer(0.2, request_shutdown).start()
        start = time.monotonic()
        process.wait(timeout=10)

    assert time.monotonic() - start < 10
    assert process.returncode != 0
    assert resolve_cancel_event(None).is_set()


def test_clear_shutdown_request_resets_default_event():
    request_shutdown()
    clear_shutdown_request()

    assert not resolve_cancel_event(None).is_set()


def test_caller_event_takes_precedence():
    event = threading.Event()
    request_shutdown()

    assert resolve_cancel_event(event) is event
    assert not event.is_set()


def test_run_git_refuses_to_start_when_canceled():
    event = threading.Event()
    event.set()

    with pytest.raises(GitCommandError) as excinfo:
        run_git(["--version"], cancel_event=event)

    assert excinfo.value.reason == "canceled"


@requires_git
def test_run_git_success_survives_cancel_set_after_exit():
    output = run_git(["--version"], capture_stdout=True, cancel_event=CancelAfterFirstCheck())

    assert output.startswith("git version")


@requires_git
def test_run_git_failure_after_cancel_is_reported_as_canceled(tmp_path):
    with pytest.raises(GitCommandError) as excinfo:
        run_git(["status"], repo_dir=str(tmp_path / "absent"), cancel_event=CancelAfterFirstCheck())

    assert excinfo.value.reason == "canceled"
