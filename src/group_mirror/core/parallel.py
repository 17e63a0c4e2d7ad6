"""Bounded-concurrency fan-out of clone/update operations."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Sequence

from ..domain.models import FAILED, MirrorOptions, OperationResult, RepositoryRef
from ..infra.logger import log_error, log_info, log_warning
from . import clone
from .process_control import resolve_cancel_event

ProgressCallback = Callable[[int, int, OperationResult], None]


class RunCanceled(Exception):
    """The run's cancellation signal fired before this unit started."""


def _run_unit(
    repo: RepositoryRef,
    options: MirrorOptions,
    gate: threading.BoundedSemaphore,
    cancel_event: threading.Event,
) -> OperationResult:
    with gate:
        if cancel_event.is_set():
            return OperationResult(
                repository=repo,
                outcome=FAILED,
                error=RunCanceled("operation canceled before start"),
            )
        start = time.monotonic()
        try:
            result = clone.mirror_repository(repo, options, cancel_event)
        except Exception as exc:
            result = OperationResult(repository=repo, outcome=FAILED, error=exc)
        duration = time.monotonic() - start
    return OperationResult(
        repository=result.repository,
        outcome=result.outcome,
        error=result.error,
        duration=duration,
    )


def execute_parallel_mirror(
    repos: Sequence[RepositoryRef],
    options: MirrorOptions,
    cancel_event: Optional[threading.Event] = None,
    progress_cb: Optional[ProgressCallback] = None,
) -> List[OperationResult]:
    """Run the clone/update operator for every repository.

    At most ``options.parallel`` operations are in flight at once. Results
    come back in completion order, exactly one per submitted repository;
    a failing unit never aborts its siblings.
    """
    total = len(repos)
    if total == 0:
        log_warning("no repositories to mirror")
        return []

    cancel = resolve_cancel_event(cancel_event)
    parallel = max(1, options.parallel)
    gate = threading.BoundedSemaphore(parallel)

    log_info(f"start mirroring, total: {total}, parallel: {parallel}")

    results: List[OperationResult] = []
    with ThreadPoolExecutor(max_workers=parallel) as executor:
        future_to_repo = {
            executor.submit(_run_unit, repo, options, gate, cancel): repo
            for repo in repos
        }

        for future in as_completed(future_to_repo):
            repo = future_to_repo[future]
            try:
                result = future.result()
            except Exception as exc:
                log_error(f"mirror exception: {repo.full_path} - {exc}")
                result = OperationResult(repository=repo, outcome=FAILED, error=exc)
            results.append(result)

            if progress_cb:
                progress_cb(len(results), total, result)

    failed = sum(1 for result in results if result.outcome == FAILED)
    log_info(f"mirroring finished, ok: {total - failed}, failed: {failed}")
    return results
