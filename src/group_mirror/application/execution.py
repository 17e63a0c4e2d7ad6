"""Application services for mirror runs."""

import threading
import time
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.clone import format_size
from ..core.parallel import ProgressCallback, execute_parallel_mirror
from ..core.preflight import preflight
from ..core.process_control import clear_shutdown_request
from ..core.repo_filter import filter_repositories
from ..domain.errors import ListingError, MirrorError
from ..domain.models import OUTCOMES, MirrorOptions, OperationResult, RepositoryRef
from ..infra.logger import log_info, log_success, set_verbose
from ..infra.providers import RepositoryProvider


def list_repositories(provider: RepositoryProvider, groups: Sequence[str]) -> List[RepositoryRef]:
    """Fetch every group's repositories; any listing failure aborts the run."""
    all_repos: List[RepositoryRef] = []
    for group in groups:
        log_info(f"Fetching repos from {group}...")
        try:
            repos = provider.list_group_repositories(group)
        except Exception as exc:
            raise ListingError(group, exc) from exc
        total_size = sum(repo.size for repo in repos)
        log_info(f"Found {len(repos)} repos ({format_size(total_size)})")
        all_repos.extend(repos)
    return all_repos


def mirror_groups(
    provider: RepositoryProvider,
    groups: Sequence[str],
    options: MirrorOptions,
    cancel_event: Optional[threading.Event] = None,
    progress_cb: Optional[ProgressCallback] = None,
) -> List[OperationResult]:
    """List, filter, preflight and mirror; one result per listed repository.

    Raises:
        ListingError: a group could not be listed.
        PreflightError: no transport authenticates.
    """
    repos = list_repositories(provider, groups)
    filtered = filter_repositories(repos, options)

    if filtered.proceed and not options.skip_preflight:
        log_info("Checking git credentials...")
        outcome = preflight(filtered.proceed, use_ssh=options.use_ssh, cancel_event=cancel_event)
        if outcome.method != options.preferred_method:
            log_success(
                f"{options.preferred_method.upper()} unavailable, using {outcome.method.upper()}"
            )
            options = options.with_transport(outcome.method)
        else:
            log_success(f"Git credentials OK ({outcome.method.upper()})")

    results = list(filtered.skipped)
    results.extend(
        execute_parallel_mirror(
            filtered.proceed,
            options,
            cancel_event=cancel_event,
            progress_cb=progress_cb,
        )
    )
    return results


def summarize(results: Sequence[OperationResult]) -> Dict[str, int]:
    counts = {outcome: 0 for outcome in OUTCOMES}
    for result in results:
        counts[result.outcome] = counts.get(result.outcome, 0) + 1
    counts["total"] = len(results)
    return counts


def run_mirror(
    provider: RepositoryProvider,
    groups: Sequence[str],
    options: MirrorOptions,
    cancel_event: Optional[threading.Event] = None,
    progress_cb: Optional[ProgressCallback] = None,
) -> Tuple[bool, Dict[str, object], str]:
    """Run a mirror and return ``(success, summary, error)`` for the CLI.

    ``success`` is False only for run-level failures; per-repository
    failures are counted in the summary.
    """
    set_verbose(options.verbose)
    if cancel_event is None:
        clear_shutdown_request()
    start_time = time.time()
    try:
        results = mirror_groups(provider, groups, options, cancel_event, progress_cb)
    except MirrorError as exc:
        return False, {}, str(exc)

    summary: Dict[str, object] = dict(summarize(results))
    summary["duration"] = time.time() - start_time
    summary["results"] = results
    return True, summary, ""
