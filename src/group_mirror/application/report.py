"""Human-readable rendering of mirror results."""

from typing import Sequence

from ..domain.models import (
    CLONED,
    FAILED,
    SKIPPED_ARCHIVED,
    SKIPPED_STALE,
    UPDATED,
    OperationResult,
)
from ..infra.logger import (
    COLOR_ERROR,
    COLOR_SUCCESS,
    COLOR_WARNING,
    log_error,
    log_success,
    paint,
    write_line,
)
from .execution import summarize

_SUMMARY_LINES = (
    (CLONED, "✓", COLOR_SUCCESS, "Cloned:  {}"),
    (UPDATED, "✓", COLOR_SUCCESS, "Updated: {}"),
    (SKIPPED_ARCHIVED, "○", COLOR_WARNING, "Skipped: {} (archived)"),
    (SKIPPED_STALE, "○", COLOR_WARNING, "Stale:   {}"),
    (FAILED, "✗", COLOR_ERROR, "Failed:  {}"),
)


def format_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m{secs}s"


def describe_result(result: OperationResult) -> str:
    repo = result.repository
    if result.outcome in (CLONED, UPDATED):
        return f"  {paint('✓', COLOR_SUCCESS)} {repo.full_path} {format_duration(result.duration)}"
    if result.outcome == SKIPPED_ARCHIVED:
        return f"  {paint('○', COLOR_WARNING)} {repo.full_path} (archived)"
    if result.outcome == SKIPPED_STALE:
        last = repo.last_activity.strftime("%Y-%m-%d") if repo.last_activity else "unknown"
        return f"  {paint('○', COLOR_WARNING)} {repo.full_path} (stale: {last})"
    return f"  {paint('✗', COLOR_ERROR)} {repo.full_path} {result.error_text()}"


def print_results(results: Sequence[OperationResult]) -> None:
    write_line()
    for result in results:
        write_line(describe_result(result))

    counts = summarize(results)
    write_line()
    write_line("Summary")
    for outcome, symbol, color, template in _SUMMARY_LINES:
        if counts.get(outcome):
            write_line(f"  {paint(symbol, color)} {template.format(counts[outcome])}")
    write_line(f"  Total:   {counts['total']}")


def report_progress(done: int, total: int, result: OperationResult) -> None:
    """Per-repository completion line for the executor's ``progress_cb``."""
    line = f"[{done}/{total}] {result.repository.full_path} {result.outcome}"
    if result.outcome == FAILED:
        log_error(f"{line}: {result.error_text()}")
    else:
        log_success(f"{line} ({format_duration(result.duration)})")
