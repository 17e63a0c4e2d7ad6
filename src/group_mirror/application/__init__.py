"""Application services orchestrating domain and core capabilities."""

from .execution import mirror_groups, run_mirror, summarize
from .report import print_results, report_progress

__all__ = [
    "mirror_groups",
    "run_mirror",
    "summarize",
    "print_results",
    "report_progress",
]
