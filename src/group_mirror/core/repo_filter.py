"""Archival and staleness policy over a fetched repository list."""

import calendar
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from ..domain.models import (
    SKIPPED_ARCHIVED,
    SKIPPED_STALE,
    MirrorOptions,
    OperationResult,
    RepositoryRef,
)


@dataclass
class FilterResult:
    proceed: List[RepositoryRef] = field(default_factory=list)
    archived: List[RepositoryRef] = field(default_factory=list)
    stale: List[RepositoryRef] = field(default_factory=list)
    skipped: List[OperationResult] = field(default_factory=list)


def subtract_months(moment: datetime, months: int) -> datetime:
    """Calendar arithmetic: the same day ``months`` earlier, clamped to month end.

    Cutoffs before year 1 collapse to ``datetime.min``, so nothing is stale.
    """
    month_index = moment.year * 12 + (moment.month - 1) - months
    if month_index < datetime.min.year * 12:
        return datetime.min.replace(tzinfo=moment.tzinfo)
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def stale_cutoff(max_age_months: int, now: Optional[datetime] = None) -> Optional[datetime]:
    if max_age_months <= 0:
        return None
    now = now or datetime.now(timezone.utc)
    return subtract_months(now, max_age_months)


def _as_aware(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def is_stale(repo: RepositoryRef, cutoff: Optional[datetime]) -> bool:
    if cutoff is None or repo.last_activity is None:
        return False
    return _as_aware(repo.last_activity) < _as_aware(cutoff)


def filter_repositories(
    repos: Iterable[RepositoryRef],
    options: MirrorOptions,
    now: Optional[datetime] = None,
) -> FilterResult:
    """Partition repositories into proceed / archived / stale.

    Archived is checked first, so a repository that is both archived and
    stale is reported only as archived.
    """
    cutoff = stale_cutoff(options.max_age_months, now)
    result = FilterResult()

    for repo in repos:
        if options.skip_archived and repo.archived:
            result.archived.append(repo)
            result.skipped.append(OperationResult(repository=repo, outcome=SKIPPED_ARCHIVED))
            continue
        if is_stale(repo, cutoff):
            result.stale.append(repo)
            result.skipped.append(OperationResult(repository=repo, outcome=SKIPPED_STALE))
            continue
        result.proceed.append(repo)

    return result
