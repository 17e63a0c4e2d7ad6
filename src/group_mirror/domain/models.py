"""Domain data structures."""

import os
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional


CLONED = "cloned"
UPDATED = "updated"
SKIPPED_ARCHIVED = "skipped-archived"
SKIPPED_STALE = "skipped-stale"
FAILED = "failed"

OUTCOMES = (CLONED, UPDATED, SKIPPED_ARCHIVED, SKIPPED_STALE, FAILED)

METHOD_HTTPS = "https"
METHOD_SSH = "ssh"


@dataclass(frozen=True)
class RepositoryRef:
    """A remote repository as reported by a provider listing."""

    full_path: str
    clone_url: str = ""
    ssh_url: str = ""
    name: str = ""
    id: int = 0
    default_branch: str = ""
    archived: bool = False
    last_activity: Optional[datetime] = None
    size: int = 0

    def __post_init__(self):
        if not self.name and self.full_path:
            object.__setattr__(self, "name", self.full_path.rstrip("/").rsplit("/", 1)[-1])


def default_base_dir() -> str:
    home = os.path.expanduser("~")
    if not home or home == "~":
        home = "."
    return os.path.join(home, "git-repos")


@dataclass(frozen=True)
class MirrorOptions:
    """Options controlling a mirror run."""

    base_dir: str = field(default_factory=default_base_dir)
    parallel: int = 4
    skip_archived: bool = True
    max_age_months: int = 12
    verbose: bool = False
    skip_preflight: bool = False
    use_ssh: bool = False

    def __post_init__(self):
        if self.parallel is None or self.parallel < 1:
            object.__setattr__(self, "parallel", 1)
        if self.max_age_months is None or self.max_age_months < 0:
            object.__setattr__(self, "max_age_months", 0)

    def with_transport(self, method: str) -> "MirrorOptions":
        return replace(self, use_ssh=(method == METHOD_SSH))

    @property
    def preferred_method(self) -> str:
        return METHOD_SSH if self.use_ssh else METHOD_HTTPS


@dataclass(frozen=True)
class OperationResult:
    """Outcome of considering one repository."""

    repository: RepositoryRef
    outcome: str
    error: Optional[BaseException] = None
    duration: float = 0.0

    def error_text(self) -> str:
        return str(self.error) if self.error is not None else ""


@dataclass(frozen=True)
class PreflightResult:
    """Transport chosen by the credential preflight."""

    method: str
    probed: bool = True
