"""Domain models and error types."""

from .errors import (
    GitCommandError,
    GitNotInstalledError,
    ListingError,
    MirrorError,
    PathValidationError,
    PreflightError,
    ProviderError,
)
from .models import (
    CLONED,
    FAILED,
    METHOD_HTTPS,
    METHOD_SSH,
    OUTCOMES,
    SKIPPED_ARCHIVED,
    SKIPPED_STALE,
    UPDATED,
    MirrorOptions,
    OperationResult,
    PreflightResult,
    RepositoryRef,
)

__all__ = [
    "RepositoryRef",
    "MirrorOptions",
    "OperationResult",
    "PreflightResult",
    "CLONED",
    "UPDATED",
    "SKIPPED_ARCHIVED",
    "SKIPPED_STALE",
    "FAILED",
    "OUTCOMES",
    "METHOD_HTTPS",
    "METHOD_SSH",
    "MirrorError",
    "GitNotInstalledError",
    "ListingError",
    "PreflightError",
    "PathValidationError",
    "GitCommandError",
    "ProviderError",
]
