"""Error taxonomy for mirror runs.

Run-level failures derive from :class:`MirrorError` and halt a run before any
clone work starts. Per-repository failures are recorded on
:class:`~group_mirror.domain.models.OperationResult` instead of being raised.
"""

from typing import Optional, Sequence


class MirrorError(Exception):
    """A failure that aborts the whole mirror run."""


class GitNotInstalledError(MirrorError):
    """The ``git`` executable is not available on PATH."""


class ListingError(MirrorError):
    """A group's repositories could not be enumerated."""

    def __init__(self, group: str, cause: BaseException):
        super().__init__(f"failed to list projects for group {group}: {cause}")
        self.group = group


class PreflightError(MirrorError):
    """Neither transport could authenticate against the remote host."""

    def __init__(self, message: str, host: str = "", provider_name: str = ""):
        super().__init__(message)
        self.host = host
        self.provider_name = provider_name


class PathValidationError(ValueError):
    """A repository path is unsafe to create on the local filesystem."""


class GitCommandError(Exception):
    """A git invocation exited non-zero, timed out or was canceled."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: Optional[int],
        stderr: str = "",
        reason: str = "unknown",
    ):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        self.reason = reason
        super().__init__(self._describe())

    def _describe(self) -> str:
        action = self.command[1] if len(self.command) > 1 else "git"
        if "-C" in self.command:
            index = self.command.index("-C")
            if len(self.command) > index + 2:
                action = self.command[index + 2]
        detail = self.stderr.splitlines()[-1] if self.stderr else f"exit status {self.returncode}"
        return f"git {action} failed [{self.reason}]: {detail}"


class ProviderError(Exception):
    """A provider API request failed."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status
