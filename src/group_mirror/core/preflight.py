"""Git availability check and credential preflight."""

import platform
import threading
from typing import List, Optional, Sequence, Tuple
from urllib.parse import urlparse

from ..domain.errors import GitCommandError, GitNotInstalledError, PreflightError
from ..domain.models import METHOD_HTTPS, METHOD_SSH, PreflightResult, RepositoryRef
from ..infra.logger import log_debug, log_info
from .git import git_executable, run_git

PROBE_TIMEOUT = 10

_INSTALL_INSTRUCTIONS = {
    "Windows": """  Install git using one of:

    - winget (recommended):
      winget install Git.Git

    - Chocolatey:
      choco install git

    - Manual download:
      https://git-scm.com/download/win

  After installing, restart your terminal.""",
    "Darwin": """  Install git using one of:

    - Xcode Command Line Tools (recommended):
      xcode-select --install

    - Homebrew:
      brew install git

    - Manual download:
      https://git-scm.com/download/mac""",
    "Linux": """  Install git using your package manager:

    - Debian/Ubuntu:
      sudo apt install git

    - Fedora:
      sudo dnf install git

    - Arch:
      sudo pacman -S git

    - Alpine:
      sudo apk add git""",
}
_DEFAULT_INSTRUCTIONS = """  Install git from:
      https://git-scm.com/downloads"""


def git_not_found_message(system: Optional[str] = None) -> str:
    system = system or platform.system()
    instructions = _INSTALL_INSTRUCTIONS.get(system, _DEFAULT_INSTRUCTIONS)
    return f"Git is not installed\n\n{instructions}\n"


def check_git_installed() -> None:
    """Raise GitNotInstalledError with install instructions if git is missing."""
    if git_executable() is None:
        raise GitNotInstalledError(git_not_found_message())


def extract_host(git_url: str) -> str:
    """Host part of an HTTPS or scp-style SSH git URL."""
    if git_url.startswith("git@"):
        return git_url.split(":", 1)[0][len("git@"):]

    parsed = urlparse(git_url)
    if parsed.netloc:
        # keep the port, drop any user:password@ prefix
        return parsed.netloc.rsplit("@", 1)[-1]
    return "the remote server"


def detect_provider_name(host: str) -> str:
    if "github" in host:
        return "GitHub"
    if "gitlab" in host:
        return "GitLab"
    if "bitbucket" in host:
        return "Bitbucket"
    return host


def candidate_methods(repo: RepositoryRef, use_ssh: bool) -> List[Tuple[str, str]]:
    """Ordered ``[(method, url), ...]`` with the preferred transport first."""
    if use_ssh:
        ordered = [(METHOD_SSH, repo.ssh_url), (METHOD_HTTPS, repo.clone_url)]
    else:
        ordered = [(METHOD_HTTPS, repo.clone_url), (METHOD_SSH, repo.ssh_url)]
    return [(method, url) for method, url in ordered if url]


def probe_credentials(
    url: str,
    timeout: float = PROBE_TIMEOUT,
    cancel_event: Optional[threading.Event] = None,
) -> bool:
    """Whether ``git ls-remote`` can reach ``url`` without prompting."""
    try:
        run_git(
            ["ls-remote", "--quiet", url],
            timeout=timeout,
            env={"GIT_TERMINAL_PROMPT": "0"},
            cancel_event=cancel_event,
        )
    except GitCommandError as exc:
        log_debug(f"credential probe failed for {url}: {exc}")
        return False
    return True


def remediation_message(host: str, provider_name: str, clone_url: str) -> str:
    token_var = f"{provider_name.upper()}_TOKEN"
    return f"""Git credentials not configured

  Neither HTTPS nor SSH authentication is working for {host}.

  To fix, try one of:

    - Configure SSH (recommended):
      1. Generate key:  ssh-keygen -t ed25519
      2. Add to agent: ssh-add ~/.ssh/id_ed25519
      3. Copy public key to {provider_name}

    - Configure HTTPS with token:
      git config --global url."https://oauth2:${token_var}@{host}/".insteadOf "https://{host}/"

    - Configure credential helper:
      git config --global credential.helper store
      git clone {clone_url}  # Enter credentials once
"""


def preflight(
    repos: Sequence[RepositoryRef],
    use_ssh: bool = False,
    timeout: float = PROBE_TIMEOUT,
    cancel_event: Optional[threading.Event] = None,
) -> PreflightResult:
    """Find a transport that authenticates, probing the first repository only.

    Raises:
        PreflightError: neither transport works; carries remediation text.
    """
    preferred = METHOD_SSH if use_ssh else METHOD_HTTPS
    if not repos:
        return PreflightResult(method=preferred, probed=False)

    sample = repos[0]
    for method, url in candidate_methods(sample, use_ssh):
        log_info(f"Testing {method.upper()} credentials...")
        if probe_credentials(url, timeout=timeout, cancel_event=cancel_event):
            return PreflightResult(method=method)

    host = extract_host(sample.clone_url or sample.ssh_url)
    provider_name = detect_provider_name(host)
    raise PreflightError(
        remediation_message(host, provider_name, sample.clone_url or sample.ssh_url),
        host=host,
        provider_name=provider_name,
    )
