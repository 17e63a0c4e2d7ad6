"""Provider contract and construction.

The mirror core only needs ``list_group_repositories``; everything else a
hosting API offers stays in the concrete clients.
"""

from typing import List, NamedTuple, Protocol
from urllib.parse import urlparse

from ..domain.models import RepositoryRef
from .github_api import GitHubProvider
from .gitlab_api import GitLabProvider
from .settings import PROVIDER_GITHUB, PROVIDER_GITLAB, PROVIDERS


class RepositoryProvider(Protocol):
    name: str

    def list_group_repositories(self, group: str) -> List[RepositoryRef]:
        ...


class ParsedTarget(NamedTuple):
    base_url: str
    group: str
    provider: str


def detect_provider(url: str) -> str:
    """Guess the provider from a URL; self-hosted instances default to GitLab."""
    if not url:
        return PROVIDER_GITHUB
    lowered = url.lower()
    if "gitlab" in lowered:
        return PROVIDER_GITLAB
    if "github" in lowered:
        return PROVIDER_GITHUB
    return PROVIDER_GITLAB


def parse_target_url(raw_url: str) -> ParsedTarget:
    """``https://github.com/org[/...]`` -> ``(https://github.com, org, github)``."""
    parsed = urlparse(raw_url.rstrip("/"))
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"invalid URL: {raw_url}")
    path = parsed.path.strip("/")
    if not path:
        raise ValueError(
            "URL must include organization/group (e.g., https://github.com/my-org)"
        )
    base_url = f"{parsed.scheme}://{parsed.netloc}"
    return ParsedTarget(base_url, path.split("/", 1)[0], detect_provider(base_url))


def validate_provider_type(provider: str) -> None:
    if provider not in PROVIDERS:
        raise ValueError(f"invalid provider type: {provider!r} (must be 'gitlab' or 'github')")


def create_provider(provider: str, token: str = "", base_url: str = ""):
    validate_provider_type(provider)
    if provider == PROVIDER_GITLAB:
        return GitLabProvider(token, base_url)
    return GitHubProvider(token, base_url)
