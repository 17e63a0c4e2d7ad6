# GitLab API：拉取分组（含子分组）下的项目列表

from typing import Dict, List
from urllib.parse import quote

from ..domain.errors import ProviderError
from ..domain.models import RepositoryRef
from .http_client import get_json, parse_timestamp
from .settings import PROVIDER_GITLAB

PER_PAGE = 100


def gitlab_api_url(base_url: str) -> str:
    base_url = (base_url or "https://gitlab.com").rstrip("/")
    if base_url.endswith("/api/v4"):
        return base_url
    return f"{base_url}/api/v4"


def repo_from_gitlab(data: Dict) -> RepositoryRef:
    statistics = data.get("statistics") or {}
    return RepositoryRef(
        id=int(data.get("id") or 0),
        name=data.get("name") or "",
        full_path=data.get("path_with_namespace") or "",
        clone_url=data.get("http_url_to_repo") or "",
        ssh_url=data.get("ssh_url_to_repo") or "",
        default_branch=data.get("default_branch") or "",
        archived=bool(data.get("archived")),
        last_activity=parse_timestamp(data.get("last_activity_at")),
        size=int(statistics.get("repository_size") or 0),
    )


class GitLabProvider:
    name = PROVIDER_GITLAB

    def __init__(self, token: str = "", base_url: str = "", timeout: int = 10):
        self.token = token
        self.base_url = (base_url or "https://gitlab.com").rstrip("/")
        self.api_url = gitlab_api_url(self.base_url)
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"PRIVATE-TOKEN": self.token}
        return {}

    def _get(self, path: str):
        return get_json(f"{self.api_url}{path}", self._headers(), self.timeout)

    def current_user(self) -> str:
        data, _ = self._get("/user")
        username = data.get("username") if isinstance(data, dict) else None
        if not username:
            raise ProviderError("GitLab did not return a username for this token")
        return username

    def list_group_repositories(self, group: str) -> List[RepositoryRef]:
        """All projects under ``group`` including subgroups, following ``X-Next-Page``."""
        encoded = quote(group, safe="")
        repos: List[RepositoryRef] = []
        page = "1"
        while page:
            try:
                data, headers = self._get(
                    f"/groups/{encoded}/projects?include_subgroups=true"
                    f"&statistics=true&per_page={PER_PAGE}&page={page}"
                )
            except ProviderError as exc:
                raise ProviderError(
                    f"failed to list projects for group {group}: {exc}", status=exc.status
                ) from exc
            if not isinstance(data, list):
                raise ProviderError(f"GitLab API returned an unexpected response for {group}")
            repos.extend(repo_from_gitlab(item) for item in data)
            page = (headers.get("x-next-page") or "").strip()
        return repos
