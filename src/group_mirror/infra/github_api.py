# GitHub API：拉取组织/用户的仓库列表

from typing import Dict, List
from urllib.parse import quote

from ..domain.errors import ProviderError
from ..domain.models import RepositoryRef
from .http_client import get_json, parse_timestamp
from .settings import PROVIDER_GITHUB

PER_PAGE = 100


def github_api_url(base_url: str) -> str:
    """``https://api.github.com`` for github.com, ``<base>/api/v3`` for Enterprise."""
    base_url = (base_url or "").rstrip("/")
    if not base_url or "github.com" in base_url:
        return "https://api.github.com"
    return f"{base_url}/api/v3"


def repo_from_github(data: Dict) -> RepositoryRef:
    return RepositoryRef(
        id=int(data.get("id") or 0),
        name=data.get("name") or "",
        full_path=data.get("full_name") or "",
        clone_url=data.get("clone_url") or "",
        ssh_url=data.get("ssh_url") or "",
        default_branch=data.get("default_branch") or "",
        archived=bool(data.get("archived")),
        last_activity=parse_timestamp(data.get("pushed_at")),
        # GitHub reports size in KB
        size=int(data.get("size") or 0) * 1024,
    )


class GitHubProvider:
    name = PROVIDER_GITHUB

    def __init__(self, token: str = "", base_url: str = "", timeout: int = 10):
        self.token = token
        self.base_url = (base_url or "https://github.com").rstrip("/")
        self.api_url = github_api_url(self.base_url)
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get(self, path: str):
        return get_json(f"{self.api_url}{path}", self._headers(), self.timeout)

    def _list_pages(self, path: str, extra_query: str = "") -> List[RepositoryRef]:
        repos: List[RepositoryRef] = []
        page = 1
        while True:
            data, _ = self._get(f"{path}?per_page={PER_PAGE}&page={page}{extra_query}")
            if not isinstance(data, list):
                message = data.get("message") if isinstance(data, dict) else "unexpected response"
                raise ProviderError(f"GitHub API returned an error: {message}")
            repos.extend(repo_from_github(item) for item in data)
            if len(data) < PER_PAGE:
                break
            page += 1
        return repos

    def current_user(self) -> str:
        data, _ = self._get("/user")
        login = data.get("login") if isinstance(data, dict) else None
        if not login:
            raise ProviderError("GitHub did not return a login for this token")
        return login

    def list_group_repositories(self, group: str) -> List[RepositoryRef]:
        """Repositories of an organization, or of a user when no such org exists."""
        owner = quote(group, safe="")
        try:
            return self._list_pages(f"/orgs/{owner}/repos")
        except ProviderError as org_error:
            try:
                return self._list_pages(f"/users/{owner}/repos", "&type=owner")
            except ProviderError as user_error:
                raise ProviderError(
                    f"failed to list repositories for {group} "
                    f"(org error: {org_error}, user error: {user_error})",
                    status=user_error.status,
                ) from user_error

