"""Configuration file and environment loading."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .logger import log_warning
from .paths import get_config_path

PROVIDER_GITHUB = "github"
PROVIDER_GITLAB = "gitlab"
PROVIDERS = (PROVIDER_GITHUB, PROVIDER_GITLAB)

DEFAULT_BASE_URLS = {
    PROVIDER_GITHUB: "https://github.com",
    PROVIDER_GITLAB: "https://gitlab.com",
}

URL_ENV_VARS = {
    PROVIDER_GITHUB: ("GITHUB_URL", "GROUP_MIRROR_GITHUB_URL"),
    PROVIDER_GITLAB: ("GITLAB_URL", "GROUP_MIRROR_GITLAB_URL"),
}


@dataclass
class MirrorDefaults:
    # empty: ~/<group> or ~/<provider>-repos, chosen per run
    base_dir: str = ""
    parallel: int = 4
    skip_archived: bool = True
    max_age_months: int = 12


@dataclass
class Settings:
    default_provider: str = PROVIDER_GITLAB
    base_urls: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_BASE_URLS))
    tokens: Dict[str, str] = field(default_factory=dict)
    mirror: MirrorDefaults = field(default_factory=MirrorDefaults)
    config_path: Optional[Path] = None

    def base_url(self, provider: str) -> str:
        return self.base_urls.get(provider, "")

    def file_token(self, provider: str) -> str:
        return self.tokens.get(provider, "")


def _read_config(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        log_warning(f"ignoring unreadable config file {path}: {exc}")
        return {}
    return data if isinstance(data, dict) else {}


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def load_settings(path: Optional[Path] = None, environ: Optional[Dict[str, str]] = None) -> Settings:
    """Load settings from ``config.json`` and the environment.

    A missing or malformed file yields defaults.
    """
    path = path or get_config_path()
    environ = os.environ if environ is None else environ
    data = _read_config(path)

    settings = Settings(config_path=path)
    provider = data.get("default_provider")
    if provider in PROVIDERS:
        settings.default_provider = provider

    for name in PROVIDERS:
        section = data.get(name) or {}
        if not isinstance(section, dict):
            continue
        if section.get("base_url"):
            settings.base_urls[name] = str(section["base_url"]).rstrip("/")
        if section.get("token"):
            settings.tokens[name] = str(section["token"])

    for name, env_vars in URL_ENV_VARS.items():
        for env_var in env_vars:
            if environ.get(env_var):
                settings.base_urls[name] = environ[env_var].rstrip("/")
                break

    mirror = data.get("mirror") or {}
    if isinstance(mirror, dict):
        defaults = settings.mirror
        if mirror.get("base_dir"):
            defaults.base_dir = os.path.expanduser(str(mirror["base_dir"]))
        defaults.parallel = max(1, _as_int(mirror.get("parallel"), defaults.parallel))
        if "skip_archived" in mirror:
            defaults.skip_archived = bool(mirror["skip_archived"])
        defaults.max_age_months = max(0, _as_int(mirror.get("max_age_months"), defaults.max_age_months))

    return settings


def validate_url_security(base_url: str, token: str) -> None:
    """Refuse to send a token over plain HTTP."""
    if token and base_url.lower().startswith("http://"):
        raise ValueError(
            "refusing to use HTTP with authentication token "
            "(would expose token in plaintext). Use HTTPS instead"
        )
