# Provider Token 读取
#
# 查找顺序：环境变量 -> 系统钥匙串（keyring）-> 本地配置文件
# 钥匙串是否可用由 KeyringStatus 显式记录：第一次后端异常后标记为不可用，本次会话内不再尝试

import os
from typing import Dict, Optional, Tuple

import keyring
from keyring.errors import KeyringError

from .logger import log_debug
from .settings import PROVIDER_GITHUB, PROVIDER_GITLAB, Settings

SERVICE_NAME = "group-mirror"

TOKEN_ENV_VARS = {
    PROVIDER_GITHUB: ("GITHUB_TOKEN", "GROUP_MIRROR_GITHUB_TOKEN"),
    PROVIDER_GITLAB: ("GITLAB_TOKEN", "GROUP_MIRROR_GITLAB_TOKEN"),
}


class KeyringStatus:
    """Session-scoped record of whether the system keyring works.

    Degrades once on the first backend failure and stays degraded.
    """

    def __init__(self, available: bool = True):
        self._available = available
        self.last_error: Optional[BaseException] = None

    @property
    def available(self) -> bool:
        return self._available

    def degrade(self, error: BaseException) -> None:
        self._available = False
        self.last_error = error


def keyring_account(provider: str) -> str:
    return f"{provider}-token"


def token_from_env(provider: str, environ: Optional[Dict[str, str]] = None) -> str:
    environ = os.environ if environ is None else environ
    for env_var in TOKEN_ENV_VARS.get(provider, ()):
        value = environ.get(env_var, "").strip()
        if value:
            return value
    return ""


def token_from_keyring(provider: str, status: KeyringStatus) -> str:
    if not status.available:
        return ""
    try:
        token = keyring.get_password(SERVICE_NAME, keyring_account(provider))
    except KeyringError as exc:
        log_debug(f"keyring unavailable, falling back to config file: {exc}")
        status.degrade(exc)
        return ""
    return token or ""


def load_token(
    provider: str,
    settings: Settings,
    status: KeyringStatus,
    environ: Optional[Dict[str, str]] = None,
) -> Tuple[str, str]:
    """Return ``(token, source)``; source is env, keyring, file or none."""
    token = token_from_env(provider, environ)
    if token:
        return token, "env"

    token = token_from_keyring(provider, status)
    if token:
        return token, "keyring"

    token = settings.file_token(provider)
    if token:
        return token, "file"
    return "", "none"
