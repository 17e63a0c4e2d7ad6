# 路径处理模块：提供用户目录和配置目录
#
# 主要功能：
#   - get_home_dir()：用户主目录（取不到时回退到当前目录）
#   - get_config_dir()：跨平台的应用配置目录
#   - default_mirror_dir()：未指定 --dir 时的默认镜像目录

import os
import sys
from pathlib import Path
from typing import Sequence

APP_NAME = "group-mirror"


def get_home_dir() -> Path:
    home = os.path.expanduser("~")
    if not home or home == "~":
        return Path(".")
    return Path(home)


def get_config_dir() -> Path:
    """Per-user configuration directory (not created here)."""
    if os.name == "nt":
        base = os.environ.get("APPDATA") or os.environ.get("LOCALAPPDATA") or str(get_home_dir())
    elif sys.platform == "darwin":
        base = str(get_home_dir() / "Library" / "Application Support")
    else:
        base = os.environ.get("XDG_CONFIG_HOME") or str(get_home_dir() / ".config")
    return Path(base) / APP_NAME


def get_config_path() -> Path:
    return get_config_dir() / "config.json"


def default_mirror_dir(provider: str, groups: Sequence[str]) -> Path:
    """``~/<group>`` for a single group, ``~/<provider>-repos`` for several."""
    home = get_home_dir()
    if len(groups) == 1:
        return home / groups[0]
    return home / f"{provider}-repos"
