# 路径校验模块：在创建任何目录之前拒绝不安全/过长的本地路径
#
# 主要功能：
#   - validate_path()：校验仓库相对路径（空路径、空字节、..、Windows 保留名、非法字符、相对长度）
#   - validate_full_path_length()：拼接到目标根目录后再校验绝对路径长度
#   - resolve_repo_dir()：两步校验后返回仓库目录
#
# 两步校验都必须通过；任一失败只影响当前仓库

import os
import posixpath
from typing import Optional

from ..domain.errors import PathValidationError
from .process_control import IS_WINDOWS

WINDOWS_RESERVED_NAMES = frozenset(
    ["CON", "PRN", "AUX", "NUL"]
    + [f"COM{i}" for i in range(1, 10)]
    + [f"LPT{i}" for i in range(1, 10)]
)
WINDOWS_INVALID_CHARS = ('<', '>', ':', '"', '|', '?', '*', '\x00')
UNIX_INVALID_CHARS = ('\x00',)

# Relative budget leaves room for a base directory of roughly 60 characters.
WINDOWS_MAX_RELATIVE_PATH = 199
UNIX_MAX_RELATIVE_PATH = 3000

WINDOWS_MAX_PATH = 259
UNIX_MAX_PATH = 4096


def _windows_mode(windows: Optional[bool]) -> bool:
    return IS_WINDOWS if windows is None else windows


def invalid_path_chars(windows: Optional[bool] = None):
    return WINDOWS_INVALID_CHARS if _windows_mode(windows) else UNIX_INVALID_CHARS


def max_relative_path_length(windows: Optional[bool] = None) -> int:
    return WINDOWS_MAX_RELATIVE_PATH if _windows_mode(windows) else UNIX_MAX_RELATIVE_PATH


def max_full_path_length(windows: Optional[bool] = None) -> int:
    return WINDOWS_MAX_PATH if _windows_mode(windows) else UNIX_MAX_PATH


def _components(path: str):
    return path.replace("\\", "/").split("/")


def _check_windows_components(path: str) -> None:
    for component in _components(path):
        base, _ = posixpath.splitext(component)
        if base.upper() in WINDOWS_RESERVED_NAMES:
            raise PathValidationError(f"path contains Windows reserved name: {component!r}")
        if component and component[-1] in (".", " "):
            raise PathValidationError(
                f"path component {component!r} ends with invalid character (dot or space)"
            )


def validate_path(full_path: str, windows: Optional[bool] = None) -> None:
    """Validate a hierarchical repository path before it becomes a directory.

    Checks run in order: empty path, null byte, ``..`` segment, Windows
    reserved names and trailing dot/space, invalid characters and finally the
    relative length budget.

    Raises:
        PathValidationError: describing the first violation found.
    """
    windows = _windows_mode(windows)

    if not full_path:
        raise PathValidationError("path cannot be empty")

    if "\x00" in full_path:
        raise PathValidationError("path contains invalid character: '\\x00'")

    if ".." in full_path:
        raise PathValidationError("path contains invalid sequence: ..")

    if windows:
        _check_windows_components(full_path)

    for char in invalid_path_chars(windows):
        if char in full_path:
            raise PathValidationError(f"path contains invalid character: {char!r}")

    limit = max_relative_path_length(windows)
    if len(full_path) > limit:
        raise PathValidationError(
            f"path exceeds maximum length of {limit} characters (got {len(full_path)})"
        )


def validate_full_path_length(absolute_path: str, windows: Optional[bool] = None) -> None:
    """Validate the joined absolute path against the platform ceiling."""
    windows = _windows_mode(windows)
    limit = max_full_path_length(windows)
    length = len(absolute_path)
    if length > limit:
        label = "Windows MAX_PATH limit" if windows else "system limit"
        raise PathValidationError(f"absolute path length {length} exceeds {label} of {limit}")


def resolve_repo_dir(base_dir: str, full_path: str, windows: Optional[bool] = None) -> str:
    """Return ``base_dir/full_path`` after both validation phases pass."""
    try:
        validate_path(full_path, windows)
    except PathValidationError as exc:
        raise PathValidationError(f"invalid path {full_path!r}: {exc}") from exc

    repo_dir = os.path.join(base_dir, *[part for part in _components(full_path) if part])
    try:
        validate_full_path_length(repo_dir, windows)
    except PathValidationError as exc:
        raise PathValidationError(f"full path too long {repo_dir!r}: {exc}") from exc
    return repo_dir
