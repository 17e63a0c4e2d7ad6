import os

import pytest

from group_mirror.core.path_guard import (
    resolve_repo_dir,
    validate_full_path_length,
    validate_path,
)
from group_mirror.domain.errors import PathValidationError


@pytest.mark.parametrize(
    "path",
    ["org/project", "group/sub/project", "org/CONFIG", "org/my.project", "a" * 199],
)
def test_validate_path_accepts_safe_windows_paths(path):
    validate_path(path, windows=True)


@pytest.mark.parametrize(
    "path, fragment",
    [
        ("", "empty"),
        ("org/pro\x00ject", "invalid character"),
        ("org/../etc", ".."),
        ("org/CON/project", "reserved"),
        ("org/PRN", "reserved"),
        ("AUX/project", "reserved"),
        ("org/NUL.txt", "reserved"),
        ("org/com1", "reserved"),
        ("org/LPT9.log", "reserved"),
        ("org/project.", "dot or space"),
        ("org/project ", "dot or space"),
        ("org/pro:ject", "invalid character"),
        ("org/pro*ject", "invalid character"),
        ("a" * 200, "maximum length of 199"),
    ],
)
def test_validate_path_rejects_windows_violations(path, fragment):
    with pytest.raises(PathValidationError) as excinfo:
        validate_path(path, windows=True)
    assert fragment in str(excinfo.value)


def test_validate_path_unix_allows_windows_only_characters():
    validate_path("org/CON/pro:ject", windows=False)
    validate_path("a" * 3000, windows=False)


def test_validate_path_unix_still_rejects_traversal_and_null():
    with pytest.raises(PathValidationError):
        validate_path("org/../../etc", windows=False)
    with pytest.raises(PathValidationError):
        validate_path("org/\x00", windows=False)
    with pytest.raises(PathValidationError):
        validate_path("a" * 3001, windows=False)


def test_validate_path_checks_in_order():
    # null byte is reported before the traversal sequence
    with pytest.raises(PathValidationError) as excinfo:
        validate_path("../\x00", windows=True)
    assert "\\x00" in str(excinfo.value)


def test_full_path_length_windows_limit():
    validate_full_path_length("C:\\" + "a" * 256, windows=True)
    with pytest.raises(PathValidationError):
        validate_full_path_length("C:\\" + "a" * 257, windows=True)


def test_full_path_length_unix_limit():
    validate_full_path_length("/" + "a" * 4095, windows=False)
    with pytest.raises(PathValidationError):
        validate_full_path_length("/" + "a" * 5000, windows=False)


def test_relative_path_passes_but_joined_path_is_too_long_on_windows():
    relative = "g/" + "p" * 197
    validate_path(relative, windows=True)

    long_root = "C:\\" + "r" * 80
    with pytest.raises(PathValidationError) as excinfo:
        resolve_repo_dir(long_root, relative, windows=True)
    assert "full path too long" in str(excinfo.value)


def test_resolve_repo_dir_keeps_hierarchy(tmp_path):
    repo_dir = resolve_repo_dir(str(tmp_path), "g/sub/proj", windows=False)
    assert repo_dir == os.path.join(str(tmp_path), "g", "sub", "proj")
    assert not os.path.exists(repo_dir)


def test_resolve_repo_dir_rejects_before_creating_anything(tmp_path):
    with pytest.raises(PathValidationError):
        resolve_repo_dir(str(tmp_path), "g/../escape", windows=False)
    assert list(tmp_path.iterdir()) == []
