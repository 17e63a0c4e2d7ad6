from pathlib import Path

from conftest import CancelAfterFirstCheck, git, requires_git
from group_mirror.core.clone import STASH_MESSAGE, format_size, mirror_repository
from group_mirror.domain.errors import PathValidationError
from group_mirror.domain.models import (
    CLONED,
    FAILED,
    UPDATED,
    MirrorOptions,
    RepositoryRef,
)


def _options(tmp_path, **kwargs):
    return MirrorOptions(base_dir=str(tmp_path / "mirror"), **kwargs)


def test_format_size():
    assert format_size(512) == "512 B"
    assert format_size(2048) == "2 KB"
    assert format_size(5 * 1024 * 1024) == "5.0 MB"
    assert format_size(3 * 1024 ** 3) == "3.0 GB"


def test_invalid_path_fails_without_touching_disk(tmp_path):
    repo = RepositoryRef(full_path="g/../escape", clone_url="https://example.com/x.git")

    result = mirror_repository(repo, _options(tmp_path))

    assert result.outcome == FAILED
    assert isinstance(result.error, PathValidationError)
    assert not (tmp_path / "mirror").exists()


@requires_git
def test_nested_path_keeps_group_hierarchy(make_remote, tmp_path):
    remote = make_remote("proj")
    repo = RepositoryRef(full_path="g/sub/proj", clone_url=remote.url)

    result = mirror_repository(repo, _options(tmp_path))

    assert result.outcome == CLONED
    assert result.error is None
    assert (tmp_path / "mirror" / "g" / "sub" / "proj" / ".git").is_dir()
    assert not (tmp_path / "mirror" / "proj").exists()


@requires_git
def test_clone_falls_back_to_second_transport(make_remote, tmp_path, capsys):
    remote = make_remote("fallback")
    repo = RepositoryRef(
        full_path="g/fallback",
        clone_url=str(tmp_path / "does-not-exist.git"),
        ssh_url=remote.url,
    )

    result = mirror_repository(repo, _options(tmp_path))

    assert result.outcome == CLONED
    assert result.error is None
    assert (tmp_path / "mirror" / "g" / "fallback" / "README.md").is_file()
    assert capsys.readouterr().out.count("g/fallback: HTTPS failed, trying SSH...") == 1


@requires_git
def test_clone_failure_on_both_transports_cleans_up(git_env, tmp_path):
    repo = RepositoryRef(
        full_path="g/missing",
        clone_url=str(tmp_path / "nope-https.git"),
        ssh_url=str(tmp_path / "nope-ssh.git"),
    )

    result = mirror_repository(repo, _options(tmp_path))

    assert result.outcome == FAILED
    assert "clone failed" in str(result.error)
    assert not (tmp_path / "mirror" / "g" / "missing").exists()


@requires_git
def test_second_run_updates_existing_clone(make_remote, tmp_path):
    remote = make_remote("twice")
    repo = RepositoryRef(full_path="g/twice", clone_url=remote.url)
    options = _options(tmp_path)

    assert mirror_repository(repo, options).outcome == CLONED
    remote.commit("CHANGES.md", "more\n", "second commit")
    remote.push()

    result = mirror_repository(repo, options)

    assert result.outcome == UPDATED
    clone_dir = tmp_path / "mirror" / "g" / "twice"
    assert git("rev-parse", "HEAD", cwd=clone_dir) == remote.head()
    assert sorted(p.name for p in (tmp_path / "mirror").iterdir()) == ["g"]
    assert sorted(p.name for p in (tmp_path / "mirror" / "g").iterdir()) == ["twice"]


@requires_git
def test_local_changes_are_stashed_before_pull(make_remote, tmp_path):
    remote = make_remote("dirty")
    repo = RepositoryRef(full_path="g/dirty", clone_url=remote.url)
    options = _options(tmp_path)
    mirror_repository(repo, options)

    clone_dir = tmp_path / "mirror" / "g" / "dirty"
    (clone_dir / "README.md").write_text("local edit\n", encoding="utf-8")
    remote.commit("OTHER.md", "upstream\n", "upstream change")
    remote.push()

    result = mirror_repository(repo, options)

    assert result.outcome == UPDATED
    assert STASH_MESSAGE in git("stash", "list", cwd=clone_dir)
    assert git("rev-parse", "HEAD", cwd=clone_dir) == remote.head()
    assert git("status", "--porcelain", cwd=clone_dir) == ""


@requires_git
def test_diverged_history_is_reset_to_remote(make_remote, tmp_path):
    remote = make_remote("forced")
    remote.commit("data.txt", "original\n", "add data")
    remote.push()
    repo = RepositoryRef(full_path="g/forced", clone_url=remote.url)
    options = _options(tmp_path)
    mirror_repository(repo, options)

    git("reset", "--hard", "HEAD~1", cwd=remote.work)
    remote.commit("data.txt", "rewritten\n", "rewrite data")
    remote.push(force=True)

    result = mirror_repository(repo, options)

    clone_dir = tmp_path / "mirror" / "g" / "forced"
    assert result.outcome == UPDATED
    assert git("rev-parse", "HEAD", cwd=clone_dir) == remote.head()
    assert (clone_dir / "data.txt").read_text(encoding="utf-8") == "rewritten\n"


@requires_git
def test_existing_non_git_directory_is_left_alone(make_remote, tmp_path):
    remote = make_remote("occupied")
    target = tmp_path / "mirror" / "g" / "occupied"
    target.mkdir(parents=True)
    (target / "notes.txt").write_text("keep me\n", encoding="utf-8")
    repo = RepositoryRef(full_path="g/occupied", clone_url=remote.url)

    result = mirror_repository(repo, _options(tmp_path))

    assert result.outcome == FAILED
    assert Path(target / "notes.txt").read_text(encoding="utf-8") == "keep me\n"


@requires_git
def test_cancel_arriving_after_successful_clone_keeps_it(make_remote, tmp_path):
    remote = make_remote("late")
    repo = RepositoryRef(full_path="g/late", clone_url=remote.url)

    result = mirror_repository(repo, _options(tmp_path), cancel_event=CancelAfterFirstCheck())

    assert result.outcome == CLONED
    assert result.error is None
    assert (tmp_path / "mirror" / "g" / "late" / ".git").is_dir()
