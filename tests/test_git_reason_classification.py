from group_mirror.core.git import classify_git_error
from group_mirror.domain.errors import GitCommandError


def test_classify_git_error_known_cases():
    assert classify_git_error("fatal: not a git repository") == "not_git_repo"
    assert classify_git_error("fatal: couldn't find remote ref main") == "remote_ref_missing"
    assert classify_git_error("Your local changes to the following files would be overwritten") == "local_changes_conflict"
    assert classify_git_error("fatal: refusing to merge unrelated histories") == "unrelated_histories"
    assert classify_git_error("fatal: Not possible to fast-forward, aborting.") == "not_fast_forward"
    assert classify_git_error("hint: You have divergent branches and need to specify how to reconcile them.") == "not_fast_forward"
    assert classify_git_error("fatal: Could not resolve host: github.com") == "network_error"
    assert classify_git_error("remote: Permission denied\nfatal: Authentication failed") == "auth_error"


def test_classify_git_error_unknown_and_empty():
    assert classify_git_error("") == "unknown"
    assert classify_git_error("random unexpected stderr") == "unknown"


def test_git_command_error_names_the_subcommand():
    error = GitCommandError(
        ["git", "-C", "/tmp/repo", "fetch", "--all"],
        128,
        "warning: something\nfatal: unable to access remote",
        reason="network_error",
    )
    assert str(error) == "git fetch failed [network_error]: fatal: unable to access remote"

    error = GitCommandError(["git", "clone", "url", "dir"], 128, "")
    assert str(error) == "git clone failed [unknown]: exit status 128"
