import asyncio
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from scaffold_cli.config import RemoteExitCodes
from scaffold_cli.errors import GitError, GitNotFoundError, RemoteCheckError
from scaffold_cli.git import GitGateway, classify_remote_result, get_repo_name_from_uri
from scaffold_cli.results import CommandResult


@pytest.mark.parametrize("uri,name", [
    ("https://github.com/my-org/my-repo.git", "my-repo"),
    ("git@github.com:my-org/my.repo.git", "my.repo"),
    ("ssh://git@host:22/org/repo_name.git/", "repo_name"),
])
def test_get_repo_name_from_uri(uri, name):
    assert get_repo_name_from_uri(uri) == name


@pytest.mark.parametrize("uri", ["https://github.com/my-org/", "https://github.com/org/..git", "nothing"])
def test_get_repo_name_from_uri_rejects_unparseable(uri):
    with pytest.raises(GitError) as info:
        get_repo_name_from_uri(uri)
    assert info.value.title == "Unreadable Repo Name"


def test_classify_remote_found():
    result = classify_remote_result(CommandResult(code=0), RemoteExitCodes())
    assert result.ok
    assert result.message == "Remote repository found"


@pytest.mark.parametrize("code,message", [
    (2, "Remote repository contains no commits"),
    (128, "Remote repository not found"),
    (1, "Unexpected error (exit code 1)"),
])
def test_classify_remote_failures(code, message):
    with pytest.raises(RemoteCheckError) as info:
        classify_remote_result(CommandResult(code=code), RemoteExitCodes())
    assert info.value.message == message
    assert info.value.result.code == code


def test_classify_remote_uses_configured_codes():
    codes = RemoteExitCodes(ok=0, empty=3, unreachable=2)
    with pytest.raises(RemoteCheckError, match="not found"):
        classify_remote_result(CommandResult(code=2), codes)


def test_check_remote_runs_ls_remote():
    async def fake_run(cmd, cwd=None):
        fake_run.cmd = cmd
        return CommandResult(code=0)

    with patch("scaffold_cli.git.run_command_async", fake_run):
        result = asyncio.run(GitGateway().check_remote("https://github.com/a/b.git"))

    assert result.ok
    assert fake_run.cmd == ["git", "ls-remote", "--exit-code", "-h", "https://github.com/a/b.git"]


def test_run_raises_git_error_with_result(tmp_path):
    completed = subprocess.CompletedProcess(["git", "init"], 1, stdout="", stderr="fatal: nope")
    with patch("scaffold_cli.git.subprocess.run", return_value=completed):
        with pytest.raises(GitError) as info:
            GitGateway().run(["init"], cwd=tmp_path)
    assert info.value.message == "fatal: nope"
    assert info.value.result.code == 1


def test_run_without_git_raises_not_found(tmp_path):
    with patch("scaffold_cli.git.subprocess.run", side_effect=FileNotFoundError("git")):
        with pytest.raises(GitNotFoundError):
            GitGateway().run(["status"], cwd=tmp_path)


def test_run_in_missing_directory_is_not_reported_as_missing_git(tmp_path):
    with patch("scaffold_cli.git.subprocess.run") as run:
        with pytest.raises(GitError) as info:
            GitGateway().run(["init"], cwd=tmp_path / "missing")
    assert not isinstance(info.value, GitNotFoundError)
    assert "does not exist" in info.value.message
    run.assert_not_called()


def test_clone_uses_repo_name_by_default(tmp_path):
    completed = subprocess.CompletedProcess([], 0, stdout="", stderr="")
    with patch("scaffold_cli.git.subprocess.run", return_value=completed) as run:
        destination = GitGateway().clone("https://github.com/org/my-repo.git", tmp_path / "work")

    assert destination == (tmp_path / "work" / "my-repo").resolve()
    args, kwargs = run.call_args
    assert args[0] == ["git", "clone", "https://github.com/org/my-repo.git", "my-repo"]
    assert kwargs["cwd"] == (tmp_path / "work").resolve()


def test_clone_into_non_empty_destination_reports_conflict(tmp_path):
    existing = tmp_path / "my-repo"
    existing.mkdir()
    (existing / "file.txt").write_text("x")
    completed = subprocess.CompletedProcess([], 128, stdout="", stderr="fatal: already exists")
    with patch("scaffold_cli.git.subprocess.run", return_value=completed):
        with pytest.raises(GitError) as info:
            GitGateway().clone("https://github.com/org/my-repo.git", tmp_path)
    assert info.value.title == "Git Clone Error"
    assert "already exists" in info.value.message


def test_commit_requires_message(tmp_path):
    with pytest.raises(GitError):
        GitGateway().commit(tmp_path, "")


def test_is_installed_uses_which():
    with patch("scaffold_cli.git.shutil.which", return_value=None):
        assert not GitGateway().is_installed()
    with patch("scaffold_cli.git.shutil.which", return_value="/usr/bin/git"):
        assert GitGateway().is_installed()


def test_gateway_logs_commands(tmp_path):
    logger = MagicMock()
    completed = subprocess.CompletedProcess([], 0, stdout="", stderr="")
    with patch("scaffold_cli.git.subprocess.run", return_value=completed):
        GitGateway(logger=logger).init(tmp_path)
    logger.debug.assert_called()


def test_is_repo(tmp_path):
    assert not GitGateway().is_repo(tmp_path / "missing")
    inside = subprocess.CompletedProcess([], 0, stdout="true", stderr="")
    with patch("scaffold_cli.git.subprocess.run", return_value=inside):
        assert GitGateway().is_repo(tmp_path)
    outside = subprocess.CompletedProcess([], 128, stdout="", stderr="fatal: not a git repository")
    with patch("scaffold_cli.git.subprocess.run", return_value=outside):
        assert not GitGateway().is_repo(tmp_path)
