"""Git gateway: the git commands the generator needs, with results turned
into ``CommandResult`` objects or exceptions."""

import asyncio
import logging
import re
import shutil
import subprocess
from pathlib import Path
from typing import Optional

from .config import RemoteExitCodes
from .errors import GitError, GitNotFoundError, RemoteCheckError
from .results import CommandResult

REPO_NAME_PATTERN = re.compile(r"/([\w.-]+)\.git/*$")


def get_repo_name_from_uri(git_remote_uri: str) -> str:
    """Return the repository name of a remote URI.

    ``https://github.com/org/my-repo.git`` -> ``my-repo``. Raises ``GitError``
    when no name can be parsed.
    """
    if not isinstance(git_remote_uri, str):
        raise GitError(f"Expected string for git_remote_uri but got '{type(git_remote_uri).__name__}'")
    match = REPO_NAME_PATTERN.search(git_remote_uri.strip())
    repo_name = match.group(1) if match else ""
    if repo_name in ("", ".", ".."):
        raise GitError(
            f"Repository name could not be parsed from the Git Remote URI '{git_remote_uri}'",
            title="Unreadable Repo Name",
        )
    return repo_name


async def run_command_async(cmd: list[str], cwd: Optional[Path] = None) -> CommandResult:
    """Run a command without blocking the event loop and capture its output."""
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        return CommandResult(code=127, stderr=str(e), message=f"{cmd[0]} not found")
    stdout, stderr = await process.communicate()
    return CommandResult(
        code=process.returncode,
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
        ok=process.returncode == 0,
    )


def classify_remote_result(result: CommandResult, codes: RemoteExitCodes) -> CommandResult:
    """Map an ``ls-remote --exit-code`` result onto reachable / empty / unreachable.

    Returns the result when the remote has commits, raises ``RemoteCheckError``
    otherwise.
    """
    if result.code == codes.ok:
        result.message = "Remote repository found"
        result.ok = True
        return result
    result.ok = False
    if result.code == codes.empty:
        result.message = "Remote repository contains no commits"
    elif result.code == codes.unreachable:
        result.message = "Remote repository not found"
    else:
        result.message = f"Unexpected error (exit code {result.code})"
    raise RemoteCheckError(result.message, result=result)


class GitGateway:
    def __init__(self, codes: RemoteExitCodes | None = None, logger: logging.Logger | None = None):
        self.codes = codes or RemoteExitCodes()
        self.logger = logger or logging.getLogger(__name__)

    def is_installed(self) -> bool:
        return shutil.which("git") is not None

    async def check_remote(self, git_remote_uri: str, delay: float = 0) -> CommandResult:
        """Check that the remote is reachable and has at least one commit."""
        if delay:
            await asyncio.sleep(delay)
        result = await run_command_async(["git", "ls-remote", "--exit-code", "-h", git_remote_uri])
        self.logger.debug("ls-remote %s exited with %s", git_remote_uri, result.code)
        return classify_remote_result(result, self.codes)

    def run(self, args: list[str], cwd: Path) -> CommandResult:
        cmd = ["git", *args]
        if not Path(cwd).is_dir():
            raise GitError(f"Working directory '{cwd}' does not exist")
        try:
            completed = subprocess.run(cmd, cwd=cwd, capture_output=True, text=True)
        except FileNotFoundError:
            raise GitNotFoundError("git executable not found in your environment")
        result = CommandResult(
            code=completed.returncode,
            stdout=completed.stdout.strip(),
            stderr=completed.stderr.strip(),
            ok=completed.returncode == 0,
        )
        self.logger.debug("%s (cwd=%s) exited with %s", " ".join(cmd), cwd, result.code)
        if not result.ok:
            result.message = result.stderr or f"'{' '.join(cmd)}' exited with code {result.code}"
            raise GitError(result.message, result=result)
        return result

    def clone(self, git_remote_uri: str, target_directory: Path, repo_directory: str = "") -> Path:
        """Clone into ``target_directory/repo_directory`` (repo name by default)."""
        target_directory = Path(target_directory).resolve()
        try:
            target_directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise GitError(f"Could not create directory '{target_directory}': {e}", title="Invalid Target Directory")
        repo_directory = repo_directory or get_repo_name_from_uri(git_remote_uri)
        try:
            self.run(["clone", git_remote_uri, repo_directory], cwd=target_directory)
        except GitNotFoundError:
            raise
        except GitError as e:
            destination = target_directory / repo_directory
            if destination.is_dir() and any(destination.iterdir()):
                message = f"Destination path '{repo_directory}' already exists and is not an empty directory."
            else:
                message = f"Error cloning {git_remote_uri} to {target_directory / repo_directory}: {e.message}"
            raise GitError(message, result=e.result, title="Git Clone Error")
        return target_directory / repo_directory

    def is_repo(self, path: Path) -> bool:
        """Check if the specified path is inside a git repository."""
        if not Path(path).is_dir():
            return False
        try:
            self.run(["rev-parse", "--is-inside-work-tree"], cwd=path)
            return True
        except GitError:
            return False

    def init(self, path: Path) -> CommandResult:
        return self.run(["init"], cwd=path)

    def add_all(self, path: Path) -> CommandResult:
        return self.run(["add", "-A"], cwd=path)

    def commit(self, path: Path, message: str) -> CommandResult:
        if not message:
            raise GitError("Expected non-empty commit message")
        return self.run(["commit", "-m", message], cwd=path)

    def remote_add_origin(self, path: Path, git_remote_uri: str) -> CommandResult:
        return self.run(["remote", "add", "origin", git_remote_uri], cwd=path)
