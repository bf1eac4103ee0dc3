"""Shared fakes for the generator collaborators.

Nothing here touches the network, a real terminal or a real org CLI. The git
fake records calls instead of running git.
"""

import logging
from contextlib import contextmanager
from pathlib import Path

from scaffold_cli.accounts import AccountRecord
from scaffold_cli.errors import GitError
from scaffold_cli.results import CommandResult
from scaffold_cli.ui import StepTracker

USE_DEFAULT = object()


class ScriptedPrompter:
    """Answers questions from a script of ``(question_name, value)`` pairs.

    ``USE_DEFAULT`` as a value accepts whatever default the interview offered.
    Every question asked is recorded as ``(name, default)``.
    """

    def __init__(self, script):
        self.script = list(script)
        self.asked = []
        self.notices = []

    def ask(self, question, default):
        self.asked.append((question.name, default))
        assert self.script, f"unexpected question {question.name!r}"
        name, value = self.script.pop(0)
        assert name == question.name, f"expected question {name!r}, got {question.name!r}"
        return default if value is USE_DEFAULT else value

    def notify(self, text):
        self.notices.append(text)


class RecordingReporter:
    def __init__(self):
        self.banners = []
        self.lines = []
        self.tables = []
        self.status_lines = []
        self.trackers = []
        self.final_messages = None

    def print_banner(self, text=""):
        self.banners.append(text)

    def print_line(self, text=""):
        self.lines.append(text)

    def print_table(self, rows, title=None):
        self.tables.append(list(rows))

    def print_status_line(self, message):
        self.status_lines.append(message)

    def print_status_messages(self, messages):
        self.final_messages = list(messages)

    @contextmanager
    def tracker(self, title):
        tracker = StepTracker(title)
        self.trackers.append(tracker)
        yield tracker


class FakeGit:
    def __init__(self, installed=True, remote_error=None, clone_files=None, fail_on=(), inside_repo=False):
        self.installed = installed
        self.remote_error = remote_error
        self.clone_files = clone_files or {"README.md": "cloned\n"}
        self.fail_on = set(fail_on)
        self.inside_repo = inside_repo
        self.calls = []

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise GitError(f"{name} failed")

    def called(self, name):
        return [call for call in self.calls if call[0] == name]

    def is_installed(self):
        return self.installed

    async def check_remote(self, git_remote_uri, delay=0):
        self._record("check_remote", git_remote_uri)
        if self.remote_error is not None:
            raise self.remote_error
        return CommandResult(code=0, message="Remote repository found", ok=True)

    def clone(self, git_remote_uri, target_directory, repo_directory=""):
        self._record("clone", git_remote_uri, Path(target_directory), repo_directory)
        destination = Path(target_directory) / repo_directory
        for relative, text in self.clone_files.items():
            path = destination / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text)
        return destination

    def is_repo(self, path):
        self._record("is_repo", path)
        return self.inside_repo

    def init(self, path):
        self._record("init", path)

    def add_all(self, path):
        self._record("add_all", path)

    def commit(self, path, message):
        self._record("commit", path, message)

    def remote_add_origin(self, path, git_remote_uri):
        self._record("remote_add_origin", path, git_remote_uri)


class FakeAccounts:
    def __init__(self, records=(), error=None):
        self.records = list(records)
        self.error = error
        self.scans = 0
        self.logger = logging.getLogger("tests.accounts")

    async def scan(self):
        self.scans += 1
        if self.error is not None:
            raise self.error
        return list(self.records)


HUB = AccountRecord(
    alias="devhub",
    username="admin@example.com",
    account_id="00D000000000001",
    is_hub=True,
    connected_status="Connected",
)
SANDBOX = AccountRecord(
    alias="sandbox",
    username="dev@example.com.sandbox",
    account_id="00D000000000002",
    is_hub=False,
    connected_status="Connected",
)
