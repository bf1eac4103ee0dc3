import asyncio

import pytest

from fakes import HUB, SANDBOX, FakeAccounts, FakeGit
from scaffold_cli.accounts import NOT_SPECIFIED
from scaffold_cli.errors import AccountScanError, GitNotFoundError, NoAccountsError, NoHubsError, RemoteCheckError
from scaffold_cli.setup_tasks import run_setup_tasks
from scaffold_cli.tasks import TaskRunner, TaskStatus
from scaffold_cli.ui import StepTracker

URI = "https://github.com/my-org/my-repo.git"


def _run(git, accounts, uri=URI, tracker=None):
    runner = TaskRunner(tracker)
    return asyncio.run(run_setup_tasks(runner, "scaffold clone", git, accounts, git_remote_uri=uri))


def test_setup_collects_hubs_and_choices(accounts):
    tracker = StepTracker("setup")
    result = _run(FakeGit(), accounts, tracker=tracker)

    assert result.git_installed
    assert result.remote_message == "Remote repository found"
    assert result.accounts == [HUB, SANDBOX]
    assert result.hub_accounts == [HUB]
    assert [c.value for c in result.hub_choices] == [HUB.username, NOT_SPECIFIED]
    assert tracker.status_of("git-remote") is TaskStatus.SUCCEEDED
    assert tracker.status_of("accounts-choices") is TaskStatus.SUCCEEDED


def test_remote_check_skipped_without_uri(accounts):
    git = FakeGit()
    tracker = StepTracker("setup")
    _run(git, accounts, uri=None, tracker=tracker)

    assert git.called("check_remote") == []
    assert tracker.status_of("git-remote") is TaskStatus.SKIPPED


def test_missing_git_stops_before_account_scan(accounts):
    tracker = StepTracker("setup")
    with pytest.raises(GitNotFoundError):
        _run(FakeGit(installed=False), accounts, tracker=tracker)

    assert accounts.scans == 0
    assert tracker.status_of("git-installed") is TaskStatus.FAILED
    assert tracker.status_of("accounts") is None


def test_empty_remote_fails_with_detail(accounts):
    tracker = StepTracker("setup")
    git = FakeGit(remote_error=RemoteCheckError("Remote repository contains no commits"))
    with pytest.raises(RemoteCheckError):
        _run(git, accounts, tracker=tracker)

    step = next(s for s in tracker.steps if s["key"] == "git-remote")
    assert step["status"] is TaskStatus.FAILED
    assert step["detail"] == "Remote repository contains no commits"
    assert tracker.status_of("git-init") is TaskStatus.FAILED


@pytest.mark.parametrize("accounts_fake,error", [
    (FakeAccounts([]), NoAccountsError),
    (FakeAccounts([SANDBOX]), NoHubsError),
    (FakeAccounts(error=AccountScanError("sf executable not found")), AccountScanError),
])
def test_account_failures(accounts_fake, error):
    with pytest.raises(error):
        _run(FakeGit(), accounts_fake)
