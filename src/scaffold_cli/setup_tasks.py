"""Pre-flight checks run before the interview.

Two batches run back-to-back: git/remote validation, then connected-account
discovery. Each batch has its own task context; what the generator needs is
copied out into a ``SetupResult``.
"""

from dataclasses import dataclass, field
from typing import Optional

from .accounts import AccountDirectory, AccountRecord, build_alias_choices, identify_hub_accounts
from .errors import GitNotFoundError, NoAccountsError, NoHubsError, RemoteCheckError
from .git import GitGateway
from .interview import Choice
from .tasks import Task, TaskContext, TaskRunner


@dataclass
class SetupResult:
    git_installed: bool = False
    remote_message: str = ""
    accounts: list[AccountRecord] = field(default_factory=list)
    hub_accounts: list[AccountRecord] = field(default_factory=list)
    hub_choices: list[Choice] = field(default_factory=list)


def build_git_tasks(command_name: str, git: GitGateway, git_remote_uri: Optional[str], delay: float = 0) -> list[Task]:
    def look_for_git(ctx: TaskContext, task: Task):
        if git.is_installed():
            ctx["git_installed"] = True
            task.detail = "found"
        else:
            ctx["git_installed"] = False
            task.detail = "not found"
            raise GitNotFoundError("git executable not found in your environment")

    async def validate_remote(ctx: TaskContext, task: Task):
        try:
            result = await git.check_remote(git_remote_uri, delay)
        except RemoteCheckError as e:
            task.detail = e.message
            raise
        ctx["remote_message"] = result.message
        task.detail = result.message

    def git_subtasks(ctx: TaskContext, task: Task):
        return [
            Task("Looking for Git", look_for_git, key="git-installed"),
            Task(
                "Validating Git Remote",
                validate_remote,
                enabled=lambda ctx: ctx.get("git_installed") is True and bool(git_remote_uri),
                key="git-remote",
            ),
        ]

    return [Task(f"Initializing {command_name}", git_subtasks, key="git-init")]


def build_account_tasks(accounts: AccountDirectory) -> list[Task]:
    async def scan_accounts(ctx: TaskContext, task: Task):
        records = await accounts.scan()
        if not records:
            task.detail = "no connections found"
            raise NoAccountsError("No authenticated accounts found. Authenticate with your org CLI first.")
        ctx["accounts"] = records
        task.detail = f"{len(records)} found"

    def identify_hubs(ctx: TaskContext, task: Task):
        hubs = identify_hub_accounts(ctx["accounts"], accounts.logger)
        if not hubs:
            task.detail = "no hubs found"
            raise NoHubsError("No connected hub accounts found. Authenticate to a hub with your org CLI first.")
        ctx["hub_accounts"] = hubs
        task.detail = f"{len(hubs)} found"

    def build_choices(ctx: TaskContext, task: Task):
        ctx["hub_choices"] = build_alias_choices(ctx["hub_accounts"])
        task.detail = "done"

    def account_subtasks(ctx: TaskContext, task: Task):
        return [
            Task("Scanning Connected Accounts", scan_accounts, key="accounts-scan"),
            Task("Identifying Hub Accounts", identify_hubs, key="accounts-hubs"),
            Task("Building Hub Alias List", build_choices, key="accounts-choices"),
        ]

    return [Task("Inspecting Connected Accounts", account_subtasks, key="accounts")]


async def run_setup_tasks(
    runner: TaskRunner,
    command_name: str,
    git: GitGateway,
    accounts: AccountDirectory,
    git_remote_uri: Optional[str] = None,
    delay: float = 0,
) -> SetupResult:
    """Run both batches; the first failure propagates."""
    git_ctx = await runner.run(build_git_tasks(command_name, git, git_remote_uri, delay))
    account_ctx = await runner.run(build_account_tasks(accounts))
    return SetupResult(
        git_installed=git_ctx.get("git_installed", False),
        remote_message=git_ctx.get("remote_message", ""),
        accounts=list(account_ctx.get("accounts", [])),
        hub_accounts=list(account_ctx.get("hub_accounts", [])),
        hub_choices=list(account_ctx.get("hub_choices", [])),
    )
