"""Connected-account discovery through the org-management CLI."""

import json
import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from .errors import AccountScanError
from .git import run_command_async
from .interview import Choice

CONNECTED = "Connected"
NOT_SPECIFIED = "NOT_SPECIFIED"


@dataclass(frozen=True)
class AccountRecord:
    alias: str
    username: str
    account_id: str
    is_hub: bool
    connected_status: str

    @classmethod
    def from_raw(cls, raw: dict) -> "AccountRecord":
        return cls(
            alias=raw.get("alias") or "",
            username=raw.get("username") or "",
            account_id=raw.get("orgId") or "",
            is_hub=bool(raw.get("isDevHub")),
            connected_status=raw.get("connectedStatus") or "",
        )


def parse_account_list(raw_output: str) -> list[AccountRecord]:
    """Parse ``org list --json`` output into records (non-scratch accounts only)."""
    try:
        payload = json.loads(raw_output)
    except json.JSONDecodeError as e:
        raise AccountScanError(f"Could not parse account list output: {e}")
    if not isinstance(payload, dict):
        raise AccountScanError("Unexpected account list output")
    if payload.get("status", 0) != 0:
        raise AccountScanError(payload.get("message") or f"Account scan failed with status {payload.get('status')}")
    result = payload.get("result") or {}
    raw_accounts = result.get("nonScratchOrgs")
    if raw_accounts is None:
        raise AccountScanError("Account list output contained no results")
    return [AccountRecord.from_raw(raw) for raw in raw_accounts]


def identify_hub_accounts(accounts: Iterable[AccountRecord], logger: logging.Logger | None = None) -> list[AccountRecord]:
    """Keep hub-capable accounts whose connection is live."""
    logger = logger or logging.getLogger(__name__)
    hubs = []
    for account in accounts:
        if account.is_hub and account.connected_status == CONNECTED:
            logger.debug("active hub: %s (%s)", account.alias, account.username)
            hubs.append(account)
        else:
            logger.debug("not an active hub: %s (%s)", account.alias, account.username)
    return hubs


def build_alias_choices(accounts: Sequence[AccountRecord]) -> list[Choice]:
    """Build padded ``alias -- username`` choices followed by a "not listed" sentinel."""
    longest_alias = max((len(a.alias) for a in accounts), default=0)
    longest_username = max((len(a.username) for a in accounts), default=0)
    choices = []
    for account in accounts:
        short = f"{account.alias} ({account.username})" if account.alias else account.username
        choices.append(Choice(
            name=f"{account.alias:<{longest_alias}} -- {account.username:<{longest_username}}",
            value=account.username,
            short=short,
        ))
    choices.append(Choice(name="My Hub Is Not Listed Above", value=NOT_SPECIFIED, short="Not Specified"))
    return choices


class AccountDirectory:
    def __init__(self, command: Sequence[str], logger: logging.Logger | None = None):
        self.command = list(command)
        self.logger = logger or logging.getLogger(__name__)

    async def scan(self) -> list[AccountRecord]:
        """Enumerate authenticated, non-scratch accounts."""
        result = await run_command_async(self.command)
        self.logger.debug("%s exited with %s", " ".join(self.command), result.code)
        if result.code == 127 and not result.stdout:
            raise AccountScanError(f"{self.command[0]} executable not found in your environment")
        if not result.stdout.strip():
            raise AccountScanError(result.stderr.strip() or f"{self.command[0]} returned no output")
        return parse_account_list(result.stdout)
