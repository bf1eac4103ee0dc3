"""Exception types raised by scaffold-cli components."""

from typing import Optional

from .results import CommandResult


class ScaffoldError(Exception):
    """Base error. ``title`` is what ends up in the final status report."""
    title = "Error"

    def __init__(self, message: str, title: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if title:
            self.title = title


class ConfigError(ScaffoldError):
    title = "Configuration Error"


class GitError(ScaffoldError):
    title = "Git Error"

    def __init__(self, message: str, result: Optional[CommandResult] = None, title: Optional[str] = None):
        super().__init__(message, title)
        self.result = result


class GitNotFoundError(GitError):
    title = "Git Not Found"


class RemoteCheckError(GitError):
    title = "Git Remote Error"


class AccountScanError(ScaffoldError):
    title = "Account Scan Error"


class NoAccountsError(AccountScanError):
    title = "No Authenticated Accounts"


class NoHubsError(AccountScanError):
    title = "No Hub Accounts"


class TemplateError(ScaffoldError):
    title = "Template Error"


class InterviewError(ScaffoldError):
    title = "Interview Error"


class GeneratorStatusError(ScaffoldError):
    title = "Generator Status Error"
