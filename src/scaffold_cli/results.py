"""Value objects shared by the gateways, the task runner and the generator."""

from dataclasses import dataclass
from enum import Enum


class MessageType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class StatusMessage:
    type: MessageType
    title: str
    message: str

    @classmethod
    def success(cls, title: str, message: str) -> "StatusMessage":
        return cls(MessageType.SUCCESS, title, message)

    @classmethod
    def error(cls, title: str, message: str) -> "StatusMessage":
        return cls(MessageType.ERROR, title, message)

    @classmethod
    def warning(cls, title: str, message: str) -> "StatusMessage":
        return cls(MessageType.WARNING, title, message)

    @classmethod
    def info(cls, title: str, message: str) -> "StatusMessage":
        return cls(MessageType.INFO, title, message)


@dataclass
class CommandResult:
    """Outcome of an external command (git, org CLI)."""
    code: int
    stdout: str = ""
    stderr: str = ""
    message: str = ""
    ok: bool = False
