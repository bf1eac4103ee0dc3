"""Generator status: running/aborted/completed flags plus the messages that
make up the final report."""

from typing import Iterable

from .errors import GeneratorStatusError
from .results import MessageType, StatusMessage


class GeneratorStatus:
    """Created once per run. Every phase checks ``is_aborted()`` first.

    ``aborted`` and ``completed`` are mutually exclusive and are never reset.
    """

    def __init__(self):
        self.running = False
        self.aborted = False
        self.completed = False
        self.messages: list[StatusMessage] = []

    def _has(self, message_type: MessageType) -> bool:
        return any(m.type is message_type for m in self.messages)

    @property
    def has_error(self) -> bool:
        return self._has(MessageType.ERROR)

    @property
    def has_success(self) -> bool:
        return self._has(MessageType.SUCCESS)

    @property
    def has_warning(self) -> bool:
        return self._has(MessageType.WARNING)

    @property
    def has_info(self) -> bool:
        return self._has(MessageType.INFO)

    def is_aborted(self) -> bool:
        return self.aborted

    def start(self):
        if self.aborted or self.completed:
            raise GeneratorStatusError("Can not call start() on an aborted or completed generator status")
        self.running = True

    def abort(self, message: StatusMessage):
        """Stop the run. Safe to call more than once; later calls only add their message."""
        if self.completed:
            raise GeneratorStatusError("Can not call abort() on a completed generator status")
        self.aborted = True
        self.running = False
        self.add_message(message)

    def add_message(self, message: StatusMessage):
        if not isinstance(message, StatusMessage):
            raise GeneratorStatusError(f"Expected StatusMessage but got '{type(message).__name__}'")
        self.messages.append(message)

    def complete(self, messages: Iterable[StatusMessage] = ()):
        if self.aborted:
            raise GeneratorStatusError("Can not call complete() on an aborted generator status")
        self.completed = True
        self.running = False
        for message in messages:
            self.add_message(message)

    @property
    def exit_code(self) -> int:
        return 0 if self.completed else 1
