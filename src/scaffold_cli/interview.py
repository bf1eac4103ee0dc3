"""The interview engine: ask a question set, show the answers, confirm, and
start over with the previous answers as defaults until the user proceeds or
gives up."""

import logging
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Protocol, Sequence

from rich.console import Console
from rich.prompt import Confirm, Prompt

from .errors import InterviewError
from .ui import console as shared_console, select_with_arrows

Answers = dict[str, Any]


class QuestionKind(str, Enum):
    TEXT = "text"
    CONFIRM = "confirm"
    SELECT = "select"


@dataclass(frozen=True)
class Choice:
    name: str
    value: str
    short: str = ""


@dataclass
class Question:
    name: str
    message: str
    kind: QuestionKind = QuestionKind.TEXT
    choices: Sequence[Choice] = ()
    # Returns True or the message to show before asking again
    validator: Optional[Callable[[Any], bool | str]] = None
    # Called with the answers given so far in this round
    visible_if: Optional[Callable[[Answers], bool]] = None
    filter: Optional[Callable[[Any], Any]] = None

    def is_visible(self, answers: Answers) -> bool:
        return self.visible_if is None or bool(self.visible_if(answers))


@dataclass
class ConfirmationAnswers:
    proceed: bool = False
    restart: bool = True


@dataclass
class InterviewResult:
    proceed: bool
    answers: Answers = field(default_factory=dict)


class Prompter(Protocol):
    def ask(self, question: Question, default: Any) -> Any: ...

    def notify(self, text: str) -> None: ...


class RichPrompter:
    """Prompts on the terminal with rich; selections use the arrow-key picker."""

    def __init__(self, console: Console | None = None):
        self.console = console or shared_console

    def ask(self, question: Question, default: Any) -> Any:
        if question.kind is QuestionKind.CONFIRM:
            return Confirm.ask(question.message, default=bool(default), console=self.console)
        if question.kind is QuestionKind.SELECT:
            # Provide interactive selection only if stdin is a TTY
            if not sys.stdin.isatty():
                return default
            options = {choice.value: choice.name for choice in question.choices}
            return select_with_arrows(options, question.message, default, target=self.console)
        return Prompt.ask(
            question.message,
            default=None if default is None else str(default),
            console=self.console,
        )

    def notify(self, text: str) -> None:
        self.console.print(f"[red]>>[/red] {text}")


class Interview:
    def __init__(
        self,
        default_answers: Answers,
        build_questions: Callable[["Interview"], Sequence[Question]],
        prompter: Prompter,
        display: Optional[Callable[[Answers], None]] = None,
        confirm_message: str = "Create a new project based on the above settings?",
        logger: logging.Logger | None = None,
    ):
        self.default_answers = dict(default_answers)
        self.user_answers: Answers = {}
        self.confirmation = ConfirmationAnswers()
        self.build_questions = build_questions
        self.prompter = prompter
        self.display = display
        self.confirm_message = confirm_message
        self.logger = logger or logging.getLogger(__name__)
        self.rounds = 0

    def current_default(self, name: str) -> Any:
        """Most recently entered answer if there is one, else the run default."""
        if name in self.user_answers:
            return self.user_answers[name]
        return self.default_answers.get(name)

    def has_default(self, name: str) -> bool:
        return name in self.user_answers or name in self.default_answers

    def _resolve_default(self, question: Question) -> Any:
        if question.kind is QuestionKind.SELECT:
            if not question.choices:
                raise InterviewError(f"Question '{question.name}' has no options to choose from")
            values = [choice.value for choice in question.choices]
            default = self.current_default(question.name)
            return default if default in values else values[0]
        if not self.has_default(question.name):
            raise InterviewError(f"No default answer available for question '{question.name}'")
        return self.current_default(question.name)

    def _ask(self, question: Question, default: Any) -> Any:
        while True:
            value = self.prompter.ask(question, default)
            if question.validator is not None:
                verdict = question.validator(value)
                if verdict is not True:
                    self.prompter.notify(verdict if isinstance(verdict, str) else "Invalid value")
                    continue
            if question.filter is not None:
                value = question.filter(value)
            return value

    def ask_questions(self, questions: Sequence[Question], defaults: Optional[Callable[[Question], Any]] = None) -> Answers:
        answers: Answers = {}
        resolve = defaults or self._resolve_default
        for question in questions:
            if not question.is_visible(answers):
                continue
            answers[question.name] = self._ask(question, resolve(question))
        return answers

    def confirmation_questions(self) -> list[Question]:
        return [
            Question(name="proceed", message=self.confirm_message, kind=QuestionKind.CONFIRM),
            Question(
                name="restart",
                message="Would you like to start again and enter new values?",
                kind=QuestionKind.CONFIRM,
                visible_if=lambda answers: not answers.get("proceed"),
            ),
        ]

    def ask_confirmation(self) -> ConfirmationAnswers:
        previous = self.confirmation
        answers = self.ask_questions(
            self.confirmation_questions(),
            defaults=lambda question: getattr(previous, question.name),
        )
        proceed = bool(answers.get("proceed"))
        restart = False if proceed else bool(answers.get("restart"))
        self.confirmation = ConfirmationAnswers(proceed=proceed, restart=restart)
        return self.confirmation

    def run(self) -> InterviewResult:
        while True:
            self.rounds += 1
            questions = self.build_questions(self)
            self.logger.debug("interview round %d, user answers before prompt: %s", self.rounds, self.user_answers)
            self.user_answers = self.ask_questions(questions)
            self.logger.debug("user answers after prompt: %s", self.user_answers)
            if self.display is not None:
                self.display(self.user_answers)
            confirmation = self.ask_confirmation()
            self.logger.debug("confirmation answers: %s", confirmation)
            if not confirmation.restart:
                break

        if not self.confirmation.proceed:
            return InterviewResult(proceed=False)
        return InterviewResult(proceed=True, answers={**self.default_answers, **self.user_answers})
