"""Question sets for the create and clone interviews, plus the rows shown in
the answer summary after each round."""

from pathlib import Path
from typing import Sequence

from . import validators
from .interview import Answers, Choice, Interview, Question, QuestionKind

CREATE_DEFAULTS = {
    "project_name": "my-project",
    "is_creating_package": False,
    "namespace_prefix": "my_ns",
    "package_name": "My Package",
    "is_initializing_git": True,
    "has_git_remote": False,
    "git_remote_uri": "https://github.com/my-org/my-repo.git",
}


def filter_local_path(local_path: str) -> str:
    """Return the resolved form of a local path."""
    if not isinstance(local_path, str):
        raise TypeError(f"Expected string for local_path but got '{type(local_path).__name__}'")
    return str(Path(local_path).resolve())


def _is_creating_package(answers: Answers) -> bool:
    return bool(answers.get("is_creating_package"))


def _is_initializing_git(answers: Answers) -> bool:
    return bool(answers.get("is_initializing_git"))


def _has_git_remote(answers: Answers) -> bool:
    return _is_initializing_git(answers) and bool(answers.get("has_git_remote"))


def _target_directory_question(message: str) -> Question:
    return Question(
        name="target_directory",
        message=message,
        validator=validators.target_path,
        filter=filter_local_path,
    )


def _hub_alias_question(choices: Sequence[Choice]) -> Question:
    return Question(
        name="hub_alias",
        message="Which hub account do you want to use for this project?",
        kind=QuestionKind.SELECT,
        choices=choices,
    )


def create_questions(hub_choices: Sequence[Choice]):
    """Question builder for ``scaffold create``. Rebuilt every round."""
    def build(interview: Interview) -> list[Question]:
        return [
            Question(
                name="project_name",
                message="What is the name of your project?",
                validator=validators.project_name,
            ),
            _target_directory_question("Where do you want to create your project?"),
            _hub_alias_question(hub_choices),
            Question(
                name="is_creating_package",
                message="Are you building a packaged artifact?",
                kind=QuestionKind.CONFIRM,
            ),
            Question(
                name="namespace_prefix",
                message="What is the namespace prefix for your package?",
                validator=validators.namespace_prefix,
                visible_if=_is_creating_package,
            ),
            Question(
                name="package_name",
                message="What is the name of your package?",
                visible_if=_is_creating_package,
            ),
            Question(
                name="is_initializing_git",
                message="Would you like to initialize Git for this project? (RECOMMENDED)",
                kind=QuestionKind.CONFIRM,
            ),
            Question(
                name="has_git_remote",
                message="Have you created a Git remote (eg. GitHub/Bitbucket repo) for this project?",
                kind=QuestionKind.CONFIRM,
                visible_if=_is_initializing_git,
            ),
            Question(
                name="git_remote_uri",
                message="What is the URI of your Git remote?",
                validator=validators.git_remote_uri,
                visible_if=_has_git_remote,
            ),
        ]
    return build


def clone_questions(hub_choices: Sequence[Choice]):
    """Question builder for ``scaffold clone``."""
    def build(interview: Interview) -> list[Question]:
        return [
            _target_directory_question("What is the target directory for this project?"),
            _hub_alias_question(hub_choices),
        ]
    return build


def _choice_label(choices: Sequence[Choice], value) -> str:
    for choice in choices:
        if choice.value == value:
            return choice.short or choice.name
    return str(value)


def create_summary(answers: Answers, hub_choices: Sequence[Choice]) -> list[tuple[str, str]]:
    rows = [
        ("Project Name:", answers.get("project_name")),
        ("Target Directory:", answers.get("target_directory")),
        ("Hub Account:", _choice_label(hub_choices, answers.get("hub_alias"))),
        ("Building Package:", answers.get("is_creating_package")),
    ]
    if answers.get("is_creating_package"):
        rows.append(("Namespace Prefix:", answers.get("namespace_prefix")))
        rows.append(("Package Name:", answers.get("package_name")))
    rows.append(("Initialize Git Repo:", answers.get("is_initializing_git")))
    if answers.get("is_initializing_git"):
        rows.append(("Has Git Remote:", answers.get("has_git_remote")))
        if answers.get("git_remote_uri"):
            rows.append(("Git Remote URI:", answers.get("git_remote_uri")))
    return [(label, str(value)) for label, value in rows]


def clone_summary(answers: Answers, hub_choices: Sequence[Choice], git_remote_uri: str) -> list[tuple[str, str]]:
    return [
        ("Git Remote URI:", git_remote_uri),
        ("Target Directory:", str(answers.get("target_directory"))),
        ("Hub Account:", _choice_label(hub_choices, answers.get("hub_alias"))),
    ]
