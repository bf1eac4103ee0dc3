"""Field validators used by the interview.

The ``validate_*`` functions are plain predicates. The short-named adapters at
the bottom wrap them for use as question validators: they return ``True`` or
the message to show the user.
"""

import re

GIT_URI_PATTERN = re.compile(
    r"(^(git|ssh|http(s)?)|(git@[\w\.]+))(:(//)?)([\w\.@:/\-~]+)(\.git)(/)?$"
)
LOCAL_PATH_PATTERN = re.compile(r"(^~|\s|\"|'|\||\*)")
NAMESPACE_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]{0,14}$")
PROJECT_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def is_git_uri_valid(git_remote_uri: str) -> bool:
    """Check the shape of a git remote URI (see git-clone(1) "GIT URLS")."""
    if not isinstance(git_remote_uri, str):
        raise TypeError(f"Expected string for git_remote_uri but got {type(git_remote_uri).__name__}")
    return bool(GIT_URI_PATTERN.search(git_remote_uri))


def validate_git_remote_uri(git_remote_uri: str) -> bool:
    return is_git_uri_valid(git_remote_uri)


def validate_local_path(path_string: str) -> bool:
    """Reject paths that start with ``~`` or contain whitespace, quotes, ``|`` or ``*``."""
    if not isinstance(path_string, str):
        raise TypeError(f"Expected string for path_string but got {type(path_string).__name__}")
    if path_string == "":
        return False
    return LOCAL_PATH_PATTERN.search(path_string) is None


def validate_namespace_prefix(prefix: str) -> bool:
    if not isinstance(prefix, str) or not NAMESPACE_PATTERN.match(prefix):
        return False
    return "__" not in prefix and not prefix.endswith("_")


def validate_project_name(name: str) -> bool:
    return isinstance(name, str) and bool(PROJECT_NAME_PATTERN.match(name))


# Question validators

def git_remote_uri(user_input: str) -> bool | str:
    return validate_git_remote_uri(user_input) or "Please provide a valid URI for your Git remote"


def target_path(user_input: str) -> bool | str:
    return validate_local_path(user_input) or (
        "Target directory can not begin with a ~, contain spaces, "
        "or contain these invalid characters (' \" * |)"
    )


def namespace_prefix(user_input: str) -> bool | str:
    return validate_namespace_prefix(user_input) or (
        "Namespace prefix must start with a letter, use only letters, digits and single "
        "underscores, not end with an underscore, and be at most 15 characters"
    )


def project_name(user_input: str) -> bool | str:
    return validate_project_name(user_input) or (
        "Project name may only contain letters, digits, '.', '-' and '_' and must not start with a symbol"
    )
