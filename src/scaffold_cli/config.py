"""Run configuration.

``GeneratorConfig`` is built once by the CLI from command options and the
optional user defaults file, and validated on construction. A bad value here
is a ``ConfigError`` raised before any prompt is shown.
"""

import os
import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from platformdirs import user_config_dir

from .errors import ConfigError
from .templates import TemplateSource
from .validators import is_git_uri_valid, validate_project_name

APP_NAME = "scaffold-cli"
VERSION = "0.1.0"
CONFIG_ENV_VAR = "SCAFFOLD_CONFIG"
DEFAULT_ACCOUNT_COMMAND = ("sf", "org", "list", "--json")
BUNDLED_TEMPLATE_DIR = Path(__file__).parent / "project_templates" / "default"


class Mode(str, Enum):
    CREATE = "create"
    CLONE = "clone"


@dataclass(frozen=True)
class RemoteExitCodes:
    """Exit codes of ``git ls-remote --exit-code`` mapped to outcomes.

    Overridable from the user config because they depend on the git version.
    """
    ok: int = 0
    empty: int = 2
    unreachable: int = 128


@dataclass(frozen=True)
class GeneratorConfig:
    mode: Mode
    command_name: str
    output_dir: Path
    git_remote_uri: Optional[str] = None
    clone_dir_name: Optional[str] = None
    template: Optional[TemplateSource] = None
    remote_check_delay: float = 0
    remote_codes: RemoteExitCodes = field(default_factory=RemoteExitCodes)
    account_command: tuple[str, ...] = DEFAULT_ACCOUNT_COMMAND
    answer_defaults: dict[str, Any] = field(default_factory=dict)
    local_config_template: str = "tools/templates/local-config.sh.tmpl"
    local_config_target: str = "tools/lib/local-config.sh"
    debug: bool = False

    def __post_init__(self):
        if not isinstance(self.mode, Mode):
            raise ConfigError(f"Unknown mode '{self.mode}'")
        if not self.command_name:
            raise ConfigError("command_name is required")
        object.__setattr__(self, "output_dir", Path(self.output_dir).expanduser().resolve())
        if self.mode is Mode.CLONE:
            if not self.git_remote_uri or not is_git_uri_valid(self.git_remote_uri):
                raise ConfigError(
                    f"The value provided for GIT_REMOTE_URI is not a valid URI for a Git remote: {self.git_remote_uri!r}"
                )
            if self.clone_dir_name is not None and not validate_project_name(self.clone_dir_name):
                raise ConfigError(f"Invalid clone directory name '{self.clone_dir_name}'")
        if self.mode is Mode.CREATE and self.template is None:
            raise ConfigError("A template source is required to create a project")
        if self.remote_check_delay < 0:
            raise ConfigError("remote_check_delay must not be negative")
        if not self.account_command:
            raise ConfigError("account_command must not be empty")


def default_config_path() -> Path:
    override = os.getenv(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path(user_config_dir(APP_NAME)) / "config.toml"


def load_user_defaults(path: Optional[Path] = None) -> dict:
    """Read the user config file. A missing file yields an empty dict."""
    path = path or default_config_path()
    if not path.is_file():
        return {}
    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Could not parse {path}: {e}")
    for section in ("defaults", "git", "accounts"):
        if section in data and not isinstance(data[section], dict):
            raise ConfigError(f"[{section}] in {path} must be a table")
    return data


def build_config(
    mode: Mode,
    command_name: str,
    output_dir: Optional[str] = None,
    *,
    git_remote_uri: Optional[str] = None,
    clone_dir_name: Optional[str] = None,
    template: Optional[TemplateSource] = None,
    debug: bool = False,
    user_defaults: Optional[dict] = None,
) -> GeneratorConfig:
    """Merge command options over the user defaults file and validate."""
    user_defaults = user_defaults or {}
    defaults = dict(user_defaults.get("defaults", {}))
    git_section = user_defaults.get("git", {})
    accounts_section = user_defaults.get("accounts", {})

    default_output_dir = defaults.pop("output_dir", None)
    output_dir = output_dir or default_output_dir or "."

    try:
        codes = RemoteExitCodes(
            ok=int(git_section.get("remote_ok_code", 0)),
            empty=int(git_section.get("remote_empty_code", 2)),
            unreachable=int(git_section.get("remote_unreachable_code", 128)),
        )
        delay = float(git_section.get("remote_check_delay", 0))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid [git] setting: {e}")

    command = accounts_section.get("command", DEFAULT_ACCOUNT_COMMAND)
    if isinstance(command, str):
        command = command.split()

    if mode is Mode.CREATE and template is None:
        template = TemplateSource(path=BUNDLED_TEMPLATE_DIR)

    return GeneratorConfig(
        mode=mode,
        command_name=command_name,
        output_dir=Path(output_dir),
        git_remote_uri=git_remote_uri,
        clone_dir_name=clone_dir_name,
        template=template,
        remote_check_delay=delay,
        remote_codes=codes,
        account_command=tuple(command),
        answer_defaults=defaults,
        debug=debug,
    )
