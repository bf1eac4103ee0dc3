"""The run loop.

``ProjectGenerator.run()`` walks six phases in a fixed order::

    initializing -> prompting -> configuring -> writing -> install -> end

Every phase after ``initializing`` starts by checking ``status.is_aborted()``
and returns immediately when it is set; a phase that is already running is
never interrupted. Collaborator failures are turned into exactly one
``status.abort()`` at the phase that saw them. ``end`` always runs and
decides whether the run completed.
"""

import logging
from pathlib import Path
from typing import Any, Optional

from .accounts import AccountDirectory
from .config import VERSION, GeneratorConfig, Mode
from .errors import ConfigError, InterviewError
from .git import GitGateway, get_repo_name_from_uri
from .interview import Interview, InterviewResult, Prompter, RichPrompter
from .log import get_logger
from .questions import CREATE_DEFAULTS, clone_questions, clone_summary, create_questions, create_summary
from .results import StatusMessage
from .setup_tasks import SetupResult, run_setup_tasks
from .status import GeneratorStatus
from .tasks import TaskRunner
from .templates import TemplateMaterializer
from .ui import ConsoleReporter

DEFAULT_PACKAGE_DIRECTORY = "app"


def _error_text(error: Exception) -> str:
    return getattr(error, "message", None) or str(error) or type(error).__name__


class ProjectGenerator:
    def __init__(
        self,
        config: GeneratorConfig,
        status: Optional[GeneratorStatus] = None,
        prompter: Optional[Prompter] = None,
        reporter: Optional[ConsoleReporter] = None,
        git: Optional[GitGateway] = None,
        accounts: Optional[AccountDirectory] = None,
        materializer: Optional[TemplateMaterializer] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.status = status or GeneratorStatus()
        self.logger = logger or get_logger("generator")
        self.prompter = prompter or RichPrompter()
        self.reporter = reporter or ConsoleReporter()
        self.git = git or GitGateway(config.remote_codes, self.logger)
        self.accounts = accounts or AccountDirectory(config.account_command, self.logger)
        self.materializer = materializer or TemplateMaterializer(logger=self.logger)

        self.setup = SetupResult()
        self.default_answers = self._seed_default_answers()
        self.interview: Optional[Interview] = None
        self.answers: dict[str, Any] = {}
        self.context: dict[str, Any] = {}
        self.destination: Optional[Path] = None
        self.local_config_written = False
        self.writing_complete = False
        self.install_complete = False

        self.logger.debug("generator created: mode=%s command=%s", config.mode.value, config.command_name)
        self.logger.debug("default answers: %s", self.default_answers)

    @property
    def command_name(self) -> str:
        return self.config.command_name

    def _seed_default_answers(self) -> dict[str, Any]:
        if self.config.mode is Mode.CREATE:
            defaults = dict(CREATE_DEFAULTS)
        else:
            defaults = {"git_remote_uri": self.config.git_remote_uri}
        defaults.update(self.config.answer_defaults)
        defaults["target_directory"] = str(self.config.output_dir)
        return defaults

    async def run(self) -> GeneratorStatus:
        self.status.start()
        await self.initializing()
        await self.prompting()
        self.configuring()
        self.writing()
        self.install()
        self.end()
        return self.status

    # ─── initializing ──────────────────────────────────────────────────────

    async def initializing(self):
        verb = "Generator" if self.config.mode is Mode.CREATE else "Cloning Tool"
        self.reporter.print_banner(f"Project {verb} v{VERSION}")
        git_remote_uri = self.config.git_remote_uri if self.config.mode is Mode.CLONE else None
        try:
            with self.reporter.tracker(f"{self.command_name} pre-flight checks") as tracker:
                runner = TaskRunner(tracker, self.logger)
                self.setup = await run_setup_tasks(
                    runner,
                    self.command_name,
                    self.git,
                    self.accounts,
                    git_remote_uri=git_remote_uri,
                    delay=self.config.remote_check_delay,
                )
        except Exception as e:
            self.logger.debug("setup tasks failed: %r", e)
            self.status.abort(StatusMessage.error(
                "Initialization Error",
                f"{self.command_name} command aborted because one or more initialization tasks failed: {_error_text(e)}",
            ))
            return
        self.logger.debug("hub accounts: %s", [a.username for a in self.setup.hub_accounts])
        self.reporter.print_line("\n[bold]Initialization Complete[/bold]\n")

    # ─── prompting ─────────────────────────────────────────────────────────

    def _display_answers(self, answers: dict[str, Any]):
        if self.config.mode is Mode.CREATE:
            rows = create_summary(answers, self.setup.hub_choices)
        else:
            rows = clone_summary(answers, self.setup.hub_choices, self.config.git_remote_uri)
        self.reporter.print_table(rows)

    def build_interview(self) -> Interview:
        if self.config.mode is Mode.CREATE:
            builder = create_questions(self.setup.hub_choices)
            confirm_message = "Create a new project based on the above settings?"
        else:
            builder = clone_questions(self.setup.hub_choices)
            confirm_message = "Clone the project based on the above settings?"
        return Interview(
            self.default_answers,
            builder,
            self.prompter,
            display=self._display_answers,
            confirm_message=confirm_message,
            logger=self.logger,
        )

    async def prompting(self):
        if self.status.is_aborted():
            self.logger.debug("status is aborted, skipping prompting")
            return
        self.interview = self.build_interview()
        try:
            result = self.interview.run()
        except (KeyboardInterrupt, EOFError):
            result = InterviewResult(proceed=False)
        except InterviewError as e:
            self.status.abort(StatusMessage.error("Interview Error", _error_text(e)))
            return
        self.reporter.print_line()
        if not result.proceed:
            self.status.abort(StatusMessage.error("Command Aborted", f"{self.command_name} command canceled by user"))
            return
        self.answers = result.answers

    # ─── configuring ───────────────────────────────────────────────────────

    def configuring(self):
        if self.status.is_aborted():
            self.logger.debug("status is aborted, skipping configuring")
            return
        try:
            if self.config.mode is Mode.CREATE:
                self._configure_create()
            else:
                self._configure_clone()
            self._ensure_destination_is_free(self.destination)
        except Exception as e:
            self.logger.debug("configuring failed: %r", e)
            self.status.abort(StatusMessage.error(getattr(e, "title", "Configuration Error"), _error_text(e)))
            return
        self.logger.debug("destination: %s", self.destination)
        self.logger.debug("substitution context: %s", self.context)

    def _configure_create(self):
        answers = self.answers
        if answers.get("is_creating_package"):
            package_directory = answers["namespace_prefix"]
            project_type = "packaged"
        else:
            package_directory = DEFAULT_PACKAGE_DIRECTORY
            project_type = "unpackaged"
        self.destination = Path(answers["target_directory"]) / answers["project_name"]
        self.context = {
            **answers,
            "package_directory": package_directory,
            "project_type": project_type,
            "command_name": self.command_name,
            "tool_version": VERSION,
        }
        if not answers.get("is_creating_package"):
            # Package settings only apply to packaged projects
            self.context.update(namespace_prefix="", package_name="")

    def _configure_clone(self):
        repo_name = self.config.clone_dir_name or get_repo_name_from_uri(self.config.git_remote_uri)
        self.destination = Path(self.answers["target_directory"]) / repo_name
        self.context = {
            **self.answers,
            "git_remote_uri": self.config.git_remote_uri,
            "repo_name": repo_name,
            "command_name": self.command_name,
            "tool_version": VERSION,
        }

    @staticmethod
    def _ensure_destination_is_free(destination: Path):
        if destination.exists() and (not destination.is_dir() or any(destination.iterdir())):
            raise ConfigError(
                f"Destination path '{destination}' already exists and is not an empty directory",
                title="Destination Conflict",
            )

    # ─── writing ───────────────────────────────────────────────────────────

    def writing(self):
        if self.status.is_aborted():
            self.logger.debug("status is aborted, skipping writing")
            return
        if self.config.mode is Mode.CREATE:
            self._write_from_template()
        else:
            self._write_from_clone()

    def _write_from_template(self):
        self.reporter.print_line(f"[blue]Creating project from {self.config.template.describe()}[/blue]")
        try:
            written = self.materializer.materialize(self.config.template, self.destination, self.context)
        except Exception as e:
            self.logger.debug("materialize failed: %r", e)
            self.status.abort(StatusMessage.error("Template Write Error", _error_text(e)))
            return
        success = StatusMessage.success("Project Created", f"{len(written)} file(s) written to {self.destination}")
        self.reporter.print_status_line(success)
        self.status.add_message(success)
        self.writing_complete = True

    def _write_from_clone(self):
        target_directory = self.answers["target_directory"]
        self.reporter.print_line(f"[blue]Cloning project to {target_directory}[/blue]")
        try:
            self.git.clone(self.config.git_remote_uri, Path(target_directory), self.destination.name)
        except Exception as e:
            self.logger.debug("clone failed: %r", e)
            self.status.abort(StatusMessage.error("Git Clone Error", _error_text(e)))
            return
        self.reporter.print_status_line(StatusMessage.success("Success", f"Git repo cloned to {target_directory}"))
        self.status.add_message(StatusMessage.success(
            "Project Cloned Successfully", f"Project cloned to {self.destination}",
        ))

        template_file = self.destination / self.config.local_config_template
        if template_file.is_file():
            self.reporter.print_line("[blue]Customizing project files...[/blue]")
            try:
                self.materializer.render_file(
                    template_file, self.destination / self.config.local_config_target, self.context,
                )
            except Exception as e:
                self.logger.debug("local config render failed: %r", e)
                self.status.abort(StatusMessage.error("Template Write Error", _error_text(e)))
                return
            self.local_config_written = True
        self.writing_complete = True

    # ─── install ───────────────────────────────────────────────────────────

    def install(self):
        if self.status.is_aborted():
            self.logger.debug("status is aborted, skipping install")
            return
        if not self.writing_complete:
            return
        if self.config.mode is Mode.CREATE:
            self._install_git_repository()
        else:
            self._install_clone_notes()
        self.install_complete = True

    def _warn(self, title: str, message: str):
        self.logger.warning("%s: %s", title, message)
        self.status.add_message(StatusMessage.warning(title, message))

    def _install_git_repository(self):
        if not self.answers.get("is_initializing_git"):
            return
        if not self.git.is_installed():
            self._warn("Could Not Initialize Git", "git executable not found in your environment")
            return
        destination = self.destination
        if self.git.is_repo(destination):
            self.status.add_message(StatusMessage.info(
                "Git Repository Exists", f"{destination} is already inside a git repository, skipping git setup",
            ))
            return
        try:
            self.git.init(destination)
        except Exception as e:
            self._warn("Git Init Failed", _error_text(e))
            return
        self.status.add_message(StatusMessage.success("Git Repository Initialized", str(destination)))

        try:
            self.git.add_all(destination)
            self.git.commit(destination, f"Initial commit after running {self.command_name}")
        except Exception as e:
            self._warn("Initial Commit Failed", f"Attempt to stage and commit project files failed: {_error_text(e)}")
        else:
            self.status.add_message(StatusMessage.success(
                "Initial Commit", "Staged project files and executed initial commit",
            ))

        if self.answers.get("has_git_remote") and self.answers.get("git_remote_uri"):
            try:
                self.git.remote_add_origin(destination, self.answers["git_remote_uri"])
            except Exception as e:
                self._warn("Git Remote Failed", _error_text(e))
            else:
                self.status.add_message(StatusMessage.success(
                    "Git Remote Added", f"origin -> {self.answers['git_remote_uri']}",
                ))

    def _install_clone_notes(self):
        if self.local_config_written:
            self.status.add_message(StatusMessage.success(
                "Local Config Created",
                f"{self.config.local_config_target} created and customized successfully",
            ))
        else:
            self.status.add_message(StatusMessage.info(
                "Local Config Skipped",
                f"No {self.config.local_config_template} found in the cloned project",
            ))
        self.reporter.print_line(f"[blue]Project files ready at {self.destination}[/blue]")

    # ─── end ───────────────────────────────────────────────────────────────

    def end(self):
        if self.status.is_aborted():
            self.logger.debug("status is aborted, nothing to finalize")
            return
        if self.install_complete:
            self.status.complete([StatusMessage.success(
                "Command Succeeded", f"{self.command_name} completed successfully",
            )])
        else:
            action = "creating" if self.config.mode is Mode.CREATE else "cloning"
            self.status.abort(StatusMessage.error(
                "Command Failed", f"{self.command_name} exited without {action} a project",
            ))
