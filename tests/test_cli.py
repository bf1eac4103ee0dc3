from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from fakes import RecordingReporter
from scaffold_cli import app, run_generator
from scaffold_cli.config import Mode
from scaffold_cli.results import StatusMessage
from scaffold_cli.status import GeneratorStatus

runner = CliRunner()

URI = "https://github.com/my-org/my-repo.git"


def _invoke(args, exit_code=0):
    with patch("scaffold_cli.load_user_defaults", return_value={}), \
         patch("scaffold_cli.run_generator", return_value=exit_code) as run:
        result = runner.invoke(app, args)
    return result, run


def test_create_builds_config_and_exits_with_status_code(tmp_path):
    result, run = _invoke(["create", "--output-dir", str(tmp_path)])

    assert result.exit_code == 0
    generator = run.call_args.args[0]
    assert generator.config.mode is Mode.CREATE
    assert generator.config.command_name == "scaffold create"
    assert generator.config.output_dir == tmp_path.resolve()


def test_create_with_local_template(tmp_path):
    template = tmp_path / "template"
    template.mkdir()
    result, run = _invoke(["create", "--output-dir", str(tmp_path), "--template-dir", str(template)])

    assert result.exit_code == 0
    assert run.call_args.args[0].config.template.path == template.resolve()


def test_create_rejects_two_template_sources(tmp_path):
    result, run = _invoke(["create", "--template-dir", str(tmp_path), "--template-repo", "org/name"])

    assert result.exit_code == 1
    run.assert_not_called()


def test_create_rejects_malformed_template_repo():
    result, run = _invoke(["create", "--template-repo", "no-slash"])

    assert result.exit_code == 1
    run.assert_not_called()


def test_clone_passes_uri_and_dir_name(tmp_path):
    result, run = _invoke(["clone", URI, "--output-dir", str(tmp_path), "--dir-name", "work"])

    assert result.exit_code == 0
    config = run.call_args.args[0].config
    assert config.mode is Mode.CLONE
    assert config.git_remote_uri == URI
    assert config.clone_dir_name == "work"


def test_clone_aborted_run_exits_with_one(tmp_path):
    result, _ = _invoke(["clone", URI, "--output-dir", str(tmp_path)], exit_code=1)
    assert result.exit_code == 1


def test_clone_with_invalid_uri_fails_before_running():
    result, run = _invoke(["clone", "not-a-uri"])

    assert result.exit_code == 1
    assert "GIT_REMOTE_URI" in result.output
    run.assert_not_called()


def test_run_generator_prints_final_status():
    status = GeneratorStatus()
    status.complete([StatusMessage.success("Command Succeeded", "done")])

    async def run():
        return status

    generator = MagicMock()
    generator.run = run
    reporter = RecordingReporter()

    assert run_generator(generator, reporter) == 0
    assert reporter.final_messages == status.messages


def test_check_reports_missing_tools():
    with patch("scaffold_cli.load_user_defaults", return_value={}), \
         patch("scaffold_cli.shutil.which", side_effect=lambda tool: None if tool == "sf" else f"/usr/bin/{tool}"):
        result = runner.invoke(app, ["check"])

    assert result.exit_code == 1
    assert "Tip: Install 'sf'" in result.output


def test_check_all_tools_present():
    with patch("scaffold_cli.load_user_defaults", return_value={"accounts": {"command": "my-cli orgs"}}), \
         patch("scaffold_cli.shutil.which", return_value="/usr/bin/tool") as which:
        result = runner.invoke(app, ["check"])

    assert result.exit_code == 0
    assert "ready to use" in result.output
    assert {call.args[0] for call in which.call_args_list} == {"git", "my-cli"}
