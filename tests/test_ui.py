import io

from rich.console import Console

from scaffold_cli.results import StatusMessage
from scaffold_cli.tasks import TaskStatus
from scaffold_cli.ui import ConsoleReporter, StepTracker, format_status_message


def _reporter():
    buffer = io.StringIO()
    return ConsoleReporter(Console(file=buffer, width=100, color_system=None)), buffer


def test_step_tracker_nests_children_and_tracks_status():
    tracker = StepTracker("Setup")
    tracker.add("parent", "Parent")
    tracker.add("child", "Child", parent="parent")
    tracker.add("child", "Duplicate ignored")
    tracker.update("parent", TaskStatus.RUNNING)
    tracker.error("child", "broke")

    assert [s["label"] for s in tracker.steps] == ["Parent", "Child"]
    assert tracker.status_of("parent") is TaskStatus.RUNNING
    assert tracker.status_of("child") is TaskStatus.FAILED
    assert tracker.status_of("missing") is None

    tree = tracker.render()
    assert len(tree.children) == 1
    assert len(tree.children[0].children) == 1


def test_step_tracker_refresh_callback():
    calls = []
    tracker = StepTracker("Setup")
    tracker.attach_refresh(lambda: calls.append(1))
    tracker.add("a", "A")
    tracker.complete("a", "done")
    assert len(calls) == 2


def test_format_status_message_pads_title():
    text = format_status_message(StatusMessage.warning("Warn", "careful"), pad=8)
    assert "Warn     : " in text
    assert "careful" in text


def test_print_status_messages_has_header_and_all_messages():
    reporter, buffer = _reporter()
    reporter.print_status_messages([
        StatusMessage.success("Project Created", "3 file(s)"),
        StatusMessage.error("Oops", "broken"),
    ])
    output = buffer.getvalue()
    assert "Final Status" in output
    assert "Project Created : 3 file(s)" in output
    assert "Oops            : broken" in output


def test_print_table_renders_rows():
    reporter, buffer = _reporter()
    reporter.print_table([("Project Name:", "demo"), ("Target Directory:", "/tmp")])
    output = buffer.getvalue()
    assert "Project Name:" in output and "demo" in output


def test_tracker_context_prints_final_tree():
    reporter, buffer = _reporter()
    with reporter.tracker("Checks") as tracker:
        tracker.add("git", "Looking for Git")
        tracker.complete("git", "found")
    assert "Looking for Git" in buffer.getvalue()
    assert tracker._refresh_cb is None
