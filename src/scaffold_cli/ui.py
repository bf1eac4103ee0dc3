"""Console presentation: banner, step tracker, tables, status lines and the
arrow-key selector. Nothing here decides anything; it only renders."""

from contextlib import contextmanager
from typing import Iterable, Sequence

import readchar
from rich.align import Align
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from .results import MessageType, StatusMessage
from .tasks import TaskStatus

console = Console()

# ASCII Art Banner
BANNER = """
███████╗ ██████╗ █████╗ ███████╗███████╗ ██████╗ ██╗     ██████╗
██╔════╝██╔════╝██╔══██╗██╔════╝██╔════╝██╔═══██╗██║     ██╔══██╗
███████╗██║     ███████║█████╗  █████╗  ██║   ██║██║     ██║  ██║
╚════██║██║     ██╔══██║██╔══╝  ██╔══╝  ██║   ██║██║     ██║  ██║
███████║╚██████╗██║  ██║██║     ██║     ╚██████╔╝███████╗██████╔╝
╚══════╝ ╚═════╝╚═╝  ╚═╝╚═╝     ╚═╝      ╚═════╝ ╚══════╝╚═════╝
"""

TAGLINE = "Scaffold - create or clone projects interactively"


def show_banner(tagline: str = TAGLINE, target: Console | None = None):
    """Display the ASCII art banner."""
    target = target or console
    # Create gradient effect with different colors
    banner_lines = BANNER.strip().split('\n')
    colors = ["bright_blue", "blue", "cyan", "bright_cyan", "white", "bright_white"]

    styled_banner = Text()
    for i, line in enumerate(banner_lines):
        color = colors[i % len(colors)]
        styled_banner.append(line + "\n", style=color)

    target.print(Align.center(styled_banner))
    target.print(Align.center(Text(tagline, style="italic bright_yellow")))
    target.print()


class StepTracker:
    """Track and render hierarchical steps as a tree.
    Supports live auto-refresh via an attached refresh callback.
    """
    def __init__(self, title: str):
        self.title = title
        self.steps = []  # list of dicts: {key, label, status, detail, parent}
        self._refresh_cb = None  # callable to trigger UI refresh

    def attach_refresh(self, cb):
        self._refresh_cb = cb

    def add(self, key: str, label: str, parent: str | None = None):
        if key not in [s["key"] for s in self.steps]:
            self.steps.append({"key": key, "label": label, "status": TaskStatus.PENDING, "detail": "", "parent": parent})
            self._maybe_refresh()

    def complete(self, key: str, detail: str = ""):
        self.update(key, TaskStatus.SUCCEEDED, detail)

    def error(self, key: str, detail: str = ""):
        self.update(key, TaskStatus.FAILED, detail)

    def status_of(self, key: str) -> TaskStatus | None:
        for s in self.steps:
            if s["key"] == key:
                return s["status"]
        return None

    def update(self, key: str, status: TaskStatus, detail: str = ""):
        for s in self.steps:
            if s["key"] == key:
                s["status"] = status
                if detail:
                    s["detail"] = detail
                self._maybe_refresh()
                return
        # If not present, add it
        self.steps.append({"key": key, "label": key, "status": status, "detail": detail, "parent": None})
        self._maybe_refresh()

    def _maybe_refresh(self):
        if self._refresh_cb:
            self._refresh_cb()

    @staticmethod
    def _line(step) -> str:
        label = step["label"]
        detail_text = step["detail"].strip() if step["detail"] else ""
        status = step["status"]
        if status == TaskStatus.SUCCEEDED:
            symbol = "[green]●[/green]"
        elif status == TaskStatus.PENDING:
            symbol = "[green dim]○[/green dim]"
        elif status == TaskStatus.RUNNING:
            symbol = "[cyan]○[/cyan]"
        elif status == TaskStatus.FAILED:
            symbol = "[red]●[/red]"
        elif status == TaskStatus.SKIPPED:
            symbol = "[yellow]○[/yellow]"
        else:
            symbol = " "

        if status == TaskStatus.PENDING:
            # Entire line light gray (pending)
            if detail_text:
                return f"{symbol} [bright_black]{label} ({detail_text})[/bright_black]"
            return f"{symbol} [bright_black]{label}[/bright_black]"
        # Label white, detail (if any) light gray in parentheses
        if detail_text:
            return f"{symbol} [white]{label}[/white] [bright_black]({detail_text})[/bright_black]"
        return f"{symbol} [white]{label}[/white]"

    def render(self):
        tree = Tree(f"[cyan]{self.title}[/cyan]", guide_style="grey50")
        nodes = {}
        for step in self.steps:
            parent_node = nodes.get(step["parent"], tree)
            nodes[step["key"]] = parent_node.add(self._line(step))
        return tree


def get_key():
    """Get a single keypress in a cross-platform way using readchar."""
    key = readchar.readkey()

    # Arrow keys
    if key == readchar.key.UP:
        return 'up'
    if key == readchar.key.DOWN:
        return 'down'

    # Enter/Return
    if key == readchar.key.ENTER:
        return 'enter'

    # Escape
    if key == readchar.key.ESC:
        return 'escape'

    # Ctrl+C
    if key == readchar.key.CTRL_C:
        raise KeyboardInterrupt

    return key


def select_with_arrows(options: dict, prompt_text: str = "Select an option", default_key: str = None,
                       target: Console | None = None) -> str:
    """
    Interactive selection using arrow keys with Rich Live display.

    Args:
        options: Dict with option values as keys and display names as values
        prompt_text: Text to show above the options
        default_key: Default option key to start with
        target: Console to draw on (the shared one by default)

    Returns:
        Selected option key
    """
    target = target or console
    option_keys = list(options.keys())
    if default_key and default_key in option_keys:
        selected_index = option_keys.index(default_key)
    else:
        selected_index = 0

    selected_key = None

    def create_selection_panel():
        """Create the selection panel with current selection highlighted."""
        table = Table.grid(padding=(0, 2))
        table.add_column(style="cyan", justify="left", width=3)
        table.add_column(style="white", justify="left")

        for i, key in enumerate(option_keys):
            if i == selected_index:
                table.add_row("▶", f"[cyan]{options[key]}[/cyan]")
            else:
                table.add_row(" ", f"[white]{options[key]}[/white]")

        table.add_row("", "")
        table.add_row("", "[dim]Use ↑/↓ to navigate, Enter to select, Esc to cancel[/dim]")

        return Panel(
            table,
            title=f"[bold]{prompt_text}[/bold]",
            border_style="cyan",
            padding=(1, 2)
        )

    target.print()

    # Escape and Ctrl+C both raise KeyboardInterrupt
    with Live(create_selection_panel(), console=target, transient=True, auto_refresh=False) as live:
        while True:
            try:
                key = get_key()
                if key == 'up':
                    selected_index = (selected_index - 1) % len(option_keys)
                elif key == 'down':
                    selected_index = (selected_index + 1) % len(option_keys)
                elif key == 'enter':
                    selected_key = option_keys[selected_index]
                    break
                elif key == 'escape':
                    raise KeyboardInterrupt

                live.update(create_selection_panel(), refresh=True)

            except KeyboardInterrupt:
                target.print("\n[yellow]Selection cancelled[/yellow]")
                raise

    target.print(f"[cyan]{prompt_text}[/cyan] {options[selected_key]}")
    return selected_key


def render_key_value_table(rows: Iterable[tuple[str, str]]) -> Table:
    table = Table.grid(padding=(0, 1))
    table.add_column(justify="left", style="yellow")
    table.add_column(justify="left", style="white")
    for label, value in rows:
        table.add_row(label, str(value))
    return table


_MESSAGE_STYLES = {
    MessageType.SUCCESS: ("bold", "green"),
    MessageType.ERROR: ("bold red", "bold"),
    MessageType.WARNING: ("bold", "yellow"),
    MessageType.INFO: ("bold", ""),
}


def format_status_message(message: StatusMessage, pad: int = 0, separator: str = " : ") -> str:
    title_style, body_style = _MESSAGE_STYLES[message.type]
    title = f"[{title_style}]{message.title.ljust(pad)}{separator}[/{title_style}]"
    body = message.message.strip()
    return f"{title}[{body_style}]{body}[/{body_style}]" if body_style else f"{title}{body}"


class ConsoleReporter:
    """Report sink used by the generator. Fire-and-forget."""

    def __init__(self, target: Console | None = None):
        self.console = target or console

    def print_banner(self, text: str = TAGLINE):
        show_banner(text, self.console)

    def print_line(self, text: str = ""):
        self.console.print(text)

    def print_table(self, rows: Sequence[tuple[str, str]], title: str | None = None):
        self.console.print()
        if title:
            self.console.print(Panel(render_key_value_table(rows), title=title, border_style="cyan", padding=(1, 2)))
        else:
            self.console.print(render_key_value_table(rows))
        self.console.print()

    def print_status_line(self, message: StatusMessage):
        self.console.print(format_status_message(message))

    def print_status_messages(self, messages: Sequence[StatusMessage], separator: str = " : "):
        longest_title = max((len(m.title) for m in messages), default=0)
        header = "Final Status".ljust(longest_title + len(separator) - 1)
        self.console.print()
        self.console.print(f"[reverse]{header}[/reverse]")
        for message in messages:
            self.console.print(format_status_message(message, longest_title, separator))

    @contextmanager
    def tracker(self, title: str):
        """Yield a StepTracker rendered live; the final tree stays on screen."""
        tracker = StepTracker(title)
        # Use transient so live tree is replaced by the final static render (avoids duplicate output)
        with Live(tracker.render(), console=self.console, refresh_per_second=8, transient=True) as live:
            tracker.attach_refresh(lambda: live.update(tracker.render()))
            try:
                yield tracker
            finally:
                tracker.attach_refresh(None)
        self.console.print(tracker.render())
