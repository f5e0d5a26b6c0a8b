# -*- coding: utf-8 -*-

import random
from typing import List, Optional, Sequence, Tuple

from rich import box
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from core.session_engine import Phase, Progress
from domain.models import SessionConfig, Task
from services.notes_service import format_datetime
from services.stats_service import StatsSummary
from ui.keyboard import KEY_HINT

QUOTES = (
    "The secret of getting ahead is getting started. - Mark Twain",
    "It always seems impossible until it's done. - Nelson Mandela",
    "Don't watch the clock; do what it does. Keep going. - Sam Levenson",
    "The only way to do great work is to love what you do. - Steve Jobs",
    "Success is not final, failure is not fatal: it is the courage to continue that counts. - Winston Churchill",
)

PHASE_TITLES = {
    Phase.WORK: "Deep Work",
    Phase.SHORT_BREAK: "Short Break",
    Phase.LONG_BREAK: "Long Break",
}

MENU_ITEMS = (
    ("a", "Add task", "green"),
    ("s", "Start Pomodoro", "yellow"),
    ("c", "Complete task", "blue"),
    ("d", "Delete task", "red"),
    ("n", "Open notes", "magenta"),
    ("u", "Update config", "cyan"),
    ("v", "View statistics", "bright_blue"),
    ("q", "Quit", "bright_red"),
)


def format_time(seconds: int) -> str:
    hours, rem = divmod(max(0, int(seconds)), 3600)
    return f"{hours}h {rem // 60}m"


def format_clock(seconds: int) -> str:
    m, s = divmod(max(0, int(seconds)), 60)
    return f"{m:02d}:{s:02d}"


def motivation_quote(rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(QUOTES)


# ----- dashboard -----
def stats_panel(summary: StatsSummary) -> Panel:
    lines = [
        f"[cyan]Total tasks:[/cyan] {summary.total_tasks}",
        f"[green]Completed tasks:[/green] {summary.completed_tasks}",
        f"[yellow]Completion rate:[/yellow] {summary.completion_rate}%",
        f"[magenta]Total Pomodoros:[/magenta] {summary.total_pomodoros}",
        f"[blue]Total time:[/blue] {format_time(summary.total_time_sec)}",
    ]
    return Panel(
        "\n".join(lines),
        title="[bold cyan]Stats[/bold cyan]",
        title_align="left",
        box=box.HEAVY,
        padding=(1, 2),
    )


def tasks_table(tasks: Sequence[Task]) -> Panel:
    if not tasks:
        return Panel(
            "[yellow]No tasks available. Add a task to get started![/yellow]",
            title="Tasks",
            title_align="left",
            padding=(1, 2),
        )

    table = Table(box=box.SIMPLE_HEAVY)
    for header in ("ID", "Status", "Title", "Pomodoros", "Total Time", "Current Time", "Created At"):
        table.add_column(header)
    for t in tasks:
        color = "green" if t.is_completed() else "yellow"
        table.add_row(
            str(t.id),
            f"[{color}]{t.status.value}[/{color}]",
            Text(t.title),
            str(t.pomodoros_completed),
            format_time(t.total_pomodoro_time),
            format_time(t.current_pomodoro_time),
            format_datetime(t.created_at),
        )
    return Panel(table, title="Tasks", title_align="left")


def menu_panel() -> Panel:
    items = " | ".join(f"[{color}]{key}[/{color}] - {desc}" for key, desc, color in MENU_ITEMS)
    return Panel(items, title="Menu", title_align="left", padding=(1, 2))


def config_panel(cfg: SessionConfig) -> Panel:
    lines = [
        f"Work duration: {cfg.work_duration // 60} minutes",
        f"Break duration: {cfg.break_duration // 60} minutes",
        f"Long break duration: {cfg.long_break_duration // 60} minutes",
        f"Pomodoros before long break: {cfg.pomodoros_before_long_break}",
    ]
    return Panel("\n".join(lines), title="Configuration", title_align="left", border_style="cyan")


def render_dashboard(console: Console, summary: StatsSummary, tasks: Sequence[Task]) -> None:
    console.print(Text("POMOTERM", style="bold red"))
    console.print(stats_panel(summary))
    console.print(tasks_table(tasks))
    console.print(menu_panel())


# ----- statistics -----
def ascii_bar_chart(data: List[Tuple[str, int]], width: int = 50) -> str:
    """One row per (label, value): label padded to 10, bar scaled to max value."""
    if not data:
        return ""
    max_value = max(v for _, v in data)
    rows = []
    for label, value in data:
        filled = round(value / max_value * width) if max_value > 0 else 0
        bar = "█" * filled + "░" * (width - filled)
        rows.append(f"{label.ljust(10)} |{bar}| {value}")
    return "\n".join(rows)


def productivity_panel(data: List[Tuple[str, int]]) -> Panel:
    title = "[bold green]Last 7 Days Productivity[/bold green]"
    if not data:
        body = Text("No productivity data available for the last 7 days.", style="yellow")
    else:
        body = Text(ascii_bar_chart(data), style="green")
    return Panel(body, title=title, title_align="left", box=box.HEAVY, padding=(1, 2))


def completion_panel(rate: float) -> Panel:
    content = Group(
        Text.from_markup(f"[yellow]Task Completion Rate:[/yellow] {rate}%"),
        ProgressBar(total=100, completed=rate, width=50),
    )
    return Panel(
        content,
        title="[bold yellow]Task Completion Rate[/bold yellow]",
        title_align="left",
        box=box.HEAVY,
        padding=(1, 2),
    )


def render_statistics(console: Console, summary: StatsSummary, days: List[Tuple[str, int]]) -> None:
    console.print(Text("STATISTICS", style="bold"))
    console.print(stats_panel(summary))
    console.print(productivity_panel(days))
    console.print(completion_panel(summary.completion_rate))


# ----- live session -----
class SessionView:
    """
    Live countdown panel. Receives one Progress per tick from the engine
    and redraws in place; pass update as the timer service progress callback.
    """

    def __init__(
        self,
        console: Console,
        task: Task,
        cfg: SessionConfig,
        quote: Optional[str] = None,
    ):
        self.console = console
        self.task = task
        self.cfg = cfg
        self.quote = quote
        self._live: Optional[Live] = None

    def __enter__(self) -> "SessionView":
        self._live = Live(
            self._render(None),
            console=self.console,
            auto_refresh=False,
            transient=True,
        )
        self._live.start()
        return self

    def __exit__(self, *exc) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None

    def _duration_for(self, phase: Phase) -> int:
        if phase == Phase.LONG_BREAK:
            return self.cfg.long_break_duration
        if phase == Phase.SHORT_BREAK:
            return self.cfg.break_duration
        return self.cfg.work_duration

    def _render(self, progress: Optional[Progress]) -> Panel:
        phase = progress.phase if progress else Phase.WORK
        total = self._duration_for(phase)
        remaining = progress.seconds_remaining if progress else total

        parts = [
            Text(f"Task: {self.task.title}", style="cyan"),
            Text(f"{PHASE_TITLES[phase]} - time left: {format_clock(remaining)}", style="yellow"),
            ProgressBar(total=total, completed=total - remaining, width=30),
        ]
        if self.quote:
            parts.insert(1, Text(self.quote, style="bright_green"))
        if progress and progress.paused:
            parts.append(Text("PAUSED", style="bold yellow"))
        parts.append(Text(KEY_HINT, style="dim"))
        return Panel(Group(*parts), title="POMODORO", title_align="left", padding=(1, 2))

    def update(self, progress: Progress) -> None:
        if self._live is not None:
            self._live.update(self._render(progress), refresh=True)
