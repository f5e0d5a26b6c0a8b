# -*- coding: utf-8 -*-

"""
Command-line interface for pomoterm.

Every command works on the AppContext stored in click's ctx.obj; the group
builds it from environment settings unless a caller (tests) passes one in.
"""

import logging
import sys
from contextlib import nullcontext
from typing import Callable, Dict, Optional

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from core.logging_setup import setup_logging
from core.session_engine import ExitReason, Phase, SessionResult, TaskAlreadyCompleted
from core.settings import load_settings
from core.signals import SignalQueue
from ui.keyboard import KeypressListener
from ui.render import (
    SessionView,
    config_panel,
    format_clock,
    format_time,
    motivation_quote,
    render_dashboard,
    render_statistics,
    tasks_table,
)

console = Console()
logger = logging.getLogger(__name__)


def _fail(e: Exception) -> click.ClickException:
    return click.ClickException(str(e))


def _listener(app):
    """Keypress controls only make sense on a real terminal."""
    if isinstance(app.signals, SignalQueue) and sys.stdin.isatty():
        app.signals.clear()
        return KeypressListener(app.signals)
    return nullcontext()


@click.group(invoke_without_command=True)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """pomoterm - Pomodoro-powered task tracker for the terminal."""
    if ctx.obj is None:
        from app import build_context  # local import to avoid cycle

        settings = load_settings()
        setup_logging(
            log_dir=settings.log_dir,
            console_level=logging.DEBUG if verbose else logging.WARNING,
        )
        ctx.obj = build_context(settings)
        ctx.call_on_close(ctx.obj.db.close)

    if ctx.invoked_subcommand is None:
        ctx.invoke(menu)


# ----- tasks -----
@cli.command()
@click.argument("title", nargs=-1, required=True)
@click.pass_obj
def add(app, title) -> None:
    """Add a task."""
    try:
        task = app.tasks.create_task(" ".join(title))
    except ValueError as e:
        raise _fail(e)
    console.print(f"[green]Task added successfully![/green] (id {task.id})")


@cli.command("list")
@click.pass_obj
def list_cmd(app) -> None:
    """Show all tasks."""
    console.print(tasks_table(app.tasks.list_tasks()))


@cli.command()
@click.argument("task_id", type=int)
@click.pass_obj
def complete(app, task_id: int) -> None:
    """Mark a task as complete."""
    try:
        app.tasks.complete_task(task_id)
    except ValueError as e:
        raise _fail(e)
    console.print("[green]Task marked as complete![/green]")


@cli.command()
@click.argument("task_id", type=int)
@click.pass_obj
def delete(app, task_id: int) -> None:
    """Delete a task and its session log."""
    try:
        app.tasks.delete_task(task_id)
    except ValueError as e:
        raise _fail(e)
    console.print("[green]Task deleted successfully![/green]")


# ----- pomodoro -----
@cli.command()
@click.argument("task_id", type=int)
@click.option(
    "--notes/--no-notes",
    "ask_notes",
    default=True,
    help="Offer to add notes after a completed pomodoro",
)
@click.pass_obj
def start(app, task_id: int, ask_notes: bool) -> None:
    """Start a pomodoro for a task."""
    try:
        task = app.tasks.get_task(task_id)
        cfg = app.config.load()
    except ValueError as e:
        raise _fail(e)
    if task.is_completed():
        raise click.ClickException("Cannot work on completed tasks.")

    view = SessionView(console, task, cfg, quote=motivation_quote())
    app.timer.set_on_progress(view.update)
    with view, _listener(app):
        result = app.timer.run(task_id, cfg)

    if isinstance(result, TaskAlreadyCompleted):
        raise click.ClickException("Cannot work on completed tasks.")

    _report(result)
    if result.reason == ExitReason.EXPIRED and ask_notes:
        if click.confirm("Would you like to add notes for this session?", default=False):
            text = click.edit("")
            app.notes.append_session_notes(task, text or "")
            console.print("[green]Notes added successfully![/green]")
    console.print(f"Notes file: {app.notes.notes_path(task)}")


def _report(result: SessionResult) -> None:
    if result.reason == ExitReason.STOPPED_BY_USER:
        console.print("[red]Timer stopped.[/red]")
        console.print(f"Time logged: {format_clock(result.elapsed)}")
        return

    if result.reason == ExitReason.COMPLETED_BY_USER:
        console.print("[green]Task marked as complete![/green]")
        console.print(f"Time logged: {format_clock(result.elapsed)}")
        return

    console.print(Panel("[green]Pomodoro completed! Take a break.[/green]", border_style="green"))
    if result.break_phase == Phase.LONG_BREAK:
        console.print("[blue]Time for a long break![/blue]")
    if result.break_aborted:
        console.print("[yellow]Break skipped.[/yellow]")
    else:
        console.print(Panel("[yellow]Break over. Ready for the next Pomodoro?[/yellow]", border_style="yellow"))


# ----- notes -----
@cli.command()
@click.argument("task_id", type=int)
@click.option("--show", is_flag=True, help="Print the notes instead of opening an editor")
@click.option(
    "--html",
    "html_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Export the notes as an HTML page",
)
@click.pass_obj
def notes(app, task_id: int, show: bool, html_path: Optional[str]) -> None:
    """Open, show or export a task's notes."""
    try:
        task = app.tasks.get_task(task_id)
    except ValueError as e:
        raise _fail(e)

    if html_path:
        out = app.notes.export_html(task, html_path)
        console.print(f"[green]Notes exported to {out}[/green]")
        return

    if show:
        console.print(Markdown(app.notes.read(task) or "_No notes yet._"))
        return

    try:
        rc = app.notes.open_in_editor(task)
    except OSError as e:
        raise click.ClickException(f"Cannot start editor '{app.notes.editor}': {e}")
    if rc != 0:
        console.print(f"[yellow]Editor exited with status {rc}.[/yellow]")


# ----- config / stats -----
@cli.command("config")
@click.option("--work", "work_minutes", type=click.IntRange(min=1), help="Work minutes")
@click.option("--break", "break_minutes", type=click.IntRange(min=1), help="Short break minutes")
@click.option("--long-break", "long_break_minutes", type=click.IntRange(min=1), help="Long break minutes")
@click.option("--cadence", type=click.IntRange(min=1), help="Pomodoros before a long break")
@click.pass_obj
def config_cmd(app, work_minutes, break_minutes, long_break_minutes, cadence) -> None:
    """Show or update session durations."""
    changes = (work_minutes, break_minutes, long_break_minutes, cadence)
    try:
        if any(v is not None for v in changes):
            cfg = app.config.update(
                work_minutes=work_minutes,
                break_minutes=break_minutes,
                long_break_minutes=long_break_minutes,
                pomodoros_before_long_break=cadence,
            )
            console.print("[green]Configuration updated successfully![/green]")
        else:
            cfg = app.config.load()
    except ValueError as e:
        raise _fail(e)
    console.print(config_panel(cfg))


@cli.command()
@click.pass_obj
def stats(app) -> None:
    """Show productivity statistics."""
    render_statistics(console, app.stats.summary(), app.stats.last_days(7))
    console.print(f"Worked today: {format_time(app.stats.total_today_work_sec())}")


# ----- interactive menu -----
def _prompt_task_id(text: str) -> int:
    return click.prompt(text, type=int)


def _menu_add(ctx: click.Context) -> None:
    title = click.prompt("Enter task title")
    ctx.invoke(add, title=(title,))


def _menu_start(ctx: click.Context) -> None:
    if not ctx.obj.tasks.list_tasks():
        console.print("[red]No tasks available. Add a task first.[/red]")
        return
    ctx.invoke(start, task_id=_prompt_task_id("Enter task ID to start Pomodoro"))


def _menu_complete(ctx: click.Context) -> None:
    ctx.invoke(complete, task_id=_prompt_task_id("Enter task ID to mark as complete"))


def _menu_delete(ctx: click.Context) -> None:
    ctx.invoke(delete, task_id=_prompt_task_id("Enter task ID to delete"))


def _menu_notes(ctx: click.Context) -> None:
    ctx.invoke(notes, task_id=_prompt_task_id("Enter task ID to open notes"))


def _menu_config(ctx: click.Context) -> None:
    cfg = ctx.obj.config.load()
    console.print("[cyan]Current configuration:[/cyan]")
    console.print(config_panel(cfg))
    positive = click.IntRange(min=1)
    ctx.invoke(
        config_cmd,
        work_minutes=click.prompt("Enter new work duration (in minutes)", type=positive, default=cfg.work_duration // 60),
        break_minutes=click.prompt("Enter new break duration (in minutes)", type=positive, default=cfg.break_duration // 60),
        long_break_minutes=click.prompt(
            "Enter new long break duration (in minutes)", type=positive, default=cfg.long_break_duration // 60
        ),
        cadence=click.prompt(
            "Enter new number of pomodoros before long break", type=positive, default=cfg.pomodoros_before_long_break
        ),
    )


def _menu_stats(ctx: click.Context) -> None:
    ctx.invoke(stats)
    click.pause("Press any key to continue")


MENU_ACTIONS: Dict[str, Callable[[click.Context], None]] = {
    "a": _menu_add,
    "s": _menu_start,
    "c": _menu_complete,
    "d": _menu_delete,
    "n": _menu_notes,
    "u": _menu_config,
    "v": _menu_stats,
}


@cli.command()
@click.pass_context
def menu(ctx: click.Context) -> None:
    """Interactive dashboard (default)."""
    console.print(
        Panel(
            "[bright_cyan]Welcome to pomoterm![/bright_cyan]\n"
            "[bright_green]Your personal Pomodoro-powered task manager.[/bright_green]",
            padding=(1, 2),
        )
    )
    while True:
        app = ctx.obj
        render_dashboard(console, app.stats.summary(), app.tasks.list_tasks())
        choice = click.prompt("Enter your choice", default="", show_default=False).strip().lower()

        if choice == "q":
            console.print("[green]Thank you for using pomoterm! Goodbye![/green]")
            return

        action = MENU_ACTIONS.get(choice)
        if action is None:
            console.print("[red]Invalid choice. Please try again.[/red]")
            continue

        try:
            action(ctx)
        except click.ClickException as e:
            console.print(f"[red]{e.format_message()}[/red]")
