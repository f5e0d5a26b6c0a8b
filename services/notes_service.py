# -*- coding: utf-8 -*-

import logging
import re
import shlex
import subprocess
import time
from pathlib import Path
from typing import Union

from domain.models import Task
from ui.markdown_renderer import MarkdownRenderer

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^0-9A-Za-z]")


def format_datetime(ts: int) -> str:
    return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(ts))


class NotesService:
    """
    One markdown file per task under notes_dir:
      notes/task_<id>_<title with non-alnum as _>.md
    """

    def __init__(self, notes_dir: Union[str, Path] = "notes", editor: str = "nano"):
        self.notes_dir = Path(notes_dir)
        self.editor = editor
        self.renderer = MarkdownRenderer()

    def notes_path(self, task: Task) -> Path:
        return self.notes_dir / f"task_{task.id}_{_UNSAFE.sub('_', task.title)}.md"

    def create_notes_file(self, task: Task) -> Path:
        path = self.notes_path(task)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(f"# Notes for Task {task.id}: {task.title}\n")
            f.write(f"Created at: {format_datetime(task.created_at)}\n")
            f.write("\n")
        return path

    def ensure_notes_file(self, task: Task) -> Path:
        path = self.notes_path(task)
        if not path.exists():
            logger.info("No notes file for task %s; creating one.", task.id)
            self.create_notes_file(task)
        return path

    def read(self, task: Task) -> str:
        path = self.notes_path(task)
        if not path.exists():
            return ""
        return path.read_text(encoding="utf-8")

    def append_session_notes(self, task: Task, text: str) -> None:
        text = (text or "").strip()
        if not text:
            return
        path = self.ensure_notes_file(task)
        with open(path, "a", encoding="utf-8") as f:
            f.write("\n--- Notes from Pomodoro session ---\n")
            f.write(text + "\n")

    def open_in_editor(self, task: Task) -> int:
        path = self.ensure_notes_file(task)
        cmd = shlex.split(self.editor) + [str(path)]
        logger.debug("Opening notes: %s", cmd)
        return subprocess.call(cmd)

    def export_html(self, task: Task, out_path: Union[str, Path]) -> Path:
        out_path = Path(out_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(self.renderer.to_html(self.read(task)), encoding="utf-8")
        return out_path
