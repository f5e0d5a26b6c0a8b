# services/task_service.py
#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional

from domain.models import Task, TaskStatus
from storage.db import Database
from storage.repos import TaskRepo

if TYPE_CHECKING:
    from services.notes_service import NotesService

logger = logging.getLogger(__name__)


class TaskService:
    def __init__(self, db: Database, notes: Optional[NotesService] = None):
        self.db = db
        self.tasks = TaskRepo(db)
        self.notes = notes

    # ---- tasks ----
    def create_task(self, title: str) -> Task:
        title = (title or "").strip()
        if not title:
            raise ValueError("Task title cannot be empty.")
        task = self.tasks.create(title=title)
        logger.info("Task %s created: %s", task.id, task.title)
        if self.notes is not None:
            self.notes.create_notes_file(task)
        return task

    def list_tasks(self, status: Optional[TaskStatus] = None) -> List[Task]:
        return self.tasks.list(status=status)

    def get_task(self, task_id: int) -> Task:
        t = self.tasks.get(task_id)
        if t is None:
            raise ValueError("Task not found.")
        return t

    def save_task(self, task: Task) -> None:
        if not self.tasks.get(task.id):
            raise ValueError("Task not found.")
        self.tasks.save(task)

    def complete_task(self, task_id: int) -> Task:
        t = self.get_task(task_id)
        t.mark_complete()
        self.tasks.save(t)
        logger.info("Task %s marked complete.", task_id)
        return t

    def delete_task(self, task_id: int) -> None:
        self.get_task(task_id)
        self.tasks.delete_task(task_id)
        logger.info("Task %s deleted.", task_id)
