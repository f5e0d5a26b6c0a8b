# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from app import AppContext, build_context
from core.settings import Settings
from domain.models import SessionConfig
from services.config_service import ConfigService

from .fakes import ScriptedSignals


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Everything under tmp_path; `true` as editor so nothing interactive runs."""
    return Settings(
        home=tmp_path,
        db_path=tmp_path / "pomoterm.db",
        config_path=tmp_path / "config.yml",
        notes_dir=tmp_path / "notes",
        log_dir=tmp_path / "logs",
        editor="true",
    )


@pytest.fixture()
def session_config() -> SessionConfig:
    return SessionConfig(
        work_duration=5,
        break_duration=2,
        long_break_duration=3,
        pomodoros_before_long_break=4,
    )


@pytest.fixture()
def signals() -> ScriptedSignals:
    return ScriptedSignals()


@pytest.fixture()
def app(settings: Settings, session_config: SessionConfig, signals: ScriptedSignals) -> AppContext:
    """
    Fully wired application on a tmp SQLite db.

    tick_seconds=0 plus scripted signals make every session run instantly
    and deterministically.
    """
    ConfigService(settings.config_path).save(session_config)
    ctx = build_context(settings, signals=signals, tick_seconds=0)
    yield ctx
    ctx.db.close()
