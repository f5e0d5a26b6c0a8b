# -*- coding: utf-8 -*-

"""Filesystem locations resolved from environment variables.

Everything defaults to the current working directory so the tracker keeps its
data next to where it is run, like a project-local todo list.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

ENV_PREFIX = "POMOTERM"


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env_path(env: Mapping[str, str], name: str, default: Path) -> Path:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True)
class Settings:
    home: Path
    db_path: Path
    config_path: Path
    notes_dir: Path
    log_dir: Path
    editor: str = "nano"


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if env is None else env
    home = _env_path(env, _k("HOME"), Path.cwd())
    return Settings(
        home=home,
        db_path=_env_path(env, _k("DB"), home / "pomoterm.db"),
        config_path=_env_path(env, _k("CONFIG"), home / "config.yml"),
        notes_dir=_env_path(env, _k("NOTES_DIR"), home / "notes"),
        log_dir=_env_path(env, _k("LOG_DIR"), home / ".pomoterm"),
        editor=(env.get("EDITOR") or "nano").strip() or "nano",
    )
