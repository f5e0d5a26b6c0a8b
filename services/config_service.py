# -*- coding: utf-8 -*-

import logging
from dataclasses import asdict, replace
from pathlib import Path
from typing import Optional, Union

import yaml

from domain.models import SessionConfig

logger = logging.getLogger(__name__)

CONFIG_KEYS = (
    "work_duration",
    "break_duration",
    "long_break_duration",
    "pomodoros_before_long_break",
)


class ConfigError(ValueError):
    pass


class ConfigService:
    """
    Single responsibility:
    - Load / save SessionConfig as YAML (durations in seconds)
    - Validate before the engine ever sees a config
    """

    def __init__(self, path: Union[str, Path] = "config.yml"):
        self.path = Path(path)

    def load(self) -> SessionConfig:
        if not self.path.exists():
            cfg = SessionConfig()
            self.save(cfg)
            logger.info("No config at %s; wrote defaults.", self.path)
            return cfg

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Cannot parse {self.path}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigError(f"{self.path} must contain a mapping.")

        defaults = asdict(SessionConfig())
        values = {k: raw.get(k, defaults[k]) for k in CONFIG_KEYS}
        unknown = set(raw) - set(CONFIG_KEYS)
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(sorted(unknown)))

        try:
            return SessionConfig(**values)
        except ValueError as e:
            raise ConfigError(f"Invalid config in {self.path}: {e}") from e

    def save(self, cfg: SessionConfig) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(asdict(cfg), f, default_flow_style=False, sort_keys=False)

    def update(
        self,
        work_minutes: Optional[int] = None,
        break_minutes: Optional[int] = None,
        long_break_minutes: Optional[int] = None,
        pomodoros_before_long_break: Optional[int] = None,
    ) -> SessionConfig:
        """Apply the given changes (minutes for durations) and save."""
        cfg = self.load()
        changes = {}
        if work_minutes is not None:
            changes["work_duration"] = int(work_minutes) * 60
        if break_minutes is not None:
            changes["break_duration"] = int(break_minutes) * 60
        if long_break_minutes is not None:
            changes["long_break_duration"] = int(long_break_minutes) * 60
        if pomodoros_before_long_break is not None:
            changes["pomodoros_before_long_break"] = int(pomodoros_before_long_break)

        try:
            cfg = replace(cfg, **changes)
        except ValueError as e:
            raise ConfigError(str(e)) from e

        self.save(cfg)
        return cfg
