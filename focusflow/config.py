"""
focusflow/config.py - FocusFlow configuration loader.

Loads config.yaml from the project root.
If config.yaml is missing, copies config.example.yaml -> config.yaml and
prints setup guidance.
Supports .env overrides for sensitive values (session log API key).

Usage:
    from focusflow.config import Config
    c = Config()
    settings = c.settings()
    db = c.get_db_path()
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

import yaml
from dotenv import load_dotenv

log = logging.getLogger(__name__)

FOCUS_DURATIONS = (25, 45, 60)
DEFAULT_FOCUS_DURATION = 25
DEFAULT_CUSTOM_FOCUS_DURATION = 30

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off", ""}


# ---------------------------------------------------------------------------
# Helper: find project root
# ---------------------------------------------------------------------------

def _find_project_root() -> Path:
    """
    Return the project root: $FOCUSFLOW_ROOT if set, otherwise the directory
    that contains the focusflow/ package.
    """
    override = os.environ.get("FOCUSFLOW_ROOT")
    if override:
        return Path(override).resolve()
    return Path(__file__).resolve().parent.parent


# ---------------------------------------------------------------------------
# Settings snapshot
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Settings:
    """
    Read-only settings consumed by the timer and task store.

    focus_duration is 25, 45, 60 or "custom" (then custom_focus_duration
    minutes apply). Break durations are fixed and live in the timer engine.
    """

    focus_duration: Union[int, str] = DEFAULT_FOCUS_DURATION
    custom_focus_duration: int = DEFAULT_CUSTOM_FOCUS_DURATION
    auto_assign_task: bool = False
    pause_lock: bool = False
    auto_complete_parent_task: bool = False

    @property
    def focus_minutes(self) -> int:
        if self.focus_duration == "custom":
            return max(1, int(self.custom_focus_duration))
        return int(self.focus_duration)

    @property
    def focus_seconds(self) -> int:
        return self.focus_minutes * 60


# ---------------------------------------------------------------------------
# Config class
# ---------------------------------------------------------------------------

class Config:
    """
    Loads and exposes FocusFlow configuration values.

    Priority (highest first):
    1. Environment variables / .env file
    2. config.yaml values
    """

    def __init__(self, project_root: str | Path | None = None) -> None:
        self._root = Path(project_root) if project_root else _find_project_root()
        self._data: dict[str, Any] = {}
        self._load_env()
        self._load_yaml()

    # ------------------------------------------------------------------
    # Internal loaders
    # ------------------------------------------------------------------

    def _load_env(self) -> None:
        env_path = self._root / ".env"
        if env_path.exists():
            load_dotenv(env_path)

    def _load_yaml(self) -> None:
        """Load config.yaml.  If absent, copy from config.example.yaml."""
        config_path = self._root / "config.yaml"
        example_path = self._root / "config.example.yaml"

        if not config_path.exists():
            if example_path.exists():
                shutil.copy(example_path, config_path)
                print(
                    "[FocusFlow] config.yaml not found.\n"
                    f"  Copied config.example.yaml -> {config_path}\n"
                    "  Edit it to change the focus duration, task policies "
                    "or the session log endpoint.",
                    file=sys.stderr,
                )
            else:
                log.debug("No config.yaml or config.example.yaml in %s; using defaults", self._root)
                self._data = {}
                return

        try:
            with open(config_path, "r", encoding="utf-8") as fh:
                loaded = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as exc:
            log.warning("Failed to parse %s: %s", config_path, exc)
            loaded = {}
        if not isinstance(loaded, dict):
            log.warning("Ignoring %s: top level is not a mapping", config_path)
            loaded = {}
        self._data = loaded

    # ------------------------------------------------------------------
    # Low-level accessors
    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """
        Return a top-level config value.
        Environment variables override YAML values.
        The env var name is the key uppercased, e.g. FOCUS_DURATION.
        """
        env_val = os.environ.get(key.upper())
        if env_val is not None:
            return env_val
        return self._data.get(key, default)

    def get_nested(self, *keys: str, default: Any = None) -> Any:
        """Return a nested config value by successive key lookup."""
        node = self._data
        for k in keys:
            if not isinstance(node, dict):
                return default
            node = node.get(k, None)
            if node is None:
                return default
        return node

    def get_bool(self, key: str, default: bool = False) -> bool:
        val = self.get(key, default)
        if isinstance(val, bool):
            return val
        text = str(val).strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        log.warning("Config %s=%r is not a boolean; using %s", key, val, default)
        return default

    def get_int(self, key: str, default: int) -> int:
        val = self.get(key, default)
        try:
            return int(val)
        except (TypeError, ValueError):
            log.warning("Config %s=%r is not an integer; using %s", key, val, default)
            return default

    # ------------------------------------------------------------------
    # Typed properties
    # ------------------------------------------------------------------

    @property
    def focus_duration(self) -> Union[int, str]:
        val = self.get("focus_duration", DEFAULT_FOCUS_DURATION)
        if str(val).strip().lower() == "custom":
            return "custom"
        try:
            minutes = int(val)
        except (TypeError, ValueError):
            minutes = -1
        if minutes not in FOCUS_DURATIONS:
            log.warning(
                "focus_duration=%r must be one of %s or 'custom'; using %s",
                val, FOCUS_DURATIONS, DEFAULT_FOCUS_DURATION,
            )
            return DEFAULT_FOCUS_DURATION
        return minutes

    @property
    def session_log_url(self) -> str:
        env_url = os.environ.get("SESSION_LOG_URL")
        if env_url:
            return env_url.strip()
        return str(self.get_nested("session_log", "url", default="") or "").strip()

    @property
    def session_log_api_key(self) -> str:
        env_key = os.environ.get("SESSION_LOG_API_KEY")
        if env_key:
            return env_key
        return str(self.get_nested("session_log", "api_key", default="") or "")

    @property
    def user_id(self) -> str:
        return str(self.get("user_id", "") or "")

    @property
    def notifications(self) -> str:
        """Notification backend: "console", "tray" or "none"."""
        return str(self.get("notifications", "console")).strip().lower()

    # ------------------------------------------------------------------
    # Public helper methods
    # ------------------------------------------------------------------

    def settings(self) -> Settings:
        """Return a frozen snapshot of the timer/task settings."""
        return Settings(
            focus_duration=self.focus_duration,
            custom_focus_duration=self.get_int(
                "custom_focus_duration", DEFAULT_CUSTOM_FOCUS_DURATION
            ),
            auto_assign_task=self.get_bool("auto_assign_task", False),
            pause_lock=self.get_bool("pause_lock", False),
            auto_complete_parent_task=self.get_bool("auto_complete_parent_task", False),
        )

    def get_db_path(self) -> str:
        """Return the sqlite path: db_path from config, else data/focusflow.db."""
        configured = str(self.get("db_path", "") or "").strip()
        if configured:
            return configured
        return str(self._root / "data" / "focusflow.db")

    def save_setting(self, key: str, value: Any) -> bool:
        """
        Persist one top-level key into config.yaml, preserving all other content.
        Returns False if the file could not be written.
        """
        config_path = self._root / "config.yaml"
        current: dict[str, Any] = {}
        if config_path.exists():
            try:
                with open(config_path, "r", encoding="utf-8") as fh:
                    current = yaml.safe_load(fh) or {}
            except (OSError, yaml.YAMLError) as exc:
                log.warning("Could not read %s before saving: %s", config_path, exc)
        if not isinstance(current, dict):
            log.warning("Replacing %s: top level is not a mapping", config_path)
            current = {}

        current[key] = value

        try:
            with open(config_path, "w", encoding="utf-8") as fh:
                yaml.safe_dump(current, fh, default_flow_style=False, allow_unicode=True)
        except OSError as exc:
            log.error("Could not write %s: %s", config_path, exc)
            return False
        self._data = current
        return True

    def __repr__(self) -> str:  # pragma: no cover
        return f"Config(root={self._root}, db={self.get_db_path()!r})"
