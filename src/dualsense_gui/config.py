"""
Application Configuration

AppPaths resolves (and creates) the config, data, log and profile
directories. AppConfig holds the application's own settings, stored in
settings.json next to the controller state file.
"""

import json
import logging
import os
from dataclasses import dataclass, fields
from typing import Optional

from .controller_constants import (
    APP_DIR_NAME, EXECUTABLE, LOG_FILE_NAME, SETTINGS_FILE_NAME, STATE_FILE_NAME,
)

logger = logging.getLogger(__name__)

SETTINGS_VERSION = 1
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def _xdg_dir(env_var: str, fallback: str) -> str:
    base = os.environ.get(env_var)
    if not base:
        base = os.path.join(os.path.expanduser('~'), fallback)
    return os.path.join(base, APP_DIR_NAME)


class AppPaths:
    """Filesystem locations used by the application.

    config:   $XDG_CONFIG_HOME/dualsensectl-gui  (state.json, settings.json)
    data:     $XDG_DATA_HOME/dualsensectl-gui
    logs:     <data>/logs
    profiles: <data>/profiles
    """

    def __init__(self, config_dir: Optional[str] = None, data_dir: Optional[str] = None):
        self.config = config_dir or _xdg_dir('XDG_CONFIG_HOME', '.config')
        data = data_dir or _xdg_dir('XDG_DATA_HOME', os.path.join('.local', 'share'))
        self.data = data
        self.logs = os.path.join(data, 'logs')
        self.profiles = os.path.join(data, 'profiles')

    @property
    def state_file(self) -> str:
        return os.path.join(self.config, STATE_FILE_NAME)

    @property
    def settings_file(self) -> str:
        return os.path.join(self.config, SETTINGS_FILE_NAME)

    @property
    def log_file(self) -> str:
        return os.path.join(self.logs, LOG_FILE_NAME)

    def ensure(self):
        """Create any missing directories."""
        for path in (self.config, self.logs, self.profiles):
            if not os.path.isdir(path):
                logger.info("Creating directory %s", path)
                os.makedirs(path, exist_ok=True)


@dataclass
class AppConfig:
    """User-editable application settings."""
    dualsensectl_path: str = EXECUTABLE
    minimize_to_tray: bool = False
    autosave: bool = False
    apply_on_startup: bool = False
    log_level: str = 'INFO'
    lock_timeout: float = 5.0
    command_timeout: Optional[float] = None

    @staticmethod
    def _accepts(name: str, value) -> bool:
        if name in ('minimize_to_tray', 'autosave', 'apply_on_startup'):
            return isinstance(value, bool)
        if name == 'dualsensectl_path':
            return isinstance(value, str) and bool(value.strip())
        if name == 'log_level':
            return value in LOG_LEVELS
        if name == 'lock_timeout':
            return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0
        if name == 'command_timeout':
            return value is None or (
                isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0)
        return False

    @classmethod
    def load(cls, path: str) -> 'AppConfig':
        """Load settings, keeping defaults for missing or invalid keys."""
        config = cls()
        try:
            if not os.path.exists(path):
                return config
            with open(path, 'r') as f:
                saved = json.load(f)
            if not isinstance(saved, dict):
                raise ValueError("settings file is not a JSON object")
        except (OSError, ValueError) as e:
            logger.error("Failed to load settings from %s: %s", path, e)
            return config

        for f in fields(cls):
            if f.name not in saved:
                continue
            value = saved[f.name]
            if cls._accepts(f.name, value):
                setattr(config, f.name, value)
            else:
                logger.warning("Ignoring invalid setting %s=%r", f.name, value)
        return config

    def save(self, path: str):
        """Write settings. Raises on failure."""
        output = {'version': SETTINGS_VERSION}
        for f in fields(self):
            output[f.name] = getattr(self, f.name)
        with open(path, 'w') as f:
            json.dump(output, f, indent=2)
