"""
Settings Manager

Loads and saves the controller snapshot (state.json). Loading is
permissive: a missing, unreadable or malformed file yields the default
Controller. Saving writes the whole snapshot, pretty-printed.
"""

import json
import logging
import os

from .controller_state import Controller

logger = logging.getLogger(__name__)


class SettingsManager:
    """Manages the persisted controller snapshot."""

    def __init__(self, state_file: str):
        self._state_file = state_file

    @property
    def state_file(self) -> str:
        return self._state_file

    def load(self) -> Controller:
        """Load the snapshot, falling back to defaults on any failure."""
        if not os.path.exists(self._state_file):
            logger.info("%s not found, using default state", self._state_file)
            return Controller()
        try:
            with open(self._state_file, 'r') as f:
                controller = Controller.from_dict(json.load(f))
        except (OSError, ValueError) as e:
            logger.error("Failed to load %s, using default state: %s", self._state_file, e)
            return Controller()
        logger.info("Loaded state: %s", controller)
        return controller

    def save(self, controller: Controller):
        """Write the snapshot. Raises on failure."""
        logger.debug("Saving controller state: %s", controller)
        with open(self._state_file, 'w') as f:
            json.dump(controller.to_dict(), f, indent=2)
        logger.info("Controller state saved to %s", self._state_file)
