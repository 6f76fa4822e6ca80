"""
Profile Manager

Profiles are controller snapshots saved under the profiles directory, in
the same JSON format as the state file.
"""

import json
import logging
import os
import shutil
from typing import List

from .controller_constants import PROFILE_EXTENSION
from .controller_state import Controller

logger = logging.getLogger(__name__)


class ProfileError(Exception):
    """A profile could not be read, written or parsed."""


class ProfileManager:
    """Lists, imports, exports and loads profiles."""

    def __init__(self, profiles_dir: str):
        self.profiles_dir = profiles_dir

    def profile_path(self, name: str) -> str:
        return os.path.join(self.profiles_dir, name + PROFILE_EXTENSION)

    def list_profiles(self) -> List[str]:
        """Profile names (file stems), sorted."""
        try:
            entries = os.listdir(self.profiles_dir)
        except OSError as e:
            logger.error("Failed to list profiles in %s: %s", self.profiles_dir, e)
            return []
        return sorted(
            os.path.splitext(entry)[0] for entry in entries
            if entry.endswith(PROFILE_EXTENSION)
            and os.path.isfile(os.path.join(self.profiles_dir, entry)))

    @staticmethod
    def read_profile(path: str) -> Controller:
        try:
            with open(path, 'r') as f:
                return Controller.from_dict(json.load(f))
        except OSError as e:
            raise ProfileError(f"Failed to read profile {path}: {e}") from e
        except ValueError as e:
            raise ProfileError(f"Failed to parse profile {path}: {e}") from e

    def load_profile(self, name: str) -> Controller:
        controller = self.read_profile(self.profile_path(name))
        logger.info("Profile '%s' loaded.", name)
        return controller

    def export_profile(self, controller: Controller, path: str):
        """Write controller to path as a profile."""
        try:
            with open(path, 'w') as f:
                json.dump(controller.to_dict(), f, indent=2)
        except OSError as e:
            raise ProfileError(f"Failed to export profile to {path}: {e}") from e
        logger.info("Profile exported to %s", path)

    def import_profile(self, path: str) -> Controller:
        """Copy a .json profile into the profiles directory and parse it.

        A file already inside the profiles directory is used in place.
        """
        if os.path.splitext(path)[1].lower() != PROFILE_EXTENSION:
            raise ProfileError(f"Invalid file type, expected a {PROFILE_EXTENSION} file: {path}")

        source_dir = os.path.dirname(os.path.abspath(path))
        if os.path.normcase(source_dir) == os.path.normcase(os.path.abspath(self.profiles_dir)):
            target = path
        else:
            target = os.path.join(self.profiles_dir, os.path.basename(path))
            try:
                shutil.copyfile(path, target)
            except OSError as e:
                raise ProfileError(f"Failed to import profile {path}: {e}") from e

        controller = self.read_profile(target)
        logger.info("Profile imported from %s", path)
        return controller
