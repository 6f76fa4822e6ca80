"""
Controller Constants

Shared identifiers, numeric limits, default snapshot values and file names
used across all modules.
"""

import enum

# External tool
EXECUTABLE = 'dualsensectl'

# Trigger targets
SIDES = ('left', 'right', 'both')
DEFAULT_SIDE = 'both'

# Raw trigger arrays always carry one value per trigger decile
RAW_LENGTH = 10

# Numeric limits
U8_MAX = 255
BATTERY_MAX = 100
PLAYER_LEDS_MAX = 5
ATTENUATION_MAX = 7
LIGHTBAR_CHANNELS = 4       # R, G, B, brightness


class Speaker(enum.Enum):
    """Speaker routing. Values are the names used in persisted state files."""
    INTERNAL = 'Internal'
    HEADPHONE = 'Headphone'
    MONO_HEADPHONE = 'Monoheadphone'
    BOTH = 'Both'

    @property
    def argument(self) -> str:
        """The dualsensectl argument for this routing."""
        return self.value.lower()


# Default snapshot values (used when no saved state is found)
DEFAULT_LIGHTBAR_COLOUR = (255, 255, 255, 255)
DEFAULT_LIGHTBAR_ENABLED = True
DEFAULT_BATTERY = 100
DEFAULT_PLAYER_LEDS = 1
DEFAULT_VOLUME = 0
DEFAULT_ATTENUATION = (0, 0)   # rumble, trigger

# Files and directories
APP_DIR_NAME = 'dualsensectl-gui'
STATE_FILE_NAME = 'state.json'
SETTINGS_FILE_NAME = 'settings.json'
LOG_FILE_NAME = 'dualsensectl.log'
PROFILE_EXTENSION = '.json'
MAX_LOG_SIZE = 1024 * 1024  # 1 MiB
