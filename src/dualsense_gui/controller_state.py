"""
Controller State

The Controller snapshot (last-known device configuration), its JSON mapping,
and the ControllerHandle that owns the single shared snapshot behind a lock.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence

from .controller_constants import (
    DEFAULT_ATTENUATION, DEFAULT_BATTERY, DEFAULT_LIGHTBAR_COLOUR,
    DEFAULT_LIGHTBAR_ENABLED, DEFAULT_PLAYER_LEDS, DEFAULT_VOLUME, LIGHTBAR_CHANNELS,
    U8_MAX, Speaker,
)
from .trigger import Trigger, decode_trigger

logger = logging.getLogger(__name__)

_FIELDS = (
    'lightbar_colour', 'lightbar_enabled', 'battery_percentage', 'playerleds',
    'microphone', 'microphone_led', 'speaker', 'volume', 'attenuation', 'trigger',
)


def _u8(data: dict, key: str) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= U8_MAX:
        raise ValueError(f"{key} must be an integer in 0-{U8_MAX}, got {value!r}")
    return value


def _flag(data: dict, key: str) -> bool:
    value = data[key]
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false, got {value!r}")
    return value


def _u8_list(data: dict, key: str, length: int) -> List[int]:
    value = data[key]
    if not isinstance(value, list) or len(value) != length:
        raise ValueError(f"{key} must be a list of {length} integers, got {value!r}")
    return [_u8({key: item}, key) for item in value]


@dataclass
class Controller:
    """Last-known configuration of the controller.

    A best-effort mirror of the device: fields are only updated after the
    corresponding dualsensectl command succeeds.
    """
    lightbar_colour: List[int] = field(default_factory=lambda: list(DEFAULT_LIGHTBAR_COLOUR))
    lightbar_enabled: bool = DEFAULT_LIGHTBAR_ENABLED
    battery_percentage: int = DEFAULT_BATTERY
    playerleds: int = DEFAULT_PLAYER_LEDS
    microphone: bool = False
    microphone_led: bool = False
    speaker: Speaker = Speaker.INTERNAL
    volume: int = DEFAULT_VOLUME
    attenuation: List[int] = field(default_factory=lambda: list(DEFAULT_ATTENUATION))
    trigger: Trigger = field(default_factory=Trigger)

    def to_dict(self) -> dict:
        return {
            'lightbar_colour': list(self.lightbar_colour),
            'lightbar_enabled': self.lightbar_enabled,
            'battery_percentage': self.battery_percentage,
            'playerleds': self.playerleds,
            'microphone': self.microphone,
            'microphone_led': self.microphone_led,
            'speaker': self.speaker.value,
            'volume': self.volume,
            'attenuation': list(self.attenuation),
            'trigger': self.trigger.to_json(),
        }

    @classmethod
    def from_dict(cls, data) -> 'Controller':
        """Build a Controller from its JSON form. Raises ValueError if malformed."""
        if not isinstance(data, dict):
            raise ValueError(f"Controller state must be an object, got {type(data).__name__}")
        missing = [key for key in _FIELDS if key not in data]
        if missing:
            raise ValueError(f"Controller state is missing {', '.join(missing)}")

        try:
            speaker = Speaker(data['speaker'])
        except ValueError:
            raise ValueError(f"Unknown speaker routing: {data['speaker']!r}") from None

        return cls(
            lightbar_colour=_u8_list(data, 'lightbar_colour', LIGHTBAR_CHANNELS),
            lightbar_enabled=_flag(data, 'lightbar_enabled'),
            battery_percentage=_u8(data, 'battery_percentage'),
            playerleds=_u8(data, 'playerleds'),
            microphone=_flag(data, 'microphone'),
            microphone_led=_flag(data, 'microphone_led'),
            speaker=speaker,
            volume=_u8(data, 'volume'),
            attenuation=_u8_list(data, 'attenuation', 2),
            trigger=Trigger.from_json(data['trigger']),
        )

    def copy(self) -> 'Controller':
        """Independent copy (Trigger is immutable and shared)."""
        return Controller(
            lightbar_colour=list(self.lightbar_colour),
            lightbar_enabled=self.lightbar_enabled,
            battery_percentage=self.battery_percentage,
            playerleds=self.playerleds,
            microphone=self.microphone,
            microphone_led=self.microphone_led,
            speaker=self.speaker,
            volume=self.volume,
            attenuation=list(self.attenuation),
            trigger=self.trigger,
        )

    @property
    def rumble_attenuation(self) -> int:
        return self.attenuation[0]

    @property
    def trigger_attenuation(self) -> int:
        return self.attenuation[1]


def apply_trigger_tokens(controller: Controller, tokens: Sequence[str]) -> bool:
    """Resync controller.trigger from the tokens of an executed command.

    Leaves the controller untouched when the command cannot be decoded.
    """
    trigger = decode_trigger(tokens)
    if trigger is None:
        return False
    controller.trigger = trigger
    return True


class ControllerLockError(RuntimeError):
    """Raised when the controller lock cannot be acquired in time."""


class ControllerHandle:
    """Single owner of the shared Controller snapshot.

    All reads and writes go through locked(), which serializes the
    short-lived action threads that mutate the snapshot.
    """

    def __init__(self, controller: Optional[Controller] = None, lock_timeout: float = 5.0):
        self._controller = controller if controller is not None else Controller()
        self._lock = threading.Lock()
        self.lock_timeout = lock_timeout

    @contextmanager
    def locked(self, timeout: Optional[float] = None) -> Iterator[Controller]:
        """Hold the lock and yield the live Controller.

        Raises ControllerLockError if the lock is not acquired within timeout.
        """
        timeout = self.lock_timeout if timeout is None else timeout
        if not self._lock.acquire(timeout=timeout):
            raise ControllerLockError(
                f"Timed out after {timeout}s waiting for the controller lock")
        try:
            yield self._controller
        finally:
            self._lock.release()

    def snapshot(self) -> Controller:
        """Copy of the current state, safe to read without the lock."""
        with self.locked() as controller:
            return controller.copy()

    def replace(self, controller: Controller):
        """Swap in a whole new snapshot (profile import, defaults)."""
        with self.locked():
            self._controller = controller
