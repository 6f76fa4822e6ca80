"""
dualsensectl Runner

Runs the external dualsensectl tool and maps each of its subcommands to an
operation on the Controller snapshot. Every operation validates its input
before spawning anything, runs one command, and mutates the snapshot only
when the command succeeded. Failures are logged, never raised to callers.
"""

import logging
import os
import re
import subprocess
from typing import Callable, List, Optional, Sequence

from .controller_constants import (
    ATTENUATION_MAX, BATTERY_MAX, EXECUTABLE, LIGHTBAR_CHANNELS, PLAYER_LEDS_MAX,
    U8_MAX, Speaker,
)
from .controller_state import Controller, apply_trigger_tokens
from .trigger import Trigger

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r'\d+')


class DualSenseCtlError(Exception):
    """A dualsensectl command could not be launched or exited non-zero."""

    def __init__(self, command: str, message: str,
                 returncode: Optional[int] = None, stderr: str = ''):
        super().__init__(message)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


def _in_range(name: str, value, lo: int, hi: int) -> bool:
    if isinstance(value, bool) or not isinstance(value, int) or not lo <= value <= hi:
        logger.error("Invalid %s: %r. Must be between %d and %d.", name, value, lo, hi)
        return False
    return True


def _on_off(state: bool) -> str:
    return 'on' if state else 'off'


class DualSenseCtl:
    """Runs dualsensectl commands against the connected controller."""

    def __init__(self, executable: str = EXECUTABLE, timeout: Optional[float] = None,
                 runner: Callable = subprocess.run):
        self.executable = executable
        self.timeout = timeout
        self._runner = runner

    # ── Process ──────────────────────────────────────────────────────

    def run(self, args: Sequence[str]) -> str:
        """Run 'dualsensectl <args>' and return its stdout.

        Raises DualSenseCtlError if the process cannot be started or exits
        with a non-zero status.
        """
        cmd = [self.executable, *args]
        command = ' '.join(cmd)
        logger.info("Executing command: %s", command)

        try:
            result = self._runner(cmd, capture_output=True, text=True, errors='replace',
                                  timeout=self.timeout)
        except (OSError, subprocess.SubprocessError) as e:
            raise DualSenseCtlError(command, f"Failed to execute command: {e}") from e

        if result.returncode != 0:
            stderr = (result.stderr or '').strip()
            raise DualSenseCtlError(
                command, f"Command failed with status {result.returncode}: {stderr}",
                returncode=result.returncode, stderr=stderr)

        stdout = result.stdout or ''
        if stdout.strip():
            logger.info("Command output: %s", stdout.strip())
        logger.info("Command succeeded: %s", command)
        return stdout

    def _execute(self, args: Sequence[str]) -> Optional[str]:
        """run() with failures logged; returns None when the command failed."""
        try:
            return self.run(args)
        except DualSenseCtlError as e:
            logger.error("%s (%s)", e, e.command)
            return None

    # ── Lightbar ─────────────────────────────────────────────────────

    def set_lightbar_enabled(self, controller: Controller, enabled: bool) -> bool:
        """Turn the lightbar on (with the stored colour) or off."""
        if enabled:
            args = ['lightbar', *(str(v) for v in controller.lightbar_colour)]
        else:
            args = ['lightbar', 'off']
        if self._execute(args) is None:
            return False
        controller.lightbar_enabled = enabled
        logger.info("Lightbar %s", 'on' if enabled else 'off')
        return True

    def set_lightbar_colour(self, controller: Controller, colour: Sequence[int]) -> bool:
        """Set lightbar red, green, blue and brightness; also turns it on."""
        colour = list(colour)
        if len(colour) != LIGHTBAR_CHANNELS:
            logger.error(
                "Invalid lightbar state: expected %d values (R, G, B, brightness), got %d",
                LIGHTBAR_CHANNELS, len(colour))
            return False
        for name, value in zip(('red', 'green', 'blue', 'brightness'), colour):
            if not _in_range(f"lightbar {name}", value, 0, U8_MAX):
                return False

        if self._execute(['lightbar', *(str(v) for v in colour)]) is None:
            return False
        controller.lightbar_colour = colour
        controller.lightbar_enabled = True
        logger.info("Lightbar colour changed and enabled.")
        return True

    # ── LEDs, audio ──────────────────────────────────────────────────

    def set_player_leds(self, controller: Controller, count: int) -> bool:
        if not _in_range("player LED count", count, 0, PLAYER_LEDS_MAX):
            return False
        if self._execute(['player-leds', str(count)]) is None:
            return False
        controller.playerleds = count
        return True

    def set_microphone(self, controller: Controller, enabled: bool) -> bool:
        if self._execute(['microphone', _on_off(enabled)]) is None:
            return False
        controller.microphone = enabled
        return True

    def set_microphone_led(self, controller: Controller, enabled: bool) -> bool:
        if self._execute(['microphone-led', _on_off(enabled)]) is None:
            return False
        controller.microphone_led = enabled
        return True

    def set_speaker(self, controller: Controller, speaker: Speaker) -> bool:
        if not isinstance(speaker, Speaker):
            logger.error("Invalid speaker routing: %r", speaker)
            return False
        if self._execute(['speaker', speaker.argument]) is None:
            return False
        controller.speaker = speaker
        return True

    def set_volume(self, controller: Controller, volume: int) -> bool:
        if not _in_range("volume", volume, 0, U8_MAX):
            return False
        if self._execute(['volume', str(volume)]) is None:
            return False
        controller.volume = volume
        return True

    def set_attenuation(self, controller: Controller, rumble: int, trigger: int) -> bool:
        """Scale rumble motors and trigger effects (0 = full, 7 = weakest)."""
        if not (_in_range("rumble attenuation", rumble, 0, ATTENUATION_MAX)
                and _in_range("trigger attenuation", trigger, 0, ATTENUATION_MAX)):
            return False
        if self._execute(['attenuation', str(rumble), str(trigger)]) is None:
            return False
        controller.attenuation = [rumble, trigger]
        return True

    # ── Battery ──────────────────────────────────────────────────────

    def report_battery(self, controller: Controller) -> Optional[int]:
        """Query the battery level; the leading integer of stdout is the percentage."""
        stdout = self._execute(['battery'])
        if stdout is None:
            return None

        tokens = stdout.split()
        match = _LEADING_INT.match(tokens[0]) if tokens else None
        if match is None:
            logger.error("Could not read battery level from output: %r", stdout.strip())
            return None

        percentage = min(int(match.group()), BATTERY_MAX)
        controller.battery_percentage = percentage
        return percentage

    # ── Triggers ─────────────────────────────────────────────────────

    def set_trigger(self, controller: Controller, trigger: Trigger) -> bool:
        if self._execute(trigger.to_args()) is None:
            return False
        controller.trigger = trigger
        return True

    def run_command(self, controller: Controller, command: str) -> bool:
        """Run a free-form dualsensectl command line (e.g. a preset).

        The leading executable name is optional. After a successful trigger
        command the snapshot's trigger is rebuilt from the command tokens.
        """
        parts = command.split()
        if parts and os.path.basename(parts[0]) == EXECUTABLE:
            parts = parts[1:]
        if not parts:
            logger.error("Command is empty: %r", command)
            return False

        if self._execute(parts) is None:
            return False
        if parts[0] == 'trigger':
            apply_trigger_tokens(controller, parts)
        return True

    # ── Whole snapshot ───────────────────────────────────────────────

    def apply_controller(self, controller: Controller, target: Controller) -> int:
        """Push every setting of target to the device.

        Each field of controller is updated as its command succeeds.
        Returns the number of commands that failed.
        """
        results: List[bool] = []
        if target.lightbar_enabled:
            results.append(self.set_lightbar_colour(controller, target.lightbar_colour))
        else:
            ok = self.set_lightbar_enabled(controller, False)
            if ok:
                controller.lightbar_colour = list(target.lightbar_colour)
            results.append(ok)
        results.append(self.set_player_leds(controller, target.playerleds))
        results.append(self.set_microphone(controller, target.microphone))
        results.append(self.set_microphone_led(controller, target.microphone_led))
        results.append(self.set_speaker(controller, target.speaker))
        results.append(self.set_volume(controller, target.volume))
        results.append(self.set_attenuation(controller, *target.attenuation))
        results.append(self.set_trigger(controller, target.trigger))

        failures = results.count(False)
        if failures:
            logger.warning("%d of %d settings could not be applied", failures, len(results))
        return failures
