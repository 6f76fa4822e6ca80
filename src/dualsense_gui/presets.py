"""
Trigger Presets

Canned trigger commands grouped by effect mode. Applying a preset runs its
command line and resyncs the snapshot's trigger from the command tokens.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List

from .controller_state import Controller
from .dualsensectl import DualSenseCtl

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Preset:
    name: str
    description: str
    command: str
    category: str


PRESETS: List[Preset] = [
    # Feedback
    Preset("Right Trigger Constant Resistance",
           "Give a slight constant resistance to the right trigger from the beginning of the course.",
           "dualsensectl trigger right feedback 0 1", "Feedback Mode"),
    Preset("Left Trigger End Resistance",
           "Give a slight constant resistance to the left trigger from the end of the course.",
           "dualsensectl trigger left feedback 9 1", "Feedback Mode"),
    Preset("Both Triggers Strong Mid Resistance",
           "Give a strong constant resistance to both triggers midway.",
           "dualsensectl trigger both feedback 5 8", "Feedback Mode"),
    # Weapon
    Preset("Weapon Strong Start",
           "Strongly resist at the beginning of the course and stop resisting almost immediately.",
           "dualsensectl trigger both weapon 2 3 8", "Weapon Mode"),
    Preset("Weapon Full Range",
           "Strongly resist at the beginning of the course and stop resisting at the end of the course.",
           "dualsensectl trigger both weapon 2 8 8", "Weapon Mode"),
    Preset("Weapon Midway",
           "Slightly resist at the beginning of the course and stop resisting midway.",
           "dualsensectl trigger both weapon 2 5 1", "Weapon Mode"),
    # Bow
    Preset("Bow Strong Snap",
           "Strongly resist at the beginning and snap back strongly when released.",
           "dualsensectl trigger both bow 1 8 8 8", "Bow Mode"),
    Preset("Bow Soft Snap",
           "Strongly resist at the beginning and snap back slightly when released.",
           "dualsensectl trigger both bow 1 8 8 1", "Bow Mode"),
    # Galloping
    Preset("Galloping Heartbeat",
           "Feel a heartbeat whenever the trigger is pressed.",
           "dualsensectl trigger both galloping 0 9 1 3 1", "Galloping Mode"),
    Preset("Galloping Horse",
           "Feel like a galloping horse whenever the trigger is pressed.",
           "dualsensectl trigger both galloping 0 9 2 3 2", "Galloping Mode"),
    # Machine
    Preset("Machine Calm",
           "Vibrate strongly, calm down, and then return to vibrating strongly during the trigger course.",
           "dualsensectl trigger both machine 1 9 7 0 100 100", "Machine Mode"),
    Preset("Machine Gun",
           "Feel like a machine gun during the entire trigger course.",
           "dualsensectl trigger both machine 1 9 7 7 9 1", "Machine Mode"),
    Preset("Machine Gun Burst",
           "Feel bursts of machine gun vibrations during the trigger course.",
           "dualsensectl trigger both machine 1 9 7 0 18 12", "Machine Mode"),
    # Vibration
    Preset("Vibration 60Hz",
           "Slightly vibrate at 60Hz from the beginning of the course.",
           "dualsensectl trigger both vibration 1 1 60", "Vibration Mode"),
    Preset("Vibration 120Hz",
           "Strongly vibrate at 120Hz from the beginning of the course.",
           "dualsensectl trigger both vibration 1 8 120", "Vibration Mode"),
    Preset("Giant Clock",
           "Feel like you are holding a giant clock with vibrations at 1Hz.",
           "dualsensectl trigger both vibration 1 8 1", "Vibration Mode"),
    # Feedback-raw
    Preset("Feedback Double Tap",
           "Resistance at the beginning, stops, and then resistance again midway.",
           "dualsensectl trigger both feedback-raw 1 2 8 0 0 1 2 8 0 0", "Feedback-raw Mode"),
    Preset("Rusty Trigger",
           "Simulate a rusty trigger with varying resistances.",
           "dualsensectl trigger both feedback-raw 0 8 0 8 0 8 0 8 0 8", "Feedback-raw Mode"),
    Preset("Feedback Harder Press",
           "The more you press, the harder the resistance, until the last position.",
           "dualsensectl trigger both feedback-raw 0 1 2 3 4 5 6 7 8 0", "Feedback-raw Mode"),
    # Vibration-raw
    Preset("Vibration Increase",
           "The more you press, the more you feel the vibration at 100Hz.",
           "dualsensectl trigger both vibration-raw 0 1 2 3 4 5 6 7 8 8 100", "Vibration-raw Mode"),
    Preset("Midway Vibration",
           "Feel vibration at 25Hz only when the trigger is around midway.",
           "dualsensectl trigger both vibration-raw 0 0 0 0 5 8 5 0 0 0 25", "Vibration-raw Mode"),
    # Off
    Preset("Disable Feedback",
           "Disable all vibrations and resistances.",
           "dualsensectl trigger both off", "Off Mode"),
]


def presets_by_category() -> Dict[str, List[Preset]]:
    """Presets grouped by category, in declaration order."""
    grouped: Dict[str, List[Preset]] = {}
    for preset in PRESETS:
        grouped.setdefault(preset.category, []).append(preset)
    return grouped


def apply_preset(ctl: DualSenseCtl, controller: Controller, preset: Preset) -> bool:
    if ctl.run_command(controller, preset.command):
        logger.info("Preset '%s' applied successfully.", preset.name)
        return True
    logger.error("Failed to apply preset '%s'.", preset.name)
    return False
