import pytest

from dualsense_gui.controller_state import Controller
from dualsense_gui.presets import PRESETS, apply_preset, presets_by_category
from dualsense_gui.trigger import FeedbackRaw, Trigger, VibrationRaw, decode_trigger


def preset_named(name):
    return next(p for p in PRESETS if p.name == name)


def test_preset_count_and_categories():
    assert len(PRESETS) == 22
    assert list(presets_by_category()) == [
        "Feedback Mode", "Weapon Mode", "Bow Mode", "Galloping Mode", "Machine Mode",
        "Vibration Mode", "Feedback-raw Mode", "Vibration-raw Mode", "Off Mode",
    ]


def test_preset_names_unique():
    assert len({p.name for p in PRESETS}) == len(PRESETS)


@pytest.mark.parametrize("preset", PRESETS, ids=lambda p: p.name)
def test_every_preset_decodes(preset):
    assert decode_trigger(preset.command.split()) is not None


def test_raw_preset_commands_are_unbracketed():
    assert preset_named("Rusty Trigger").command.endswith("feedback-raw 0 8 0 8 0 8 0 8 0 8")


def test_apply_preset_resyncs_trigger(runner, ctl):
    controller = Controller()
    assert apply_preset(ctl, controller, preset_named("Midway Vibration"))
    assert runner.calls == [
        ['dualsensectl', 'trigger', 'both', 'vibration-raw',
         '0', '0', '0', '0', '5', '8', '5', '0', '0', '0', '25'],
    ]
    assert controller.trigger == Trigger(
        side='both', effect=VibrationRaw(amplitude=[0, 0, 0, 0, 5, 8, 5, 0, 0, 0], frequency=25))


def test_apply_preset_feedback_raw(ctl):
    controller = Controller()
    assert apply_preset(ctl, controller, preset_named("Feedback Harder Press"))
    assert controller.trigger.effect == FeedbackRaw(strength=[0, 1, 2, 3, 4, 5, 6, 7, 8, 0])


def test_apply_preset_failure_logged(failing_ctl, caplog):
    ctl, _ = failing_ctl(returncode=1)
    controller = Controller()
    assert not apply_preset(ctl, controller, preset_named("Giant Clock"))
    assert controller == Controller()
    assert "Failed to apply preset 'Giant Clock'." in caplog.text
