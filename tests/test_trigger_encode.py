import pytest

from dualsense_gui.trigger import (
    Bow, Feedback, FeedbackRaw, Galloping, Machine, Mode, Off, Trigger,
    Vibration, VibrationRaw, Weapon, encode_trigger, validate_effect,
)


def test_encode_feedback_right():
    trigger = Trigger(side='right', effect=Feedback(position=0, strength=1))
    assert encode_trigger(trigger) == "trigger right feedback 0 1"


def test_encode_off_both():
    assert encode_trigger(Trigger(side='both', effect=Off())) == "trigger both off"


def test_encode_feedback_raw_brackets_array():
    trigger = Trigger(side='both', effect=FeedbackRaw(strength=[0, 8, 0, 8, 0, 8, 0, 8, 0, 8]))
    assert encode_trigger(trigger) == "trigger both feedback-raw [0 8 0 8 0 8 0 8 0 8]"


def test_encode_vibration_raw_frequency_after_array():
    trigger = Trigger(side='left', effect=VibrationRaw(amplitude=range(10), frequency=25))
    assert encode_trigger(trigger) == "trigger left vibration-raw [0 1 2 3 4 5 6 7 8 9] 25"


@pytest.mark.parametrize("effect, expected", [
    (Weapon(2, 5, 8), "trigger both weapon 2 5 8"),
    (Bow(1, 8, 8, 1), "trigger both bow 1 8 8 1"),
    (Galloping(0, 9, 2, 3, 2), "trigger both galloping 0 9 2 3 2"),
    (Machine(1, 9, 7, 0, 18, 12), "trigger both machine 1 9 7 0 18 12"),
    (Vibration(1, 8, 120), "trigger both vibration 1 8 120"),
])
def test_encode_fields_in_declared_order(effect, expected):
    assert encode_trigger(Trigger(effect=effect)) == expected


def test_encode_is_pure():
    trigger = Trigger(side='left', effect=Machine(1, 9, 7, 7, 9, 1))
    assert encode_trigger(trigger) == encode_trigger(trigger)
    assert trigger == Trigger(side='left', effect=Machine(1, 9, 7, 7, 9, 1))


def test_to_args_matches_command_tokens():
    trigger = Trigger(side='right', effect=FeedbackRaw(strength=[1] * 10))
    assert trigger.to_args() == trigger.to_command().split()


def test_mode_passes_params_through():
    trigger = Trigger(side='right', effect=Mode(params="12 34 56"))
    assert trigger.effect.params == ('12', '34', '56')
    assert encode_trigger(trigger) == "trigger right mode 12 34 56"


def test_invalid_side_rejected():
    with pytest.raises(ValueError):
        Trigger(side='middle')


def test_raw_array_must_have_ten_values():
    with pytest.raises(ValueError):
        FeedbackRaw(strength=[1, 2, 3])


@pytest.mark.parametrize("make", [
    lambda: FeedbackRaw(strength=5),
    lambda: FeedbackRaw(strength=None),
    lambda: VibrationRaw(amplitude=3, frequency=100),
    lambda: Mode(params=7),
], ids=["int-strength", "none-strength", "int-amplitude", "int-params"])
def test_non_sequence_parameters_rejected(make):
    with pytest.raises(ValueError):
        make()


def test_field_outside_u8_rejected():
    with pytest.raises(ValueError):
        Vibration(position=1, amplitude=8, frequency=256)


def test_validate_effect_reports_range_and_order():
    assert validate_effect(Weapon(2, 5, 8)) == []
    problems = validate_effect(Weapon(start=6, stop=4, strength=9))
    assert "strength must be between 1 and 8" in problems
    assert "stop must be greater than start" in problems


def test_validate_effect_checks_each_raw_value():
    problems = validate_effect(FeedbackRaw(strength=[0, 9, 0, 0, 0, 0, 0, 0, 0, 0]))
    assert problems == ["strength[1] must be between 0 and 8"]


def test_json_is_externally_tagged():
    assert Off().to_json() == "Off"
    assert Feedback(3, 4).to_json() == {"Feedback": {"position": 3, "strength": 4}}
    trigger = Trigger(side='left', effect=VibrationRaw(amplitude=[2] * 10, frequency=50))
    assert Trigger.from_json(trigger.to_json()) == trigger
