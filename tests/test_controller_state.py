import json
import threading

import pytest

from dualsense_gui.controller_constants import Speaker
from dualsense_gui.controller_state import (
    Controller, ControllerHandle, ControllerLockError, apply_trigger_tokens,
)
from dualsense_gui.trigger import FeedbackRaw, Off, Trigger, Vibration


def populated_controller():
    return Controller(
        lightbar_colour=[10, 20, 30, 40],
        lightbar_enabled=False,
        battery_percentage=55,
        playerleds=4,
        microphone=True,
        microphone_led=True,
        speaker=Speaker.MONO_HEADPHONE,
        volume=200,
        attenuation=[3, 6],
        trigger=Trigger(side='left', effect=FeedbackRaw(strength=[0, 8] * 5)),
    )


def test_defaults():
    c = Controller()
    assert c.lightbar_colour == [255, 255, 255, 255]
    assert c.lightbar_enabled is True
    assert c.battery_percentage == 100
    assert c.playerleds == 1
    assert c.microphone is False
    assert c.microphone_led is False
    assert c.speaker is Speaker.INTERNAL
    assert c.volume == 0
    assert c.attenuation == [0, 0]
    assert c.trigger == Trigger(side='both', effect=Off())


def test_json_round_trip():
    controller = populated_controller()
    data = json.loads(json.dumps(controller.to_dict()))
    assert Controller.from_dict(data) == controller


def test_json_field_names_and_tags():
    data = populated_controller().to_dict()
    assert data['speaker'] == 'Monoheadphone'
    assert data['trigger'] == {'side': 'left', 'effect': {'FeedbackRaw': {'strength': [0, 8] * 5}}}
    assert Controller().to_dict()['trigger'] == {'side': 'both', 'effect': 'Off'}


@pytest.mark.parametrize("key, value", [
    ('lightbar_colour', [1, 2, 3]),
    ('volume', 256),
    ('playerleds', -1),
    ('microphone', 'yes'),
    ('speaker', 'Loud'),
    ('attenuation', [1]),
    ('trigger', {'side': 'left'}),
])
def test_from_dict_rejects_bad_values(key, value):
    data = Controller().to_dict()
    data[key] = value
    with pytest.raises(ValueError):
        Controller.from_dict(data)


def test_from_dict_requires_every_field():
    data = Controller().to_dict()
    del data['volume']
    with pytest.raises(ValueError):
        Controller.from_dict(data)


def test_copy_is_independent():
    controller = populated_controller()
    clone = controller.copy()
    clone.lightbar_colour[0] = 99
    clone.attenuation[1] = 0
    assert controller.lightbar_colour[0] == 10
    assert controller.attenuation[1] == 6


def test_apply_trigger_tokens_updates_on_decode():
    controller = Controller()
    assert apply_trigger_tokens(controller, "trigger right vibration 1 8 60".split())
    assert controller.trigger == Trigger(side='right', effect=Vibration(1, 8, 60))


def test_apply_trigger_tokens_short_raw_keeps_previous_trigger():
    controller = populated_controller()
    before = controller.trigger
    assert not apply_trigger_tokens(controller, "trigger both feedback-raw 1 2 3 4".split())
    assert controller.trigger == before


def test_handle_snapshot_is_a_copy():
    handle = ControllerHandle(populated_controller())
    snapshot = handle.snapshot()
    snapshot.volume = 1
    with handle.locked() as controller:
        assert controller.volume == 200


def test_handle_replace():
    handle = ControllerHandle()
    handle.replace(populated_controller())
    assert handle.snapshot() == populated_controller()


def test_handle_lock_timeout():
    handle = ControllerHandle(lock_timeout=0.05)
    held = threading.Event()
    release = threading.Event()

    def hold():
        with handle.locked():
            held.set()
            release.wait(5)

    worker = threading.Thread(target=hold)
    worker.start()
    try:
        assert held.wait(5)
        with pytest.raises(ControllerLockError):
            with handle.locked():
                pass
    finally:
        release.set()
        worker.join()

    with handle.locked() as controller:
        assert controller == Controller()
