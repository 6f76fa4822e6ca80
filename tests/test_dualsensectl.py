import subprocess

import pytest

from dualsense_gui.controller_constants import Speaker
from dualsense_gui.controller_state import Controller
from dualsense_gui.dualsensectl import DualSenseCtlError
from dualsense_gui.trigger import Feedback, FeedbackRaw, Off, Trigger, Weapon


# ── run ──────────────────────────────────────────────────────────────


def test_run_returns_stdout(runner, ctl):
    runner.stdout = 'ok\n'
    assert ctl.run(['battery']) == 'ok\n'
    assert runner.calls == [['dualsensectl', 'battery']]


def test_run_non_zero_exit_raises_with_stderr(failing_ctl):
    ctl, _ = failing_ctl(returncode=1, stderr='No device found\n')
    with pytest.raises(DualSenseCtlError) as exc:
        ctl.run(['battery'])
    assert exc.value.returncode == 1
    assert exc.value.stderr == 'No device found'
    assert exc.value.command == 'dualsensectl battery'
    assert 'No device found' in str(exc.value)


def test_run_launch_failure_raises(failing_ctl):
    ctl, _ = failing_ctl(error=FileNotFoundError('dualsensectl'))
    with pytest.raises(DualSenseCtlError):
        ctl.run(['battery'])


def test_run_timeout_raises(failing_ctl):
    ctl, _ = failing_ctl(error=subprocess.TimeoutExpired('dualsensectl', 1))
    with pytest.raises(DualSenseCtlError):
        ctl.run(['battery'])


# ── Operations ───────────────────────────────────────────────────────


def test_set_lightbar_colour(runner, ctl):
    controller = Controller(lightbar_enabled=False)
    assert ctl.set_lightbar_colour(controller, [255, 0, 128, 200])
    assert runner.calls == [['dualsensectl', 'lightbar', '255', '0', '128', '200']]
    assert controller.lightbar_colour == [255, 0, 128, 200]
    assert controller.lightbar_enabled is True


def test_set_lightbar_enabled_uses_stored_colour(runner, ctl):
    controller = Controller(lightbar_colour=[1, 2, 3, 4], lightbar_enabled=False)
    assert ctl.set_lightbar_enabled(controller, True)
    assert ctl.set_lightbar_enabled(controller, False)
    assert runner.calls == [
        ['dualsensectl', 'lightbar', '1', '2', '3', '4'],
        ['dualsensectl', 'lightbar', 'off'],
    ]
    assert controller.lightbar_enabled is False


@pytest.mark.parametrize("method, args, expected, field, value", [
    ('set_player_leds', (3,), ['player-leds', '3'], 'playerleds', 3),
    ('set_microphone', (True,), ['microphone', 'on'], 'microphone', True),
    ('set_microphone_led', (True,), ['microphone-led', 'on'], 'microphone_led', True),
    ('set_speaker', (Speaker.MONO_HEADPHONE,), ['speaker', 'monoheadphone'],
     'speaker', Speaker.MONO_HEADPHONE),
    ('set_volume', (150,), ['volume', '150'], 'volume', 150),
    ('set_attenuation', (2, 7), ['attenuation', '2', '7'], 'attenuation', [2, 7]),
])
def test_operation_runs_command_and_mutates(runner, ctl, method, args, expected, field, value):
    controller = Controller()
    assert getattr(ctl, method)(controller, *args)
    assert runner.calls == [['dualsensectl', *expected]]
    assert getattr(controller, field) == value


@pytest.mark.parametrize("method, args", [
    ('set_player_leds', (6,)),
    ('set_player_leds', (-1,)),
    ('set_volume', (256,)),
    ('set_attenuation', (8, 0)),
    ('set_attenuation', (0, 8)),
    ('set_lightbar_colour', ([255, 255, 255],)),
    ('set_lightbar_colour', ([255, 255, 255, 300],)),
    ('set_speaker', ('internal',)),
])
def test_invalid_input_never_reaches_subprocess(runner, ctl, method, args):
    controller = Controller()
    assert not getattr(ctl, method)(controller, *args)
    assert runner.calls == []
    assert controller == Controller()


@pytest.mark.parametrize("method, args", [
    ('set_lightbar_colour', ([1, 2, 3, 4],)),
    ('set_lightbar_enabled', (False,)),
    ('set_player_leds', (5,)),
    ('set_microphone', (True,)),
    ('set_speaker', (Speaker.BOTH,)),
    ('set_volume', (10,)),
    ('set_attenuation', (1, 1)),
    ('set_trigger', (Trigger(effect=Weapon(2, 5, 8)),)),
])
@pytest.mark.parametrize("runner_kwargs", [
    {'returncode': 1, 'stderr': 'No device found'},
    {'error': FileNotFoundError('dualsensectl')},
])
def test_failed_command_leaves_state_unchanged(failing_ctl, method, args, runner_kwargs):
    ctl, fake = failing_ctl(**runner_kwargs)
    controller = Controller()
    assert not getattr(ctl, method)(controller, *args)
    assert len(fake.calls) == 1
    assert controller == Controller()


def test_failure_is_logged_with_stderr(failing_ctl, caplog):
    ctl, _ = failing_ctl(returncode=1, stderr='No device found')
    ctl.set_volume(Controller(), 10)
    assert 'Command failed with status 1: No device found' in caplog.text


# ── Battery ──────────────────────────────────────────────────────────


@pytest.mark.parametrize("stdout, expected", [
    ('85\n', 85),
    ('40 discharging\n', 40),
    ('100% charging\n', 100),
    ('150\n', 100),
])
def test_report_battery_parses_leading_integer(runner, ctl, stdout, expected):
    runner.stdout = stdout
    controller = Controller(battery_percentage=7)
    assert ctl.report_battery(controller) == expected
    assert controller.battery_percentage == expected


@pytest.mark.parametrize("stdout", ['', 'unknown\n', 'charging 40\n'])
def test_report_battery_unparseable_keeps_state(runner, ctl, stdout):
    runner.stdout = stdout
    controller = Controller(battery_percentage=7)
    assert ctl.report_battery(controller) is None
    assert controller.battery_percentage == 7


def test_report_battery_undecodable_output_keeps_state(runner, ctl):
    runner.stdout = b'\xff\xfe 85 discharging\n'
    controller = Controller(battery_percentage=7)
    assert ctl.report_battery(controller) is None
    assert controller.battery_percentage == 7


# ── Triggers and free-form commands ──────────────────────────────────


def test_set_trigger_runs_encoded_tokens(runner, ctl):
    controller = Controller()
    trigger = Trigger(side='right', effect=FeedbackRaw(strength=[0, 8] * 5))
    assert ctl.set_trigger(controller, trigger)
    assert runner.calls == [['dualsensectl', *trigger.to_command().split()]]
    assert controller.trigger == trigger


def test_run_command_resyncs_trigger(runner, ctl):
    controller = Controller()
    assert ctl.run_command(controller, 'dualsensectl trigger left feedback 5 8')
    assert runner.calls == [['dualsensectl', 'trigger', 'left', 'feedback', '5', '8']]
    assert controller.trigger == Trigger(side='left', effect=Feedback(5, 8))


def test_run_command_without_prefix(runner, ctl):
    controller = Controller()
    assert ctl.run_command(controller, 'trigger both off')
    assert runner.calls == [['dualsensectl', 'trigger', 'both', 'off']]
    assert controller.trigger == Trigger(side='both', effect=Off())


def test_run_command_short_raw_keeps_trigger(runner, ctl):
    controller = Controller(trigger=Trigger(effect=Weapon(2, 5, 8)))
    assert ctl.run_command(controller, 'dualsensectl trigger both feedback-raw 1 2 3')
    assert controller.trigger == Trigger(effect=Weapon(2, 5, 8))


def test_run_command_non_trigger_leaves_trigger(runner, ctl):
    controller = Controller()
    assert ctl.run_command(controller, 'dualsensectl lightbar off')
    assert controller == Controller()


def test_run_command_empty(runner, ctl):
    assert not ctl.run_command(Controller(), 'dualsensectl')
    assert not ctl.run_command(Controller(), '   ')
    assert runner.calls == []


def test_run_command_failure_keeps_trigger(failing_ctl):
    ctl, _ = failing_ctl(returncode=2)
    controller = Controller()
    assert not ctl.run_command(controller, 'trigger both weapon 2 5 8')
    assert controller.trigger == Trigger()


# ── Whole snapshot ───────────────────────────────────────────────────


def test_apply_controller_pushes_every_setting(runner, ctl):
    target = Controller(
        lightbar_colour=[0, 0, 255, 128], playerleds=2, microphone=True,
        speaker=Speaker.HEADPHONE, volume=64, attenuation=[1, 2],
        trigger=Trigger(side='left', effect=Weapon(2, 5, 8)),
    )
    controller = Controller()
    assert ctl.apply_controller(controller, target) == 0
    assert [call[1] for call in runner.calls] == [
        'lightbar', 'player-leds', 'microphone', 'microphone-led', 'speaker',
        'volume', 'attenuation', 'trigger',
    ]
    target.battery_percentage = controller.battery_percentage
    assert controller == target


def test_apply_controller_lightbar_off(runner, ctl):
    target = Controller(lightbar_colour=[9, 9, 9, 9], lightbar_enabled=False)
    controller = Controller()
    assert ctl.apply_controller(controller, target) == 0
    assert runner.calls[0] == ['dualsensectl', 'lightbar', 'off']
    assert controller.lightbar_enabled is False
    assert controller.lightbar_colour == [9, 9, 9, 9]


def test_apply_controller_counts_failures(failing_ctl):
    ctl, _ = failing_ctl(returncode=1)
    controller = Controller()
    assert ctl.apply_controller(controller, Controller(volume=5)) == 8
    assert controller == Controller()
