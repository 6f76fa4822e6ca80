import threading

from dualsense_gui.action_runner import ActionRunner
from dualsense_gui.controller_state import Controller, ControllerHandle
from dualsense_gui.settings_manager import SettingsManager


class Recorder:
    def __init__(self):
        self.results = []
        self.done = threading.Event()

    def __call__(self, name, result):
        self.results.append((name, result))
        self.done.set()


def set_volume(controller, volume):
    controller.volume = volume
    return True


def test_action_runs_against_live_snapshot():
    handle = ControllerHandle()
    recorder = Recorder()
    runner = ActionRunner(handle, on_done=recorder)

    runner.submit('volume', set_volume, 42).join(5)

    assert recorder.results == [('volume', True)]
    assert handle.snapshot().volume == 42


def test_worker_is_daemon():
    thread = ActionRunner(ControllerHandle()).submit('volume', set_volume, 1)
    assert thread.daemon
    thread.join(5)


def test_autosave_persists(tmp_path):
    mgr = SettingsManager(str(tmp_path / 'state.json'))
    runner = ActionRunner(ControllerHandle(), settings_mgr=mgr, autosave=lambda: True)

    runner.submit('volume', set_volume, 99).join(5)

    assert mgr.load().volume == 99


def test_persist_false_overrides_autosave(tmp_path):
    path = tmp_path / 'state.json'
    runner = ActionRunner(ControllerHandle(), settings_mgr=SettingsManager(str(path)),
                          autosave=lambda: True)

    runner.submit('battery', set_volume, 5, persist=False).join(5)

    assert not path.exists()


def test_no_autosave_by_default(tmp_path):
    path = tmp_path / 'state.json'
    runner = ActionRunner(ControllerHandle(), settings_mgr=SettingsManager(str(path)))
    runner.submit('volume', set_volume, 5).join(5)
    assert not path.exists()


def test_lock_timeout_abandons_action(caplog):
    handle = ControllerHandle(lock_timeout=0.05)
    recorder = Recorder()
    runner = ActionRunner(handle, on_done=recorder)

    with handle.locked():
        runner.submit('volume', set_volume, 7).join(5)

    assert recorder.results == []
    assert handle.snapshot().volume == Controller().volume
    assert "Failed to lock controller for 'volume'" in caplog.text


def test_failing_action_is_logged_and_releases_lock(caplog):
    handle = ControllerHandle(lock_timeout=0.5)
    recorder = Recorder()

    def explode(controller):
        raise RuntimeError("boom")

    ActionRunner(handle, on_done=recorder).submit('explode', explode).join(5)

    assert recorder.results == []
    assert "Action 'explode' failed" in caplog.text
    with handle.locked(timeout=0.1):
        pass


def test_concurrent_actions_serialize():
    handle = ControllerHandle()
    runner = ActionRunner(handle)

    def increment(controller):
        value = controller.volume
        controller.volume = value + 1

    threads = [runner.submit('increment', increment) for _ in range(50)]
    for thread in threads:
        thread.join(5)

    assert handle.snapshot().volume == 50
