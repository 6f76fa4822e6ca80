import subprocess

import pytest

from dualsense_gui.dualsensectl import DualSenseCtl


class FakeRunner:
    """Stands in for subprocess.run; records every argv it is given."""

    def __init__(self, returncode=0, stdout='', stderr='', error=None):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.error = error
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append(list(cmd))
        if self.error is not None:
            raise self.error
        stdout = self.stdout
        if isinstance(stdout, bytes):
            stdout = stdout.decode('utf-8', kwargs.get('errors', 'strict'))
        return subprocess.CompletedProcess(cmd, self.returncode, stdout, self.stderr)


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def ctl(runner):
    return DualSenseCtl('dualsensectl', runner=runner)


@pytest.fixture
def failing_ctl():
    """Factory for a DualSenseCtl whose runner fails the way it is told to."""
    def make(**kwargs):
        fake = FakeRunner(**kwargs)
        return DualSenseCtl('dualsensectl', runner=fake), fake
    return make
