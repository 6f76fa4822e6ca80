"""
Action Runner

Runs each user action on its own short-lived daemon thread so the Tk event
loop never waits on dualsensectl. Threads are fire-and-forget: there is no
pool, no cancellation, and a hung subprocess only hangs its own thread.

Each worker takes the controller lock, runs one action against the live
snapshot, optionally persists it, releases the lock, then reports back
through on_done. Lock timeouts and unexpected errors are logged and the
action is abandoned.
"""

import logging
import threading
from typing import Any, Callable, Optional

from .controller_state import Controller, ControllerHandle, ControllerLockError
from .settings_manager import SettingsManager

logger = logging.getLogger(__name__)


class ActionRunner:
    """Spawns one worker thread per controller action."""

    def __init__(self, handle: ControllerHandle,
                 settings_mgr: Optional[SettingsManager] = None,
                 autosave: Callable[[], bool] = lambda: False,
                 on_done: Optional[Callable[[str, Any], None]] = None):
        self._handle = handle
        self._settings_mgr = settings_mgr
        self._autosave = autosave
        self._on_done = on_done

    def submit(self, name: str, action: Callable[..., Any], *args,
               persist: Optional[bool] = None) -> threading.Thread:
        """Run action(controller, *args) on a new daemon thread.

        persist=None follows the autosave setting.
        """
        thread = threading.Thread(
            target=self._run, args=(name, action, args, persist),
            name=f"action-{name}", daemon=True,
        )
        thread.start()
        return thread

    def _run(self, name: str, action: Callable[..., Any], args: tuple,
             persist: Optional[bool]):
        try:
            with self._handle.locked() as controller:
                result = action(controller, *args)
                if persist if persist is not None else self._autosave():
                    self._persist(controller)
        except ControllerLockError as e:
            logger.error("Failed to lock controller for '%s': %s", name, e)
            return
        except Exception:
            logger.exception("Action '%s' failed", name)
            return

        if self._on_done:
            try:
                self._on_done(name, result)
            except Exception:
                logger.exception("Completion callback for '%s' failed", name)

    def _persist(self, controller: Controller):
        if self._settings_mgr is None:
            return
        try:
            self._settings_mgr.save(controller)
        except OSError as e:
            logger.error("Failed to save state: %s", e)
