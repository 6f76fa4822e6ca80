#!/usr/bin/env python3
"""
dualsensectl GUI - Python/Tkinter Version

Graphical front-end for dualsensectl: lightbar, player LEDs, audio routing,
attenuation and adaptive trigger effects of a Sony DualSense controller.
Keeps the last-known controller configuration in state.json and runs one
dualsensectl command per user action on a worker thread.

Requirements:
    dualsensectl on PATH (or configured in Settings)
"""

import argparse
import logging
import os
import sys
import threading
from typing import Any, Callable

from .action_runner import ActionRunner
from .config import LOG_LEVELS, AppConfig, AppPaths
from .controller_state import Controller, ControllerHandle, ControllerLockError
from .dualsensectl import DualSenseCtl
from .log_setup import setup_logging
from .presets import Preset, apply_preset
from .profile_manager import ProfileError, ProfileManager
from .settings_manager import SettingsManager
from .trigger import Trigger

# System tray support (optional)
try:
    import pystray
    from PIL import Image as PILImage
    _TRAY_AVAILABLE = True
except ImportError:
    _TRAY_AVAILABLE = False

logger = logging.getLogger(__name__)

# Actions that only read the device and never make the snapshot dirty
_READ_ONLY_ACTIONS = ('battery',)


class DualSenseApp:
    """Main application orchestrator for the dualsensectl GUI"""

    def __init__(self, paths: AppPaths, config: AppConfig):
        import tkinter as tk
        from tkinter import messagebox
        import customtkinter
        from .controller_ui import ControllerUI
        from .ui_theme import DS_BLACK, apply_ds_theme

        self._tk = tk
        self._messagebox = messagebox
        self.paths = paths
        self.config = config

        apply_ds_theme()
        self.root = customtkinter.CTk(className='dualsensectl-gui')
        self.root.title("DualSense Control Panel")
        self.root.configure(fg_color=DS_BLACK)
        self.root.minsize(760, 560)
        self._set_window_icon()

        # State
        self.settings_mgr = SettingsManager(paths.state_file)
        self.profile_mgr = ProfileManager(paths.profiles)
        self.handle = ControllerHandle(self.settings_mgr.load(), lock_timeout=config.lock_timeout)
        self.ctl = DualSenseCtl(config.dualsensectl_path, timeout=config.command_timeout)
        self.runner = ActionRunner(
            self.handle,
            settings_mgr=self.settings_mgr,
            autosave=lambda: self.config.autosave,
            on_done=self._on_action_done,
        )

        # Settings dialog variables
        self.minimize_to_tray_var = tk.BooleanVar(value=config.minimize_to_tray)
        self.autosave_var = tk.BooleanVar(value=config.autosave)
        self.apply_on_startup_var = tk.BooleanVar(value=config.apply_on_startup)
        self.executable_var = tk.StringVar(value=config.dualsensectl_path)

        self.ui = ControllerUI(
            self.root,
            controller=self.handle.snapshot(),
            on_lightbar_toggle=self.set_lightbar_enabled,
            on_lightbar_colour=self.set_lightbar_colour,
            on_refresh_battery=self.refresh_battery,
            on_player_leds=self.set_player_leds,
            on_microphone=self.set_microphone,
            on_microphone_led=self.set_microphone_led,
            on_speaker=self.set_speaker,
            on_volume=self.set_volume,
            on_attenuation=self.set_attenuation,
            on_apply_trigger=self.apply_trigger,
            on_apply_preset=self.apply_preset,
            on_save=self.save_state,
            on_open_settings=self.open_settings,
            profiles_dir=paths.profiles,
            list_profiles=self.profile_mgr.list_profiles,
            on_export_profile=self.export_profile,
            on_import_profile=self.import_profile,
            on_apply_profile=self.apply_profile,
        )

        # Handle window closing
        self.root.protocol("WM_DELETE_WINDOW", self.on_closing)

        # System tray support
        self._tray_icon = None
        if _TRAY_AVAILABLE:
            self._init_tray_icon()
            # Intercept minimize to go to tray when enabled
            self.root.bind('<Unmap>', self._on_window_unmap)
            self.minimize_to_tray_var.trace_add(
                'write', lambda *_: self._on_tray_setting_changed())

        self.refresh_battery()
        if config.apply_on_startup:
            self.root.after(100, self.apply_saved_state)

    # ── Controller actions ───────────────────────────────────────────

    def _submit(self, name: str, action: Callable[..., Any], *args, persist=None):
        self.ui.update_status(f"Applying {name}...")
        self.runner.submit(name, action, *args, persist=persist)

    def set_lightbar_enabled(self, enabled: bool):
        self._submit('lightbar', self.ctl.set_lightbar_enabled, enabled)

    def set_lightbar_colour(self, colour):
        self._submit('lightbar colour', self.ctl.set_lightbar_colour, colour)

    def refresh_battery(self):
        self._submit('battery', self.ctl.report_battery, persist=False)

    def set_player_leds(self, count: int):
        self._submit('player LEDs', self.ctl.set_player_leds, count)

    def set_microphone(self, enabled: bool):
        self._submit('microphone', self.ctl.set_microphone, enabled)

    def set_microphone_led(self, enabled: bool):
        self._submit('microphone LED', self.ctl.set_microphone_led, enabled)

    def set_speaker(self, speaker):
        self._submit('speaker', self.ctl.set_speaker, speaker)

    def set_volume(self, volume: int):
        self._submit('volume', self.ctl.set_volume, volume)

    def set_attenuation(self, rumble: int, trigger: int):
        self._submit('attenuation', self.ctl.set_attenuation, rumble, trigger)

    def apply_trigger(self, trigger: Trigger):
        self._submit('trigger', self.ctl.set_trigger, trigger)

    def apply_preset(self, preset: Preset):
        self._submit(f"preset '{preset.name}'",
                     lambda controller: apply_preset(self.ctl, controller, preset))

    def _apply_snapshot(self, name: str, target: Controller):
        self._submit(name, lambda controller: self.ctl.apply_controller(controller, target) == 0)

    def apply_saved_state(self):
        """Push the loaded snapshot to the device."""
        self._apply_snapshot('saved state', self.handle.snapshot())

    # ── Worker completion (called on worker threads) ─────────────────

    def _on_action_done(self, name: str, result):
        ok = result is not None and result is not False
        snapshot = self.handle.snapshot()
        self.root.after(0, lambda: self._finish_action(name, ok, snapshot))

    def _finish_action(self, name: str, ok: bool, snapshot: Controller):
        self.ui.refresh(snapshot)
        if not ok:
            self.ui.update_status(f"Failed to apply {name}, see log for details", error=True)
            return
        if name in _READ_ONLY_ACTIONS:
            self.ui.update_status(f"Battery: {snapshot.battery_percentage}%")
            return
        self.ui.update_status(f"Applied {name}")
        if not self.config.autosave:
            self.ui.mark_dirty()

    # ── Persistence ──────────────────────────────────────────────────

    def save_state(self):
        """Save the controller snapshot to the state file."""
        try:
            self.settings_mgr.save(self.handle.snapshot())
            self.ui.mark_clean()
            self._messagebox.showinfo("Settings", "Controller state saved successfully!")
        except (OSError, ControllerLockError) as e:
            logger.error("Failed to save state: %s", e)
            self._messagebox.showerror("Error", f"Failed to save state: {e}")

    def open_settings(self):
        from .ui_settings_dialog import SettingsDialog
        SettingsDialog(
            self.root,
            minimize_to_tray_var=self.minimize_to_tray_var,
            autosave_var=self.autosave_var,
            apply_on_startup_var=self.apply_on_startup_var,
            executable_var=self.executable_var,
            on_save=self.save_settings,
        )

    def save_settings(self):
        """Copy the dialog variables into AppConfig and write settings.json."""
        executable = self.executable_var.get().strip()
        if not executable:
            self._messagebox.showerror("Error", "The dualsensectl executable cannot be empty.")
            self.executable_var.set(self.config.dualsensectl_path)
            return
        self.config.minimize_to_tray = self.minimize_to_tray_var.get()
        self.config.autosave = self.autosave_var.get()
        self.config.apply_on_startup = self.apply_on_startup_var.get()
        self.config.dualsensectl_path = executable
        self.ctl.executable = executable
        try:
            self.config.save(self.paths.settings_file)
            self.ui.update_status("Settings saved")
        except OSError as e:
            logger.error("Failed to save settings: %s", e)
            self._messagebox.showerror("Error", f"Failed to save settings: {e}")

    # ── Profiles ─────────────────────────────────────────────────────

    def export_profile(self, path: str):
        try:
            self.profile_mgr.export_profile(self.handle.snapshot(), path)
            self._messagebox.showinfo("Profiles", f"Profile exported to {path}")
        except (ProfileError, ControllerLockError) as e:
            logger.error("%s", e)
            self._messagebox.showerror("Error", str(e))

    def import_profile(self, path: str):
        """Copy a profile into the profiles directory and make it the current snapshot."""
        try:
            controller = self.profile_mgr.import_profile(path)
            self.handle.replace(controller)
        except (ProfileError, ControllerLockError) as e:
            logger.error("%s", e)
            self._messagebox.showerror("Error", str(e))
            return
        self.ui.refresh(controller.copy())
        self.ui.mark_dirty()
        self.ui.update_status(f"Imported profile {os.path.basename(path)}")

    def apply_profile(self, name: str):
        """Push a saved profile to the device."""
        try:
            target = self.profile_mgr.load_profile(name)
        except ProfileError as e:
            logger.error("%s", e)
            self._messagebox.showerror("Error", str(e))
            return
        self._apply_snapshot(f"profile '{name}'", target)

    # ── System tray ──────────────────────────────────────────────────

    def _init_tray_icon(self):
        """Create the system tray icon (hidden initially)."""
        base = getattr(sys, '_MEIPASS', os.path.dirname(__file__))
        png_path = os.path.join(base, "controller.png")

        try:
            image = PILImage.open(png_path)
        except OSError:
            # Fallback: create a simple colored icon
            image = PILImage.new('RGB', (64, 64), color=(0, 112, 209))

        menu = pystray.Menu(
            pystray.MenuItem("Show", self._tray_show, default=True),
            pystray.MenuItem("Refresh Battery", lambda icon, item: self.root.after(
                0, self.refresh_battery)),
            pystray.Menu.SEPARATOR,
            pystray.MenuItem("Quit", self._tray_quit),
        )

        self._tray_icon = pystray.Icon(
            "dualsensectl-gui",
            image,
            "DualSense Control Panel",
            menu,
        )
        # Run tray icon in a daemon thread so it doesn't block Tkinter
        tray_thread = threading.Thread(target=self._tray_icon.run, daemon=True)
        tray_thread.start()
        # Start hidden; only visible when minimize-to-tray is active
        self._tray_icon.visible = False

    def _on_tray_setting_changed(self):
        """Called when the minimize_to_tray setting is toggled."""
        if not self.minimize_to_tray_var.get() and self._tray_icon:
            self._tray_icon.visible = False

    def _on_window_unmap(self, event):
        """Handle window minimize: go to tray if enabled."""
        if (event.widget == self.root
                and self.minimize_to_tray_var.get()
                and self._tray_icon):
            self.root.after(50, self._check_iconified)

    def _check_iconified(self):
        """Check if the window is iconified and hide to tray."""
        try:
            if self.root.state() == 'iconic':
                self._hide_to_tray()
        except self._tk.TclError:
            pass

    def _hide_to_tray(self):
        """Withdraw the window and show the tray icon."""
        self.root.withdraw()
        if self._tray_icon:
            self._tray_icon.visible = True

    def _tray_show(self, icon=None, item=None):
        """Restore the window from the tray."""
        if self._tray_icon:
            self._tray_icon.visible = False
        # Schedule on the Tkinter main thread
        self.root.after(0, self._restore_window)

    def _restore_window(self):
        """Restore and focus the main window."""
        self.root.deiconify()
        self.root.lift()
        self.root.focus_force()

    def _tray_quit(self, icon=None, item=None):
        """Quit the application from the tray menu."""
        if self._tray_icon:
            self._tray_icon.visible = False
        self.root.after(0, self._actual_quit)

    # ── Lifecycle ────────────────────────────────────────────────────

    def on_closing(self):
        """Handle application closing: minimize to tray or quit."""
        if (self.minimize_to_tray_var.get()
                and _TRAY_AVAILABLE and self._tray_icon):
            self._hide_to_tray()
            return
        self._actual_quit()

    def _actual_quit(self):
        """Save the snapshot and destroy the window."""
        if self._tray_icon:
            self._tray_icon.stop()
            self._tray_icon = None

        try:
            self.settings_mgr.save(self.handle.snapshot())
        except (OSError, ControllerLockError) as e:
            logger.error("Failed to save state on exit: %s", e)

        self.root.destroy()

    def _set_window_icon(self):
        """Set the window icon when a controller.png is bundled."""
        base = getattr(sys, '_MEIPASS', os.path.dirname(__file__))
        png_path = os.path.join(base, "controller.png")
        if os.path.exists(png_path):
            try:
                icon = self._tk.PhotoImage(file=png_path)
                self.root.iconphoto(True, icon)
            except self._tk.TclError as e:
                logger.debug("Could not set window icon: %s", e)

    def run(self):
        """Start the application."""
        self.root.mainloop()


# ── Headless modes ───────────────────────────────────────────────────


def run_headless(paths: AppPaths, config: AppConfig, apply_state: bool = False,
                 profile: str = None, battery: bool = False) -> int:
    """Talk to the controller without the GUI. Returns a process exit code."""
    settings_mgr = SettingsManager(paths.state_file)
    controller = settings_mgr.load()
    ctl = DualSenseCtl(config.dualsensectl_path, timeout=config.command_timeout)
    status = 0

    if profile is not None:
        try:
            target = ProfileManager(paths.profiles).load_profile(profile)
        except ProfileError as e:
            logger.error("%s", e)
            return 1
        if ctl.apply_controller(controller, target):
            status = 1
    elif apply_state:
        if ctl.apply_controller(controller, controller.copy()):
            status = 1

    if battery:
        percentage = ctl.report_battery(controller)
        if percentage is None:
            status = 1
        else:
            print(f"Battery: {percentage}%")

    try:
        settings_mgr.save(controller)
    except OSError as e:
        logger.error("Failed to save state: %s", e)
        status = 1
    return status


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description="dualsensectl GUI - configure a DualSense controller "
                    "(lightbar, LEDs, audio, adaptive triggers)"
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        type=str.upper,
        default=None,
        help="logging level (default: use saved setting)",
    )
    parser.add_argument("--config-dir", help="directory holding state.json and settings.json")
    parser.add_argument("--data-dir", help="directory holding logs and profiles")
    parser.add_argument(
        "--apply-state",
        action="store_true",
        help="apply the saved controller state without the GUI and exit",
    )
    parser.add_argument(
        "--apply-profile",
        metavar="NAME",
        help="apply a saved profile without the GUI and exit",
    )
    parser.add_argument(
        "--battery",
        action="store_true",
        help="print the battery level without the GUI and exit",
    )
    args = parser.parse_args()

    paths = AppPaths(config_dir=args.config_dir, data_dir=args.data_dir)
    paths.ensure()
    config = AppConfig.load(paths.settings_file)
    setup_logging(paths.log_file, args.log_level or config.log_level)

    if args.apply_state or args.apply_profile is not None or args.battery:
        sys.exit(run_headless(paths, config, apply_state=args.apply_state,
                              profile=args.apply_profile, battery=args.battery))

    app = DualSenseApp(paths, config)
    app.run()


if __name__ == "__main__":
    main()
