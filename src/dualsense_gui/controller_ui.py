"""
Controller UI

Main window widgets for the DualSense control panel. Uses customtkinter
with a CTkTabview holding the Controller, Triggers, Presets and Profiles
pages. Widgets only call the callbacks they are given; all device work
happens in app.py on worker threads.
"""

import tkinter as tk
from tkinter import colorchooser
from typing import Callable, List

import customtkinter

from .controller_constants import (
    ATTENUATION_MAX, BATTERY_MAX, PLAYER_LEDS_MAX, U8_MAX, Speaker,
)
from .controller_state import Controller
from . import ui_theme as T
from .ui_presets import PresetsPage
from .ui_profiles import ProfilesPage
from .ui_trigger_editor import TriggerEditor

SPEAKER_LABELS = {
    Speaker.INTERNAL: "Internal",
    Speaker.HEADPHONE: "Headphone",
    Speaker.MONO_HEADPHONE: "Mono Headphone",
    Speaker.BOTH: "Both",
}
_SPEAKER_BY_LABEL = {label: speaker for speaker, label in SPEAKER_LABELS.items()}

TAB_NAMES = ("Controller", "Triggers", "Presets", "Profiles")


def _hex_colour(rgb: List[int]) -> str:
    return "#{:02x}{:02x}{:02x}".format(*rgb[:3])


class ControllerUI:
    """Creates and manages all widgets of the main window."""

    def __init__(self, root, controller: Controller,
                 on_lightbar_toggle: Callable[[bool], None],
                 on_lightbar_colour: Callable[[List[int]], None],
                 on_refresh_battery: Callable[[], None],
                 on_player_leds: Callable[[int], None],
                 on_microphone: Callable[[bool], None],
                 on_microphone_led: Callable[[bool], None],
                 on_speaker: Callable[[Speaker], None],
                 on_volume: Callable[[int], None],
                 on_attenuation: Callable[[int, int], None],
                 on_apply_trigger: Callable,
                 on_apply_preset: Callable,
                 on_save: Callable[[], None],
                 on_open_settings: Callable[[], None],
                 profiles_dir: str,
                 list_profiles: Callable[[], List[str]],
                 on_export_profile: Callable[[str], None],
                 on_import_profile: Callable[[str], None],
                 on_apply_profile: Callable[[str], None]):
        self._root = root
        self._title = root.title()
        self._dirty = False
        self._initializing = True

        self._colour = list(controller.lightbar_colour)

        self.lightbar_var = tk.BooleanVar(value=controller.lightbar_enabled)
        self.brightness_var = tk.IntVar(value=controller.lightbar_colour[3])
        self.player_leds_var = tk.StringVar(value=str(controller.playerleds))
        self.microphone_var = tk.BooleanVar(value=controller.microphone)
        self.microphone_led_var = tk.BooleanVar(value=controller.microphone_led)
        self.speaker_var = tk.StringVar(value=SPEAKER_LABELS[controller.speaker])
        self.volume_var = tk.IntVar(value=controller.volume)
        self.rumble_att_var = tk.IntVar(value=controller.rumble_attenuation)
        self.trigger_att_var = tk.IntVar(value=controller.trigger_attenuation)

        self._on_lightbar_colour = on_lightbar_colour

        self._setup(on_lightbar_toggle, on_refresh_battery, on_player_leds,
                    on_microphone, on_microphone_led, on_speaker, on_volume,
                    on_attenuation, on_save, on_open_settings)

        self.trigger_editor = TriggerEditor(
            self.tabview.tab("Triggers"), trigger=controller.trigger,
            on_apply=on_apply_trigger)
        self.trigger_editor.pack(fill=tk.BOTH, expand=True)
        self._shown_trigger = controller.trigger

        self.presets_page = PresetsPage(
            self.tabview.tab("Presets"), on_apply_preset=on_apply_preset)
        self.presets_page.pack(fill=tk.BOTH, expand=True)

        self.profiles_page = ProfilesPage(
            self.tabview.tab("Profiles"),
            profiles_dir=profiles_dir,
            list_profiles=list_profiles,
            on_export=on_export_profile,
            on_import=on_import_profile,
            on_apply=on_apply_profile,
        )
        self.profiles_page.pack(fill=tk.BOTH, expand=True)

        self.update_battery(controller.battery_percentage)
        self._initializing = False

    # ── Setup ────────────────────────────────────────────────────────

    def _setup(self, on_lightbar_toggle, on_refresh_battery, on_player_leds,
               on_microphone, on_microphone_led, on_speaker, on_volume,
               on_attenuation, on_save, on_open_settings):
        outer_frame = customtkinter.CTkFrame(self._root, fg_color="transparent")
        outer_frame.grid(row=0, column=0, sticky="nsew", padx=10, pady=10)

        self._root.grid_rowconfigure(0, weight=1)
        self._root.grid_columnconfigure(0, weight=1)

        self.tabview = customtkinter.CTkTabview(
            outer_frame,
            fg_color=T.DS_SURFACE,
            segmented_button_fg_color=T.DS_BLACK,
            segmented_button_selected_color=T.DS_BLUE,
            segmented_button_unselected_color=T.DS_BLACK,
            segmented_button_selected_hover_color=T.DS_BLUE_LIGHT,
            segmented_button_unselected_hover_color=T.DS_SURFACE_LIGHT,
            text_color=T.TEXT_PRIMARY,
            corner_radius=12,
        )
        self.tabview.grid(row=0, column=0, sticky="nsew")
        outer_frame.grid_rowconfigure(0, weight=1)
        outer_frame.grid_columnconfigure(0, weight=1)

        # Save + gear buttons overlaid in the top-right of the tabview
        icon_base = dict(
            fg_color=T.ICON_FG,
            hover_color=T.ICON_HOVER,
            text_color=T.TEXT_PRIMARY,
            corner_radius=8,
        )
        icon_frame = customtkinter.CTkFrame(self.tabview, fg_color="transparent")
        icon_frame.place(relx=1.0, y=0, anchor="ne")

        customtkinter.CTkButton(
            icon_frame, text="\U0001F5AB",
            command=on_save,
            width=40, height=40, font=("", 24),
            **icon_base,
        ).pack(side=tk.LEFT, padx=(0, 4))

        customtkinter.CTkButton(
            icon_frame, text="\u2699",
            command=on_open_settings,
            width=40, height=40, font=("", 24),
            **icon_base,
        ).pack(side=tk.LEFT)

        for name in TAB_NAMES:
            self.tabview.add(name)

        self._build_controller_tab(
            self.tabview.tab("Controller"), on_lightbar_toggle, on_refresh_battery,
            on_player_leds, on_microphone, on_microphone_led, on_speaker,
            on_volume, on_attenuation)

        self.status_label = customtkinter.CTkLabel(
            outer_frame, text="Ready", text_color=T.TEXT_SECONDARY,
            font=(T.FONT_FAMILY, 13), anchor="w",
        )
        self.status_label.grid(row=1, column=0, sticky="ew", padx=6, pady=(6, 0))

    def _card(self, parent, title: str, row: int, column: int):
        card = customtkinter.CTkFrame(parent, fg_color=T.DS_BLACK, corner_radius=12)
        card.grid(row=row, column=column, sticky="nsew", padx=6, pady=6)
        customtkinter.CTkLabel(
            card, text=title, text_color=T.TEXT_PRIMARY,
            font=(T.FONT_FAMILY, 16, "bold"),
        ).pack(anchor=tk.W, padx=12, pady=(10, 4))
        return card

    def _build_controller_tab(self, tab, on_lightbar_toggle, on_refresh_battery,
                              on_player_leds, on_microphone, on_microphone_led,
                              on_speaker, on_volume, on_attenuation):
        btn_kwargs = dict(
            fg_color=T.BTN_FG,
            hover_color=T.BTN_HOVER,
            text_color=T.BTN_TEXT,
            corner_radius=12, height=32,
            font=(T.FONT_FAMILY, 14),
        )
        slider_kwargs = dict(
            progress_color=T.SLIDER_PROGRESS,
            button_color=T.SLIDER_BUTTON,
            button_hover_color=T.DS_WHITE,
        )

        # ── Lightbar ──
        lightbar = self._card(tab, "Lightbar", 0, 0)
        customtkinter.CTkSwitch(
            lightbar, text="Enabled", variable=self.lightbar_var,
            progress_color=T.SWITCH_PROGRESS, text_color=T.TEXT_PRIMARY,
            command=lambda: on_lightbar_toggle(self.lightbar_var.get()),
        ).pack(anchor=tk.W, padx=12, pady=4)

        colour_row = customtkinter.CTkFrame(lightbar, fg_color="transparent")
        colour_row.pack(fill=tk.X, padx=12, pady=4)
        self.colour_swatch = customtkinter.CTkButton(
            colour_row, text="", width=40, height=28, corner_radius=8,
            fg_color=_hex_colour(self._colour), hover=False,
            command=self._choose_colour,
        )
        self.colour_swatch.pack(side=tk.LEFT)
        customtkinter.CTkLabel(
            colour_row, text="Brightness", text_color=T.TEXT_SECONDARY,
        ).pack(side=tk.LEFT, padx=(10, 4))
        customtkinter.CTkSlider(
            colour_row, from_=0, to=U8_MAX, number_of_steps=U8_MAX,
            variable=self.brightness_var, width=140, **slider_kwargs,
        ).pack(side=tk.LEFT, fill=tk.X, expand=True)

        customtkinter.CTkButton(
            lightbar, text="Apply Colour", command=self._apply_colour, **btn_kwargs,
        ).pack(fill=tk.X, padx=12, pady=(4, 12))

        # ── Battery ──
        battery = self._card(tab, "Battery", 0, 1)
        self.battery_bar = customtkinter.CTkProgressBar(battery, height=14)
        self.battery_bar.pack(fill=tk.X, padx=12, pady=6)
        self.battery_label = customtkinter.CTkLabel(
            battery, text="", text_color=T.TEXT_SECONDARY, font=(T.FONT_FAMILY, 14),
        )
        self.battery_label.pack(anchor=tk.W, padx=12)
        customtkinter.CTkButton(
            battery, text="Refresh", command=on_refresh_battery, **btn_kwargs,
        ).pack(fill=tk.X, padx=12, pady=(4, 12))

        # ── Player LEDs ──
        leds = self._card(tab, "Player LEDs", 1, 0)
        customtkinter.CTkSegmentedButton(
            leds, values=[str(i) for i in range(PLAYER_LEDS_MAX + 1)],
            variable=self.player_leds_var,
            selected_color=T.DS_BLUE, selected_hover_color=T.DS_BLUE_LIGHT,
            command=lambda value: on_player_leds(int(value)),
        ).pack(fill=tk.X, padx=12, pady=(4, 12))

        # ── Audio ──
        audio = self._card(tab, "Audio", 1, 1)
        customtkinter.CTkSwitch(
            audio, text="Microphone", variable=self.microphone_var,
            progress_color=T.SWITCH_PROGRESS, text_color=T.TEXT_PRIMARY,
            command=lambda: on_microphone(self.microphone_var.get()),
        ).pack(anchor=tk.W, padx=12, pady=2)
        customtkinter.CTkSwitch(
            audio, text="Microphone LED", variable=self.microphone_led_var,
            progress_color=T.SWITCH_PROGRESS, text_color=T.TEXT_PRIMARY,
            command=lambda: on_microphone_led(self.microphone_led_var.get()),
        ).pack(anchor=tk.W, padx=12, pady=2)

        speaker_row = customtkinter.CTkFrame(audio, fg_color="transparent")
        speaker_row.pack(fill=tk.X, padx=12, pady=4)
        customtkinter.CTkLabel(
            speaker_row, text="Speaker", text_color=T.TEXT_SECONDARY,
        ).pack(side=tk.LEFT, padx=(0, 8))
        customtkinter.CTkOptionMenu(
            speaker_row, values=list(SPEAKER_LABELS.values()),
            variable=self.speaker_var,
            fg_color=T.DS_SURFACE_LIGHT, button_color=T.DS_BLUE,
            button_hover_color=T.DS_BLUE_LIGHT,
            command=lambda label: on_speaker(_SPEAKER_BY_LABEL[label]),
        ).pack(side=tk.LEFT, fill=tk.X, expand=True)

        volume_row = customtkinter.CTkFrame(audio, fg_color="transparent")
        volume_row.pack(fill=tk.X, padx=12, pady=(4, 12))
        customtkinter.CTkLabel(
            volume_row, text="Volume", text_color=T.TEXT_SECONDARY,
        ).pack(side=tk.LEFT, padx=(0, 8))
        customtkinter.CTkSlider(
            volume_row, from_=0, to=U8_MAX, number_of_steps=U8_MAX,
            variable=self.volume_var, width=140, **slider_kwargs,
        ).pack(side=tk.LEFT, fill=tk.X, expand=True)
        customtkinter.CTkButton(
            volume_row, text="Set", width=60,
            command=lambda: on_volume(self.volume_var.get()), **btn_kwargs,
        ).pack(side=tk.LEFT, padx=(8, 0))

        # ── Attenuation ──
        att = self._card(tab, "Attenuation", 2, 0)
        for label, var in (("Rumble", self.rumble_att_var), ("Trigger", self.trigger_att_var)):
            row = customtkinter.CTkFrame(att, fg_color="transparent")
            row.pack(fill=tk.X, padx=12, pady=2)
            customtkinter.CTkLabel(
                row, text=label, width=60, anchor="w", text_color=T.TEXT_SECONDARY,
            ).pack(side=tk.LEFT)
            customtkinter.CTkSlider(
                row, from_=0, to=ATTENUATION_MAX, number_of_steps=ATTENUATION_MAX,
                variable=var, **slider_kwargs,
            ).pack(side=tk.LEFT, fill=tk.X, expand=True)
            customtkinter.CTkLabel(
                row, textvariable=var, width=24, text_color=T.TEXT_PRIMARY,
            ).pack(side=tk.LEFT, padx=(6, 0))
        customtkinter.CTkButton(
            att, text="Set Attenuation",
            command=lambda: on_attenuation(self.rumble_att_var.get(), self.trigger_att_var.get()),
            **btn_kwargs,
        ).pack(fill=tk.X, padx=12, pady=(4, 12))

        tab.grid_columnconfigure(0, weight=1)
        tab.grid_columnconfigure(1, weight=1)

    # ── Lightbar colour ──────────────────────────────────────────────

    def _choose_colour(self):
        rgb, _ = colorchooser.askcolor(
            color=_hex_colour(self._colour), parent=self._root, title="Lightbar Colour")
        if rgb is None:
            return
        self._colour[:3] = [int(c) for c in rgb]
        self.colour_swatch.configure(fg_color=_hex_colour(self._colour))

    def _apply_colour(self):
        colour = self._colour[:3] + [self.brightness_var.get()]
        self._on_lightbar_colour(colour)

    # ── Updates (main thread only) ───────────────────────────────────

    def update_battery(self, percentage: int):
        fraction = max(0, min(percentage, BATTERY_MAX)) / BATTERY_MAX
        self.battery_bar.set(fraction)
        self.battery_bar.configure(progress_color=T.battery_color(percentage))
        self.battery_label.configure(text=f"{percentage}%")

    def refresh(self, controller: Controller):
        """Bring every widget in line with a controller snapshot."""
        self._initializing = True
        self._colour = list(controller.lightbar_colour)
        self.colour_swatch.configure(fg_color=_hex_colour(self._colour))
        self.lightbar_var.set(controller.lightbar_enabled)
        self.brightness_var.set(controller.lightbar_colour[3])
        self.player_leds_var.set(str(controller.playerleds))
        self.microphone_var.set(controller.microphone)
        self.microphone_led_var.set(controller.microphone_led)
        self.speaker_var.set(SPEAKER_LABELS[controller.speaker])
        self.volume_var.set(controller.volume)
        self.rumble_att_var.set(controller.rumble_attenuation)
        self.trigger_att_var.set(controller.trigger_attenuation)
        self.update_battery(controller.battery_percentage)
        if controller.trigger != self._shown_trigger:
            self._shown_trigger = controller.trigger
            self.trigger_editor.show(controller.trigger)
        self._initializing = False

    def update_status(self, message: str, error: bool = False):
        self.status_label.configure(
            text=message, text_color=T.STATUS_ERROR if error else T.TEXT_SECONDARY)

    # ── Dirty tracking ───────────────────────────────────────────────

    def mark_dirty(self):
        """Flag unsaved changes in the window title."""
        if self._initializing or self._dirty:
            return
        self._dirty = True
        self._root.title(self._title + " *")

    def mark_clean(self):
        self._dirty = False
        self._root.title(self._title)
