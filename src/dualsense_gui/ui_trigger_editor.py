"""
UI Trigger Editor

Builds a Trigger from widgets: a side selector, an effect selector and one
slider per effect parameter (ten vertical sliders for the raw variants, a
text entry for custom mode parameters). The encoded command is previewed
live and range problems are shown before anything is applied.
"""

import tkinter as tk
from typing import Callable, Dict, List, Optional, Type

import customtkinter

from .controller_constants import SIDES, U8_MAX
from .trigger import (
    EFFECT_TYPES, Bow, Feedback, FeedbackRaw, Galloping, Machine, Mode, Off,
    Trigger, TriggerEffect, Vibration, VibrationRaw, Weapon, validate_effect,
)
from . import ui_theme as T

EFFECT_LABELS: Dict[Type[TriggerEffect], str] = {
    Off: "Off",
    Feedback: "Feedback",
    Weapon: "Weapon",
    Bow: "Bow",
    Galloping: "Galloping",
    Machine: "Machine",
    Vibration: "Vibration",
    FeedbackRaw: "Feedback (raw)",
    VibrationRaw: "Vibration (raw)",
    Mode: "Custom mode",
}
_EFFECT_BY_LABEL = {label: effect_type for effect_type, label in EFFECT_LABELS.items()}


def _field_label(name: str) -> str:
    return name.replace('_', ' ').capitalize()


class TriggerEditor(customtkinter.CTkFrame):
    """Trigger effect editor for the Triggers tab."""

    def __init__(self, parent, trigger: Trigger, on_apply: Callable[[Trigger], None]):
        super().__init__(parent, fg_color="transparent")
        self._on_apply = on_apply
        self._effect_type: Type[TriggerEffect] = type(trigger.effect)
        self._scalar_vars: Dict[str, tk.IntVar] = {}
        self._raw_vars: Dict[str, List[tk.IntVar]] = {}

        self.side_var = tk.StringVar(value=trigger.side)
        self.effect_var = tk.StringVar(value=EFFECT_LABELS[self._effect_type])
        self.params_var = tk.StringVar()
        self.side_var.trace_add('write', lambda *_: self._update_preview())
        self.params_var.trace_add('write', lambda *_: self._update_preview())

        # ── Side + effect selectors ──
        header = customtkinter.CTkFrame(self, fg_color="transparent")
        header.pack(fill=tk.X, padx=8, pady=(8, 4))

        customtkinter.CTkLabel(
            header, text="Side", text_color=T.TEXT_SECONDARY, font=(T.FONT_FAMILY, 14),
        ).pack(side=tk.LEFT, padx=(0, 6))
        customtkinter.CTkSegmentedButton(
            header, values=list(SIDES), variable=self.side_var,
            selected_color=T.DS_BLUE, selected_hover_color=T.DS_BLUE_LIGHT,
        ).pack(side=tk.LEFT, padx=(0, 16))

        customtkinter.CTkLabel(
            header, text="Effect", text_color=T.TEXT_SECONDARY, font=(T.FONT_FAMILY, 14),
        ).pack(side=tk.LEFT, padx=(0, 6))
        customtkinter.CTkOptionMenu(
            header, values=[EFFECT_LABELS[t] for t in EFFECT_TYPES],
            variable=self.effect_var,
            fg_color=T.DS_SURFACE_LIGHT, button_color=T.DS_BLUE,
            button_hover_color=T.DS_BLUE_LIGHT,
            command=self._on_effect_selected,
        ).pack(side=tk.LEFT)

        # ── Parameters ──
        self._params_frame = customtkinter.CTkFrame(self, fg_color=T.DS_BLACK, corner_radius=12)
        self._params_frame.pack(fill=tk.BOTH, expand=True, padx=8, pady=4)

        # ── Preview, problems, apply ──
        self.preview_label = customtkinter.CTkLabel(
            self, text="", text_color=T.TEXT_PRIMARY, font=("Courier", 13), anchor="w",
        )
        self.preview_label.pack(fill=tk.X, padx=12, pady=(6, 0))
        self.problems_label = customtkinter.CTkLabel(
            self, text="", text_color=T.STATUS_ERROR, font=(T.FONT_FAMILY, 12),
            anchor="w", justify="left",
        )
        self.problems_label.pack(fill=tk.X, padx=12)

        customtkinter.CTkButton(
            self, text="Apply Trigger Effect", command=self._apply,
            fg_color=T.BTN_FG, hover_color=T.BTN_HOVER, text_color=T.BTN_TEXT,
            corner_radius=12, height=34, font=(T.FONT_FAMILY, 14),
        ).pack(fill=tk.X, padx=8, pady=(4, 8))

        self.show(trigger)

    # ── Field widgets ────────────────────────────────────────────────

    def _on_effect_selected(self, label: str):
        self._effect_type = _EFFECT_BY_LABEL[label]
        self._build_fields(self._effect_type())

    def _build_fields(self, effect: TriggerEffect):
        """Recreate the parameter widgets for effect's variant, preset to its values."""
        for child in self._params_frame.winfo_children():
            child.destroy()
        self._scalar_vars = {}
        self._raw_vars = {}

        effect_type = type(effect)
        if effect_type is Off:
            customtkinter.CTkLabel(
                self._params_frame, text="No parameters: resistance and vibration are disabled.",
                text_color=T.TEXT_DIM,
            ).pack(padx=12, pady=12)
        elif effect_type is Mode:
            self.params_var.set(' '.join(effect.params))
            customtkinter.CTkLabel(
                self._params_frame, text="Mode parameters (space separated)",
                text_color=T.TEXT_SECONDARY,
            ).pack(anchor=tk.W, padx=12, pady=(12, 4))
            customtkinter.CTkEntry(
                self._params_frame, textvariable=self.params_var,
            ).pack(fill=tk.X, padx=12, pady=(0, 12))
        else:
            for name in effect_type.field_names():
                lo, hi = effect_type.limits.get(name, (0, U8_MAX))
                if name in effect_type.raw_fields:
                    self._raw_vars[name] = self._build_raw_row(name, lo, hi, getattr(effect, name))
                else:
                    self._scalar_vars[name] = self._build_scalar_row(name, lo, hi, getattr(effect, name))

        self._update_preview()

    def _slider_var(self, value: int) -> tk.IntVar:
        var = tk.IntVar(value=value)
        var.trace_add('write', lambda *_: self._update_preview())
        return var

    def _build_scalar_row(self, name: str, lo: int, hi: int, value: int) -> tk.IntVar:
        var = self._slider_var(value)
        row = customtkinter.CTkFrame(self._params_frame, fg_color="transparent")
        row.pack(fill=tk.X, padx=12, pady=4)
        customtkinter.CTkLabel(
            row, text=_field_label(name), width=110, anchor="w", text_color=T.TEXT_SECONDARY,
        ).pack(side=tk.LEFT)
        customtkinter.CTkSlider(
            row, from_=lo, to=hi, number_of_steps=hi - lo, variable=var,
            progress_color=T.SLIDER_PROGRESS, button_color=T.SLIDER_BUTTON,
        ).pack(side=tk.LEFT, fill=tk.X, expand=True)
        customtkinter.CTkLabel(
            row, textvariable=var, width=36, text_color=T.TEXT_PRIMARY,
        ).pack(side=tk.LEFT, padx=(6, 0))
        return var

    def _build_raw_row(self, name: str, lo: int, hi: int, values) -> List[tk.IntVar]:
        customtkinter.CTkLabel(
            self._params_frame, text=f"{_field_label(name)} per trigger position",
            text_color=T.TEXT_SECONDARY,
        ).pack(anchor=tk.W, padx=12, pady=(8, 0))
        row = customtkinter.CTkFrame(self._params_frame, fg_color="transparent")
        row.pack(fill=tk.X, padx=12, pady=4)

        variables = []
        for i, value in enumerate(values):
            var = self._slider_var(value)
            column = customtkinter.CTkFrame(row, fg_color="transparent")
            column.pack(side=tk.LEFT, expand=True)
            customtkinter.CTkSlider(
                column, from_=lo, to=hi, number_of_steps=hi - lo, variable=var,
                orientation="vertical", height=120, width=16,
                progress_color=T.SLIDER_PROGRESS, button_color=T.SLIDER_BUTTON,
            ).pack()
            customtkinter.CTkLabel(
                column, textvariable=var, width=30, text_color=T.TEXT_PRIMARY,
            ).pack()
            customtkinter.CTkLabel(
                column, text=str(i), width=30, text_color=T.TEXT_DIM,
            ).pack()
            variables.append(var)
        return variables

    # ── Trigger construction ─────────────────────────────────────────

    def current_trigger(self) -> Trigger:
        """Build the Trigger described by the widgets. Raises ValueError."""
        if self._effect_type is Mode:
            effect = Mode(params=self.params_var.get().split())
        else:
            values = {name: var.get() for name, var in self._scalar_vars.items()}
            for name, variables in self._raw_vars.items():
                values[name] = [var.get() for var in variables]
            effect = self._effect_type(**values)
        return Trigger(side=self.side_var.get(), effect=effect)

    def _update_preview(self) -> Optional[Trigger]:
        try:
            trigger = self.current_trigger()
        except (ValueError, TypeError, tk.TclError) as e:
            self.preview_label.configure(text="")
            self.problems_label.configure(text=str(e))
            return None
        self.preview_label.configure(text=f"dualsensectl {trigger.to_command()}")
        self.problems_label.configure(text="\n".join(validate_effect(trigger.effect)))
        return trigger

    def _apply(self):
        trigger = self._update_preview()
        if trigger is None or validate_effect(trigger.effect):
            return
        self._on_apply(trigger)

    def show(self, trigger: Trigger):
        """Load an existing trigger into the editor."""
        self._effect_type = type(trigger.effect)
        self.side_var.set(trigger.side)
        self.effect_var.set(EFFECT_LABELS[self._effect_type])
        self._build_fields(trigger.effect)
