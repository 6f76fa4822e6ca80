"""
UI Presets Page

Scrollable list of trigger presets, one button per preset under a header
for each category.
"""

import tkinter as tk
from typing import Callable

import customtkinter

from .presets import Preset, presets_by_category
from . import ui_theme as T


class PresetsPage(customtkinter.CTkScrollableFrame):
    """Preset buttons grouped by category."""

    def __init__(self, parent, on_apply_preset: Callable[[Preset], None]):
        super().__init__(parent, fg_color="transparent")

        for category, presets in presets_by_category().items():
            customtkinter.CTkLabel(
                self, text=category, text_color=T.TEXT_PRIMARY,
                font=(T.FONT_FAMILY, 16, "bold"),
            ).pack(anchor=tk.W, padx=8, pady=(12, 2))
            customtkinter.CTkFrame(
                self, fg_color=T.DS_SURFACE_LIGHT, height=2,
            ).pack(fill=tk.X, padx=8, pady=(0, 6))

            for preset in presets:
                customtkinter.CTkButton(
                    self, text=preset.name,
                    command=lambda p=preset: on_apply_preset(p),
                    fg_color=T.BTN_FG, hover_color=T.BTN_HOVER, text_color=T.BTN_TEXT,
                    corner_radius=12, height=30, font=(T.FONT_FAMILY, 14),
                ).pack(fill=tk.X, padx=8, pady=(2, 0))
                customtkinter.CTkLabel(
                    self, text=preset.description, text_color=T.TEXT_DIM,
                    font=(T.FONT_FAMILY, 12), wraplength=520, justify="left", anchor="w",
                ).pack(fill=tk.X, padx=14, pady=(0, 4))
