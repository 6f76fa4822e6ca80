"""
UI Profiles Page

Export the current snapshot to a profile file, import a profile file, and
apply one of the profiles saved in the profiles directory.
"""

import tkinter as tk
from tkinter import filedialog
from typing import Callable, List

import customtkinter

from . import ui_theme as T

_NO_PROFILES = "(no profiles)"


class ProfilesPage(customtkinter.CTkFrame):
    """Profile import/export and selection."""

    def __init__(self, parent, profiles_dir: str,
                 list_profiles: Callable[[], List[str]],
                 on_export: Callable[[str], None],
                 on_import: Callable[[str], None],
                 on_apply: Callable[[str], None]):
        super().__init__(parent, fg_color="transparent")
        self._profiles_dir = profiles_dir
        self._list_profiles = list_profiles
        self._on_export = on_export
        self._on_import = on_import
        self._on_apply = on_apply

        btn_kwargs = dict(
            fg_color=T.BTN_FG,
            hover_color=T.BTN_HOVER,
            text_color=T.BTN_TEXT,
            corner_radius=12, height=34,
            font=(T.FONT_FAMILY, 14),
        )

        row = customtkinter.CTkFrame(self, fg_color="transparent")
        row.pack(fill=tk.X, padx=8, pady=(12, 6))
        customtkinter.CTkButton(
            row, text="Export Profile", command=self._export, **btn_kwargs,
        ).pack(side=tk.LEFT, expand=True, fill=tk.X, padx=(0, 4))
        customtkinter.CTkButton(
            row, text="Import Profile", command=self._import, **btn_kwargs,
        ).pack(side=tk.LEFT, expand=True, fill=tk.X, padx=(4, 0))

        customtkinter.CTkLabel(
            self, text="Saved profiles", text_color=T.TEXT_PRIMARY,
            font=(T.FONT_FAMILY, 16, "bold"),
        ).pack(anchor=tk.W, padx=8, pady=(12, 4))

        self.profile_var = tk.StringVar(value=_NO_PROFILES)
        self.profile_menu = customtkinter.CTkOptionMenu(
            self, values=[_NO_PROFILES], variable=self.profile_var,
            fg_color=T.DS_SURFACE_LIGHT, button_color=T.DS_BLUE,
            button_hover_color=T.DS_BLUE_LIGHT,
        )
        self.profile_menu.pack(fill=tk.X, padx=8, pady=4)

        customtkinter.CTkButton(
            self, text="Apply Profile", command=self._apply, **btn_kwargs,
        ).pack(fill=tk.X, padx=8, pady=4)

        self.refresh_profiles()

    def refresh_profiles(self):
        """Reload the dropdown from the profiles directory."""
        names = self._list_profiles() or [_NO_PROFILES]
        self.profile_menu.configure(values=names)
        if self.profile_var.get() not in names:
            self.profile_var.set(names[0])

    def _export(self):
        path = filedialog.asksaveasfilename(
            parent=self, initialdir=self._profiles_dir, title="Export Profile",
            defaultextension=".json", filetypes=[("Profiles", "*.json")],
        )
        if path:
            self._on_export(path)
            self.refresh_profiles()

    def _import(self):
        path = filedialog.askopenfilename(
            parent=self, initialdir=self._profiles_dir, title="Import Profile",
            filetypes=[("Profiles", "*.json")],
        )
        if path:
            self._on_import(path)
            self.refresh_profiles()

    def _apply(self):
        name = self.profile_var.get()
        if name != _NO_PROFILES:
            self._on_apply(name)
