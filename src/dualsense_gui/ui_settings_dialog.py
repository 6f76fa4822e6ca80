"""
UI Settings Dialog - Application Settings

Modal dialog for application settings: tray behaviour, autosave,
re-applying the saved state at startup, and the dualsensectl executable.
"""

import tkinter as tk
import webbrowser
from typing import Callable, Optional

import customtkinter

from . import ui_theme as T


class SettingsDialog:
    """Modal settings dialog accessible via the gear icon.

    Contains settings that apply to the whole application:
    - Minimize to system tray
    - Save state after every successful change
    - Apply saved state at startup
    - Path of the dualsensectl executable
    """

    def __init__(self, parent,
                 minimize_to_tray_var: tk.BooleanVar,
                 autosave_var: tk.BooleanVar,
                 apply_on_startup_var: tk.BooleanVar,
                 executable_var: tk.StringVar,
                 on_save: Optional[Callable] = None):
        self._parent = parent
        self._on_save = on_save

        self._dlg = customtkinter.CTkToplevel(parent)
        self._dlg.title("Settings")
        self._dlg.resizable(False, False)
        self._dlg.transient(parent)
        self._dlg.configure(fg_color=T.DS_SURFACE)

        outer = customtkinter.CTkFrame(self._dlg, fg_color=T.DS_SURFACE)
        outer.pack(fill=tk.BOTH, expand=True, padx=20, pady=20)

        # ── Two-column layout ──
        columns = customtkinter.CTkFrame(outer, fg_color="transparent")
        columns.pack(fill=tk.BOTH, expand=True)

        left = customtkinter.CTkFrame(columns, fg_color="transparent")
        left.pack(side=tk.LEFT, fill=tk.BOTH, anchor=tk.N, padx=(0, 16))

        vsep = customtkinter.CTkFrame(columns, fg_color=T.DS_SURFACE_LIGHT, width=2)
        vsep.pack(side=tk.LEFT, fill=tk.Y, pady=4)

        right = customtkinter.CTkFrame(columns, fg_color="transparent")
        right.pack(side=tk.LEFT, fill=tk.BOTH, anchor=tk.N, padx=(16, 0))

        check_kwargs = dict(
            fg_color=T.DS_BLUE,
            hover_color=T.DS_BLUE_LIGHT,
            checkmark_color=T.BTN_TEXT,
            border_color=T.TEXT_SECONDARY,
            text_color=T.TEXT_PRIMARY,
            font=(T.FONT_FAMILY, 14),
        )

        # ════════════════════════════════════════
        # LEFT COLUMN: Settings
        # ════════════════════════════════════════

        customtkinter.CTkLabel(
            left, text="Behaviour",
            text_color=T.TEXT_PRIMARY, font=(T.FONT_FAMILY, 16, "bold"),
        ).pack(anchor=tk.W, pady=(0, 4))

        customtkinter.CTkCheckBox(
            left, text="Minimize to system tray",
            variable=minimize_to_tray_var, **check_kwargs,
        ).pack(anchor=tk.W, pady=(4, 4))

        customtkinter.CTkCheckBox(
            left, text="Save state after every change",
            variable=autosave_var, **check_kwargs,
        ).pack(anchor=tk.W, pady=(4, 4))

        customtkinter.CTkCheckBox(
            left, text="Apply saved state at startup",
            variable=apply_on_startup_var, **check_kwargs,
        ).pack(anchor=tk.W, pady=(4, 4))

        # ── Executable ──
        customtkinter.CTkLabel(
            left, text="dualsensectl executable",
            text_color=T.TEXT_PRIMARY, font=(T.FONT_FAMILY, 16, "bold"),
        ).pack(anchor=tk.W, pady=(12, 4))

        customtkinter.CTkEntry(
            left, textvariable=executable_var, width=220,
        ).pack(anchor=tk.W)

        # ── Save button ──
        customtkinter.CTkButton(
            left, text="Save",
            command=self._on_save_click,
            fg_color=T.BTN_FG,
            hover_color=T.BTN_HOVER,
            text_color=T.BTN_TEXT,
            corner_radius=12, height=36, width=220,
            font=(T.FONT_FAMILY, 14),
        ).pack(anchor=tk.W, pady=(12, 0))

        # ════════════════════════════════════════
        # RIGHT COLUMN: About
        # ════════════════════════════════════════

        customtkinter.CTkLabel(
            right, text="About",
            text_color=T.TEXT_PRIMARY, font=(T.FONT_FAMILY, 16, "bold"),
        ).pack(anchor=tk.W, pady=(0, 4))

        customtkinter.CTkLabel(
            right, text="Graphical front-end for dualsensectl.",
            text_color=T.TEXT_SECONDARY, font=(T.FONT_FAMILY, 13),
        ).pack(anchor=tk.W, padx=4)

        src_link = customtkinter.CTkLabel(
            right, text="dualsensectl on GitHub",
            text_color=T.TEXT_SECONDARY, font=(T.FONT_FAMILY, 13, "underline"),
            cursor="hand2",
        )
        src_link.pack(anchor=tk.W, padx=4, pady=(4, 0))
        src_link.bind("<Button-1>", lambda e: webbrowser.open(
            "https://github.com/nowrep/dualsensectl"))

        self._dlg.protocol("WM_DELETE_WINDOW", self._dlg.destroy)

        # Center on parent
        self._dlg.update_idletasks()
        pw = parent.winfo_width()
        ph = parent.winfo_height()
        px = parent.winfo_x()
        py = parent.winfo_y()
        dw = self._dlg.winfo_width()
        dh = self._dlg.winfo_height()
        x = px + (pw - dw) // 2
        y = py + (ph - dh) // 2
        self._dlg.geometry(f"+{x}+{y}")

        # grab_set after window is visible to avoid TclError
        self._dlg.after(10, self._dlg.grab_set)

    def _on_save_click(self):
        if self._on_save:
            self._on_save()
        self._dlg.destroy()
