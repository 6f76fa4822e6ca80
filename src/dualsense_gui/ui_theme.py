"""
UI Theme - DualSense White & Blue

Color constants and theme configuration for the DualSense control panel.
"""

import customtkinter

# ── Main palette ─────────────────────────────────────────────────
DS_BLACK = "#1B1C21"            # window/app background
DS_SURFACE = "#26282F"          # card/frame backgrounds
DS_SURFACE_LIGHT = "#33363F"    # hover, separators
DS_BLUE = "#0070D1"             # PlayStation blue, primary accent
DS_BLUE_LIGHT = "#2C8FE6"       # accent hover
DS_WHITE = "#F2F2F2"

# ── Text colors ──────────────────────────────────────────────────
TEXT_PRIMARY = "#FFFFFF"
TEXT_SECONDARY = "#A9B4C8"
TEXT_DIM = "#6C7386"

# ── UI widget colors ─────────────────────────────────────────────
BTN_FG = DS_BLUE
BTN_TEXT = "#FFFFFF"
BTN_HOVER = DS_BLUE_LIGHT
ICON_FG = "#3A3D47"
ICON_HOVER = "#4A4E5A"
SLIDER_PROGRESS = DS_BLUE
SLIDER_BUTTON = DS_WHITE
SWITCH_PROGRESS = DS_BLUE

# ── Status colors ────────────────────────────────────────────────
STATUS_OK = "#2ECC71"
STATUS_ERROR = "#E74C3C"
STATUS_BUSY = "#F1C40F"

# ── Battery bar colors ───────────────────────────────────────────
BATTERY_HIGH = "#2ECC71"
BATTERY_MID = "#F1C40F"
BATTERY_LOW = "#E74C3C"

FONT_FAMILY = "Helvetica"


def battery_color(percentage: int) -> str:
    if percentage >= 50:
        return BATTERY_HIGH
    if percentage >= 20:
        return BATTERY_MID
    return BATTERY_LOW


def apply_ds_theme():
    """Configure customtkinter for the dark DualSense theme."""
    customtkinter.set_appearance_mode("dark")
    customtkinter.set_default_color_theme("blue")
