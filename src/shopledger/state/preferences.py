"""
shopledger.state.preferences

Display preferences persisted independently of identity.
"""

from __future__ import annotations

import enum
from typing import Any

DEFAULT_LOCALE = "en"


class Theme(enum.StrEnum):
    light = "light"
    dark = "dark"


class ReducedMotion(enum.StrEnum):
    auto = "auto"
    on = "on"
    off = "off"


def parse_theme(raw: Any) -> Theme:
    try:
        return Theme(raw)
    except ValueError:
        return Theme.light


def parse_reduced_motion(raw: Any) -> ReducedMotion:
    try:
        return ReducedMotion(raw)
    except ValueError:
        return ReducedMotion.auto


def effective_reduced_motion(override: ReducedMotion, platform_prefers_reduced: bool) -> bool:
    """An explicit on/off wins; `auto` follows the platform's live preference."""

    if override == ReducedMotion.on:
        return True
    if override == ReducedMotion.off:
        return False
    return platform_prefers_reduced
