"""Utility helpers for task priorities."""
from __future__ import annotations

from typing import Dict

# The server stores 0 (low), 1 (medium) and 2 (high).
PRIORITY_META: Dict[int, Dict[str, str]] = {
    0: {
        "label": "Low priority",
        "short": "Low",
        "color": "#64748B",    # slate-500
    },
    1: {
        "label": "Medium priority",
        "short": "Medium",
        "color": "#EAB308",    # yellow-500
    },
    2: {
        "label": "High priority",
        "short": "High",
        "color": "#EF4444",    # red-500
    },
}

DEFAULT_PRIORITY = 0


def normalize_priority(value: int | str | None) -> int:
    """Clamp external values to the supported priority range."""
    if value is None:
        return DEFAULT_PRIORITY
    try:
        ivalue = int(value)
    except (TypeError, ValueError):
        return DEFAULT_PRIORITY
    floor = min(PRIORITY_META.keys())
    ceil = max(PRIORITY_META.keys())
    return max(floor, min(ceil, ivalue))


def priority_label(value: int, *, short: bool = False) -> str:
    meta = PRIORITY_META.get(normalize_priority(value))
    return meta["short" if short else "label"]


def priority_color(value: int) -> str:
    return PRIORITY_META[normalize_priority(value)]["color"]


def priority_options() -> Dict[str, str]:
    """Return mapping of dropdown values -> labels."""
    return {str(level): meta["label"] for level, meta in PRIORITY_META.items()}
