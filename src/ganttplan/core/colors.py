"""Status/priority to color token mapping for timeline bars."""

from __future__ import annotations

from ganttplan.core.models import DEFAULT_PRIORITY

DEFAULT_COLOR = "#9e9e9e"

# category -> hex token
CATEGORY_COLORS: dict[str, str] = {
    "primary": "#3f51b5",
    "secondary": "#19857b",
    "success": "#4caf50",
    "error": "#f44336",
    "default": DEFAULT_COLOR,
}

_STATUS_CATEGORY: dict[str, str] = {
    "Open": "primary",
    "Released": "primary",
    "Pending": "primary",
    "In Progress": "secondary",
    "Done": "success",
    "Finished": "success",
    "Completed": "success",
    "Delayed": "error",
    "Not Started": "error",
}

PRIORITY_COLORS: dict[str, str] = {
    "Critical": "#e74c3c",
    "High": "#e67e22",
    "Medium-High": "#f39c12",
    "Medium": "#3498db",
    "Low": "#2ecc71",
}


def status_category(status: str | None) -> str:
    return _STATUS_CATEGORY.get(str(status or "").strip(), "default")


def status_color(status: str | None) -> str:
    return CATEGORY_COLORS[status_category(status)]


def priority_color(priority: str | None = None) -> str:
    key = str(priority or DEFAULT_PRIORITY).strip()
    return PRIORITY_COLORS.get(key, PRIORITY_COLORS[DEFAULT_PRIORITY])
