from __future__ import annotations

from ganttplan.core.colors import priority_color, status_category, status_color


def test_status_colors_group_by_category():
    assert status_color("Released") == status_color("Open") == status_color("Pending") == "#3f51b5"
    assert status_color("In Progress") == "#19857b"
    assert status_color("Done") == status_color("Finished") == status_color("Completed") == "#4caf50"
    assert status_color("Delayed") == status_color("Not Started") == "#f44336"


def test_unknown_status_falls_back_to_default():
    assert status_category("Planned") == "default"
    assert status_color("Planned") == "#9e9e9e"
    assert status_color(None) == "#9e9e9e"


def test_priority_colors_and_medium_fallback():
    assert priority_color("Critical") == "#e74c3c"
    assert priority_color("High") == "#e67e22"
    assert priority_color("Medium-High") == "#f39c12"
    assert priority_color("Low") == "#2ecc71"
    assert priority_color(None) == priority_color("Medium") == "#3498db"
    assert priority_color("Whatever") == "#3498db"
