"""clickflow page inspection tools."""

from clickflow.tools.observe import (
    DEFAULT_DIAGNOSTIC_SELECTOR,
    observe_state,
    snapshot_elements,
)
from clickflow.tools.screenshot import capture_screenshot, screenshot_name

__all__ = [
    "DEFAULT_DIAGNOSTIC_SELECTOR",
    "capture_screenshot",
    "observe_state",
    "screenshot_name",
    "snapshot_elements",
]
