"""Screenshots of the page a failed flow stopped on."""

import time
from pathlib import Path

from playwright.sync_api import Page


def screenshot_name(prefix: str = "failure") -> str:
    """Return a millisecond-timestamped PNG file name."""
    return f"{prefix}-{int(time.time() * 1000)}.png"


def capture_screenshot(
    page: Page,
    output_path: Path | str | None = None,
    full_page: bool = False,
) -> Path:
    """Save a PNG of the page.

    Args:
        page: The Playwright Page object.
        output_path: Destination file; parent directories are created.
                     If None, a "failure-<ms>.png" file in the working directory.
        full_page: Capture the whole scrollable page instead of the viewport.

    Returns:
        Path to the saved screenshot.
    """
    path = Path(output_path) if output_path is not None else Path(screenshot_name())
    path.parent.mkdir(parents=True, exist_ok=True)
    page.screenshot(path=str(path), full_page=full_page)
    return path
