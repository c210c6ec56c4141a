"""Page observation helpers for diagnostics.

This module provides read-only inspection of the page: summaries of
elements of a broad kind (reported when resolution fails) and the
observable state recorded after each interaction.
"""

from typing import Any

from playwright.sync_api import BrowserContext, Page

from clickflow.models.element import BoundingBox, ElementSummary, ObservedState

DEFAULT_DIAGNOSTIC_SELECTOR = "button, a, [role='button'], input[type='submit']"

# Returns one plain object per matched element, in document order
_SNAPSHOT_JS = """
([selector, limit, maxText]) => {
    const out = [];
    for (const el of document.querySelectorAll(selector)) {
        if (out.length >= limit) break;
        const rect = el.getBoundingClientRect();
        const style = window.getComputedStyle(el);
        const visible = rect.width > 0 && rect.height > 0
            && style.display !== 'none' && style.visibility !== 'hidden';
        const text = (el.innerText || el.value || el.getAttribute('aria-label') || '')
            .replace(/\\s+/g, ' ').trim().slice(0, maxText);
        out.push({
            tag: el.tagName.toLowerCase(),
            text: text,
            classes: typeof el.className === 'string' ? el.className : '',
            role: el.getAttribute('role'),
            visible: visible && !el.disabled,
            bbox: {x: rect.x, y: rect.y, width: rect.width, height: rect.height},
        });
    }
    return out;
}
"""


def snapshot_elements(
    page: Page,
    selector: str = DEFAULT_DIAGNOSTIC_SELECTOR,
    limit: int = 25,
    max_text_length: int = 80,
) -> list[ElementSummary]:
    """Summarize elements matching a broad selector.

    Args:
        page: The Playwright Page object.
        selector: CSS selector for the broad kind of element (e.g., all buttons).
        limit: Maximum number of elements to report.
        max_text_length: Maximum length of each element's text.

    Returns:
        A list of ElementSummary records in document order.
    """
    raw: list[dict[str, Any]] = page.evaluate(_SNAPSHOT_JS, [selector, limit, max_text_length]) or []
    summaries: list[ElementSummary] = []
    for item in raw:
        bbox = item.get("bbox")
        summaries.append(
            ElementSummary(
                tag=item.get("tag") or "",
                text=item.get("text") or "",
                classes=item.get("classes") or "",
                role=item.get("role"),
                visible=bool(item.get("visible")),
                bbox=BoundingBox(**bbox) if bbox else None,
            )
        )
    return summaries


def observe_state(page: Page, context: BrowserContext | None = None) -> ObservedState:
    """Capture the observable state of the active page.

    Args:
        page: The active Playwright Page.
        context: The BrowserContext, used to count open pages.

    Returns:
        An ObservedState with the URL, page count and title.
    """
    try:
        title = page.title()
    except Exception:
        # Title is unavailable while a navigation is committing
        title = ""
    page_count = len(context.pages) if context is not None else 1
    return ObservedState(url=page.url, page_count=page_count, title=title)
