"""Element resolver: first interactable match over ordered locator candidates.

Candidates are tried strictly in order. A candidate whose matches are all
hidden, zero-sized or disabled counts as a non-match and resolution moves
on to the next candidate.
"""

import time
from typing import Any, Sequence, cast

from playwright.sync_api import Locator, Page

from clickflow.core.errors import ElementNotFound
from clickflow.core.logging import ErrorIds, logError, logEvent, logForDebugging
from clickflow.core.timing import Deadline, clip_timeout, wait_until
from clickflow.models.locator import LocatorCandidate, LocatorKind
from clickflow.tools.observe import DEFAULT_DIAGNOSTIC_SELECTOR, snapshot_elements

# Matches beyond this index are ignored when checking interactability
MAX_MATCHES_PER_CANDIDATE = 20

_INTERACTABLE_JS = """
(el) => {
    const rect = el.getBoundingClientRect();
    if (rect.width === 0 || rect.height === 0) return false;
    const style = window.getComputedStyle(el);
    if (style.display === 'none' || style.visibility === 'hidden') return false;
    if (el.disabled || el.getAttribute('aria-disabled') === 'true') return false;
    return true;
}
"""


class ResolvedElement:
    """An interactable element found by the resolver."""

    def __init__(self, locator: Locator, candidate: LocatorCandidate, index: int = 0) -> None:
        """Initialize a resolved element.

        Args:
            locator: Locator pinned to the matched element (already nth-indexed).
            candidate: The candidate that matched.
            index: Index of the match among the candidate's matches.
        """
        self.locator = locator
        self.candidate = candidate
        self.index = index

    def __repr__(self) -> str:
        return f"ResolvedElement({self.candidate.describe()}#{self.index})"


def build_locator(page: Page, candidate: LocatorCandidate) -> Locator:
    """Translate a LocatorCandidate into a Playwright Locator.

    Args:
        page: The Playwright Page object.
        candidate: The candidate to translate.

    Returns:
        A Locator matching every element the candidate describes.
    """
    if candidate.kind is LocatorKind.CSS:
        return page.locator(candidate.pattern)
    if candidate.kind is LocatorKind.XPATH:
        return page.locator(f"xpath={candidate.pattern}")
    if candidate.kind is LocatorKind.TEXT:
        return page.get_by_text(candidate.pattern, exact=candidate.exact)
    if candidate.name:
        return page.get_by_role(cast(Any, candidate.pattern), name=candidate.name, exact=candidate.exact)
    return page.get_by_role(cast(Any, candidate.pattern))


def is_interactable(locator: Locator) -> bool:
    """Check that an element has a rendered size, is displayed and is enabled."""
    try:
        return bool(locator.evaluate(_INTERACTABLE_JS))
    except Exception as e:
        # Detached or re-rendered between count() and evaluate()
        logForDebugging(f"Interactable check failed: {e}")
        return False


def _interactable_indices(locator: Locator, first_only: bool) -> list[int]:
    indices: list[int] = []
    count = min(locator.count(), MAX_MATCHES_PER_CANDIDATE)
    for i in range(count):
        if is_interactable(locator.nth(i)):
            indices.append(i)
            if first_only:
                break
    return indices


def _validate(candidates: Sequence[LocatorCandidate], timeout_ms: float) -> None:
    if not candidates:
        raise ValueError("candidates must not be empty")
    if timeout_ms <= 0:
        raise ValueError(f"timeout_ms must be positive, got {timeout_ms}")


def _not_found(
    page: Page,
    candidates: Sequence[LocatorCandidate],
    diagnostic_selector: str,
    elapsed_ms: float,
) -> ElementNotFound:
    try:
        found = snapshot_elements(page, diagnostic_selector)
    except Exception as e:
        logError(ErrorIds.ELEMENT_SNAPSHOT_FAILED, f"Failed to snapshot page elements: {e}")
        found = []

    error = ElementNotFound(list(candidates), found)
    logError(
        ErrorIds.ELEMENT_NOT_FOUND,
        error.message,
        extra={"elapsed_ms": round(elapsed_ms), "elements_found": len(found)},
    )
    return error


def _search(
    page: Page,
    candidates: Sequence[LocatorCandidate],
    timeout_ms: float,
    deadline: Deadline | None,
    first_only: bool,
) -> tuple[LocatorCandidate, Locator, list[int]] | None:
    for candidate in candidates:
        locator = build_locator(page, candidate)
        hits: list[int] = []

        def probe() -> bool:
            hits[:] = _interactable_indices(locator, first_only)
            return bool(hits)

        if wait_until(page, probe, clip_timeout(timeout_ms, deadline)):
            return candidate, locator, hits

        logForDebugging(f"No interactable match for {candidate.describe()}")
    return None


def resolve(
    page: Page,
    candidates: Sequence[LocatorCandidate],
    timeout_ms: float,
    deadline: Deadline | None = None,
    diagnostic_selector: str = DEFAULT_DIAGNOSTIC_SELECTOR,
) -> ResolvedElement:
    """Return the first interactable element matched by the candidates.

    Each candidate is polled for at most timeout_ms (clipped to the
    deadline), so a miss fails within roughly len(candidates) * timeout_ms.

    Args:
        page: The Playwright Page object.
        candidates: Ordered, non-empty list of locator candidates.
        timeout_ms: Time to wait for each candidate (must be positive).
        deadline: Optional request deadline.
        diagnostic_selector: Broad selector snapshotted when nothing matches.

    Returns:
        The ResolvedElement for the first interactable match.

    Raises:
        ValueError: If candidates is empty or timeout_ms is not positive.
        ElementNotFound: If no candidate matched an interactable element.
    """
    _validate(candidates, timeout_ms)
    started = time.monotonic()

    found = _search(page, candidates, timeout_ms, deadline, first_only=True)
    if found is None:
        raise _not_found(page, candidates, diagnostic_selector, (time.monotonic() - started) * 1000)

    candidate, locator, hits = found
    logEvent("candidate_matched", {"candidate": candidate.describe(), "index": hits[0]})
    return ResolvedElement(locator.nth(hits[0]), candidate, hits[0])


def resolve_all(
    page: Page,
    candidates: Sequence[LocatorCandidate],
    timeout_ms: float,
    deadline: Deadline | None = None,
    diagnostic_selector: str = "input",
) -> list[ResolvedElement]:
    """Return every interactable match of the first candidate that has any.

    Matches are returned in document order, which is the order used when
    writing one character per element.

    Raises:
        ValueError: If candidates is empty or timeout_ms is not positive.
        ElementNotFound: If no candidate matched an interactable element.
    """
    _validate(candidates, timeout_ms)
    started = time.monotonic()

    found = _search(page, candidates, timeout_ms, deadline, first_only=False)
    if found is None:
        raise _not_found(page, candidates, diagnostic_selector, (time.monotonic() - started) * 1000)

    candidate, locator, hits = found
    logEvent("candidates_matched", {"candidate": candidate.describe(), "count": len(hits)})
    return [ResolvedElement(locator.nth(i), candidate, i) for i in hits]
