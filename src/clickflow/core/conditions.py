"""Post-conditions: observable page changes that confirm an interaction.

No interaction technique reports whether the target page reacted, so
success is decided by checking page state the interaction should change.
Each factory captures its baseline when called, so build the condition
immediately before interacting.
"""

from typing import Callable, Sequence

from playwright.sync_api import BrowserContext, Locator, Page

from clickflow.core.errors import PostConditionTimeout
from clickflow.core.resolver import build_locator
from clickflow.core.timing import Deadline, wait_until
from clickflow.models.locator import LocatorCandidate


class PostCondition:
    """A named predicate over observable page state.

    Args:
        name: Description used in logs, traces and errors.
        predicate: Zero-argument callable returning True once satisfied.
    """

    def __init__(self, name: str, predicate: Callable[[], bool]) -> None:
        self.name = name
        self._predicate = predicate

    def check(self) -> bool:
        return bool(self._predicate())

    def __repr__(self) -> str:
        return f"PostCondition({self.name})"


def url_changed(page: Page) -> PostCondition:
    """Satisfied once the page URL differs from its current value."""
    baseline = page.url
    return PostCondition(
        f"url changed from {baseline}",
        lambda: page.url != baseline,
    )


def new_page_opened(context: BrowserContext) -> PostCondition:
    """Satisfied once the context has more pages (tabs/popups) than now."""
    baseline = len(context.pages)
    return PostCondition(
        "new browsing context opened",
        lambda: len(context.pages) > baseline,
    )


def _any_visible(page: Page, candidates: Sequence[LocatorCandidate]) -> bool:
    for candidate in candidates:
        locator = build_locator(page, candidate)
        if locator.count() > 0 and locator.first.is_visible():
            return True
    return False


def element_appeared(page: Page, candidates: Sequence[LocatorCandidate], name: str = "") -> PostCondition:
    """Satisfied once any candidate matches a visible element."""
    label = name or " | ".join(c.describe() for c in candidates)
    return PostCondition(
        f"element appeared: {label}",
        lambda: _any_visible(page, candidates),
    )


def element_gone(page: Page, candidates: Sequence[LocatorCandidate], name: str = "") -> PostCondition:
    """Satisfied once no candidate matches a visible element."""
    label = name or " | ".join(c.describe() for c in candidates)
    return PostCondition(
        f"element gone: {label}",
        lambda: not _any_visible(page, candidates),
    )


def value_equals(locator: Locator, value: str) -> PostCondition:
    """Satisfied once an input element holds the given value."""
    return PostCondition(
        "input value set",
        lambda: locator.input_value() == value,
    )


def any_of(*conditions: PostCondition) -> PostCondition:
    """Satisfied once any of the given conditions is."""
    if not conditions:
        raise ValueError("any_of requires at least one condition")
    return PostCondition(
        " or ".join(c.name for c in conditions),
        lambda: any(c.check() for c in conditions),
    )


def await_condition(
    page: Page,
    condition: PostCondition,
    timeout_ms: float,
    deadline: Deadline | None = None,
    step: str | None = None,
) -> None:
    """Wait for a post-condition, failing the step if it never holds.

    Raises:
        PostConditionTimeout: If the condition does not hold within the timeout.
    """
    if not wait_until(page, condition.check, timeout_ms, deadline=deadline):
        raise PostConditionTimeout(condition.name, timeout_ms, step=step)
