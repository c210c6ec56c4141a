"""Interaction executor: ranked techniques verified by a post-condition.

Whether a given primitive reaches a target's event handlers depends on
overlays, event delegation and trusted-event checks in the target page.
The executor applies techniques in order and, after each, waits a settle
delay and checks the caller's post-condition. A technique that raises is
recorded but does not stop the loop; only the post-condition decides
success.
"""

from typing import Sequence

from playwright.sync_api import Locator, Page

from clickflow.core.conditions import PostCondition
from clickflow.core.errors import AllTechniquesFailed
from clickflow.core.logging import ErrorIds, logError, logEvent, logForDebugging
from clickflow.core.timing import Deadline, call_timeout, clip_timeout, wait_until
from clickflow.models.result import NO_OBSERVABLE_EFFECT, TechniqueFailure
from clickflow.models.technique import InteractionTechnique, TechniqueKind

# Sets the value through the prototype setter so frameworks that track
# input values (React) see the change, then fires input and change.
_SET_VALUE_JS = """
(el, value) => {
    const proto = el instanceof HTMLTextAreaElement
        ? HTMLTextAreaElement.prototype
        : HTMLInputElement.prototype;
    const setter = Object.getOwnPropertyDescriptor(proto, 'value').set;
    el.focus();
    setter.call(el, value);
    el.dispatchEvent(new Event('input', {bubbles: true}));
    el.dispatchEvent(new Event('change', {bubbles: true}));
}
"""


class ExecutionOutcome:
    """Result of a successful execute() call."""

    def __init__(
        self,
        technique: InteractionTechnique,
        attempted: list[InteractionTechnique],
        failures: list[TechniqueFailure],
    ) -> None:
        """Initialize an execution outcome.

        Args:
            technique: The technique that satisfied the post-condition.
            attempted: Every technique applied, in order, ending with `technique`.
            failures: Failures recorded for the techniques before `technique`.
        """
        self.technique = technique
        self.attempted = attempted
        self.failures = failures

    @property
    def succeeded(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"ExecutionOutcome({self.technique.name}, attempted={len(self.attempted)})"


def apply_technique(
    page: Page,
    locator: Locator,
    technique: InteractionTechnique,
    timeout_ms: float,
    text: str | None = None,
) -> None:
    """Apply a single interaction technique to an element.

    Args:
        page: The Playwright Page that owns the element.
        locator: Locator pinned to the element.
        technique: The technique to apply.
        timeout_ms: Timeout for each Playwright call made.
        text: Text for text-entry techniques.

    Raises:
        ValueError: If a text-entry technique is given no text.
        Exception: Whatever the underlying Playwright call raises.
    """
    kind = technique.kind

    if technique.enters_text and text is None:
        raise ValueError(f"technique {technique.name!r} requires text")

    if kind is TechniqueKind.NATIVE_ACTIVATE:
        locator.click(timeout=timeout_ms, delay=technique.delay_ms)

    elif kind is TechniqueKind.FORCED_ACTIVATE:
        locator.click(timeout=timeout_ms, delay=technique.delay_ms, force=True)

    elif kind is TechniqueKind.SYNTHETIC_EVENT_DISPATCH:
        for event in technique.events:
            locator.dispatch_event(event, timeout=timeout_ms)

    elif kind is TechniqueKind.POINTER_SIMULATE:
        locator.scroll_into_view_if_needed(timeout=timeout_ms)
        box = locator.bounding_box(timeout=timeout_ms)
        if box is None:
            raise RuntimeError("element has no bounding box")
        x = box["x"] + box["width"] / 2 + technique.offset_x
        y = box["y"] + box["height"] / 2 + technique.offset_y
        page.mouse.move(x, y)
        page.mouse.down()
        if technique.delay_ms:
            page.wait_for_timeout(technique.delay_ms)
        page.mouse.up()

    elif kind is TechniqueKind.KEYBOARD_ACTIVATE:
        locator.focus(timeout=timeout_ms)
        locator.press(technique.key, timeout=timeout_ms)

    elif kind is TechniqueKind.FILL:
        locator.fill(text, timeout=timeout_ms)

    elif kind is TechniqueKind.TYPE_SEQUENTIALLY:
        locator.fill("", timeout=timeout_ms)
        locator.press_sequentially(text, delay=technique.delay_ms, timeout=timeout_ms)

    elif kind is TechniqueKind.SCRIPT_SET_VALUE:
        locator.evaluate(_SET_VALUE_JS, text)

    else:
        raise ValueError(f"Unsupported technique: {kind!r}")


def execute(
    page: Page,
    locator: Locator,
    techniques: Sequence[InteractionTechnique],
    post_condition: PostCondition,
    settle_ms: float = 500,
    timeout_ms: float = 5000,
    verify_timeout_ms: float = 0,
    text: str | None = None,
    deadline: Deadline | None = None,
) -> ExecutionOutcome:
    """Apply techniques in order until the post-condition holds.

    Args:
        page: The Playwright Page that owns the element.
        locator: Locator pinned to the resolved element.
        techniques: Ordered, non-empty list of techniques.
        post_condition: Observable change that marks success.
        settle_ms: Delay after each technique before verifying (>= 0).
        timeout_ms: Timeout for each technique's Playwright calls.
        verify_timeout_ms: How long to keep polling the post-condition after
            settling. 0 means a single check.
        text: Text for text-entry techniques.
        deadline: Optional request deadline.

    Returns:
        ExecutionOutcome naming the successful technique.

    Raises:
        ValueError: If techniques is empty, settle_ms is negative, or a
            text-entry technique is given without text.
        AllTechniquesFailed: If no technique satisfied the post-condition;
            carries exactly one failure per technique.
        RequestTimeout: If the deadline expires before a technique starts.
    """
    if not techniques:
        raise ValueError("techniques must not be empty")
    if settle_ms < 0:
        raise ValueError(f"settle_ms must be non-negative, got {settle_ms}")
    if text is None and any(t.enters_text for t in techniques):
        raise ValueError("text-entry techniques require text")

    attempted: list[InteractionTechnique] = []
    failures: list[TechniqueFailure] = []

    for technique in techniques:
        call_ms = call_timeout(timeout_ms, deadline)
        attempted.append(technique)
        error: str | None = None

        try:
            apply_technique(page, locator, technique, call_ms, text)
        except Exception as e:
            error = f"{type(e).__name__}: {e}"
            logError(
                ErrorIds.TECHNIQUE_FAILED,
                f"Technique {technique.name} raised",
                extra={"error": error},
            )

        settle = clip_timeout(settle_ms, deadline)
        if settle > 0:
            page.wait_for_timeout(settle)

        if wait_until(page, post_condition.check, verify_timeout_ms, deadline=deadline):
            logEvent(
                "technique_succeeded",
                {"technique": technique.name, "condition": post_condition.name, "attempt": len(attempted)},
            )
            return ExecutionOutcome(technique, attempted, failures)

        reason = error or NO_OBSERVABLE_EFFECT
        failures.append(TechniqueFailure(technique=technique, reason=reason))
        logForDebugging(
            f"Technique {technique.name} had no effect",
            level="info",
            extra={"reason": reason},
        )

    error_obj = AllTechniquesFailed(failures, post_condition.name)
    logError(ErrorIds.ALL_TECHNIQUES_FAILED, error_obj.message)
    raise error_obj
