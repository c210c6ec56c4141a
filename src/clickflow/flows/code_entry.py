"""One-time code entry into one-element-per-character fields."""

from typing import Sequence

from playwright.sync_api import Locator, Page

from clickflow.core.conditions import value_equals
from clickflow.core.errors import InputValidationError
from clickflow.core.executor import ExecutionOutcome, execute
from clickflow.core.timing import Deadline
from clickflow.flows.targets import OTP_LENGTH, TEXT_TECHNIQUES
from clickflow.models.technique import InteractionTechnique


def validate_code(code: str | None, expected_length: int = OTP_LENGTH) -> str:
    """Check that a one-time code is all digits and exactly the expected length.

    Raises:
        InputValidationError: If the code is missing, non-numeric or the wrong length.
    """
    if not code:
        raise InputValidationError("Verification code is required")
    if not code.isdigit():
        raise InputValidationError("Verification code must contain only digits")
    if len(code) != expected_length:
        raise InputValidationError(
            f"Verification code must be exactly {expected_length} digits, got {len(code)}"
        )
    return code


def enter_code(
    page: Page,
    slots: Sequence[Locator],
    code: str,
    expected_length: int = OTP_LENGTH,
    techniques: Sequence[InteractionTechnique] = TEXT_TECHNIQUES,
    settle_ms: float = 0,
    timeout_ms: float = 5000,
    verify_timeout_ms: float = 1000,
    deadline: Deadline | None = None,
) -> list[ExecutionOutcome]:
    """Write character i of the code into slot i, in index order.

    The code and slot count are both validated before any slot is touched;
    fewer slots than characters is rejected rather than partially filled.

    Args:
        page: The Playwright Page that owns the slots.
        slots: One locator per character field, in document order.
        code: The one-time code.
        expected_length: Number of characters the code must have.
        techniques: Text-entry techniques tried per slot.
        settle_ms: Delay after each technique before checking the slot value.
        timeout_ms: Timeout for each technique.
        verify_timeout_ms: How long to poll each slot's value.
        deadline: Optional request deadline.

    Returns:
        One ExecutionOutcome per character.

    Raises:
        InputValidationError: If the code is invalid or there are too few slots.
        AllTechniquesFailed: If a slot never holds its character.
    """
    validate_code(code, expected_length)
    if len(slots) < len(code):
        raise InputValidationError(
            f"Expected {len(code)} code fields, found {len(slots)}"
        )

    outcomes: list[ExecutionOutcome] = []
    for slot, char in zip(slots, code):
        outcomes.append(
            execute(
                page,
                slot,
                techniques,
                value_equals(slot, char),
                settle_ms=settle_ms,
                timeout_ms=timeout_ms,
                verify_timeout_ms=verify_timeout_ms,
                text=char,
                deadline=deadline,
            )
        )
    return outcomes
