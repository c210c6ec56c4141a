"""Typed errors raised by the interaction engine and flows.

Every error carries an ErrorKind tag set where the failure happens, so
callers classify failures by kind and step instead of by message text.
"""

from enum import Enum
from typing import Any

from clickflow.core.logging import ErrorIds
from clickflow.models.element import ElementSummary
from clickflow.models.locator import LocatorCandidate
from clickflow.models.result import TechniqueFailure


class ErrorKind(str, Enum):
    """Classification of a flow failure."""

    ELEMENT_NOT_FOUND = "element_not_found"
    ALL_TECHNIQUES_FAILED = "all_techniques_failed"
    POST_CONDITION_TIMEOUT = "post_condition_timeout"
    INPUT_VALIDATION = "input_validation"
    SESSION_ACQUISITION = "session_acquisition"
    REQUEST_TIMEOUT = "request_timeout"
    CONFIGURATION = "configuration"
    UNEXPECTED = "unexpected"


class FlowError(Exception):
    """Base class for failures reported by clickflow.

    Attributes:
        kind: The ErrorKind tag for this failure.
        error_id: The ErrorIds constant used when logging this failure.
        step: Name of the flow step that failed (set by the orchestrator
              when not known at the point of failure).
        details: Extra JSON-serializable diagnostics.
    """

    kind: ErrorKind = ErrorKind.UNEXPECTED
    error_id: str = ErrorIds.UNEXPECTED_ERROR
    http_status: int = 500

    def __init__(
        self,
        message: str,
        step: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.step = step
        self.details: dict[str, Any] = dict(details or {})

    def to_dict(self) -> dict[str, Any]:
        """Return the failure in the shape used by HTTP responses."""
        payload: dict[str, Any] = {
            "error": self.message,
            "type": self.kind.value,
            "step": self.step,
        }
        payload.update(self.details)
        return payload


class ElementNotFound(FlowError):
    """No candidate matched an interactable element within the budget."""

    kind = ErrorKind.ELEMENT_NOT_FOUND
    error_id = ErrorIds.ELEMENT_NOT_FOUND

    def __init__(
        self,
        candidates: list[LocatorCandidate],
        found: list[ElementSummary] | None = None,
        step: str | None = None,
    ) -> None:
        self.candidates = list(candidates)
        self.found = list(found or [])
        tried = ", ".join(c.describe() for c in self.candidates)
        super().__init__(
            f"No interactable element matched any of {len(self.candidates)} "
            f"candidate(s): {tried}",
            step=step,
            details={
                "candidatesTried": [c.describe() for c in self.candidates],
                "elementsFound": [
                    {"tag": e.tag, "text": e.text, "class": e.classes, "visible": e.visible}
                    for e in self.found
                ],
            },
        )


class AllTechniquesFailed(FlowError):
    """An element was found but no technique produced the post-condition."""

    kind = ErrorKind.ALL_TECHNIQUES_FAILED
    error_id = ErrorIds.ALL_TECHNIQUES_FAILED

    def __init__(
        self,
        failures: list[TechniqueFailure],
        post_condition: str = "",
        step: str | None = None,
    ) -> None:
        self.failures = list(failures)
        self.post_condition = post_condition
        message = f"All {len(self.failures)} interaction technique(s) failed"
        if post_condition:
            message += f" to satisfy {post_condition!r}"
        super().__init__(
            message,
            step=step,
            details={"techniques": [f.to_dict() for f in self.failures]},
        )


class PostConditionTimeout(FlowError):
    """An expected page state never appeared after an interaction."""

    kind = ErrorKind.POST_CONDITION_TIMEOUT
    error_id = ErrorIds.POST_CONDITION_TIMEOUT

    def __init__(self, condition: str, timeout_ms: float, step: str | None = None) -> None:
        self.condition = condition
        self.timeout_ms = timeout_ms
        super().__init__(
            f"Timed out after {timeout_ms:.0f}ms waiting for {condition!r}",
            step=step,
            details={"condition": condition, "timeoutMs": timeout_ms},
        )


class InputValidationError(FlowError):
    """Caller input is malformed; raised before any slot or session is touched."""

    kind = ErrorKind.INPUT_VALIDATION
    error_id = ErrorIds.INPUT_VALIDATION
    http_status = 400


class SessionAcquisitionFailure(FlowError):
    """The browser session could not be started."""

    kind = ErrorKind.SESSION_ACQUISITION
    error_id = ErrorIds.SESSION_ACQUISITION_FAILED


class RequestTimeout(FlowError):
    """The request-level deadline expired."""

    kind = ErrorKind.REQUEST_TIMEOUT
    error_id = ErrorIds.REQUEST_TIMEOUT


class ConfigurationError(FlowError):
    """Service configuration is missing or invalid."""

    kind = ErrorKind.CONFIGURATION
    error_id = ErrorIds.CONFIGURATION


class UnexpectedFlowError(FlowError):
    """An exception outside the taxonomy escaped a flow step."""

    kind = ErrorKind.UNEXPECTED
    error_id = ErrorIds.UNEXPECTED_ERROR

    def __init__(self, cause: BaseException, step: str | None = None) -> None:
        self.cause = cause
        super().__init__(
            f"{type(cause).__name__}: {cause}",
            step=step,
        )
