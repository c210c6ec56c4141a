"""Attempt and trace models for the interaction engine.

This module defines the records produced while resolving and interacting
with elements:
- TechniqueFailure: why one interaction technique did not take effect
- AttemptResult: the outcome of one resolve-and-interact call
- StepRecord: one entry of a flow trace
"""

from typing import Any

from pydantic import BaseModel, ConfigDict

from clickflow.models.element import ObservedState
from clickflow.models.locator import LocatorCandidate
from clickflow.models.technique import InteractionTechnique

NO_OBSERVABLE_EFFECT = "no observable effect"


class TechniqueFailure(BaseModel):
    """A technique that was applied but did not satisfy the post-condition.

    Attributes:
        technique: The technique that was tried.
        reason: The raised error, or "no observable effect".
    """

    model_config = ConfigDict(frozen=True)

    technique: InteractionTechnique
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {"technique": self.technique.name, "reason": self.reason}


class AttemptResult(BaseModel):
    """Outcome of one resolve-and-interact call.

    Attributes:
        candidate: The locator candidate that matched, if any.
        technique: The technique that satisfied the post-condition, if any.
        elapsed_ms: Wall-clock time spent.
        succeeded: Whether the post-condition was satisfied.
        observed: Page state observed at the end of the call.
        failures: Techniques tried before the successful one (or all of them).
    """

    model_config = ConfigDict(frozen=True)

    candidate: LocatorCandidate | None = None
    technique: InteractionTechnique | None = None
    elapsed_ms: float = 0.0
    succeeded: bool
    observed: ObservedState | None = None
    failures: list[TechniqueFailure] = []

    def to_dict(self) -> dict[str, Any]:
        return {
            "candidate": self.candidate.describe() if self.candidate else None,
            "technique": self.technique.name if self.technique else None,
            "elapsedMs": round(self.elapsed_ms, 1),
            "succeeded": self.succeeded,
            "url": self.observed.url if self.observed else None,
            "failures": [f.to_dict() for f in self.failures],
        }


class StepRecord(BaseModel):
    """One entry in a flow trace.

    Attributes:
        step: Name of the flow step.
        succeeded: Whether the step completed.
        attempt: The step's attempt result, if it interacted with the page.
        error: Error message when the step failed.
    """

    model_config = ConfigDict(frozen=True)

    step: str
    succeeded: bool
    attempt: AttemptResult | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        entry: dict[str, Any] = {"step": self.step, "succeeded": self.succeeded}
        if self.attempt is not None:
            entry.update(self.attempt.to_dict())
            entry["succeeded"] = self.succeeded
        if self.error is not None:
            entry["error"] = self.error
        return entry
