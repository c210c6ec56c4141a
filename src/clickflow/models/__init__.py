"""clickflow data models."""

from clickflow.models.budget import RetryBudget
from clickflow.models.element import BoundingBox, ElementSummary, ObservedState
from clickflow.models.locator import LocatorCandidate, LocatorKind
from clickflow.models.result import (
    NO_OBSERVABLE_EFFECT,
    AttemptResult,
    StepRecord,
    TechniqueFailure,
)
from clickflow.models.technique import InteractionTechnique, TechniqueKind

__all__ = [
    "AttemptResult",
    "BoundingBox",
    "ElementSummary",
    "InteractionTechnique",
    "LocatorCandidate",
    "LocatorKind",
    "NO_OBSERVABLE_EFFECT",
    "ObservedState",
    "RetryBudget",
    "StepRecord",
    "TechniqueFailure",
    "TechniqueKind",
]
