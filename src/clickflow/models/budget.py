"""Retry budget model."""

from pydantic import BaseModel, ConfigDict, field_validator


class RetryBudget(BaseModel):
    """Timing and retry limits for one request.

    Attributes:
        max_attempts: How many times a step re-resolves its element and
            re-runs its technique list before giving up.
        per_attempt_timeout_ms: Bound on each candidate lookup and each technique.
        total_timeout_ms: Bound on the whole request.
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int = 1
    per_attempt_timeout_ms: float = 5000
    total_timeout_ms: float = 120000

    @field_validator("max_attempts", "per_attempt_timeout_ms", "total_timeout_ms")
    @classmethod
    def must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"must be positive, got {v}")
        return v
