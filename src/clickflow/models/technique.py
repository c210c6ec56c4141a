"""Interaction technique models.

This module defines the InteractionTechnique model, an ordered strategy
the executor applies to a resolved element.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator


class TechniqueKind(str, Enum):
    """Ways of triggering an effect on an element.

    The first five kinds activate the element; the last three enter text
    and consume the text handed to the executor.
    """

    NATIVE_ACTIVATE = "native-activate"
    FORCED_ACTIVATE = "forced-activate"
    SYNTHETIC_EVENT_DISPATCH = "synthetic-event-dispatch"
    POINTER_SIMULATE = "pointer-simulate"
    KEYBOARD_ACTIVATE = "keyboard-activate"
    FILL = "fill"
    TYPE_SEQUENTIALLY = "type-sequentially"
    SCRIPT_SET_VALUE = "script-set-value"


TEXT_ENTRY_KINDS = frozenset(
    {TechniqueKind.FILL, TechniqueKind.TYPE_SEQUENTIALLY, TechniqueKind.SCRIPT_SET_VALUE}
)


class InteractionTechnique(BaseModel):
    """A single way of interacting with a resolved element.

    Attributes:
        kind: The interaction primitive to use.
        offset_x: Horizontal pointer offset from the element's center (px).
        offset_y: Vertical pointer offset from the element's center (px).
        delay_ms: Delay between pointer down/up or between typed keys (ms).
        events: DOM event types dispatched by SYNTHETIC_EVENT_DISPATCH, in order.
        key: Key pressed by KEYBOARD_ACTIVATE.
    """

    model_config = ConfigDict(frozen=True)

    kind: TechniqueKind
    offset_x: float = 0.0
    offset_y: float = 0.0
    delay_ms: float = 0.0
    events: tuple[str, ...] = ("click",)
    key: str = "Enter"

    @field_validator("delay_ms")
    @classmethod
    def must_be_non_negative(cls, v: float) -> float:
        """Validate that the delay is non-negative."""
        if v < 0:
            raise ValueError(f"must be non-negative, got {v}")
        return v

    @field_validator("events")
    @classmethod
    def must_have_events(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Validate that at least one event type is given."""
        if not v:
            raise ValueError("must contain at least one event type")
        return v

    @property
    def enters_text(self) -> bool:
        """True for techniques that write text into the element."""
        return self.kind in TEXT_ENTRY_KINDS

    @property
    def name(self) -> str:
        """Name reported in traces and responses."""
        return self.kind.value
