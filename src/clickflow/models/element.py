"""Element and page-state models for diagnostics.

This module defines the ElementSummary model which describes an element
found on the page, and the ObservedState model which captures the page
state after an interaction.
"""

from pydantic import BaseModel, ConfigDict, field_validator


class BoundingBox(BaseModel):
    """Bounding box of an element on the page.

    Attributes:
        x: X coordinate in pixels.
        y: Y coordinate in pixels.
        width: Width in pixels (must be non-negative).
        height: Height in pixels (must be non-negative).
    """

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    width: float
    height: float

    @field_validator("width", "height")
    @classmethod
    def must_be_non_negative(cls, v: float, info: object) -> float:
        """Validate that dimensions are non-negative."""
        if v < 0:
            raise ValueError(f"must be non-negative, got {v}")
        return v

    @property
    def center(self) -> tuple[float, float]:
        """Center point of the box."""
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0


class ElementSummary(BaseModel):
    """A diagnostic record of an element found on the page.

    Reported alongside ElementNotFound so the caller can see what the
    page offered instead of the expected element.

    Attributes:
        tag: Lower-case tag name.
        text: Visible text (truncated).
        classes: Value of the class attribute.
        role: Explicit role attribute, if any.
        visible: Whether the element passed the interactable check.
        bbox: Bounding box of the element on the page.
    """

    model_config = ConfigDict(frozen=True)

    tag: str
    text: str = ""
    classes: str = ""
    role: str | None = None
    visible: bool = False
    bbox: BoundingBox | None = None


class ObservedState(BaseModel):
    """Observable page state captured after an interaction.

    Attributes:
        url: URL of the active page.
        page_count: Number of open pages (tabs) in the browser context.
        title: Title of the active page.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    page_count: int = 1
    title: str = ""
