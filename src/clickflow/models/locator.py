"""Locator candidate models.

This module defines the LocatorCandidate model, an ordered descriptor
used by the element resolver to find an element on a page.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class LocatorKind(str, Enum):
    """How a candidate's pattern is interpreted.

    CSS and XPATH are structural selectors; TEXT matches visible text;
    ROLE matches an ARIA role with an optional accessible name.
    """

    CSS = "css"
    XPATH = "xpath"
    TEXT = "text"
    ROLE = "role"


class LocatorCandidate(BaseModel):
    """A single way of finding an element.

    Attributes:
        kind: How the pattern is interpreted.
        pattern: Selector, XPath expression, text, or ARIA role.
        name: Accessible name to match (ROLE only).
        exact: Whether text/name matching is exact (TEXT and ROLE only).
        label: Optional short label used in traces and responses.
    """

    model_config = ConfigDict(frozen=True)

    kind: LocatorKind
    pattern: str
    name: str | None = None
    exact: bool = False
    label: str | None = None

    @field_validator("pattern")
    @classmethod
    def must_not_be_empty(cls, v: str) -> str:
        """Validate that the pattern is not blank."""
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @model_validator(mode="after")
    def name_only_for_role(self) -> "LocatorCandidate":
        """Validate that an accessible name is only given to ROLE candidates."""
        if self.name is not None and self.kind is not LocatorKind.ROLE:
            raise ValueError("name is only valid for role candidates")
        return self

    def describe(self) -> str:
        """Return a compact human-readable description of the candidate."""
        if self.label:
            return self.label
        if self.kind is LocatorKind.ROLE and self.name:
            return f"role={self.pattern}[name={self.name!r}]"
        return f"{self.kind.value}={self.pattern}"


def css(pattern: str, label: str | None = None) -> LocatorCandidate:
    return LocatorCandidate(kind=LocatorKind.CSS, pattern=pattern, label=label)


def xpath(pattern: str, label: str | None = None) -> LocatorCandidate:
    return LocatorCandidate(kind=LocatorKind.XPATH, pattern=pattern, label=label)


def text(pattern: str, exact: bool = False, label: str | None = None) -> LocatorCandidate:
    return LocatorCandidate(kind=LocatorKind.TEXT, pattern=pattern, exact=exact, label=label)


def role(
    pattern: str,
    name: str | None = None,
    exact: bool = False,
    label: str | None = None,
) -> LocatorCandidate:
    return LocatorCandidate(
        kind=LocatorKind.ROLE, pattern=pattern, name=name, exact=exact, label=label
    )
