"""Tests for the typed error taxonomy."""

from clickflow.core.errors import (
    AllTechniquesFailed,
    ElementNotFound,
    ErrorKind,
    InputValidationError,
    PostConditionTimeout,
    UnexpectedFlowError,
)
from clickflow.models.element import ElementSummary
from clickflow.models.locator import css, role
from clickflow.models.result import NO_OBSERVABLE_EFFECT, TechniqueFailure
from clickflow.models.technique import InteractionTechnique, TechniqueKind


class TestElementNotFound:
    def test_reports_candidates_and_found_elements(self) -> None:
        error = ElementNotFound(
            [role("button", name="Play Now"), css(".play")],
            [ElementSummary(tag="a", text="Home", classes="nav", visible=True)],
            step="Play button click",
        )
        data = error.to_dict()
        assert data["type"] == "element_not_found"
        assert data["step"] == "Play button click"
        assert data["candidatesTried"] == ["role=button[name='Play Now']", "css=.play"]
        assert data["elementsFound"] == [
            {"tag": "a", "text": "Home", "class": "nav", "visible": True}
        ]
        assert "2 candidate(s)" in error.message
        assert error.http_status == 500


class TestAllTechniquesFailed:
    def test_one_entry_per_failure(self) -> None:
        failures = [
            TechniqueFailure(
                technique=InteractionTechnique(kind=TechniqueKind.NATIVE_ACTIVATE),
                reason="TimeoutError: covered",
            ),
            TechniqueFailure(
                technique=InteractionTechnique(kind=TechniqueKind.POINTER_SIMULATE),
                reason=NO_OBSERVABLE_EFFECT,
            ),
        ]
        error = AllTechniquesFailed(failures, "url changed")
        assert error.kind is ErrorKind.ALL_TECHNIQUES_FAILED
        assert len(error.to_dict()["techniques"]) == 2
        assert "'url changed'" in error.message


class TestOtherErrors:
    def test_post_condition_timeout(self) -> None:
        error = PostConditionTimeout("element appeared: otp", 3000, step="Email submission")
        data = error.to_dict()
        assert data["type"] == "post_condition_timeout"
        assert data["timeoutMs"] == 3000
        assert data["step"] == "Email submission"

    def test_input_validation_is_client_error(self) -> None:
        error = InputValidationError("Email is required", step="Email submission")
        assert error.http_status == 400
        assert error.kind is ErrorKind.INPUT_VALIDATION

    def test_unexpected_wraps_cause(self) -> None:
        cause = KeyError("boom")
        error = UnexpectedFlowError(cause)
        assert error.cause is cause
        assert error.message.startswith("KeyError")
        assert error.kind is ErrorKind.UNEXPECTED
