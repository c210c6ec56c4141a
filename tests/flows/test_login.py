"""Tests for the login-signup flow and its request validation."""

import pytest

from clickflow.core.errors import ErrorKind, InputValidationError
from clickflow.flows.login import (
    AWAITING_OTP,
    COMPLETED,
    STEP_EMAIL,
    STEP_OPEN_LOGIN,
    STEP_OTP,
    build_login_flow,
    login_signup,
    parse_login_request,
)

EMAIL_KEY = ("css", "input[type='email']")
SUBMIT_KEY = ("css", "form button[type='submit']")
SLOTS_KEY = ("css", "input[inputmode='numeric'][maxlength='1']")
VERIFY_KEY = ("role", "button", "Verify")
LOGIN_KEY = ("role", "button", "Log in")


@pytest.fixture
def login_page(fake_page, element_factory):
    """An app page with an email form that reveals six code boxes on submit."""

    def show_code_fields() -> None:
        fake_page.add(SLOTS_KEY, *[element_factory() for _ in range(6)])

    def accept_code() -> None:
        fake_page.url = "https://app.example.com/home"

    fake_page.add(EMAIL_KEY, element_factory())
    fake_page.add(SUBMIT_KEY, element_factory(on_click=show_code_fields))
    fake_page.add(VERIFY_KEY, element_factory(on_click=accept_code))
    return fake_page


class TestParseLoginRequest:
    def test_email_only(self) -> None:
        request = parse_login_request({"email": " user@example.com "})
        assert request.email == "user@example.com"
        assert request.otp is None

    def test_with_otp(self) -> None:
        assert parse_login_request({"email": "a@b.co", "otp": "123456"}).otp == "123456"

    def test_empty_otp_is_ignored(self) -> None:
        assert parse_login_request({"email": "a@b.co", "otp": ""}).otp is None

    @pytest.mark.parametrize(
        "body",
        [None, [], {}, {"email": ""}, {"email": "   "}, {"email": 42}, {"email": "not-an-email"}],
    )
    def test_bad_email_fails_at_email_step(self, body: object) -> None:
        with pytest.raises(InputValidationError) as exc_info:
            parse_login_request(body)
        assert exc_info.value.step == STEP_EMAIL

    def test_malformed_email_message_names_the_address(self) -> None:
        with pytest.raises(InputValidationError, match=r"Invalid email address: 'user@example'") as exc_info:
            parse_login_request({"email": "  user@example  "})
        assert exc_info.value.step == STEP_EMAIL

    @pytest.mark.parametrize("otp", ["12345", "1234567", "12a456", 12345])
    def test_bad_otp_fails_at_otp_step(self, otp: object) -> None:
        with pytest.raises(InputValidationError) as exc_info:
            parse_login_request({"email": "a@b.co", "otp": otp})
        assert exc_info.value.step == STEP_OTP


class TestBuildLoginFlow:
    def test_otp_step_only_with_code(self) -> None:
        assert [s.name for s in build_login_flow({"email": "a@b.co"}).steps][-1] == STEP_EMAIL
        assert [s.name for s in build_login_flow({"email": "a@b.co", "otp": "123456"}).steps][-1] == STEP_OTP


class TestLoginSignup:
    def test_stops_at_awaiting_otp(self, config, login_page, fake_session_factory) -> None:
        request = parse_login_request({"email": "user@example.com"})

        result = login_signup(config, request, session_factory=fake_session_factory)

        assert result.success
        assert result.outputs["step"] == AWAITING_OTP
        assert login_page.dom[EMAIL_KEY][0].value == "user@example.com"
        assert len(login_page.dom[SLOTS_KEY]) == 6

    def test_completes_with_otp(self, config, login_page, fake_session_factory) -> None:
        request = parse_login_request({"email": "user@example.com", "otp": "654321"})

        result = login_signup(config, request, session_factory=fake_session_factory)

        assert result.success, result.error
        assert result.outputs["step"] == COMPLETED
        assert [slot.value for slot in login_page.dom[SLOTS_KEY]] == list("654321")
        assert result.final_url == "https://app.example.com/home"

    def test_opens_login_when_form_is_hidden(
        self, config, fake_page, element_factory, fake_session_factory
    ) -> None:
        email = element_factory(visible=False)

        def reveal() -> None:
            email.visible = True

        fake_page.add(EMAIL_KEY, email)
        fake_page.add(LOGIN_KEY, element_factory(on_click=reveal))
        fake_page.add(SUBMIT_KEY, element_factory(
            on_click=lambda: fake_page.add(SLOTS_KEY, *[element_factory() for _ in range(6)])
        ))

        result = login_signup(
            config, parse_login_request({"email": "user@example.com"}), session_factory=fake_session_factory
        )

        assert result.success, result.error
        assert result.trace[1].step == STEP_OPEN_LOGIN
        assert result.trace[1].attempt is not None

    def test_no_code_fields_fails_at_email_step(
        self, config, fake_page, element_factory, fake_session_factory
    ) -> None:
        fake_page.add(EMAIL_KEY, element_factory())
        fake_page.add(SUBMIT_KEY, element_factory())

        result = login_signup(
            config, parse_login_request({"email": "user@example.com"}), session_factory=fake_session_factory
        )

        assert not result.success
        assert result.failed_step == STEP_EMAIL
        assert result.error.kind is ErrorKind.ALL_TECHNIQUES_FAILED

    def test_too_few_code_fields(self, config, fake_page, element_factory, fake_session_factory) -> None:
        fake_page.add(EMAIL_KEY, element_factory())
        fake_page.add(SUBMIT_KEY, element_factory(
            on_click=lambda: fake_page.add(SLOTS_KEY, *[element_factory() for _ in range(4)])
        ))

        result = login_signup(
            config,
            parse_login_request({"email": "user@example.com", "otp": "123456"}),
            session_factory=fake_session_factory,
        )

        assert result.failed_step == STEP_OTP
        assert result.error.kind is ErrorKind.INPUT_VALIDATION
        assert all(slot.value == "" for slot in fake_page.dom[SLOTS_KEY])
