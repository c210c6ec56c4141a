"""The login-signup flow: submit an email, then optionally a one-time code.

Without a code the flow stops once the code fields are on screen
("awaiting_otp"); with one it fills the fields and waits for the app to
accept it ("completed").
"""

import re
from typing import Any

from pydantic import BaseModel, ConfigDict

from clickflow.config import ServiceConfig
from clickflow.core.browser import SessionFactory, browser_session
from clickflow.core.conditions import (
    PostCondition,
    any_of,
    await_condition,
    element_appeared,
    element_gone,
    url_changed,
    value_equals,
)
from clickflow.core.errors import InputValidationError
from clickflow.core.executor import execute
from clickflow.core.orchestrator import (
    Flow,
    FlowContext,
    FlowResult,
    Step,
    interact_step,
    navigate_step,
)
from clickflow.core.resolver import ResolvedElement, resolve, resolve_all
from clickflow.core.timing import wait_until
from clickflow.flows.base import run_flow
from clickflow.flows.code_entry import enter_code, validate_code
from clickflow.flows.targets import (
    CLICK_TECHNIQUES,
    EMAIL_INPUT,
    EMAIL_SUBMIT,
    LOGIN_ENTRY,
    OTP_LENGTH,
    OTP_SLOTS,
    OTP_SUBMIT,
    TEXT_TECHNIQUES,
)
from clickflow.models.result import AttemptResult

FLOW_NAME = "login-signup"
STEP_OPEN_APP = "Open app"
STEP_OPEN_LOGIN = "Open login"
STEP_EMAIL = "Email submission"
STEP_OTP = "OTP verification"

AWAITING_OTP = "awaiting_otp"
COMPLETED = "completed"

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class LoginRequest(BaseModel):
    """Body of a login-signup request, as returned by parse_login_request."""

    model_config = ConfigDict(frozen=True)

    email: str
    otp: str | None = None


def parse_login_request(body: Any) -> LoginRequest:
    """Validate a login-signup request body before any browser is launched.

    Raises:
        InputValidationError: With step "Email submission" for a missing or
            malformed email, "OTP verification" for a malformed code.
    """
    if not isinstance(body, dict):
        raise InputValidationError("Request body must be a JSON object", step=STEP_EMAIL)

    email = body.get("email")
    if not isinstance(email, str) or not email.strip():
        raise InputValidationError("Email is required", step=STEP_EMAIL)
    email = email.strip()
    if not _EMAIL_PATTERN.match(email):
        raise InputValidationError(f"Invalid email address: {email!r}", step=STEP_EMAIL)

    otp = body.get("otp")
    if otp is not None and otp != "":
        try:
            validate_code(str(otp), OTP_LENGTH)
        except InputValidationError as e:
            e.step = STEP_OTP
            raise
        return LoginRequest(email=email, otp=str(otp))

    return LoginRequest(email=email)


def _open_login(ctx: FlowContext) -> AttemptResult | None:
    page = ctx.session.page
    email_visible = element_appeared(page, EMAIL_INPUT)
    if wait_until(page, email_visible.check, ctx.budget.per_attempt_timeout_ms, deadline=ctx.deadline):
        # The app opened straight on the login form
        return None

    step = interact_step(
        STEP_OPEN_LOGIN,
        LOGIN_ENTRY,
        CLICK_TECHNIQUES,
        condition=lambda c, el: element_appeared(c.session.page, EMAIL_INPUT),
    )
    return step.action(ctx)


def _email_value(ctx: FlowContext, element: ResolvedElement) -> PostCondition:
    return value_equals(element.locator, ctx.params["email"])


def _email_submitted(ctx: FlowContext, element: ResolvedElement) -> PostCondition:
    page = ctx.session.page
    return any_of(
        element_appeared(page, OTP_SLOTS, name="code fields"),
        element_gone(page, EMAIL_INPUT, name="email field"),
        url_changed(page),
    )


_enter_email = interact_step(
    STEP_EMAIL,
    EMAIL_INPUT,
    TEXT_TECHNIQUES,
    condition=_email_value,
    text=lambda ctx: ctx.params["email"],
    diagnostic_selector="input",
)

_submit_email = interact_step(
    STEP_EMAIL,
    EMAIL_SUBMIT,
    CLICK_TECHNIQUES,
    condition=_email_submitted,
)


def _submit_email_step(ctx: FlowContext) -> AttemptResult | None:
    _enter_email.action(ctx)
    attempt = _submit_email.action(ctx)

    page = ctx.session.page
    await_condition(
        page,
        element_appeared(page, OTP_SLOTS, name="code fields"),
        ctx.config.navigation_timeout_ms,
        deadline=ctx.deadline,
        step=STEP_EMAIL,
    )
    ctx.outputs["step"] = AWAITING_OTP
    return attempt


def _verify_otp_step(ctx: FlowContext) -> AttemptResult | None:
    page = ctx.session.page
    per_attempt = ctx.budget.per_attempt_timeout_ms
    accepted = any_of(
        url_changed(page),
        element_gone(page, OTP_SLOTS, name="code fields"),
    )

    slots = resolve_all(page, OTP_SLOTS, per_attempt, deadline=ctx.deadline)
    outcomes = enter_code(
        page,
        [slot.locator for slot in slots],
        ctx.params["otp"],
        expected_length=OTP_LENGTH,
        timeout_ms=per_attempt,
        verify_timeout_ms=ctx.config.verify_timeout_ms,
        deadline=ctx.deadline,
    )
    attempt = AttemptResult(
        candidate=slots[0].candidate,
        technique=outcomes[-1].technique,
        succeeded=True,
        observed=ctx.observe(),
    )

    # Many code widgets submit on the last digit; press submit only if not
    if not wait_until(page, accepted.check, ctx.config.verify_timeout_ms, deadline=ctx.deadline):
        button = resolve(page, OTP_SUBMIT, per_attempt, deadline=ctx.deadline)
        outcome = execute(
            page,
            button.locator,
            CLICK_TECHNIQUES,
            accepted,
            settle_ms=ctx.config.settle_ms,
            timeout_ms=per_attempt,
            verify_timeout_ms=ctx.config.verify_timeout_ms,
            deadline=ctx.deadline,
        )
        attempt = AttemptResult(
            candidate=button.candidate,
            technique=outcome.technique,
            succeeded=True,
            observed=ctx.observe(),
            failures=outcome.failures,
        )

    await_condition(page, accepted, ctx.config.navigation_timeout_ms, deadline=ctx.deadline, step=STEP_OTP)
    ctx.outputs["step"] = COMPLETED
    return attempt


def build_login_flow(params: dict[str, Any]) -> Flow:
    steps = [
        navigate_step(STEP_OPEN_APP, lambda ctx: ctx.config.require_url("app_url")),
        Step(STEP_OPEN_LOGIN, _open_login),
        Step(STEP_EMAIL, _submit_email_step),
    ]
    if params.get("otp"):
        steps.append(Step(STEP_OTP, _verify_otp_step))
    return Flow(FLOW_NAME, steps)


def login_signup(
    config: ServiceConfig,
    request: LoginRequest,
    session_factory: SessionFactory = browser_session,
) -> FlowResult:
    """Run the login-signup flow in a fresh browser session.

    Raises:
        SessionAcquisitionFailure: If the browser could not be started.
    """
    params: dict[str, Any] = {"email": request.email}
    if request.otp:
        params["otp"] = request.otp
    return run_flow(config, build_login_flow, params, session_factory=session_factory)
