"""Concrete flows served by clickflow."""

from clickflow.flows.click_play import build_click_play_flow, click_play
from clickflow.flows.code_entry import enter_code, validate_code
from clickflow.flows.login import (
    AWAITING_OTP,
    COMPLETED,
    LoginRequest,
    build_login_flow,
    login_signup,
    parse_login_request,
)

__all__ = [
    "AWAITING_OTP",
    "COMPLETED",
    "LoginRequest",
    "build_click_play_flow",
    "build_login_flow",
    "click_play",
    "enter_code",
    "login_signup",
    "parse_login_request",
    "validate_code",
]
