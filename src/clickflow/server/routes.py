"""HTTP routes: health checks and the flow endpoints."""

from typing import Any

from flask import Blueprint, current_app, jsonify, request

from clickflow.config import ServiceConfig
from clickflow.core.browser import SessionFactory
from clickflow.core.errors import FlowError, InputValidationError, UnexpectedFlowError
from clickflow.core.logging import ErrorIds, logError, logEvent
from clickflow.flows.click_play import click_play
from clickflow.flows.login import AWAITING_OTP, login_signup, parse_login_request
from clickflow.server.responses import error_payload, flow_payload, timestamp

api_bp = Blueprint("api", __name__)


def _config() -> ServiceConfig:
    return current_app.config["CLICKFLOW"]


def _session_factory() -> SessionFactory:
    return current_app.extensions["clickflow.session_factory"]


def _fail(error: FlowError, **extra: Any):
    body, status = error_payload(error, **extra)
    return jsonify(body), status


@api_bp.route("/", methods=["GET"])
def index():
    return jsonify({"message": "Server is running", "timestamp": timestamp()})


@api_bp.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "healthy", "timestamp": timestamp()})


@api_bp.route("/debug", methods=["GET"])
def debug():
    config = _config()
    return jsonify({
        "status": "running",
        "timestamp": timestamp(),
        "env": config.env,
        "port": config.port,
    })


@api_bp.route("/click-play", methods=["POST"])
def click_play_endpoint():
    logEvent("request_received", {"endpoint": "/click-play"})
    try:
        result = click_play(_config(), session_factory=_session_factory())
    except FlowError as e:
        logError(e.error_id, e.message)
        return _fail(e)
    except Exception as e:
        logError(ErrorIds.UNEXPECTED_ERROR, "Unhandled error in /click-play", exc_info=True)
        return _fail(UnexpectedFlowError(e))

    body, status = flow_payload(result, "Play button clicked")
    return jsonify(body), status


@api_bp.route("/login-signup", methods=["POST"])
def login_signup_endpoint():
    logEvent("request_received", {"endpoint": "/login-signup"})
    try:
        login_request = parse_login_request(request.get_json(silent=True))
    except InputValidationError as e:
        logError(e.error_id, e.message, extra={"step": e.step})
        return _fail(e)

    try:
        result = login_signup(_config(), login_request, session_factory=_session_factory())
    except FlowError as e:
        logError(e.error_id, e.message)
        return _fail(e)
    except Exception as e:
        logError(ErrorIds.UNEXPECTED_ERROR, "Unhandled error in /login-signup", exc_info=True)
        return _fail(UnexpectedFlowError(e))

    if result.outputs.get("step") == AWAITING_OTP:
        message = "Email submitted; verification code required"
    else:
        message = "Login completed"
    body, status = flow_payload(result, message)
    return jsonify(body), status
