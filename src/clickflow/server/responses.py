"""JSON payloads returned by the HTTP endpoints."""

from datetime import datetime, timezone
from typing import Any

from clickflow.core.errors import FlowError
from clickflow.core.orchestrator import FlowResult


def timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def error_payload(error: FlowError, message: str | None = None, **extra: Any) -> tuple[dict[str, Any], int]:
    """Build the failure body and status code for a typed error."""
    details = error.to_dict()
    details.update(extra)
    details["timestamp"] = timestamp()
    body = {
        "success": False,
        "message": message or error.message,
        "details": details,
    }
    return body, error.http_status


def flow_payload(result: FlowResult, success_message: str) -> tuple[dict[str, Any], int]:
    """Build the response body and status code for a finished flow.

    Successful flows report the final URL, the technique and locator that
    did the last interaction, and the per-step trace. Failed flows report
    the typed error with the step it happened in.
    """
    outputs = {k: v for k, v in result.outputs.items() if k not in ("candidate", "technique")}
    last = result.last_attempt

    if result.success or result.error is None:
        details: dict[str, Any] = {
            **outputs,
            "finalUrl": result.outputs.get("finalUrl", result.final_url),
            "technique": result.outputs.get("technique") or (last.technique.name if last and last.technique else None),
            "strategy": result.outputs.get("candidate") or (last.candidate.describe() if last and last.candidate else None),
            "trace": result.trace_dicts(),
            "timestamp": timestamp(),
        }
        return {"success": True, "message": success_message, "details": details}, 200

    # "step" in a failure names the failed step, not the flow's progress
    failure_outputs = {k: v for k, v in outputs.items() if k not in ("step", "finalUrl")}
    return error_payload(
        result.error,
        message=f"{result.flow} failed at step {result.failed_step!r}: {result.error.message}",
        trace=result.trace_dicts(),
        finalUrl=result.final_url,
        **failure_outputs,
    )
