"""Running a flow inside a scoped browser session."""

from pathlib import Path
from typing import Any, Callable

from clickflow.config import ServiceConfig
from clickflow.core.browser import BrowserSession, SessionFactory, browser_session
from clickflow.core.logging import ErrorIds, logError
from clickflow.core.orchestrator import Flow, FlowContext, FlowResult, FlowRunner
from clickflow.core.timing import Deadline
from clickflow.tools.screenshot import capture_screenshot, screenshot_name


def _save_failure_screenshot(session: BrowserSession, config: ServiceConfig, flow: str) -> str | None:
    if not config.screenshot_dir:
        return None
    path = Path(config.screenshot_dir) / screenshot_name(flow)
    try:
        return str(capture_screenshot(session.page, path, full_page=True))
    except Exception as e:
        logError(ErrorIds.SCREENSHOT_CAPTURE_FAILED, f"Failed to save screenshot: {e}")
        return None


def run_flow(
    config: ServiceConfig,
    build: Callable[[dict[str, Any]], Flow],
    params: dict[str, Any] | None = None,
    session_factory: SessionFactory = browser_session,
) -> FlowResult:
    """Acquire a session, run a flow in it, and release the session.

    The request deadline starts before the browser is launched, so launch
    time counts against the request budget.

    Args:
        config: Service configuration.
        build: Builds the flow from the request parameters.
        params: Request parameters passed to the flow.
        session_factory: Context manager yielding a BrowserSession.

    Returns:
        The FlowResult. Step failures are reported in the result.

    Raises:
        SessionAcquisitionFailure: If the browser could not be started.
    """
    params = dict(params or {})
    budget = config.budget
    deadline = Deadline(budget.total_timeout_ms)
    flow = build(params)

    with session_factory(config) as session:
        ctx = FlowContext(session, config, params=params, budget=budget, deadline=deadline)
        result = FlowRunner().run(flow, ctx)
        if not result.success:
            screenshot = _save_failure_screenshot(session, config, flow.name)
            if screenshot:
                result.outputs["screenshot"] = screenshot
        return result
