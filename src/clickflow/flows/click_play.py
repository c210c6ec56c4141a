"""The click-play flow: load the play page and activate its Play Now button."""

from typing import Any

from clickflow.config import ServiceConfig
from clickflow.core.browser import SessionFactory, browser_session
from clickflow.core.conditions import PostCondition, any_of, new_page_opened, url_changed
from clickflow.core.executor import ExecutionOutcome
from clickflow.core.orchestrator import (
    Flow,
    FlowContext,
    FlowResult,
    interact_step,
    navigate_step,
)
from clickflow.core.resolver import ResolvedElement
from clickflow.core.timing import call_timeout
from clickflow.flows.base import run_flow
from clickflow.flows.targets import CLICK_TECHNIQUES, PLAY_BUTTON

FLOW_NAME = "click-play"
STEP_LOAD = "Page load"
STEP_CLICK = "Play button click"


def _play_condition(ctx: FlowContext, element: ResolvedElement) -> PostCondition:
    ctx.outputs["buttonFound"] = True
    ctx.outputs["candidate"] = element.candidate.describe()
    # The button either navigates in place or opens a new tab
    return any_of(url_changed(ctx.session.page), new_page_opened(ctx.session.context))


def _follow_new_page(ctx: FlowContext, outcome: ExecutionOutcome) -> None:
    ctx.outputs["technique"] = outcome.technique.name
    if len(ctx.session.context.pages) > 1:
        timeout = call_timeout(ctx.config.navigation_timeout_ms, ctx.deadline, step=STEP_CLICK)
        ctx.session.adopt_newest_page(timeout)
    ctx.outputs["finalUrl"] = ctx.session.url


def build_click_play_flow(params: dict[str, Any] | None = None) -> Flow:
    return Flow(
        FLOW_NAME,
        [
            navigate_step(STEP_LOAD, lambda ctx: ctx.config.require_url("play_url")),
            interact_step(
                STEP_CLICK,
                PLAY_BUTTON,
                CLICK_TECHNIQUES,
                condition=_play_condition,
                after=_follow_new_page,
            ),
        ],
    )


def click_play(
    config: ServiceConfig,
    session_factory: SessionFactory = browser_session,
) -> FlowResult:
    """Run the click-play flow in a fresh browser session.

    Raises:
        SessionAcquisitionFailure: If the browser could not be started.
    """
    result = run_flow(config, build_click_play_flow, session_factory=session_factory)
    result.outputs.setdefault("buttonFound", False)
    return result
