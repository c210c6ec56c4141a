"""Flow orchestration: named sequences of resolve-and-interact steps.

A flow runs its steps in order against one browser session. The first
failing step aborts the flow; later steps are never invoked and the
browser is left as-is for inspection until the session is released.
"""

import time
from typing import TYPE_CHECKING, Any, Callable, Sequence

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from clickflow.core.browser import BrowserSession
from clickflow.core.conditions import PostCondition
from clickflow.core.errors import (
    AllTechniquesFailed,
    FlowError,
    PostConditionTimeout,
    UnexpectedFlowError,
)
from clickflow.core.executor import ExecutionOutcome, execute
from clickflow.core.logging import ErrorIds, logError, logEvent, logForDebugging
from clickflow.core.resolver import ResolvedElement, resolve
from clickflow.core.timing import Deadline, call_timeout
from clickflow.models.budget import RetryBudget
from clickflow.models.locator import LocatorCandidate
from clickflow.models.result import AttemptResult, StepRecord
from clickflow.models.technique import InteractionTechnique
from clickflow.tools.observe import DEFAULT_DIAGNOSTIC_SELECTOR, observe_state

if TYPE_CHECKING:
    from clickflow.config import ServiceConfig


class FlowContext:
    """Everything a step needs, passed explicitly to each step.

    Attributes:
        session: The browser session for this request.
        config: Service configuration.
        params: Caller-supplied flow parameters (e.g., email, otp).
        budget: Retry budget for the request.
        deadline: Request deadline derived from the budget.
        outputs: Values steps publish for the response (e.g., finalUrl).
    """

    def __init__(
        self,
        session: BrowserSession,
        config: "ServiceConfig",
        params: dict[str, Any] | None = None,
        budget: RetryBudget | None = None,
        deadline: Deadline | None = None,
    ) -> None:
        self.session = session
        self.config = config
        self.params: dict[str, Any] = dict(params or {})
        self.budget = budget or config.budget
        self.deadline = deadline or Deadline(self.budget.total_timeout_ms)
        self.outputs: dict[str, Any] = {}

    def observe(self) -> Any:
        return observe_state(self.session.page, self.session.context)


StepAction = Callable[[FlowContext], "AttemptResult | None"]


class Step:
    """A named unit of a flow."""

    def __init__(self, name: str, action: StepAction) -> None:
        self.name = name
        self.action = action

    def __repr__(self) -> str:
        return f"Step({self.name})"


class Flow:
    """A named, ordered sequence of steps."""

    def __init__(self, name: str, steps: Sequence[Step]) -> None:
        if not steps:
            raise ValueError("a flow needs at least one step")
        self.name = name
        self.steps = list(steps)


class FlowResult:
    """Outcome of running a flow.

    Attributes:
        flow: Name of the flow.
        success: True if every step completed.
        final_url: URL of the active page when the flow ended.
        trace: One StepRecord per invoked step, in order.
        failed_step: Name of the step that failed, if any.
        error: The typed error that aborted the flow, if any.
        outputs: Values published by steps.
    """

    def __init__(
        self,
        flow: str,
        success: bool,
        final_url: str,
        trace: list[StepRecord],
        outputs: dict[str, Any],
        failed_step: str | None = None,
        error: FlowError | None = None,
    ) -> None:
        self.flow = flow
        self.success = success
        self.final_url = final_url
        self.trace = trace
        self.outputs = outputs
        self.failed_step = failed_step
        self.error = error

    @property
    def last_attempt(self) -> AttemptResult | None:
        for record in reversed(self.trace):
            if record.attempt is not None and record.attempt.technique is not None:
                return record.attempt
        return None

    def trace_dicts(self) -> list[dict[str, Any]]:
        return [record.to_dict() for record in self.trace]


def _current_url(session: BrowserSession) -> str:
    try:
        return session.url
    except Exception:
        return ""


class FlowRunner:
    """Runs flows step by step and records a trace."""

    def run(self, flow: Flow, ctx: FlowContext) -> FlowResult:
        """Run a flow to completion or to its first failing step.

        Args:
            flow: The flow to run.
            ctx: The context handed to every step.

        Returns:
            A FlowResult. Failures are reported in the result, not raised.
        """
        trace: list[StepRecord] = []
        logEvent("flow_started", {"flow": flow.name, "steps": len(flow.steps)})

        for step in flow.steps:
            try:
                ctx.deadline.check(step.name)
                attempt = step.action(ctx)
            except FlowError as e:
                return self._abort(flow, ctx, trace, step, e)
            except Exception as e:
                logError(
                    UnexpectedFlowError.error_id,
                    f"Unexpected error in step {step.name!r}",
                    exc_info=True,
                )
                return self._abort(flow, ctx, trace, step, UnexpectedFlowError(e))

            trace.append(StepRecord(step=step.name, succeeded=True, attempt=attempt))
            logEvent("step_completed", {"flow": flow.name, "step": step.name})

        final_url = _current_url(ctx.session)
        ctx.outputs.setdefault("finalUrl", final_url)
        logEvent("flow_completed", {"flow": flow.name, "final_url": final_url})
        return FlowResult(
            flow=flow.name,
            success=True,
            final_url=final_url,
            trace=trace,
            outputs=ctx.outputs,
        )

    def _abort(
        self,
        flow: Flow,
        ctx: FlowContext,
        trace: list[StepRecord],
        step: Step,
        error: FlowError,
    ) -> FlowResult:
        error.step = step.name
        trace.append(StepRecord(step=step.name, succeeded=False, error=error.message))
        logError(
            error.error_id,
            f"Flow {flow.name!r} failed at step {step.name!r}: {error.message}",
        )
        logEvent("flow_failed", {"flow": flow.name, "step": step.name, "type": error.kind.value})
        return FlowResult(
            flow=flow.name,
            success=False,
            final_url=_current_url(ctx.session),
            trace=trace,
            outputs=ctx.outputs,
            failed_step=step.name,
            error=error,
        )


ConditionFactory = Callable[[FlowContext, ResolvedElement], PostCondition]


def interact_step(
    name: str,
    candidates: Sequence[LocatorCandidate],
    techniques: Sequence[InteractionTechnique],
    condition: ConditionFactory,
    text: Callable[[FlowContext], str] | None = None,
    diagnostic_selector: str = DEFAULT_DIAGNOSTIC_SELECTOR,
    after: Callable[[FlowContext, ExecutionOutcome], None] | None = None,
) -> Step:
    """Build the standard resolve-then-interact step.

    The element is re-resolved and the whole technique list re-run up to
    budget.max_attempts times when every technique fails. ElementNotFound
    is not retried.

    Args:
        name: Step name reported in traces and errors.
        candidates: Locator candidates for the target element.
        techniques: Interaction techniques, in order of preference.
        condition: Builds the post-condition once the element is resolved.
        text: Supplies the text for text-entry techniques.
        diagnostic_selector: Broad selector snapshotted when nothing matches.
        after: Called with the outcome once the post-condition held.

    Returns:
        A Step.
    """

    def action(ctx: FlowContext) -> AttemptResult:
        started = time.monotonic()
        per_attempt = ctx.budget.per_attempt_timeout_ms
        last_error: AllTechniquesFailed | None = None

        for attempt_no in range(1, ctx.budget.max_attempts + 1):
            ctx.deadline.check(name)
            page = ctx.session.page
            element = resolve(page, candidates, per_attempt, ctx.deadline, diagnostic_selector)
            post_condition = condition(ctx, element)
            try:
                outcome = execute(
                    page,
                    element.locator,
                    techniques,
                    post_condition,
                    settle_ms=ctx.config.settle_ms,
                    timeout_ms=per_attempt,
                    verify_timeout_ms=ctx.config.verify_timeout_ms,
                    text=text(ctx) if text is not None else None,
                    deadline=ctx.deadline,
                )
            except AllTechniquesFailed as e:
                last_error = e
                logForDebugging(
                    f"Step {name!r} attempt {attempt_no}/{ctx.budget.max_attempts} failed",
                    level="warning",
                )
                continue

            if after is not None:
                after(ctx, outcome)
            return AttemptResult(
                candidate=element.candidate,
                technique=outcome.technique,
                elapsed_ms=(time.monotonic() - started) * 1000,
                succeeded=True,
                observed=ctx.observe(),
                failures=outcome.failures,
            )

        assert last_error is not None
        raise last_error

    return Step(name, action)


def navigate_step(name: str, url: Callable[[FlowContext], str], wait_until: str = "domcontentloaded") -> Step:
    """Build a step that loads a URL in the active page.

    Raises (from the step):
        PostConditionTimeout: If the page does not load within the
            navigation timeout.
        RequestTimeout: If the request deadline has already passed.
    """

    def action(ctx: FlowContext) -> AttemptResult:
        started = time.monotonic()
        target = url(ctx)
        timeout = call_timeout(ctx.config.navigation_timeout_ms, ctx.deadline, step=name)
        try:
            ctx.session.page.goto(target, wait_until=wait_until, timeout=timeout)  # type: ignore[arg-type]
        except PlaywrightTimeoutError as e:
            logError(ErrorIds.NAVIGATION_FAILED, f"Timed out loading {target}", extra={"timeout_ms": timeout})
            raise PostConditionTimeout(f"page loaded: {target}", timeout) from e
        return AttemptResult(
            elapsed_ms=(time.monotonic() - started) * 1000,
            succeeded=True,
            observed=ctx.observe(),
        )

    return Step(name, action)
