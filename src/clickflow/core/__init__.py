"""clickflow core components."""

from clickflow.core.browser import BrowserSession, browser_session
from clickflow.core.conditions import PostCondition
from clickflow.core.errors import (
    AllTechniquesFailed,
    ConfigurationError,
    ElementNotFound,
    ErrorKind,
    FlowError,
    InputValidationError,
    PostConditionTimeout,
    RequestTimeout,
    SessionAcquisitionFailure,
    UnexpectedFlowError,
)
from clickflow.core.executor import ExecutionOutcome, execute
from clickflow.core.orchestrator import (
    Flow,
    FlowContext,
    FlowResult,
    FlowRunner,
    Step,
    interact_step,
    navigate_step,
)
from clickflow.core.resolver import ResolvedElement, resolve, resolve_all
from clickflow.core.timing import Deadline, wait_until

__all__ = [
    "AllTechniquesFailed",
    "BrowserSession",
    "ConfigurationError",
    "Deadline",
    "ElementNotFound",
    "ErrorKind",
    "ExecutionOutcome",
    "Flow",
    "FlowContext",
    "FlowError",
    "FlowResult",
    "FlowRunner",
    "InputValidationError",
    "PostCondition",
    "PostConditionTimeout",
    "RequestTimeout",
    "ResolvedElement",
    "SessionAcquisitionFailure",
    "Step",
    "UnexpectedFlowError",
    "browser_session",
    "execute",
    "interact_step",
    "navigate_step",
    "resolve",
    "resolve_all",
    "wait_until",
]
