"""Service configuration loaded from the environment.

Values come from process environment variables, after a `.env` file (if
any) has been loaded with python-dotenv. The resulting ServiceConfig is
immutable and passed explicitly to everything that needs it.
"""

import os
from typing import Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from clickflow.core.errors import ConfigurationError
from clickflow.models.budget import RetryBudget

_TRUE_VALUES = ("1", "true", "yes", "on")


class ServiceConfig(BaseModel):
    """Runtime configuration for the service and its flows.

    Attributes:
        host: Interface the HTTP server binds to.
        port: Port the HTTP server listens on.
        env: Deployment environment name, reported by /debug.
        browser_path: Chromium executable; None uses Playwright's bundled build.
        headless: Launch the browser without a window.
        navigation_timeout_ms: Timeout for page loads.
        request_timeout_ms: Budget for one whole request.
        candidate_timeout_ms: Time to wait for each locator candidate and technique.
        settle_ms: Delay after each technique before checking its effect.
        verify_timeout_ms: How long to poll a post-condition after settling.
        max_attempts: Re-resolve-and-retry count per step.
        play_url: Page holding the Play Now button.
        app_url: Web app hosting the login/signup flow.
        screenshot_dir: Directory for failure screenshots; None disables them.
        log_level: Log level for the clickflow logger.
    """

    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = 3000
    env: str = "development"
    browser_path: str | None = None
    headless: bool = True
    navigation_timeout_ms: float = 30000
    request_timeout_ms: float = 120000
    candidate_timeout_ms: float = 5000
    settle_ms: float = 500
    verify_timeout_ms: float = 3000
    max_attempts: int = 1
    play_url: str | None = None
    app_url: str | None = None
    screenshot_dir: str | None = None
    log_level: str = "info"

    @field_validator("port")
    @classmethod
    def valid_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError(f"must be between 1 and 65535, got {v}")
        return v

    @field_validator(
        "navigation_timeout_ms",
        "request_timeout_ms",
        "candidate_timeout_ms",
        "max_attempts",
    )
    @classmethod
    def must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"must be positive, got {v}")
        return v

    @field_validator("settle_ms", "verify_timeout_ms")
    @classmethod
    def must_be_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"must be non-negative, got {v}")
        return v

    @property
    def budget(self) -> RetryBudget:
        """The RetryBudget every request starts with."""
        return RetryBudget(
            max_attempts=self.max_attempts,
            per_attempt_timeout_ms=self.candidate_timeout_ms,
            total_timeout_ms=self.request_timeout_ms,
        )

    def require_url(self, field: str) -> str:
        """Return a configured target URL.

        Raises:
            ConfigurationError: If the URL is not set.
        """
        value = getattr(self, field)
        if not value:
            raise ConfigurationError(
                f"{field} is not configured (set CLICKFLOW_{field.upper()})"
            )
        return value


# Environment variable -> ServiceConfig field. Earlier names win.
_ENV_FIELDS: dict[str, tuple[str, ...]] = {
    "host": ("HOST",),
    "port": ("PORT",),
    "env": ("APP_ENV", "NODE_ENV"),
    "browser_path": ("CLICKFLOW_BROWSER_PATH", "PUPPETEER_EXECUTABLE_PATH", "CHROME_PATH"),
    "headless": ("CLICKFLOW_HEADLESS",),
    "navigation_timeout_ms": ("CLICKFLOW_NAVIGATION_TIMEOUT_MS", "NAVIGATION_TIMEOUT"),
    "request_timeout_ms": ("CLICKFLOW_REQUEST_TIMEOUT_MS",),
    "candidate_timeout_ms": ("CLICKFLOW_CANDIDATE_TIMEOUT_MS",),
    "settle_ms": ("CLICKFLOW_SETTLE_MS",),
    "verify_timeout_ms": ("CLICKFLOW_VERIFY_TIMEOUT_MS",),
    "max_attempts": ("CLICKFLOW_MAX_ATTEMPTS",),
    "play_url": ("CLICKFLOW_PLAY_URL",),
    "app_url": ("CLICKFLOW_APP_URL",),
    "screenshot_dir": ("CLICKFLOW_SCREENSHOT_DIR",),
    "log_level": ("CLICKFLOW_LOG_LEVEL",),
}


def config_from_mapping(environ: Mapping[str, str]) -> ServiceConfig:
    """Build a ServiceConfig from an environment-like mapping.

    Raises:
        ConfigurationError: If a value is malformed or out of range.
    """
    values: dict[str, object] = {}
    for field, names in _ENV_FIELDS.items():
        for name in names:
            raw = environ.get(name)
            if raw is not None and raw.strip() != "":
                values[field] = raw.strip()
                break

    if "headless" in values:
        values["headless"] = str(values["headless"]).lower() in _TRUE_VALUES

    try:
        return ServiceConfig(**values)  # type: ignore[arg-type]
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def load_config(dotenv_path: str | None = None) -> ServiceConfig:
    """Load configuration from `.env` and the process environment.

    Args:
        dotenv_path: Explicit `.env` path; None searches from the working directory.

    Raises:
        ConfigurationError: If a value is malformed or out of range.
    """
    load_dotenv(dotenv_path)
    return config_from_mapping(os.environ)
