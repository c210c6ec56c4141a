"""Browser session management.

This module provides a scoped browser session: one Playwright driver,
Chromium browser, context and page per request, used serially and
released on every exit path.
"""

from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, ContextManager, Iterator

from playwright.sync_api import Browser, BrowserContext, Page, Playwright, sync_playwright

from clickflow.core.errors import SessionAcquisitionFailure
from clickflow.core.logging import ErrorIds, logError, logEvent, logForDebugging

if TYPE_CHECKING:
    from clickflow.config import ServiceConfig

# Launch flags used by every session; the first two are required in most containers
CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-blink-features=AutomationControlled",
]

DEFAULT_VIEWPORT = {"width": 1366, "height": 900}


class BrowserSession:
    """A browser context and its active page.

    The active page starts as the context's first page and can be switched
    to a tab or popup the target opened.
    """

    def __init__(self, context: BrowserContext, page: Page) -> None:
        self.context = context
        self.page = page

    @property
    def url(self) -> str:
        return self.page.url

    def adopt_newest_page(self, timeout_ms: float = 10000) -> Page:
        """Make the most recently opened page the active page.

        Waits (bounded) for the new page to reach domcontentloaded.

        Args:
            timeout_ms: Maximum time to wait for the new page to load.

        Returns:
            The new active page.
        """
        newest = self.context.pages[-1]
        if newest is not self.page:
            try:
                newest.wait_for_load_state("domcontentloaded", timeout=timeout_ms)
            except Exception as e:
                logForDebugging(f"New page did not finish loading: {e}", level="warning")
            self.page = newest
            logEvent("page_adopted", {"url": newest.url})
        return self.page


SessionFactory = Callable[["ServiceConfig"], ContextManager[BrowserSession]]


def launch_browser(playwright: Playwright, config: "ServiceConfig") -> Browser:
    """Launch Chromium with the configured binary and headless mode.

    Args:
        playwright: The Playwright instance (from sync_playwright().start()).
        config: Service configuration.

    Returns:
        A running Browser.
    """
    return playwright.chromium.launch(
        executable_path=config.browser_path or None,
        headless=config.headless,
        args=CHROMIUM_ARGS,
    )


def _close_quietly(name: str, close: Callable[[], None]) -> None:
    try:
        close()
    except Exception as e:
        logError(ErrorIds.SESSION_RELEASE_FAILED, f"Failed to close {name}: {e}")


@contextmanager
def browser_session(config: "ServiceConfig") -> Iterator[BrowserSession]:
    """Acquire a browser session and release it on exit.

    Context, browser and Playwright driver are closed on every exit path,
    including exceptions and KeyboardInterrupt, so no Chromium process
    outlives the request.

    Args:
        config: Service configuration (browser path, headless, timeouts).

    Yields:
        A BrowserSession with a fresh context and page.

    Raises:
        SessionAcquisitionFailure: If Playwright or the browser cannot start.

    Example:
        with browser_session(config) as session:
            session.page.goto("https://example.com")
    """
    playwright: Playwright | None = None
    browser: Browser | None = None
    context: BrowserContext | None = None

    try:
        try:
            playwright = sync_playwright().start()
            browser = launch_browser(playwright, config)
            context = browser.new_context(viewport=DEFAULT_VIEWPORT)  # type: ignore[arg-type]
            context.set_default_navigation_timeout(config.navigation_timeout_ms)
            context.set_default_timeout(config.candidate_timeout_ms)
            page = context.new_page()
        except Exception as e:
            logError(
                ErrorIds.SESSION_ACQUISITION_FAILED,
                f"Failed to start browser session: {e}",
                exc_info=True,
                extra={"browser_path": config.browser_path, "headless": config.headless},
            )
            raise SessionAcquisitionFailure(
                f"Failed to start browser: {e}",
                step="Browser launch",
            ) from e

        logEvent("session_acquired", {"headless": config.headless})
        yield BrowserSession(context, page)

    finally:
        if context is not None:
            _close_quietly("browser context", context.close)
        if browser is not None:
            _close_quietly("browser", browser.close)
        if playwright is not None:
            _close_quietly("playwright driver", playwright.stop)
        if context is not None:
            logEvent("session_released")
