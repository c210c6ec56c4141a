"""Shared test fixtures for clickflow tests."""

import time
from contextlib import contextmanager
from typing import Callable, Iterator
from unittest.mock import MagicMock

import pytest

from clickflow.config import ServiceConfig
from clickflow.core.browser import BrowserSession
from clickflow.models.locator import LocatorCandidate, css


# =============================================================================
# Mock page helpers
# =============================================================================


def make_locator(interactable: list[bool]) -> MagicMock:
    """Create a mock Locator whose nth(i) elements pass or fail the interactable check."""
    elements = []
    for flag in interactable:
        element = MagicMock()
        element.evaluate.return_value = flag
        elements.append(element)

    locator = MagicMock()
    locator.count.return_value = len(elements)
    locator.nth.side_effect = lambda i: elements[i]
    locator.elements = elements
    return locator


@pytest.fixture
def mock_page() -> MagicMock:
    """Create a mock Playwright Page whose waits take real time."""
    page = MagicMock()
    page.url = "https://example.com"
    page.title.return_value = "Example"
    page.wait_for_timeout.side_effect = lambda ms: time.sleep(ms / 1000)
    page.evaluate.return_value = []
    return page


@pytest.fixture
def config() -> ServiceConfig:
    return ServiceConfig(
        candidate_timeout_ms=50,
        settle_ms=0,
        verify_timeout_ms=0,
        navigation_timeout_ms=200,
        request_timeout_ms=10000,
        play_url="https://play.example.com",
        app_url="https://app.example.com",
    )


@pytest.fixture
def candidates() -> list[LocatorCandidate]:
    return [css("#first"), css("#second"), css("#third")]


# =============================================================================
# Fake DOM for flow and HTTP tests
# =============================================================================


class FakeElement:
    """An element that behaves like a pinned Playwright Locator."""

    def __init__(
        self,
        visible: bool = True,
        on_click: Callable[[], None] | None = None,
        on_fill: Callable[[str], None] | None = None,
    ) -> None:
        self.visible = visible
        self.on_click = on_click
        self.on_fill = on_fill
        self.value = ""
        self.clicks = 0

    # Locator-like API used by the resolver and conditions
    def count(self) -> int:
        return 1

    def nth(self, i: int) -> "FakeElement":
        return self

    @property
    def first(self) -> "FakeElement":
        return self

    def is_visible(self) -> bool:
        return self.visible

    def evaluate(self, script: str, arg: object = None) -> object:
        if arg is None:
            return self.visible
        self._set(str(arg))
        return None

    # Interaction API used by the executor
    def click(self, timeout: float = 0, delay: float = 0, force: bool = False) -> None:
        if not self.visible and not force:
            raise TimeoutError("element is not visible")
        self.clicks += 1
        if self.on_click:
            self.on_click()

    def dispatch_event(self, event: str, timeout: float = 0) -> None:
        if event == "click":
            self.click(force=True)

    def fill(self, text: str, timeout: float = 0) -> None:
        self._set(text)

    def press_sequentially(self, text: str, delay: float = 0, timeout: float = 0) -> None:
        self._set(self.value + text)

    def focus(self, timeout: float = 0) -> None:
        pass

    def press(self, key: str, timeout: float = 0) -> None:
        if key == "Enter":
            self.click()

    def scroll_into_view_if_needed(self, timeout: float = 0) -> None:
        pass

    def bounding_box(self, timeout: float = 0) -> dict[str, float]:
        return {"x": 0, "y": 0, "width": 100, "height": 40}

    def input_value(self, timeout: float = 0) -> str:
        return self.value

    def _set(self, text: str) -> None:
        self.value = text
        if self.on_fill:
            self.on_fill(text)


class FakeLocator:
    """A live query over the fake DOM."""

    def __init__(self, query: Callable[[], list[FakeElement]]) -> None:
        self._query = query

    def count(self) -> int:
        return len(self._query())

    def nth(self, i: int) -> FakeElement:
        return self._query()[i]

    @property
    def first(self) -> FakeElement:
        return self._query()[0]


class FakePage:
    """A page whose DOM is a dict of query keys to element lists."""

    def __init__(self) -> None:
        self.url = "about:blank"
        self.dom: dict[tuple[object, ...], list[FakeElement]] = {}
        self.mouse = MagicMock()
        self.visited: list[str] = []

    def add(self, key: tuple[object, ...], *elements: FakeElement) -> None:
        self.dom[key] = list(elements)

    def _query(self, key: tuple[object, ...]) -> FakeLocator:
        return FakeLocator(lambda: self.dom.get(key, []))

    def locator(self, selector: str) -> FakeLocator:
        return self._query(("css", selector))

    def get_by_role(self, role: str, name: str | None = None, exact: bool = False) -> FakeLocator:
        return self._query(("role", role, name))

    def get_by_text(self, text: str, exact: bool = False) -> FakeLocator:
        return self._query(("text", text))

    def goto(self, url: str, wait_until: str = "load", timeout: float = 0) -> None:
        self.url = url
        self.visited.append(url)

    def wait_for_timeout(self, ms: float) -> None:
        time.sleep(ms / 1000)

    def wait_for_load_state(self, state: str = "load", timeout: float = 0) -> None:
        pass

    def title(self) -> str:
        return "Fake page"

    def evaluate(self, script: str, arg: object = None) -> list[dict[str, object]]:
        return []

    def screenshot(self, path: str, full_page: bool = False) -> None:
        pass


class FakeContext:
    def __init__(self, page: FakePage) -> None:
        self.pages = [page]


@pytest.fixture
def fake_page() -> FakePage:
    return FakePage()


@pytest.fixture
def fake_session_factory(fake_page: FakePage) -> Callable[[ServiceConfig], object]:
    """A session factory that yields the fake page and records each use."""

    @contextmanager
    def factory(config: ServiceConfig) -> Iterator[BrowserSession]:
        factory.calls += 1  # type: ignore[attr-defined]
        yield BrowserSession(FakeContext(fake_page), fake_page)  # type: ignore[arg-type]

    factory.calls = 0  # type: ignore[attr-defined]
    return factory


@pytest.fixture
def locator_factory() -> Callable[[list[bool]], MagicMock]:
    return make_locator


@pytest.fixture
def element_factory() -> type[FakeElement]:
    return FakeElement
