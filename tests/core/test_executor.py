"""Tests for the interaction executor."""

from unittest.mock import MagicMock

import pytest

from clickflow.core.conditions import PostCondition, value_equals
from clickflow.core.errors import AllTechniquesFailed, RequestTimeout
from clickflow.core.executor import apply_technique, execute
from clickflow.core.timing import Deadline
from clickflow.models.result import NO_OBSERVABLE_EFFECT
from clickflow.models.technique import InteractionTechnique, TechniqueKind

NATIVE = InteractionTechnique(kind=TechniqueKind.NATIVE_ACTIVATE)
DISPATCH = InteractionTechnique(
    kind=TechniqueKind.SYNTHETIC_EVENT_DISPATCH, events=("pointerdown", "click")
)
POINTER = InteractionTechnique(kind=TechniqueKind.POINTER_SIMULATE, offset_x=5, delay_ms=10)
FILL = InteractionTechnique(kind=TechniqueKind.FILL)


class Flag:
    """A post-condition flipped by a side effect."""

    def __init__(self) -> None:
        self.value = False
        self.condition = PostCondition("flag set", lambda: self.value)

    def set(self, *args: object, **kwargs: object) -> None:
        self.value = True


class TestApplyTechnique:
    def test_native_activate(self, mock_page: MagicMock) -> None:
        locator = MagicMock()
        apply_technique(mock_page, locator, NATIVE, 1000)
        locator.click.assert_called_once_with(timeout=1000, delay=0.0)

    def test_forced_activate(self, mock_page: MagicMock) -> None:
        locator = MagicMock()
        apply_technique(mock_page, locator, InteractionTechnique(kind=TechniqueKind.FORCED_ACTIVATE), 1000)
        assert locator.click.call_args.kwargs["force"] is True

    def test_synthetic_dispatches_each_event(self, mock_page: MagicMock) -> None:
        locator = MagicMock()
        apply_technique(mock_page, locator, DISPATCH, 1000)
        events = [c.args[0] for c in locator.dispatch_event.call_args_list]
        assert events == ["pointerdown", "click"]

    def test_pointer_uses_box_center_plus_offset(self, mock_page: MagicMock) -> None:
        locator = MagicMock()
        locator.bounding_box.return_value = {"x": 10, "y": 20, "width": 100, "height": 40}

        apply_technique(mock_page, locator, POINTER, 1000)

        mock_page.mouse.move.assert_called_once_with(65, 40)
        mock_page.mouse.down.assert_called_once()
        mock_page.mouse.up.assert_called_once()
        mock_page.wait_for_timeout.assert_called_once_with(10)

    def test_pointer_without_box_raises(self, mock_page: MagicMock) -> None:
        locator = MagicMock()
        locator.bounding_box.return_value = None
        with pytest.raises(RuntimeError, match="no bounding box"):
            apply_technique(mock_page, locator, POINTER, 1000)

    def test_keyboard_activate(self, mock_page: MagicMock) -> None:
        locator = MagicMock()
        apply_technique(mock_page, locator, InteractionTechnique(kind=TechniqueKind.KEYBOARD_ACTIVATE), 1000)
        locator.focus.assert_called_once()
        locator.press.assert_called_once_with("Enter", timeout=1000)

    def test_type_sequentially_clears_first(self, mock_page: MagicMock) -> None:
        locator = MagicMock()
        technique = InteractionTechnique(kind=TechniqueKind.TYPE_SEQUENTIALLY, delay_ms=30)
        apply_technique(mock_page, locator, technique, 1000, text="a@b.co")
        locator.fill.assert_called_once_with("", timeout=1000)
        locator.press_sequentially.assert_called_once_with("a@b.co", delay=30, timeout=1000)

    def test_script_set_value_passes_text(self, mock_page: MagicMock) -> None:
        locator = MagicMock()
        apply_technique(mock_page, locator, InteractionTechnique(kind=TechniqueKind.SCRIPT_SET_VALUE), 1000, text="4")
        assert locator.evaluate.call_args.args[1] == "4"

    def test_text_technique_requires_text(self, mock_page: MagicMock) -> None:
        with pytest.raises(ValueError, match="requires text"):
            apply_technique(mock_page, MagicMock(), FILL, 1000)


class TestExecute:
    def test_first_technique_succeeds(self, mock_page: MagicMock) -> None:
        flag = Flag()
        locator = MagicMock()
        locator.click.side_effect = flag.set

        outcome = execute(mock_page, locator, [NATIVE, DISPATCH], flag.condition, settle_ms=0)

        assert outcome.technique == NATIVE
        assert outcome.attempted == [NATIVE]
        assert outcome.failures == []
        locator.dispatch_event.assert_not_called()

    def test_falls_back_when_technique_raises(self, mock_page: MagicMock) -> None:
        flag = Flag()
        locator = MagicMock()
        locator.click.side_effect = TimeoutError("intercepted by overlay")
        locator.dispatch_event.side_effect = flag.set

        outcome = execute(mock_page, locator, [NATIVE, DISPATCH], flag.condition, settle_ms=0)

        assert outcome.technique == DISPATCH
        assert len(outcome.failures) == 1
        assert outcome.failures[0].reason == "TimeoutError: intercepted by overlay"

    def test_falls_back_when_technique_has_no_effect(self, mock_page: MagicMock) -> None:
        flag = Flag()
        locator = MagicMock()
        locator.bounding_box.return_value = {"x": 0, "y": 0, "width": 10, "height": 10}
        mock_page.mouse.up.side_effect = flag.set

        outcome = execute(mock_page, locator, [NATIVE, POINTER], flag.condition, settle_ms=0)

        assert outcome.technique == POINTER
        assert outcome.failures[0].reason == NO_OBSERVABLE_EFFECT

    def test_all_fail_reports_one_failure_per_technique(self, mock_page: MagicMock) -> None:
        locator = MagicMock()
        locator.click.side_effect = TimeoutError("covered")
        never = PostCondition("never", lambda: False)

        with pytest.raises(AllTechniquesFailed) as exc_info:
            execute(mock_page, locator, [NATIVE, DISPATCH], never, settle_ms=0)

        failures = exc_info.value.failures
        assert [f.technique for f in failures] == [NATIVE, DISPATCH]
        assert failures[0].reason.startswith("TimeoutError")
        assert failures[1].reason == NO_OBSERVABLE_EFFECT

    def test_late_effect_caught_by_verify_window(self, mock_page: MagicMock) -> None:
        condition = PostCondition("eventually", MagicMock(side_effect=[False, False, True]))
        outcome = execute(
            mock_page, MagicMock(), [NATIVE], condition, settle_ms=0, verify_timeout_ms=2000
        )
        assert outcome.technique == NATIVE

    def test_deadline_passes_clipped_timeout(self, mock_page: MagicMock) -> None:
        now = [100.0]
        deadline = Deadline(1000, clock=lambda: now[0])
        now[0] += 0.6
        locator = MagicMock()

        execute(mock_page, locator, [NATIVE], PostCondition("ok", lambda: True), settle_ms=0, deadline=deadline)

        assert locator.click.call_args.kwargs["timeout"] == pytest.approx(400)

    def test_deadline_expiring_mid_technique_stops_the_list(self, mock_page: MagicMock) -> None:
        now = [100.0]
        deadline = Deadline(1000, clock=lambda: now[0])
        locator = MagicMock()

        def slow_click(**kwargs: object) -> None:
            now[0] += 2

        locator.click.side_effect = slow_click
        never = PostCondition("never", lambda: False)

        with pytest.raises(RequestTimeout):
            execute(mock_page, locator, [NATIVE, DISPATCH, POINTER], never, settle_ms=0, deadline=deadline)

        locator.click.assert_called_once()
        locator.dispatch_event.assert_not_called()
        locator.bounding_box.assert_not_called()

    def test_settle_delay_waits_on_page(self, mock_page: MagicMock) -> None:
        execute(mock_page, MagicMock(), [NATIVE], PostCondition("ok", lambda: True), settle_ms=5)
        mock_page.wait_for_timeout.assert_called_once_with(5)

    def test_text_entry_with_value_condition(self, mock_page: MagicMock, element_factory) -> None:
        element = element_factory()
        outcome = execute(mock_page, element, [FILL], value_equals(element, "3"), settle_ms=0, text="3")
        assert outcome.technique == FILL
        assert element.value == "3"

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"techniques": []}, "must not be empty"),
            ({"settle_ms": -1}, "must be non-negative"),
            ({"techniques": [FILL]}, "require text"),
        ],
    )
    def test_invalid_arguments(self, mock_page: MagicMock, kwargs: dict, message: str) -> None:
        args = {"techniques": [NATIVE], "settle_ms": 0, **kwargs}
        locator = MagicMock()
        with pytest.raises(ValueError, match=message):
            execute(mock_page, locator, args["techniques"], PostCondition("ok", lambda: True), settle_ms=args["settle_ms"])
        locator.click.assert_not_called()
