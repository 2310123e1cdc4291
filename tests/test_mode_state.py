"""Unit tests for :mod:`kbview.core.mode`."""

from __future__ import annotations

import pytest

from kbview.core.mode import Mode, ModeState


class TestMode:
    def test_wire_values(self) -> None:
        assert Mode.KB_VIEW.value == "kb-view"
        assert Mode.DEVELOPER.value == "developer"

    @pytest.mark.parametrize("raw", ["kb-view", "KB-VIEW", " kb_view "])
    def test_parse_accepts_wire_strings(self, raw: str) -> None:
        assert Mode.parse(raw) is Mode.KB_VIEW

    def test_parse_rejects_unknown(self) -> None:
        with pytest.raises(ValueError):
            Mode.parse("zen")

    def test_other(self) -> None:
        assert Mode.KB_VIEW.other() is Mode.DEVELOPER
        assert Mode.DEVELOPER.other() is Mode.KB_VIEW


class TestModeState:
    def test_default_mode_is_kb_view(self) -> None:
        state = ModeState()
        assert state.get_current_mode() is Mode.KB_VIEW
        assert state.is_kb_view()

    def test_set_same_mode_is_silent(self) -> None:
        state = ModeState(Mode.DEVELOPER)
        calls: list[Mode] = []
        state.subscribe(calls.append)

        assert state.set_mode(Mode.DEVELOPER) is False
        assert calls == []

    def test_listeners_called_once_in_order_after_update(self) -> None:
        state = ModeState(Mode.DEVELOPER)
        seen: list[tuple[str, Mode, Mode]] = []
        state.subscribe(lambda mode: seen.append(("first", mode, state.get_current_mode())))
        state.subscribe(lambda mode: seen.append(("second", mode, state.get_current_mode())))

        assert state.set_mode(Mode.KB_VIEW) is True

        assert seen == [
            ("first", Mode.KB_VIEW, Mode.KB_VIEW),
            ("second", Mode.KB_VIEW, Mode.KB_VIEW),
        ]

    def test_raising_listener_does_not_block_others(self) -> None:
        state = ModeState()
        calls: list[Mode] = []

        def broken(_mode: Mode) -> None:
            raise RuntimeError("boom")

        state.subscribe(broken)
        state.subscribe(calls.append)

        state.set_mode(Mode.DEVELOPER)

        assert calls == [Mode.DEVELOPER]
        assert state.get_current_mode() is Mode.DEVELOPER

    def test_dispose_unsubscribes_and_is_idempotent(self) -> None:
        state = ModeState()
        calls: list[Mode] = []
        subscription = state.subscribe(calls.append)

        subscription.dispose()
        subscription.dispose()
        state.set_mode(Mode.DEVELOPER)

        assert calls == []
        assert state.listener_count() == 0
        assert subscription.disposed

    def test_toggle_flips_mode(self) -> None:
        state = ModeState()
        assert state.toggle() is Mode.DEVELOPER
        assert state.toggle() is Mode.KB_VIEW

    def test_set_mode_accepts_strings(self) -> None:
        state = ModeState()
        state.set_mode("developer")
        assert state.get_current_mode() is Mode.DEVELOPER
