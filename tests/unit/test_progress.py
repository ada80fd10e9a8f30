"""Tests for the progress spinner."""

from __future__ import annotations

import io
from unittest.mock import MagicMock

import pytest

from tfdc.cli import progress
from tfdc.cli.progress import Spinner


class FakeTerminal(io.StringIO):
    def isatty(self) -> bool:
        return True


@pytest.mark.unit
class TestSpinnerNonTTY:
    """Line-oriented output on plain streams."""

    def test_prints_distinct_messages(self) -> None:
        stream = io.StringIO()
        spinner = Spinner(stream)

        spinner.start("starting")
        spinner.update("step 1")
        spinner.update("step 2")
        spinner.update("step 2")
        spinner.stop()

        assert stream.getvalue().splitlines() == ["starting", "step 1", "step 2"]

    def test_rapid_duplicate_updates_are_suppressed(self) -> None:
        stream = io.StringIO()
        spinner = Spinner(stream)
        spinner.start("init")
        for _ in range(100):
            spinner.update("msg")
        spinner.stop()

        assert stream.getvalue().splitlines() == ["init", "msg"]

    def test_stop_before_start(self) -> None:
        stream = io.StringIO()
        Spinner(stream).stop()
        assert stream.getvalue() == ""

    def test_double_stop(self) -> None:
        spinner = Spinner(io.StringIO())
        spinner.start("hello")
        spinner.stop()
        spinner.stop()
        assert spinner.stopped

    def test_double_start_keeps_first_message(self) -> None:
        stream = io.StringIO()
        spinner = Spinner(stream)
        spinner.start("first")
        spinner.start("second")
        spinner.stop()

        assert stream.getvalue() == "first\n"

    def test_update_before_start_is_silent(self) -> None:
        stream = io.StringIO()
        Spinner(stream).update("before start")
        assert stream.getvalue() == ""

    def test_update_after_stop_is_silent(self) -> None:
        stream = io.StringIO()
        spinner = Spinner(stream)
        spinner.start("a")
        spinner.stop()
        spinner.update("b")
        assert stream.getvalue() == "a\n"

    def test_disabled_spinner_writes_nothing(self) -> None:
        stream = io.StringIO()
        with Spinner(stream, enabled=False) as spinner:
            spinner.start("hidden")
            spinner.update("also hidden")
        assert stream.getvalue() == ""

    def test_plain_stream_is_not_a_tty(self) -> None:
        assert Spinner(io.StringIO()).is_tty is False


@pytest.mark.unit
class TestSpinnerTTY:
    """Status bar output on terminals."""

    def test_uses_enlighten_status_bar(self, monkeypatch: pytest.MonkeyPatch) -> None:
        manager = MagicMock()
        get_manager = MagicMock(return_value=manager)
        monkeypatch.setattr(progress.enlighten, "get_manager", get_manager)
        stream = FakeTerminal()

        with Spinner(stream) as spinner:
            spinner.start("Exporting")
            spinner.update("Listing guides")

        get_manager.assert_called_once_with(stream=stream)
        status_bar = manager.status_bar.return_value
        status_bar.update.assert_called_once_with(stage="Listing guides")
        status_bar.close.assert_called_once_with(clear=True)
        manager.stop.assert_called_once()
        assert stream.getvalue() == ""
