"""Progress display using the Enlighten library."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import enlighten  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)


class Spinner:
    """Single-line status display for long-running commands.

    On a terminal an Enlighten status bar shows the latest message; on any
    other stream each distinct message is written on its own line.
    """

    def __init__(self, stream: TextIO | None = None, enabled: bool = True) -> None:
        self.stream = stream or sys.stderr
        self.enabled = enabled
        self.is_tty = bool(getattr(self.stream, "isatty", lambda: False)())
        self.message = ""
        self.started = False
        self.stopped = False
        self.manager: enlighten.Manager | None = None
        self.status_bar = None

    def _write_line(self, message: str) -> None:
        self.stream.write(f"{message}\n")
        self.stream.flush()

    def start(self, message: str) -> None:
        """Show the first message; later calls are ignored."""
        if self.started or not self.enabled:
            return
        self.started = True
        self.message = message

        if self.is_tty:
            self.manager = enlighten.get_manager(stream=self.stream)
            self.status_bar = self.manager.status_bar(
                status_format="{fill}{stage}{fill}{elapsed}",
                justify=enlighten.Justify.LEFT,
                stage=message,
                autorefresh=True,
                min_delta=0.1,
                leave=False,
            )
        else:
            self._write_line(message)

    def update(self, message: str) -> None:
        """Replace the current message."""
        previous = self.message
        self.message = message
        if not self.started or self.stopped:
            return

        if self.status_bar is not None:
            self.status_bar.update(stage=message)
        elif message != previous:
            self._write_line(message)

    def stop(self) -> None:
        """Remove the status bar. Safe to call repeatedly or before ``start``."""
        if not self.started or self.stopped:
            return
        self.stopped = True

        if self.status_bar is not None:
            self.status_bar.close(clear=True)
            self.status_bar = None
        if self.manager is not None:
            self.manager.stop()
            self.manager = None

    def __enter__(self) -> Spinner:
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.stop()
