"""Console view for the speech screen.

Enter toggles listening (the press-to-talk button); `q` + Enter quits.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import TextIO

from utils.log_utils import tprint
from voice_module.voice_listener import VoiceListener


class TranscriptView:
    def __init__(
        self,
        listener_factory: Callable[..., VoiceListener] = VoiceListener.from_settings,
        *,
        stdin: TextIO | None = None,
    ) -> None:
        self.stdin = stdin or sys.stdin
        self.status = "idle"
        self.transcript = ""
        self.errors: list[str] = []
        self.listener = listener_factory(
            on_result=self.show_result,
            on_error=self.show_error,
            on_status=self.show_status,
        )

    def show_result(self, text: str) -> None:
        self.transcript = text
        tprint(f"[UI] >> {text}")

    def show_error(self, exc: Exception) -> None:
        self.errors.append(str(exc))
        tprint(f"[UI][ERROR] {exc}")

    def show_status(self, status: str) -> None:
        if status != self.status:
            self.status = status
            tprint(f"[UI] ({status})")

    def handle_command(self, line: str) -> bool:
        """Apply one line of input. Returns False when the view should close."""
        command = line.strip().lower()
        if command in {"q", "quit", "exit"}:
            return False
        if command == "":
            listening = self.listener.toggle()
            if not listening:
                self.show_status("idle")
        return True

    def run(self) -> None:
        tprint("[UI] Speech to text. Press Enter to start/stop listening, q + Enter to quit.")
        try:
            for line in self.stdin:
                if not self.handle_command(line):
                    break
        finally:
            if self.listener.is_running():
                self.listener.stop()
            tprint("[UI] Speech view closed")
