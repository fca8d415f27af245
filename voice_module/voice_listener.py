"""Press-to-talk transcription session that keeps listening between utterances."""

from __future__ import annotations

import threading
from collections.abc import Callable
from functools import partial
from typing import Any, Optional

from utils.log_utils import log, tprint
from utils.settings_store import get_settings
from utils.threading_utils import join_quietly, run_async
from voice_module.microphone import Microphone
from voice_module.stt_whisper_local import WhisperLocalEngine
from voice_module.voice_utils import clean_transcript

STATUS_LISTENING = "listening"
STATUS_TRANSCRIBING = "transcribing"
STATUS_STOPPED = "stopped"


class VoiceListener:
    def __init__(
        self,
        engine: WhisperLocalEngine,
        microphone: Microphone,
        *,
        on_result: Callable[[str], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
        on_status: Callable[[str], None] | None = None,
        error_backoff_secs: float = 0.5,
        stop_timeout_secs: float = 5.0,
    ) -> None:
        self.engine = engine
        self.microphone = microphone
        self.on_result = on_result
        self.on_error = on_error
        self.on_status = on_status
        self.error_backoff_secs = error_backoff_secs
        self.stop_timeout_secs = stop_timeout_secs
        self.last_transcript: str | None = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @classmethod
    def from_settings(cls, settings: dict | None = None, **kwargs: Any) -> "VoiceListener":
        voice = (settings or get_settings()).get("voice", {})
        return cls(
            WhisperLocalEngine.from_settings(voice),
            Microphone.from_settings(voice),
            error_backoff_secs=float(voice.get("error_backoff_secs", 0.5)),
            **kwargs,
        )

    def _set_status(self, status: str) -> None:
        if self.on_status:
            self.on_status(status)

    def listen_once(self, stop_event: threading.Event | None = None) -> str | None:
        """Record and transcribe one utterance. Returns the delivered transcript, if any."""
        self._set_status(STATUS_LISTENING)
        audio = self.microphone.record_utterance(stop_event or self._stop_event)
        if not audio:
            return None
        self._set_status(STATUS_TRANSCRIBING)
        text = clean_transcript(self.engine.transcribe_audio_bytes(audio))
        if not text:
            log("VOICE", "Empty transcript; listening again", "DEBUG")
            return None
        self.last_transcript = text
        if self.on_result:
            self.on_result(text)
        return text

    def _run_loop(self, stop_event: threading.Event) -> None:
        tprint("[VOICE] Listening started")
        while not stop_event.is_set():
            try:
                self.listen_once(stop_event)
            except Exception as exc:
                tprint(f"[VOICE][ERROR] Recognition failed: {exc}")
                if self.on_error:
                    self.on_error(exc)
                # Back off so a persistently failing device or model does not spin.
                stop_event.wait(self.error_backoff_secs)
        self._set_status(STATUS_STOPPED)
        tprint("[VOICE] Listening stopped")

    def start(self) -> None:
        if self.is_running():
            if self._stop_event.is_set():
                tprint("[VOICE][WARN] Previous session still finishing; try again shortly")
            else:
                tprint("[VOICE] Listener already running")
            return
        # Each session owns its event so a lingering loop never sees it cleared.
        self._stop_event = threading.Event()
        self._thread = run_async(partial(self._run_loop, self._stop_event), name="VoiceListener")

    def stop(self) -> None:
        self._stop_event.set()
        # Transcription in flight may take a while; don't block the UI for it.
        if join_quietly(self._thread, timeout=self.stop_timeout_secs):
            self._thread = None

    def toggle(self) -> bool:
        """Start if idle, stop if listening. Returns True if now listening."""
        if self.is_running() and not self._stop_event.is_set():
            self.stop()
            return False
        self.start()
        return self.is_running() and not self._stop_event.is_set()

    def is_running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())
