"""Local Whisper transcription using faster-whisper (no network)."""

from __future__ import annotations

import os
from typing import Any

import numpy as np


class WhisperLocalEngine:
    """Run Whisper locally using faster-whisper on CPU/GPU."""

    def __init__(
        self,
        model_path: str | None = None,
        device: str | None = None,
        compute_type: str | None = None,
        language: str | None = None,
        sample_rate: int = 16000,
        beam_size: int = 3,
    ) -> None:
        self.model_path = model_path or os.getenv("LOCAL_WHISPER_MODEL_PATH", "small")
        self.device = device or os.getenv("LOCAL_WHISPER_DEVICE", "cpu")
        self.compute_type = compute_type or os.getenv("LOCAL_WHISPER_COMPUTE_TYPE", "int8")
        self.language = language or os.getenv("LOCAL_WHISPER_LANGUAGE", "en")
        self.sample_rate = sample_rate
        self.beam_size = beam_size
        self._model: Any = None

    @classmethod
    def from_settings(cls, cfg: dict) -> "WhisperLocalEngine":
        return cls(
            model_path=cfg.get("model_path"),
            device=cfg.get("device"),
            compute_type=cfg.get("compute_type"),
            language=cfg.get("language"),
            sample_rate=int(cfg.get("sample_rate", 16000)),
        )

    def _ensure_model(self) -> Any:
        if self._model is None:
            from faster_whisper import WhisperModel

            self._model = WhisperModel(
                self.model_path, device=self.device, compute_type=self.compute_type
            )
        return self._model

    def transcribe_audio_bytes(self, audio_bytes: bytes) -> str:
        """Run local Whisper on raw PCM16 mono bytes and return text."""
        if not audio_bytes:
            return ""

        # Convert raw PCM16 bytes to float32 numpy array scaled to [-1, 1].
        usable = len(audio_bytes) - (len(audio_bytes) % 2)
        audio_int16 = np.frombuffer(audio_bytes[:usable], dtype=np.int16)
        audio_float = audio_int16.astype(np.float32) / 32768.0
        return self._transcribe_audio_array(audio_float)

    def _transcribe_audio_array(self, audio_float: np.ndarray) -> str:
        if len(audio_float) == 0:
            return ""

        model = self._ensure_model()
        segments, _info = model.transcribe(
            audio=audio_float,
            language=self.language,
            beam_size=self.beam_size,
            vad_filter=True,
        )
        parts: list[str] = []
        for seg in segments:
            if seg.text:
                parts.append(seg.text.strip())
        return " ".join(parts).strip()
