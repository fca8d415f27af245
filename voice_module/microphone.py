"""Microphone capture with simple energy-based end-pointing."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

import numpy as np

from utils.settings_store import deep_log


def block_rms(block: bytes) -> float:
    """Root-mean-square amplitude of a PCM16 block."""
    samples = np.frombuffer(block, dtype=np.int16)
    if samples.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(samples.astype(np.float64) ** 2)))


class UtteranceSegmenter:
    """Collects PCM16 blocks from the start of speech until trailing silence.

    Blocks before the first loud block are dropped. Once speech has started,
    the utterance ends after `silence_secs` of consecutive quiet blocks or
    when it reaches `max_utterance_secs`.
    """

    def __init__(
        self,
        *,
        sample_rate: int = 16000,
        block_ms: int = 30,
        energy_threshold: float = 500.0,
        silence_secs: float = 1.0,
        max_utterance_secs: float = 15.0,
    ) -> None:
        if sample_rate <= 0 or block_ms <= 0:
            raise ValueError("sample_rate and block_ms must be positive")
        self.sample_rate = sample_rate
        self.block_ms = block_ms
        self.energy_threshold = energy_threshold
        self._silence_blocks = max(1, int(round(silence_secs * 1000 / block_ms)))
        self._max_blocks = max(1, int(round(max_utterance_secs * 1000 / block_ms)))
        self.reset()

    @property
    def block_frames(self) -> int:
        return self.sample_rate * self.block_ms // 1000

    @property
    def started(self) -> bool:
        return self._started

    def reset(self) -> None:
        self._blocks: list[bytes] = []
        self._started = False
        self._quiet = 0

    def feed(self, block: bytes) -> bool:
        """Add one block. Returns True once the utterance is complete."""
        loud = block_rms(block) >= self.energy_threshold
        if not self._started:
            if not loud:
                return False
            self._started = True
        self._blocks.append(block)
        self._quiet = 0 if loud else self._quiet + 1
        return self._quiet >= self._silence_blocks or len(self._blocks) >= self._max_blocks

    def audio(self) -> bytes:
        return b"".join(self._blocks)


class Microphone:
    """Records one utterance at a time from the default input device."""

    def __init__(
        self,
        segmenter: UtteranceSegmenter | None = None,
        *,
        device: int | str | None = None,
        stream_factory: Callable[..., Any] | None = None,
    ) -> None:
        self.segmenter = segmenter or UtteranceSegmenter()
        self.device = device
        self._stream_factory = stream_factory or self._open_stream

    @classmethod
    def from_settings(cls, cfg: dict, **kwargs: Any) -> "Microphone":
        segmenter = UtteranceSegmenter(
            sample_rate=int(cfg.get("sample_rate", 16000)),
            block_ms=int(cfg.get("block_ms", 30)),
            energy_threshold=float(cfg.get("energy_threshold", 500.0)),
            silence_secs=float(cfg.get("silence_secs", 1.0)),
            max_utterance_secs=float(cfg.get("max_utterance_secs", 15.0)),
        )
        return cls(segmenter, device=cfg.get("input_device"), **kwargs)

    @property
    def sample_rate(self) -> int:
        return self.segmenter.sample_rate

    def _open_stream(self) -> Any:
        import sounddevice as sd

        return sd.RawInputStream(
            samplerate=self.segmenter.sample_rate,
            blocksize=self.segmenter.block_frames,
            device=self.device,
            dtype="int16",
            channels=1,
        )

    def record_utterance(self, stop_event: threading.Event | None = None) -> bytes:
        """Block until one utterance is captured; b"" if stopped before speech ended."""
        stop_event = stop_event or threading.Event()
        self.segmenter.reset()
        with self._stream_factory() as stream:
            while not stop_event.is_set():
                data, overflowed = stream.read(self.segmenter.block_frames)
                if overflowed:
                    deep_log("[VOICE] Input overflow")
                if self.segmenter.feed(bytes(data)):
                    return self.segmenter.audio()
        return b""
