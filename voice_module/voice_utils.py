"""Utility helpers for voice processing."""

import re


def clean_transcript(text: str | None) -> str:
    """Collapse whitespace; keeps the recognizer's casing for display."""
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()
