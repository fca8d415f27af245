"""Timestamped, tag-normalized console logging."""

from __future__ import annotations

import builtins
import time
from typing import Any


_LEVELS = ("DEEP", "DEBUG", "INFO", "WARN", "ERROR")
_LEVEL_RANK = {name: rank for rank, name in enumerate(_LEVELS)}

_threshold = "INFO"


def set_log_level(level: str | None) -> str:
    """Set the minimum variant that `tprint` and `log` will print. Unknown values fall back to INFO."""
    global _threshold
    name = str(level or "").strip().upper()
    if name == "WARNING":
        name = "WARN"
    _threshold = name if name in _LEVEL_RANK else "INFO"
    return _threshold


def get_log_level() -> str:
    return _threshold


def is_enabled_for(variant: str | None) -> bool:
    """Untagged messages count as INFO."""
    rank = _LEVEL_RANK.get((variant or "INFO").upper(), _LEVEL_RANK["INFO"])
    return rank >= _LEVEL_RANK[_threshold]


def _split_tags(message: str) -> tuple[list[str], str]:
    tags: list[str] = []
    remaining = message.lstrip()
    while remaining.startswith("["):
        end = remaining.find("]")
        if end == -1:
            break
        tag = remaining[1:end].strip()
        if not tag:
            break
        tags.append(tag)
        remaining = remaining[end + 1 :].lstrip()
    return tags, remaining


def _format_message(message: str) -> tuple[str, str | None]:
    """Return the normalized message and its level variant, if any."""
    tags, remaining = _split_tags(message)
    system = "CANVAS"
    variant = None
    extra_tags: list[str] = []
    if tags:
        if tags[0].upper() in _LEVEL_RANK:
            variant = tags[0].upper()
            system = tags[1] if len(tags) > 1 else "CANVAS"
            extra_tags = tags[2:]
        else:
            system = tags[0]
            variant = tags[1] if len(tags) > 1 else None
            extra_tags = tags[2:]
    extra = f" [{' '.join(extra_tags)}]" if extra_tags else ""
    suffix = f" {remaining}" if remaining else ""
    if variant:
        return f"[{system}][{variant}]{extra}{suffix}", variant
    return f"[{system}]{extra}{suffix}", None


def tprint(*args: Any, **kwargs: Any) -> None:
    """Print with a timestamp prefix and normalized tag order, honouring the level threshold."""
    message = " ".join(str(arg) for arg in args)
    formatted, variant = _format_message(message)
    if not is_enabled_for(variant):
        return
    timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
    builtins.print(f"[{timestamp}]{formatted}", **kwargs)


def log(system: str, message: str, variant: str | None = None) -> None:
    """Log with explicit system and optional variant, honouring the level threshold."""
    if not is_enabled_for(variant):
        return
    if variant:
        tprint(f"[{system}][{variant.upper()}] {message}")
    else:
        tprint(f"[{system}] {message}")
