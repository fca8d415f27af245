"""Safe loading/saving helpers."""

import json
from pathlib import Path

from utils.log_utils import tprint


def load_json(path: str | Path) -> dict:
    p = Path(path)
    if not p.exists():
        return {}
    try:
        return json.loads(p.read_text())
    except json.JSONDecodeError as exc:
        tprint(f"[SETTINGS][ERROR] Could not parse {p}: {exc}")
        return {}


def ensure_dir(path: str | Path) -> Path:
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def next_available(directory: str | Path, stem: str, suffix: str) -> Path:
    """Return directory/stem_NNN.suffix for the first unused NNN."""
    base = ensure_dir(directory)
    index = 1
    while (candidate := base / f"{stem}_{index:03d}{suffix}").exists():
        index += 1
    return candidate
