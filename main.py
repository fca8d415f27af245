"""Entry point for the finger-painting and speech-to-text demo."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from utils.log_utils import tprint
from utils.settings_store import get_settings

SCREENS = ("draw", "speech")


def _load_env_files() -> None:
    """Load .env files from common locations (repo, module dir, home)."""
    candidates: list[Path] = []
    cwd = Path.cwd()
    candidates.extend([cwd / "env/.env", cwd / ".env"])

    module_root = Path(__file__).resolve().parent
    candidates.extend([module_root / "env/.env", module_root / ".env"])

    home = Path.home()
    candidates.append(home / ".air-canvas.env")

    for path in candidates:
        if path.exists():
            load_dotenv(dotenv_path=str(path), override=False)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Finger painting and speech-to-text demo.")
    parser.add_argument(
        "screen",
        nargs="?",
        choices=SCREENS,
        default=None,
        help="Which screen to open (default: $DEFAULT_SCREEN or draw).",
    )
    parser.add_argument(
        "--no-window",
        action="store_true",
        help="Draw screen: run without the OpenCV preview window.",
    )
    return parser


def resolve_screen(requested: str | None) -> str:
    screen = (requested or os.getenv("DEFAULT_SCREEN") or "draw").strip().lower()
    if screen not in SCREENS:
        raise ValueError(f"Unknown screen {screen!r}; expected one of {', '.join(SCREENS)}")
    return screen


def run_draw(show_window: bool = True) -> None:
    from gesture_module.finger_painter import FingerPainter

    painter = FingerPainter.from_settings(get_settings(), show_window=show_window)
    painter.run()


def run_speech() -> None:
    from ui.transcript_view import TranscriptView

    TranscriptView().run()


def bootstrap(argv: list[str] | None = None) -> int:
    """Load configuration and run the selected screen until the user quits."""
    _load_env_files()
    args = _build_parser().parse_args(argv)
    try:
        screen = resolve_screen(args.screen)
    except ValueError as exc:
        tprint(f"[MAIN][ERROR] {exc}")
        return 2

    settings = get_settings()
    tprint(f"[MAIN] Opening {screen} screen (log_level={settings.get('log_level')})")
    try:
        if screen == "draw":
            run_draw(show_window=not args.no_window)
        else:
            run_speech()
    except KeyboardInterrupt:
        tprint("[MAIN] Received interrupt. Shutting down...")
    except (FileNotFoundError, RuntimeError) as exc:
        tprint(f"[MAIN][ERROR] {exc}")
        return 1
    return 0


def main() -> None:
    sys.exit(bootstrap())


if __name__ == "__main__":
    main()
