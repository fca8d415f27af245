"""Helpers for running workers in the background."""

import threading
from collections.abc import Callable

from utils.log_utils import tprint


def run_async(target: Callable, *, name: str | None = None, daemon: bool = True) -> threading.Thread:
    thread = threading.Thread(target=target, name=name, daemon=daemon)
    thread.start()
    return thread


def join_quietly(thread: threading.Thread | None, timeout: float = 2.0) -> bool:
    """Join unless called from the thread itself. Returns True if the thread is gone."""
    if thread is None:
        return True
    if thread is threading.current_thread():
        return False
    thread.join(timeout=timeout)
    if thread.is_alive():
        tprint(f"[MAIN][WARN] Thread {thread.name} did not stop within {timeout:.1f}s")
        return False
    return True
