import time
from typing import Optional

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from .text import normalize_text


def _read_text(locator, timeout_ms: int) -> str:
    try:
        return normalize_text(locator.text_content(timeout=timeout_ms) or "")
    except PlaywrightTimeoutError:
        return ""


def wait_for_text(locator, timeout_sec: float = 10.0, interval_sec: float = 0.2) -> Optional[str]:
    """First non-empty text of the locator, or None on timeout."""
    end = time.time() + timeout_sec
    while time.time() < end:
        cur = _read_text(locator, timeout_ms=max(int(interval_sec * 1000), 1))
        if cur:
            return cur
        time.sleep(interval_sec)
    return None


def wait_until_text_changes(locator, prev_text: str, timeout_sec: float = 10.0, interval_sec: float = 0.2) -> bool:
    """
    Poll until the locator shows non-empty text different from prev_text.
    Used after a click instead of a fixed sleep.
    """
    prev = normalize_text(prev_text)
    end = time.time() + timeout_sec
    while time.time() < end:
        cur = _read_text(locator, timeout_ms=max(int(interval_sec * 1000), 1))
        if cur and cur != prev:
            return True
        time.sleep(interval_sec)
    return False


def wait_until_text_stable(locator, stable_sec: float = 1.0, timeout_sec: float = 10.0, interval_sec: float = 0.2) -> Optional[str]:
    """
    Text once it has stayed the same (and non-empty) for stable_sec.
    None if it keeps changing or stays empty until the timeout.
    """
    end = time.time() + timeout_sec
    last = ""
    since = time.time()
    while time.time() < end:
        cur = _read_text(locator, timeout_ms=max(int(interval_sec * 1000), 1))
        now = time.time()
        if cur != last:
            last, since = cur, now
        elif cur and now - since >= stable_sec:
            return cur
        time.sleep(interval_sec)
    return None
