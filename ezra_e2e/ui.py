"""
Ezra E2E - UI primitives
Non-raising checks and small text heuristics shared by the popup handlers
and page objects.
"""

import re
from typing import Any, Dict, Iterable, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator, Page

from .logging import get_logger

logger = get_logger("UI")

SIGN_OUT_LABELS = ("sign out", "logout", "log out")
PRICE_PATTERN = re.compile(r"\$[0-9,]+")
TIME_SLOT_PATTERN = re.compile(r"\d+:\d+\s*(AM|PM)", re.IGNORECASE)
CALENDAR_DAY_PATTERN = re.compile(r"^[MTWFS]\s+\d+$")


# ==================== Checks ====================

def is_visible(locator: Locator, timeout: int = 0) -> bool:
    """
    Visibility check that never raises

    With a timeout, waits up to ``timeout`` ms for the element to appear;
    without one, checks the current state only.
    """
    try:
        if timeout:
            locator.wait_for(state="visible", timeout=timeout)
            return True
        return locator.is_visible()
    except Exception as e:
        logger.debug(f"[VISIBLE] not visible: {e}")
        return False


def is_enabled(locator: Locator, default: bool = False) -> bool:
    try:
        return locator.is_enabled()
    except Exception:
        return default


def text_of(locator: Locator, timeout: Optional[int] = None) -> str:
    """text_content() or '' on any failure"""
    try:
        if timeout is None:
            return locator.text_content() or ""
        return locator.text_content(timeout=timeout) or ""
    except Exception:
        return ""


def count_of(locator: Locator) -> int:
    try:
        return locator.count()
    except Exception:
        return 0


def bounding_box(locator: Locator) -> Optional[Dict[str, float]]:
    try:
        return locator.bounding_box()
    except Exception:
        return None


def settle(page: Page, ms: int) -> None:
    """page.wait_for_timeout that tolerates a closed page"""
    if page.is_closed():
        return
    try:
        page.wait_for_timeout(ms)
    except PlaywrightError as e:
        logger.debug(f"[SETTLE] wait interrupted: {e}")


def wait_for_dom(page: Page, timeout: Optional[int] = None) -> None:
    if page.is_closed():
        return
    try:
        if timeout is None:
            page.wait_for_load_state("domcontentloaded")
        else:
            page.wait_for_load_state("domcontentloaded", timeout=timeout)
    except PlaywrightError as e:
        logger.debug(f"[DOM] load state wait failed: {e}")


def wait_for_network_idle(page: Page, timeout: int = 10000) -> None:
    if page.is_closed():
        return
    try:
        page.wait_for_load_state("networkidle", timeout=timeout)
    except PlaywrightError:
        logger.info("Network idle timeout, continuing...")


def js_click(locator: Locator) -> None:
    locator.evaluate("el => { if (el && typeof el.click === 'function') { el.click(); } }")


def click_with_fallback(locator: Locator, timeout: int = 10000, name: str = "locator") -> bool:
    """Forced click, then a DOM-level click when Playwright's is intercepted"""
    try:
        locator.click(timeout=timeout, force=True)
        return True
    except PlaywrightError as e:
        logger.info(f"[CLICK] Click failed on {name} ({e}), trying JavaScript click...")

    try:
        js_click(locator)
        return True
    except PlaywrightError as e:
        logger.warning(f"[CLICK] JavaScript click failed on {name}: {e}")
        return False


def first_visible(locators: Iterable[Locator], timeout: int = 1000) -> Optional[Locator]:
    """
    First locator in an ordered chain that becomes visible

    Args:
        locators: Candidates, most specific first; a generator keeps
            later lookups lazy
        timeout: Per-candidate wait in ms, 0 checks the current state only

    Returns:
        The matching locator, or None when the chain is exhausted
    """
    for locator in locators:
        if is_visible(locator, timeout=timeout):
            return locator
    return None


# ==================== Text heuristics ====================

def normalize(text: Optional[str]) -> str:
    return (text or "").strip().lower()


def is_sign_out_label(text: Optional[str]) -> bool:
    """Buttons that would end the session must never be clicked by a popup handler"""
    value = normalize(text)
    return any(label in value for label in SIGN_OUT_LABELS)


def is_confirm_label(text: Optional[str]) -> bool:
    return "confirm" in normalize(text)


def box_within(inner: Optional[Dict[str, float]], outer: Optional[Dict[str, float]]) -> bool:
    """
    True when ``inner`` lies entirely inside ``outer``

    Missing boxes are treated as contained, since Playwright returns None
    for elements it cannot measure.
    """
    if not inner or not outer:
        return True
    return (
        inner["x"] >= outer["x"]
        and inner["y"] >= outer["y"]
        and inner["x"] + inner["width"] <= outer["x"] + outer["width"]
        and inner["y"] + inner["height"] <= outer["y"] + outer["height"]
    )


def extract_price(text: Optional[str]) -> Optional[str]:
    """First ``$N,NNN`` in text, the stripped text if it has no match, None if empty"""
    if not text:
        return None
    match = PRICE_PATTERN.search(text)
    if match:
        return match.group(0)
    return text.strip() or None


def digits(value: Optional[str]) -> str:
    return re.sub(r"\D", "", value or "")


def describe(target: Any) -> str:
    """Loggable name for a selector string or a Locator"""
    return target if isinstance(target, str) else "locator"
