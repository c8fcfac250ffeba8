"""
Ezra E2E - Timezone Confirmation Handler
Dismisses the "Confirm your time zone" modal that staging shows after login
and on some navigations.

The modal shares a layout with the account menu, so a careless "last button"
click can hit Sign out. Every strategy here refuses sign-out labelled buttons.
"""

from typing import List, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator, Page

from .logging import get_logger
from .page_flow import PageFlowDetector
from .ui import (
    bounding_box,
    box_within,
    click_with_fallback,
    count_of,
    is_confirm_label,
    is_enabled,
    is_sign_out_label,
    is_visible,
    settle,
    text_of,
    wait_for_dom,
)

logger = get_logger("Timezone")

MODAL_SELECTOR = '.timezone-modal, [class*="timezone-modal"]'
TITLE_SELECTOR = "text=/Confirm your time zone/i"
ANY_MODAL_SELECTOR = '.modal-dialogue, [class*="modal"], [role="dialog"]'
MODAL_ANCESTOR_XPATH = 'xpath=ancestor::*[contains(@class, "modal") or contains(@class, "dialog")][1]'
VISIBLE_CHECK_SELECTOR = (
    'text="Confirm your time zone", [role="dialog"]:has-text("time zone"), .modal:has-text("time zone")'
)

CONFIRM_SELECTORS: List[str] = [
    '.timezone-modal__btn-bar button.basic.small.yellow:has-text("Confirm")',
    '.timezone-modal button.basic.small.yellow:has-text("Confirm")',
    '.timezone-modal__btn-bar button:has-text("Confirm")',
    '.timezone-modal button:has-text("Confirm")',
]

# The last two candidates are positional guesses; their label is not required to say "Confirm"
POSITIONAL_FALLBACKS = 2

ACTIONS = ("confirm", "close", "skip")


# ==================== Detection ====================

def find_timezone_popup(page: Page) -> Optional[Locator]:
    """
    Locate the timezone modal

    Strategies, first hit wins:
    1. The dedicated .timezone-modal class
    2. The "Confirm your time zone" title and its modal ancestor
    3. Any modal whose text mentions a time zone
    """
    timezone_modal = page.locator(MODAL_SELECTOR).first
    title = page.locator(TITLE_SELECTOR).first
    any_modal = page.locator(ANY_MODAL_SELECTOR).first

    if is_visible(timezone_modal, timeout=2000):
        logger.info("[TZ] Found timezone modal by class")
        return timezone_modal

    if is_visible(title, timeout=2000):
        ancestor = title.locator(MODAL_ANCESTOR_XPATH)
        logger.info("[TZ] Found timezone modal by title text")
        return ancestor if is_visible(ancestor, timeout=2000) else any_modal

    if is_visible(any_modal, timeout=2000):
        modal_text = text_of(any_modal).lower()
        if "time zone" in modal_text or "timezone" in modal_text:
            logger.info("[TZ] Found timezone modal by generic modal text")
            return any_modal
        logger.info("[TZ] A modal is open but it is not the timezone modal")
        if modal_text:
            logger.debug(f"[TZ] Modal text: {modal_text[:100]}...")

    return None


def is_timezone_popup_visible(page: Page) -> bool:
    return is_visible(page.locator(VISIBLE_CHECK_SELECTOR).first)


# ==================== Click helpers ====================

def _click_and_verify(page: Page, popup: Locator, button: Locator) -> bool:
    """Click a candidate and report whether the modal went away"""
    url_before = page.url

    if not click_with_fallback(button, timeout=10000, name="timezone confirm"):
        return False

    settle(page, 2000)

    if page.is_closed():
        logger.info("[TZ] Page closed after click, assuming dismissed")
        return True

    url_after = page.url
    if PageFlowDetector.is_auth_url(url_after) and not PageFlowDetector.is_auth_url(url_before):
        logger.warning("[TZ] Clicking Confirm redirected to the login page")
        logger.warning(f"[TZ]   Before: {url_before}")
        logger.warning(f"[TZ]   After:  {url_after}")
        return True

    if is_visible(popup):
        logger.info("[TZ] Modal still visible after click")
        return False

    logger.info("[TZ] Timezone modal closed")
    return True


def _confirm_candidates(page: Page, popup: Locator) -> List[Locator]:
    candidates = [page.locator(selector).first for selector in CONFIRM_SELECTORS]
    candidates.append(popup.locator('button:has-text("Confirm")').first)
    candidates.append(popup.locator(".timezone-modal__btn-bar button").last)
    candidates.append(popup.locator("button").last)
    return candidates


# ==================== Strategies ====================

def _confirm_via_candidates(page: Page, popup: Locator) -> bool:
    candidates = _confirm_candidates(page, popup)
    first_positional = len(candidates) - POSITIONAL_FALLBACKS

    for index, button in enumerate(candidates, start=1):
        if page.is_closed():
            return True
        try:
            if not is_visible(button, timeout=2000):
                continue

            label = text_of(button)
            if is_sign_out_label(label):
                logger.info(f"[TZ] Skipping candidate {index}: looks like Sign out ({label.strip()!r})")
                continue

            if not is_confirm_label(label) and index <= first_positional:
                logger.info(f"[TZ] Skipping candidate {index}: label is not Confirm ({label.strip()!r})")
                continue

            if not is_enabled(button, default=True):
                continue

            logger.info(f"[TZ] Confirm candidate {index} matched (text: {label.strip()!r})")
            settle(page, 500)
            button.scroll_into_view_if_needed()
            settle(page, 500)

            if not is_visible(button) or not is_enabled(button, default=True):
                logger.info("[TZ] Candidate became hidden or disabled, trying next...")
                continue

            if _click_and_verify(page, popup, button):
                return True

        except Exception as e:
            logger.info(f"[TZ] Candidate {index} failed: {e}")
            continue

    logger.info("[TZ] Candidate chain exhausted, trying fallback strategies...")
    return False


def _confirm_via_popup_buttons(page: Page, popup: Locator) -> bool:
    """Any visible Confirm button that lies inside the modal's bounding box"""
    buttons = popup.locator('button:has-text("Confirm")')
    popup_box = bounding_box(popup)

    for i in range(count_of(buttons)):
        if page.is_closed():
            return True
        button = buttons.nth(i)
        try:
            if not is_visible(button):
                continue
            label = text_of(button)
            if is_sign_out_label(label) or not is_confirm_label(label):
                continue
            if not box_within(bounding_box(button), popup_box):
                continue

            logger.info(f"[TZ] Fallback: Confirm button inside modal (text: {label.strip()!r})")
            button.scroll_into_view_if_needed()
            try:
                button.click(timeout=5000, force=True)
            except PlaywrightError as e:
                logger.debug(f"[TZ] Fallback click raised: {e}")

            wait_for_dom(page, timeout=5000)
            settle(page, 1000)

            if page.is_closed() or not is_visible(popup):
                return True
        except Exception as e:
            logger.debug(f"[TZ] Fallback button {i} failed: {e}")
            continue

    return False


def _confirm_via_last_button(page: Page, popup: Locator) -> Optional[bool]:
    """
    Confirm is usually the rightmost button; fall back one if that is Sign out

    Returns:
        True if the modal went away, False if this strategy could not help,
        None when only sign-out buttons are clickable, in which case no
        blind click may follow
    """
    buttons = popup.locator("button")
    total = count_of(buttons)
    if total == 0:
        return False

    target = buttons.nth(total - 1)
    if not is_visible(target):
        return False

    label = text_of(target)
    if is_sign_out_label(label):
        logger.info(f"[TZ] Last modal button looks like Sign out ({label.strip()!r})")
        if total < 2:
            return None
        target = buttons.nth(total - 2)
        label = text_of(target)
        if not is_visible(target) or is_sign_out_label(label):
            return None

    logger.info(f"[TZ] Using positional modal button (text: {label.strip()!r})")
    try:
        target.scroll_into_view_if_needed()
        target.click(timeout=5000, force=True)
    except PlaywrightError as e:
        logger.info(f"[TZ] Positional click failed: {e}")
        return False

    wait_for_dom(page, timeout=5000)
    settle(page, 1000)
    return page.is_closed() or not is_visible(popup)


def _confirm_via_coordinates(page: Page, popup: Locator) -> bool:
    """Last resort: click where the Confirm button usually sits"""
    box = bounding_box(popup)
    if not box:
        return False

    logger.info("[TZ] Clicking bottom-right of modal by coordinates")
    page.mouse.click(box["x"] + box["width"] * 0.85, box["y"] + box["height"] * 0.85)
    settle(page, 2000)
    return page.is_closed() or not is_visible(popup)


# ==================== Entry point ====================

def handle_timezone_popup(page: Page, action: str = "confirm") -> bool:
    """
    Handle the timezone confirmation modal if present

    Args:
        page: Playwright page
        action: 'confirm' keeps the suggested zone, 'close' dismisses the
            modal, 'skip' leaves it alone

    Returns:
        True if the modal was dismissed. Never raises.
    """
    if action not in ACTIONS:
        raise ValueError(f"action must be one of {ACTIONS}, got {action!r}")

    try:
        if page.is_closed() or action == "skip":
            return False

        logger.info("[TZ] Checking for timezone pop-up...")
        settle(page, 1000)

        popup = find_timezone_popup(page)
        if popup is None or not is_visible(popup, timeout=2000):
            logger.info("[TZ] No timezone pop-up found, continuing...")
            return False

        logger.info("[TZ] Timezone pop-up is visible, handling...")

        if action == "close":
            close_button = popup.locator('button:has-text("Close")').first
            if is_visible(close_button):
                close_button.click()
                settle(page, 1500)
                return True
            return False

        strategies = (
            _confirm_via_candidates,
            _confirm_via_popup_buttons,
            _confirm_via_last_button,
            _confirm_via_coordinates,
        )
        for strategy in strategies:
            if page.is_closed():
                return True
            result = strategy(page, popup)
            if result:
                return True
            if result is None:
                logger.warning("[TZ] Only Sign out is clickable in the modal, leaving it open")
                return False

        logger.warning("[TZ] All strategies failed to dismiss the timezone modal")
        return False

    except Exception as e:
        logger.info(f"[TZ] Timezone pop-up not found or already handled: {e}")
        return False
