"""
Ezra E2E - Cookie Consent Handler
Dismisses the cookie consent banner before page interaction.
"""

from typing import List

from playwright.sync_api import Page

from .logging import get_logger
from .ui import first_visible, is_visible, settle

logger = get_logger("Cookies")

BANNER_SELECTOR = '.cookie-consent, [role="dialog"], .cookie-banner, .cookie-popup'
QUICK_ACCEPT_SELECTOR = 'button:has-text("Accept"), button:has-text("Accept All")'
VISIBLE_BANNER_SELECTOR = '.cookie-consent, [role="dialog"], .cookie-banner, button:has-text("Accept")'

ACCEPT_BUTTON_SELECTORS: List[str] = [
    'button:has-text("Accept")',
    'button:has-text("Accept All")',
    '[data-testid="cookie-accept"]',
    '.cookie-consent button:has-text("Accept")',
    'button[aria-label*="Accept"]',
    'button[aria-label*="accept"]',
]


def accept_cookies(page: Page) -> bool:
    """
    Accept the cookie consent banner if present

    Checks quickly first so pages without a banner cost about a second.
    Never raises: a banner that cannot be clicked is logged and left alone.

    Args:
        page: Playwright page

    Returns:
        True if an Accept button was clicked
    """
    try:
        if page.is_closed():
            return False

        banner = page.locator(BANNER_SELECTOR).first
        banner_visible = is_visible(banner, timeout=500)

        if not banner_visible:
            quick_accept = page.locator(QUICK_ACCEPT_SELECTOR).first
            if not is_visible(quick_accept, timeout=500):
                return False

        button = first_visible((page.locator(selector).first for selector in ACCEPT_BUTTON_SELECTORS), timeout=1000)
        if button is not None:
            button.click()
            settle(page, 500)
            logger.info("[COOKIES] Accepted via Accept button")
            return True

        if banner_visible:
            accept_in_banner = banner.locator(QUICK_ACCEPT_SELECTOR).first
            if is_visible(accept_in_banner, timeout=1000):
                accept_in_banner.click()
                settle(page, 500)
                logger.info("[COOKIES] Accepted via banner-scoped button")
                return True

        logger.debug("[COOKIES] Banner present but no Accept button matched")
        return False

    except Exception as e:
        logger.debug(f"[COOKIES] Skipped: {e}")
        return False


def is_cookie_popup_visible(page: Page) -> bool:
    return is_visible(page.locator(VISIBLE_BANNER_SELECTOR).first)
