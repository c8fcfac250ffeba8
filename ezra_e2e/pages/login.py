"""
Ezra E2E - Login Page
Sign-in, sign-out and login outcome detection.
"""

import time
from typing import Optional

from playwright.sync_api import Error as PlaywrightError

from .. import ui
from ..cookie_handler import accept_cookies
from ..exceptions import PageClosedError
from ..page_flow import POST_LOGIN_URL, PageFlowDetector
from ..timezone_handler import MODAL_SELECTOR as TIMEZONE_MODAL_SELECTOR
from ..timezone_handler import handle_timezone_popup
from .base import BasePage

LOGIN_PATHS = ("/login", "/sign-in", "/signin", "/")


class LoginPage(BasePage):
    PATH = "/login"

    EMAIL = 'input[type="email"], input[name="email"], input[id*="email"]'
    PASSWORD = 'input[type="password"], input[name="password"], input[id*="password"]'
    LOGIN_BUTTON = (
        'button:has-text("Login"), button:has-text("Sign In"), button:has-text("Submit"), button[type="submit"]'
    )
    FORGOT_PASSWORD = 'a:has-text("Forgot"), a:has-text("Reset"), a:has-text("Password")'
    ERROR = '.error, .alert-error, [role="alert"], text=/invalid|incorrect|wrong|error|username.*password/i'
    SIGN_OUT = (
        'button:has-text("Sign out"), button:has-text("Sign Out"), button:has-text("Logout"), '
        'button:has-text("Log out"), a:has-text("Sign out"), a:has-text("Logout")'
    )

    ERROR_SELECTORS = (
        '.error, .alert-error, [role="alert"]',
        "text=/invalid|incorrect|wrong|error/i",
        "text=/username.*password/i",
        "text=/password.*incorrect/i",
    )
    LOGGED_IN_INDICATORS = (
        "text=/dashboard/i",
        "text=/welcome/i",
        '[data-testid="user-menu"]',
        ".user-profile",
        "text=/select.*scan/i",
    )

    # ==================== Navigation ====================

    def _clear_popups(self) -> None:
        ui.wait_for_dom(self.page)
        accept_cookies(self.page)
        if not self.page.is_closed():
            handle_timezone_popup(self.page, "confirm")
        self.settle(1000)

    def _email_ready(self, wait_ms: int = 2000) -> bool:
        if self.is_visible(self.EMAIL, timeout=wait_ms):
            self.locate(self.EMAIL).wait_for(state="visible", timeout=10000)
            return True
        return False

    def goto(self) -> None:
        """
        Reach the login form

        Stays put when the form is already showing, otherwise walks the known
        login paths. A redirect into the app means the session is already
        signed in, which also counts as done.

        Raises:
            PageClosedError: if the page closes during navigation
        """
        self.ensure_open()

        if PageFlowDetector.is_auth_url(self.page.url):
            self._clear_popups()
            if not self.page.is_closed() and self._email_ready():
                return

        for path in LOGIN_PATHS:
            self.ensure_open()
            try:
                self.page.goto(path)
                if self.page.is_closed():
                    continue
                self._clear_popups()
                if self.page.is_closed():
                    continue

                if self._email_ready():
                    return

                current_url = self.page.url
                if PageFlowDetector.is_post_login_url(current_url):
                    self.logger.info("[LOGIN] Already signed in, skipping login form")
                    return

                if PageFlowDetector.is_auth_url(current_url):
                    self.settle(2000)
                    if not self.page.is_closed() and self._email_ready(wait_ms=5000):
                        return

            except PlaywrightError as e:
                if self.page.is_closed():
                    raise PageClosedError("Cannot navigate to login page - page is closed")
                self.logger.debug(f"[LOGIN] {path} did not show the login form: {e}")

        self.ensure_open()
        self.logger.info("[LOGIN] Falling back to explicit /login")
        self.page.goto("/login")
        self._clear_popups()
        self.ensure_open()
        self.locate(self.EMAIL).wait_for(state="visible", timeout=10000)

    # ==================== Actions ====================

    def login(self, email: str, password: str, timeout_ms: int = 15000) -> None:
        """
        Submit credentials and wait until the app reacts

        Returns as soon as the URL leaves the login page or an error message
        shows, whichever comes first; gives up quietly after ``timeout_ms``.
        """
        start_url = self.page.url
        self.logger.info(f"[LOGIN] Signing in as {email}")
        self.locate(self.EMAIL).fill(email)
        self.locate(self.PASSWORD).fill(password)
        self.locate(self.LOGIN_BUTTON).click()

        deadline = time.monotonic() + timeout_ms / 1000.0
        while time.monotonic() < deadline:
            if self.page.is_closed():
                return
            current_url = self.page.url
            if current_url != start_url or POST_LOGIN_URL.search(current_url):
                self.logger.debug(f"[LOGIN] Navigated to {current_url}")
                return
            if self.is_visible(self.ERROR):
                self.logger.debug("[LOGIN] Error message shown")
                return
            self.settle(250)

        self.logger.debug("[LOGIN] No navigation or error within timeout")

    def click_forgot_password(self) -> None:
        self.locate(self.FORGOT_PASSWORD).click()

    def get_error_message(self) -> Optional[str]:
        if self.page.is_closed():
            return None
        self.settle(1000)

        error = self.first_visible(self.ERROR_SELECTORS, timeout=0)
        if error is None:
            return None
        return ui.text_of(error).strip() or None

    def is_logged_in(self) -> bool:
        current_url = self.page.url
        on_login = "/login" in current_url or current_url.endswith("/") or "sign-in" in current_url

        if on_login and self.is_visible(self.ERROR):
            return False

        for selector in self.LOGGED_IN_INDICATORS:
            if self.is_visible(selector):
                return True

        return "/login" not in current_url and not current_url.endswith("/")

    def wait_for_login_success(self) -> None:
        """Wait for the post-login redirect and dismiss the timezone modal it brings"""
        if self.page.is_closed():
            self.logger.warning("[LOGIN] Page is closed, cannot wait for login success")
            return

        try:
            self.page.wait_for_url(POST_LOGIN_URL, timeout=10000)
        except PlaywrightError as e:
            self.logger.debug(f"[LOGIN] Post-login URL not reached: {e}")

        if self.page.is_closed():
            self.logger.warning("[LOGIN] Page closed after URL wait")
            return

        ui.wait_for_dom(self.page)
        self.settle(2000)
        if self.page.is_closed():
            return

        if self.is_visible(TIMEZONE_MODAL_SELECTOR, timeout=1000):
            self.logger.info("[LOGIN] Timezone pop-up detected after login, handling...")
            handle_timezone_popup(self.page, "confirm")
            self.settle(1000)
        else:
            self.logger.info("[LOGIN] No timezone pop-up detected after login")

    def logout(self) -> bool:
        """
        Sign out when a sign-out control is showing

        Returns:
            True if the browser ended up off the app pages
        """
        try:
            if self.page.is_closed():
                return False

            sign_out = self.locate(self.SIGN_OUT)
            if not ui.is_visible(sign_out, timeout=2000):
                self.logger.info("[LOGIN] Sign out button not found - may already be logged out")
                return False

            self.logger.info("[LOGIN] Logging out...")
            sign_out.click()
            self.settle(2000)

            current_url = self.page.url
            logged_out = PageFlowDetector.is_auth_url(current_url) or not PageFlowDetector.is_post_login_url(current_url)
            if logged_out:
                self.logger.info("[LOGIN] Successfully logged out")
            return logged_out

        except PlaywrightError as e:
            self.logger.info(f"[LOGIN] Logout failed or not needed: {e}")
            return False
