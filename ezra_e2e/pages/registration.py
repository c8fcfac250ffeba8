"""
Ezra E2E - Registration Page
Creates a new member account via sign-in -> Join.
"""

from typing import Optional, Tuple

from playwright.sync_api import Locator

from .. import ui
from ..config import Config
from ..cookie_handler import accept_cookies
from ..exceptions import ElementNotFoundError
from .base import BasePage

LEAVE_REGISTRATION_MARKERS = ("/sign-in", "/register", "/join")


class RegistrationPage(BasePage):
    PATH = "/sign-in"

    JOIN_LINK = 'text="Join"'
    FIRST_NAME = "#firstName"
    LAST_NAME = "#lastName"
    EMAIL = "#email"
    PHONE = "#phoneNumber"
    PASSWORD = "#password"
    SUBMIT = 'button:has-text("Submit"), button[type="submit"]'

    # Checkbox strategies, most specific first
    STANDARD_CHECKBOXES = 'input[type="checkbox"]'
    SVG_BUTTON_CHECKBOXES = "button:has(svg rect), button:has(svg rect.border)"
    SVG_RECT_CHECKBOXES = 'svg rect.border, svg rect[class*="border"]'
    ROLE_CHECKBOXES = '[role="checkbox"], [aria-checked], .checkbox, [class*="checkbox"]'

    SUCCESS_INDICATORS = ("text=/welcome/i", "text=/dashboard/i", "text=/select.*scan/i", "text=Home", "text=Reports")
    ERROR_INDICATORS = ("text=/error/i", "text=/invalid/i", "text=/already exists/i", "text=/duplicate/i")

    def goto(self) -> None:
        """Sign-in page, dismiss cookies, follow Join to the form"""
        self.open()
        accept_cookies(self.page)

        join = self.locate(self.JOIN_LINK)
        join.wait_for(state="visible", timeout=10000)
        join.click()

        ui.wait_for_dom(self.page)
        self.locate(self.FIRST_NAME).wait_for(state="visible", timeout=10000)

    def fill_registration_form(
        self,
        first_name: str,
        last_name: str,
        email: str,
        phone_number: str,
        password: Optional[str] = None,
    ) -> None:
        fields = (
            (self.FIRST_NAME, first_name),
            (self.LAST_NAME, last_name),
            (self.EMAIL, email),
            (self.PHONE, phone_number),
            (self.PASSWORD, password or Config.REGISTRATION_PASSWORD),
        )
        for selector, value in fields:
            if not self.fast_inject(selector, value):
                raise ElementNotFoundError(f"Registration field {selector} could not be filled")

    def _find_checkboxes(self) -> Tuple[Optional[Locator], int]:
        """
        Resolve the consent checkboxes

        Strategies, first non-empty wins:
        1. Standard input[type=checkbox]
        2. Buttons wrapping SVG rects
        3. SVG rect.border elements, clicked through their button ancestor
           or the owning svg
        4. role/aria checkboxes
        """
        standard = self.page.locator(self.STANDARD_CHECKBOXES)
        count = ui.count_of(standard)
        if count:
            self.logger.info(f"[REGISTER] Found {count} standard HTML checkboxes")
            return standard, count

        svg_buttons = self.page.locator(self.SVG_BUTTON_CHECKBOXES)
        count = ui.count_of(svg_buttons)
        if count:
            self.logger.info(f"[REGISTER] Found {count} buttons containing SVG checkboxes")
            return svg_buttons, count

        if ui.count_of(self.page.locator(self.SVG_RECT_CHECKBOXES)):
            for candidate in (
                self.page.locator("button:has(svg rect.border)"),
                self.page.locator("svg rect.border").locator("xpath=ancestor::button[1]"),
                self.page.locator("svg").filter(has=self.page.locator("rect.border")),
            ):
                count = ui.count_of(candidate)
                if count:
                    self.logger.info(f"[REGISTER] Found {count} SVG-based checkboxes")
                    return candidate, count

        custom = self.page.locator(self.ROLE_CHECKBOXES)
        count = ui.count_of(custom)
        if count:
            self.logger.info(f"[REGISTER] Found {count} custom checkbox elements")
            return custom, count

        return None, 0

    def _log_checkbox_diagnostics(self) -> None:
        counts = {
            "svg rect": ui.count_of(self.page.locator("svg rect")),
            "input": ui.count_of(self.page.locator("input")),
            'role="checkbox"': ui.count_of(self.page.locator('[role="checkbox"]')),
            "svg": ui.count_of(self.page.locator("svg")),
        }
        for name, count in counts.items():
            self.logger.info(f"[REGISTER] Found {count} {name} elements")

    def _check(self, checkbox: Locator, index: int) -> None:
        tag = ""
        try:
            tag = (checkbox.evaluate("el => el.tagName") or "").lower()
        except Exception as e:
            self.logger.debug(f"[REGISTER] Could not read tag of checkbox {index}: {e}")

        if tag == "input":
            try:
                already = checkbox.is_checked()
            except Exception:
                already = False
        else:
            already = checkbox.get_attribute("aria-checked") == "true"

        if already:
            self.logger.info(f"[REGISTER] Checkbox {index} already checked")
            return

        checkbox.scroll_into_view_if_needed()
        self.settle(300)
        checkbox.click(force=True)
        self.settle(500)

        if tag == "input":
            try:
                checked = checkbox.is_checked()
            except Exception:
                checked = False
            if not checked:
                self.logger.info(f"[REGISTER] Checkbox {index} failed to check, trying again...")
                checkbox.click(force=True)
                self.settle(500)
                return

        self.logger.info(f"[REGISTER] Checkbox {index} checked")

    def select_all_checkboxes(self) -> int:
        """
        Tick every visible consent checkbox; Submit stays disabled until they are

        Returns:
            Number of checkbox elements processed

        Raises:
            ElementNotFoundError: if no checkbox strategy matched
        """
        self.settle(1000)
        checkboxes, count = self._find_checkboxes()

        if checkboxes is None:
            self._log_checkbox_diagnostics()
            raise ElementNotFoundError("No checkboxes found on registration page. Please check the page structure.")

        self.logger.info(f"[REGISTER] Selecting {count} checkboxes...")
        for i in range(count):
            checkbox = checkboxes.nth(i)
            if ui.is_visible(checkbox):
                self._check(checkbox, i + 1)

        self.settle(1000)
        return count

    def submit(self) -> None:
        """
        Click Submit once it is enabled

        Raises:
            RuntimeError: if the button is still disabled after polling
        """
        button = self.locate(self.SUBMIT)
        button.wait_for(state="visible", timeout=10000)

        if not ui.is_enabled(button):
            self.logger.info("[REGISTER] Submit button not enabled yet, waiting...")
            self.settle(1000)

        if not self.wait_until_enabled(button, attempts=10, interval_ms=500):
            raise RuntimeError("Submit button is not enabled. Make sure all required checkboxes are selected.")

        button.scroll_into_view_if_needed()
        self.settle(500)
        button.click(force=True)

        ui.wait_for_dom(self.page)
        self.settle(2000)

    def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        phone_number: str,
        password: Optional[str] = None,
    ) -> None:
        self.logger.info(f"[REGISTER] Registering {email}")
        self.goto()
        self.fill_registration_form(first_name, last_name, email, phone_number, password)
        self.select_all_checkboxes()
        self.submit()

    @staticmethod
    def _left_registration(url: str) -> bool:
        return not any(marker in url for marker in LEAVE_REGISTRATION_MARKERS)

    def is_registration_successful(self) -> bool:
        """
        True once the browser has left sign-in/registration, or a
        post-registration landmark is visible
        """
        try:
            self.page.wait_for_url(lambda url: self._left_registration(url), timeout=10000)
        except Exception as e:
            self.logger.debug(f"[REGISTER] Still on registration URL: {e}")

        self.settle(1000)

        if self._left_registration(self.page.url):
            return True

        for selector in self.SUCCESS_INDICATORS:
            if self.is_visible(selector, timeout=2000):
                return True

        for selector in self.ERROR_INDICATORS:
            if self.is_visible(selector, timeout=1000):
                self.logger.warning(f"[REGISTER] Registration error detected: {self.text_of(selector)}")
                return False

        return False
