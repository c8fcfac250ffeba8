"""
Ezra E2E - Reserve Appointment Page
Payment step: payment method, the embedded Stripe card form, promo code,
order total and decline handling.

Stripe renders its inputs in cross-origin child frames whose names change
per load, so the card frame is found by probing every child frame for a
"Card number" textbox rather than by selector.
"""

import re
import time
from typing import Callable, List, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Frame, Locator, Page

from .. import ui
from ..cookie_handler import accept_cookies
from ..exceptions import ElementNotFoundError, PageClosedError, PaymentFieldError
from ..page_flow import PageFlowDetector
from .base import BasePage

STRIPE_READY_SELECTOR = 'iframe[name^="__privateStripeFrame"], iframe[src*="stripe"], [data-testid="payment-form"]'
DECLINE_PATTERN = re.compile(r"card (was|has been) declined", re.IGNORECASE)

STRIPE_FRAME_TIMEOUT = 15.0
STRIPE_POLL_MS = 250

MIN_CARD_DIGITS = 15
MIN_EXPIRY_DIGITS = 4
MIN_CVV_LENGTH = 3
MIN_ZIP_LENGTH = 5

PAYMENT_METHODS = {
    "card": 'input[type="radio"][value*="card"], input[type="radio"][name*="payment"][value*="card"]',
    "affirm": 'input[type="radio"][value*="affirm"], input[type="radio"][name*="payment"][value*="affirm"]',
    "bank": 'input[type="radio"][value*="bank"], input[type="radio"][name*="payment"][value*="bank"]',
}


def check_field_value(field: str, value: Optional[str], min_length: int, ignore: str = r"\s") -> str:
    """
    Verify a Stripe input holds enough characters after filling

    Stripe reformats values as it goes (spaces in card numbers, " / " in
    expiry), so characters matching ``ignore`` are not counted.

    Raises:
        PaymentFieldError: if the value is shorter than ``min_length``
    """
    value = value or ""
    significant = re.sub(ignore, "", value)
    if len(significant) < min_length:
        raise PaymentFieldError(field, value, f"{len(significant)} characters, expected at least {min_length}")
    return value


class ReserveAppointmentPage(BasePage):
    PATH = "/reserve-appointment"

    CONTINUE = '[data-test="submit"]'
    BACK = 'button:has-text("Back")'
    PROMO_INPUT = 'input[name*="promo"], input[id*="promo"], input[placeholder*="Promo"]'
    APPLY_PROMO = 'button:has-text("Apply")'
    APPOINTMENT_SUMMARY = '.appointment-summary, [data-testid="appointment-summary"]'
    PAYMENT_CONFIRMATION = '.payment-confirmation, [data-testid="payment-confirmation"]'
    ERROR = 'alert, .error, .alert-error, [role="alert"]'
    ANY_PRICE = "text=/\\$[0-9,]+/"

    # ==================== Page lifecycle ====================

    def _recover_page(self) -> None:
        """Swap in a live page from the same context after the original closed"""
        context = self.page.context
        live = [candidate for candidate in context.pages if not candidate.is_closed()]
        self.page = live[0] if live else context.new_page()
        self.logger.warning("[PAYMENT] Original page closed, continuing on a fresh page")
        self.page.goto(self.PATH, wait_until="domcontentloaded")

    def wait_until_ready(self) -> None:
        """Cookies dismissed and the Stripe form (or its container) attached"""
        if self.page.is_closed():
            self._recover_page()

        ui.wait_for_dom(self.page)
        accept_cookies(self.page)

        try:
            self.page.wait_for_selector(STRIPE_READY_SELECTOR, timeout=15000)
        except PlaywrightError:
            self.logger.warning(
                "[STRIPE] Stripe iframe not detected within timeout - continuing, payment fields may appear later."
            )

    def goto(self) -> None:
        if self.page.is_closed():
            self.wait_until_ready()

        if PageFlowDetector.is_payment_url(self.page.url):
            self.wait_until_ready()
            return

        self.page.goto(self.PATH)
        self.wait_until_ready()

    def select_payment_method(self, method: str = "card") -> None:
        if method not in PAYMENT_METHODS:
            raise ValueError(f"Unknown payment method {method!r}, expected one of {sorted(PAYMENT_METHODS)}")
        self.locate(PAYMENT_METHODS[method]).click()
        self.settle(500)

    # ==================== Stripe ====================

    def _find_stripe_frame(self) -> Optional[Frame]:
        main_frame = self.page.main_frame
        for frame in self.page.frames:
            if frame == main_frame:
                continue
            if ui.is_visible(frame.get_by_role("textbox", name="Card number"), timeout=2000):
                return frame
        return None

    def get_stripe_frame(self, timeout: float = STRIPE_FRAME_TIMEOUT) -> Frame:
        """
        Child frame hosting the Stripe card number input

        Raises:
            PageClosedError: if the payment page is gone
            ElementNotFoundError: if no frame shows the card field within ``timeout`` seconds
        """
        if self.page.is_closed():
            raise PageClosedError("Payment page is no longer available (page closed).")

        deadline = time.monotonic() + timeout
        frame = self._find_stripe_frame()
        while frame is None and time.monotonic() < deadline and not self.page.is_closed():
            self.settle(STRIPE_POLL_MS)
            frame = self._find_stripe_frame()

        if frame is None:
            raise ElementNotFoundError("Could not find Stripe iframe. Make sure you are on the payment page.")

        self.logger.info(f"[STRIPE] Card frame found: {frame.name or frame.url}")
        return frame

    def _focus(self, field: Locator) -> None:
        field.wait_for(state="visible", timeout=10000)
        field.scroll_into_view_if_needed()
        field.click(timeout=10000)

    def _clear(self, field: Locator) -> None:
        field.press("Control+A")
        field.press("Backspace")

    def _fill_card_number(self, frame: Frame, card_number: str) -> None:
        self.logger.info("[STRIPE] Filling card number...")
        field = frame.get_by_role("textbox", name="Card number")
        self._focus(field)
        self._clear(field)
        self.settle(300)

        field.fill(card_number)
        self.settle(1500)

        value = field.input_value()
        self.logger.info(f"[STRIPE] Card value entered: {value!r} ({len(ui.digits(value))} digits)")

        if len(ui.digits(value)) < MIN_CARD_DIGITS:
            self.logger.info("[STRIPE] Retrying card number entry keystroke by keystroke...")
            field.click()
            self._clear(field)
            self.settle(500)
            field.press_sequentially(card_number, delay=100)
            self.settle(2000)
            check_field_value("Card number", field.input_value(), MIN_CARD_DIGITS)

        field.blur()
        self.settle(1000)
        self.logger.info("[STRIPE] Card number filled and validated")

    def _fill_checked(self, field: Locator, value: str, name: str, min_length: int, ignore: str = r"\s") -> None:
        self.logger.info(f"[STRIPE] Filling {name}...")
        self._focus(field)
        field.fill(value)
        field.blur()
        self.settle(800)
        check_field_value(name, field.input_value(), min_length, ignore)
        self.logger.info(f"[STRIPE] {name} filled and validated")

    def _fill_optional(self, candidates: Locator, value: str, name: str) -> bool:
        """Email and phone only appear for some Stripe configurations"""
        if not value or ui.count_of(candidates) == 0:
            self.logger.info(f"[STRIPE] {name} field not present - skipping.")
            return False

        field = candidates.first
        field.wait_for(state="visible", timeout=7000)
        field.scroll_into_view_if_needed()
        field.fill(value)
        field.blur()
        if not field.input_value():
            raise PaymentFieldError(name, "", "field value empty after fill")
        self.logger.info(f"[STRIPE] {name} filled and validated")
        self.settle(500)
        return True

    def _country_strategies(self, frame: Frame, combo: Locator) -> List[Callable[[], None]]:
        def click_option() -> None:
            combo.click()
            option = frame.get_by_role("option", name=re.compile("United States", re.IGNORECASE)).first
            option.wait_for(state="visible", timeout=5000)
            option.click()

        return [
            lambda: combo.select_option("US"),
            lambda: combo.select_option(value="US"),
            lambda: combo.select_option(label="United States"),
            click_option,
        ]

    def _select_country(self, frame: Frame) -> bool:
        self.logger.info("[STRIPE] Selecting country...")
        combo = frame.get_by_role("combobox", name=re.compile("Country", re.IGNORECASE))
        if not ui.is_visible(combo, timeout=10000):
            self.logger.info("[STRIPE] Country dropdown not found - continuing.")
            return False

        for index, attempt in enumerate(self._country_strategies(frame, combo), start=1):
            try:
                attempt()
            except PlaywrightError as e:
                self.logger.debug(f"[STRIPE] Country strategy {index} failed: {e}")
                continue
            self.settle(1000)
            self.logger.info("[STRIPE] Country selected: United States")
            return True

        self.logger.warning("[STRIPE] Unable to select country; field may already be set.")
        return False

    def fill_payment_details(
        self,
        card_number: str,
        expiry: str,
        email: Optional[str],
        phone: Optional[str],
        cvv: str,
        zip_code: str,
    ) -> None:
        """
        Fill the Stripe card form and verify each field took

        Args:
            card_number: Card number, spaces allowed
            expiry: MM/YY
            email: Filled only if Stripe shows an email field
            phone: Filled only if Stripe shows a phone field
            cvv: Security code
            zip_code: Billing ZIP

        Raises:
            PaymentFieldError: if a field does not hold its value after filling
            ElementNotFoundError: if the Stripe frame never appears
        """
        frame = self.get_stripe_frame()

        try:
            frame.get_by_role("textbox").first.wait_for(state="visible", timeout=10000)
        except PlaywrightError:
            self.logger.info("[STRIPE] Waiting for iframe content to load...")
            self.settle(2000)

        self._fill_card_number(frame, card_number)

        expiry_field = frame.get_by_role("textbox", name="Expiration date MM / YY").or_(
            frame.get_by_role("textbox", name=re.compile(r"Expiration.*MM.*YY", re.IGNORECASE))
        ).first
        self._fill_checked(expiry_field, expiry, "Expiry", MIN_EXPIRY_DIGITS, ignore=r"[\s/]")

        cvv_field = frame.get_by_role("textbox", name="CVC").or_(
            frame.get_by_role("textbox", name="Security code")
        ).first
        self._fill_checked(cvv_field, cvv, "CVV", MIN_CVV_LENGTH)

        zip_field = frame.get_by_role("textbox", name="ZIP code")
        self._fill_checked(zip_field, zip_code, "ZIP code", MIN_ZIP_LENGTH)

        email_fields = (
            frame.get_by_role("textbox", name=re.compile(r"^Email\b", re.IGNORECASE))
            .or_(frame.locator('input[type="email"]'))
            .or_(frame.get_by_placeholder(re.compile("email", re.IGNORECASE)))
        )
        self._fill_optional(email_fields, email, "Email")

        phone_fields = (
            frame.get_by_role("textbox", name=re.compile("phone", re.IGNORECASE))
            .or_(frame.locator('input[type="tel"]'))
            .or_(frame.get_by_placeholder(re.compile("phone", re.IGNORECASE)))
        )
        self._fill_optional(phone_fields, phone, "Phone number")

        self._select_country(frame)

        self.settle(2000)
        self.logger.info("[STRIPE] All payment details filled successfully")

    def wait_for_payment_form_ready(self) -> bool:
        """
        Wait for Stripe validation to enable Continue

        Returns:
            True once Continue is enabled
        """
        self.logger.info("[PAYMENT] Waiting for payment form validation...")
        self.settle(2000)

        button = self.page.locator(self.CONTINUE)
        if not ui.is_visible(button.first, timeout=5000):
            self.logger.warning("[PAYMENT] Could not verify Continue button state")
            return False

        if self.wait_until_enabled(button.first, attempts=20, interval_ms=500):
            self.logger.info("[PAYMENT] Payment form validated, Continue button enabled")
            return True

        self.logger.warning("[PAYMENT] Continue button still disabled after waiting")
        return False

    # ==================== Actions ====================

    def apply_promo_code(self, promo_code: str) -> None:
        self.locate(self.PROMO_INPUT).fill(promo_code)
        self.locate(self.APPLY_PROMO).click()
        self.settle(2000)

    def click_continue(self) -> None:
        """Submit payment; Stripe plus the booking backend take several seconds"""
        self.locate(self.CONTINUE).click()
        self.settle(6000)

    def click_back(self) -> None:
        self.locate(self.BACK).click()
        ui.wait_for_network_idle(self.page)

    def is_continue_button_enabled(self) -> bool:
        return ui.is_enabled(self.locate(self.CONTINUE))

    # ==================== Summary ====================

    def get_total_amount(self) -> Optional[str]:
        """
        Order total as "$N,NNN"

        Tries any price on the page, then the price next to the "Total"
        label, then any paragraph containing a dollar amount.
        """
        any_price = self.locate(self.ANY_PRICE)
        if ui.is_visible(any_price, timeout=10000):
            price = ui.extract_price(ui.text_of(any_price))
            if price:
                return price

        total_label = self.page.get_by_text("Total", exact=True).first
        if ui.is_visible(total_label, timeout=5000):
            price_in_parent = total_label.locator("..").locator(self.ANY_PRICE).first
            price = ui.extract_price(ui.text_of(price_in_parent, timeout=5000))
            if price:
                return price

        paragraph = self.page.locator("p").filter(has_text=re.compile(r"\$\d+")).first
        if ui.is_visible(paragraph, timeout=5000):
            text = ui.text_of(paragraph)
            if "$" in text:
                return ui.extract_price(text)

        self.logger.warning("[PAYMENT] Could not find total amount")
        return None

    def is_payment_confirmed(self) -> bool:
        return self.is_visible(self.PAYMENT_CONFIRMATION)

    def get_error_message(self) -> Optional[str]:
        error = self.locate(self.ERROR)
        if ui.is_visible(error):
            return ui.text_of(error) or None
        return None

    def decline_message(self) -> Locator:
        return self.page.get_by_text(DECLINE_PATTERN).first

    def get_decline_message(self, timeout: int = 15000) -> Optional[str]:
        """Text of the card-declined notice, or None if it never shows"""
        message = self.decline_message()
        if ui.is_visible(message, timeout=timeout):
            return ui.text_of(message).strip() or None
        return None
