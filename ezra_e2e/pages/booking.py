"""
Ezra E2E - Booking Page
Generic session booking screen under /bookings.
"""

from typing import Optional

from playwright.sync_api import Error as PlaywrightError

from .. import ui
from ..test_data import BookingData
from .base import BasePage

UNAVAILABLE_CLASSES = ("unavailable", "booked")


def is_unavailable_class(class_name: Optional[str]) -> bool:
    return any(marker in (class_name or "") for marker in UNAVAILABLE_CLASSES)


class BookingPage(BasePage):
    PATH = "/bookings"

    BOOK = 'button:has-text("Book"), a:has-text("Book Session")'
    DATE_PICKER = 'input[type="date"], .date-picker, [data-testid="date-picker"]'
    SERVICE_TYPE = 'select[name="service"], [data-testid="service-type"]'
    COACH = 'select[name="coach"], [data-testid="coach-select"]'
    CONFIRM = 'button:has-text("Confirm"), button:has-text("Book Now")'
    CANCEL = 'button:has-text("Cancel")'
    CANCEL_CONFIRM = 'button:has-text("Confirm"), button:has-text("Yes")'
    CONFIRMATION = '.booking-confirmation, [data-testid="booking-confirmation"]'
    BOOKING_ID = '[data-testid="booking-id"], .booking-id'
    ERROR = '.error, .alert-error, [role="alert"]'
    VALIDATION = ".validation-error, .field-error"

    def goto(self) -> None:
        self.open()
        ui.wait_for_network_idle(self.page)

    def click_book_session(self) -> None:
        self.locate(self.BOOK).click()
        ui.wait_for_network_idle(self.page)

    def select_date(self, date: str) -> None:
        """``date`` as YYYY-MM-DD"""
        self.locate(self.DATE_PICKER).fill(date)

    def select_time_slot(self, time_label: str) -> None:
        self.page.locator(f'text="{time_label}"').first.click()

    def select_service_type(self, service: str) -> bool:
        select = self.page.locator(self.SERVICE_TYPE)
        if ui.count_of(select) == 0:
            return False
        select.first.select_option(service)
        return True

    def select_coach(self, coach: str) -> bool:
        select = self.page.locator(self.COACH)
        if ui.count_of(select) == 0:
            return False
        select.first.select_option(coach)
        return True

    def confirm_booking(self) -> None:
        self.locate(self.CONFIRM).click()
        ui.wait_for_network_idle(self.page)

    def create_booking(self, booking: BookingData) -> None:
        self.logger.info(f"[BOOKING] Booking {booking.date} {booking.time}")
        self.click_book_session()
        self.select_date(booking.date)
        self.select_time_slot(booking.time)
        if booking.service:
            self.select_service_type(booking.service)
        if booking.coach:
            self.select_coach(booking.coach)
        self.confirm_booking()

    def get_booking_id(self) -> Optional[str]:
        locator = self.locate(self.BOOKING_ID)
        if ui.is_visible(locator):
            return ui.text_of(locator) or None
        return None

    def is_booking_confirmed(self) -> bool:
        return self.is_visible(self.CONFIRMATION)

    def get_validation_message(self) -> Optional[str]:
        locator = self.locate(self.VALIDATION)
        if ui.is_visible(locator):
            return ui.text_of(locator) or None
        return None

    def cancel_booking(self, booking_id: Optional[str] = None) -> None:
        if booking_id:
            self.page.goto(f"{self.PATH}/{booking_id}")
        self.locate(self.CANCEL).click()

        # Optional confirmation dialog
        try:
            self.page.locator(self.CANCEL_CONFIRM).first.click(timeout=3000)
        except PlaywrightError:
            self.logger.debug("[BOOKING] No cancel confirmation dialog")

    def is_date_disabled(self, date: str) -> bool:
        try:
            return self.page.locator(f'input[value="{date}"]').is_disabled()
        except PlaywrightError:
            return False

    def is_time_slot_available(self, time_label: str) -> bool:
        slot = self.page.locator(f'text="{time_label}"')
        if not ui.is_visible(slot):
            return False
        try:
            class_name = slot.locator("..").get_attribute("class")
        except PlaywrightError:
            return True
        return not is_unavailable_class(class_name)
