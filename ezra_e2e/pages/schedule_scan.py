"""
Ezra E2E - Schedule Scan Page
State, imaging center, calendar day and time slot selection.

The calendar renders day buttons labelled like "W 26"; which days have slots
changes daily on staging, so day selection tries a list of historically
good labels before scanning the calendar.
"""

from typing import List, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator

from .. import ui
from ..cookie_handler import accept_cookies
from ..exceptions import ElementNotFoundError
from ..page_flow import PAYMENT_URL, PageFlowDetector
from ..test_data import BookingRequest
from .base import BasePage

KNOWN_GOOD_DATES: List[str] = ["W 26", "T 20", "W 19", "T 21", "F 28", "M 24", "T 25"]

SCAN_START_CAP = 5
SCAN_WINDOW = 15


def preferred_slot_label(appointment_time: str) -> str:
    """
    Staging offers half-hour slots, so an on-the-hour request maps to :30

    >>> preferred_slot_label("10:00 AM")
    '10:30 AM'
    """
    return appointment_time.replace(":00", ":30")


def calendar_scan_range(button_count: int) -> range:
    """
    Day-button indices to try when no known-good label worked

    The first days of the month are usually in the past, so scanning starts
    a third of the way in (at most 5) and tries up to 15 buttons.
    """
    start = min(SCAN_START_CAP, button_count // 3)
    return range(start, min(button_count, start + SCAN_WINDOW))


class ScheduleScanPage(BasePage):
    PATH = "/schedule"

    CONTINUE = '[data-test="submit"]'
    STATE_DROPDOWN = '[role="combobox"]'
    CENTER_LOADED = "text=/View on map/i"
    ADDRESS_OPTIONS = "text=/Recommended|AMRIC|mi/i"
    TIME_SLOTS = "text=/\\d+:\\d+\\s*(AM|PM)/i"

    @property
    def day_buttons(self) -> Locator:
        return self.page.get_by_role("button", name=ui.CALENDAR_DAY_PATTERN)

    @property
    def continue_button(self) -> Locator:
        return self.page.locator(self.CONTINUE).filter(has_text="Continue").first

    def goto(self) -> None:
        if PageFlowDetector.is_schedule_url(self.page.url):
            return
        self.logger.info("[SCHEDULE] Navigating to Schedule Scan page...")
        self.open()
        accept_cookies(self.page)

    def select_state(self, state: str) -> None:
        self.logger.info(f"[SCHEDULE] Selecting state: {state}")
        self.page.locator(self.STATE_DROPDOWN).first.click()

        option = self.page.get_by_role("option", name=state)
        option.wait_for(state="visible", timeout=10000)
        option.click()

        # Centers render with a "View on map" link once the state's list loads
        self.page.locator(self.CENTER_LOADED).first.wait_for(state="visible", timeout=20000)
        self.logger.info("[SCHEDULE] State selected and centers loaded")

    def select_center(self, center_name: str) -> None:
        """
        Pick an imaging center by (partial) name

        Raises:
            ElementNotFoundError: if the center is not listed for the chosen state
        """
        self.logger.info(f"[SCHEDULE] Selecting center: {center_name}")

        if ui.is_visible(self.day_buttons.first, timeout=10000):
            self.logger.info("[SCHEDULE] Calendar already visible - center already selected, skipping click")
            return

        center = self.page.get_by_text(center_name, exact=False).first
        if not ui.is_visible(center, timeout=5000):
            raise ElementNotFoundError(
                f'Center "{center_name}" not found. Make sure you\'ve selected the correct state that contains this center.'
            )

        center.scroll_into_view_if_needed()
        card = center.locator("..").locator("..")
        card.wait_for(state="visible", timeout=5000)
        self.settle(500)
        card.click(timeout=5000)
        ui.wait_for_network_idle(self.page, timeout=10000)

        address = self.page.locator(self.ADDRESS_OPTIONS).first
        if ui.is_visible(address, timeout=3000):
            self.logger.info("[SCHEDULE] Address options found, selecting first available address...")
            address.click(timeout=5000)
            self.settle(1000)

        self.day_buttons.first.wait_for(state="visible", timeout=15000)
        self.logger.info("[SCHEDULE] Center selected and calendar is ready")

    def fill_additional_info(self, text: str) -> bool:
        textarea = self.page.locator("textarea").first
        if ui.is_visible(textarea, timeout=3000):
            textarea.fill(text)
            self.logger.info("[SCHEDULE] Additional info entered")
            return True
        return False

    def _time_slots_visible(self) -> bool:
        return ui.is_visible(self.page.locator(self.TIME_SLOTS).first, timeout=5000)

    def _try_day(self, button: Locator, label: str) -> bool:
        try:
            button.click()
            self.settle(1000)
        except PlaywrightError as e:
            self.logger.debug(f"[SCHEDULE] Date {label} not clickable: {e}")
            return False

        if self._time_slots_visible():
            self.logger.info(f"[SCHEDULE] Date selected: {label} (time slots visible)")
            return True

        self.logger.info(f"[SCHEDULE] Date {label} - no time slots")
        return False

    def select_available_date(self) -> str:
        """
        Click a calendar day that shows time slots

        Returns:
            The day label that was selected

        Raises:
            ElementNotFoundError: if no tried day offers slots
        """
        self.logger.info("[SCHEDULE] Selecting first available date...")

        for label in KNOWN_GOOD_DATES:
            button = self.page.get_by_role("button", name=label)
            if not ui.is_visible(button, timeout=2000):
                continue
            self.logger.info(f"[SCHEDULE] Trying known good date: {label}")
            if self._try_day(button, label):
                return label

        self.logger.info("[SCHEDULE] Known dates not available, scanning calendar...")
        buttons = self.day_buttons
        total = ui.count_of(buttons)
        window = calendar_scan_range(total)
        self.logger.info(f"[SCHEDULE] Found {total} date buttons, starting from index {window.start}")

        for i in window:
            button = buttons.nth(i)
            label = ui.text_of(button).strip() or f"#{i}"
            if self._try_day(button, label):
                return label

        raise ElementNotFoundError("Could not select any available date with time slots")

    def select_time_slot(self, appointment_time: str) -> str:
        """
        Click the preferred slot, or the first one offered

        Returns:
            Text of the slot that was clicked
        """
        target = preferred_slot_label(appointment_time)
        self.logger.info(f"[SCHEDULE] Looking for time slot: {target}")

        slots = self.page.locator(self.TIME_SLOTS)
        total = ui.count_of(slots)
        self.logger.info(f"[SCHEDULE] Found {total} time slots")
        if total == 0:
            raise ElementNotFoundError("No time slots found")

        slot = slots.filter(has_text=target).first
        if not ui.is_visible(slot, timeout=2000):
            self.logger.info(f"[SCHEDULE] Preferred time {target} not found, using first available slot")
            slot = slots.first

        # The slot text sits inside the clickable container
        slot.locator("..").click()
        selected = ui.text_of(slot).strip()
        self.logger.info(f"[SCHEDULE] Time slot clicked: {selected}")
        return selected

    def schedule_appointment(self, booking: BookingRequest) -> Optional[str]:
        """
        Pick state, center, day and slot, then continue to payment

        Args:
            booking: Where and when to book

        Returns:
            The selected slot text

        Raises:
            ElementNotFoundError: if no center, day or slot is available
            RuntimeError: if Continue never becomes enabled
        """
        self.select_state(booking.state)
        self.select_center(booking.center_name)
        self.fill_additional_info(booking.additional_info)

        self.select_available_date()
        selected = self.select_time_slot(booking.appointment_time)

        button = self.continue_button
        button.wait_for(state="visible", timeout=10000)
        if not self.wait_until_enabled(button, attempts=20, interval_ms=500):
            raise RuntimeError("Continue button did not become enabled after selecting a time slot")
        self.logger.info("[SCHEDULE] Continue button enabled, clicking...")

        button.click()
        self.page.wait_for_url(PAYMENT_URL, timeout=15000)
        self.logger.info("[SCHEDULE] Navigated to payment page")
        return selected

    def click_continue(self) -> None:
        button = self.locate(self.CONTINUE)
        button.wait_for(state="visible", timeout=10000)
        if not self.wait_until_enabled(button, attempts=20, interval_ms=500):
            raise RuntimeError("Continue button is disabled")

        button.click()
        try:
            self.page.wait_for_url(PAYMENT_URL, timeout=15000)
        except PlaywrightError as e:
            self.logger.debug(f"[SCHEDULE] Payment URL not reached: {e}")
        ui.wait_for_dom(self.page)

    def is_continue_button_enabled(self) -> bool:
        return ui.is_enabled(self.locate(self.CONTINUE))
