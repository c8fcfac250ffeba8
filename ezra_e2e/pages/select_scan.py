"""
Ezra E2E - Select Scan Page
Scan plan cards, the intake prerequisites and the Continue/Cancel buttons.
"""

import re
from typing import Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator

from .. import ui
from ..cookie_handler import accept_cookies
from ..page_flow import SCHEDULE_URL, PageFlowDetector
from ..test_data import ScanType
from .base import BasePage
from .dashboard import DashboardPage


class SelectScanPage(BasePage):
    PATH = "/select-scan"

    CONTINUE = '[data-test="submit"]'
    CANCEL = 'button:has-text("Cancel")'
    WHATS_INCLUDED_POPUP = '.modal, .popup, [role="dialog"]'
    POPUP_CLOSE = 'button:has-text("×"), button[aria-label="Close"]'

    HEADING = "Review your Scan."

    def _wait_for_heading(self) -> None:
        self.page.get_by_role("heading", name=self.HEADING).wait_for(state="visible", timeout=15000)

    def goto(self) -> None:
        """Stay if already here, go through Book a scan from the dashboard, else navigate directly"""
        if PageFlowDetector.is_select_scan_url(self.page.url):
            ui.wait_for_dom(self.page)
            accept_cookies(self.page)
            self._wait_for_heading()
            return

        dashboard = DashboardPage(self.page)
        if dashboard.is_on_dashboard():
            self.logger.info('[SCAN] On dashboard, clicking "Book a scan"...')
            dashboard.click_book_scan()
            ui.wait_for_dom(self.page)
            self.settle(1000)
            accept_cookies(self.page)
            self._wait_for_heading()
            return

        self.logger.info("[SCAN] Navigating directly to select-scan page...")
        self.open()
        accept_cookies(self.page)
        self._wait_for_heading()

    def scan_card(self, scan_type: ScanType) -> Locator:
        """Clickable card that holds the plan's exact heading text"""
        return self.page.get_by_text(scan_type.card_title, exact=True).locator("..").locator("..").first

    def select_scan_plan(self, scan_type: ScanType) -> None:
        scan_type = ScanType(scan_type)
        card = self.scan_card(scan_type)

        self.logger.info(f"[SCAN] Selecting scan plan: {scan_type.value}")
        card.wait_for(state="visible", timeout=15000)
        card.scroll_into_view_if_needed()
        card.click(timeout=5000)
        self.logger.info(f"[SCAN] {scan_type.value} selected")

    def _sex_dropdown(self) -> Optional[Locator]:
        by_name = self.page.get_by_role("combobox", name=re.compile("sex at birth", re.IGNORECASE)).first
        if ui.is_visible(by_name, timeout=2000):
            return by_name

        by_placeholder = self.page.get_by_role("combobox").filter(has_text=re.compile("Select", re.IGNORECASE)).first
        if ui.is_visible(by_placeholder, timeout=2000):
            return by_placeholder

        label = self.page.get_by_text(re.compile(r"What was your sex at birth\?", re.IGNORECASE)).first
        sibling = label.locator("xpath=following-sibling::*").locator('[role="combobox"], select, button').first
        if ui.is_visible(sibling, timeout=2000):
            return sibling
        return None

    def complete_intake_if_present(self, dob: str = "01-01-1990", sex: str = "Female") -> bool:
        """
        Fill the date of birth and sex at birth prerequisites when the plan asks for them

        Returns:
            True if any prerequisite was filled
        """
        filled = False

        dob_field = self.page.get_by_role("textbox", name=re.compile("date of birth", re.IGNORECASE)).first
        if ui.is_visible(dob_field, timeout=2000):
            self.logger.info("[SCAN] Filling Date of Birth prerequisite...")
            dob_field.fill(dob)
            dob_field.blur()
            filled = True

        dropdown = self._sex_dropdown()
        if dropdown is not None:
            self.logger.info("[SCAN] Selecting Sex at Birth prerequisite...")
            dropdown.click()
            self.settle(200)

            option = self.page.get_by_role("option", name=re.compile(re.escape(sex), re.IGNORECASE)).first
            if ui.is_visible(option, timeout=2000):
                option.click()
            else:
                options = self.page.get_by_role("option")
                if ui.count_of(options):
                    options.first.click()
            filled = True

        return filled

    def click_cancel(self) -> None:
        button = self.locate(self.CANCEL)
        button.wait_for(state="visible", timeout=10000)
        self.logger.info("[SCAN] Clicking Cancel...")
        button.click()
        ui.wait_for_dom(self.page)

    def close_whats_included_popup(self) -> bool:
        if not self.is_visible(self.WHATS_INCLUDED_POPUP):
            return False
        close = self.locate(self.POPUP_CLOSE)
        if not ui.is_visible(close, timeout=1000):
            return False
        close.click()
        return True

    def click_continue(self) -> None:
        """Continue to scheduling and wait for its heading"""
        button = self.locate(self.CONTINUE)
        button.wait_for(state="visible", timeout=10000)

        self.logger.info("[SCAN] Clicking Continue to move to Schedule Scan page...")
        button.click()
        ui.wait_for_dom(self.page)

        try:
            self.page.wait_for_url(SCHEDULE_URL, timeout=15000)
        except PlaywrightError as e:
            self.logger.debug(f"[SCAN] Schedule URL not reached: {e}")

        self.page.get_by_role("heading", name=re.compile("Schedule your scan", re.IGNORECASE)).wait_for(timeout=10000)
        self.logger.info("[SCAN] Schedule Scan page loaded successfully")
