"""
Ezra E2E - Dashboard Page
Member landing page: menu items, Book a scan, questionnaire entry, sign out.
"""

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator, Page

from .. import ui
from ..config import Config
from ..cookie_handler import accept_cookies
from ..page_flow import QUESTIONNAIRE_URL, SELECT_SCAN_URL, PageFlowDetector
from ..timezone_handler import handle_timezone_popup
from .base import BasePage

MENU_ITEMS = ("Home", "Reports", "Invoices", "Account")


class DashboardPage(BasePage):
    PATH = "/"

    SIGN_OUT = 'button:has-text("Sign out")'

    def __init__(self, page: Page):
        super().__init__(page)
        self.flow = PageFlowDetector(Config.BASE_URL)

    @property
    def book_scan_button(self) -> Locator:
        return self.page.get_by_role("button", name="Book a scan")

    @property
    def start_questionnaire_button(self) -> Locator:
        return self.page.get_by_role("button", name="Start").first

    def goto(self) -> None:
        self.open()
        accept_cookies(self.page)
        if not self.page.is_closed():
            handle_timezone_popup(self.page, "confirm")
        ui.wait_for_network_idle(self.page, timeout=10000)
        self.settle(2000)

    def is_on_dashboard(self) -> bool:
        return self.flow.is_dashboard_url(self.page.url)

    # ==================== Menu ====================

    def menu_item(self, name: str) -> Locator:
        """
        Resolve a sidebar menu entry

        ``text=`` first, then an anchor with that text, then get_by_text as
        the last resort (returned even if not yet visible).
        """
        item = self.first_visible((f"text={name}", f'a:has-text("{name}")'), timeout=2000)
        if item is not None:
            return item
        return self.page.get_by_text(name).first

    def verify_menu_visible(self, name: str) -> bool:
        item = self.menu_item(name)
        item.wait_for(state="visible", timeout=15000)
        return item.is_visible()

    def verify_home_menu_visible(self) -> bool:
        return self.verify_menu_visible("Home")

    def verify_reports_menu_visible(self) -> bool:
        return self.verify_menu_visible("Reports")

    def verify_invoices_menu_visible(self) -> bool:
        return self.verify_menu_visible("Invoices")

    def verify_account_menu_visible(self) -> bool:
        return self.verify_menu_visible("Account")

    def verify_all_menu_items_visible(self) -> bool:
        results = [self.verify_menu_visible(name) for name in MENU_ITEMS]
        return all(results)

    def click_menu(self, name: str) -> None:
        item = self.menu_item(name)
        item.wait_for(state="visible", timeout=15000)
        item.scroll_into_view_if_needed()
        item.click()
        ui.wait_for_dom(self.page)

    def click_home(self) -> None:
        self.click_menu("Home")

    def click_reports(self) -> None:
        self.click_menu("Reports")

    def click_invoices(self) -> None:
        self.click_menu("Invoices")

    def click_account(self) -> None:
        self.click_menu("Account")

    # ==================== Actions ====================

    def click_book_scan(self) -> None:
        """Book a scan, then wait for the scan selection page"""
        button = self.book_scan_button
        button.wait_for(state="visible", timeout=10000)
        button.scroll_into_view_if_needed()

        self.logger.info('[DASHBOARD] Clicking "Book a scan"...')
        button.click()
        try:
            self.page.wait_for_url(SELECT_SCAN_URL, timeout=15000)
        except PlaywrightError as e:
            self.logger.debug(f"[DASHBOARD] Select scan URL not reached: {e}")

        ui.wait_for_dom(self.page)
        if not self.page.is_closed():
            handle_timezone_popup(self.page, "confirm")
        self.settle(1000)

    def click_start_questionnaire(self) -> None:
        button = self.start_questionnaire_button
        button.wait_for(state="visible", timeout=10000)
        button.scroll_into_view_if_needed()

        self.logger.info('[DASHBOARD] Clicking "Start" to begin questionnaire...')
        button.click()
        try:
            self.page.wait_for_url(QUESTIONNAIRE_URL, timeout=15000)
        except PlaywrightError as e:
            self.logger.debug(f"[DASHBOARD] Questionnaire URL not reached: {e}")

        ui.wait_for_dom(self.page)
        self.settle(1000)

    def verify_book_scan_button_visible(self) -> bool:
        return ui.is_visible(self.book_scan_button, timeout=10000)

    def sign_out(self) -> None:
        button = self.locate(self.SIGN_OUT)
        button.wait_for(state="visible", timeout=10000)
        button.scroll_into_view_if_needed()
        button.click()
        ui.wait_for_dom(self.page)
