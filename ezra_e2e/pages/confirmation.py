"""
Ezra E2E - Confirmation Page
Shown after a successful payment.
"""

from typing import Optional

from .. import ui
from ..cookie_handler import accept_cookies
from .base import BasePage


class ConfirmationPage(BasePage):
    PATH = "/sign-up/scan-confirm"

    HEADING = 'h1:has-text("received"), h2:has-text("received")'
    MESSAGE = "text=/questionnaire|medical|appointment/"
    BEGIN_QUESTIONNAIRE = 'button:has-text("Begin Medical Questionnaire"), button:has-text("Questionnaire")'
    GO_TO_DASHBOARD = 'button:has-text("Go to Dashboard"), a:has-text("Dashboard")'
    SERVICE_TITLE = "text=/MRI Scan|CT Scan/"
    LOCATION_NAME = '.location-name, [data-testid="location-name"]'
    LOCATION_ADDRESS = '.location-address, [data-testid="location-address"]'

    def goto(self) -> None:
        self.open()
        accept_cookies(self.page)
        ui.is_visible(self.locate(self.HEADING), timeout=10000)

    def is_confirmation_displayed(self, timeout: int = 0) -> bool:
        return self.is_visible(self.HEADING, timeout=timeout)

    def get_confirmation_message(self) -> Optional[str]:
        return self.text_of(self.MESSAGE) or None

    def click_begin_questionnaire(self) -> None:
        self.locate(self.BEGIN_QUESTIONNAIRE).click()
        ui.wait_for_network_idle(self.page)

    def is_begin_questionnaire_visible(self, timeout: int = 0) -> bool:
        return self.is_visible(self.BEGIN_QUESTIONNAIRE, timeout=timeout)

    def click_go_to_dashboard(self) -> None:
        self.locate(self.GO_TO_DASHBOARD).click()
        ui.wait_for_network_idle(self.page)

    def _visible_text(self, selector: str) -> Optional[str]:
        locator = self.locate(selector)
        if ui.is_visible(locator):
            return ui.text_of(locator) or None
        return None

    def get_service_title(self) -> Optional[str]:
        return self._visible_text(self.SERVICE_TITLE)

    def get_location_name(self) -> Optional[str]:
        return self._visible_text(self.LOCATION_NAME)

    def get_location_address(self) -> Optional[str]:
        return self._visible_text(self.LOCATION_ADDRESS)

    def verify_appointment_details(self, expected_service: str, expected_location: str) -> bool:
        """Both the service title and location name contain the expected text"""
        service = self.get_service_title() or ""
        location = self.get_location_name() or ""
        return expected_service in service and expected_location in location
