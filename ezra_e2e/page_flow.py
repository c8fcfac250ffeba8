"""
Ezra E2E - Page Flow Detection
Classifies staging URLs into the booking funnel's page types.
"""

import re
from enum import Enum
from typing import Optional
from urllib.parse import urlparse


class PageType(Enum):
    LOGIN = "login"
    REGISTRATION = "registration"
    DASHBOARD = "dashboard"
    SELECT_SCAN = "select_scan"
    SCHEDULE = "schedule"
    PAYMENT = "payment"
    CONFIRMATION = "confirmation"
    QUESTIONNAIRE = "questionnaire"
    UNKNOWN = "unknown"


AUTH_MARKERS = ("/login", "/sign-in", "/signin")
REGISTRATION_MARKERS = ("/register", "/join")
PAYMENT_MARKERS = ("/reserve", "reserve-appointment", "payment")
POST_LOGIN_MARKERS = ("/dashboard", "/home", "/select-scan")

# Patterns passed to page.wait_for_url
POST_LOGIN_URL = re.compile(r"dashboard|home|profile|select-scan|select.*scan", re.IGNORECASE)
SELECT_SCAN_URL = re.compile(r"select-plan|select-scan|select.*plan|select.*scan", re.IGNORECASE)
SCHEDULE_URL = re.compile(r"schedule|schedule-scan", re.IGNORECASE)
PAYMENT_URL = re.compile(r"reserve|payment|appointment", re.IGNORECASE)
QUESTIONNAIRE_URL = re.compile(r"questionnaire|assessment|intake", re.IGNORECASE)


class PageFlowDetector:
    """
    URL-based page type detection for the booking funnel

    All predicates are plain string checks so they can run without a browser.
    """

    def __init__(self, base_url: Optional[str] = None):
        self.base_url = base_url.rstrip("/") if base_url else None

    @staticmethod
    def is_auth_url(url: str) -> bool:
        return any(marker in url for marker in AUTH_MARKERS)

    @staticmethod
    def is_registration_url(url: str) -> bool:
        return PageFlowDetector.is_auth_url(url) or any(marker in url for marker in REGISTRATION_MARKERS)

    def is_dashboard_url(self, url: str) -> bool:
        """Dashboard is either an explicit path or the bare staging root"""
        if "/dashboard" in url or "/home" in url:
            return True
        if self.base_url:
            return url.rstrip("/") == self.base_url
        path = urlparse(url).path
        return path in ("", "/")

    @staticmethod
    def is_post_login_url(url: str) -> bool:
        return any(marker in url for marker in POST_LOGIN_MARKERS)

    @staticmethod
    def is_select_scan_url(url: str) -> bool:
        return "select-scan" in url or "select-plan" in url

    @staticmethod
    def is_schedule_url(url: str) -> bool:
        return "/schedule" in url

    @staticmethod
    def is_payment_url(url: str) -> bool:
        return any(marker in url for marker in PAYMENT_MARKERS)

    @staticmethod
    def is_confirmation_url(url: str) -> bool:
        return "scan-confirm" in url or "/confirmation" in url

    @staticmethod
    def is_questionnaire_url(url: str) -> bool:
        return "questionnaire" in url

    def detect(self, url: str) -> PageType:
        """
        Classify a URL

        Order matters: the payment page path contains "appointment", the
        confirmation page lives under /sign-up, so the more specific checks
        run first.
        """
        if self.is_confirmation_url(url):
            return PageType.CONFIRMATION
        if self.is_questionnaire_url(url):
            return PageType.QUESTIONNAIRE
        if self.is_payment_url(url):
            return PageType.PAYMENT
        if self.is_schedule_url(url):
            return PageType.SCHEDULE
        if self.is_select_scan_url(url):
            return PageType.SELECT_SCAN
        if self.is_auth_url(url):
            return PageType.LOGIN
        if any(marker in url for marker in REGISTRATION_MARKERS):
            return PageType.REGISTRATION
        if self.is_dashboard_url(url):
            return PageType.DASHBOARD
        return PageType.UNKNOWN
