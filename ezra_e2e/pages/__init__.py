"""Page objects for the Ezra member booking funnel."""

from .base import BasePage
from .booking import BookingPage
from .confirmation import ConfirmationPage
from .dashboard import DashboardPage
from .login import LoginPage
from .registration import RegistrationPage
from .reserve_appointment import ReserveAppointmentPage
from .schedule_scan import ScheduleScanPage
from .select_scan import SelectScanPage

__all__ = [
    "BasePage",
    "BookingPage",
    "ConfirmationPage",
    "DashboardPage",
    "LoginPage",
    "RegistrationPage",
    "ReserveAppointmentPage",
    "ScheduleScanPage",
    "SelectScanPage",
]
