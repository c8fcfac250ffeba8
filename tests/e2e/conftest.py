"""
Browser fixtures for the staging journeys.

pytest-playwright supplies browser, context and page; this module points them
at staging, applies the suite's context options and timeouts, and records
evidence when a journey fails.
"""

import os

import pytest

from ezra_e2e.config import Config
from ezra_e2e.diagnostic import ForensicMonitor, OperationTracker
from ezra_e2e.logging import get_logger, setup_logging
from ezra_e2e.page_flow import PageFlowDetector
from ezra_e2e.pages import (
    ConfirmationPage,
    DashboardPage,
    LoginPage,
    RegistrationPage,
    ReserveAppointmentPage,
    ScheduleScanPage,
    SelectScanPage,
)
from ezra_e2e.preflight import check_staging_reachable

logger = get_logger("Session")


# ==================== Collection ====================

def pytest_collection_modifyitems(config, items):
    if Config.RUN_E2E:
        return
    skip_e2e = pytest.mark.skip(reason="staging journeys run only with RUN_E2E=1")
    for item in items:
        if item.get_closest_marker("e2e"):
            item.add_marker(skip_e2e)


@pytest.hookimpl(hookwrapper=True, tryfirst=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


# ==================== Session ====================

@pytest.fixture(scope="session", autouse=True)
def staging_session():
    """Validate config, set up file logging and check staging once per run"""
    Config.validate(required=["BASE_URL"])
    setup_logging(Config.LOG_LEVEL, Config.LOG_FILE)
    logger.info(f"[SESSION] Target: {Config.BASE_URL} ({Config.TIMEZONE})")

    if Config.PREFLIGHT_ENABLED:
        reachable, reason = check_staging_reachable(Config.BASE_URL, Config.PREFLIGHT_TIMEOUT)
        if not reachable:
            pytest.skip(f"Staging unreachable: {reason}")
    yield


@pytest.fixture(scope="session")
def base_url():
    return Config.BASE_URL


@pytest.fixture(scope="session")
def browser_context_args(browser_context_args):
    return {**browser_context_args, **Config.context_options()}


@pytest.fixture(scope="session")
def browser_type_launch_args(browser_type_launch_args):
    args = dict(browser_type_launch_args)
    if not Config.HEADLESS:
        args["headless"] = False
    if Config.SLOW_MO and not args.get("slow_mo"):
        args["slow_mo"] = Config.SLOW_MO
    return args


@pytest.fixture(scope="session")
def forensic_monitor():
    return ForensicMonitor(base_dir=Config.EVIDENCE_DIR)


# ==================== Per test ====================

@pytest.fixture(autouse=True)
def configured_page(request, page, forensic_monitor):
    """Apply timeouts; on failure capture evidence and optionally pause"""
    page.set_default_timeout(Config.DEFAULT_TIMEOUT)
    page.set_default_navigation_timeout(Config.NAVIGATION_TIMEOUT)
    yield page

    report = getattr(request.node, "rep_call", None)
    if report is None or not report.failed:
        return

    forensic_monitor.failure_capture(page, request.node.nodeid)
    if Config.PAUSE_ON_FAILURE and not page.is_closed():
        logger.warning("[SESSION] TEST FAILED - browser paused for debugging")
        page.pause()


@pytest.fixture
def credentials():
    """Existing staging account; journeys that log in skip without one"""
    email = os.getenv("TEST_USER_EMAIL")
    password = os.getenv("TEST_USER_PASSWORD")
    if not email or not password:
        pytest.skip("TEST_USER_EMAIL and TEST_USER_PASSWORD are required for login journeys")
    return email, password


@pytest.fixture
def signed_in(login_page, credentials):
    """Log in with the configured account and land past the timezone modal"""
    email, password = credentials
    login_page.goto()
    login_page.login(email, password)

    if PageFlowDetector.is_auth_url(login_page.url):
        error = login_page.get_error_message()
        if error:
            pytest.fail(f'Login failed: "{error}". Please check test credentials.')

    login_page.wait_for_login_success()
    return email


@pytest.fixture(scope="session")
def journey_log():
    """One tracker for the whole run; its pass rate is logged at teardown"""
    journeys = OperationTracker()
    yield journeys
    journeys.log_summary()


@pytest.fixture
def tracker(request, journey_log):
    yield journey_log
    if journey_log.current_operation:
        report = getattr(request.node, "rep_call", None)
        journey_log.end(success=bool(report and report.passed))


@pytest.fixture
def registration_page(page):
    return RegistrationPage(page)


@pytest.fixture
def login_page(page):
    return LoginPage(page)


@pytest.fixture
def dashboard_page(page):
    return DashboardPage(page)


@pytest.fixture
def select_scan_page(page):
    return SelectScanPage(page)


@pytest.fixture
def schedule_scan_page(page):
    return ScheduleScanPage(page)


@pytest.fixture
def reserve_appointment_page(page):
    return ReserveAppointmentPage(page)


@pytest.fixture
def confirmation_page(page):
    return ConfirmationPage(page)
