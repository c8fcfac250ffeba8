import pytest
from playwright.sync_api import Error as PlaywrightError

from ezra_e2e import ui


def test_is_visible_without_timeout_checks_current_state(make_locator):
    locator = make_locator(visible=True)
    assert ui.is_visible(locator)
    locator.wait_for.assert_not_called()


def test_is_visible_with_timeout_waits(make_locator):
    locator = make_locator(visible=True)
    assert ui.is_visible(locator, timeout=500)
    locator.wait_for.assert_called_once_with(state="visible", timeout=500)


def test_is_visible_swallows_timeout(make_locator):
    assert not ui.is_visible(make_locator(visible=False), timeout=500)


def test_is_visible_swallows_errors(make_locator):
    locator = make_locator(visible=True)
    locator.is_visible.side_effect = PlaywrightError("Target closed")
    assert not ui.is_visible(locator)


def test_text_of_returns_empty_on_failure(make_locator):
    locator = make_locator(visible=True)
    locator.text_content.side_effect = PlaywrightError("detached")
    assert ui.text_of(locator) == ""


def test_text_of_handles_none(make_locator):
    locator = make_locator(visible=True)
    locator.text_content.return_value = None
    assert ui.text_of(locator) == ""


def test_settle_skips_closed_page(make_page):
    page = make_page(closed=True)
    ui.settle(page, 500)
    page.wait_for_timeout.assert_not_called()


def test_settle_waits_on_open_page(make_page):
    page = make_page()
    ui.settle(page, 500)
    page.wait_for_timeout.assert_called_once_with(500)


@pytest.mark.parametrize(
    "label, expected",
    [
        ("Sign out", True),
        ("  SIGN OUT  ", True),
        ("Log out", True),
        ("Logout", True),
        ("Confirm", False),
        ("", False),
        (None, False),
    ],
)
def test_is_sign_out_label(label, expected):
    assert ui.is_sign_out_label(label) is expected


def test_is_confirm_label():
    assert ui.is_confirm_label(" Confirm ")
    assert not ui.is_confirm_label("Close")


OUTER = {"x": 100, "y": 100, "width": 400, "height": 300}


@pytest.mark.parametrize(
    "inner, expected",
    [
        ({"x": 150, "y": 150, "width": 100, "height": 40}, True),
        ({"x": 100, "y": 100, "width": 400, "height": 300}, True),
        ({"x": 450, "y": 150, "width": 100, "height": 40}, False),
        ({"x": 150, "y": 380, "width": 100, "height": 40}, False),
        ({"x": 50, "y": 150, "width": 100, "height": 40}, False),
        (None, True),
    ],
)
def test_box_within(inner, expected):
    assert ui.box_within(inner, OUTER) is expected


def test_box_within_missing_outer():
    assert ui.box_within({"x": 0, "y": 0, "width": 1, "height": 1}, None)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Total $2,495", "$2,495"),
        ("Due today: $1,999.00", "$1,999"),
        ("  Free  ", "Free"),
        ("", None),
        (None, None),
        ("   ", None),
    ],
)
def test_extract_price(text, expected):
    assert ui.extract_price(text) == expected


def test_digits():
    assert ui.digits("4242 4242 4242 4242") == "4242424242424242"
    assert ui.digits(None) == ""


def test_calendar_day_pattern():
    assert ui.CALENDAR_DAY_PATTERN.match("W 26")
    assert ui.CALENDAR_DAY_PATTERN.match("T 5")
    assert not ui.CALENDAR_DAY_PATTERN.match("November 2025")
