from unittest.mock import MagicMock

import pytest
from playwright.sync_api import Error as PlaywrightError

from ezra_e2e.exceptions import ElementNotFoundError, PageClosedError, PaymentFieldError
from ezra_e2e.pages.reserve_appointment import (
    DECLINE_PATTERN,
    ReserveAppointmentPage,
    check_field_value,
)

PAYMENT_URL = "https://myezra-staging.ezra.com/reserve-appointment"
CARD = "4242 4242 4242 4242"


@pytest.fixture
def payment_page(make_page):
    return make_page(url=PAYMENT_URL)


def test_check_field_value_ignores_formatting():
    assert check_field_value("Card number", "4242 4242 4242 4242", 15) == "4242 4242 4242 4242"
    assert check_field_value("Expiry", "12 / 34", 4, ignore=r"[\s/]") == "12 / 34"


def test_check_field_value_too_short():
    with pytest.raises(PaymentFieldError) as excinfo:
        check_field_value("CVV", "33", 3)
    assert excinfo.value.field == "CVV"
    assert excinfo.value.value == "33"
    assert "expected at least 3" in str(excinfo.value)


def test_check_field_value_empty():
    with pytest.raises(PaymentFieldError):
        check_field_value("ZIP code", None, 5)


@pytest.mark.parametrize(
    "text",
    ["Your card was declined.", "This card has been declined", "YOUR CARD WAS DECLINED"],
)
def test_decline_pattern_matches(text):
    assert DECLINE_PATTERN.search(text)


def test_decline_pattern_ignores_other_errors():
    assert not DECLINE_PATTERN.search("Your card number is incomplete.")


def test_unknown_payment_method(payment_page):
    with pytest.raises(ValueError, match="paypal"):
        ReserveAppointmentPage(payment_page).select_payment_method("paypal")


def test_get_stripe_frame_skips_main_frame(payment_page, make_locator):
    main_frame = MagicMock(name="main")
    main_frame.get_by_role.return_value = make_locator(visible=True)
    stripe = MagicMock(name="stripe")
    stripe.get_by_role.return_value = make_locator(visible=True)
    payment_page.main_frame = main_frame
    payment_page.frames = [main_frame, stripe]

    assert ReserveAppointmentPage(payment_page).get_stripe_frame() is stripe
    main_frame.get_by_role.assert_not_called()
    stripe.get_by_role.assert_called_with("textbox", name="Card number")


def test_get_stripe_frame_not_found(payment_page):
    main_frame = MagicMock(name="main")
    payment_page.main_frame = main_frame
    payment_page.frames = [main_frame]

    with pytest.raises(ElementNotFoundError, match="Stripe iframe"):
        ReserveAppointmentPage(payment_page).get_stripe_frame(timeout=0)


def test_get_stripe_frame_on_closed_page(make_page):
    with pytest.raises(PageClosedError):
        ReserveAppointmentPage(make_page(closed=True)).get_stripe_frame()


def test_wait_until_ready_recovers_closed_page(make_page):
    closed = make_page(closed=True)
    live = make_page(url=PAYMENT_URL)
    closed.context.pages = [closed, live]

    payment = ReserveAppointmentPage(closed)
    payment.wait_until_ready()

    assert payment.page is live
    live.goto.assert_called_once_with("/reserve-appointment", wait_until="domcontentloaded")
    live.wait_for_selector.assert_called_once()


def test_wait_until_ready_opens_new_page_when_none_left(make_page):
    closed = make_page(closed=True)
    fresh = make_page(url="about:blank")
    closed.context.pages = [closed]
    closed.context.new_page.return_value = fresh

    payment = ReserveAppointmentPage(closed)
    payment.wait_until_ready()
    assert payment.page is fresh


def test_goto_stays_on_payment_page(payment_page):
    ReserveAppointmentPage(payment_page).goto()
    payment_page.goto.assert_not_called()


def test_get_total_amount_from_any_price(payment_page, make_locator):
    price = make_locator(visible=True, text="Due today $2,495")
    payment_page.locator.side_effect = (
        lambda selector, **kwargs: price if selector == ReserveAppointmentPage.ANY_PRICE else payment_page.hidden_locator
    )
    assert ReserveAppointmentPage(payment_page).get_total_amount() == "$2,495"


def test_get_total_amount_from_total_label(payment_page, make_locator):
    payment_page.get_by_text.return_value = make_locator(visible=True, text="Total $1,999")
    assert ReserveAppointmentPage(payment_page).get_total_amount() == "$1,999"


def test_get_total_amount_missing(payment_page):
    assert ReserveAppointmentPage(payment_page).get_total_amount() is None


def test_get_decline_message(payment_page, make_locator):
    payment_page.get_by_text.return_value = make_locator(visible=True, text="  Your card was declined.  ")
    assert ReserveAppointmentPage(payment_page).get_decline_message(timeout=100) == "Your card was declined."
    payment_page.get_by_text.assert_called_with(DECLINE_PATTERN)


def test_get_decline_message_absent(payment_page):
    assert ReserveAppointmentPage(payment_page).get_decline_message(timeout=100) is None


def test_wait_for_payment_form_ready(payment_page, make_locator):
    button = make_locator(visible=True, enabled=True)
    payment_page.locator.side_effect = (
        lambda selector, **kwargs: button if selector == ReserveAppointmentPage.CONTINUE else payment_page.hidden_locator
    )
    assert ReserveAppointmentPage(payment_page).wait_for_payment_form_ready() is True


def test_wait_for_payment_form_ready_without_button(payment_page):
    assert ReserveAppointmentPage(payment_page).wait_for_payment_form_ready() is False


# ==================== Stripe card form ====================

def stripe_frame(make_locator, fields):
    """Frame double answering get_by_role(..., name=...) from ``fields``; other names are hidden"""
    hidden = make_locator()
    hidden.or_.return_value = hidden
    for field in fields.values():
        field.or_.return_value = field
    frame = MagicMock(name="stripe")
    frame.get_by_role.side_effect = lambda role, name=None, **kwargs: fields.get(name, hidden)
    return frame


def card_fields(make_locator):
    values = {
        "Card number": CARD,
        "Expiration date MM / YY": "12 / 34",
        "CVC": "333",
        "ZIP code": "12345",
    }
    fields = {}
    for name, value in values.items():
        field = make_locator(visible=True)
        field.input_value.return_value = value
        fields[name] = field
    return fields


def attach_frame(page, frame):
    page.main_frame = MagicMock(name="main")
    page.frames = [page.main_frame, frame]


def test_fill_payment_details_fills_card_fields(payment_page, make_locator):
    fields = card_fields(make_locator)
    attach_frame(payment_page, stripe_frame(make_locator, fields))

    ReserveAppointmentPage(payment_page).fill_payment_details(CARD, "12/34", None, None, "333", "12345")

    fields["Card number"].fill.assert_called_once_with(CARD)
    fields["Card number"].press_sequentially.assert_not_called()
    fields["Expiration date MM / YY"].fill.assert_called_once_with("12/34")
    fields["CVC"].fill.assert_called_once_with("333")
    fields["ZIP code"].fill.assert_called_once_with("12345")


@pytest.mark.parametrize(
    "short_field, name",
    [
        ("Expiration date MM / YY", "Expiry"),
        ("CVC", "CVV"),
        ("ZIP code", "ZIP code"),
    ],
)
def test_fill_payment_details_rejects_short_field(payment_page, make_locator, short_field, name):
    fields = card_fields(make_locator)
    fields[short_field].input_value.return_value = "1 /"
    attach_frame(payment_page, stripe_frame(make_locator, fields))

    with pytest.raises(PaymentFieldError) as excinfo:
        ReserveAppointmentPage(payment_page).fill_payment_details(CARD, "12/34", None, None, "333", "12345")
    assert excinfo.value.field == name


def test_card_number_retried_keystroke_by_keystroke(payment_page, make_locator):
    card = make_locator(visible=True)
    card.input_value.side_effect = ["4242", CARD]
    frame = stripe_frame(make_locator, {"Card number": card})

    ReserveAppointmentPage(payment_page)._fill_card_number(frame, CARD)

    card.press_sequentially.assert_called_once_with(CARD, delay=100)
    card.blur.assert_called_once()


def test_card_number_still_short_after_retry(payment_page, make_locator):
    card = make_locator(visible=True)
    card.input_value.side_effect = ["4242", "4242 4242"]
    frame = stripe_frame(make_locator, {"Card number": card})

    with pytest.raises(PaymentFieldError) as excinfo:
        ReserveAppointmentPage(payment_page)._fill_card_number(frame, CARD)

    assert excinfo.value.field == "Card number"
    card.press_sequentially.assert_called_once_with(CARD, delay=100)
    card.blur.assert_not_called()


def test_optional_field_absent(payment_page, make_locator):
    missing = make_locator()
    assert ReserveAppointmentPage(payment_page)._fill_optional(missing, "ada@ezratest.com", "Email") is False
    missing.fill.assert_not_called()


def test_optional_field_without_value(payment_page, make_locator):
    phone = make_locator(visible=True)
    assert ReserveAppointmentPage(payment_page)._fill_optional(phone, None, "Phone number") is False
    phone.fill.assert_not_called()


def test_optional_field_filled(payment_page, make_locator):
    email = make_locator(visible=True)
    email.input_value.return_value = "ada@ezratest.com"
    assert ReserveAppointmentPage(payment_page)._fill_optional(email, "ada@ezratest.com", "Email") is True
    email.fill.assert_called_once_with("ada@ezratest.com")


def test_optional_field_empty_after_fill(payment_page, make_locator):
    email = make_locator(visible=True)
    email.input_value.return_value = ""

    with pytest.raises(PaymentFieldError) as excinfo:
        ReserveAppointmentPage(payment_page)._fill_optional(email, "ada@ezratest.com", "Email")
    assert excinfo.value.field == "Email"


# ==================== Country ====================

def test_country_falls_through_failed_strategies(payment_page, make_locator):
    combo = make_locator(visible=True)
    combo.select_option.side_effect = [PlaywrightError("no option US"), PlaywrightError("no value US"), None]
    frame = MagicMock(name="stripe")
    frame.get_by_role.return_value = combo

    assert ReserveAppointmentPage(payment_page)._select_country(frame) is True
    assert combo.select_option.call_count == 3
    combo.select_option.assert_called_with(label="United States")


def test_country_picked_from_listbox_as_last_resort(payment_page, make_locator):
    combo = make_locator(visible=True)
    combo.select_option.side_effect = PlaywrightError("not a <select>")
    option = make_locator(visible=True, text="United States")
    frame = MagicMock(name="stripe")
    frame.get_by_role.side_effect = lambda role, **kwargs: combo if role == "combobox" else option

    assert ReserveAppointmentPage(payment_page)._select_country(frame) is True
    combo.click.assert_called_once()
    option.click.assert_called_once()


def test_country_left_alone_when_every_strategy_fails(payment_page, make_locator):
    combo = make_locator(visible=True)
    combo.select_option.side_effect = PlaywrightError("not a <select>")
    combo.click.side_effect = PlaywrightError("detached")
    frame = MagicMock(name="stripe")
    frame.get_by_role.return_value = combo

    assert ReserveAppointmentPage(payment_page)._select_country(frame) is False


def test_country_dropdown_missing(payment_page, make_locator):
    frame = MagicMock(name="stripe")
    frame.get_by_role.return_value = make_locator()
    assert ReserveAppointmentPage(payment_page)._select_country(frame) is False
