"""Exceptions raised by page objects when required UI is missing or misbehaves."""


class EzraE2EError(Exception):
    """Base class for suite errors."""


class PageClosedError(EzraE2EError):
    """The Playwright page was closed before the action could run."""


class ElementNotFoundError(EzraE2EError):
    """No selector in a fallback chain matched a usable element."""


class PaymentFieldError(EzraE2EError):
    """A Stripe field did not hold the expected value after filling."""

    def __init__(self, field: str, value: str, detail: str = ""):
        self.field = field
        self.value = value
        message = f"{field} not filled correctly. Current value: {value!r}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
