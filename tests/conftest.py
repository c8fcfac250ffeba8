"""
Shared fixtures.

Unit tests drive page objects and popup handlers against MagicMock stand-ins
for Playwright's Page and Locator, so nothing here starts a browser.
"""

from typing import Dict, Optional
from unittest.mock import MagicMock

import pytest
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from ezra_e2e.config import Config
from ezra_e2e.logging import setup_logging

STAGING_URL = "https://myezra-staging.ezra.com"


def build_locator(
    visible: bool = False,
    text: str = "",
    enabled: bool = True,
    count: Optional[int] = None,
    box: Optional[Dict[str, float]] = None,
) -> MagicMock:
    """
    Locator double

    ``first``/``last``/``nth``/``filter``/``locator`` all return the same
    double, so chained lookups resolve to it. A hidden locator's
    ``wait_for`` times out the way Playwright's does.
    """
    locator = MagicMock(name=f"Locator(visible={visible}, text={text!r})")
    locator.is_visible.return_value = visible
    if not visible:
        locator.wait_for.side_effect = PlaywrightTimeoutError("Timeout waiting for element")
    locator.text_content.return_value = text
    locator.is_enabled.return_value = enabled
    locator.count.return_value = count if count is not None else (1 if visible else 0)
    locator.bounding_box.return_value = box
    locator.first = locator
    locator.last = locator
    locator.nth.return_value = locator
    locator.filter.return_value = locator
    locator.locator.return_value = locator
    return locator


def build_page(
    locators: Optional[Dict[str, MagicMock]] = None,
    url: str = f"{STAGING_URL}/dashboard",
    closed: bool = False,
) -> MagicMock:
    """
    Page double whose ``locator(selector)`` answers from ``locators``

    Unknown selectors, roles and texts resolve to one shared hidden locator.
    """
    page = MagicMock(name="Page")
    page.is_closed.return_value = closed
    page.url = url

    registry = dict(locators or {})
    hidden = build_locator()
    page.hidden_locator = hidden
    page.locator.side_effect = lambda selector, **kwargs: registry.get(selector, hidden)
    page.get_by_role.return_value = hidden
    page.get_by_text.return_value = hidden
    page.get_by_placeholder.return_value = hidden
    return page


@pytest.fixture(scope="session", autouse=True)
def suite_logging():
    setup_logging(Config.LOG_LEVEL)
    yield


@pytest.fixture
def make_locator():
    return build_locator


@pytest.fixture
def make_page():
    return build_page
