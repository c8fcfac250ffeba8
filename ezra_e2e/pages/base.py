"""
Ezra E2E - Base Page
Shared plumbing for page objects: locator resolution, fill fallbacks,
forced clicks and enablement polling.
"""

from typing import Iterable, Optional, Union

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator, Page

from ..exceptions import PageClosedError
from ..logging import get_logger
from .. import ui

Target = Union[str, Locator]

JS_SET_VALUE = """
(el, value) => {
    el.value = value;
    el.dispatchEvent(new Event('input', { bubbles: true }));
    el.dispatchEvent(new Event('change', { bubbles: true }));
    el.dispatchEvent(new Event('blur', { bubbles: true }));
}
"""


class BasePage:
    """Wraps a sync Playwright page; subclasses set PATH and add actions"""

    PATH = "/"

    def __init__(self, page: Page):
        self.page = page
        self.logger = get_logger(f"Pages.{type(self).__name__}")

    # ==================== Navigation ====================

    @property
    def url(self) -> str:
        return self.page.url

    def ensure_open(self) -> None:
        if self.page.is_closed():
            raise PageClosedError(f"{type(self).__name__}: page was closed")

    def open(self, path: Optional[str] = None) -> None:
        """Navigate to ``path`` (default PATH) relative to the context base_url"""
        self.ensure_open()
        target = path or self.PATH
        self.logger.info(f"[NAV] Opening {target}")
        self.page.goto(target)
        ui.wait_for_dom(self.page)

    def settle(self, ms: int) -> None:
        ui.settle(self.page, ms)

    # ==================== Locators ====================

    def locate(self, target: Target) -> Locator:
        """Selector strings resolve to their first match; locators pass through"""
        if isinstance(target, str):
            return self.page.locator(target).first
        return target

    def is_visible(self, target: Target, timeout: int = 0) -> bool:
        return ui.is_visible(self.locate(target), timeout=timeout)

    def text_of(self, target: Target, timeout: Optional[int] = None) -> str:
        return ui.text_of(self.locate(target), timeout=timeout)

    def first_visible(self, candidates: Iterable[Target], timeout: int = 1000) -> Optional[Locator]:
        """
        First candidate in an ordered selector chain that becomes visible

        Args:
            candidates: Selectors or locators, most specific first
            timeout: Per-candidate wait in ms

        Returns:
            The matching locator, or None when the chain is exhausted
        """
        return ui.first_visible((self.locate(candidate) for candidate in candidates), timeout=timeout)

    # ==================== Actions ====================

    def fast_inject(self, target: Target, value: str) -> bool:
        """
        Put a value into a form field using Playwright native methods first,
        then JavaScript fallback for reliability.
        """
        name = ui.describe(target)
        locator = self.locate(target)

        if isinstance(target, str) and ui.count_of(self.page.locator(target)) == 0:
            self.logger.warning(f"[INJECT] Selector not found: {name}")
            return False

        # Method 1: native fill
        try:
            locator.fill(value, timeout=2000)
            self.logger.debug(f"[INJECT] Filled via Playwright: {name}")
            return True
        except PlaywrightError as e1:
            self.logger.debug(f"[INJECT] Playwright fill failed for {name}: {e1}")

        # Method 2: focus by click, then fill
        try:
            locator.click(timeout=1000)
            locator.fill(value, timeout=2000)
            return True
        except PlaywrightError as e2:
            self.logger.debug(f"[INJECT] Click+fill failed for {name}: {e2}")

        # Method 3: set value and fire the events frameworks listen for
        try:
            locator.evaluate(JS_SET_VALUE, value)
            self.logger.debug(f"[INJECT] Filled via JS: {name}")
            return True
        except PlaywrightError as e3:
            self.logger.warning(f"[INJECT] JS injection failed for {name}: {e3}")

        return False

    def click_with_fallback(self, target: Target, timeout: int = 10000) -> bool:
        """Forced click, then a DOM-level click when Playwright's is intercepted"""
        return ui.click_with_fallback(self.locate(target), timeout=timeout, name=ui.describe(target))

    def wait_until_enabled(self, target: Target, attempts: int = 10, interval_ms: int = 500) -> bool:
        """
        Poll ``is_enabled`` until true

        Returns:
            True once enabled, False after ``attempts`` polls
        """
        locator = self.locate(target)
        for attempt in range(attempts):
            if ui.is_enabled(locator):
                return True
            self.logger.debug(f"[WAIT] {ui.describe(target)} disabled, attempt {attempt + 1}/{attempts}")
            self.settle(interval_ms)
        return ui.is_enabled(locator)
