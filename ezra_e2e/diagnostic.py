"""
Ezra E2E - Forensic Diagnostics
Screenshots and HTML dumps of failing journeys, plus step timing for
multi-page flows.
"""

import re
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from playwright.sync_api import Page

from .logging import get_logger

logger = get_logger("Diagnostic")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


def safe_name(text: str, max_length: int = 80) -> str:
    """
    Filesystem-safe slug for a test node id or operation label

    >>> safe_name("tests/e2e/test_x.py::test_pay[chromium]")
    'tests_e2e_test_x.py_test_pay_chromium'
    """
    slug = _UNSAFE_CHARS.sub("_", text).strip("_")
    return slug[:max_length] or "capture"


class ForensicMonitor:
    """
    Writes page evidence under ``base_dir/screenshots`` and ``base_dir/html``

    Capture never raises: evidence collection must not mask the failure
    being recorded.
    """

    def __init__(self, base_dir: str = "debug", enabled: bool = True):
        self.enabled = enabled
        self.base_dir = Path(base_dir)
        self.screenshot_dir = self.base_dir / "screenshots"
        self.html_dir = self.base_dir / "html"
        self.operation_counter = 0

        if not self.enabled:
            logger.info("[FORENSIC] Monitoring disabled")
            return

        for directory in (self.screenshot_dir, self.html_dir):
            directory.mkdir(parents=True, exist_ok=True)
        logger.info(f"[FORENSIC] Monitoring enabled -> {self.base_dir}")

    def capture(
        self,
        page: Page,
        operation: str,
        category: str = "general",
        save_screenshot: bool = True,
        save_html: bool = True,
    ) -> Dict[str, Any]:
        """
        Capture a diagnostic snapshot

        Args:
            page: Playwright page object
            operation: What was happening (test id, step name)
            category: failure, navigation, payment, ...
            save_screenshot: Whether to save a full-page screenshot
            save_html: Whether to save the DOM

        Returns:
            dict with the operation id, the url and the paths written
            (None for anything skipped or failed)
        """
        if not self.enabled:
            return {}

        self.operation_counter += 1
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        operation_id = f"{timestamp}_{self.operation_counter:04d}"
        stem = f"{safe_name(category)}_{safe_name(operation)}_{operation_id}"

        result: Dict[str, Any] = {
            "operation_id": operation_id,
            "operation": operation,
            "category": category,
            "timestamp": timestamp,
            "url": None,
            "screenshot": None,
            "html": None,
        }

        if page is None or page.is_closed():
            logger.warning(f"[FORENSIC] [{operation_id}] Page closed, nothing to capture for {operation}")
            return result

        try:
            result["url"] = page.url
        except Exception as e:
            logger.debug(f"[FORENSIC] URL unavailable: {e}")

        if save_screenshot:
            screenshot_path = self.screenshot_dir / f"{stem}.png"
            try:
                page.screenshot(path=str(screenshot_path), full_page=True)
                result["screenshot"] = str(screenshot_path)
                logger.info(f"[FORENSIC] [{operation_id}] Screenshot: {screenshot_path.name}")
            except Exception as e:
                logger.warning(f"[FORENSIC] Screenshot failed: {e}")

        if save_html:
            html_path = self.html_dir / f"{stem}.html"
            try:
                html_path.write_text(page.content(), encoding="utf-8")
                result["html"] = str(html_path)
                logger.debug(f"[FORENSIC] HTML dump: {html_path.name}")
            except Exception as e:
                logger.warning(f"[FORENSIC] HTML dump failed: {e}")

        logger.info(f"[FORENSIC] [{operation_id}] {category.upper()}: {operation} @ {result['url']}")
        return result

    def quick_capture(self, page: Page, operation: str, category: str = "general") -> Dict[str, Any]:
        """Screenshot only"""
        return self.capture(page, operation, category, save_screenshot=True, save_html=False)

    def failure_capture(self, page: Page, test_id: str) -> Dict[str, Any]:
        return self.capture(page, test_id, category="failure", save_screenshot=True, save_html=True)


class OperationTracker:
    """
    Step log with timings for one journey at a time

    Journeys call ``start`` once, ``step`` per page transition and ``end``
    from a finally block so failed runs are recorded too.
    """

    def __init__(self):
        self.operations: List[Dict[str, Any]] = []
        self.current_operation: Optional[Dict[str, Any]] = None

    def start(self, operation: str, context: Optional[Dict[str, Any]] = None) -> str:
        op_id = f"{int(time.time() * 1000)}"
        self.current_operation = {
            "id": op_id,
            "name": operation,
            "start_time": time.time(),
            "context": context or {},
            "steps": [],
            "end_time": None,
            "success": None,
            "result": None,
        }

        context_str = f" ({context})" if context else ""
        logger.info(f"[JOURNEY] START [{op_id}]: {operation}{context_str}")
        return op_id

    def step(self, step_name: str, data: Optional[Dict[str, Any]] = None) -> None:
        if not self.current_operation:
            logger.warning("[JOURNEY] No active journey to add step to")
            return

        steps = self.current_operation["steps"]
        steps.append({"name": step_name, "time": time.time(), "data": data or {}})

        data_str = f" -> {data}" if data else ""
        logger.info(f"[JOURNEY]   Step {len(steps)}: {step_name}{data_str}")

    def end(self, success: bool = True, result: Any = None) -> Optional[Dict[str, Any]]:
        """
        Close the current journey

        Returns:
            The archived journey record, or None if nothing was started
        """
        if not self.current_operation:
            logger.warning("[JOURNEY] No active journey to end")
            return None

        operation = self.current_operation
        operation["end_time"] = time.time()
        operation["success"] = success
        operation["result"] = result

        duration = operation["end_time"] - operation["start_time"]
        status = "SUCCESS" if success else "FAILED"
        logger.info(
            f"[JOURNEY] END [{operation['id']}]: {status} after {len(operation['steps'])} steps ({duration:.2f}s)"
        )
        if result:
            logger.info(f"[JOURNEY]   Result: {result}")

        self.operations.append(operation)
        self.current_operation = None
        return operation

    def get_stats(self) -> Dict[str, Any]:
        total = len(self.operations)
        successful = sum(1 for op in self.operations if op.get("success"))

        durations = [op["end_time"] - op["start_time"] for op in self.operations if op.get("end_time")]
        avg_duration = sum(durations) / len(durations) if durations else 0

        return {
            "total_operations": total,
            "successful": successful,
            "failed": total - successful,
            "success_rate": successful / total if total > 0 else 0,
            "avg_duration": avg_duration,
        }

    def log_summary(self) -> Dict[str, Any]:
        """Log get_stats() as a single line and return it"""
        stats = self.get_stats()
        if not stats["total_operations"]:
            logger.info("[JOURNEY] No journeys recorded")
            return stats

        logger.info(
            f"[JOURNEY] {stats['successful']}/{stats['total_operations']} journeys passed "
            f"({stats['success_rate']:.0%}), avg {stats['avg_duration']:.1f}s"
        )
        return stats
