"""
Ezra E2E - Configuration
Environment-driven settings for the staging booking suite.

Values are read once at import time from the process environment, after
loading an optional ``.env`` file from the working directory.
"""

import os
from typing import Any, Dict, List, Optional

import pytz
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"[ERR] {name} must be an integer, got {raw!r}")


class Config:
    """Attribute bag consumed as ``Config.X`` across page objects and fixtures"""

    # ==================== Target ====================
    BASE_URL: str = os.getenv("BASE_URL", "https://myezra-staging.ezra.com").rstrip("/")

    # ==================== Credentials ====================
    TEST_USER_EMAIL: str = os.getenv("TEST_USER_EMAIL", "testuser@ezra.com")
    TEST_USER_PASSWORD: str = os.getenv("TEST_USER_PASSWORD", "TestPassword123!")
    TEST_USER_NAME: str = os.getenv("TEST_USER_NAME", "Test User")
    TEST_INVALID_EMAIL: str = os.getenv("TEST_INVALID_EMAIL", "invalid@example.com")
    TEST_INVALID_PASSWORD: str = os.getenv("TEST_INVALID_PASSWORD", "WrongPassword123!")
    REGISTRATION_PASSWORD: str = os.getenv("REGISTRATION_PASSWORD", "YourTestPassword!")

    # ==================== Payment card ====================
    TEST_CARD_NUMBER: str = os.getenv("TEST_CARD_NUMBER", "4242 4242 4242 4242")
    TEST_CARD_EXPIRY: str = os.getenv("TEST_CARD_EXPIRY", "12/34")
    TEST_CARD_CVV: str = os.getenv("TEST_CARD_CVV", "333")
    TEST_CARD_NAME: str = os.getenv("TEST_CARD_NAME", "Test User")
    TEST_CARD_ADDRESS: str = os.getenv("TEST_CARD_ADDRESS", "123 Test Street, Test City, TC 12345")
    TEST_CARD_ZIP: str = os.getenv("TEST_CARD_ZIP", "12345")

    # ==================== Browser ====================
    TIMEZONE: str = os.getenv("TIMEZONE", "America/Los_Angeles")
    LOCALE: str = os.getenv("LOCALE", "en-US")
    HEADLESS: bool = _env_bool("HEADLESS", "true")
    SLOW_MO: int = _env_int("SLOW_MO", 0)
    VIEWPORT_WIDTH: int = _env_int("VIEWPORT_WIDTH", 1366)
    VIEWPORT_HEIGHT: int = _env_int("VIEWPORT_HEIGHT", 768)
    DEFAULT_TIMEOUT: int = _env_int("DEFAULT_TIMEOUT", 30000)
    NAVIGATION_TIMEOUT: int = _env_int("NAVIGATION_TIMEOUT", 60000)
    RECORD_VIDEO: bool = _env_bool("RECORD_VIDEO")

    # ==================== Diagnostics ====================
    EVIDENCE_DIR: str = os.getenv("EVIDENCE_DIR", "debug")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: Optional[str] = os.getenv("LOG_FILE", "ezra_e2e.log") or None
    PAUSE_ON_FAILURE: bool = _env_bool("PAUSE_ON_FAILURE")

    # ==================== Run control ====================
    RUN_E2E: bool = _env_bool("RUN_E2E")
    PREFLIGHT_ENABLED: bool = _env_bool("PREFLIGHT_ENABLED", "true")
    PREFLIGHT_TIMEOUT: int = _env_int("PREFLIGHT_TIMEOUT", 10)

    REQUIRED: List[str] = ["BASE_URL", "TEST_USER_EMAIL", "TEST_USER_PASSWORD"]

    @classmethod
    def validate(cls, required: Optional[List[str]] = None) -> None:
        """
        Validate required configuration

        Args:
            required: Attribute names that must be non-empty (defaults to REQUIRED)

        Raises:
            ValueError: if any attribute is empty or the timezone is unknown
        """
        fields = required if required is not None else cls.REQUIRED
        missing = [field for field in fields if not getattr(cls, field, None)]

        if missing:
            raise ValueError(f"[ERR] Missing configuration: {', '.join(missing)}")

        cls.timezone()

    @classmethod
    def timezone(cls):
        """Resolve TIMEZONE to a pytz zone"""
        try:
            return pytz.timezone(cls.TIMEZONE)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"[ERR] Unknown TIMEZONE: {cls.TIMEZONE!r}")

    @classmethod
    def url(cls, path: str = "/") -> str:
        """Absolute staging URL for an app path"""
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{cls.BASE_URL}{path}"

    @classmethod
    def context_options(cls) -> Dict[str, Any]:
        """
        Browser context arguments for a staging session

        Returns:
            kwargs accepted by ``Browser.new_context``
        """
        options: Dict[str, Any] = {
            "base_url": cls.BASE_URL,
            "viewport": {"width": cls.VIEWPORT_WIDTH, "height": cls.VIEWPORT_HEIGHT},
            "locale": cls.LOCALE,
            "timezone_id": cls.timezone().zone,
            "ignore_https_errors": True,
        }

        if cls.RECORD_VIDEO:
            options["record_video_dir"] = os.path.join(cls.EVIDENCE_DIR, "videos")
            options["record_video_size"] = {"width": 1280, "height": 720}

        return options
