"""Playwright end-to-end suite for the Ezra scan booking funnel."""

__version__ = "1.0.0"
