"""
Ezra E2E - Staging Preflight
One HTTP request before the browser session starts, so an unreachable
staging environment skips the journeys instead of failing each at its
first page load.
"""

import time
from typing import Tuple

import requests

from .logging import get_logger

logger = get_logger("Preflight")

# 5xx means staging is down; 4xx from the root still proves it answers
HEALTHY_STATUS_CEILING = 500


def check_staging_reachable(base_url: str, timeout: float = 10) -> Tuple[bool, str]:
    """
    Request the staging root

    Args:
        base_url: Staging origin, e.g. https://myezra-staging.ezra.com
        timeout: Seconds for connect and read

    Returns:
        (reachable, reason) where reason is "HTTP_<status>" or the
        requests error class name
    """
    start_time = time.time()
    try:
        response = requests.get(base_url, timeout=timeout, allow_redirects=True)
    except requests.RequestException as e:
        logger.error(f"[PREFLIGHT] {base_url} unreachable: {type(e).__name__}: {e}")
        return False, type(e).__name__

    elapsed = time.time() - start_time
    reason = f"HTTP_{response.status_code}"

    if response.status_code >= HEALTHY_STATUS_CEILING:
        logger.error(f"[PREFLIGHT] {base_url} answered {response.status_code} in {elapsed:.2f}s")
        return False, reason

    logger.info(f"[PREFLIGHT] {base_url} reachable ({response.status_code}) in {elapsed:.2f}s")
    return True, reason
