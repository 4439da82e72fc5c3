"""
Metrics scraping with retry.

The exporter agent only starts serving /metrics some time after the JVM is up,
so the first requests against a freshly started container are usually refused.
scrape_metrics() polls the endpoint at a fixed interval until the first
response arrives or the timeout elapses.

A transported response ends the loop regardless of its content. Checking for
specific metrics is left to the caller (see agent_smoke.assertions), so a
body without the expected lines fails with a "metric not found" message
instead of a timeout.
"""

import logging
import time
from typing import List, NamedTuple, Optional

import requests

from .errors import ScrapeTimeoutError

logger = logging.getLogger(__name__)

OPENMETRICS_ACCEPT = "application/openmetrics-text; version=1.0.0; charset=utf-8"
METRICS_PATH = "/metrics"
DEFAULT_POLL_INTERVAL = 0.1
DEFAULT_REQUEST_TIMEOUT = 10.0


class Endpoint(NamedTuple):
    """Host and mapped port of a running exporter."""

    host: str
    port: int

    def url(self, path: str = METRICS_PATH) -> str:
        return metrics_url(self.host, self.port, path)


def metrics_url(host: str, port: int, path: str = METRICS_PATH) -> str:
    """Build the scrape URL for an exporter endpoint."""
    return f"http://{host}:{port}{path}"


def split_lines(body: str) -> List[str]:
    """Split a response body into lines, dropping trailing empty lines."""
    lines = body.split("\n")
    while lines and lines[-1] == "":
        lines.pop()
    return lines


def scrape_metrics(
    url: str,
    timeout: float,
    session: Optional[requests.Session] = None,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    original_port: Optional[int] = None,
) -> List[str]:
    """
    Fetch the metrics exposition from url, retrying until timeout.

    Args:
        url: Metrics endpoint URL
        timeout: Overall time budget in seconds
        session: Optional requests session to issue the requests with
        poll_interval: Fixed sleep between failed attempts
        request_timeout: Connect/read timeout for each attempt
        original_port: Container-side port, reported on timeout

    Returns:
        The response body split into lines

    Raises:
        ScrapeTimeoutError: If no response was received within timeout
    """
    http = session or requests.Session()
    headers = {"Accept": OPENMETRICS_ACCEPT}
    start = time.monotonic()
    attempts = 0
    last_exception: Optional[requests.RequestException] = None

    try:
        while time.monotonic() - start < timeout:
            attempts += 1
            try:
                with http.get(url, headers=headers, timeout=request_timeout) as response:
                    lines = split_lines(response.text)
                logger.debug(
                    f"Scraped {url} after {attempts} attempt(s): "
                    f"HTTP {response.status_code}, {len(lines)} lines"
                )
                return lines
            except requests.RequestException as e:
                last_exception = e
                logger.debug(f"Scrape attempt {attempts} against {url} failed: {e}")
                time.sleep(poll_interval)
    finally:
        if session is None:
            http.close()

    if last_exception is not None:
        logger.warning(
            f"Giving up on {url} after {attempts} attempt(s)",
            exc_info=last_exception,
        )
    raise ScrapeTimeoutError(url, original_port, last_exception) from last_exception
