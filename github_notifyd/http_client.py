"""HTTP client for the GitHub REST API."""

import logging
from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Optional

import requests

from .config import GitHubConfig
from .models import FetchResult

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_NOT_MODIFIED = 304
HTTP_UNAUTHORIZED = 401


def _parse_last_modified(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 1123 Last-Modified header, or None if absent/invalid."""
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring unparseable Last-Modified header: {value!r}")
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class GitHubClient:
    """Performs authenticated, optionally conditional, GET requests."""

    def __init__(self, config: GitHubConfig, session: Optional[requests.Session] = None):
        """
        Initialize the client.

        Args:
            config: GitHub configuration (token, user agent, timeout).
            session: Optional pre-built session, mainly for tests.
        """
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": config.user_agent,
            "Authorization": f"token {config.token}",
        })

    def fetch(
        self,
        url: str,
        use_staleness_marker: bool = False,
        marker: Optional[datetime] = None,
    ) -> FetchResult:
        """
        GET ``url``.

        When ``use_staleness_marker`` is set and ``marker`` is known, the
        request carries If-Modified-Since and a 304 answer comes back as an
        empty result with the marker unchanged. A 200 answer refreshes the
        marker from Last-Modified.

        The client never retries; statuses other than 200 and 304 are handed
        back to the caller with no body, and a timeout or connection problem
        is reported as status 0.
        """
        headers = {}
        if use_staleness_marker and marker is not None:
            headers["If-Modified-Since"] = format_datetime(marker.astimezone(timezone.utc), usegmt=True)

        try:
            response = self.session.get(url, headers=headers, timeout=self.config.timeout)
        except requests.exceptions.Timeout:
            logger.error(f"Request to {url} timed out after {self.config.timeout}s")
            return FetchResult(body=None, status=0, marker=marker)
        except requests.exceptions.RequestException as e:
            logger.error(f"Request to {url} failed: {e}")
            return FetchResult(body=None, status=0, marker=marker)

        status = response.status_code
        if status == HTTP_NOT_MODIFIED:
            return FetchResult(body=None, status=status, marker=marker)

        if status != HTTP_OK:
            logger.error(f"Request to {url} failed: server responded with code {status}")
            return FetchResult(body=None, status=status, marker=marker)

        if use_staleness_marker:
            marker = _parse_last_modified(response.headers.get("Last-Modified")) or marker

        return FetchResult(body=response.content, status=status, marker=marker)

    def close(self) -> None:
        self.session.close()
