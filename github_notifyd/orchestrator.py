"""Polling loop tying the fetch, parse, enrich and render steps together."""

import logging
import threading
from datetime import datetime
from enum import Enum
from typing import Optional

from .capabilities import RenderProfile
from .enrichment import EnrichmentResolver
from .errors import MalformedFeed
from .feed_parser import parse_feed
from .http_client import HTTP_NOT_MODIFIED, HTTP_OK, HTTP_UNAUTHORIZED, GitHubClient
from .presentation import Presenter
from .renderer import error_event, render

logger = logging.getLogger(__name__)


class TickOutcome(Enum):
    DISPATCHED = "dispatched"
    NOT_MODIFIED = "not_modified"
    UNAUTHORIZED = "unauthorized"
    FAILED = "failed"


class PollOrchestrator:
    """
    Owns the polling state: the staleness marker and the negotiated render
    profile. Only this object reads or writes them, and only from the thread
    running ``run``/``tick``.
    """

    def __init__(
        self,
        client: GitHubClient,
        resolver: EnrichmentResolver,
        presenter: Presenter,
        profile: RenderProfile,
        feed_url: str,
        interval_seconds: int,
        persistent: bool = False,
    ):
        self.client = client
        self.resolver = resolver
        self.presenter = presenter
        self.profile = profile
        self.feed_url = feed_url
        self.interval_seconds = interval_seconds
        self.persistent = persistent
        self.last_modified: Optional[datetime] = None
        self._stop = threading.Event()

    def tick(self) -> TickOutcome:
        """Run one complete check of the notifications feed."""
        result = self.client.fetch(self.feed_url, use_staleness_marker=True, marker=self.last_modified)

        if result.status == HTTP_NOT_MODIFIED:
            logger.debug("No new notifications")
            return TickOutcome.NOT_MODIFIED

        if result.status == HTTP_UNAUTHORIZED:
            logger.error("GitHub rejected the access token")
            self.presenter.show(error_event(unauthorized=True))
            return TickOutcome.UNAUTHORIZED

        if result.status != HTTP_OK or result.body is None:
            self.presenter.show(error_event(unauthorized=False))
            return TickOutcome.FAILED

        self.last_modified = result.marker

        try:
            records = parse_feed(result.body)
        except MalformedFeed as e:
            logger.error(f"Cannot decode notifications: {e}")
            self.presenter.show(error_event(unauthorized=False))
            return TickOutcome.FAILED

        notifications = self.resolver.resolve_all(records)

        if notifications and self.persistent and not self.profile.capabilities.persistence:
            logger.info("Notification server doesn't support persistent notifications")

        for notification in notifications:
            self.presenter.show(render(notification, self.profile, self.persistent))

        logger.info(f"Showed {len(notifications)} notifications")
        return TickOutcome.DISPATCHED

    def run(self) -> None:
        """Check the feed every ``interval_seconds`` until ``stop`` is called."""
        logger.info(f"Polling {self.feed_url} every {self.interval_seconds}s")
        while not self._stop.wait(self.interval_seconds):
            try:
                self.tick()
            except Exception:
                logger.exception("Unexpected error while checking notifications")

    def stop(self) -> None:
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()
