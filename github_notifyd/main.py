"""Main entry point for the GitHub notifications daemon."""

import argparse
import logging
import logging.handlers
import os
import signal
import sys
from typing import List, Optional

from .avatar_cache import AvatarCache
from .capabilities import build_profile
from .config import AppConfig, MIN_POLL_INTERVAL, load_config
from .daemon import daemonize
from .enrichment import EnrichmentResolver
from .errors import ConfigError, PresentationError
from .http_client import GitHubClient
from .orchestrator import PollOrchestrator
from .presentation import DBusPresenter, Presenter

logger = logging.getLogger(__name__)

SYSLOG_SOCKET = "/dev/log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(foreground: bool) -> None:
    """Log to stdout in the foreground and to syslog once daemonized."""
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, log_level, logging.INFO)

    if foreground or not os.path.exists(SYSLOG_SOCKET):
        logging.basicConfig(
            level=level,
            format=LOG_FORMAT,
            handlers=[logging.StreamHandler(sys.stdout)],
        )
        return

    handler = logging.handlers.SysLogHandler(address=SYSLOG_SOCKET)
    handler.setFormatter(logging.Formatter("github-notifyd[%(process)d]: %(levelname)s %(message)s"))
    logging.basicConfig(level=level, handlers=[handler])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="github-notifyd",
        description="GitHub Notifications Daemon",
    )
    parser.add_argument(
        "-n", "--no-daemon",
        action="store_true",
        help="Don't detach github-notifyd into the background",
    )
    parser.add_argument(
        "-a", "--no-user-avatar",
        action="store_true",
        help="Don't show user avatar as a notification icon",
    )
    parser.add_argument(
        "-p", "--persistent-notifications",
        action="store_true",
        help="Use persistent notifications",
    )
    parser.add_argument(
        "-i", "--polling-interval",
        type=int,
        default=None,
        help=f"Notifications polling interval in seconds (default and minimum: {MIN_POLL_INTERVAL})",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Check notifications once, in the foreground, and exit",
    )
    return parser


def build_orchestrator(config: AppConfig, presenter: Presenter) -> PollOrchestrator:
    """
    Negotiate with the notification server and wire up the pipeline.

    Raises:
        PresentationError: If the server capabilities cannot be obtained.
    """
    capabilities, identity = presenter.negotiate()
    logger.info(
        f"Notification server: name={identity.name} vendor={identity.vendor} "
        f"version={identity.version} spec_version={identity.spec_version}"
    )
    profile = build_profile(capabilities, identity)

    client = GitHubClient(config.github)
    avatars = None
    if config.avatars.enabled:
        avatars = AvatarCache(config.avatars.cache_dir, timeout=config.github.timeout)
    resolver = EnrichmentResolver(client, avatars, show_avatars=config.avatars.enabled)

    return PollOrchestrator(
        client=client,
        resolver=resolver,
        presenter=presenter,
        profile=profile,
        feed_url=config.github.notifications_url,
        interval_seconds=config.poller.interval_seconds,
        persistent=config.poller.persistent,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with command-line argument parsing."""
    args = build_parser().parse_args(argv)
    foreground = args.no_daemon or args.once

    if not foreground:
        daemonize()
    configure_logging(foreground)

    try:
        config = load_config(
            no_avatar=args.no_user_avatar,
            persistent=args.persistent_notifications,
            interval=args.polling_interval,
        )
        orchestrator = build_orchestrator(config, DBusPresenter())
    except (ConfigError, PresentationError) as e:
        logger.error(f"Startup failed: {e}")
        return 1

    if args.once:
        outcome = orchestrator.tick()
        logger.info(f"Single check finished: {outcome.value}")
        orchestrator.client.close()
        return 0

    def _handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, shutting down")
        orchestrator.stop()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    try:
        orchestrator.run()
    finally:
        orchestrator.client.close()
        logger.info("It's over - let's go home")
    return 0


if __name__ == "__main__":
    sys.exit(main())
