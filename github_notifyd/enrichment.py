"""Resolution of the author behind each notification."""

import logging
import math
from typing import List, Optional, Union

from .avatar_cache import AvatarCache
from .feed_parser import decode_json
from .http_client import HTTP_OK, GitHubClient
from .models import Notification, PartialRecord, Rejected

logger = logging.getLogger(__name__)


def parse_user(payload) -> Union[tuple, Rejected]:
    """
    Extract ``(login, id, avatar_url)`` from a comment payload.

    Booleans are rejected as ids even though Python treats them as ints,
    and so are the infinities and NaN that json.loads accepts.
    """
    if not isinstance(payload, dict):
        return Rejected("response is not an object")

    user = payload.get("user")
    if not isinstance(user, dict):
        return Rejected("missing or invalid 'user' object")

    login = user.get("login")
    if not isinstance(login, str) or not login:
        return Rejected("missing or invalid 'user.login'")

    user_id = user.get("id")
    if isinstance(user_id, bool) or not isinstance(user_id, (int, float)):
        return Rejected("missing or invalid 'user.id'")
    if isinstance(user_id, float) and not math.isfinite(user_id):
        return Rejected("missing or invalid 'user.id'")

    avatar_url = user.get("avatar_url")
    if not isinstance(avatar_url, str) or not avatar_url:
        return Rejected("missing or invalid 'user.avatar_url'")

    return login, int(user_id), avatar_url


class EnrichmentResolver:
    """Turns PartialRecords into Notifications with a second API request."""

    def __init__(
        self,
        client: GitHubClient,
        avatars: Optional[AvatarCache] = None,
        show_avatars: bool = True,
    ):
        """
        Args:
            client: Client used for the comment lookup.
            avatars: Avatar cache; required when ``show_avatars`` is set.
            show_avatars: Whether to attach the author's avatar as icon.
        """
        if show_avatars and avatars is None:
            raise ValueError("show_avatars requires an AvatarCache")
        self.client = client
        self.avatars = avatars
        self.show_avatars = show_avatars

    def resolve(self, partial: PartialRecord) -> Optional[Notification]:
        """
        Look up the author of ``partial`` and build its Notification.

        Any failure of the lookup drops the record (returns None). A failed
        avatar download does not: the notification is kept without an icon.
        """
        result = self.client.fetch(partial.comment_url)
        if result.status != HTTP_OK or result.body is None:
            logger.warning(
                f"Dropping notification '{partial.title}': author lookup failed with status {result.status}"
            )
            return None

        try:
            payload = decode_json(result.body)
        except ValueError as e:
            logger.warning(f"Dropping notification '{partial.title}': JSON error: {e}")
            return None

        user = parse_user(payload)
        if isinstance(user, Rejected):
            logger.warning(f"Dropping notification '{partial.title}': {user.reason}")
            return None
        login, user_id, avatar_url = user

        avatar = None
        if self.show_avatars:
            avatar = self.avatars.fetch(user_id, avatar_url)

        logger.info(
            f"New notification: repository={partial.repository_name} "
            f"type={partial.type} reason={partial.reason}"
        )
        return Notification(
            repository=partial.repository_name,
            repository_url=partial.repository_url,
            type=partial.type,
            title=partial.title,
            user=login,
            reason=partial.reason,
            avatar=avatar,
        )

    def resolve_all(self, records: List[PartialRecord]) -> List[Notification]:
        """Resolve ``records`` in order, leaving out the ones that were dropped."""
        notifications = []
        for record in records:
            notification = self.resolve(record)
            if notification is not None:
                notifications.append(notification)
        return notifications
