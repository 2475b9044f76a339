"""Local cache of user avatar images, keyed by GitHub user id."""

import logging
import os
import tempfile
from typing import Optional

import requests

from .config import DEFAULT_REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


class AvatarCache:
    """Downloads avatars once and serves them from disk afterwards."""

    def __init__(
        self,
        cache_dir: str,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        self.cache_dir = cache_dir
        self.session = session or requests.Session()
        self.timeout = timeout

    def path_for(self, user_id: int) -> str:
        return os.path.join(self.cache_dir, f"{user_id}.png")

    def fetch(self, user_id: int, url: str) -> Optional[str]:
        """
        Return the local path of the avatar for ``user_id``.

        The image is downloaded only if it is not cached yet. Failures are
        logged and reported as None so the caller can carry on without an
        icon.

        Args:
            user_id: Numeric GitHub user id, used as the file name.
            url: Avatar image URL.

        Returns:
            Absolute path of the cached image, or None.
        """
        path = self.path_for(user_id)
        if os.path.exists(path):
            return path

        logger.info(f"Downloading avatar for user {user_id}")
        tmp_path = None
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()

            fd, tmp_path = tempfile.mkstemp(prefix=f".{user_id}-", suffix=".part", dir=self.cache_dir)
            with os.fdopen(fd, "wb") as f:
                f.write(response.content)

            if os.path.exists(path):
                # Another request finished first.
                os.remove(tmp_path)
            else:
                os.replace(tmp_path, path)
            tmp_path = None
            return path
        except (requests.exceptions.RequestException, OSError) as e:
            logger.error(f"Cannot prepare avatar for user {user_id}: {e}")
            return None
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)
