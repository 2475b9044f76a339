"""Data models for GitHub notifications."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

EXPIRES_DEFAULT = -1  # let the notification server pick the timeout


@dataclass(frozen=True)
class PartialRecord:
    """A validated feed entry that still needs its author resolved."""
    reason: str           # e.g. "mention", "review_requested"
    type: str             # subject kind, e.g. "PullRequest"
    title: str
    repository_name: str
    repository_url: str
    comment_url: str      # subject.latest_comment_url


@dataclass(frozen=True)
class Rejected:
    """Why a feed entry or enrichment response was dropped."""
    reason: str


@dataclass(frozen=True)
class Notification:
    """A fully resolved notification, ready to be rendered."""
    repository: str
    repository_url: str
    type: str
    title: str
    user: str
    reason: str
    avatar: Optional[str] = None  # local path to the cached avatar image


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a single HTTP GET."""
    body: Optional[bytes]
    status: int                         # 0 on timeout or transport failure
    marker: Optional[datetime] = None   # Last-Modified of the newest feed seen


class Urgency(Enum):
    LOW = 0
    NORMAL = 1
    CRITICAL = 2


@dataclass(frozen=True)
class PresentationEvent:
    """Everything the notification server needs to show one notification."""
    summary: str
    body: str = ""
    icon: Optional[str] = None
    timeout: int = EXPIRES_DEFAULT
    urgency: Urgency = Urgency.NORMAL
    transient: bool = False
