"""Exception types raised by the daemon."""


class NotifydError(Exception):
    """Base class for all daemon errors."""


class ConfigError(NotifydError):
    """Configuration is missing or invalid."""


class MalformedFeed(NotifydError):
    """The notifications payload could not be decoded as an array."""


class PresentationError(NotifydError):
    """The notification server could not be reached or queried."""
