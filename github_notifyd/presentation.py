"""Notification server interface and its D-Bus implementation."""

import logging
from abc import ABC, abstractmethod
from typing import Tuple

from .capabilities import CapabilityVector, ServerIdentity
from .errors import PresentationError
from .models import PresentationEvent

logger = logging.getLogger(__name__)

APP_NAME = "GitHub Notifications Daemon"

BUS_NAME = "org.freedesktop.Notifications"
OBJECT_PATH = "/org/freedesktop/Notifications"
INTERFACE = "org.freedesktop.Notifications"


class Presenter(ABC):
    """Abstract base class for notification servers."""

    @abstractmethod
    def negotiate(self) -> Tuple[CapabilityVector, ServerIdentity]:
        """
        Query what the server supports and who it is.

        Raises:
            PresentationError: If the server cannot be queried.
        """

    @abstractmethod
    def show(self, event: PresentationEvent) -> None:
        """Display one event."""


class DBusPresenter(Presenter):
    """Talks to the freedesktop notification server over the session bus."""

    def __init__(self, app_name: str = APP_NAME):
        """
        Connect to the session bus.

        Raises:
            PresentationError: If dbus-python is missing or the bus is unreachable.
        """
        try:
            import dbus
        except ImportError as e:
            raise PresentationError(
                "dbus-python not installed. Install with: pip install 'github-notifyd[desktop]'"
            ) from e

        self.dbus = dbus
        self.app_name = app_name
        try:
            bus = dbus.SessionBus()
            proxy = bus.get_object(BUS_NAME, OBJECT_PATH)
            self.interface = dbus.Interface(proxy, INTERFACE)
        except dbus.exceptions.DBusException as e:
            raise PresentationError(f"Cannot connect to notification server: {e}") from e

    def negotiate(self) -> Tuple[CapabilityVector, ServerIdentity]:
        try:
            caps = self.interface.GetCapabilities()
        except self.dbus.exceptions.DBusException as e:
            raise PresentationError(f"Failed to obtain server caps: {e}") from e

        try:
            name, vendor, version, spec_version = self.interface.GetServerInformation()
        except self.dbus.exceptions.DBusException as e:
            raise PresentationError(f"Failed to receive info about notification server: {e}") from e

        identity = ServerIdentity(
            name=str(name),
            vendor=str(vendor),
            version=str(version),
            spec_version=str(spec_version),
        )
        return CapabilityVector.from_server_caps(caps), identity

    def show(self, event: PresentationEvent) -> None:
        dbus = self.dbus
        hints = {"urgency": dbus.Byte(event.urgency.value)}
        if event.transient:
            hints["transient"] = dbus.Boolean(True)

        try:
            self.interface.Notify(
                self.app_name,
                dbus.UInt32(0),
                event.icon or "",
                event.summary,
                event.body,
                dbus.Array([], signature="s"),
                dbus.Dictionary(hints, signature="sv"),
                dbus.Int32(event.timeout),
            )
        except dbus.exceptions.DBusException as e:
            logger.error(f"Failed to show notification '{event.summary}': {e}")
