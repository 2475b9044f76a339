"""Notification server capabilities and the per-server quirks table.

Capability names follow the Desktop Notifications Specification:
https://specifications.freedesktop.org/notification-spec/latest/protocol.html
"""

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Sequence

logger = logging.getLogger(__name__)

CAP_BODY = "body"
CAP_BODY_HYPERLINKS = "body-hyperlinks"
CAP_BODY_MARKUP = "body-markup"
CAP_PERSISTENCE = "persistence"

NEWLINE = "\n"


@dataclass(frozen=True)
class CapabilityVector:
    body: bool = False
    body_hyperlinks: bool = False
    body_markup: bool = False
    persistence: bool = False

    @classmethod
    def from_server_caps(cls, caps: Iterable[str]) -> "CapabilityVector":
        """Build the vector from the strings returned by GetCapabilities."""
        caps = set(str(cap) for cap in caps)
        return cls(
            body=CAP_BODY in caps,
            body_hyperlinks=CAP_BODY_HYPERLINKS in caps,
            body_markup=CAP_BODY_MARKUP in caps,
            persistence=CAP_PERSISTENCE in caps,
        )


@dataclass(frozen=True)
class ServerIdentity:
    name: str
    vendor: str
    version: str
    spec_version: str = ""


@dataclass(frozen=True)
class Quirk:
    """
    Behavior override for one notification server implementation.

    ``name`` and ``vendor`` must match exactly; ``version`` is matched only
    when given.
    """
    description: str
    name: str
    vendor: str
    version: Optional[str] = None
    line_break: Optional[str] = None
    disable_hyperlinks: bool = False

    def matches(self, identity: ServerIdentity) -> bool:
        if identity.name != self.name or identity.vendor != self.vendor:
            return False
        return self.version is None or identity.version == self.version


QUIRKS = (
    Quirk(
        description="Plasma 1.0 does not understand '\\n' in the body",
        name="Plasma",
        vendor="KDE",
        version="1.0",
        line_break="<br/>",
    ),
    Quirk(
        description="xfce4-notifyd does not render body hyperlinks properly",
        name="Xfce Notify Daemon",
        vendor="Xfce",
        disable_hyperlinks=True,
    ),
)


@dataclass(frozen=True)
class RenderProfile:
    """Capabilities after quirks, plus the line-break token to use."""
    capabilities: CapabilityVector
    line_break: str = NEWLINE


def build_profile(
    capabilities: CapabilityVector,
    identity: ServerIdentity,
    quirks: Sequence[Quirk] = QUIRKS,
) -> RenderProfile:
    """Apply every matching quirk, in table order, to the negotiated capabilities."""
    line_break = NEWLINE
    for quirk in quirks:
        if not quirk.matches(identity):
            continue
        logger.info(f"Applying notification server quirk: {quirk.description}")
        if quirk.line_break is not None:
            line_break = quirk.line_break
        if quirk.disable_hyperlinks:
            capabilities = replace(capabilities, body_hyperlinks=False)
    return RenderProfile(capabilities=capabilities, line_break=line_break)
