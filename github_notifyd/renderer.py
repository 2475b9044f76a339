"""Formatting of notifications for the notification server."""

from html import escape

from .capabilities import RenderProfile
from .models import Notification, PresentationEvent, Urgency

SUMMARY = "You have received a new GitHub Notification"
AUTHORIZATION_ERROR = "'github-notifyd' authorization error - please check access token value"
UNDEFINED_ERROR = "'github-notifyd' undefined error - please check the logs for more information"

TAG_BOLD = "<b>"
TAG_BOLD_END = "</b>"


def render_body(notification: Notification, profile: RenderProfile) -> str:
    """Build the body text, or an empty string if the server shows summaries only."""
    caps = profile.capabilities
    if not caps.body:
        return ""

    bold, bold_end = (TAG_BOLD, TAG_BOLD_END) if caps.body_markup else ("", "")

    def value(text: str) -> str:
        if caps.body_markup or caps.body_hyperlinks:
            return escape(text, quote=False)
        return text

    lines = [
        f"{bold}Repository:{bold_end}\t {value(notification.repository)}",
        f"{bold}Type:{bold_end}\t\t {value(notification.type)}",
        f"{bold}Title:{bold_end}\t\t {value(notification.title)}",
        f"{bold}User:{bold_end}\t\t {value(notification.user)}",
    ]
    if caps.body_hyperlinks:
        href = escape(notification.repository_url, quote=True)
        lines.append(f'{bold}Link:{bold_end}\t\t <a href="{href}">Link to Repository</a>')

    return profile.line_break.join(lines)


def render(notification: Notification, profile: RenderProfile, persistent: bool = False) -> PresentationEvent:
    """Turn a notification into an event for the notification server."""
    return PresentationEvent(
        summary=SUMMARY,
        body=render_body(notification, profile),
        icon=notification.avatar,
        urgency=Urgency.NORMAL,
        transient=not persistent,
    )


def error_event(unauthorized: bool) -> PresentationEvent:
    """Critical event reporting a failed feed check."""
    return PresentationEvent(
        summary=AUTHORIZATION_ERROR if unauthorized else UNDEFINED_ERROR,
        urgency=Urgency.CRITICAL,
    )
