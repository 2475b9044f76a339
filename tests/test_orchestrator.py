import logging
import threading
from datetime import datetime, timezone

import pytest

from github_notifyd.capabilities import CapabilityVector, RenderProfile
from github_notifyd.enrichment import EnrichmentResolver
from github_notifyd.models import FetchResult, Urgency
from github_notifyd.orchestrator import PollOrchestrator, TickOutcome
from github_notifyd.renderer import AUTHORIZATION_ERROR, SUMMARY, UNDEFINED_ERROR
from tests.fakes import FakeClient, comment, feed_item, ok_json

FEED = "https://api.github.com/notifications"
MARKER = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
NEWER = datetime(2026, 10, 18, 12, 5, tzinfo=timezone.utc)


def make_orchestrator(client, presenter, profile, persistent=False):
    return PollOrchestrator(
        client=client,
        resolver=EnrichmentResolver(client, show_avatars=False),
        presenter=presenter,
        profile=profile,
        feed_url=FEED,
        interval_seconds=45,
        persistent=persistent,
    )


def test_single_notification_scenario(presenter, profile):
    client = FakeClient({
        FEED: ok_json([feed_item(comment_url="U")], marker=MARKER),
        "U": ok_json(comment(login="alice", user_id=7, avatar_url="http://a")),
    })
    orchestrator = make_orchestrator(client, presenter, profile)

    assert orchestrator.tick() is TickOutcome.DISPATCHED

    assert len(presenter.events) == 1
    event = presenter.events[0]
    assert event.summary == SUMMARY
    assert event.icon is None
    assert event.urgency is Urgency.NORMAL
    assert "r" in event.body and "PullRequest" in event.body
    assert "Fix bug" in event.body and "alice" in event.body
    assert orchestrator.last_modified == MARKER


def test_feed_fetch_is_conditioned_on_marker(presenter, profile):
    client = FakeClient({FEED: ok_json([], marker=NEWER)})
    orchestrator = make_orchestrator(client, presenter, profile)
    orchestrator.last_modified = MARKER

    orchestrator.tick()

    assert client.calls[0] == (FEED, True, MARKER)
    assert orchestrator.last_modified == NEWER


def test_well_formed_records_reach_presenter_in_order(presenter, profile, caplog):
    feed = [
        feed_item(title="one", comment_url="U1"),
        {"reason": "mention", "subject": {}},
        feed_item(title="two", comment_url="U2"),
        feed_item(title="three", comment_url="U3"),
        42,
    ]
    client = FakeClient({
        FEED: ok_json(feed),
        "U1": ok_json(comment()),
        "U2": ok_json(comment()),
        "U3": ok_json(comment()),
    })
    orchestrator = make_orchestrator(client, presenter, profile)

    with caplog.at_level(logging.WARNING):
        orchestrator.tick()

    titles = [event.body.split("Title:\t\t ")[1].split("\n")[0] for event in presenter.events]
    assert titles == ["one", "two", "three"]
    assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 2


def test_enrichment_failure_skips_only_that_record(presenter, profile):
    client = FakeClient({
        FEED: ok_json([
            feed_item(title="one", comment_url="U1"),
            feed_item(title="two", comment_url="U2"),
            feed_item(title="three", comment_url="U3"),
        ]),
        "U1": ok_json(comment()),
        "U2": FetchResult(body=None, status=0),
        "U3": ok_json(comment()),
    })
    orchestrator = make_orchestrator(client, presenter, profile)

    orchestrator.tick()

    assert len(presenter.events) == 2
    assert "three" in presenter.events[1].body


def test_not_modified_is_silent_and_keeps_marker(presenter, profile, caplog):
    client = FakeClient({FEED: FetchResult(body=None, status=304, marker=MARKER)})
    orchestrator = make_orchestrator(client, presenter, profile)
    orchestrator.last_modified = MARKER

    with caplog.at_level(logging.INFO):
        assert orchestrator.tick() is TickOutcome.NOT_MODIFIED

    assert presenter.events == []
    assert orchestrator.last_modified == MARKER
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


def test_unauthorized_shows_one_critical_event(presenter, profile):
    client = FakeClient({FEED: FetchResult(body=b'[{"reason": "x"}]', status=401)})
    orchestrator = make_orchestrator(client, presenter, profile)
    orchestrator.last_modified = MARKER

    assert orchestrator.tick() is TickOutcome.UNAUTHORIZED

    assert len(presenter.events) == 1
    assert presenter.events[0].summary == AUTHORIZATION_ERROR
    assert presenter.events[0].urgency is Urgency.CRITICAL
    assert orchestrator.last_modified == MARKER
    assert len(client.calls) == 1


@pytest.mark.parametrize("result", [
    FetchResult(body=None, status=0),
    FetchResult(body=None, status=500),
    FetchResult(body=None, status=403),
    FetchResult(body=b"{}", status=200),
    FetchResult(body=b"not json", status=200),
    FetchResult(body=b"[" * 200000, status=200),
])
def test_undefined_error_shows_one_critical_event(presenter, profile, result):
    orchestrator = make_orchestrator(FakeClient({FEED: result}), presenter, profile)

    assert orchestrator.tick() is TickOutcome.FAILED

    assert [event.summary for event in presenter.events] == [UNDEFINED_ERROR]
    assert presenter.events[0].urgency is Urgency.CRITICAL


def test_persistence_request_is_honoured_best_effort(presenter, caplog):
    client = FakeClient({FEED: ok_json([feed_item(comment_url="U")]), "U": ok_json(comment())})
    profile = RenderProfile(CapabilityVector(body=True, persistence=False))
    orchestrator = make_orchestrator(client, presenter, profile, persistent=True)

    with caplog.at_level(logging.INFO):
        orchestrator.tick()

    assert presenter.events[0].transient is False
    assert "doesn't support persistent notifications" in caplog.text


def test_ticks_are_independent(presenter, profile):
    client = FakeClient({FEED: ok_json([feed_item(comment_url="U")]), "U": ok_json(comment())})
    orchestrator = make_orchestrator(client, presenter, profile)

    orchestrator.tick()
    orchestrator.tick()

    assert len(presenter.events) == 2


def test_stop_interrupts_wait_immediately(presenter, profile):
    orchestrator = make_orchestrator(FakeClient(), presenter, profile)
    orchestrator.interval_seconds = 3600

    worker = threading.Thread(target=orchestrator.run)
    worker.start()
    orchestrator.stop()
    worker.join(timeout=5)

    assert not worker.is_alive()
    assert orchestrator.stopped
    assert presenter.events == []


def test_run_survives_unexpected_errors(presenter, profile, monkeypatch, caplog):
    orchestrator = make_orchestrator(FakeClient(), presenter, profile)
    orchestrator.interval_seconds = 0
    ticks = []

    def exploding_tick():
        ticks.append(1)
        if len(ticks) >= 2:
            orchestrator.stop()
        raise RuntimeError("boom")

    monkeypatch.setattr(orchestrator, "tick", exploding_tick)

    with caplog.at_level(logging.ERROR):
        orchestrator.run()

    assert len(ticks) == 2
    assert "Unexpected error while checking notifications" in caplog.text


def test_non_finite_user_id_skips_only_that_record(presenter, profile):
    client = FakeClient({
        FEED: ok_json([
            feed_item(title="one", comment_url="U1"),
            feed_item(title="two", comment_url="U2"),
        ]),
        "U1": FetchResult(body=b'{"user": {"login": "a", "id": 1e400, "avatar_url": "http://a"}}', status=200),
        "U2": ok_json(comment()),
    })
    orchestrator = make_orchestrator(client, presenter, profile)

    assert orchestrator.tick() is TickOutcome.DISPATCHED

    assert len(presenter.events) == 1
    assert "two" in presenter.events[0].body
