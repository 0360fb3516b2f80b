from vibesync.realtime.typing_state import TYPING_TIMEOUT
from vibesync.realtime.typing_state import TypingTracker

from .fakes import FakeScheduler


def make_tracker():
    expired = []
    scheduler = FakeScheduler()
    tracker = TypingTracker(
        lambda *args: expired.append(args),
        timeout=TYPING_TIMEOUT,
        scheduler=scheduler,
    )
    return tracker, scheduler, expired


def test_default_timeout_is_three_seconds():
    assert TYPING_TIMEOUT == 3.0  # noqa: PLR2004


def test_start_reports_only_the_idle_to_typing_edge():
    tracker, _, _ = make_tracker()

    assert tracker.start("1-2", 1, "s1") is True
    assert tracker.start("1-2", 1, "s1") is False
    assert tracker.is_typing("1-2", 1)


def test_expires_after_timeout_without_refresh():
    tracker, scheduler, expired = make_tracker()
    tracker.start("1-2", 1, "s1")

    scheduler.advance(2.9)
    assert expired == []

    scheduler.advance(0.1)
    assert expired == [("1-2", 1, "s1")]
    assert not tracker.is_typing("1-2", 1)


def test_refresh_resets_the_timer():
    tracker, scheduler, expired = make_tracker()
    tracker.start("1-2", 1, "s1")
    scheduler.advance(2)
    tracker.start("1-2", 1, "s1")
    scheduler.advance(2)

    assert expired == []
    assert scheduler.pending == 1

    scheduler.advance(1)
    assert expired == [("1-2", 1, "s1")]


def test_explicit_stop_cancels_expiry():
    tracker, scheduler, expired = make_tracker()
    tracker.start("1-2", 1)

    assert tracker.stop("1-2", 1) is True
    assert tracker.stop("1-2", 1) is False
    scheduler.advance(10)
    assert expired == []


def test_users_are_tracked_independently():
    tracker, scheduler, expired = make_tracker()
    tracker.start("1-2", 1)
    scheduler.advance(1)
    tracker.start("1-2", 2)
    scheduler.advance(2)

    assert expired == [("1-2", 1, None)]
    assert tracker.is_typing("1-2", 2)


def test_cancel_owned_by_does_not_fire_expiry():
    tracker, scheduler, expired = make_tracker()
    tracker.start("1-2", 1, "s1")
    tracker.start("1-3", 1, "s1")
    tracker.start("1-2", 2, "s2")

    keys = tracker.cancel_owned_by("s1")

    assert sorted(keys) == [("1-2", 1), ("1-3", 1)]
    scheduler.advance(10)
    assert expired == [("1-2", 2, "s2")]


def test_clear_cancels_everything():
    tracker, scheduler, expired = make_tracker()
    tracker.start("1-2", 1)
    tracker.start("1-3", 1)

    tracker.clear()
    scheduler.advance(10)

    assert expired == []
    assert not tracker.is_typing("1-2", 1)
