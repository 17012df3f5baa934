import pytest

from tracklog.audio import Audio
from tracklog.gps import GPSPlayback
from tracklog.history import HistoryDB
from tracklog.logger import Logger
from tracklog.models import Provider
from tracklog.session import RecordingSession
from tracklog.storage import load_track

from conftest import FakeClock, make_fix


def _entries():
    return [
        [make_fix(0.0, 0.0, accuracy=10.0, t=1000.0)],
        [
            make_fix(0.0, 0.001, accuracy=10.0, t=1010.0),
            # newer but far less accurate, from another provider
            make_fix(0.0, 0.0011, accuracy=500.0, provider=Provider.NETWORK, t=1011.0),
        ],
        [make_fix(0.0, 0.001, accuracy=8.0, t=1020.0)],
        [],
    ]


class Messages:
    def __init__(self):
        self.items = []

    def __call__(self, message, data=None):
        self.items.append((message, data))

    def names(self):
        return [m for m, _ in self.items]


@pytest.fixture
def session_factory(tmp_path, trace_writer, fake_clock):
    def _make(entries=None, **kwargs):
        kwargs.setdefault("clock", fake_clock)
        path = trace_writer(entries if entries is not None else _entries())
        messages = Messages()
        session = RecordingSession(
            source=GPSPlayback(path),
            logger=Logger(callback=messages, echo=False),
            sleep=lambda seconds: None,
            **kwargs,
        )
        return session, messages
    return _make


def test_playback_run_builds_track(session_factory, tmp_path):
    output = tmp_path / "track.json"
    history = HistoryDB(str(tmp_path / "history.db"))
    session, messages = session_factory(history=history, output_path=str(output))

    summary = session.run()

    track = session.track
    assert track.waypoint_count() == 3
    assert track.finalized
    assert track.waypoint_at(1).is_stopover
    assert not track.waypoint_at(2).is_stopover
    assert track.track_length() == pytest.approx(111.19, abs=0.1)
    assert track.duration > 0

    assert session.arbiter.rejected_count == 1
    assert session.arbiter.best_location.accuracy == 8.0

    assert summary["waypoints"] == 3
    assert summary["stopovers"] == 1
    assert "Fix rejected" in messages.names()
    assert "Stopover" in messages.names()
    assert "Playback finished" in messages.names()
    assert messages.names()[-1] == "Recording summary"

    saved = load_track(str(output))
    assert saved.waypoint_count() == 3
    assert saved.waypoint_at(1).is_stopover

    reopened = HistoryDB(str(tmp_path / "history.db"))
    tracks = reopened.get_tracks()
    assert len(tracks) == 1
    assert tracks[0]["waypoints"] == 3
    assert tracks[0]["stopovers"] == 1
    assert tracks[0]["file_path"] == str(output)
    # replayed fixes never replace the remembered live location
    assert reopened.get_last_location() is None
    reopened.close()


def test_rejected_fixes_never_reach_the_track(session_factory):
    session, _ = session_factory()
    assert session.initialize()
    session.update()

    providers = [wp.fix.provider for wp in session.track.waypoints]
    assert providers == [Provider.GPS, Provider.GPS]


def test_initialize_fails_without_any_fix(session_factory, monkeypatch):
    session, messages = session_factory(entries=[])

    def single_attempt(func, **kwargs):
        return func() or None

    monkeypatch.setattr("tracklog.session.retry_with_backoff", single_attempt)
    assert not session.initialize()
    assert "Could not get location after retries" in messages.names()
    assert session.track.waypoint_count() == 0


def test_finish_is_idempotent(session_factory):
    session, _ = session_factory()
    session.initialize()
    first = session.finish()
    second = session.finish()
    assert first == second


def test_distance_milestones_are_announced(session_factory):
    spoken = []
    Audio.set_callback(spoken.append)
    try:
        entries = [[make_fix(0.0, 0.001 * i, t=1000.0 + 10 * i)] for i in range(6)]
        session, _ = session_factory(entries=entries, country="US")
        session.run()
    finally:
        Audio.set_callback(None)

    # 5 * 111 m = 556 m: milestones at 250 and 500
    assert len(spoken) == 2
    assert all(text.endswith("ft") for text in spoken)


def test_set_step_count_reaches_track(session_factory):
    session, _ = session_factory()
    session.set_step_count(420)
    assert session.track.step_count == 420


class ScriptedFeed:
    """Live-style feed returning queued fix batches, then nothing"""

    def __init__(self, batches=(), last_known=None):
        self.batches = list(batches)
        self.last_known = last_known

    def get_fixes(self, timeout=None):
        return self.batches.pop(0) if self.batches else []

    def get_last_known(self):
        return self.last_known

    def get_status(self):
        return "scripted"


def _live_session(feed, **kwargs):
    messages = Messages()
    kwargs.setdefault("clock", FakeClock())
    session = RecordingSession(
        source=feed,
        logger=Logger(callback=messages, echo=False),
        sleep=lambda seconds: None,
        **kwargs,
    )
    return session, messages


def _history_with(tmp_path, fix):
    history = HistoryDB(str(tmp_path / "history.db"))
    history.save_last_location(fix)
    return history


def test_playback_ignores_recent_live_location(session_factory, tmp_path):
    # live fix saved 5 s ago; the trace was recorded ten minutes earlier
    history = _history_with(tmp_path, make_fix(1.0, 1.0, accuracy=5.0, t=9_995.0))
    entries = [[make_fix(0.0, 0.001 * i, t=9_400.0 + 10 * i)] for i in range(5)]
    session, messages = session_factory(entries=entries, history=history,
                                        clock=FakeClock(start=10_000.0))

    session.run()

    assert session.track.waypoint_count() == 5
    assert session.arbiter.rejected_count == 0
    assert "Restored last location" not in messages.names()

    reopened = HistoryDB(str(tmp_path / "history.db"))
    assert reopened.get_last_location().timestamp == 9_995.0
    reopened.close()


def test_stale_saved_location_is_ignored(tmp_path):
    history = _history_with(tmp_path, make_fix(1.0, 1.0, accuracy=5.0, t=-500.0))
    first = make_fix(0.0, 0.0, accuracy=30.0, t=5.0)
    session, messages = _live_session(ScriptedFeed([[first]]), history=history)

    assert session.initialize()
    assert "Restored last location" not in messages.names()
    assert session.arbiter.best_location == first
    assert session.track.waypoint_count() == 1
    history.close()


def test_current_saved_location_seeds_arbiter_only(tmp_path):
    saved = make_fix(1.0, 1.0, accuracy=5.0, t=-5.0)
    history = _history_with(tmp_path, saved)
    session, messages = _live_session(ScriptedFeed(), history=history)

    assert not session.initialize()
    assert "Restored last location" in messages.names()
    assert session.arbiter.best_location == saved
    assert session.track.waypoint_count() == 0
    history.close()


def test_current_last_known_location_starts_recording_without_waypoint():
    last_known = make_fix(0.0, 0.0, accuracy=40.0, provider=Provider.NETWORK, t=10.0)
    session, messages = _live_session(ScriptedFeed(last_known=last_known))

    assert session.initialize()
    assert "Using last known location" in messages.names()
    assert session.arbiter.best_location == last_known
    assert session.track.waypoint_count() == 0


def test_stale_last_known_location_is_refused():
    last_known = make_fix(0.0, 0.0, accuracy=40.0, t=-1000.0)
    session, messages = _live_session(ScriptedFeed(last_known=last_known))

    assert not session.initialize()
    assert "Could not get location after retries" in messages.names()
    assert session.arbiter.best_location is None
    assert session.track.waypoint_count() == 0


def test_empty_trace_gives_up_when_exhausted(session_factory):
    session, messages = session_factory(entries=[[], [], []])
    assert not session.initialize()
    assert session.source.is_finished()
    assert messages.names().count("Location attempt failed") == 3
