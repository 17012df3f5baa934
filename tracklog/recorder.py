"""Incremental track recording from accepted fixes."""

from datetime import datetime
from typing import Optional

from .config import CONFIG
from .errors import TrackFinalizedError
from .geo import distance_between
from .models import Fix, Track, Waypoint


def is_stopover(previous: Fix, fix: Fix,
                radius: Optional[float] = None,
                interval: Optional[float] = None) -> bool:
    """Check whether the device stayed put between two consecutive recorded fixes.

    Stationary means the new fix lies within ``radius`` meters of the
    previous one, or that no fix was recorded for at least ``interval``
    seconds.
    """
    if radius is None:
        radius = CONFIG["stopover_radius"]
    if interval is None:
        interval = CONFIG["stopover_interval"]

    if distance_between(previous, fix) <= radius:
        return True
    return fix.timestamp - previous.timestamp >= interval


def add_fix(track: Track, fix: Fix,
            stopover_radius: Optional[float] = None,
            stopover_interval: Optional[float] = None) -> Waypoint:
    """Append a fix to the track and return the new waypoint.

    When the track already holds two or more waypoints and the new fix shows
    no movement away from the newest one, that newest waypoint is flagged as
    a stopover. The returned waypoint always starts as a non-stopover.
    """
    if track.finalized:
        raise TrackFinalizedError("cannot add fixes after recording has ended")

    count = len(track.waypoints)
    segment_distance = 0.0
    if count >= 1:
        segment_distance = distance_between(track.waypoints[-1].fix, fix)
    total = track.total_distance + segment_distance

    if count >= 2:
        last = track.waypoints[-1]
        if is_stopover(last.fix, fix, stopover_radius, stopover_interval):
            last.is_stopover = True

    waypoint = Waypoint(fix=fix, is_stopover=False, distance_from_start=total)
    track.waypoints.append(waypoint)
    track.total_distance = total
    return waypoint


def end_recording(track: Track, now: Optional[datetime] = None):
    """Stamp the recording stop time; calling again moves it forward"""
    if now is None:
        now = datetime.now()
    track.recording_stop = max(now, track.recording_start)
    track.finalized = True


class TrackRecorder:
    """Owns a Track and folds accepted fixes into it"""

    def __init__(self, track: Optional[Track] = None,
                 stopover_radius: Optional[float] = None,
                 stopover_interval: Optional[float] = None):
        self.track = track if track is not None else Track()
        self.stopover_radius = (
            CONFIG["stopover_radius"] if stopover_radius is None else stopover_radius
        )
        self.stopover_interval = (
            CONFIG["stopover_interval"] if stopover_interval is None else stopover_interval
        )

    def add_fix(self, fix: Fix) -> Waypoint:
        return add_fix(self.track, fix, self.stopover_radius, self.stopover_interval)

    def end_recording(self, now: Optional[datetime] = None):
        end_recording(self.track, now)

    def set_duration(self, seconds: float):
        self.track.duration = seconds

    def set_step_count(self, count: float):
        self.track.step_count = count

    def track_length(self) -> float:
        return self.track.track_length()

    def waypoint_count(self) -> int:
        return self.track.waypoint_count()

    def waypoint_at(self, index: int) -> Waypoint:
        return self.track.waypoint_at(index)

    def first_waypoint(self) -> Waypoint:
        return self.track.first_waypoint()

    def last_waypoint(self) -> Waypoint:
        return self.track.last_waypoint()
