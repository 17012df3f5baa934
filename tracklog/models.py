"""Data classes for Tracklog."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from .errors import EmptyTrackError, WaypointIndexError


class Provider(str, Enum):
    """Source of a location fix"""
    GPS = "gps"
    NETWORK = "network"
    PASSIVE = "passive"


@dataclass(frozen=True)
class Fix:
    lat: float
    lon: float
    accuracy: Optional[float] = None  # meters, None when the provider did not report it
    provider: Provider = Provider.GPS
    timestamp: float = 0.0  # seconds

    def to_dict(self) -> dict:
        return {
            "lat": self.lat,
            "lon": self.lon,
            "accuracy": self.accuracy,
            "provider": self.provider.value,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Fix":
        return cls(
            lat=d["lat"],
            lon=d["lon"],
            accuracy=d.get("accuracy"),
            provider=Provider(d.get("provider", Provider.GPS.value)),
            timestamp=d.get("timestamp") or 0.0,
        )


@dataclass
class Waypoint:
    """A recorded fix with its position along the track"""
    fix: Fix
    is_stopover: bool = False
    distance_from_start: float = 0.0  # meters

    @property
    def lat(self) -> float:
        return self.fix.lat

    @property
    def lon(self) -> float:
        return self.fix.lon

    def to_dict(self) -> dict:
        return {
            "fix": self.fix.to_dict(),
            "is_stopover": self.is_stopover,
            "distance_from_start": self.distance_from_start,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Waypoint":
        return cls(
            fix=Fix.from_dict(d["fix"]),
            is_stopover=bool(d.get("is_stopover", False)),
            distance_from_start=d.get("distance_from_start", 0.0),
        )


@dataclass(frozen=True)
class TrackSummary:
    """Read-only snapshot of a track for display and storage"""
    waypoint_count: int
    distance: float  # meters
    duration: float  # seconds
    step_count: float
    recording_start: datetime
    recording_stop: datetime
    stopovers: int


@dataclass
class Track:
    """Ordered waypoints plus running totals.

    Waypoints are append-only. The only in-place change ever made to a
    recorded waypoint is flipping ``is_stopover`` on the newest one when the
    next fix shows the device did not move away from it.
    """
    waypoints: list[Waypoint] = field(default_factory=list)
    total_distance: float = 0.0  # meters
    duration: float = 0.0  # seconds
    step_count: float = 0.0
    recording_start: datetime = field(default_factory=datetime.now)
    recording_stop: Optional[datetime] = None
    finalized: bool = False

    def __post_init__(self):
        if self.recording_stop is None:
            self.recording_stop = self.recording_start

    def track_length(self) -> float:
        return self.total_distance

    def waypoint_count(self) -> int:
        return len(self.waypoints)

    def waypoint_at(self, index: int) -> Waypoint:
        """Get waypoint by position, raising WaypointIndexError when out of range"""
        if not 0 <= index < len(self.waypoints):
            raise WaypointIndexError(
                f"waypoint index {index} out of range for track of {len(self.waypoints)}"
            )
        return self.waypoints[index]

    def first_waypoint(self) -> Waypoint:
        if not self.waypoints:
            raise EmptyTrackError("track has no waypoints")
        return self.waypoints[0]

    def last_waypoint(self) -> Waypoint:
        if not self.waypoints:
            raise EmptyTrackError("track has no waypoints")
        return self.waypoints[-1]

    def track_distance(self) -> float:
        """Distance covered up to the newest waypoint, in meters"""
        return self.last_waypoint().distance_from_start

    def stopover_count(self) -> int:
        return sum(1 for wp in self.waypoints if wp.is_stopover)

    def summary(self) -> TrackSummary:
        return TrackSummary(
            waypoint_count=len(self.waypoints),
            distance=self.total_distance,
            duration=self.duration,
            step_count=self.step_count,
            recording_start=self.recording_start,
            recording_stop=self.recording_stop,
            stopovers=self.stopover_count(),
        )

    def to_dict(self) -> dict:
        return {
            "waypoints": [wp.to_dict() for wp in self.waypoints],
            "total_distance": self.total_distance,
            "duration": self.duration,
            "step_count": self.step_count,
            "recording_start": self.recording_start.isoformat(),
            "recording_stop": self.recording_stop.isoformat(),
            "finalized": self.finalized,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Track":
        start = datetime.fromisoformat(d["recording_start"])
        stop = d.get("recording_stop")
        return cls(
            waypoints=[Waypoint.from_dict(wp) for wp in d.get("waypoints", [])],
            total_distance=d.get("total_distance", 0.0),
            duration=d.get("duration", 0.0),
            step_count=d.get("step_count", 0.0),
            recording_start=start,
            recording_stop=datetime.fromisoformat(stop) if stop else start,
            finalized=bool(d.get("finalized", False)),
        )
