"""Tracklog - Movement recorder with location arbitration and stopover detection."""

from .config import CONFIG
from .errors import (
    TracklogError,
    EmptyTrackError,
    WaypointIndexError,
    TrackFinalizedError,
    TraceFormatError,
)
from .models import Provider, Fix, Waypoint, Track, TrackSummary
from .logger import Logger
from .geo import haversine_distance, distance_between, retry_with_backoff
from .arbiter import (
    Decision,
    LocationArbiter,
    decide,
    is_better_location,
    is_current_location,
    best_of,
)
from .recorder import TrackRecorder, add_fix, end_recording, is_stopover
from .gps import GPS, MultiProviderGPS, GPSRecorder, GPSPlayback, determine_last_known_location
from .history import HistoryDB
from .storage import save_track, load_track
from .display import unit_system, format_distance, format_duration
from .audio import Audio
from .session import RecordingSession
from .__main__ import main

__all__ = [
    "CONFIG",
    "TracklogError",
    "EmptyTrackError",
    "WaypointIndexError",
    "TrackFinalizedError",
    "TraceFormatError",
    "Provider",
    "Fix",
    "Waypoint",
    "Track",
    "TrackSummary",
    "Logger",
    "haversine_distance",
    "distance_between",
    "retry_with_backoff",
    "Decision",
    "LocationArbiter",
    "decide",
    "is_better_location",
    "is_current_location",
    "best_of",
    "TrackRecorder",
    "add_fix",
    "end_recording",
    "is_stopover",
    "GPS",
    "MultiProviderGPS",
    "GPSRecorder",
    "GPSPlayback",
    "determine_last_known_location",
    "HistoryDB",
    "save_track",
    "load_track",
    "unit_system",
    "format_distance",
    "format_duration",
    "Audio",
    "RecordingSession",
    "main",
]
