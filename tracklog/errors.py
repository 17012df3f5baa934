"""Error types used across Tracklog."""


class TracklogError(RuntimeError):
    """Base error for track recording failures."""


class EmptyTrackError(TracklogError):
    """Raised when distance or endpoint waypoints are requested from an empty track."""


class WaypointIndexError(TracklogError, IndexError):
    """Raised when a waypoint index is outside the recorded range."""


class TrackFinalizedError(TracklogError):
    """Raised when a fix is added to a track whose recording has ended."""


class TraceFormatError(TracklogError):
    """Raised when a recorded trace or saved track file cannot be parsed."""


__all__ = [
    "TracklogError",
    "EmptyTrackError",
    "WaypointIndexError",
    "TrackFinalizedError",
    "TraceFormatError",
]
