"""JSON snapshots of recorded tracks."""

import json
from datetime import datetime

from .errors import TraceFormatError
from .models import Track


def save_track(track: Track, path: str):
    """Write a track snapshot to a JSON file"""
    with open(path, "w") as f:
        json.dump({
            "saved_at": datetime.now().isoformat(),
            "track": track.to_dict()
        }, f, indent=2)


def load_track(path: str) -> Track:
    """Read a track snapshot written by save_track"""
    with open(path) as f:
        try:
            data = json.load(f)
            return Track.from_dict(data["track"])
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise TraceFormatError(f"Invalid track file {path}: {e}") from e
