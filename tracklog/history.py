"""History database for recorded tracks and the last best location."""

import json
import sqlite3
from datetime import datetime
from typing import Optional

from .models import Fix, Track


class HistoryDB:
    """SQLite database for track summaries"""

    def __init__(self, db_path: str = "tracklog_history.db"):
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self._init_schema()

    def _init_schema(self):
        """Create database tables"""
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS tracks (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                started_at TEXT NOT NULL,
                ended_at TEXT,
                distance_meters REAL DEFAULT 0,
                duration_seconds REAL DEFAULT 0,
                step_count REAL DEFAULT 0,
                waypoints INTEGER DEFAULT 0,
                stopovers INTEGER DEFAULT 0,
                file_path TEXT
            )
        """)
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS last_location (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                fix TEXT NOT NULL,
                saved_at TEXT NOT NULL
            )
        """)
        self.conn.commit()

    def record_track(self, track: Track, file_path: Optional[str] = None) -> int:
        """Store a finished track's summary, return its ID"""
        summary = track.summary()
        cursor = self.conn.execute("""
            INSERT INTO tracks (started_at, ended_at, distance_meters, duration_seconds,
                                step_count, waypoints, stopovers, file_path)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            summary.recording_start.isoformat(),
            summary.recording_stop.isoformat(),
            summary.distance,
            summary.duration,
            summary.step_count,
            summary.waypoint_count,
            summary.stopovers,
            file_path,
        ))
        self.conn.commit()
        return cursor.lastrowid

    def get_tracks(self, limit: int = 20) -> list[dict]:
        """Most recent tracks first"""
        cursor = self.conn.execute("""
            SELECT id, started_at, ended_at, distance_meters, duration_seconds,
                   step_count, waypoints, stopovers, file_path
            FROM tracks ORDER BY started_at DESC, id DESC LIMIT ?
        """, (limit,))
        tracks = []
        for row in cursor.fetchall():
            tracks.append({
                "id": row[0],
                "started_at": row[1],
                "ended_at": row[2],
                "distance_meters": row[3],
                "duration_seconds": row[4],
                "step_count": row[5],
                "waypoints": row[6],
                "stopovers": row[7],
                "file_path": row[8],
            })
        return tracks

    def get_stats(self) -> dict:
        """Get overall recording stats"""
        cursor = self.conn.execute("""
            SELECT COUNT(*), SUM(distance_meters), SUM(duration_seconds)
            FROM tracks
        """)
        row = cursor.fetchone()
        return {
            "total_tracks": row[0] or 0,
            "total_distance_km": (row[1] or 0) / 1000,
            "total_duration_hours": (row[2] or 0) / 3600,
        }

    def save_last_location(self, fix: Fix):
        """Remember the best known fix across runs"""
        now = datetime.now().isoformat()
        self.conn.execute("""
            INSERT INTO last_location (id, fix, saved_at) VALUES (1, ?, ?)
            ON CONFLICT(id) DO UPDATE SET fix = excluded.fix, saved_at = excluded.saved_at
        """, (json.dumps(fix.to_dict()), now))
        self.conn.commit()

    def get_last_location(self) -> Optional[Fix]:
        cursor = self.conn.execute("SELECT fix FROM last_location WHERE id = 1")
        row = cursor.fetchone()
        if row:
            return Fix.from_dict(json.loads(row[0]))
        return None

    def close(self):
        self.conn.close()
