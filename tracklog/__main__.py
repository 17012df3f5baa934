#!/usr/bin/env python3
"""
Tracklog - Movement recorder

Usage:
    python -m tracklog [options]

Options:
    --record FILE     Record raw location fixes to JSON file for debugging
    --playback FILE   Playback raw fixes from JSON file
    --speed FACTOR    Playback speed multiplier (default: 1.0)
    --providers LIST  Comma-separated location providers (default: gps,network)
    --log FILE        Log file path (default: tracklog_TIMESTAMP.log)
    --output FILE     Save the finished track as JSON
    --html FILE       Save a map of the finished track as HTML
    --country CODE    Country code for display units (e.g. US for imperial)
    --announce        Speak distance milestones
    --db FILE         History database (default: tracklog_history.db)
    --history         Print recorded tracks and exit
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path

from .display import format_distance, format_duration, unit_system
from .gps import GPSPlayback, GPSRecorder, MultiProviderGPS
from .history import HistoryDB
from .models import Provider
from .session import RecordingSession


def _print_history(history: HistoryDB, country):
    """Print stored track summaries"""
    units = unit_system(country)
    tracks = history.get_tracks()
    if not tracks:
        print("No recorded tracks.")
        return
    for t in tracks:
        print(f"{t['started_at'][:16]}  "
              f"{format_distance(t['distance_meters'] or 0, units):>9}  "
              f"{format_duration(t['duration_seconds'] or 0):>8}  "
              f"{t['waypoints']} waypoints, {t['stopovers']} stopovers")
    stats = history.get_stats()
    print(f"\n{stats['total_tracks']} tracks, {stats['total_distance_km']:.2f} km total")


def _parse_providers(value: str) -> list[str]:
    names = [name.strip() for name in value.split(",") if name.strip()]
    valid = {p.value for p in Provider}
    for name in names:
        if name not in valid:
            raise argparse.ArgumentTypeError(
                f"unknown provider {name!r} (choose from {', '.join(sorted(valid))})"
            )
    if not names:
        raise argparse.ArgumentTypeError("at least one provider is required")
    return names


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Tracklog - Movement recorder"
    )
    parser.add_argument("--record", metavar="FILE",
                        help="Record raw location fixes to JSON file")
    parser.add_argument("--playback", metavar="FILE",
                        help="Playback raw location fixes from JSON file")
    parser.add_argument("--speed", type=float, default=1.0,
                        help="Playback speed multiplier (default: 1.0)")
    parser.add_argument("--providers", type=_parse_providers, default=None,
                        help="Comma-separated location providers (default: gps,network)")
    parser.add_argument("--log", metavar="FILE",
                        help="Log file path (default: tracklog_TIMESTAMP.log)")
    parser.add_argument("--output", metavar="FILE",
                        help="Save the finished track as JSON")
    parser.add_argument("--html", metavar="FILE",
                        help="Save a map of the finished track as HTML")
    parser.add_argument("--country", metavar="CODE",
                        help="Country code for display units")
    parser.add_argument("--announce", action="store_true",
                        help="Speak distance milestones")
    parser.add_argument("--db", metavar="FILE", default="tracklog_history.db",
                        help="History database (default: tracklog_history.db)")
    parser.add_argument("--history", action="store_true",
                        help="Print recorded tracks and exit")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.record and args.playback:
        parser.error("--record and --playback cannot be used together")

    history = HistoryDB(args.db)

    # History listing: early exit
    if args.history:
        _print_history(history, args.country)
        history.close()
        return

    # Determine log path
    log_path = args.log
    if not log_path:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_path = f"tracklog_{timestamp}.log"

    # Set up fix source
    if args.playback:
        if not Path(args.playback).exists():
            print(f"Playback file not found: {args.playback}")
            history.close()
            sys.exit(1)
        source = GPSPlayback(args.playback, args.speed)
    else:
        source = MultiProviderGPS(args.providers)
        if args.record:
            source = GPSRecorder(source, args.record)

    session = RecordingSession(
        log_path=log_path,
        source=source,
        history=history,
        output_path=args.output,
        html_output=args.html,
        country=args.country,
        announce=args.announce,
    )
    session.run()


if __name__ == "__main__":
    main()
