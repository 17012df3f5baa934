"""Recording session: location feed -> arbiter -> track."""

import time
from typing import Optional

from .arbiter import Decision, LocationArbiter
from .audio import Audio
from .config import CONFIG
from .display import format_distance, format_duration, unit_system
from .geo import retry_with_backoff
from .gps import GPSPlayback, GPSRecorder, MultiProviderGPS
from .history import HistoryDB
from .logger import Logger
from .models import Fix, Waypoint
from .recorder import TrackRecorder
from .storage import save_track
from .visualize import create_track_map


class RecordingSession:
    """Owns the best known fix and the track being recorded.

    Fixes from every provider arrive through this object one at a time, so
    the arbiter state and the track each have a single writer.
    """

    def __init__(self, log_path: Optional[str] = None,
                 source=None,
                 logger: Optional[Logger] = None,
                 history: Optional[HistoryDB] = None,
                 output_path: Optional[str] = None,
                 html_output: Optional[str] = None,
                 country: Optional[str] = None,
                 announce: bool = False,
                 clock=time.time,
                 sleep=time.sleep):
        self.source = source if source is not None else MultiProviderGPS()
        self.logger = logger if logger is not None else Logger(log_path)
        self.history = history
        self.output_path = output_path  # JSON snapshot of the finished track
        self.html_output = html_output  # folium map of the finished track
        self.units = unit_system(country)
        self.audio = Audio(enabled=announce)
        self.clock = clock
        self.sleep = sleep

        self.arbiter = LocationArbiter()
        self.recorder = TrackRecorder()

        self.start_time: Optional[float] = None
        self.last_log_update = 0.0
        self.last_distance_milestone = 0
        self.finished = False

    @property
    def track(self):
        return self.recorder.track

    def set_gps_source(self, source):
        """Set fix source (MultiProviderGPS, GPSRecorder, or GPSPlayback)"""
        self.source = source

    def get_state(self) -> dict:
        """Get current state as dict for logging"""
        state = {
            "distance": round(self.recorder.track_length(), 1),
            "waypoints": self.recorder.waypoint_count(),
            "stopovers": self.track.stopover_count(),
            "accepted": self.arbiter.accepted_count,
            "rejected": self.arbiter.rejected_count,
            "gps_status": self.source.get_status() if hasattr(self.source, 'get_status') else "unknown",
        }
        best = self.arbiter.best_location
        if best:
            state["location"] = {
                "lat": best.lat,
                "lon": best.lon,
                "accuracy": best.accuracy,
                "provider": best.provider.value,
                "current": self.arbiter.is_current(best, self.clock()),
            }
        return state

    def periodic_update(self):
        """Handle periodic status updates"""
        now = self.clock()
        if now - self.last_log_update >= CONFIG["log_interval"]:
            self.logger.log("STATE", self.get_state())
            self.last_log_update = now

    def offer(self, fix: Fix) -> Optional[Waypoint]:
        """Offer a raw fix; returns the new waypoint when it was recorded"""
        decision: Decision = self.arbiter.offer(fix)
        self.logger.log_decision(fix, decision)
        if not decision.accepted:
            return None

        count = self.recorder.waypoint_count()
        previous = self.recorder.last_waypoint() if count else None
        was_stopover = previous.is_stopover if previous else False

        waypoint = self.recorder.add_fix(fix)

        if previous and previous.is_stopover and not was_stopover:
            self.logger.log("Stopover", {"waypoint": count - 1, "lat": previous.lat, "lon": previous.lon})

        self._announce_milestone()
        return waypoint

    def _check_distance_milestone(self) -> Optional[int]:
        """Check if a distance milestone was crossed. Returns total distance if so."""
        walked = int(self.recorder.track_length())
        interval = CONFIG["distance_milestone_interval"]
        current_milestone = (walked // interval) * interval
        if current_milestone > self.last_distance_milestone and current_milestone > 0:
            self.last_distance_milestone = current_milestone
            return walked
        return None

    def _announce_milestone(self):
        milestone = self._check_distance_milestone()
        if milestone is not None:
            message = self.audio.announce_distance(milestone, self.units)
            self.logger.log(f"AUDIO: {message}")

    def set_step_count(self, count: float):
        """Step count reported by an external pedometer"""
        self.recorder.set_step_count(count)

    def _seed_best_location(self):
        """Restore a remembered fix while it is still current.

        Replayed fixes carry the trace's own timestamps, so a live fix from
        history would outrank all of them; playback starts without one.
        """
        if not self.history or self.is_playback():
            return
        saved = self.history.get_last_location()
        if saved and self.arbiter.is_current(saved, self.clock()):
            self.arbiter.reset(saved)
            self.logger.log("Restored last location", saved.to_dict())

    def initialize(self) -> bool:
        """Wait for the first fix and start the recording"""
        self.logger.log("Initializing recording", {"providers": self.source.get_status()})
        self._seed_best_location()

        print("Getting location fix...")

        sleep = self.sleep
        if self.is_playback():
            # backoff delays follow the playback speed
            sleep = lambda seconds: self.sleep(seconds / self.source.speed)

        def try_fix():
            fixes = self.source.get_fixes()
            if fixes:
                self.logger.log("Location fix obtained", {"fixes": len(fixes)})
            else:
                self.logger.log("Location attempt failed")
            return fixes

        fixes = retry_with_backoff(
            try_fix,
            max_time=30.0,
            initial_delay=1.0,
            max_delay=8.0,
            description="location fix",
            sleep=sleep,
            clock=self.clock,
            stop=self.is_playback_finished,
        )

        self.start_time = self.clock()
        self.last_log_update = self.start_time

        if not fixes:
            last_known = self.source.get_last_known() if hasattr(self.source, "get_last_known") else None
            if last_known and self.arbiter.is_current(last_known, self.clock()):
                self.arbiter.offer(last_known)
                self.logger.log("Using last known location", last_known.to_dict())
                return True
            self.logger.log("Could not get location after retries")
            print("Could not get location")
            return False

        for fix in fixes:
            self.offer(fix)
        self.logger.log("Recording started", {"waypoints": self.recorder.waypoint_count()})
        return True

    def update(self) -> bool:
        """Main update loop - returns False when recording should stop"""
        self.periodic_update()

        fixes = self.source.get_fixes()
        if not fixes:
            self.logger.log("Location fix failed", {"status": self.source.get_status() if hasattr(self.source, 'get_status') else "unknown"})
        for fix in fixes:
            self.offer(fix)

        self.recorder.set_duration(self.clock() - self.start_time)
        return True

    def get_poll_interval(self) -> float:
        """Get poll interval, respecting playback speed if applicable"""
        if self.is_playback():
            return self.source.get_poll_interval()
        return CONFIG["gps_poll_interval"]

    def is_playback(self) -> bool:
        return isinstance(self.source, GPSPlayback)

    def is_playback_finished(self) -> bool:
        """Check if playback is complete"""
        if self.is_playback():
            return self.source.is_finished()
        return False

    def finish(self) -> dict:
        """End the recording, write outputs and return the summary"""
        if self.finished:
            return self._summary_dict()
        self.finished = True

        if self.start_time is not None:
            self.recorder.set_duration(self.clock() - self.start_time)
        self.recorder.end_recording()

        if self.output_path:
            save_track(self.track, self.output_path)
            print(f"Track saved to {self.output_path}")

        if self.html_output and self.recorder.waypoint_count():
            create_track_map(self.track, self.html_output, self.units)

        if self.history:
            if self.recorder.waypoint_count():
                self.history.record_track(self.track, self.output_path)
            # a replayed fix is not where the device is now
            if self.arbiter.best_location and not self.is_playback():
                self.history.save_last_location(self.arbiter.best_location)

        # Save raw trace if applicable
        if isinstance(self.source, GPSRecorder):
            self.source.save()

        summary = self._summary_dict()
        self.logger.log("Recording summary", summary)

        print(f"\nRecording summary:")
        print(f"  Distance: {format_distance(summary['distance'], self.units)}")
        print(f"  Duration: {format_duration(summary['duration'])}")
        print(f"  Waypoints: {summary['waypoints']} ({summary['stopovers']} stopovers)")
        return summary

    def _summary_dict(self) -> dict:
        summary = self.track.summary()
        return {
            "distance": summary.distance,
            "duration": summary.duration,
            "waypoints": summary.waypoint_count,
            "stopovers": summary.stopovers,
            "step_count": summary.step_count,
            "recording_start": summary.recording_start.isoformat(),
            "recording_stop": summary.recording_stop.isoformat(),
        }

    def run(self) -> dict:
        """Record until interrupted or playback ends"""
        print(f"\n=== Tracklog ===")
        if self.is_playback():
            print(f"Playback mode: {self.source.speed}x speed")
        print("Press Ctrl+C to stop")
        print()

        try:
            if not self.initialize():
                return self.finish()
            while self.update():
                if self.is_playback_finished():
                    print("\nPlayback finished")
                    self.logger.log("Playback finished")
                    break
                self.sleep(self.get_poll_interval())
        except KeyboardInterrupt:
            print("\nRecording interrupted")
            self.logger.log("Recording interrupted by user")
        finally:
            summary = self.finish()
            if self.history:
                self.history.close()
            self.logger.close()
        return summary
