"""Location feeds: Termux providers and trace recording/playback."""

import json
import subprocess
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Optional

from .arbiter import best_of
from .config import CONFIG
from .errors import TraceFormatError
from .models import Fix, Provider


def parse_termux_location(output: str, provider: Provider,
                          now: Optional[float] = None) -> Fix:
    """Build a Fix from termux-location JSON output"""
    if now is None:
        now = time.time()
    data = json.loads(output)
    # elapsedMs is the age of the fix when termux-location reported it
    age = (data.get("elapsedMs") or 0) / 1000.0
    reported = data.get("provider")
    if reported in {p.value for p in Provider}:
        provider = Provider(reported)
    return Fix(
        lat=data["latitude"],
        lon=data["longitude"],
        accuracy=data.get("accuracy"),
        provider=provider,
        timestamp=now - age,
    )


class GPS:
    """Single location provider via Termux API"""

    def __init__(self, provider: Provider = Provider.GPS):
        self.provider = Provider(provider)
        self.last_location: Optional[Fix] = None
        self.consecutive_failures = 0

    def _run(self, request: str, timeout: int) -> Optional[Fix]:
        try:
            result = subprocess.run(
                ["termux-location", "-p", self.provider.value, "-r", request],
                capture_output=True,
                text=True,
                timeout=timeout
            )

            if result.returncode != 0:
                return None

            if not result.stdout or not result.stdout.strip():
                return None

            return parse_termux_location(result.stdout, self.provider)

        except subprocess.TimeoutExpired:
            return None
        except (json.JSONDecodeError, KeyError, TypeError):
            return None
        except FileNotFoundError:
            return None

    def get_location(self, timeout: int = CONFIG["location_timeout"]) -> Optional[Fix]:
        """Get current location using termux-location"""
        fix = self._run("once", timeout)
        if fix is None:
            self.consecutive_failures += 1
            return None
        self.last_location = fix
        self.consecutive_failures = 0
        return fix

    def get_fixes(self, timeout: int = CONFIG["location_timeout"]) -> list[Fix]:
        fix = self.get_location(timeout)
        return [fix] if fix else []

    def get_last_known(self, timeout: int = 10) -> Optional[Fix]:
        """Last location the provider cached, without waiting for a new fix"""
        return self._run("last", timeout)

    def get_status(self) -> str:
        """Get GPS status string"""
        name = self.provider.value.upper()
        if self.consecutive_failures == 0:
            acc = f", accuracy {self.last_location.accuracy:.0f}m" if self.last_location and self.last_location.accuracy is not None else ""
            return f"{name} OK{acc}"
        else:
            return f"{name}: {self.consecutive_failures} consecutive failures"


class MultiProviderGPS:
    """Polls several providers concurrently and merges what arrives"""

    def __init__(self, providers: Optional[list[str]] = None):
        names = providers or CONFIG["location_providers"]
        self.feeds = [GPS(Provider(name)) for name in names]
        self.last_location: Optional[Fix] = None

    def get_fixes(self, timeout: int = CONFIG["location_timeout"]) -> list[Fix]:
        """Poll every provider once; fixes come back oldest first"""
        with ThreadPoolExecutor(max_workers=len(self.feeds)) as pool:
            results = list(pool.map(lambda feed: feed.get_location(timeout), self.feeds))
        fixes = sorted((f for f in results if f), key=lambda f: f.timestamp)
        if fixes:
            self.last_location = fixes[-1]
        return fixes

    def get_last_known(self) -> Optional[Fix]:
        return determine_last_known_location(self.feeds)

    def get_status(self) -> str:
        return "; ".join(feed.get_status() for feed in self.feeds)


def determine_last_known_location(feeds) -> Optional[Fix]:
    """Pick the best of the providers' cached fixes"""
    return best_of(feed.get_last_known() for feed in feeds)


class GPSRecorder:
    """Records raw fixes to a trace file"""

    def __init__(self, source, record_path: str):
        self.source = source
        self.record_path = record_path
        self.trace: list[dict] = []
        self.start_time = time.time()

    def get_fixes(self, timeout: int = CONFIG["location_timeout"]) -> list[Fix]:
        """Get fixes and record them"""
        fixes = self.source.get_fixes(timeout)

        # Record even failed attempts
        entry = {
            "elapsed": time.time() - self.start_time,
            "timestamp": time.time(),
            "fixes": [fix.to_dict() for fix in fixes],
            "status": self.source.get_status()
        }
        self.trace.append(entry)

        return fixes

    def get_last_known(self) -> Optional[Fix]:
        getter = getattr(self.source, "get_last_known", None)
        return getter() if getter else None

    def get_status(self) -> str:
        return self.source.get_status()

    def save(self):
        """Save trace to file"""
        with open(self.record_path, "w") as f:
            json.dump({
                "recorded_at": datetime.now().isoformat(),
                "trace": self.trace
            }, f, indent=2)
        print(f"GPS trace saved to {self.record_path} ({len(self.trace)} entries)")


class GPSPlayback:
    """Plays back a recorded trace"""

    def __init__(self, playback_path: str, speed: float = 1.0):
        self.playback_path = playback_path
        self.speed = speed
        self.trace: list[dict] = []
        self.index = 0
        self.last_location: Optional[Fix] = None
        self.consecutive_failures = 0

        # Load trace
        with open(playback_path) as f:
            try:
                data = json.load(f)
                self.trace = data["trace"]
            except (json.JSONDecodeError, KeyError, TypeError) as e:
                raise TraceFormatError(f"Invalid trace file {playback_path}: {e}") from e
        print(f"Loaded GPS trace from {playback_path} ({len(self.trace)} entries)")

    def get_fixes(self, timeout: int = CONFIG["location_timeout"]) -> list[Fix]:
        """Get next entry's fixes from trace sequentially"""
        if self.index >= len(self.trace):
            return []

        # Return entries one at a time (speed is handled by main loop sleep)
        entry = self.trace[self.index]
        self.index += 1

        try:
            fixes = [Fix.from_dict(d) for d in entry.get("fixes") or []]
        except (KeyError, ValueError, TypeError) as e:
            raise TraceFormatError(f"Invalid trace entry {self.index - 1}: {e}") from e

        if fixes:
            self.last_location = fixes[-1]
            self.consecutive_failures = 0
        else:
            self.consecutive_failures += 1
        return fixes

    def get_last_known(self) -> Optional[Fix]:
        return None

    def get_poll_interval(self) -> float:
        """Get the interval to wait between polls based on trace timing and speed"""
        if self.index <= 0 or self.index >= len(self.trace):
            return CONFIG["gps_poll_interval"] / self.speed

        # Calculate time delta between current and previous entry
        prev_elapsed = self.trace[self.index - 1].get("elapsed", 0)
        curr_elapsed = self.trace[self.index].get("elapsed", 0)
        delta = curr_elapsed - prev_elapsed

        # Apply speed multiplier and clamp to reasonable range
        interval = delta / self.speed
        return max(0.1, min(interval, 5.0))

    def is_finished(self) -> bool:
        """Check if playback is complete"""
        return self.index >= len(self.trace)

    def get_status(self) -> str:
        progress = f"{self.index}/{len(self.trace)}"
        if self.consecutive_failures == 0:
            return f"Playback OK ({progress})"
        else:
            return f"Playback: {self.consecutive_failures} failures ({progress})"
