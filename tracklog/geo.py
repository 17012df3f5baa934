"""Geographic utility functions."""

import math
import time

from .models import Fix


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance between two points in meters using Haversine formula"""
    R = 6371000  # Earth's radius in meters

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (math.sin(delta_phi / 2) ** 2 +
         math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return R * c


def distance_between(a: Fix, b: Fix) -> float:
    """Great-circle distance between two fixes in meters"""
    return haversine_distance(a.lat, a.lon, b.lat, b.lon)


def retry_with_backoff(func, max_time: float = 30.0, initial_delay: float = 1.0,
                       max_delay: float = 8.0, description: str = "operation",
                       sleep=time.sleep, clock=time.time, stop=None):
    """Retry a function with exponential backoff.

    Args:
        func: Function that returns a truthy value on success, falsy on failure
        max_time: Maximum total time to retry (seconds)
        initial_delay: Initial delay between retries (seconds)
        max_delay: Maximum delay between retries (seconds)
        description: Description for logging
        sleep: Sleep function, swapped out in tests
        clock: Time source used to measure max_time
        stop: Optional predicate; retrying ends early once it returns True

    Returns:
        The result of func() on success, or None if all retries failed
    """
    start_time = clock()
    delay = initial_delay
    attempt = 1

    while True:
        result = func()
        if result:
            return result

        if stop is not None and stop():
            print(f"Giving up on {description}: source exhausted ({attempt} attempts)")
            return None

        elapsed = clock() - start_time
        if elapsed >= max_time:
            print(f"Failed to complete {description} after {elapsed:.1f}s ({attempt} attempts)")
            return None

        remaining = max_time - elapsed
        sleep_time = min(delay, remaining, max_delay)
        if sleep_time > 0:
            print(f"Retrying {description} in {sleep_time:.1f}s (attempt {attempt})...")
            sleep(sleep_time)

        delay = min(delay * 2, max_delay)
        attempt += 1
