"""Selection of the best known location from competing fixes."""

import math
import time
from dataclasses import dataclass
from typing import Iterable, Optional

from .config import CONFIG
from .models import Fix


@dataclass(frozen=True)
class Decision:
    """Outcome of offering a candidate fix to the arbiter"""
    accepted: bool
    reason: str
    time_delta: Optional[float] = None  # seconds, candidate minus current


def _accuracy_delta(candidate: Fix, current: Fix) -> float:
    """Candidate accuracy minus current accuracy; unknown accuracy is infinitely bad"""
    if candidate.accuracy is None and current.accuracy is None:
        return 0.0
    if candidate.accuracy is None:
        return math.inf
    if current.accuracy is None:
        return -math.inf
    return candidate.accuracy - current.accuracy


def decide(candidate: Fix, current: Optional[Fix],
           significant_time_delta: Optional[float] = None,
           significant_accuracy_delta: Optional[float] = None) -> Decision:
    """Decide whether candidate should replace current as the best known fix.

    Rules are checked in order and the first match wins:

    1. No current fix: accept.
    2. Candidate more than ``significant_time_delta`` newer: accept, the
       current fix is stale and the device has likely moved.
    3. Candidate more than ``significant_time_delta`` older: reject.
    4. Otherwise accept when the candidate is more accurate, or newer and
       not less accurate, or newer, from the same provider and not
       significantly less accurate.
    """
    if significant_time_delta is None:
        significant_time_delta = CONFIG["significant_time_delta"]
    if significant_accuracy_delta is None:
        significant_accuracy_delta = CONFIG["significant_accuracy_delta"]

    if current is None:
        return Decision(True, "first")

    time_delta = candidate.timestamp - current.timestamp
    if time_delta > significant_time_delta:
        return Decision(True, "stale_current", time_delta)
    if time_delta < -significant_time_delta:
        return Decision(False, "from_past", time_delta)

    is_newer = time_delta > 0

    accuracy_delta = _accuracy_delta(candidate, current)
    is_less_accurate = accuracy_delta > 0
    is_more_accurate = accuracy_delta < 0
    is_significantly_less_accurate = accuracy_delta > significant_accuracy_delta

    is_from_same_provider = candidate.provider == current.provider

    if is_more_accurate:
        return Decision(True, "more_accurate", time_delta)
    if is_newer and not is_less_accurate:
        return Decision(True, "newer", time_delta)
    if is_newer and not is_significantly_less_accurate and is_from_same_provider:
        return Decision(True, "newer_same_provider", time_delta)
    return Decision(False, "rejected", time_delta)


def is_better_location(candidate: Fix, current: Optional[Fix],
                       significant_time_delta: Optional[float] = None,
                       significant_accuracy_delta: Optional[float] = None) -> bool:
    return decide(candidate, current, significant_time_delta,
                  significant_accuracy_delta).accepted


def is_current_location(fix: Optional[Fix], now: Optional[float] = None,
                        significant_time_delta: Optional[float] = None) -> bool:
    """Check whether a fix is recent enough to show as the current position"""
    if fix is None:
        return False
    if now is None:
        now = time.time()
    if significant_time_delta is None:
        significant_time_delta = CONFIG["significant_time_delta"]
    return now - fix.timestamp <= significant_time_delta


def best_of(fixes: Iterable[Optional[Fix]], current: Optional[Fix] = None,
            significant_time_delta: Optional[float] = None,
            significant_accuracy_delta: Optional[float] = None) -> Optional[Fix]:
    """Fold fixes through the arbiter and return the winner"""
    best = current
    for fix in fixes:
        if fix is None:
            continue
        if is_better_location(fix, best, significant_time_delta, significant_accuracy_delta):
            best = fix
    return best


class LocationArbiter:
    """Holds the best known fix and folds new candidates into it"""

    def __init__(self, significant_time_delta: Optional[float] = None,
                 significant_accuracy_delta: Optional[float] = None,
                 best_location: Optional[Fix] = None):
        self.significant_time_delta = (
            CONFIG["significant_time_delta"] if significant_time_delta is None
            else significant_time_delta
        )
        self.significant_accuracy_delta = (
            CONFIG["significant_accuracy_delta"] if significant_accuracy_delta is None
            else significant_accuracy_delta
        )
        self.best_location: Optional[Fix] = best_location
        self.accepted_count = 0
        self.rejected_count = 0

    def decide(self, candidate: Fix, current: Optional[Fix]) -> Decision:
        return decide(candidate, current, self.significant_time_delta,
                      self.significant_accuracy_delta)

    def offer(self, candidate: Fix) -> Decision:
        """Offer a candidate; it becomes the best location when accepted"""
        decision = self.decide(candidate, self.best_location)
        if decision.accepted:
            self.best_location = candidate
            self.accepted_count += 1
        else:
            self.rejected_count += 1
        return decision

    def is_current(self, fix: Optional[Fix] = None, now: Optional[float] = None) -> bool:
        """Check liveness of fix, or of the best location when fix is omitted"""
        if fix is None:
            fix = self.best_location
        return is_current_location(fix, now, self.significant_time_delta)

    def reset(self, best_location: Optional[Fix] = None):
        self.best_location = best_location
        self.accepted_count = 0
        self.rejected_count = 0
