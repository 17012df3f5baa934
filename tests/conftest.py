"""Global pytest fixtures & helpers.

Adds project root to path and provides factories for fixes and traces so
arbiter, recorder and session tests share one way of building input.
"""
from __future__ import annotations

import json
import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from tracklog.models import Fix, Provider


# --- Factory helpers -------------------------------------------------
def make_fix(lat=0.0, lon=0.0, accuracy=10.0, provider=Provider.GPS, t=0.0):
    return Fix(lat=lat, lon=lon, accuracy=accuracy, provider=provider, timestamp=t)


def write_trace(path, entries):
    """Write a trace file in the GPSRecorder format; entries are lists of fixes"""
    trace = []
    for i, fixes in enumerate(entries):
        trace.append({
            "elapsed": float(i),
            "timestamp": 1000.0 + i,
            "fixes": [f.to_dict() for f in fixes],
            "status": "test",
        })
    with open(path, "w") as f:
        json.dump({"recorded_at": "2026-01-01T00:00:00", "trace": trace}, f)
    return str(path)


class FakeClock:
    """Clock advancing one second per reading"""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        value = self.now
        self.now += 1.0
        return value


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def fix_factory():
    return make_fix


@pytest.fixture
def trace_writer(tmp_path):
    def _write(entries, name="trace.json"):
        return write_trace(tmp_path / name, entries)
    return _write


@pytest.fixture
def fake_clock():
    return FakeClock()
