"""Spoken announcements for Tracklog."""

import subprocess
from typing import Optional, Callable

from .display import METRIC, format_distance


class Audio:
    """Speaks distance milestones while recording"""

    callback: Optional[Callable[[str], None]] = None  # receives every announcement

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    @classmethod
    def set_callback(cls, callback: Optional[Callable[[str], None]]):
        cls.callback = callback

    def announce_distance(self, meters: float, system: str = METRIC) -> str:
        """Announce the distance recorded so far; returns the spoken text"""
        text = format_distance(meters, system)
        self.speak(text)
        return text

    def speak(self, text: str):
        """Speak with espeak (Termux), then pyttsx3, then plain stdout"""
        if Audio.callback:
            Audio.callback(text)
        if not self.enabled:
            return

        try:
            subprocess.run(["espeak", "-s", "150", text], capture_output=True, timeout=10)
        except FileNotFoundError:
            self._speak_pyttsx3(text)
        except (subprocess.TimeoutExpired, OSError) as e:
            print(f"[AUDIO] {text} (espeak failed: {e})")

    @staticmethod
    def _speak_pyttsx3(text: str):
        try:
            import pyttsx3
            engine = pyttsx3.init()
            engine.say(text)
            engine.runAndWait()
        except (ImportError, RuntimeError, OSError):
            print(f"[AUDIO] {text}")
