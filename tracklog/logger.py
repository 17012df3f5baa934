"""Recording log for Tracklog."""

import json
from datetime import datetime
from typing import Optional, Callable


class Logger:
    """Writes recording events as `[time] event | {json}` lines.

    Lines go to stdout (unless echo is off), to an append-only log file and
    to an optional callback that receives the event name and its data.
    """

    def __init__(self, log_path: Optional[str] = None, callback: Optional[Callable] = None,
                 echo: bool = True):
        self.log_path = log_path
        self.callback = callback
        self.echo = echo
        self.file = None
        if log_path:
            self.file = open(log_path, "a")
            self._write_header()

    def _write_header(self):
        self.file.write(f"\n{'='*60}\n")
        self.file.write(f"Tracklog recording - {datetime.now().isoformat()}\n")
        self.file.write(f"{'='*60}\n\n")
        self.file.flush()

    def log(self, message: str, data: Optional[dict] = None):
        """Log a message with optional structured data"""
        line = f"[{datetime.now().isoformat()}] {message}"
        if data:
            line += f" | {json.dumps(data, default=str)}"
        if self.echo:
            print(line)
        if self.file:
            self.file.write(line + "\n")
            self.file.flush()
        if self.callback:
            self.callback(message, data)

    def log_decision(self, fix, decision):
        """Log the arbiter's verdict on one fix"""
        data = {
            "provider": fix.provider.value,
            "accuracy": fix.accuracy,
            "reason": decision.reason,
        }
        if decision.time_delta is not None:
            data["time_delta"] = round(decision.time_delta, 1)
        self.log("Fix accepted" if decision.accepted else "Fix rejected", data)

    def close(self):
        if self.file:
            self.file.close()
            self.file = None
