"""
Structured JSON event logger: append-only, one object per line (.jsonl).

Usage:
    from tipi.modules.observability.logger import StructuredLogger

    events = StructuredLogger()
    events.log("user_42", "GENERATION_START", {"destination": "Lisbon"})

Events are written to  logs/<user_id>.jsonl  under config.LOGS_DIR (default:
logs/ at the project root). User ids are reduced to file-safe names.
"""

from __future__ import annotations

import json
import os
import re
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from tipi import config

_DEFAULT_LOGS_DIR: Path = Path(__file__).resolve().parents[3] / "logs"
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


def _file_safe(stream_id: str) -> str:
    cleaned = _UNSAFE_CHARS.sub("_", stream_id).strip("._")
    return cleaned[:100] or "default"


class StructuredLogger:
    """
    Thread-safe, append-only JSONL logger. Disabled instances are no-ops.

    Each write opens, appends to and closes its file under the lock, so no
    handles are held between events however many users are logged.
    """

    def __init__(self, logs_dir: Path | str | None = None, enabled: Optional[bool] = None) -> None:
        self._logs_dir = Path(logs_dir or config.LOGS_DIR or _DEFAULT_LOGS_DIR)
        self._enabled = config.EVENT_LOG_ENABLED if enabled is None else enabled
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self._enabled

    def path_for(self, user_id: str) -> Path:
        return self._logs_dir / f"{_file_safe(user_id)}.jsonl"

    # ── public API ────────────────────────────────────────────────────────

    def log(self, user_id: str, event_type: str, payload: dict) -> None:
        """Append one structured JSON record to ``<user_id>.jsonl``."""
        if not self._enabled:
            return
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "user_id": user_id,
            "event_type": event_type,
            "payload": payload,
        }
        line = json.dumps(record, default=str, ensure_ascii=False) + "\n"
        path = self.path_for(user_id)

        with self._lock:
            os.makedirs(self._logs_dir, exist_ok=True)
            with open(path, "a", encoding="utf-8") as fh:
                fh.write(line)
