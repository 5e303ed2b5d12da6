"""Activity logger: append-only JSON Lines trail with rotation and redaction."""

from __future__ import annotations

import fcntl
import json
import os
from pathlib import Path

from src.models import ActivityEvent

REDACTED = "[REDACTED]"

_SENSITIVE_KEYS = frozenset({
    "token",
    "apikey",
    "api_key",
    "secret",
    "password",
    "authtoken",
    "auth_token",
})


def redact(value: object) -> object:
    """Replace values stored under secret-looking keys, recursively."""
    if isinstance(value, dict):
        return {
            k: REDACTED if str(k).lower() in _SENSITIVE_KEYS else redact(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [redact(item) for item in value]
    return value


class ActivityLogger:
    """Append-only structured activity trail with size-based rotation."""

    def __init__(
        self,
        log_path: str,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
    ) -> None:
        self.log_path = Path(log_path)
        self._max_bytes = max_bytes
        self._backup_count = backup_count

    @classmethod
    def from_env(cls, log_path: str) -> ActivityLogger:
        """Create ActivityLogger with rotation settings from environment variables."""
        max_bytes = int(os.environ.get("ACTIVITY_LOG_MAX_BYTES", "10485760"))
        backup_count = int(os.environ.get("ACTIVITY_LOG_BACKUP_COUNT", "5"))
        return cls(log_path=log_path, max_bytes=max_bytes, backup_count=backup_count)

    def _backup(self, index: int) -> Path:
        return self.log_path.parent / f"{self.log_path.name}.{index}"

    def _maybe_rotate(self) -> None:
        if not self.log_path.exists():
            return
        if self.log_path.stat().st_size < self._max_bytes:
            return

        oldest = self._backup(self._backup_count)
        if oldest.exists():
            oldest.unlink()
        for i in range(self._backup_count - 1, 0, -1):
            if self._backup(i).exists():
                self._backup(i).rename(self._backup(i + 1))
        self.log_path.rename(self._backup(1))

    def log(self, event: ActivityEvent) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

        data = json.loads(event.model_dump_json())
        if data.get("details") is not None:
            data["details"] = redact(data["details"])
        line = json.dumps(data, separators=(",", ":"), ensure_ascii=False)

        lock_file = self.log_path.parent / f".{self.log_path.name}.lock"
        with open(lock_file, "w") as lf:
            fcntl.flock(lf, fcntl.LOCK_EX)
            try:
                self._maybe_rotate()
                with open(self.log_path, "a", encoding="utf-8") as f:
                    f.write(line + "\n")
            finally:
                fcntl.flock(lf, fcntl.LOCK_UN)
