"""Best-effort append-only prompt log."""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)

MAX_PROMPT_CHARS = 500


class AuditLog:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    async def append(self, room: str, terminal: str, prompt: str) -> bool:
        """Append one JSONL record.  Never raises."""
        record = {
            "timestamp": datetime.now(UTC).isoformat(),
            "room": room,
            "terminal": terminal,
            "prompt": prompt[:MAX_PROMPT_CHARS],
        }
        try:
            await asyncio.to_thread(self._write, json.dumps(record, ensure_ascii=False) + "\n")
        except OSError as exc:
            logger.debug("Audit append failed (%s): %s", self.path, exc)
            return False
        return True

    def _write(self, line: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as fh:
            fh.write(line)
