"""File-based sink for unparseable model responses."""

from __future__ import annotations

import logging
import time

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


@dataclass
class DebugArtifactSink:
    """Persists raw response text, keyed by batch number and timestamp."""

    debug_dir: Path
    prefix: str = "debug-batch"
    clock: Callable[[], int] = field(default=_epoch_millis)

    def save(self, batch_number: int, raw_text: str) -> Path:
        """Write *raw_text* to ``<prefix>-<batch>-<epoch ms>.txt``.

        Returns:
            The path of the written artifact.
        """
        self.debug_dir.mkdir(parents=True, exist_ok=True)
        path = self.debug_dir / f"{self.prefix}-{batch_number}-{self.clock()}.txt"
        path.write_text(raw_text, encoding="utf-8")
        logger.error("Raw response for batch %d saved to: %s", batch_number, path)
        return path
