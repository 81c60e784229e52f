"""File-based report persistence."""

from __future__ import annotations

import logging

from dataclasses import dataclass
from pathlib import Path

from codegrade.domain.grading.entities import AggregatedReport
from codegrade.infrastructure.storage import report_serializer

logger = logging.getLogger(__name__)


@dataclass
class FileReportStore:
    """Writes the aggregated report as a JSON document."""

    output_path: Path

    def save(self, report: AggregatedReport) -> Path:
        """Persist *report* to ``output_path``, creating parent dirs."""
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.output_path.write_text(
            report_serializer.serialize(report), encoding="utf-8"
        )
        logger.info("Analysis results saved to: %s", self.output_path)
        return self.output_path
