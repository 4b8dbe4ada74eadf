# gguf_header/analysis/inspector.py
"""
File-level driver: map a GGUF file and run the requested inspection stages.
"""
from __future__ import annotations

import hashlib
from typing import Iterable, Optional

from loguru import logger

from gguf_header.analysis.base import InspectionReport
from gguf_header.io.file_reader import LocalFileSource
from gguf_header.model_formats.gguf.gguf import DecodeLimits, GGUFParseError
from gguf_header.model_formats.gguf.gguf_header import decode_header_prefix
from gguf_header.observability import Timer

AVAILABLE_STAGES = ("sha256", "header")


class HeaderInspector:
    """Decodes the header of one GGUF file into an InspectionReport."""

    def __init__(self, path: str, limits: Optional[DecodeLimits] = None):
        self.path = path
        self.limits = limits
        self.src = LocalFileSource(path)

    def run(self, stages: Iterable[str] = AVAILABLE_STAGES) -> InspectionReport:
        """
        Run the selected stages over the mapped file.

        Args:
            stages: Any of ``AVAILABLE_STAGES``.

        Decode failures are recorded on the report rather than raised.
        """
        stages = list(stages)
        unknown = [s for s in stages if s not in AVAILABLE_STAGES]
        if unknown:
            raise ValueError(f"Unknown stage(s): {', '.join(unknown)}")

        with self.src.open() as mf:
            mv = mf.view
            report = InspectionReport(
                file_path=self.path,
                file_size=mf.size,
                sha256_hex="not_run",
            )

            if "sha256" in stages:
                with Timer("sha256") as t_hash:
                    h = hashlib.sha256()
                    h.update(mv)
                    report.sha256_hex = h.hexdigest()
                report.stages_run.append("sha256")
                report.timings_ms["sha256"] = t_hash.duration_ms
                logger.debug("SHA256 computed in {ms:.2f}ms", ms=t_hash.duration_ms)

            if "header" in stages:
                with Timer("header") as t_core:
                    try:
                        report.header, report.header_size = decode_header_prefix(
                            mv, limits=self.limits
                        )
                    except GGUFParseError as e:
                        report.error = str(e)
                        report.error_kind = type(e).__name__
                        logger.debug("Header decode failed: {error}", error=str(e))
                report.stages_run.append("header")
                report.timings_ms["header"] = t_core.duration_ms
                logger.debug("Header stage completed in {ms:.2f}ms", ms=t_core.duration_ms)

            return report
