# gguf_header/analysis/base.py
"""
Inspection report model.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from gguf_header.model_formats.gguf.gguf import Header


@dataclass
class InspectionReport:
    """Result of inspecting one GGUF file."""

    file_path: str
    file_size: int
    sha256_hex: str
    header: Optional[Header] = None
    header_size: Optional[int] = None  # bytes from offset 0 to the first tensor descriptor
    error: Optional[str] = None
    error_kind: Optional[str] = None  # GGUFParseError subclass name
    stages_run: List[str] = field(default_factory=list)
    timings_ms: Dict[str, float] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None
