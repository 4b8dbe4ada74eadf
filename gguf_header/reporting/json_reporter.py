# gguf_header/reporting/json_reporter.py
"""
JSON reporting utilities.

Non-finite floats (NaN, ±inf) have no JSON literal; they are written as the
strings ``"nan"``, ``"inf"`` and ``"-inf"`` so the output stays strict JSON.
"""

from __future__ import annotations

import json
import math
from typing import Any, Dict

from gguf_header.analysis.base import InspectionReport
from gguf_header.observability import to_dict


def _finite(obj: Any) -> Any:
    if isinstance(obj, float) and not math.isfinite(obj):
        return str(obj)
    if isinstance(obj, list):
        return [_finite(x) for x in obj]
    if isinstance(obj, dict):
        return {k: _finite(v) for k, v in obj.items()}
    return obj


def to_json_dict(report: InspectionReport) -> Dict[str, Any]:
    """Convert an InspectionReport to a JSON-serializable dict."""
    d = _finite(to_dict(report))
    d["ok"] = report.ok
    return d


def write_json(report: InspectionReport, path: str) -> None:
    """Write report to a file as pretty JSON."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(to_json_dict(report), f, indent=2, ensure_ascii=False, allow_nan=False)
