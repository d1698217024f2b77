"""Helpers to export gradual performance traces in JSON/CSV formats."""
from __future__ import annotations

from typing import Iterable, List, Dict, Any, Optional
import csv
import io

from .types import PerformanceAttributes

_FIELDS: tuple[str, ...] = (
    "position",
    "pp",
    "pp_aim",
    "pp_speed",
    "pp_acc",
    "pp_flashlight",
    "effective_miss_count",
    "stars",
)

_INT_FIELDS = {"position", "effective_miss_count"}


def trace_row(position: int, perf: PerformanceAttributes) -> Dict[str, Any]:
    """One trace row for the evaluator position ``position``."""

    row: Dict[str, Any] = {"position": int(position)}
    row.update({k: v for k, v in perf.to_dict().items() if k in _FIELDS})
    return row


def _normalize_row(row: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key in _FIELDS:
        val: Optional[Any] = row.get(key)
        if key in _INT_FIELDS:
            try:
                out[key] = int(val)
            except (TypeError, ValueError):
                out[key] = 0
        else:
            try:
                out[key] = float(val)
            except (TypeError, ValueError):
                out[key] = 0.0
    return out


def to_json(rows: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Return a JSON-safe payload for trace export."""

    normalized: List[Dict[str, Any]] = [_normalize_row(r or {}) for r in rows]
    return {"steps": normalized}


def to_csv(rows: Iterable[Dict[str, Any]]) -> str:
    """Render trace rows as CSV with a fixed header."""

    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=_FIELDS)
    writer.writeheader()
    for row in rows:
        writer.writerow(_normalize_row(row or {}))
    return buf.getvalue()


__all__ = ["trace_row", "to_json", "to_csv"]
