"""Utility helpers for persisting beatmap attribute timelines.

Timelines are produced by an external difficulty calculator and uploaded
through the API. They are stored as plain JSON files under ``DATA_DIR`` so
the service stays stateless across restarts.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from pp_core.config import DATA_DIR
from pp_core.difficulty import Beatmap


log = logging.getLogger(__name__)

DATA_ROOT = Path(DATA_DIR).resolve()
BEATMAPS_DIR = DATA_ROOT / "beatmaps"
BEATMAP_INDEX_PATH = DATA_ROOT / "beatmaps_index.json"

_LOCK = threading.Lock()


def _ensure_dirs() -> None:
    BEATMAPS_DIR.mkdir(parents=True, exist_ok=True)
    DATA_ROOT.mkdir(parents=True, exist_ok=True)


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        log.warning("unreadable json at %s, using default", path)
        return default


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    tmp.replace(path)


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def save_beatmap(beatmap: Beatmap) -> Dict[str, Any]:
    """Persist the beatmap timelines and update the index entry."""

    _ensure_dirs()
    path = BEATMAPS_DIR / f"{beatmap.beatmap_id}.json"
    meta = {
        "beatmap_id": beatmap.beatmap_id,
        "title": beatmap.title,
        "n_objects": beatmap.n_objects,
        "mods": sorted(beatmap.timelines.keys()),
        "updated_at": utcnow_iso(),
    }

    with _LOCK:
        _write_json(path, beatmap.to_dict())
        index: Dict[str, Dict[str, Any]] = _read_json(BEATMAP_INDEX_PATH, {})
        index[str(beatmap.beatmap_id)] = meta
        _write_json(BEATMAP_INDEX_PATH, index)
    return meta


def load_beatmap(beatmap_id: int) -> Optional[Beatmap]:
    path = BEATMAPS_DIR / f"{int(beatmap_id)}.json"
    raw = _read_json(path, None)
    if not isinstance(raw, dict):
        return None
    return Beatmap.from_dict(raw)


def delete_beatmap(beatmap_id: int) -> bool:
    path = BEATMAPS_DIR / f"{int(beatmap_id)}.json"
    with _LOCK:
        index: Dict[str, Dict[str, Any]] = _read_json(BEATMAP_INDEX_PATH, {})
        existed = index.pop(str(int(beatmap_id)), None) is not None
        if path.exists():
            path.unlink()
            existed = True
        _write_json(BEATMAP_INDEX_PATH, index)
    return existed


def list_beatmaps() -> List[Dict[str, Any]]:
    index: Dict[str, Dict[str, Any]] = _read_json(BEATMAP_INDEX_PATH, {})
    return sorted(index.values(), key=lambda m: m.get("beatmap_id", 0))
