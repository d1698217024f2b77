from __future__ import annotations
import os, json, pathlib, logging

log = logging.getLogger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


DATA_DIR: str = "data"
GRADUAL_MAX_SESSIONS: int = 256
GRADUAL_SESSION_TTL: float = 900.0  # seconds without an advance before a session may be evicted
CLOCK_RATE_TOLERANCE: float = 1e-6

DEBUG_TRACE: bool = False
TRACE_FIELDS: tuple[str, ...] = (
    "map_id",
    "mods",
    "passed_objects",
    "total_hits",
    "effective_misses",
    "acc",
    "aim",
    "speed",
    "acc_pp",
    "flashlight",
    "pp",
)
# // env overrides for staging/ops
DATA_DIR = os.getenv("DATA_DIR", DATA_DIR)
GRADUAL_MAX_SESSIONS = _env_int("GRADUAL_MAX_SESSIONS", GRADUAL_MAX_SESSIONS)
GRADUAL_SESSION_TTL = _env_float("GRADUAL_SESSION_TTL", GRADUAL_SESSION_TTL)
CLOCK_RATE_TOLERANCE = _env_float("CLOCK_RATE_TOLERANCE", CLOCK_RATE_TOLERANCE)
DEBUG_TRACE = _env_bool("DEBUG_TRACE", DEBUG_TRACE)


def _parse_corrections(raw: object) -> dict[int, float]:
    """Accept ``{"1808605": 0.7}`` or ``"1808605:0.7,1821147:0.6"``."""

    pairs: list[tuple[object, object]] = []
    if isinstance(raw, dict):
        pairs = list(raw.items())
    elif isinstance(raw, str):
        for chunk in raw.split(","):
            if ":" in chunk:
                k, v = chunk.split(":", 1)
                pairs.append((k, v))
    out: dict[int, float] = {}
    for k, v in pairs:
        try:
            out[int(str(k).strip())] = float(str(v).strip())
        except ValueError:
            log.warning("ignoring malformed map correction %r=%r", k, v)
    return out


def load_config(path: str = "config.json") -> dict:
    cfg: dict = {}
    p = pathlib.Path(path)
    if p.exists():
        try: cfg = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError): cfg = {}
    if not isinstance(cfg, dict):
        cfg = {}
    e = os.environ
    corrections = _parse_corrections(cfg.get("rx_map_corrections") or {})
    if e.get("RX_MAP_CORRECTIONS"):
        corrections.update(_parse_corrections(e["RX_MAP_CORRECTIONS"]))
    cfg["rx_map_corrections"] = corrections
    if e.get("DATA_DIR"): cfg["DATA_DIR"] = e.get("DATA_DIR")
    return cfg


# resolved once at import, calculations never touch the filesystem
RX_MAP_CORRECTIONS_EXTRA: dict[int, float] = dict(load_config().get("rx_map_corrections") or {})
