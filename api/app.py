from __future__ import annotations
from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
import uuid, os, logging, threading, time, typing as t

# ---- Engine imports ----
from pp_core.config import GRADUAL_MAX_SESSIONS, GRADUAL_SESSION_TTL, DEBUG_TRACE
from pp_core.difficulty import Beatmap, DifficultyUnavailable
from pp_core.gradual import GradualPerformance
from pp_core.mods import Mods, as_mods
from pp_core.performance import PerformanceCalculator
from pp_core.trace_export import trace_row, to_json as trace_to_json, to_csv as trace_to_csv
from pp_core.types import ScoreState
from .storage import delete_beatmap, list_beatmaps, load_beatmap, save_beatmap, utcnow_iso

log = logging.getLogger(__name__)

SESS: dict[str, GradualPerformance] = {}
TRACES: dict[str, list[dict[str, t.Any]]] = {}  # sid -> trace rows
SESSION_INFO: dict[str, dict[str, t.Any]] = {}
SESSION_LOCKS: dict[str, threading.Lock] = {}  # one advance at a time per session
LAST_SEEN: dict[str, float] = {}  # sid -> time.monotonic() of the last start/advance
_SESS_LOCK = threading.Lock()  # guards the registries above, not the evaluators

app = FastAPI(title="pp Calculator API")


@app.get("/")
def root():
    return {"status": "ok", "service": "pp-calculator-api"}


ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

# ---- Schemas ----
class ScoreStateReq(BaseModel):
    max_combo: int = 0
    n_geki: int = 0
    n300: int = 0
    n_katu: int = 0
    n100: int = 0
    n50: int = 0
    misses: int = 0

    def to_state(self) -> ScoreState:
        return ScoreState(
            max_combo=max(self.max_combo, 0),
            n_geki=max(self.n_geki, 0),
            n300=max(self.n300, 0),
            n_katu=max(self.n_katu, 0),
            n100=max(self.n100, 0),
            n50=max(self.n50, 0),
            misses=max(self.misses, 0),
        )


class BeatmapReq(BaseModel):
    n_objects: int
    title: str = ""
    timelines: dict[str, list[dict[str, t.Any]]]


class PerformanceReq(BaseModel):
    beatmap_id: int
    mods: int | str = 0
    combo: int | None = None
    n300: int | None = None
    n100: int | None = None
    n50: int | None = None
    misses: int = 0
    accuracy: float | None = None  # percentage, applied after the counts
    passed_objects: int | None = None
    clock_rate: float | None = None


class GradualStartReq(BaseModel):
    beatmap_id: int
    mods: int | str = 0


class AdvanceReq(BaseModel):
    state: ScoreStateReq
    n: int = 1


# ---- Helpers ----
def _parse_mods(value: int | str) -> Mods:
    if isinstance(value, str) and not value.strip().isdigit():
        return Mods.from_acronyms(value)
    try:
        return as_mods(int(value))
    except (TypeError, ValueError):
        raise HTTPException(422, f"invalid mods: {value!r}")


def _beatmap_or_404(beatmap_id: int) -> Beatmap:
    beatmap = load_beatmap(beatmap_id)
    if beatmap is None:
        raise HTTPException(404, "beatmap not found")
    return beatmap


def _session_or_404(sid: str) -> tuple[GradualPerformance, threading.Lock, list[dict[str, t.Any]]]:
    with _SESS_LOCK:
        sess = SESS.get(sid)
        if not sess:
            raise HTTPException(404, "session not found")
        return sess, SESSION_LOCKS[sid], TRACES[sid]


# ---- Health ----
@app.get("/health")
def health():
    return {
        "sessions": len(SESS),
        "max_sessions": GRADUAL_MAX_SESSIONS,
        "debug_trace": DEBUG_TRACE,
        "beatmaps": len(list_beatmaps()),
    }

# ---- Beatmap timelines ----
@app.put("/beatmaps/{beatmap_id}")
def put_beatmap(beatmap_id: int, req: BeatmapReq):
    try:
        beatmap = Beatmap.from_dict(
            {"beatmap_id": beatmap_id, "n_objects": req.n_objects, "title": req.title, "timelines": req.timelines}
        )
    except (TypeError, ValueError) as e:
        raise HTTPException(422, f"invalid timeline: {e}")
    return save_beatmap(beatmap)


@app.get("/beatmaps")
def get_beatmaps():
    return {"beatmaps": list_beatmaps()}


@app.get("/beatmaps/{beatmap_id}")
def get_beatmap(beatmap_id: int):
    return _beatmap_or_404(beatmap_id).to_dict()


@app.delete("/beatmaps/{beatmap_id}")
def delete_beatmap_endpoint(beatmap_id: int):
    if not delete_beatmap(beatmap_id):
        raise HTTPException(404, "beatmap not found")
    return {"ok": True}

# ---- One-shot performance ----
@app.post("/performance")
def performance(req: PerformanceReq):
    beatmap = _beatmap_or_404(req.beatmap_id)
    calc = PerformanceCalculator(beatmap).mods(_parse_mods(req.mods)).misses(req.misses)
    if req.passed_objects is not None:
        calc = calc.passed_objects(req.passed_objects)
    if req.clock_rate is not None:
        calc = calc.clock_rate(req.clock_rate)
    if req.combo is not None:
        calc = calc.combo(req.combo)
    if req.n300 is not None:
        calc = calc.n300(req.n300)
    if req.n100 is not None:
        calc = calc.n100(req.n100)
    if req.n50 is not None:
        calc = calc.n50(req.n50)
    if req.accuracy is not None:
        calc = calc.accuracy(req.accuracy)
    try:
        res = calc.calculate()
    except DifficultyUnavailable as e:
        raise HTTPException(404, str(e))
    return res.to_dict()


# ---- Gradual sessions ----
def _drop_session(sid: str) -> None:
    SESS.pop(sid, None)
    TRACES.pop(sid, None)
    SESSION_INFO.pop(sid, None)
    SESSION_LOCKS.pop(sid, None)
    LAST_SEEN.pop(sid, None)


def _evict_stale(now: float) -> int:
    """Drop finished sessions and ones idle for longer than the TTL.

    Caller holds ``_SESS_LOCK``.
    """

    stale = [
        sid
        for sid, sess in SESS.items()
        if sess.exhausted() or now - LAST_SEEN.get(sid, now) > GRADUAL_SESSION_TTL
    ]
    for sid in stale:
        _drop_session(sid)
    if stale:
        log.info("evicted %d stale gradual sessions", len(stale))
    return len(stale)


@app.post("/gradual/start")
def gradual_start(req: GradualStartReq):
    beatmap = _beatmap_or_404(req.beatmap_id)
    mods = _parse_mods(req.mods)
    try:
        sess = GradualPerformance(beatmap, mods)
    except DifficultyUnavailable as e:
        raise HTTPException(404, str(e))

    sid = str(uuid.uuid4())
    with _SESS_LOCK:
        if len(SESS) >= GRADUAL_MAX_SESSIONS:
            _evict_stale(time.monotonic())
        if len(SESS) >= GRADUAL_MAX_SESSIONS:
            raise HTTPException(429, "too many live gradual sessions")
        SESS[sid] = sess
        TRACES[sid] = []
        SESSION_LOCKS[sid] = threading.Lock()
        LAST_SEEN[sid] = time.monotonic()
        SESSION_INFO[sid] = {
            "beatmap_id": beatmap.beatmap_id,
            "mods": int(mods),
            "n_objects": beatmap.n_objects,
            "started_at": utcnow_iso(),
        }
        info = dict(SESSION_INFO[sid])
    log.info("gradual session %s started on map %s", sid, beatmap.beatmap_id)
    return {"session_id": sid, **info}


@app.post("/gradual/{sid}/advance")
def gradual_advance(sid: str, req: AdvanceReq):
    sess, lock, trace = _session_or_404(sid)
    with lock:
        res = sess.process_next_n_objects(req.state.to_state(), req.n)
        if res is None:
            raise HTTPException(409, "all objects already processed")
        position, done = sess.position, sess.exhausted()
        trace.append(trace_row(position, res))
    with _SESS_LOCK:
        if sid in LAST_SEEN:
            LAST_SEEN[sid] = time.monotonic()
    return {"position": position, "done": done, "performance": res.to_dict()}


def _trace_rows(sid: str) -> list[dict[str, t.Any]]:
    _, lock, trace = _session_or_404(sid)
    with lock:
        return list(trace)


@app.get("/gradual/{sid}/trace.json")
def gradual_trace_json(sid: str):
    return {"session_id": sid, **trace_to_json(_trace_rows(sid))}


@app.get("/gradual/{sid}/trace.csv")
def gradual_trace_csv(sid: str):
    body = trace_to_csv(_trace_rows(sid))
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=\"{sid}_trace.csv\""},
    )


@app.delete("/gradual/{sid}")
def gradual_delete(sid: str):
    with _SESS_LOCK:
        if sid not in SESS:
            raise HTTPException(404, "session not found")
        _drop_session(sid)
    return {"ok": True}
