from __future__ import annotations
import argparse, json, logging, sys
from pathlib import Path
from typing import Iterator
from pp_core.gradual import GradualPerformance
from pp_core.mods import Mods, as_mods
from pp_core.trace_export import trace_row, to_csv, to_json
from pp_core.types import ScoreState
from app_cli.run_pp import load_beatmap_file

log = logging.getLogger(__name__)


def read_states(path: str) -> Iterator[tuple[ScoreState, int]]:
    """Yield ``(state, n)`` from a JSON-lines file; ``n`` defaults to 1."""

    fh = sys.stdin if path == "-" else open(path, "r", encoding="utf-8")
    try:
        for line in fh:
            line = line.strip()
            if not line:
                continue
            raw = json.loads(line)
            n = int(raw.pop("n", 1))
            known = set(ScoreState.__dataclass_fields__)
            yield ScoreState(**{k: int(v) for k, v in raw.items() if k in known}), n
    finally:
        if fh is not sys.stdin:
            fh.close()


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Stream score states through the gradual pp evaluator.")
    ap.add_argument("beatmap")
    ap.add_argument("states", help="JSON-lines score states ('-' for stdin)")
    ap.add_argument("--mods", default="")
    ap.add_argument("--out", help="write the trace to .csv or .json instead of stdout")
    args = ap.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    mods = as_mods(int(args.mods)) if args.mods.isdigit() else Mods.from_acronyms(args.mods)
    gradual = GradualPerformance(load_beatmap_file(args.beatmap), mods)
    rows = []
    for state, n in read_states(args.states):
        perf = gradual.process_next_n_objects(state, n)
        if perf is None:
            log.info("map finished after %d objects, ignoring remaining states", gradual.position)
            break
        rows.append(trace_row(gradual.position, perf))
        if not args.out:
            print(f"{gradual.position:5d}  {perf.pp:8.2f}pp")

    if args.out:
        out = Path(args.out)
        if out.suffix.lower() == ".csv":
            out.write_text(to_csv(rows), encoding="utf-8")
        else:
            out.write_text(json.dumps(to_json(rows), indent=2), encoding="utf-8")
        print(f"Done. Trace saved to: {out}")
    return 0


if __name__ == "__main__": sys.exit(main())
