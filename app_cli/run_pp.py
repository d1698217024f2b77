from __future__ import annotations
import argparse, json, logging, sys
from pathlib import Path
from pp_core.difficulty import Beatmap, DifficultyUnavailable
from pp_core.mods import Mods, as_mods
from pp_core.performance import PerformanceCalculator


def load_beatmap_file(path: str) -> Beatmap:
    return Beatmap.from_dict(json.loads(Path(path).read_text(encoding="utf-8")))


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Calculate osu!standard pp from a beatmap timeline file.")
    ap.add_argument("beatmap", help="beatmap JSON (beatmap_id, n_objects, timelines)")
    ap.add_argument("--mods", default="", help="acronyms like HDDT or a bitmask")
    ap.add_argument("--combo", type=int)
    ap.add_argument("--n300", type=int)
    ap.add_argument("--n100", type=int)
    ap.add_argument("--n50", type=int)
    ap.add_argument("--misses", type=int, default=0)
    ap.add_argument("--acc", type=float, help="accuracy in percent, applied after the counts")
    ap.add_argument("--passed", type=int, help="passed objects for a partial play")
    ap.add_argument("--clock-rate", type=float)
    ap.add_argument("--json", action="store_true", help="print the full result as JSON")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="[%(levelname)s] %(message)s")

    mods = as_mods(int(args.mods)) if args.mods.isdigit() else Mods.from_acronyms(args.mods)
    calc = PerformanceCalculator(load_beatmap_file(args.beatmap)).mods(mods).misses(args.misses)
    if args.passed is not None: calc = calc.passed_objects(args.passed)
    if args.clock_rate is not None: calc = calc.clock_rate(args.clock_rate)
    if args.combo is not None: calc = calc.combo(args.combo)
    if args.n300 is not None: calc = calc.n300(args.n300)
    if args.n100 is not None: calc = calc.n100(args.n100)
    if args.n50 is not None: calc = calc.n50(args.n50)
    if args.acc is not None: calc = calc.accuracy(args.acc)

    try:
        res = calc.calculate()
    except DifficultyUnavailable as e:
        logging.error("%s", e)
        return 2

    if args.json:
        print(json.dumps(res.to_dict(), indent=2))
    else:
        print(f"PP: {res.pp:.2f} | Stars: {res.stars():.2f}")
        print(f"  aim {res.pp_aim:.2f}  speed {res.pp_speed:.2f}  acc {res.pp_acc:.2f}  fl {res.pp_flashlight:.2f}"
              f"  (effective misses: {res.effective_miss_count})")
    return 0


if __name__ == "__main__": sys.exit(main())
