from __future__ import annotations

import json

from app_cli import run_gradual, run_pp

from tests.conftest import build_synthetic_beatmap, full_combo_state


def _write_beatmap(tmp_path):
    beatmap = build_synthetic_beatmap()
    path = tmp_path / "map.json"
    path.write_text(json.dumps(beatmap.to_dict()), encoding="utf-8")
    return beatmap, path


def test_run_pp_prints_summary(tmp_path, capsys):
    _, path = _write_beatmap(tmp_path)

    assert run_pp.main([str(path), "--mods", "HDDT", "--acc", "99", "--misses", "1"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("PP: ")
    assert "Stars:" in out


def test_run_pp_json_output(tmp_path, capsys):
    _, path = _write_beatmap(tmp_path)

    assert run_pp.main([str(path), "--json", "--passed", "120"]) == 0
    body = json.loads(capsys.readouterr().out)
    assert body["pp"] > 0
    assert body["difficulty"]["n_circles"] + body["difficulty"]["n_sliders"] + body["difficulty"]["n_spinners"] == 120


def test_run_pp_missing_timeline(tmp_path):
    _, path = _write_beatmap(tmp_path)
    assert run_pp.main([str(path), "--mods", "HR"]) == 2


def test_run_gradual_exports_csv(tmp_path, capsys):
    beatmap, path = _write_beatmap(tmp_path)
    states = tmp_path / "states.jsonl"
    lines = []
    for passed, n in ((10, 10), (60, 50), (200, 140)):
        state = full_combo_state(beatmap, passed)
        lines.append(json.dumps({"n": n, "max_combo": state.max_combo, "n300": state.n300}))
    lines.append(json.dumps({"n300": 200}))
    states.write_text("\n".join(lines) + "\n", encoding="utf-8")
    out = tmp_path / "trace.csv"

    assert run_gradual.main([str(path), str(states), "--out", str(out)]) == 0
    rows = out.read_text(encoding="utf-8").splitlines()
    assert rows[0].startswith("position,")
    assert [r.split(",")[0] for r in rows[1:]] == ["10", "60", "200"]
    assert "Trace saved" in capsys.readouterr().out


def test_read_states_defaults(tmp_path):
    states = tmp_path / "states.jsonl"
    states.write_text('{"n300": 3, "max_combo": 3, "unknown": 1}\n\n{"n": 4, "misses": 1}\n', encoding="utf-8")

    parsed = list(run_gradual.read_states(str(states)))
    assert parsed[0][0].n300 == 3 and parsed[0][1] == 1
    assert parsed[1][0].misses == 1 and parsed[1][1] == 4
