from __future__ import annotations

import csv
import io

from pp_core.gradual import GradualPerformance
from pp_core.trace_export import to_csv, to_json, trace_row

from tests.conftest import full_combo_state


def _rows(beatmap, steps: int = 3):
    gradual = GradualPerformance(beatmap)
    rows = []
    for i in range(1, steps + 1):
        perf = gradual.process_next_object(full_combo_state(beatmap, i))
        rows.append(trace_row(gradual.position, perf))
    return rows


def test_trace_row_fields(beatmap):
    row = _rows(beatmap, 1)[0]
    assert row["position"] == 1
    assert set(row) == {
        "position",
        "pp",
        "pp_aim",
        "pp_speed",
        "pp_acc",
        "pp_flashlight",
        "effective_miss_count",
        "stars",
    }
    assert "difficulty" not in row


def test_json_export_normalizes_values(beatmap):
    rows = _rows(beatmap) + [{"position": "7", "pp": None}]
    payload = to_json(rows)

    steps = payload["steps"]
    assert [s["position"] for s in steps] == [1, 2, 3, 7]
    assert steps[-1]["pp"] == 0.0
    assert steps[-1]["effective_miss_count"] == 0
    assert isinstance(steps[0]["pp"], float)


def test_csv_has_fixed_header(beatmap):
    body = to_csv(_rows(beatmap))
    reader = csv.DictReader(io.StringIO(body))

    assert reader.fieldnames[0] == "position"
    assert reader.fieldnames[-1] == "stars"
    rows = list(reader)
    assert len(rows) == 3
    assert rows[2]["position"] == "3"


def test_empty_trace_exports():
    assert to_json([]) == {"steps": []}
    assert to_csv([]).strip() == (
        "position,pp,pp_aim,pp_speed,pp_acc,pp_flashlight,effective_miss_count,stars"
    )
