from pathlib import Path
import json

import pytest
from pydantic import ValidationError

from backend.models.control_plan import BooleanParameter, NumericParameter
from backend.models.sample import SampleOrigin, SampleStatus
from seed import SeedMetrics
from seed.loader import load_parameter_csv, load_seed_file, normalize_header, write_snapshot_json


def test_normalize_header_basic():
    assert normalize_header("Tol Plus") == "tol_plus"
    assert normalize_header("  Expected   Value ") == "expected_value"


def test_load_parameter_csv(tmp_path):
    csv_path = tmp_path / "params.csv"
    csv_content = (
        "ID,Name,Nominal,Tol Plus,Tol Minus,Unit,Expected Value\n"
        "MP100,Outer Diameter,50,0.05,0.02,mm,\n"
        ",Logo Present,,,,,true\n"
        "MP102,Chamfer Depth,1.5,,,mm,\n"
    )
    csv_path.write_text(csv_content, encoding="utf-8")

    metrics = SeedMetrics()
    parameters = load_parameter_csv(csv_path, metrics=metrics)

    assert metrics.csv_rows_processed == 3
    diameter, logo, chamfer = parameters
    assert isinstance(diameter, NumericParameter)
    assert (diameter.lower_limit, diameter.upper_limit) == pytest.approx((49.98, 50.05))
    # type inferred from the expected value column
    assert isinstance(logo, BooleanParameter)
    assert logo.expected_value is True
    assert logo.id.startswith("MP")
    # blank tolerances mean zero
    assert chamfer.tol_plus == 0.0 and chamfer.tol_minus == 0.0


def test_bad_parameter_row_is_rejected(tmp_path):
    csv_path = tmp_path / "params.csv"
    csv_path.write_text("Name,Nominal,Tol Plus\nBore,25,-0.1\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_parameter_csv(csv_path)


def test_load_seed_file_with_csv_parameters(tmp_path):
    (tmp_path / "cp.csv").write_text(
        "id,name,type,nominal,tol plus,tol minus,unit,expected value\n"
        "MP1,Length,numeric,100,0.5,0.5,mm,\n"
        "MP2,Marking,boolean,,,,,true\n",
        encoding="utf-8",
    )
    seed = {
        "parts": [{"id": "P1", "part_code": "PN-1", "name": "Spacer"}],
        "gauges": [{"id": "G1", "name": "Caliper", "next_calibration": "2025-01-31"}],
        "control_plans": [{"id": "CP1", "part_id": "P1", "name": "Spacer plan", "parameters_csv": "cp.csv"}],
        "samples": [
            {
                "id": "S1",
                "part_id": "P1",
                "control_plan_id": "CP1",
                "batch_number": "B1",
                "created_at": "2024-08-01T10:00:00Z",
                "status": "Inspection Completed",
                "measurements": [
                    {"id": "M1", "parameter_id": "MP1", "value": 100.6, "timestamp": "2024-08-01T10:01:00Z"},
                    {"id": "M2", "parameter_id": "MP2", "boolean_value": True, "timestamp": "2024-08-01T10:02:00Z"},
                    {"id": "M3", "parameter_id": "MP1", "value": 99.0, "timestamp": "2024-08-01T10:03:00Z", "is_ok": True},
                ],
            }
        ],
    }
    seed_path = tmp_path / "seed.json"
    seed_path.write_text(json.dumps(seed), encoding="utf-8")

    metrics = SeedMetrics()
    snapshot = load_seed_file(seed_path, metrics=metrics)

    assert metrics.parts_loaded == 1
    assert metrics.plans_loaded == 1
    assert metrics.csv_rows_processed == 2
    assert metrics.extra == {"readings_evaluated": 2}
    assert [p.type for p in snapshot.control_plan("CP1").parameters] == ["numeric", "boolean"]

    sample = snapshot.sample("S1")
    assert sample.origin is SampleOrigin.INSPECTION
    assert sample.status is SampleStatus.INSPECTION_COMPLETED
    # missing verdicts are evaluated; stored ones are kept as-is
    assert [m.is_ok for m in sample.measurements] == [False, True, True]


def test_written_snapshot_loads_back(tmp_path, snapshot):
    out = tmp_path / "data" / "seed.json"
    write_snapshot_json(snapshot, out)
    assert out.exists()

    loaded = load_seed_file(out)
    assert loaded == snapshot


def test_seed_file_with_invalid_sample_path(tmp_path):
    seed = {
        "samples": [{
            "id": "S1", "part_id": "P1", "control_plan_id": "CP1", "batch_number": "B1",
            "created_at": "2024-08-01T10:00:00Z", "origin": "production", "status": "Inspection Pending",
        }],
    }
    seed_path = tmp_path / "seed.json"
    seed_path.write_text(json.dumps(seed), encoding="utf-8")
    with pytest.raises(ValidationError):
        load_seed_file(seed_path)


def test_integration_load_repo_seed_files():
    seed_root = Path(__file__).resolve().parents[1] / "data"
    seeds = list(seed_root.glob("*.json"))
    if not seeds:
        pytest.skip("No seed files found in data/ to run integration test.")
    metrics = SeedMetrics()
    snapshot = load_seed_file(seeds[0], metrics=metrics)
    assert metrics.samples_loaded == len(snapshot.samples)
