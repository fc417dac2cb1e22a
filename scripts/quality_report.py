#!/usr/bin/env python3
"""
Quality report over recorded measurements.

Reports:
- OK rate per part and parameter
- Numeric reading statistics against tolerance limits
- Batches with non-conforming readings

Reads a JSON seed file (default: the built-in mock catalog) and runs the
aggregations with DuckDB over the flattened measurement frame.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import duckdb
import pandas as pd

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from backend.db.store import CatalogSnapshot
from backend.models.control_plan import NumericParameter
from backend.services.dashboard import measurement_frame
from seed.loader import load_seed_file
from seed.mock_data import build_mock_snapshot


def parameter_frame(snapshot: CatalogSnapshot) -> pd.DataFrame:
    rows = []
    for plan in snapshot.control_plans:
        for parameter in plan.parameters:
            numeric = isinstance(parameter, NumericParameter)
            rows.append({
                "control_plan_id": plan.id,
                "parameter_id": parameter.id,
                "parameter_name": parameter.name,
                "parameter_type": parameter.type,
                "lower_limit": parameter.lower_limit if numeric else None,
                "upper_limit": parameter.upper_limit if numeric else None,
                "unit": parameter.unit if numeric else None,
            })
    return pd.DataFrame(rows, columns=[
        "control_plan_id", "parameter_id", "parameter_name", "parameter_type",
        "lower_limit", "upper_limit", "unit",
    ])


def build_report(snapshot: CatalogSnapshot) -> dict[str, pd.DataFrame]:
    """Run the report queries; returns one frame per section."""
    con = duckdb.connect()
    con.register("measurements", measurement_frame(snapshot.samples))
    con.register("parameters", parameter_frame(snapshot))
    con.register("parts", pd.DataFrame(
        [{"part_id": p.id, "part_code": p.part_code, "part_name": p.name} for p in snapshot.parts],
        columns=["part_id", "part_code", "part_name"],
    ))

    ok_rate = con.sql("""
        SELECT pt.part_code,
               pa.parameter_name,
               COUNT(*) AS readings,
               SUM(CASE WHEN m.is_ok THEN 1 ELSE 0 END) AS ok_readings,
               ROUND(100.0 * SUM(CASE WHEN m.is_ok THEN 1 ELSE 0 END) / COUNT(*), 1) AS ok_pct
        FROM measurements m
        JOIN parts pt ON pt.part_id = m.part_id
        JOIN parameters pa ON pa.control_plan_id = m.control_plan_id AND pa.parameter_id = m.parameter_id
        GROUP BY pt.part_code, pa.parameter_name
        ORDER BY pt.part_code, pa.parameter_name
    """).df()

    numeric_stats = con.sql("""
        SELECT pa.parameter_name,
               pa.unit,
               COUNT(m.value) AS readings,
               MIN(m.value) AS min_value,
               AVG(m.value) AS mean_value,
               MAX(m.value) AS max_value,
               STDDEV_SAMP(m.value) AS std_dev,
               ANY_VALUE(pa.lower_limit) AS lower_limit,
               ANY_VALUE(pa.upper_limit) AS upper_limit
        FROM measurements m
        JOIN parameters pa ON pa.control_plan_id = m.control_plan_id AND pa.parameter_id = m.parameter_id
        WHERE pa.parameter_type = 'numeric'
        GROUP BY pa.parameter_name, pa.unit
        ORDER BY pa.parameter_name
    """).df()

    nok_batches = con.sql("""
        SELECT batch_number,
               COUNT(DISTINCT sample_id) AS samples,
               SUM(CASE WHEN is_ok THEN 0 ELSE 1 END) AS nok_readings
        FROM measurements
        GROUP BY batch_number
        HAVING SUM(CASE WHEN is_ok THEN 0 ELSE 1 END) > 0
        ORDER BY nok_readings DESC, batch_number
    """).df()

    con.close()
    return {"ok_rate": ok_rate, "numeric_stats": numeric_stats, "nok_batches": nok_batches}


def main() -> None:
    parser = argparse.ArgumentParser(description="Measurement quality report")
    parser.add_argument("--seed", type=Path, help="JSON seed file (defaults to the mock catalog)")
    parser.add_argument("--csv-dir", type=Path, help="Also write each section as CSV here")
    args = parser.parse_args()

    snapshot = load_seed_file(args.seed) if args.seed else build_mock_snapshot()
    report = build_report(snapshot)

    for title, frame in report.items():
        print("=" * 80)
        print(title.replace("_", " ").upper())
        print("=" * 80)
        print(frame.to_string(index=False) if not frame.empty else "(no rows)")
        print()
        if args.csv_dir:
            args.csv_dir.mkdir(parents=True, exist_ok=True)
            frame.to_csv(args.csv_dir / f"{title}.csv", index=False)


if __name__ == "__main__":
    main()
