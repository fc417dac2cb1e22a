"""JSON seed files and CSV parameter tables.

A seed file looks like::

    {
      "parts": [...],
      "gauges": [...],
      "control_plans": [
        {"id": "CP01", "part_id": "P001", "name": "...", "parameters_csv": "cp01.csv"}
      ],
      "samples": [...]
    }

``parameters_csv`` is resolved relative to the seed file and replaces an
inline ``parameters`` list.
"""

import csv
import json
from pathlib import Path
from typing import Any, Dict, List

from pydantic import TypeAdapter

from backend.core.tolerance import evaluate
from backend.db.store import CatalogSnapshot
from backend.models.common import new_id
from backend.models.control_plan import BooleanParameter, ControlPlan, MeasurementParameter, NumericParameter
from backend.models.gauge import Gauge
from backend.models.part import Part
from backend.models.sample import Sample

from . import SeedMetrics, logger

_parameter_adapter = TypeAdapter(MeasurementParameter)


def normalize_header(header: str) -> str:
    """Normalize a CSV header by lower-casing and replacing whitespace with underscores."""

    return "_".join(header.strip().lower().split())


def load_parameter_csv(
    csv_path: Path,
    metrics: SeedMetrics | None = None,
) -> List[NumericParameter | BooleanParameter]:
    """Load control-plan parameters from a CSV table.

    Recognised headers (any case/spacing): ``id``, ``name``, ``type``,
    ``nominal``, ``tol plus``, ``tol minus``, ``unit``, ``expected value``.
    Rows without ``type`` are boolean when they carry an expected value.
    Rows without ``id`` get a generated one.
    """

    parameters: List[NumericParameter | BooleanParameter] = []

    logger.info("Loading parameter CSV: %s", csv_path)
    with csv_path.open(newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        for row in reader:
            record = {
                normalize_header(key): value.strip()
                for key, value in row.items()
                if key is not None and isinstance(value, str) and value.strip()
            }
            if not record:
                continue
            record.setdefault("id", new_id("MP"))
            record.setdefault("type", "boolean" if "expected_value" in record else "numeric")
            record["type"] = record["type"].lower()
            parameters.append(_parameter_adapter.validate_python(record))

    logger.info("Processed %s parameters from %s", len(parameters), csv_path)
    if metrics:
        metrics.add_rows(len(parameters))
    return parameters


def load_seed_file(seed_path: Path, metrics: SeedMetrics | None = None) -> CatalogSnapshot:
    """Read a JSON seed file into a catalog snapshot."""

    logger.info("Loading seed file: %s", seed_path)
    payload: Dict[str, Any] = json.loads(seed_path.read_text(encoding="utf-8"))

    parts = tuple(Part.model_validate(item) for item in payload.get("parts", []))
    gauges = tuple(Gauge.model_validate(item) for item in payload.get("gauges", []))
    plans = tuple(
        _load_plan(item, seed_path.parent, metrics)
        for item in payload.get("control_plans", [])
    )
    plans_by_id = {plan.id: plan for plan in plans}
    samples = tuple(
        _load_sample(item, plans_by_id, metrics)
        for item in payload.get("samples", [])
    )

    if metrics:
        metrics.add_records("parts", len(parts))
        metrics.add_records("gauges", len(gauges))
        metrics.add_records("plans", len(plans))
        metrics.add_records("samples", len(samples))
    logger.info(
        "Loaded %s parts, %s gauges, %s plans, %s samples from %s",
        len(parts),
        len(gauges),
        len(plans),
        len(samples),
        seed_path,
    )
    return CatalogSnapshot(parts=parts, gauges=gauges, control_plans=plans, samples=samples)


def write_snapshot_json(snapshot: CatalogSnapshot, output_path: Path) -> None:
    """Write a snapshot as a seed file that :func:`load_seed_file` can read back."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "parts": [p.model_dump(mode="json") for p in snapshot.parts],
        "gauges": [g.model_dump(mode="json") for g in snapshot.gauges],
        "control_plans": [c.model_dump(mode="json") for c in snapshot.control_plans],
        "samples": [s.model_dump(mode="json") for s in snapshot.samples],
    }
    with output_path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, ensure_ascii=False, indent=2)
    logger.info("Wrote seed snapshot to %s", output_path)


def _load_plan(item: Dict[str, Any], base_dir: Path, metrics: SeedMetrics | None) -> ControlPlan:
    item = dict(item)
    csv_name = item.pop("parameters_csv", None)
    if csv_name:
        item["parameters"] = load_parameter_csv(base_dir / csv_name, metrics=metrics)
    return ControlPlan.model_validate(item)


def _load_sample(
    item: Dict[str, Any],
    plans_by_id: Dict[str, ControlPlan],
    metrics: SeedMetrics | None,
) -> Sample:
    # Readings without a stored verdict are evaluated against the plan.
    plan = plans_by_id.get(item.get("control_plan_id", ""))
    measurements = []
    for reading in item.get("measurements", []):
        if "is_ok" not in reading and plan is not None:
            parameter = plan.get_parameter(reading.get("parameter_id", ""))
            if parameter is not None:
                value = reading.get("boolean_value")
                if value is None:
                    value = reading.get("value")
                reading = {**reading, "is_ok": evaluate(parameter, value)}
                if metrics:
                    metrics.increment_extra("readings_evaluated")
        measurements.append(reading)
    return Sample.model_validate({**item, "measurements": measurements})
