"""Dashboard figures computed from a catalog snapshot."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

import pandas as pd
from pydantic import BaseModel

from backend.db.store import CatalogSnapshot
from backend.models.common import LifecycleStatus
from backend.models.gauge import GaugeStatus
from backend.models.sample import Sample, SampleStatus

MEASUREMENT_COLUMNS = [
    "sample_id",
    "part_id",
    "control_plan_id",
    "batch_number",
    "sample_status",
    "parameter_id",
    "value",
    "boolean_value",
    "is_ok",
    "timestamp",
]


class PartQuality(BaseModel):
    part_id: str
    name: str
    passed: int
    failed: int


class GaugeDue(BaseModel):
    gauge_id: str
    name: str
    next_calibration: date | None


class SampleFailures(BaseModel):
    sample_id: str
    fail_count: int


class RecentActivity(BaseModel):
    sample_id: str
    part_name: str


class DashboardOverview(BaseModel):
    active_parts: int
    gauges_due: int
    active_plans: int
    samples_to_measure: int
    quality_overview: list[PartQuality]
    gauges_due_for_calibration: list[GaugeDue]
    samples_with_failures: list[SampleFailures]
    recent_activity: list[RecentActivity]


def measurement_frame(samples: Iterable[Sample]) -> pd.DataFrame:
    """Flatten sample measurements into one row per reading."""
    rows = [
        {
            "sample_id": sample.id,
            "part_id": sample.part_id,
            "control_plan_id": sample.control_plan_id,
            "batch_number": sample.batch_number,
            "sample_status": sample.status.value,
            "parameter_id": m.parameter_id,
            "value": m.value,
            "boolean_value": m.boolean_value,
            "is_ok": m.is_ok,
            "timestamp": m.timestamp,
        }
        for sample in samples
        for m in sample.measurements
    ]
    return pd.DataFrame(rows, columns=MEASUREMENT_COLUMNS)


def build_dashboard(snapshot: CatalogSnapshot, *, recent_limit: int = 5, failure_limit: int = 3) -> DashboardOverview:
    active_parts = [p for p in snapshot.parts if p.status is LifecycleStatus.ACTIVE]
    gauges_due = [g for g in snapshot.gauges if g.status is GaugeStatus.DUE_FOR_CALIBRATION]
    to_measure = [
        s for s in snapshot.samples
        if s.status in (SampleStatus.PENDING, SampleStatus.IN_PROGRESS)
    ]
    completed = [s for s in snapshot.samples if s.status is SampleStatus.COMPLETED]

    frame = measurement_frame(completed)
    quality = _quality_overview(frame, active_parts)

    failures: list[SampleFailures] = []
    if not frame.empty:
        fail_counts = (
            frame.loc[~frame["is_ok"].astype(bool)]
            .groupby("sample_id", sort=False)
            .size()
            .sort_values(ascending=False, kind="stable")
            .head(failure_limit)
        )
        failures = [
            SampleFailures(sample_id=sample_id, fail_count=int(count))
            for sample_id, count in fail_counts.items()
        ]

    part_names = {p.id: p.name for p in snapshot.parts}
    recent = sorted(completed, key=lambda s: s.created_at, reverse=True)[:recent_limit]

    return DashboardOverview(
        active_parts=len(active_parts),
        gauges_due=len(gauges_due),
        active_plans=sum(1 for plan in snapshot.control_plans if plan.status is LifecycleStatus.ACTIVE),
        samples_to_measure=len(to_measure),
        quality_overview=quality,
        gauges_due_for_calibration=[
            GaugeDue(gauge_id=g.id, name=g.name, next_calibration=g.next_calibration)
            for g in gauges_due
        ],
        samples_with_failures=failures,
        recent_activity=[
            RecentActivity(sample_id=s.id, part_name=part_names.get(s.part_id, "Unknown Part"))
            for s in recent
        ],
    )


def _quality_overview(frame: pd.DataFrame, active_parts) -> list[PartQuality]:
    """Pass/fail counts per active part; parts without readings are omitted."""
    if frame.empty:
        return []

    counts = frame.assign(passed=frame["is_ok"].astype(int)).groupby("part_id").agg(
        total=("is_ok", "size"),
        passed=("passed", "sum"),
    )
    overview: list[PartQuality] = []
    for part in active_parts:
        if part.id not in counts.index:
            continue
        total = int(counts.at[part.id, "total"])
        passed = int(counts.at[part.id, "passed"])
        overview.append(PartQuality(part_id=part.id, name=part.name, passed=passed, failed=total - passed))
    return overview
