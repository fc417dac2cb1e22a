"""Sample workflow: creation, measurement recording and completion.

Production samples move Pending -> In Progress -> Completed; inspection
samples created at Receiving move Inspection Pending -> Inspection Completed.
Samples only move forward along their own path.
"""

from collections.abc import Sequence
from datetime import datetime

from backend.core import ledger, logger
from backend.core.errors import (
    InvalidInput,
    InvalidState,
    NoActiveControlPlan,
    PartNotFound,
)
from backend.db.store import CatalogSnapshot
from backend.models.common import LifecycleStatus, new_id, utcnow
from backend.models.control_plan import ControlPlan
from backend.models.part import Part
from backend.models.sample import Measurement, Sample, SampleOrigin, SampleStatus


def latest_active_plan(snapshot: CatalogSnapshot, part_id: str) -> ControlPlan | None:
    """Active plan with the highest version for ``part_id``."""
    plans = snapshot.active_plans_for(part_id)
    if not plans:
        return None
    return max(plans, key=lambda plan: plan.version)


def find_active_part_by_code(snapshot: CatalogSnapshot, part_code: str) -> Part:
    """Case-insensitive exact match on ``part_code`` among Active parts."""
    wanted = part_code.strip().lower()
    for part in snapshot.parts:
        if part.status is LifecycleStatus.ACTIVE and part.part_code.lower() == wanted:
            return part
    raise PartNotFound(f'No active part found with code "{part_code}".')


def create_sample(
    snapshot: CatalogSnapshot,
    part_id: str,
    control_plan_id: str,
    batch_number: str,
    *,
    now: datetime | None = None,
) -> Sample:
    """Create a Pending production sample against an explicitly chosen plan."""
    part = next(
        (p for p in snapshot.parts if p.id == part_id and p.status is LifecycleStatus.ACTIVE),
        None,
    )
    if part is None:
        raise PartNotFound(f"No active part found with id '{part_id}'.")
    if not batch_number or not batch_number.strip():
        raise InvalidInput("Batch number is required.")

    active_plans = snapshot.active_plans_for(part.id)
    if not active_plans:
        raise NoActiveControlPlan(f'No active control plan found for part "{part.name}".')
    if control_plan_id not in {plan.id for plan in active_plans}:
        raise NoActiveControlPlan(
            f"Control plan '{control_plan_id}' is not an active plan for part \"{part.name}\"."
        )

    sample = Sample(
        id=new_id("S"),
        part_id=part.id,
        control_plan_id=control_plan_id,
        batch_number=batch_number.strip(),
        created_at=now or utcnow(),
        origin=SampleOrigin.PRODUCTION,
        status=SampleStatus.PENDING,
    )
    logger.info("Created sample %s for part %s (batch %s)", sample.id, part.part_code, sample.batch_number)
    return sample


def create_inspection_batch(
    snapshot: CatalogSnapshot,
    part_code: str,
    count: int,
    batch_number: str,
    *,
    now: datetime | None = None,
) -> list[Sample]:
    """Create ``count`` Inspection Pending samples for a received delivery."""
    part = find_active_part_by_code(snapshot, part_code)
    plan = latest_active_plan(snapshot, part.id)
    if plan is None:
        raise NoActiveControlPlan(f'No active control plan found for part "{part.name}".')
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise InvalidInput(f"Number of samples must be at least 1, got {count!r}.")

    created_at = now or utcnow()
    batch = batch_number.strip() or f"BATCH-{int(created_at.timestamp() * 1000)}"
    samples = [
        Sample(
            id=new_id("INSP-"),
            part_id=part.id,
            control_plan_id=plan.id,
            batch_number=batch,
            created_at=created_at,
            origin=SampleOrigin.INSPECTION,
            status=SampleStatus.INSPECTION_PENDING,
        )
        for _ in range(count)
    ]
    logger.info(
        "Created %s inspection samples for part %s against %s v%s (batch %s)",
        count,
        part.part_code,
        plan.id,
        plan.version,
        batch,
    )
    return samples


def start_sample(sample: Sample) -> Sample:
    """Pending -> In Progress. A sample already in progress is returned unchanged."""
    if sample.status is SampleStatus.IN_PROGRESS:
        return sample
    if sample.status is not SampleStatus.PENDING:
        raise InvalidState(f"Sample {sample.id} cannot be started from '{sample.status.value}'.")
    return sample.model_copy(update={"status": SampleStatus.IN_PROGRESS})


def record_measurement(
    sample: Sample,
    plan: ControlPlan,
    parameter_id: str,
    raw_value: object,
) -> Sample:
    """Add a reading; the first reading on a Pending sample starts it."""
    _require_open(sample)
    measurements = ledger.add_measurement(sample.measurements, plan, parameter_id, raw_value)
    if sample.status is SampleStatus.PENDING:
        sample = start_sample(sample)
    return sample.model_copy(update={"measurements": measurements})


def remove_measurement(sample: Sample, measurement_id: str, *, strict: bool = True) -> Sample:
    _require_open(sample)
    measurements = ledger.delete_measurement(sample.measurements, measurement_id, strict=strict)
    return sample.model_copy(update={"measurements": measurements})


def complete_sample(
    sample: Sample,
    final_measurements: Sequence[Measurement] | None = None,
) -> Sample:
    """Write the final readings and move the sample to its terminal status.

    Not idempotent: completing a terminal sample raises :class:`InvalidState`.
    """
    _require_open(sample)
    measurements = sample.measurements if final_measurements is None else tuple(final_measurements)
    completed = sample.model_copy(
        update={"measurements": measurements, "status": sample.path[-1]}
    )
    ok_count = sum(1 for m in measurements if m.is_ok)
    logger.info(
        "Completed sample %s: %s / %s measurements OK",
        sample.id,
        ok_count,
        len(measurements),
    )
    return completed


def _require_open(sample: Sample) -> None:
    if sample.is_terminal:
        raise InvalidState(
            f"Sample {sample.id} is already {sample.status.value.lower()}."
        )
