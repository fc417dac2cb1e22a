from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from backend.core import workflow
from backend.core.errors import InvalidInput, InvalidState, NoActiveControlPlan, PartNotFound
from backend.models.common import LifecycleStatus
from backend.models.control_plan import ControlPlan
from backend.models.sample import Measurement, Sample, SampleOrigin, SampleStatus

NOW = datetime(2024, 8, 1, 14, 0, tzinfo=timezone.utc)


def test_inspection_batch_for_latest_active_plan(snapshot):
    samples = workflow.create_inspection_batch(snapshot, "PN-1001", 3, "B-1")

    assert len(samples) == 3
    assert len({s.id for s in samples}) == 3
    for sample in samples:
        assert sample.status is SampleStatus.INSPECTION_PENDING
        assert sample.origin is SampleOrigin.INSPECTION
        assert sample.control_plan_id == "CP01"
        assert sample.part_id == "P001"
        assert sample.batch_number == "B-1"
        assert sample.measurements == ()


def test_part_code_match_is_case_insensitive(snapshot):
    samples = workflow.create_inspection_batch(snapshot, "pn-2351", 1, "DEL-1")
    assert samples[0].control_plan_id == "CP02"


def test_highest_active_version_wins(snapshot):
    newer = ControlPlan(id="CP10", part_id="P002", name="Connector Housing - Series", version=4)
    snapshot = snapshot.with_changes(control_plans=(*snapshot.control_plans, newer))
    samples = workflow.create_inspection_batch(snapshot, "PN-2351", 2, "DEL-2")
    assert {s.control_plan_id for s in samples} == {"CP10"}


@pytest.mark.parametrize("part_code", ["PN-0000", "PN-4598-OLD", "PN-100"])
def test_unknown_or_archived_part_code(snapshot, part_code):
    with pytest.raises(PartNotFound):
        workflow.create_inspection_batch(snapshot, part_code, 1, "B-1")


def test_part_without_active_plan(snapshot):
    with pytest.raises(NoActiveControlPlan):
        workflow.create_inspection_batch(snapshot, "PN-4598", 1, "B-1")


@pytest.mark.parametrize("count", [0, -2])
def test_batch_needs_at_least_one_sample(snapshot, count):
    with pytest.raises(InvalidInput):
        workflow.create_inspection_batch(snapshot, "PN-1001", count, "B-1")


def test_blank_batch_number_gets_generated(snapshot):
    samples = workflow.create_inspection_batch(snapshot, "PN-1001", 2, "  ", now=NOW)
    assert samples[0].batch_number == f"BATCH-{int(NOW.timestamp() * 1000)}"
    assert samples[0].batch_number == samples[1].batch_number


def test_create_production_sample(snapshot):
    sample = workflow.create_sample(snapshot, "P001", "CP01", "B-2024-003", now=NOW)
    assert sample.status is SampleStatus.PENDING
    assert sample.origin is SampleOrigin.PRODUCTION
    assert sample.created_at == NOW
    assert sample.id.startswith("S")


def test_create_sample_requires_an_active_plan_of_the_part(snapshot):
    with pytest.raises(NoActiveControlPlan):
        workflow.create_sample(snapshot, "P003", "CP01", "B-1")
    # archived plan of the right part
    with pytest.raises(NoActiveControlPlan):
        workflow.create_sample(snapshot, "P001", "CP03", "B-1")
    # active plan of another part
    with pytest.raises(NoActiveControlPlan):
        workflow.create_sample(snapshot, "P001", "CP02", "B-1")


def test_create_sample_rejects_archived_part_and_blank_batch(snapshot):
    with pytest.raises(PartNotFound):
        workflow.create_sample(snapshot, "P004", "CP01", "B-1")
    with pytest.raises(InvalidInput):
        workflow.create_sample(snapshot, "P001", "CP01", "   ")


def test_archiving_the_only_plan_blocks_sampling(snapshot):
    plans = tuple(
        p.model_copy(update={"status": LifecycleStatus.ARCHIVED}) if p.id == "CP02" else p
        for p in snapshot.control_plans
    )
    snapshot = snapshot.with_changes(control_plans=plans)
    with pytest.raises(NoActiveControlPlan):
        workflow.create_sample(snapshot, "P002", "CP02", "B-1")


def test_first_reading_starts_a_pending_sample(snapshot):
    sample = snapshot.sample("S003")
    plan = snapshot.control_plan("CP01")
    updated = workflow.record_measurement(sample, plan, "MP001", 50.0)
    assert updated.status is SampleStatus.IN_PROGRESS
    assert len(updated.measurements) == 1
    assert sample.status is SampleStatus.PENDING


def test_start_sample(snapshot):
    started = workflow.start_sample(snapshot.sample("S003"))
    assert started.status is SampleStatus.IN_PROGRESS
    assert workflow.start_sample(started) is started
    with pytest.raises(InvalidState):
        workflow.start_sample(snapshot.sample("S001"))
    with pytest.raises(InvalidState):
        workflow.start_sample(snapshot.sample("INSP-001"))


def test_complete_sample_is_not_idempotent(snapshot):
    sample = snapshot.sample("S002")
    plan = snapshot.control_plan("CP01")
    final = workflow.record_measurement(sample, plan, "MP008", True).measurements

    completed = workflow.complete_sample(sample, final)
    assert completed.status is SampleStatus.COMPLETED
    assert completed.measurements == final

    with pytest.raises(InvalidState):
        workflow.complete_sample(completed, final)


def test_complete_inspection_sample(snapshot):
    completed = workflow.complete_sample(snapshot.sample("INSP-001"))
    assert completed.status is SampleStatus.INSPECTION_COMPLETED
    with pytest.raises(InvalidState):
        workflow.complete_sample(completed)


def test_terminal_sample_rejects_ledger_changes(snapshot):
    done = snapshot.sample("S001")
    plan = snapshot.control_plan("CP01")
    with pytest.raises(InvalidState):
        workflow.record_measurement(done, plan, "MP001", 50.0)
    with pytest.raises(InvalidState):
        workflow.remove_measurement(done, done.measurements[0].id)


def test_sample_status_must_belong_to_its_path():
    with pytest.raises(ValidationError):
        Sample(
            id="S9",
            part_id="P001",
            control_plan_id="CP01",
            batch_number="B",
            created_at=NOW,
            origin=SampleOrigin.PRODUCTION,
            status=SampleStatus.INSPECTION_PENDING,
        )


def test_origin_is_inferred_from_status():
    sample = Sample.model_validate({
        "id": "INSP-9",
        "part_id": "P002",
        "control_plan_id": "CP02",
        "batch_number": "B",
        "created_at": NOW.isoformat(),
        "status": "Inspection Pending",
    })
    assert sample.origin is SampleOrigin.INSPECTION


def test_measurement_needs_exactly_one_reading():
    with pytest.raises(ValidationError):
        Measurement(id="M-1", parameter_id="MP001", timestamp=NOW, is_ok=True)
    with pytest.raises(ValidationError):
        Measurement(id="M-1", parameter_id="MP001", value=1.0, boolean_value=True, timestamp=NOW, is_ok=True)
