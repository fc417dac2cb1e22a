import pytest

from backend.core import lifecycle
from backend.core.errors import InvalidState, NotFound
from backend.models.common import LifecycleStatus
from backend.models.part import Part

ACTIVE = LifecycleStatus.ACTIVE
ARCHIVED = LifecycleStatus.ARCHIVED


def _gear(**overrides):
    fields = {
        "id": "P001",
        "part_code": "PN-1001",
        "name": "Main Gear",
        "drawing_number": "DWG-10-22-001",
        "material": "Steel 4140",
        "revision": 1,
    }
    fields.update(overrides)
    return Part(**fields)


def _active_in_lineage(store, part_code):
    return [p for p in store.snapshot().parts if p.part_code == part_code and p.status is ACTIVE]


def test_archive_and_restore_round_trip():
    part = _gear()
    archived = lifecycle.archive(part)
    assert archived.status is ARCHIVED
    assert part.status is ACTIVE
    assert lifecycle.restore(archived).status is ACTIVE


def test_archive_and_restore_are_no_ops_in_target_state():
    archived = _gear(status=ARCHIVED)
    assert lifecycle.archive(archived) is archived
    active = _gear()
    assert lifecycle.restore(active) is active


def test_part_revision():
    original, revised = lifecycle.create_revision(_gear())

    assert original.id == "P001"
    assert original.status is ARCHIVED
    assert revised.id != "P001"
    assert revised.revision == 2
    assert revised.status is ACTIVE
    assert revised.model_dump(exclude={"id", "revision"}) == _gear().model_dump(exclude={"id", "revision"})


def test_control_plan_revision_copies_parameters(snapshot):
    plan = snapshot.control_plan("CP01")
    original, revised = lifecycle.create_revision(plan)

    assert original.status is ARCHIVED
    assert revised.version == plan.version + 1
    assert revised.id.startswith("CP") and revised.id != plan.id
    assert revised.parameters == plan.parameters
    assert revised.part_id == plan.part_id
    assert revised.name == plan.name


def test_revising_archived_entity_fails():
    with pytest.raises(InvalidState):
        lifecycle.create_revision(_gear(status=ARCHIVED))


def test_store_keeps_exactly_one_active_revision(service, store):
    assert len(_active_in_lineage(store, "PN-1001")) == 1

    first = service.revise_part("P001").data
    second = service.revise_part(first.id).data

    active = _active_in_lineage(store, "PN-1001")
    assert [p.id for p in active] == [second.id]
    assert second.revision == 3
    assert store.snapshot().part("P001").status is ARCHIVED
    assert store.snapshot().part(first.id).status is ARCHIVED


def test_failed_revision_leaves_store_untouched(service, store):
    service.revise_part("P001")
    before = store.snapshot()

    with pytest.raises(InvalidState):
        service.revise_part("P001")
    with pytest.raises(NotFound):
        service.revise_part("P999")

    assert store.snapshot() is before


def test_revision_messages(service):
    result = service.revise_part("P001")
    assert result.message == "New revision 2 has been created for part Main Gear."

    plan_result = service.revise_control_plan("CP01")
    assert plan_result.data.version == 3
    assert plan_result.message == "New version 3 has been created for plan Main Gear - Production Plan."


def test_control_plan_archive_and_restore(service, store):
    assert service.archive_control_plan("CP01").data.status is ARCHIVED
    assert store.snapshot().control_plan("CP01").status is ARCHIVED
    assert service.restore_control_plan("CP01").message == "Plan has been successfully restored."
    assert store.snapshot().control_plan("CP01").status is ACTIVE
