import threading

import pytest

from backend.core.errors import NotFound
from backend.db.store import CatalogSnapshot, InMemoryCatalogStore, replace_record
from backend.models.common import LifecycleStatus
from backend.models.gauge import Gauge


def test_lookups_raise_not_found(snapshot):
    assert snapshot.part("P001").part_code == "PN-1001"
    with pytest.raises(NotFound, match="Part 'P999' not found"):
        snapshot.part("P999")
    with pytest.raises(NotFound):
        snapshot.control_plan("CP99")
    with pytest.raises(NotFound):
        snapshot.sample("S999")
    with pytest.raises(NotFound):
        snapshot.gauge("G99")


def test_active_plans_for(snapshot):
    assert [p.id for p in snapshot.active_plans_for("P001")] == ["CP01"]
    assert snapshot.active_plans_for("P003") == []


def test_update_publishes_new_snapshot(store):
    before = store.snapshot()

    def mutate(snapshot):
        part = snapshot.part("P001").model_copy(update={"status": LifecycleStatus.ARCHIVED})
        return snapshot.with_changes(parts=replace_record(snapshot.parts, part)), part

    result = store.update(mutate)

    assert result.status is LifecycleStatus.ARCHIVED
    assert store.snapshot() is not before
    assert store.snapshot().part("P001").status is LifecycleStatus.ARCHIVED
    # readers holding the old snapshot keep seeing the old state
    assert before.part("P001").status is LifecycleStatus.ACTIVE


def test_failed_update_keeps_current_snapshot(store):
    before = store.snapshot()

    def mutate(snapshot):
        snapshot.part("missing")
        return snapshot.with_changes(parts=()), None

    with pytest.raises(NotFound):
        store.update(mutate)
    assert store.snapshot() is before


def test_concurrent_writers_do_not_lose_updates():
    store = InMemoryCatalogStore(CatalogSnapshot())

    def add_gauges(prefix):
        for i in range(50):
            gauge = Gauge(id=f"{prefix}-{i}", name="Caliper")
            store.update(lambda s, g=gauge: (s.with_changes(gauges=(*s.gauges, g)), g))

    threads = [threading.Thread(target=add_gauges, args=(f"T{n}",)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(store.snapshot().gauges) == 200


def test_replace_record_keeps_order(snapshot):
    gauge = snapshot.gauge("G02").model_copy(update={"name": "Outside Micrometer"})
    gauges = replace_record(snapshot.gauges, gauge)
    assert [g.id for g in gauges] == [g.id for g in snapshot.gauges]
    assert gauges[1].name == "Outside Micrometer"
