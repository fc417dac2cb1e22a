"""In-memory catalog store with copy-on-write snapshots.

The store holds one immutable :class:`CatalogSnapshot`. Writers derive a new
snapshot and swap the reference in a single assignment, so readers always see
either the previous or the next complete state.
"""

import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from typing import Protocol, TypeVar

from backend.core.errors import NotFound
from backend.models.common import LifecycleStatus
from backend.models.control_plan import ControlPlan
from backend.models.gauge import Gauge
from backend.models.part import Part
from backend.models.sample import Sample

R = TypeVar("R")
Record = TypeVar("Record", Part, Gauge, ControlPlan, Sample)


@dataclass(frozen=True)
class CatalogSnapshot:
    parts: tuple[Part, ...] = ()
    gauges: tuple[Gauge, ...] = ()
    control_plans: tuple[ControlPlan, ...] = ()
    samples: tuple[Sample, ...] = ()

    def part(self, part_id: str) -> Part:
        return _require(self.parts, part_id, "Part")

    def gauge(self, gauge_id: str) -> Gauge:
        return _require(self.gauges, gauge_id, "Gauge")

    def control_plan(self, plan_id: str) -> ControlPlan:
        return _require(self.control_plans, plan_id, "Control plan")

    def sample(self, sample_id: str) -> Sample:
        return _require(self.samples, sample_id, "Sample")

    def active_plans_for(self, part_id: str) -> list[ControlPlan]:
        return [
            plan
            for plan in self.control_plans
            if plan.part_id == part_id and plan.status is LifecycleStatus.ACTIVE
        ]

    def with_changes(self, **changes: tuple) -> "CatalogSnapshot":
        return replace(self, **changes)


class CatalogRepository(Protocol):
    """What the services need from a store; persistence can be swapped in here."""

    def snapshot(self) -> CatalogSnapshot:
        ...

    def update(self, mutate: Callable[[CatalogSnapshot], tuple[CatalogSnapshot, R]]) -> R:
        ...


class InMemoryCatalogStore:
    """Snapshot-replacing store.

    FastAPI runs sync handlers on a thread pool, so writers are serialised
    with a lock held across read-modify-swap. Readers never block.
    """

    def __init__(self, snapshot: CatalogSnapshot | None = None) -> None:
        self._snapshot = snapshot or CatalogSnapshot()
        self._write_lock = threading.Lock()

    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    def update(self, mutate: Callable[[CatalogSnapshot], tuple[CatalogSnapshot, R]]) -> R:
        """Apply ``mutate`` to the current snapshot and publish its result.

        If ``mutate`` raises, the current snapshot stays in place.
        """
        with self._write_lock:
            new_snapshot, result = mutate(self._snapshot)
            self._snapshot = new_snapshot
        return result


def replace_record(records: Iterable[Record], record: Record) -> tuple[Record, ...]:
    """Return ``records`` with the entry sharing ``record.id`` swapped out."""
    return tuple(record if existing.id == record.id else existing for existing in records)


def _require(records: Iterable[Record], record_id: str, kind: str) -> Record:
    for record in records:
        if record.id == record_id:
            return record
    raise NotFound(f"{kind} '{record_id}' not found")
