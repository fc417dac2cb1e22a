"""Quality service: catalog editing, lifecycle and sample workflow over the store.

Every state change goes through :meth:`CatalogRepository.update`, so each
action publishes exactly one new snapshot or none at all.
"""

from __future__ import annotations

from collections.abc import Callable

from backend.core import annotations, ledger, lifecycle, logger, workflow
from backend.core.errors import InvalidInput, NotFound
from backend.core.ledger import ParameterSummary
from backend.db.store import CatalogRepository, CatalogSnapshot, replace_record
from backend.models.common import ActionResult, LifecycleStatus, new_id
from backend.models.control_plan import (
    BooleanParameter,
    ControlPlan,
    ControlPlanCreate,
    ControlPlanUpdate,
    NumericParameter,
    ParameterInput,
)
from backend.models.drawing import BubblePlacement
from backend.models.gauge import Gauge, GaugeCreate, GaugeStatus, GaugeUpdate
from backend.models.part import Part, PartCreate, PartUpdate
from backend.models.sample import (
    MeasurementInput,
    Sample,
    SampleOrigin,
    SampleStatus,
)
from backend.services import analysis
from backend.services.dashboard import DashboardOverview, build_dashboard


class QualityService:
    def __init__(self, store: CatalogRepository) -> None:
        self.store = store

    # Parts -----------------------------------------------------------------

    def list_parts(self, status: LifecycleStatus | None = None, search: str | None = None) -> list[Part]:
        parts = list(self.store.snapshot().parts)
        if status is not None:
            parts = [p for p in parts if p.status is status]
        if search:
            needle = search.lower()
            parts = [
                p for p in parts
                if needle in p.part_code.lower() or needle in p.name.lower()
            ]
        return parts

    def get_part(self, part_id: str) -> Part:
        return self.store.snapshot().part(part_id)

    def create_part(self, payload: PartCreate) -> ActionResult[Part]:
        part = Part(id=new_id("P"), **payload.model_dump())

        def mutate(snapshot: CatalogSnapshot):
            _require_unique_code(snapshot, part)
            return snapshot.with_changes(parts=(*snapshot.parts, part)), part

        self.store.update(mutate)
        logger.info("Created part %s (%s)", part.id, part.part_code)
        return ActionResult[Part](message=f"Part {part.name} has been created.", data=part)

    def update_part(self, part_id: str, payload: PartUpdate) -> ActionResult[Part]:
        changes = payload.model_dump(exclude_none=True)

        def edit(snapshot: CatalogSnapshot):
            part = snapshot.part(part_id).model_copy(update=changes)
            _require_unique_code(snapshot, part)
            return snapshot.with_changes(parts=replace_record(snapshot.parts, part)), part

        part = self.store.update(edit)
        return ActionResult[Part](message=f"Part {part.name} has been saved.", data=part)

    def archive_part(self, part_id: str) -> ActionResult[Part]:
        part = self._replace("parts", "part", part_id, lifecycle.archive)
        return ActionResult[Part](message="Part has been successfully archived.", data=part)

    def restore_part(self, part_id: str) -> ActionResult[Part]:
        part = self._replace("parts", "part", part_id, lifecycle.restore)
        return ActionResult[Part](message="Part has been successfully restored.", data=part)

    def revise_part(self, part_id: str) -> ActionResult[Part]:
        part = self._revise("parts", "part", part_id)
        return ActionResult[Part](
            message=f"New revision {part.revision} has been created for part {part.name}.",
            data=part,
        )

    # Gauges ----------------------------------------------------------------

    def list_gauges(self, status: GaugeStatus | None = None) -> list[Gauge]:
        gauges = list(self.store.snapshot().gauges)
        if status is not None:
            gauges = [g for g in gauges if g.status is status]
        return gauges

    def get_gauge(self, gauge_id: str) -> Gauge:
        return self.store.snapshot().gauge(gauge_id)

    def create_gauge(self, payload: GaugeCreate) -> ActionResult[Gauge]:
        gauge = Gauge(id=new_id("G"), **payload.model_dump())
        self.store.update(lambda s: (s.with_changes(gauges=(*s.gauges, gauge)), gauge))
        return ActionResult[Gauge](message=f"Gauge {gauge.name} has been created.", data=gauge)

    def update_gauge(self, gauge_id: str, payload: GaugeUpdate) -> ActionResult[Gauge]:
        changes = payload.model_dump(exclude_none=True)
        gauge = self._replace("gauges", "gauge", gauge_id, lambda g: g.model_copy(update=changes))
        return ActionResult[Gauge](message=f"Gauge {gauge.name} has been saved.", data=gauge)

    def delete_gauge(self, gauge_id: str) -> ActionResult[Gauge]:
        def mutate(snapshot: CatalogSnapshot):
            gauge = snapshot.gauge(gauge_id)
            remaining = tuple(g for g in snapshot.gauges if g.id != gauge_id)
            return snapshot.with_changes(gauges=remaining), gauge

        gauge = self.store.update(mutate)
        logger.info("Deleted gauge %s", gauge_id)
        return ActionResult[Gauge](message=f"Gauge {gauge.name} has been deleted.", data=gauge)

    # Control plans ---------------------------------------------------------

    def list_control_plans(
        self,
        part_id: str | None = None,
        status: LifecycleStatus | None = None,
    ) -> list[ControlPlan]:
        plans = list(self.store.snapshot().control_plans)
        if part_id is not None:
            plans = [p for p in plans if p.part_id == part_id]
        if status is not None:
            plans = [p for p in plans if p.status is status]
        return plans

    def get_control_plan(self, plan_id: str) -> ControlPlan:
        return self.store.snapshot().control_plan(plan_id)

    def create_control_plan(self, payload: ControlPlanCreate) -> ActionResult[ControlPlan]:
        def mutate(snapshot: CatalogSnapshot):
            snapshot.part(payload.part_id)
            plan = ControlPlan(
                id=new_id("CP"),
                part_id=payload.part_id,
                name=payload.name,
                version=payload.version,
                parameters=tuple(_build_parameter(new_id("MP"), p) for p in payload.parameters),
                drawing_image_url=payload.drawing_image_url,
            )
            return snapshot.with_changes(control_plans=(*snapshot.control_plans, plan)), plan

        plan = self.store.update(mutate)
        logger.info("Created control plan %s for part %s", plan.id, plan.part_id)
        return ActionResult[ControlPlan](message=f"Plan {plan.name} has been created.", data=plan)

    def update_control_plan(self, plan_id: str, payload: ControlPlanUpdate) -> ActionResult[ControlPlan]:
        changes = payload.model_dump(exclude_none=True)

        def mutate(snapshot: CatalogSnapshot):
            if "part_id" in changes:
                snapshot.part(changes["part_id"])
            plan = snapshot.control_plan(plan_id).model_copy(update=changes)
            return snapshot.with_changes(control_plans=replace_record(snapshot.control_plans, plan)), plan

        plan = self.store.update(mutate)
        return ActionResult[ControlPlan](message=f"Plan {plan.name} has been saved.", data=plan)

    def archive_control_plan(self, plan_id: str) -> ActionResult[ControlPlan]:
        plan = self._replace("control_plans", "control_plan", plan_id, lifecycle.archive)
        return ActionResult[ControlPlan](message="Plan has been successfully archived.", data=plan)

    def restore_control_plan(self, plan_id: str) -> ActionResult[ControlPlan]:
        plan = self._replace("control_plans", "control_plan", plan_id, lifecycle.restore)
        return ActionResult[ControlPlan](message="Plan has been successfully restored.", data=plan)

    def revise_control_plan(self, plan_id: str) -> ActionResult[ControlPlan]:
        plan = self._revise("control_plans", "control_plan", plan_id)
        return ActionResult[ControlPlan](
            message=f"New version {plan.version} has been created for plan {plan.name}.",
            data=plan,
        )

    def add_parameter(self, plan_id: str, payload: ParameterInput) -> ActionResult[ControlPlan]:
        parameter = _build_parameter(new_id("MP"), payload)
        plan = self._replace(
            "control_plans",
            "control_plan",
            plan_id,
            lambda p: p.model_copy(update={"parameters": (*p.parameters, parameter)}),
        )
        return ActionResult[ControlPlan](message=f"Parameter {parameter.name} has been added.", data=plan)

    def update_parameter(self, plan_id: str, parameter_id: str, payload: ParameterInput) -> ActionResult[ControlPlan]:
        # Recorded measurements keep the verdict they were given.
        def edit(plan: ControlPlan) -> ControlPlan:
            if plan.get_parameter(parameter_id) is None:
                raise NotFound(f"Parameter '{parameter_id}' not found in plan '{plan.name}'")
            parameters = tuple(
                _build_parameter(parameter_id, payload) if p.id == parameter_id else p
                for p in plan.parameters
            )
            return plan.model_copy(update={"parameters": parameters})

        plan = self._replace("control_plans", "control_plan", plan_id, edit)
        return ActionResult[ControlPlan](message=f"Parameter {payload.name} has been saved.", data=plan)

    def delete_parameter(self, plan_id: str, parameter_id: str) -> ActionResult[ControlPlan]:
        def edit(plan: ControlPlan) -> ControlPlan:
            if plan.get_parameter(parameter_id) is None:
                raise NotFound(f"Parameter '{parameter_id}' not found in plan '{plan.name}'")
            parameters = tuple(p for p in plan.parameters if p.id != parameter_id)
            return plan.model_copy(update={"parameters": parameters})

        plan = self._replace("control_plans", "control_plan", plan_id, edit)
        return ActionResult[ControlPlan](message="Parameter has been deleted.", data=plan)

    # Samples ---------------------------------------------------------------

    def list_samples(
        self,
        origin: SampleOrigin | None = None,
        status: SampleStatus | None = None,
        part_id: str | None = None,
    ) -> list[Sample]:
        samples = list(self.store.snapshot().samples)
        if origin is not None:
            samples = [s for s in samples if s.origin is origin]
        if status is not None:
            samples = [s for s in samples if s.status is status]
        if part_id is not None:
            samples = [s for s in samples if s.part_id == part_id]
        return samples

    def get_sample(self, sample_id: str) -> Sample:
        return self.store.snapshot().sample(sample_id)

    def create_sample(self, part_id: str, control_plan_id: str, batch_number: str) -> ActionResult[Sample]:
        def mutate(snapshot: CatalogSnapshot):
            sample = workflow.create_sample(snapshot, part_id, control_plan_id, batch_number)
            return snapshot.with_changes(samples=(*snapshot.samples, sample)), sample

        sample = self.store.update(mutate)
        return ActionResult[Sample](message=f"Sample {sample.id} has been created.", data=sample)

    def receive_batch(self, part_code: str, count: int, batch_number: str) -> ActionResult[list[Sample]]:
        def mutate(snapshot: CatalogSnapshot):
            samples = workflow.create_inspection_batch(snapshot, part_code, count, batch_number)
            return snapshot.with_changes(samples=(*snapshot.samples, *samples)), samples

        samples = self.store.update(mutate)
        part_name = self.get_part(samples[0].part_id).name
        return ActionResult[list[Sample]](
            message=(
                f'{len(samples)} inspection samples for part "{part_name}" were successfully '
                "created and moved to Incoming Inspection."
            ),
            data=samples,
        )

    def start_sample(self, sample_id: str) -> ActionResult[Sample]:
        sample = self._update_sample(sample_id, lambda snapshot, s: workflow.start_sample(s))
        return ActionResult[Sample](message=f"Sample {sample.id} is in progress.", data=sample)

    def record_measurement(self, sample_id: str, payload: MeasurementInput) -> ActionResult[Sample]:
        def apply(snapshot: CatalogSnapshot, sample: Sample) -> Sample:
            plan = snapshot.control_plan(sample.control_plan_id)
            return workflow.record_measurement(sample, plan, payload.parameter_id, payload.value)

        sample = self._update_sample(sample_id, apply)
        latest = sample.measurements[-1]
        verdict = "OK" if latest.is_ok else "NOK"
        return ActionResult[Sample](message=f"Measurement recorded: {verdict}.", data=sample)

    def remove_measurement(self, sample_id: str, measurement_id: str) -> ActionResult[Sample]:
        sample = self._update_sample(
            sample_id,
            lambda snapshot, s: workflow.remove_measurement(s, measurement_id),
        )
        return ActionResult[Sample](message="Measurement has been deleted.", data=sample)

    def place_bubble(self, sample_id: str, payload: BubblePlacement) -> ActionResult[Sample]:
        def apply(snapshot: CatalogSnapshot, sample: Sample) -> Sample:
            plan = snapshot.control_plan(sample.control_plan_id)
            bubbles = annotations.place_bubble(sample.bubbles, plan, payload.parameter_id, payload.x, payload.y)
            return sample.model_copy(update={"bubbles": bubbles})

        sample = self._update_sample(sample_id, apply)
        bubble = annotations.bubble_for(sample.bubbles, payload.parameter_id)
        return ActionResult[Sample](message=f"Bubble {bubble.number} has been placed.", data=sample)

    def summarize_sample(self, sample_id: str) -> list[ParameterSummary]:
        snapshot = self.store.snapshot()
        sample = snapshot.sample(sample_id)
        plan = snapshot.control_plan(sample.control_plan_id)
        return ledger.summarize_all(sample.measurements, plan)

    def complete_sample(
        self,
        sample_id: str,
        final_readings: list[MeasurementInput] | None = None,
    ) -> ActionResult[Sample]:
        def apply(snapshot: CatalogSnapshot, sample: Sample) -> Sample:
            final = None
            if final_readings is not None:
                plan = snapshot.control_plan(sample.control_plan_id)
                final = ()
                for reading in final_readings:
                    final = ledger.add_measurement(final, plan, reading.parameter_id, reading.value)
            return workflow.complete_sample(sample, final)

        sample = self._update_sample(sample_id, apply)
        if sample.origin is SampleOrigin.INSPECTION:
            message = f"Inspection of sample {sample.id} has been completed."
        else:
            message = "Measurements saved and sample marked as complete."
        return ActionResult[Sample](message=message, data=sample)

    def analyze_sample(self, sample_id: str) -> str:
        snapshot = self.store.snapshot()
        sample = snapshot.sample(sample_id)
        plan = snapshot.control_plan(sample.control_plan_id)
        return analysis.analyze_measurement_data(sample.measurements, plan.parameters)

    # Dashboard -------------------------------------------------------------

    def dashboard(self) -> DashboardOverview:
        return build_dashboard(self.store.snapshot())

    # Helpers ---------------------------------------------------------------

    def _replace(self, collection: str, kind: str, record_id: str, change: Callable):
        def mutate(snapshot: CatalogSnapshot):
            record = change(getattr(snapshot, kind)(record_id))
            records = replace_record(getattr(snapshot, collection), record)
            return snapshot.with_changes(**{collection: records}), record

        return self.store.update(mutate)

    def _revise(self, collection: str, kind: str, record_id: str):
        # Archiving the original and appending the revision land in one snapshot.
        def mutate(snapshot: CatalogSnapshot):
            archived, revised = lifecycle.create_revision(getattr(snapshot, kind)(record_id))
            records = (*replace_record(getattr(snapshot, collection), archived), revised)
            return snapshot.with_changes(**{collection: records}), revised

        return self.store.update(mutate)

    def _update_sample(self, sample_id: str, change: Callable[[CatalogSnapshot, Sample], Sample]) -> Sample:
        def mutate(snapshot: CatalogSnapshot):
            sample = change(snapshot, snapshot.sample(sample_id))
            return snapshot.with_changes(samples=replace_record(snapshot.samples, sample)), sample

        return self.store.update(mutate)


def _require_unique_code(snapshot: CatalogSnapshot, part: Part) -> None:
    """Only one Active part may answer to a part code, compared case-insensitively."""
    if part.status is not LifecycleStatus.ACTIVE:
        return
    wanted = part.part_code.strip().lower()
    for other in snapshot.parts:
        if (
            other.id != part.id
            and other.status is LifecycleStatus.ACTIVE
            and other.part_code.strip().lower() == wanted
        ):
            raise InvalidInput(f'Part code "{part.part_code}" is already used by active part {other.name}.')


def _build_parameter(parameter_id: str, payload: ParameterInput) -> NumericParameter | BooleanParameter:
    fields = payload.model_dump()
    if fields.pop("type") == "boolean":
        return BooleanParameter(id=parameter_id, **fields)
    return NumericParameter(id=parameter_id, **fields)
