"""Built-in demo catalog used when no seed file is configured."""

import random
from datetime import date, datetime, timedelta, timezone
from typing import List, Tuple

from backend.core import ledger
from backend.db.store import CatalogSnapshot
from backend.models.common import LifecycleStatus
from backend.models.control_plan import BooleanParameter, ControlPlan, NumericParameter
from backend.models.gauge import Gauge, GaugeStatus
from backend.models.part import Part
from backend.models.sample import Measurement, Sample, SampleOrigin, SampleStatus

from . import logger

MOCK_PARTS: Tuple[Part, ...] = (
    Part(id="P001", part_code="PN-1001", name="Main Gear", drawing_number="DWG-10-22-001",
         material="Steel 4140", image_url="https://picsum.photos/seed/gear/800/600", revision=1),
    Part(id="P002", part_code="PN-2351", name="Connector Housing", drawing_number="DWG-12-05-012",
         material="ABS Plastic", image_url="https://picsum.photos/seed/housing/800/600", revision=2),
    Part(id="P003", part_code="PN-4598", name="Mounting Bracket", drawing_number="DWG-08-11-045",
         material="Aluminum 6061", image_url="https://picsum.photos/seed/bracket/800/600", revision=1),
    Part(id="P004", part_code="PN-4598-OLD", name="Archived Bracket", drawing_number="DWG-08-11-045-OLD",
         material="Aluminum 6061", image_url="https://picsum.photos/seed/bracket_old/800/600", revision=1,
         status=LifecycleStatus.ARCHIVED),
)

MOCK_GAUGES: Tuple[Gauge, ...] = (
    Gauge(id="G01", name="Digital Caliper", type="Caliper", serial_number="SN-DC-12345",
          last_calibration=date(2024, 5, 10), next_calibration=date(2025, 5, 10)),
    Gauge(id="G02", name="Micrometer", type="Micrometer", serial_number="SN-MC-67890",
          last_calibration=date(2024, 7, 20), next_calibration=date(2024, 9, 20),
          status=GaugeStatus.DUE_FOR_CALIBRATION),
    Gauge(id="G03", name="Height Gauge", type="Height Gauge", serial_number="SN-HG-11223",
          last_calibration=date(2023, 11, 1), next_calibration=date(2024, 11, 1)),
    Gauge(id="G04", name="CMM Machine", type="CMM", serial_number="SN-CMM-001",
          last_calibration=date(2024, 2, 15), next_calibration=date(2025, 2, 15)),
)

MOCK_PARAMETERS: Tuple[NumericParameter | BooleanParameter, ...] = (
    NumericParameter(id="MP001", name="Outer Diameter", nominal=50.00, tol_plus=0.05, tol_minus=0.05, unit="mm"),
    NumericParameter(id="MP002", name="Inner Bore", nominal=25.00, tol_plus=0.02, tol_minus=0.02, unit="mm"),
    NumericParameter(id="MP003", name="Overall Length", nominal=120.00, tol_plus=0.1, tol_minus=0.1, unit="mm"),
    NumericParameter(id="MP004", name="Flange Thickness", nominal=10.00, tol_plus=0.03, tol_minus=0.03, unit="mm"),
    NumericParameter(id="MP005", name="Hole Position X", nominal=35.5, tol_plus=0.05, tol_minus=0.05, unit="mm"),
    NumericParameter(id="MP006", name="Hole Position Y", nominal=35.5, tol_plus=0.05, tol_minus=0.05, unit="mm"),
    # No burrs is OK.
    BooleanParameter(id="MP007", name="Visual Check: Burrs", expected_value=False),
    BooleanParameter(id="MP008", name="Logo Present", expected_value=True),
)

MOCK_CONTROL_PLANS: Tuple[ControlPlan, ...] = (
    ControlPlan(id="CP01", part_id="P001", name="Main Gear - Production Plan", version=2,
                parameters=MOCK_PARAMETERS, drawing_image_url="https://picsum.photos/seed/drawing1/800/600"),
    ControlPlan(id="CP02", part_id="P002", name="Connector Housing - First Article", version=1,
                parameters=(MOCK_PARAMETERS[2], MOCK_PARAMETERS[3], MOCK_PARAMETERS[7])),
    ControlPlan(id="CP03", part_id="P001", name="Main Gear - Production Plan", version=1,
                parameters=MOCK_PARAMETERS[:5], status=LifecycleStatus.ARCHIVED),
)


def generate_measurements(
    plan: ControlPlan,
    rng: random.Random,
    started_at: datetime,
) -> Tuple[Measurement, ...]:
    """Random readings around nominal, spread to about 1.5x the tolerance band.

    Numeric parameters get one to three readings, boolean ones a single reading.
    """
    measurements: Tuple[Measurement, ...] = ()
    timestamp = started_at
    for parameter in plan.parameters:
        if isinstance(parameter, NumericParameter):
            count = rng.randint(1, 3) if rng.random() > 0.3 else 1
            band = parameter.tol_plus + parameter.tol_minus
            for _ in range(count):
                value = round(parameter.nominal + (rng.random() - 0.5) * band * 1.5, 3)
                timestamp += timedelta(seconds=30)
                measurements = ledger.add_measurement(measurements, plan, parameter.id, value, timestamp=timestamp)
        else:
            timestamp += timedelta(seconds=30)
            measurements = ledger.add_measurement(
                measurements, plan, parameter.id, rng.random() > 0.3, timestamp=timestamp
            )
    return measurements


def build_mock_samples(rng_seed: int = 2024) -> List[Sample]:
    rng = random.Random(rng_seed)
    main_plan = MOCK_CONTROL_PLANS[0]

    def _at(text: str) -> datetime:
        return datetime.fromisoformat(text).replace(tzinfo=timezone.utc)

    return [
        Sample(id="S001", part_id="P001", control_plan_id="CP01", batch_number="B-2024-001",
               created_at=_at("2024-07-29T10:00:00"),
               measurements=generate_measurements(main_plan, rng, _at("2024-07-29T10:00:00")),
               origin=SampleOrigin.PRODUCTION, status=SampleStatus.COMPLETED),
        Sample(id="S002", part_id="P001", control_plan_id="CP01", batch_number="B-2024-001",
               created_at=_at("2024-07-29T11:00:00"),
               origin=SampleOrigin.PRODUCTION, status=SampleStatus.IN_PROGRESS),
        Sample(id="S003", part_id="P001", control_plan_id="CP01", batch_number="B-2024-002",
               created_at=_at("2024-07-30T09:00:00"),
               origin=SampleOrigin.PRODUCTION, status=SampleStatus.PENDING),
        Sample(id="INSP-001", part_id="P002", control_plan_id="CP02", batch_number="DOD-ACME-0824-1",
               created_at=_at("2024-08-01T14:00:00"),
               origin=SampleOrigin.INSPECTION, status=SampleStatus.INSPECTION_PENDING),
        Sample(id="INSP-002", part_id="P002", control_plan_id="CP02", batch_number="DOD-ACME-0824-1",
               created_at=_at("2024-08-01T14:01:00"),
               origin=SampleOrigin.INSPECTION, status=SampleStatus.INSPECTION_PENDING),
    ]


def build_mock_snapshot(rng_seed: int = 2024) -> CatalogSnapshot:
    snapshot = CatalogSnapshot(
        parts=MOCK_PARTS,
        gauges=MOCK_GAUGES,
        control_plans=MOCK_CONTROL_PLANS,
        samples=tuple(build_mock_samples(rng_seed)),
    )
    logger.info(
        "Built mock catalog: %s parts, %s plans, %s samples",
        len(snapshot.parts),
        len(snapshot.control_plans),
        len(snapshot.samples),
    )
    return snapshot
