import pytest

from backend.core.errors import InvalidInput, InvalidState, NotFound, UnknownParameter
from backend.core.ledger import SummaryIndicator
from backend.models.common import LifecycleStatus
from backend.models.control_plan import (
    BooleanParameterInput,
    ControlPlanCreate,
    ControlPlanUpdate,
    NumericParameterInput,
)
from backend.models.gauge import GaugeCreate, GaugeStatus, GaugeUpdate
from backend.models.part import PartCreate, PartUpdate
from backend.models.sample import MeasurementInput, SampleOrigin, SampleStatus


def test_part_crud(service):
    created = service.create_part(PartCreate(part_code="PN-7000", name="Shaft", material="Steel")).data
    assert created.revision == 1
    assert created.status is LifecycleStatus.ACTIVE
    assert service.get_part(created.id) == created

    updated = service.update_part(created.id, PartUpdate(name="Drive Shaft")).data
    assert updated.name == "Drive Shaft"
    assert updated.material == "Steel"


def test_active_part_codes_stay_unique(service, store):
    before = store.snapshot()
    with pytest.raises(InvalidInput):
        service.update_part("P003", PartUpdate(part_code="pn-1001"))
    with pytest.raises(InvalidInput):
        service.create_part(PartCreate(part_code="Pn-2351", name="Copy"))
    assert store.snapshot() is before

    # an archived part does not hold its code
    assert service.update_part("P003", PartUpdate(part_code="PN-4598-old")).data.part_code == "PN-4598-old"
    assert service.update_part("P001", PartUpdate(part_code="PN-1001", name="Main Gear")).ok


def test_list_parts_filters(service):
    assert [p.id for p in service.list_parts(LifecycleStatus.ARCHIVED)] == ["P004"]
    assert [p.id for p in service.list_parts(search="gear")] == ["P001"]
    assert {p.id for p in service.list_parts(search="pn-4598")} == {"P003", "P004"}


def test_archive_message(service):
    result = service.archive_part("P003")
    assert result.ok
    assert result.message == "Part has been successfully archived."
    assert service.get_part("P003").status is LifecycleStatus.ARCHIVED


def test_gauge_crud(service):
    gauge = service.create_gauge(GaugeCreate(name="Bore Gauge", type="Bore")).data
    assert service.get_gauge(gauge.id).name == "Bore Gauge"

    updated = service.update_gauge(gauge.id, GaugeUpdate(status=GaugeStatus.INACTIVE)).data
    assert updated.status is GaugeStatus.INACTIVE
    assert [g.id for g in service.list_gauges(GaugeStatus.DUE_FOR_CALIBRATION)] == ["G02"]

    service.delete_gauge(gauge.id)
    with pytest.raises(NotFound):
        service.get_gauge(gauge.id)
    with pytest.raises(NotFound):
        service.delete_gauge(gauge.id)


def test_create_control_plan_with_parameters(service):
    payload = ControlPlanCreate(
        part_id="P003",
        name="Bracket - Production",
        parameters=[
            NumericParameterInput(name="Width", nominal=40, tol_plus=0.1, tol_minus=0.2, unit="mm"),
            BooleanParameterInput(name="Deburred", expected_value=True),
        ],
    )
    plan = service.create_control_plan(payload).data

    assert plan.version == 1
    assert [p.type for p in plan.parameters] == ["numeric", "boolean"]
    assert plan.parameters[0].lower_limit == pytest.approx(39.8)
    assert len({p.id for p in plan.parameters}) == 2

    batch = service.receive_batch("PN-4598", 1, "B-1").data
    assert batch[0].control_plan_id == plan.id


def test_control_plan_for_unknown_part(service, store):
    before = store.snapshot()
    with pytest.raises(NotFound):
        service.create_control_plan(ControlPlanCreate(part_id="P999", name="Nope"))
    with pytest.raises(NotFound):
        service.update_control_plan("CP01", ControlPlanUpdate(part_id="P999"))
    assert store.snapshot() is before


def test_parameter_edit_keeps_recorded_verdicts(service):
    service.record_measurement("S002", MeasurementInput(parameter_id="MP001", value=50.04))
    assert service.get_sample("S002").measurements[0].is_ok

    narrowed = NumericParameterInput(name="Outer Diameter", nominal=50.0, tol_plus=0.01, tol_minus=0.01, unit="mm")
    plan = service.update_parameter("CP01", "MP001", narrowed).data
    assert plan.get_parameter("MP001").tol_plus == 0.01
    assert plan.parameters[0].id == "MP001"

    assert service.get_sample("S002").measurements[0].is_ok
    result = service.record_measurement("S002", MeasurementInput(parameter_id="MP001", value=50.04))
    assert result.message == "Measurement recorded: NOK."


def test_add_and_delete_parameter(service):
    plan = service.add_parameter("CP02", BooleanParameterInput(name="Label Legible", expected_value=True)).data
    added = plan.parameters[-1]
    assert added.name == "Label Legible"

    plan = service.delete_parameter("CP02", added.id).data
    assert plan.get_parameter(added.id) is None
    with pytest.raises(NotFound):
        service.delete_parameter("CP02", added.id)


def test_record_measurement_flow(service):
    result = service.record_measurement("S003", MeasurementInput(parameter_id="MP007", value=True))
    assert result.message == "Measurement recorded: NOK."
    assert result.data.status is SampleStatus.IN_PROGRESS

    with pytest.raises(UnknownParameter):
        service.record_measurement("S003", MeasurementInput(parameter_id="MP999", value=1))

    measurement_id = result.data.measurements[0].id
    assert service.remove_measurement("S003", measurement_id).data.measurements == ()
    with pytest.raises(NotFound):
        service.remove_measurement("S003", measurement_id)


def test_summarize_sample_follows_plan_order(service):
    service.record_measurement("S002", MeasurementInput(parameter_id="MP002", value=25.0))
    service.record_measurement("S002", MeasurementInput(parameter_id="MP002", value=26.0))

    summaries = service.summarize_sample("S002")
    assert [s.parameter_id for s in summaries] == [f"MP00{i}" for i in range(1, 9)]
    assert summaries[0].indicator is SummaryIndicator.NEUTRAL
    assert summaries[1].label == "1 / 2 OK"
    assert summaries[1].indicator is SummaryIndicator.NOK


def test_complete_with_final_readings(service):
    readings = [
        MeasurementInput(parameter_id="MP003", value=120.05),
        MeasurementInput(parameter_id="MP008", value=False),
    ]
    result = service.complete_sample("INSP-001", readings)

    sample = result.data
    assert result.message == "Inspection of sample INSP-001 has been completed."
    assert sample.status is SampleStatus.INSPECTION_COMPLETED
    assert [m.is_ok for m in sample.measurements] == [True, False]

    with pytest.raises(InvalidState):
        service.complete_sample("INSP-001")


def test_complete_production_sample_keeps_recorded_readings(service):
    service.record_measurement("S002", MeasurementInput(parameter_id="MP001", value=50.0))
    result = service.complete_sample("S002")
    assert result.message == "Measurements saved and sample marked as complete."
    assert result.data.status is SampleStatus.COMPLETED
    assert len(result.data.measurements) == 1


def test_receive_batch_message_and_listing(service):
    result = service.receive_batch("PN-2351", 2, "DEL-7")
    assert result.message == (
        '2 inspection samples for part "Connector Housing" were successfully '
        "created and moved to Incoming Inspection."
    )
    pending = service.list_samples(SampleOrigin.INSPECTION, SampleStatus.INSPECTION_PENDING)
    assert len(pending) == 4


def test_create_sample_and_start(service):
    sample = service.create_sample("P002", "CP02", "B-9").data
    started = service.start_sample(sample.id).data
    assert started.status is SampleStatus.IN_PROGRESS
    assert service.list_samples(part_id="P002", status=SampleStatus.IN_PROGRESS) == [started]
