from __future__ import annotations

from studydiff.diff import EntitySchema, FieldDescriptor, SnapshotSchema


BUS = EntitySchema.define(
    "Bus",
    identity=["Name"],
    fields=["Name", "Voltage", "Phases", "Description"],
)

ARC_FLASH = EntitySchema.define(
    "ArcFlash",
    identity=["ArcFaultBusName", "Scenario"],
    fields=[
        "ArcFaultBusName",
        "Scenario",
        "IncidentEnergy",
        "WorkingDistance",
        "ArcFlashBoundary",
        FieldDescriptor("LegacyPpeCategory", ignore=True),
    ],
)

SHORT_CIRCUIT = EntitySchema.define(
    "ShortCircuit",
    identity=["BusName", "EquipmentName", "Scenario"],
    fields=["BusName", "EquipmentName", "Scenario", "DutyKA", "BoltedFaultKA"],
)

LV_BREAKER = EntitySchema.define(
    "LVBreaker",
    identity=["LVBreakerName"],
    fields=[
        "LVBreakerName",
        "Manufacturer",
        "FrameAmps",
        FieldDescriptor("TripUnitManufacturer", group="TripUnit", member="Manufacturer"),
        FieldDescriptor("TripUnitLtpu", group="TripUnit", member="Ltpu"),
        FieldDescriptor("TripUnitStpu", group="TripUnit", member="Stpu"),
    ],
)

STUDY_SCHEMA = SnapshotSchema(
    entity_types=(BUS, ARC_FLASH, SHORT_CIRCUIT, LV_BREAKER),
    scalar_fields=("FormatVersion", "Revision", "StudyDate"),
)


def build_baseline(**metadata_overrides):
    metadata = {"FormatVersion": "0.2.0", "Revision": "A", "StudyDate": "2026-01-15"}
    metadata.update(metadata_overrides)
    records = [
        BUS.record(Name="BUS-1", Voltage="480", Phases="3"),
        BUS.record(Name="BUS-2", Voltage="4160", Phases="3", Description="MV switchgear"),
        ARC_FLASH.record(
            ArcFaultBusName="BUS-1",
            Scenario="Main-Min",
            IncidentEnergy="8.5",
            WorkingDistance="18",
        ),
        ARC_FLASH.record(
            ArcFaultBusName="BUS-1",
            Scenario="Main-Max",
            IncidentEnergy="12.1 cal/cm2",
            WorkingDistance="18",
        ),
        SHORT_CIRCUIT.record(
            BusName="BUS-1",
            EquipmentName="CB-1",
            Scenario="Main-Max",
            DutyKA="10.0 kA",
            BoltedFaultKA="22.4",
        ),
        LV_BREAKER.record(
            LVBreakerName="LVCB-101",
            Manufacturer="Square D",
            FrameAmps="800 A",
            TripUnitLtpu="0.8",
        ),
    ]
    return STUDY_SCHEMA.snapshot(records, metadata=metadata, name="baseline")
