"""
Grouped Field Projection

Some entity types store grouped settings flat on the parent record (trip-unit
settings on a breaker: TripUnitLtpu, TripUnitStpu, ...). Older consumers expect
a nested object instead. The projection is rebuilt on demand from descriptors;
diffing always works on the flat record.
"""

from __future__ import annotations

from studydiff.diff.schema import EntityRecord


def project_groups(record: EntityRecord, include_empty: bool = False) -> dict[str, object]:
    """Return the record with grouped fields nested under their group name.

    {"Name": "LVCB-1", "TripUnitLtpu": "0.8"} -> {"Name": "LVCB-1", "TripUnit": {"Ltpu": "0.8"}}

    A group with no populated member projects as None unless `include_empty` is set.
    """
    projected: dict[str, object] = {}
    groups: dict[str, dict[str, str | None]] = {}

    for descriptor in record.schema.fields:
        value = record.get(descriptor.name)
        if descriptor.group is None:
            projected[descriptor.name] = value
            continue
        group = groups.setdefault(descriptor.group, {})
        group[descriptor.member or descriptor.name] = value

    for name, members in groups.items():
        if include_empty or any(v is not None and v.strip() for v in members.values()):
            projected[name] = members
        else:
            projected[name] = None

    return projected


def group_members(record: EntityRecord, group: str) -> dict[str, str | None]:
    """Flat field values of one group keyed by member name."""
    return {
        descriptor.member or descriptor.name: record.get(descriptor.name)
        for descriptor in record.schema.fields
        if descriptor.group == group
    }
