"""
Snapshot Diff Module

Provides composite keys, numeric-tolerant field comparison, and record,
collection and snapshot level change detection.
"""

from studydiff.diff.collection import CollectionDiffer, diff_collections
from studydiff.diff.comparator import (
    Comparison,
    ComparisonOptions,
    FieldComparator,
    UnitTokenTable,
    values_equivalent,
)
from studydiff.diff.entity import EntityDiffer, diff_records
from studydiff.diff.keys import CompositeKey
from studydiff.diff.models import (
    ChangeRecord,
    ChangeType,
    DiffFailure,
    FieldChange,
    SnapshotDiff,
)
from studydiff.diff.projection import group_members, project_groups
from studydiff.diff.schema import EntityRecord, EntitySchema, FieldDescriptor
from studydiff.diff.snapshot import (
    Snapshot,
    SnapshotComparator,
    SnapshotSchema,
    diff_snapshots,
)

__all__ = [
    "ChangeRecord",
    "ChangeType",
    "CollectionDiffer",
    "Comparison",
    "ComparisonOptions",
    "CompositeKey",
    "DiffFailure",
    "EntityDiffer",
    "EntityRecord",
    "EntitySchema",
    "FieldChange",
    "FieldComparator",
    "FieldDescriptor",
    "Snapshot",
    "SnapshotComparator",
    "SnapshotDiff",
    "SnapshotSchema",
    "UnitTokenTable",
    "diff_collections",
    "diff_records",
    "diff_snapshots",
    "group_members",
    "project_groups",
    "values_equivalent",
]
