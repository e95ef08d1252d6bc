"""
Snapshot Comparison

Top-level orchestration: diff the scalar metadata of two snapshots directly, then
run the collection differ once per registered entity type and concatenate the
results into one changelog.

A failure while diffing one key or one entity type is recorded on the result and
skipped; it never aborts the whole comparison.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

import structlog

from studydiff.diff.collection import CollectionDiffer, EntityCollection
from studydiff.diff.comparator import ComparisonOptions, FieldComparator
from studydiff.diff.entity import EntityDiffer
from studydiff.diff.models import ChangeType, DiffFailure, FieldChange, SnapshotDiff
from studydiff.diff.schema import EntityRecord, EntitySchema
from studydiff.kernel.errors import ConfigurationError, SchemaMismatchError, StudyDiffError

logger = structlog.get_logger()


@dataclass(frozen=True)
class Snapshot:
    """One point-in-time set of entity collections plus scalar metadata."""

    collections: Mapping[str, EntityCollection] = field(default_factory=dict)
    metadata: Mapping[str, str | None] = field(default_factory=dict)
    name: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "collections", MappingProxyType(dict(self.collections)))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def collection(self, entity_type: str) -> EntityCollection | None:
        return self.collections.get(entity_type)

    def entry_count(self) -> int:
        return sum(len(c) for c in self.collections.values())


@dataclass(frozen=True)
class SnapshotSchema:
    """Registry of tracked entity types and declared scalar metadata fields.

    Entity types are diffed, and reported, in registration order.
    """

    entity_types: tuple[EntitySchema, ...]
    scalar_fields: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "entity_types", tuple(self.entity_types))
        object.__setattr__(self, "scalar_fields", tuple(self.scalar_fields))

        names = [s.name for s in self.entity_types]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigurationError(
                code="config.schema_invalid",
                message=f"Entity types registered more than once: {duplicates}",
            )
        if len(set(self.scalar_fields)) != len(self.scalar_fields):
            raise ConfigurationError(
                code="config.schema_invalid",
                message="Scalar metadata fields must be unique.",
            )

    @property
    def entity_type_names(self) -> tuple[str, ...]:
        return tuple(s.name for s in self.entity_types)

    def entity_schema(self, name: str) -> EntitySchema | None:
        for schema in self.entity_types:
            if schema.name == name:
                return schema
        return None

    def snapshot(
        self,
        records: Iterable[EntityRecord] = (),
        metadata: Mapping[str, str | None] | None = None,
        name: str | None = None,
    ) -> Snapshot:
        """Key records by their schema's identity fields and group them by type."""
        collections: dict[str, dict] = {s.name: {} for s in self.entity_types}
        for record in records:
            schema = self.entity_schema(record.entity_type)
            if schema is None:
                raise SchemaMismatchError(
                    code="schema.unregistered_type",
                    message=f"Entity type {record.entity_type!r} is not registered",
                )
            collections[schema.name][schema.key_for(record)] = record
        return Snapshot(collections=collections, metadata=dict(metadata or {}), name=name)


class SnapshotComparator:
    """Orchestrates a full snapshot comparison.

    Stateless between calls; safe to reuse for any number of comparisons.
    """

    def __init__(self, schema: SnapshotSchema, options: ComparisonOptions | None = None):
        self._schema = schema
        self._options = options or ComparisonOptions()
        self._collection_differ = CollectionDiffer(EntityDiffer(FieldComparator(self._options)))

    @property
    def schema(self) -> SnapshotSchema:
        return self._schema

    def diff(self, old: Snapshot | None, new: Snapshot | None) -> SnapshotDiff:
        result = SnapshotDiff()
        if old is None and new is None:
            return result

        result.scalar_changes.extend(self._diff_scalars(old, new))
        self._warn_unregistered(old, new)

        for entity_type in self._schema.entity_type_names:
            old_collection = old.collection(entity_type) if old is not None else None
            new_collection = new.collection(entity_type) if new is not None else None
            try:
                records = self._collection_differ.diff(
                    entity_type,
                    old_collection,
                    new_collection,
                    on_failure=result.failures.append,
                )
            except Exception as e:
                code = e.code if isinstance(e, StudyDiffError) else "diff.entity_type_failed"
                logger.warning(
                    "Skipped entity type after diff failure",
                    entity_type=entity_type,
                    error=str(e),
                )
                result.failures.append(
                    DiffFailure(entity_type=entity_type, key=None, code=code, message=str(e))
                )
                continue
            result.records.extend(records)

        logger.info(
            "Compared snapshots",
            old=old.name if old is not None else None,
            new=new.name if new is not None else None,
            scalar_changes=len(result.scalar_changes),
            added=result.added_count,
            removed=result.removed_count,
            modified=result.modified_count,
            failures=len(result.failures),
        )

        return result

    def _diff_scalars(self, old: Snapshot | None, new: Snapshot | None) -> list[FieldChange]:
        # Metadata are identifiers, not measurements: exact comparison only.
        changes: list[FieldChange] = []
        for name in self._schema.scalar_fields:
            if new is None:
                changes.append(FieldChange(name, ChangeType.REMOVED, old.metadata.get(name), None))
            elif old is None:
                changes.append(FieldChange(name, ChangeType.ADDED, None, new.metadata.get(name)))
            else:
                old_value = old.metadata.get(name)
                new_value = new.metadata.get(name)
                if old_value != new_value:
                    changes.append(FieldChange(name, ChangeType.MODIFIED, old_value, new_value))
        return changes

    def _warn_unregistered(self, *snapshots: Snapshot | None) -> None:
        registered = set(self._schema.entity_type_names)
        for snapshot in snapshots:
            if snapshot is None:
                continue
            extra = sorted(set(snapshot.collections) - registered)
            if extra:
                logger.debug(
                    "Ignoring unregistered entity collections",
                    snapshot=snapshot.name,
                    entity_types=extra,
                )


def diff_snapshots(
    old: Snapshot | None,
    new: Snapshot | None,
    schema: SnapshotSchema,
    options: ComparisonOptions | None = None,
) -> SnapshotDiff:
    """
    Compare two snapshots.

    Args:
        old: Previous snapshot (None reports everything in `new` as added)
        new: Current snapshot (None reports everything in `old` as removed)
        schema: Registered entity types and scalar metadata fields
        options: Tolerance, unit tokens and ignore lists

    Returns:
        SnapshotDiff with scalar changes, change records and skipped failures
    """
    return SnapshotComparator(schema, options).diff(old, new)
