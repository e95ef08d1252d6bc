"""
Entity Differ

Compares two optional records of one entity type field by field and returns a
sparse list of field changes (unchanged fields produce nothing).
"""

from __future__ import annotations

from studydiff.diff.comparator import Comparison, ComparisonOptions, FieldComparator, is_blank
from studydiff.diff.models import ChangeType, FieldChange
from studydiff.diff.schema import EntityRecord, FieldDescriptor
from studydiff.kernel.errors import SchemaMismatchError


def join_path(prefix: str, path: str) -> str:
    return f"{prefix}.{path}" if prefix else path


class EntityDiffer:
    """Field-level differ for records of one schema (or two versions of it)."""

    def __init__(self, comparator: FieldComparator | None = None):
        self._comparator = comparator or FieldComparator()

    @property
    def options(self) -> ComparisonOptions:
        return self._comparator.options

    def diff(
        self,
        old: EntityRecord | None,
        new: EntityRecord | None,
        prefix: str = "",
    ) -> list[FieldChange]:
        """
        Compute field changes between two record states.

        Args:
            old: Previous record (None when the entity was added)
            new: Current record (None when the entity was removed)
            prefix: Optional path prefix for namespacing, e.g. "TripUnit"

        Returns:
            Field changes in declared schema order
        """
        if old is None and new is None:
            return []

        for record in (old, new):
            if record is not None and not isinstance(record, EntityRecord):
                raise SchemaMismatchError(
                    code="schema.not_a_record",
                    message=f"Expected an EntityRecord, got {type(record).__name__}",
                )

        if old is None:
            return [
                FieldChange(
                    path=join_path(prefix, descriptor.path),
                    change_type=ChangeType.ADDED,
                    old_value=None,
                    new_value=value,
                )
                for descriptor, value in new.populated()
                if not self._ignored(new.entity_type, descriptor)
            ]

        if new is None:
            return [
                FieldChange(
                    path=join_path(prefix, descriptor.path),
                    change_type=ChangeType.REMOVED,
                    old_value=value,
                    new_value=None,
                )
                for descriptor, value in old.populated()
                if not self._ignored(old.entity_type, descriptor)
            ]

        if old.entity_type != new.entity_type:
            raise SchemaMismatchError(
                message=f"Cannot diff a {old.entity_type!r} record against a {new.entity_type!r} record",
                meta={"old": old.entity_type, "new": new.entity_type},
            )

        return self._diff_both(old, new, prefix)

    def _diff_both(self, old: EntityRecord, new: EntityRecord, prefix: str) -> list[FieldChange]:
        changes: list[FieldChange] = []

        # Declared order of the old schema, then fields only the new schema declares.
        names = list(old.schema.field_names)
        names.extend(n for n in new.schema.field_names if n not in old.schema)

        for name in names:
            old_desc = old.schema.descriptor(name)
            new_desc = new.schema.descriptor(name)
            if any(d is not None and self._ignored(old.entity_type, d) for d in (old_desc, new_desc)):
                continue

            old_value = old.get(name) if old_desc is not None else None
            new_value = new.get(name) if new_desc is not None else None
            path = join_path(prefix, (new_desc or old_desc).path)

            if new_desc is None:
                # Schema drift: field dropped from the newer schema.
                if not is_blank(old_value):
                    changes.append(FieldChange(path, ChangeType.REMOVED, old_value, None))
                continue

            if old_desc is None:
                if not is_blank(new_value):
                    changes.append(FieldChange(path, ChangeType.ADDED, None, new_value))
                continue

            if self._comparator.compare(old_value, new_value) is Comparison.NOT_EQUAL:
                changes.append(FieldChange(path, ChangeType.MODIFIED, old_value, new_value))

        return changes

    def _ignored(self, entity_type: str, descriptor: FieldDescriptor) -> bool:
        return descriptor.ignore or self.options.is_ignored(entity_type, descriptor.name)


def diff_records(
    old: EntityRecord | None,
    new: EntityRecord | None,
    prefix: str = "",
    options: ComparisonOptions | None = None,
) -> list[FieldChange]:
    """Compare two optional records; see `EntityDiffer.diff`."""
    return EntityDiffer(FieldComparator(options)).diff(old, new, prefix)
