"""
Changelog Models

Field-level and entity-level change entries produced by one snapshot comparison.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from studydiff.diff.keys import CompositeKey
from studydiff.kernel.serialization import json_dumps_canonical


# Separates old and new values in display mode, e.g. "10.5 → 12.3".
DIFF_MARKER = " → "


class ChangeType(str, Enum):
    """Types of changes."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class FieldChange:
    """A change to a single field."""

    path: str
    change_type: ChangeType
    old_value: str | None = None
    new_value: str | None = None

    def display(self, empty: str = "") -> str:
        """Render the change for a changelog cell."""
        old = empty if self.old_value is None else self.old_value
        new = empty if self.new_value is None else self.new_value
        if self.change_type == ChangeType.ADDED:
            return new
        if self.change_type == ChangeType.REMOVED:
            return old
        return f"{old}{DIFF_MARKER}{new}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "path": self.path,
            "change_type": self.change_type.value,
            "old_value": self.old_value,
            "new_value": self.new_value,
        }


@dataclass(frozen=True)
class ChangeRecord:
    """An added, removed or modified entity with its field-level changes."""

    entity_type: str
    key: CompositeKey
    change_type: ChangeType
    field_changes: tuple[FieldChange, ...] = ()

    @property
    def entry_key(self) -> str:
        return f"{self.entity_type}:{self.key}"

    def changed_paths(self) -> list[str]:
        return [c.path for c in self.field_changes]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "entity_type": self.entity_type,
            "key": self.key.to_list(),
            "change_type": self.change_type.value,
            "field_changes": [c.to_dict() for c in self.field_changes],
        }


@dataclass(frozen=True)
class DiffFailure:
    """A unit of work (one key, or a whole entity type) skipped after an error."""

    entity_type: str
    key: CompositeKey | None
    code: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "entity_type": self.entity_type,
            "key": self.key.to_list() if self.key is not None else None,
            "code": self.code,
            "message": self.message,
        }


@dataclass
class SnapshotDiff:
    """Result of comparing two snapshots: one flattened changelog."""

    scalar_changes: list[FieldChange] = field(default_factory=list)
    records: list[ChangeRecord] = field(default_factory=list)
    failures: list[DiffFailure] = field(default_factory=list)

    def _count(self, change_type: ChangeType) -> int:
        return sum(1 for r in self.records if r.change_type == change_type)

    @property
    def added_count(self) -> int:
        return self._count(ChangeType.ADDED)

    @property
    def removed_count(self) -> int:
        return self._count(ChangeType.REMOVED)

    @property
    def modified_count(self) -> int:
        return self._count(ChangeType.MODIFIED)

    @property
    def has_changes(self) -> bool:
        """Check if there are any changes."""
        return bool(self.scalar_changes or self.records)

    @property
    def is_empty(self) -> bool:
        return not self.has_changes and not self.failures

    def records_for(self, entity_type: str) -> list[ChangeRecord]:
        return [r for r in self.records if r.entity_type == entity_type]

    def entity_types(self) -> list[str]:
        """Entity types with at least one change, in changelog order."""
        seen: dict[str, None] = {}
        for record in self.records:
            seen.setdefault(record.entity_type, None)
        return list(seen)

    @property
    def summary(self) -> str:
        """Get a human-readable summary of changes."""
        if not self.has_changes:
            summary = "No changes"
        else:
            parts = []
            if self.scalar_changes:
                parts.append(f"Metadata: {', '.join(c.path for c in self.scalar_changes)}")
            parts.append(
                f"Entries: +{self.added_count} -{self.removed_count} ~{self.modified_count}"
            )
            summary = "; ".join(parts)
        if self.failures:
            summary += f" ({len(self.failures)} skipped)"
        return summary

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "scalar_changes": [c.to_dict() for c in self.scalar_changes],
            "records": [r.to_dict() for r in self.records],
            "failures": [f.to_dict() for f in self.failures],
            "added_count": self.added_count,
            "removed_count": self.removed_count,
            "modified_count": self.modified_count,
            "summary": self.summary,
        }

    def to_json(self) -> str:
        return json_dumps_canonical(self.to_dict())
