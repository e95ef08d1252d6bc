"""
Collection Differ

Unions the key spaces of two same-typed collections and classifies every key as
added, removed, modified or unchanged. Unchanged keys produce no record.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping

import structlog

from studydiff.diff.entity import EntityDiffer
from studydiff.diff.keys import CompositeKey
from studydiff.diff.models import ChangeRecord, ChangeType, DiffFailure
from studydiff.diff.schema import EntityRecord
from studydiff.kernel.errors import StudyDiffError

logger = structlog.get_logger()

EntityCollection = Mapping[CompositeKey, EntityRecord]
FailureSink = Callable[[DiffFailure], None]


def _key_order(key: CompositeKey) -> tuple[str, ...]:
    return key.sort_key()


class CollectionDiffer:
    """Diffs one entity type's collection, delegating field work to EntityDiffer."""

    def __init__(self, entity_differ: EntityDiffer | None = None):
        self._entity_differ = entity_differ or EntityDiffer()

    def diff(
        self,
        entity_type: str,
        old: EntityCollection | None,
        new: EntityCollection | None,
        on_failure: FailureSink | None = None,
    ) -> list[ChangeRecord]:
        """
        Compute change records for one entity type.

        Args:
            entity_type: Name reported on every change record
            old: Previous collection (None is treated as empty)
            new: Current collection (None is treated as empty)
            on_failure: When given, a failing key is reported here and skipped;
                otherwise the error propagates

        Returns:
            Change records sorted by key components
        """
        old = old or {}
        new = new or {}

        all_keys = set(old.keys()) | set(new.keys())
        results: list[ChangeRecord] = []

        for key in sorted(all_keys, key=_key_order):
            try:
                record = self._diff_key(entity_type, key, old, new)
            except Exception as e:
                if on_failure is None:
                    raise
                code = e.code if isinstance(e, StudyDiffError) else "diff.key_failed"
                logger.warning(
                    "Skipped entity key after diff failure",
                    entity_type=entity_type,
                    key=str(key),
                    error=str(e),
                )
                on_failure(DiffFailure(entity_type=entity_type, key=key, code=code, message=str(e)))
                continue
            if record is not None:
                results.append(record)

        logger.debug(
            "Diffed entity collection",
            entity_type=entity_type,
            keys=len(all_keys),
            added=sum(1 for r in results if r.change_type == ChangeType.ADDED),
            removed=sum(1 for r in results if r.change_type == ChangeType.REMOVED),
            modified=sum(1 for r in results if r.change_type == ChangeType.MODIFIED),
        )

        return results

    def _diff_key(
        self,
        entity_type: str,
        key: CompositeKey,
        old: EntityCollection,
        new: EntityCollection,
    ) -> ChangeRecord | None:
        in_old = key in old
        in_new = key in new

        if not in_old:
            change_type = ChangeType.ADDED
            changes = self._entity_differ.diff(None, new[key])
        elif not in_new:
            change_type = ChangeType.REMOVED
            changes = self._entity_differ.diff(old[key], None)
        else:
            changes = self._entity_differ.diff(old[key], new[key])
            if not changes:
                return None
            change_type = ChangeType.MODIFIED

        return ChangeRecord(
            entity_type=entity_type,
            key=key,
            change_type=change_type,
            field_changes=tuple(changes),
        )


def diff_collections(
    entity_type: str,
    old: EntityCollection | None,
    new: EntityCollection | None,
    entity_differ: EntityDiffer | None = None,
) -> list[ChangeRecord]:
    """Compare two collections of one entity type; see `CollectionDiffer.diff`."""
    return CollectionDiffer(entity_differ).diff(entity_type, old, new)
