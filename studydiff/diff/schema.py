"""
Entity Schemas and Records

Each entity type (Bus, ArcFlash, LVBreaker, ...) is declared once as an
`EntitySchema`: an explicit, ordered table of field descriptors plus the identity
fields that make up its CompositeKey. The differ walks descriptors in declared
order, so output is deterministic and no runtime introspection is needed.

Records are flat: grouped settings (e.g. trip-unit fields on a breaker) are stored
as ordinary fields tagged with a `group`; see `projection.py` for the nested view.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from studydiff.diff.keys import CompositeKey
from studydiff.kernel.errors import ConfigurationError, InvalidKeyError, SchemaMismatchError


@dataclass(frozen=True)
class FieldDescriptor:
    """One declared field of an entity schema."""

    name: str
    ignore: bool = False
    group: str | None = None
    member: str | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ConfigurationError(
                code="config.field_invalid",
                message="Field descriptors need a non-blank name.",
            )
        if self.member and not self.group:
            raise ConfigurationError(
                code="config.field_invalid",
                message=f"Field {self.name!r} declares a member name without a group.",
            )

    @property
    def path(self) -> str:
        """Dot-separated path reported in field changes."""
        if self.group:
            return f"{self.group}.{self.member or self.name}"
        return self.name


def _as_descriptor(value: FieldDescriptor | str) -> FieldDescriptor:
    if isinstance(value, FieldDescriptor):
        return value
    return FieldDescriptor(name=value)


@dataclass(frozen=True)
class EntitySchema:
    """Declared field table for one entity type."""

    name: str
    identity_fields: tuple[str, ...]
    fields: tuple[FieldDescriptor, ...]
    version: str | None = None
    _by_name: Mapping[str, FieldDescriptor] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        descriptors = tuple(_as_descriptor(f) for f in self.fields)
        object.__setattr__(self, "fields", descriptors)
        object.__setattr__(self, "identity_fields", tuple(self.identity_fields))

        by_name: dict[str, FieldDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.name in by_name:
                raise ConfigurationError(
                    code="config.schema_invalid",
                    message=f"Duplicate field {descriptor.name!r} in schema {self.name!r}",
                )
            by_name[descriptor.name] = descriptor
        object.__setattr__(self, "_by_name", MappingProxyType(by_name))

        if not self.identity_fields:
            raise ConfigurationError(
                code="config.schema_invalid",
                message=f"Schema {self.name!r} declares no identity fields.",
            )
        missing = [name for name in self.identity_fields if name not in by_name]
        if missing:
            raise ConfigurationError(
                code="config.schema_invalid",
                message=f"Identity fields {missing} are not declared in schema {self.name!r}",
                meta={"missing": missing},
            )

    @classmethod
    def define(
        cls,
        name: str,
        *,
        identity: Iterable[str],
        fields: Iterable[FieldDescriptor | str],
        version: str | None = None,
    ) -> "EntitySchema":
        return cls(
            name=name,
            identity_fields=tuple(identity),
            fields=tuple(_as_descriptor(f) for f in fields),
            version=version,
        )

    @property
    def arity(self) -> int:
        return len(self.identity_fields)

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(d.name for d in self.fields)

    def descriptor(self, name: str) -> FieldDescriptor | None:
        return self._by_name.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def record(self, values: Mapping[str, str | None] | None = None, **kwargs: str | None) -> "EntityRecord":
        """Build a record of this schema from field values."""
        merged = dict(values or {})
        merged.update(kwargs)
        return EntityRecord(schema=self, values=merged)

    def key_for(self, record: "EntityRecord") -> CompositeKey:
        """Build the record's CompositeKey from the declared identity fields."""
        if record.schema.name != self.name:
            raise SchemaMismatchError(
                message=f"Cannot key a {record.schema.name!r} record with schema {self.name!r}",
            )
        parts = [record.get(name) for name in self.identity_fields]
        missing = [name for name, value in zip(self.identity_fields, parts) if value is None or not value.strip()]
        if missing:
            raise InvalidKeyError(
                message=f"{self.name} record is missing identity values for {missing}",
                meta={"entity_type": self.name, "missing": missing},
            )
        return CompositeKey(*parts)

    def collection(self, records: Iterable["EntityRecord"]) -> dict[CompositeKey, "EntityRecord"]:
        """Key a batch of records; later duplicates replace earlier ones."""
        return {self.key_for(r): r for r in records}


@dataclass(frozen=True)
class EntityRecord:
    """One equipment/study entry: a bag of optional string fields."""

    schema: EntitySchema
    values: Mapping[str, str | None]

    def __post_init__(self) -> None:
        unknown = [name for name in self.values if name not in self.schema]
        if unknown:
            raise SchemaMismatchError(
                code="schema.unknown_field",
                message=f"Fields {unknown} are not declared in schema {self.schema.name!r}",
                meta={"entity_type": self.schema.name, "unknown": unknown},
            )
        for name, value in self.values.items():
            if value is not None and not isinstance(value, str):
                raise SchemaMismatchError(
                    code="schema.value_type",
                    message=f"{self.schema.name}.{name} must be a string or None, got {type(value).__name__}",
                )
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @property
    def entity_type(self) -> str:
        return self.schema.name

    def get(self, name: str) -> str | None:
        return self.values.get(name)

    def populated(self) -> Iterator[tuple[FieldDescriptor, str]]:
        """Yield (descriptor, value) for non-ignored fields with a non-blank value."""
        for descriptor in self.schema.fields:
            if descriptor.ignore:
                continue
            value = self.values.get(descriptor.name)
            if value is not None and value.strip():
                yield descriptor, value

    def to_dict(self) -> dict[str, str | None]:
        return {name: self.values.get(name) for name in self.schema.field_names}
