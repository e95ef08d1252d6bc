"""
Composite Keys

Order-sensitive identity for entity collections. Every entity type keys its
collection by a CompositeKey built from its identity fields, in declared order:

    CompositeKey("LVCB-101")                        # breakers, buses, ...
    CompositeKey("BUS-1", "Main-Max")               # arc flash (bus, scenario)
    CompositeKey("BUS-1", "CB-101", "Main-Max")     # short circuit

("A", "B") and ("B", "A") are distinct keys. Components are compared exactly
(case-sensitive, no trimming or normalization).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from studydiff.kernel.errors import InvalidKeyError, KeyArityError


class CompositeKey:
    """Immutable key of 1..N non-blank string components."""

    __slots__ = ("_components", "_hash")

    def __init__(self, *components: str) -> None:
        if not components:
            raise InvalidKeyError(
                message=(
                    "Composite key must have at least one component. "
                    "Check that all identity fields have values before creating the key."
                ),
            )

        for index, component in enumerate(components):
            if not isinstance(component, str) or not component.strip():
                listing = ", ".join(
                    f"{i}:{'<null>' if c is None else c}" for i, c in enumerate(components)
                )
                raise InvalidKeyError(
                    message=(
                        f"Composite key component at index {index} is null or blank. "
                        f"Key components: [{listing}]"
                    ),
                    meta={"index": index},
                )

        # Varargs already arrive as a fresh tuple; nothing outside can mutate it.
        object.__setattr__(self, "_components", tuple(components))
        object.__setattr__(self, "_hash", hash(self._components))

    @classmethod
    def from_tuple(cls, *parts: str) -> "CompositeKey":
        """Build a key from the parts of a legacy fixed-arity tuple key."""
        return cls(*parts)

    @classmethod
    def from_list(cls, components: Iterable[str]) -> "CompositeKey":
        """Rebuild a key from its persisted shape (an ordered array of strings)."""
        if isinstance(components, str):
            raise InvalidKeyError(
                message="Composite key must be persisted as an array of strings, not a string.",
            )
        return cls(*list(components))

    @property
    def components(self) -> tuple[str, ...]:
        return self._components

    @property
    def arity(self) -> int:
        return len(self._components)

    def to_list(self) -> list[str]:
        """Persisted shape: values and order preserved exactly."""
        return list(self._components)

    def sort_key(self) -> tuple[str, ...]:
        return self._components

    def as_single_value(self) -> str:
        """Return the sole component of a 1-part key."""
        if len(self._components) != 1:
            raise KeyArityError(
                message=(
                    f"Cannot get single value from composite key with "
                    f"{len(self._components)} components. Key: {self}"
                ),
                meta={"arity": len(self._components)},
            )
        return self._components[0]

    def description(self) -> str:
        return f"{len(self._components)}-part key: {self}"

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("CompositeKey is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("CompositeKey is immutable")

    def __eq__(self, other: object) -> bool:
        if other is None:
            return False
        if self is other:
            return True
        if not isinstance(other, CompositeKey):
            return NotImplemented
        if self._hash != other._hash:
            return False
        if len(self._components) != len(other._components):
            return False
        return all(a == b for a, b in zip(self._components, other._components))

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self) -> int:
        return self._hash

    def __len__(self) -> int:
        return len(self._components)

    def __iter__(self):
        return iter(self._components)

    def __getitem__(self, index: int) -> str:
        return self._components[index]

    def __str__(self) -> str:
        return f"({', '.join(self._components)})"

    def __repr__(self) -> str:
        return f"CompositeKey{self._components!r}"

    def __reduce__(self):
        return (CompositeKey, self._components)
