"""
Field Comparison

Decides whether two optional string field values are equivalent.

Exported physical quantities vary in trailing zeros and embedded unit text
("10.0 kA" vs "10 kA"), so after an exact match fails both sides are stripped of
a known unit suffix and compared as numbers within a relative tolerance. Only
tokens in the table are stripped; an unrecognized suffix makes the value
non-numeric and the pair falls back to the (already failed) exact match.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from studydiff.config import Settings
from studydiff.kernel.errors import ConfigurationError


DEFAULT_TOLERANCE = 1e-6
DEFAULT_UNIT_TOKENS: tuple[str, ...] = ("cal/cm^2", "cal/cm2", "kA", "A")

# Standard decimal grammar; commas are thousands separators in the integer part.
_NUMBER_RE = re.compile(
    r"^[+-]?(?:\d[\d,]*(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$"
)


class Comparison(str, Enum):
    """Outcome of comparing two field values."""

    EQUAL = "equal"
    NOT_EQUAL = "not_equal"


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


@dataclass(frozen=True)
class UnitTokenTable:
    """Case-insensitive unit suffixes stripped before numeric comparison."""

    tokens: tuple[str, ...] = DEFAULT_UNIT_TOKENS

    def __post_init__(self) -> None:
        cleaned = tuple(t.strip() for t in self.tokens)
        if any(not t for t in cleaned):
            raise ConfigurationError(
                code="config.unit_token_invalid",
                message="Unit tokens must be non-blank.",
                meta={"tokens": list(self.tokens)},
            )
        # Longest first so "kA" wins over "A" and "cal/cm^2" over "cal/cm2".
        ordered = tuple(sorted(set(cleaned), key=lambda t: (-len(t), t.lower())))
        object.__setattr__(self, "tokens", ordered)

    def strip(self, value: str) -> str:
        cleaned = value.strip()
        lowered = cleaned.lower()
        for token in self.tokens:
            if lowered.endswith(token.lower()):
                return cleaned[: len(cleaned) - len(token)].strip()
        return cleaned


@dataclass(frozen=True)
class ComparisonOptions:
    """Everything the engine needs from the outside, passed in explicitly."""

    tolerance: float = DEFAULT_TOLERANCE
    unit_tokens: UnitTokenTable = field(default_factory=UnitTokenTable)
    ignored_fields: frozenset[str] = frozenset()
    ignored_fields_by_type: Mapping[str, frozenset[str]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        if not math.isfinite(self.tolerance) or self.tolerance < 0:
            raise ConfigurationError(
                code="config.tolerance_invalid",
                message=f"Numeric tolerance must be a finite, non-negative number, got {self.tolerance!r}",
            )
        object.__setattr__(self, "ignored_fields", frozenset(self.ignored_fields))
        object.__setattr__(
            self,
            "ignored_fields_by_type",
            MappingProxyType(
                {name: frozenset(fields) for name, fields in dict(self.ignored_fields_by_type).items()}
            ),
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        ignored_fields_by_type: Mapping[str, Iterable[str]] | None = None,
    ) -> "ComparisonOptions":
        return cls(
            tolerance=settings.numeric_tolerance,
            unit_tokens=UnitTokenTable(tuple(settings.unit_tokens)),
            ignored_fields=frozenset(settings.ignored_fields),
            ignored_fields_by_type={
                name: frozenset(fields) for name, fields in (ignored_fields_by_type or {}).items()
            },
        )

    def is_ignored(self, entity_type: str, field_name: str) -> bool:
        if field_name in self.ignored_fields:
            return True
        return field_name in self.ignored_fields_by_type.get(entity_type, frozenset())


class FieldComparator:
    """Numeric-tolerant equality for string field values."""

    def __init__(self, options: ComparisonOptions | None = None):
        self._options = options or ComparisonOptions()

    @property
    def options(self) -> ComparisonOptions:
        return self._options

    def compare(self, old: str | None, new: str | None) -> Comparison:
        if is_blank(old) and is_blank(new):
            return Comparison.EQUAL

        if old == new:
            return Comparison.EQUAL

        a = self.parse_number(old)
        b = self.parse_number(new)
        if a is None or b is None:
            return Comparison.NOT_EQUAL

        scale = max(1.0, abs(a), abs(b))
        if abs(a - b) <= self._options.tolerance * scale:
            return Comparison.EQUAL
        return Comparison.NOT_EQUAL

    def equivalent(self, old: str | None, new: str | None) -> bool:
        return self.compare(old, new) is Comparison.EQUAL

    def parse_number(self, value: str | None) -> float | None:
        """Strip a known unit suffix and parse; None when the value is not numeric."""
        if value is None:
            return None
        text = self._options.unit_tokens.strip(value)
        if not _NUMBER_RE.fullmatch(text):
            return None
        try:
            number = float(text.replace(",", ""))
        except ValueError:
            return None
        if not math.isfinite(number):
            return None
        return number


def values_equivalent(
    old: str | None,
    new: str | None,
    options: ComparisonOptions | None = None,
) -> bool:
    return FieldComparator(options).equivalent(old, new)
