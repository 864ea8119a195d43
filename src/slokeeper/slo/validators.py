"""
Field validators for the SLO configuration schema.

Each validator is an immutable callable ``validator(value, path)`` that
raises ``ValidationError`` with a stable ``code``:

- Enum / StringInSlice: ``InvalidEnum``
- IntRange: ``OutOfRange``
- Regex: ``PatternMismatch``
- Cardinality: ``BadCardinality``
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum as _EnumType
from typing import Any, Iterable, Protocol

from slokeeper.core.errors import ValidationError

INVALID_ENUM = "InvalidEnum"
OUT_OF_RANGE = "OutOfRange"
PATTERN_MISMATCH = "PatternMismatch"
BAD_CARDINALITY = "BadCardinality"


class Validator(Protocol):
    def __call__(self, value: Any, path: str) -> None:
        ...


@dataclass(frozen=True)
class Enum:
    """Value must be one of ``values`` (compared as given)."""

    values: frozenset[Any]

    @classmethod
    def of(cls, enum_type: type[_EnumType]) -> Enum:
        return cls(frozenset(member.value for member in enum_type))

    def __call__(self, value: Any, path: str) -> None:
        if value not in self.values:
            raise ValidationError(
                path,
                f"expected one of {sorted(map(str, self.values))}, got {value!r}",
                code=INVALID_ENUM,
            )


@dataclass(frozen=True)
class StringInSlice:
    """Case-sensitive membership test for strings."""

    values: tuple[str, ...]

    def __call__(self, value: Any, path: str) -> None:
        if not isinstance(value, str) or value not in self.values:
            raise ValidationError(
                path,
                f"expected one of {list(self.values)}, got {value!r}",
                code=INVALID_ENUM,
            )


@dataclass(frozen=True)
class IntRange:
    """Inclusive integer range."""

    lo: int
    hi: int

    def __call__(self, value: Any, path: str) -> None:
        if not self.lo <= value <= self.hi:
            raise ValidationError(
                path,
                f"expected to be in the range ({self.lo} - {self.hi}), got {value}",
                code=OUT_OF_RANGE,
            )


@dataclass(frozen=True)
class Regex:
    """Full-string regular expression match."""

    pattern: re.Pattern[str]

    @classmethod
    def compile(cls, pattern: str) -> Regex:
        return cls(re.compile(pattern, re.ASCII))

    def __call__(self, value: Any, path: str) -> None:
        if not isinstance(value, str) or not self.pattern.fullmatch(value):
            raise ValidationError(
                path,
                f"value must match: {self.pattern.pattern}, got {value!r}",
                code=PATTERN_MISMATCH,
            )


@dataclass(frozen=True)
class Cardinality:
    """Bounds on the number of list items; ``max_items=None`` means unbounded."""

    min_items: int = 0
    max_items: int | None = None

    def __call__(self, value: Any, path: str) -> None:
        count = len(value)
        if count < self.min_items or (self.max_items is not None and count > self.max_items):
            upper = "unbounded" if self.max_items is None else self.max_items
            raise ValidationError(
                path,
                f"expected between {self.min_items} and {upper} items, got {count}",
                code=BAD_CARDINALITY,
            )


def run_all(validators: Iterable[Validator], value: Any, path: str) -> None:
    for validator in validators:
        validator(value, path)
