"""
Grade Table
===========
Immutable mapping from grade label to grade point on the 10-point scale.

  O, A+, A, B+, B, C  → passing grades (marks >= 50%)
  U                   → to reappear; 0 points but still countable
  SC                  → successfully completed, no-credit; excluded from
                        every weighted average
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping

DEFAULT_MAX_CREDITS = 30


@dataclass(frozen=True)
class GradeEntry:
    label:     str
    point:     float
    countable: bool = True


@dataclass(frozen=True, eq=False)
class GradeTable:
    entries:     Mapping[str, GradeEntry]
    # Upper bound on credits for one subject
    max_credits: int = DEFAULT_MAX_CREDITS

    def __post_init__(self) -> None:
        markers = [e.label for e in self.entries.values() if not e.countable]
        if len(markers) != 1:
            raise ValueError(f"Grade table needs exactly one no-credit grade, got {markers}")
        for entry in self.entries.values():
            if not 0 <= entry.point <= 10:
                raise ValueError(f"Grade point for {entry.label!r} out of range: {entry.point}")
        if self.max_credits < 1:
            raise ValueError(f"max_credits must be positive, got {self.max_credits}")
        # Freeze the mapping so callers cannot edit a shared table
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    @classmethod
    def from_points(
        cls,
        points: Mapping[str, float],
        no_credit: str,
        max_credits: int = DEFAULT_MAX_CREDITS,
    ) -> "GradeTable":
        return cls({
            label: GradeEntry(label, float(point), countable=(label != no_credit))
            for label, point in points.items()
        }, max_credits=max_credits)

    # Presence is decided by the key, never by the point value (U is worth 0).
    def lookup(self, label: str | None) -> GradeEntry | None:
        if label is None:
            return None
        return self.entries.get(label)

    def __contains__(self, label: object) -> bool:
        return label in self.entries

    def __iter__(self) -> Iterator[GradeEntry]:
        return iter(self.entries.values())

    def point_for(self, label: str) -> float:
        entry = self.lookup(label)
        if entry is None:
            raise KeyError(label)
        return entry.point

    def is_countable(self, label: str) -> bool:
        entry = self.lookup(label)
        return entry is not None and entry.countable

    @property
    def no_credit_label(self) -> str:
        return next(e.label for e in self.entries.values() if not e.countable)


STANDARD_GRADE_TABLE = GradeTable.from_points(
    {
        "O":  10,
        "A+": 9,
        "A":  8,
        "B+": 7,
        "B":  6,
        "C":  5,
        "U":  0,
        "SC": 0,
    },
    no_credit="SC",
)
