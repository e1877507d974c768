"""
Domain model: Subject → Semester → Record.

A Record owns its semesters keyed by semester number and only ever hands
them out in ascending order, so callers never observe insertion order.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_ts(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class Subject:
    name:        str
    credits:     int
    grade:       str
    grade_point: float

    def to_dict(self) -> dict:
        return {
            "name":       self.name,
            "credits":    self.credits,
            "grade":      self.grade,
            "gradePoint": self.grade_point,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Subject":
        return cls(
            name=data["name"],
            credits=int(data["credits"]),
            grade=data["grade"],
            grade_point=float(data["gradePoint"]),
        )


@dataclass(frozen=True)
class Semester:
    semester_number: int
    subjects:        tuple[Subject, ...]
    gpa:             float
    total_credits:   int
    calculated_at:   datetime

    def to_dict(self) -> dict:
        return {
            "semesterNumber": self.semester_number,
            "subjects":       [s.to_dict() for s in self.subjects],
            "gpa":            self.gpa,
            "totalCredits":   self.total_credits,
            "calculatedAt":   self.calculated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Semester":
        return cls(
            semester_number=int(data["semesterNumber"]),
            subjects=tuple(Subject.from_dict(s) for s in data.get("subjects", [])),
            gpa=float(data.get("gpa", 0)),
            total_credits=int(data.get("totalCredits", 0)),
            calculated_at=_parse_ts(data["calculatedAt"]),
        )


@dataclass(frozen=True)
class Record:
    owner:         int
    by_number:     Mapping[int, Semester] = field(default_factory=dict)
    overall_cgpa:  float = 0.0
    total_credits: int = 0
    last_updated:  datetime = field(default_factory=utcnow)
    version:       int = 0

    @property
    def semesters(self) -> list[Semester]:
        return [self.by_number[n] for n in sorted(self.by_number)]

    @property
    def semester_numbers(self) -> list[int]:
        return sorted(self.by_number)

    def get(self, semester_number: int) -> Semester | None:
        return self.by_number.get(semester_number)

    def __contains__(self, semester_number: object) -> bool:
        return semester_number in self.by_number

    def with_semesters(self, semesters: Iterable[Semester], **changes: Any) -> "Record":
        """Return a copy holding exactly `semesters`; the receiver is left untouched."""
        return replace(self, by_number={s.semester_number: s for s in semesters}, **changes)
