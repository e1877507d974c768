"""
Record Store Accessor
=====================
The only way semesters get added, edited or removed. Every operation
validates first, then builds a fresh Record; the Record passed in is never
modified, so a failure anywhere leaves the caller's state as it was.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping, Sequence

from cgpa.aggregation import (
    compute_overall_cgpa,
    compute_overall_credits,
    compute_semester_credits,
    compute_semester_gpa,
)
from cgpa.grade_table import GradeTable, STANDARD_GRADE_TABLE
from cgpa.models import Record, Semester, Subject, utcnow
from cgpa.validation import validate_semester_number, validate_subjects


def new_record(owner: int, now: datetime | None = None) -> Record:
    return Record(owner=owner, last_updated=now or utcnow())


def build_semester(
    semester_number: int,
    subjects: Sequence[Subject],
    table: GradeTable,
    now: datetime,
) -> Semester:
    return Semester(
        semester_number=semester_number,
        subjects=tuple(subjects),
        gpa=compute_semester_gpa(subjects, table),
        total_credits=compute_semester_credits(subjects, table),
        calculated_at=now,
    )


def _recompute(record: Record, semesters: Iterable[Semester], now: datetime) -> Record:
    semesters = list(semesters)
    return record.with_semesters(
        semesters,
        overall_cgpa=compute_overall_cgpa(semesters),
        total_credits=compute_overall_credits(semesters),
        last_updated=now,
    )


def upsert_semester(
    record: Record,
    semester_number: Any,
    subjects: Sequence[Mapping[str, Any]] | None,
    table: GradeTable = STANDARD_GRADE_TABLE,
    now: datetime | None = None,
) -> Record:
    """Insert or replace one semester and recompute the overall figures."""
    number = validate_semester_number(semester_number)
    normalized = validate_subjects(subjects, table)

    now = now or utcnow()
    semester = build_semester(number, normalized, table, now)
    others = [s for s in record.semesters if s.semester_number != number]
    return _recompute(record, [*others, semester], now)


def delete_semester(
    record: Record,
    semester_number: Any,
    now: datetime | None = None,
) -> Record:
    """Drop a semester. Deleting one that is not there only refreshes the totals."""
    number = validate_semester_number(semester_number)
    remaining = [s for s in record.semesters if s.semester_number != number]
    return _recompute(record, remaining, now or utcnow())
