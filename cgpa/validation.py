"""
Subject Validator
=================
Structural checks on raw subject input, run before anything is mutated,
plus the deterministic normalization applied once a subject has passed.
"""
from __future__ import annotations

from typing import Any, Mapping, Sequence

from cgpa.errors import ValidationError
from cgpa.grade_table import GradeTable
from cgpa.models import Subject


def _clean_label(value: Any) -> str | None:
    if value is None:
        return None
    label = str(value).strip()
    return label or None


def _clean_name(value: Any) -> str | None:
    if value is None:
        return None
    name = str(value).strip()
    return name or None


def _as_int(value: Any) -> int | None:
    """Integral numbers and numeric strings become ints; anything else is None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                return None
            return int(number) if number.is_integer() else None
    return None


def validate_semester_number(value: Any) -> int:
    number = _as_int(value)
    if number is None or number <= 0:
        raise ValidationError("invalid semester number")
    return number


def validate_subject(candidate: Mapping[str, Any], table: GradeTable) -> None:
    """Raise ValidationError if `candidate` cannot become a Subject. No side effects."""
    name = _clean_name(candidate.get("name"))
    label = _clean_label(candidate.get("grade"))
    if name is None or label is None:
        raise ValidationError("missing name or grade")

    entry = table.lookup(label)
    if entry is None:
        raise ValidationError("invalid grade")

    # Credits sent alongside the no-credit grade are ignored, not rejected
    if entry.countable:
        credits = _as_int(candidate.get("credits"))
        if credits is None or not 0 < credits <= table.max_credits:
            raise ValidationError("invalid credits")


def normalize_subject(candidate: Mapping[str, Any], table: GradeTable) -> Subject:
    label = _clean_label(candidate.get("grade"))
    entry = table.lookup(label)
    if entry is None:
        raise ValidationError("invalid grade")
    credits = _as_int(candidate.get("credits")) if entry.countable else 0
    return Subject(
        name=_clean_name(candidate.get("name")) or "",
        credits=credits or 0,
        grade=entry.label,
        grade_point=entry.point,
    )


def validate_subjects(
    subjects: Sequence[Mapping[str, Any]] | None, table: GradeTable
) -> list[Subject]:
    """Validate every subject (fail-fast), then normalize them all."""
    if not subjects or isinstance(subjects, (str, bytes, Mapping)):
        raise ValidationError("no subjects provided")
    for candidate in subjects:
        if not isinstance(candidate, Mapping):
            raise ValidationError("missing name or grade")
        validate_subject(candidate, table)
    return [normalize_subject(candidate, table) for candidate in subjects]
