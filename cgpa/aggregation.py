"""
GPA / CGPA Aggregation
======================
Computes:
  - Semester GPA      (credit-weighted over countable subjects)
  - Semester credits  (countable subjects only)
  - Overall CGPA      (credit-weighted over semesters that carry a GPA)
  - Overall credits   (every semester)

Values are never rounded here; rounding is a display concern.
"""
from __future__ import annotations

from typing import Iterable

from cgpa.grade_table import GradeTable
from cgpa.models import Semester, Subject


def _countable(subjects: Iterable[Subject], table: GradeTable) -> list[Subject]:
    return [s for s in subjects if table.is_countable(s.grade)]


def compute_semester_credits(subjects: Iterable[Subject], table: GradeTable) -> int:
    return sum(s.credits for s in _countable(subjects, table))


def compute_semester_gpa(subjects: Iterable[Subject], table: GradeTable) -> float:
    countable = _countable(subjects, table)
    credits = sum(s.credits for s in countable)
    if credits <= 0:
        return 0.0
    quality_points = sum(s.credits * s.grade_point for s in countable)
    return quality_points / credits


def compute_overall_cgpa(semesters: Iterable[Semester]) -> float:
    """
    Weighted mean of semester GPAs.

    A semester made only of no-credit subjects (gpa 0, credits 0) is left out
    rather than counted as a zero score.
    """
    weighted = 0.0
    credits = 0
    for sem in semesters:
        if sem.gpa > 0 and sem.total_credits > 0:
            weighted += sem.gpa * sem.total_credits
            credits += sem.total_credits
    if credits == 0:
        return 0.0
    return weighted / credits


def compute_overall_credits(semesters: Iterable[Semester]) -> int:
    # Sums every semester, including ones excluded from the CGPA weighting
    return sum(sem.total_credits for sem in semesters)
