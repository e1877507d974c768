"""
Request / response models for the CGPA endpoints.
Wire keys follow the camelCase names the web client already uses.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from cgpa.models import Record, Semester, Subject


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ── Requests ───────────────────────────────────────────────────────────────────
class SubjectIn(_CamelModel):
    """Accepted loosely; the core validator decides what is acceptable."""
    model_config = ConfigDict(extra="ignore")

    name:        Optional[Any] = None
    credits:     Optional[Any] = None
    grade:       Optional[Any] = None
    # Ignored: grade points are always looked up server-side
    grade_point: Optional[Any] = Field(default=None, alias="gradePoint")

    def raw(self) -> dict:
        return {"name": self.name, "credits": self.credits, "grade": self.grade}


class CalculateRequest(_CamelModel):
    semester_number: Optional[Any] = Field(default=None, alias="semesterNumber")
    subjects:        Optional[list[SubjectIn]] = None

    def raw_subjects(self) -> list[dict] | None:
        return [s.raw() for s in self.subjects] if self.subjects is not None else None


class UpdateSemesterRequest(_CamelModel):
    subjects: Optional[list[SubjectIn]] = None

    def raw_subjects(self) -> list[dict] | None:
        return [s.raw() for s in self.subjects] if self.subjects is not None else None


# ── Responses ──────────────────────────────────────────────────────────────────
class SubjectOut(_CamelModel):
    name:        str
    credits:     int
    grade:       str
    grade_point: float = Field(alias="gradePoint")

    @classmethod
    def of(cls, subject: Subject) -> "SubjectOut":
        return cls(
            name=subject.name,
            credits=subject.credits,
            grade=subject.grade,
            grade_point=subject.grade_point,
        )


class SemesterOut(_CamelModel):
    semester_number: int              = Field(alias="semesterNumber")
    subjects:        list[SubjectOut]
    gpa:             float
    total_credits:   int              = Field(alias="totalCredits")
    calculated_at:   datetime         = Field(alias="calculatedAt")

    @classmethod
    def of(cls, semester: Semester) -> "SemesterOut":
        return cls(
            semester_number=semester.semester_number,
            subjects=[SubjectOut.of(s) for s in semester.subjects],
            gpa=semester.gpa,
            total_credits=semester.total_credits,
            calculated_at=semester.calculated_at,
        )


class RecordOut(_CamelModel):
    user:          int
    semesters:     list[SemesterOut]
    overall_cgpa:  float    = Field(alias="overallCGPA")
    total_credits: int      = Field(alias="totalCredits")
    last_updated:  datetime = Field(alias="lastUpdated")

    @classmethod
    def of(cls, record: Record) -> "RecordOut":
        return cls(
            user=record.owner,
            semesters=[SemesterOut.of(s) for s in record.semesters],
            overall_cgpa=record.overall_cgpa,
            total_credits=record.total_credits,
            last_updated=record.last_updated,
        )


class SemesterResponse(_CamelModel):
    message:      str
    semester_gpa: float     = Field(alias="semesterGPA")
    overall_cgpa: float     = Field(alias="overallCGPA")
    cgpa_data:    RecordOut = Field(alias="cgpaData")


class DeleteResponse(_CamelModel):
    message:      str
    overall_cgpa: float     = Field(alias="overallCGPA")
    cgpa_data:    RecordOut = Field(alias="cgpaData")


class GradeOut(BaseModel):
    grade:     str
    point:     float
    countable: bool
