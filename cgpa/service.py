"""
CGPA service: the operations exposed to the transport layer.

Wraps the pure record accessor with a persistence collaborator that
provides `find(user_id)` and `save(record)`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol, Sequence

from cgpa import records
from cgpa.errors import NotFoundError
from cgpa.grade_table import GradeTable, STANDARD_GRADE_TABLE
from cgpa.models import Record
from cgpa.validation import validate_semester_number
from config.logging_config import logger


class RecordStore(Protocol):
    def find(self, user_id: int) -> Record | None: ...

    def save(self, record: Record) -> Record: ...


@dataclass(frozen=True)
class SemesterOutcome:
    semester_gpa: float
    overall_cgpa: float
    record:       Record


@dataclass(frozen=True)
class DeleteOutcome:
    overall_cgpa: float
    record:       Record


class CGPAService:
    def __init__(self, store: RecordStore, table: GradeTable = STANDARD_GRADE_TABLE) -> None:
        self.store = store
        self.table = table

    def _require_record(self, user_id: int) -> Record:
        record = self.store.find(user_id)
        if record is None:
            raise NotFoundError("CGPA data not found")
        return record

    def get_record(self, user_id: int) -> Record:
        record = self.store.find(user_id)
        if record is None:
            logger.info(f"Creating empty CGPA record for user {user_id}")
            record = self.store.save(records.new_record(user_id))
        return record

    def upsert_semester(
        self,
        user_id: int,
        semester_number: Any,
        subjects: Sequence[Mapping[str, Any]] | None,
    ) -> SemesterOutcome:
        record = self.store.find(user_id) or records.new_record(user_id)
        return self._apply(record, semester_number, subjects)

    def update_semester(
        self,
        user_id: int,
        semester_number: Any,
        subjects: Sequence[Mapping[str, Any]] | None,
    ) -> SemesterOutcome:
        """Like upsert, but the semester must already exist."""
        number = validate_semester_number(semester_number)
        record = self._require_record(user_id)
        if number not in record:
            raise NotFoundError("semester not found")
        return self._apply(record, number, subjects)

    def delete_semester(self, user_id: int, semester_number: Any) -> DeleteOutcome:
        record = self._require_record(user_id)
        updated = records.delete_semester(record, semester_number)
        saved = self.store.save(updated)
        if len(saved.by_number) == len(record.by_number):
            logger.debug(f"User {user_id}: semester {semester_number} not present, nothing deleted")
        else:
            logger.info(
                f"User {user_id}: deleted semester {semester_number} → CGPA {saved.overall_cgpa:.4f}"
            )
        return DeleteOutcome(overall_cgpa=saved.overall_cgpa, record=saved)

    def _apply(
        self,
        record: Record,
        semester_number: Any,
        subjects: Sequence[Mapping[str, Any]] | None,
    ) -> SemesterOutcome:
        updated = records.upsert_semester(record, semester_number, subjects, self.table)
        saved = self.store.save(updated)
        semester = saved.get(validate_semester_number(semester_number))
        logger.info(
            f"User {record.owner}: semester {semester.semester_number} GPA {semester.gpa:.4f} "
            f"({semester.total_credits} credits) → CGPA {saved.overall_cgpa:.4f}"
        )
        return SemesterOutcome(
            semester_gpa=semester.gpa,
            overall_cgpa=saved.overall_cgpa,
            record=saved,
        )
