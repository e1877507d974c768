"""
CGPA Router
===========
Endpoints for recording semester grades and reading the running CGPA.
Domain errors raised by the service are mapped to HTTP responses in api.main.
"""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from api.auth.security import CurrentUser
from api.dependencies import get_cgpa_service, get_grade_table
from api.schemas import (
    CalculateRequest,
    DeleteResponse,
    GradeOut,
    RecordOut,
    SemesterResponse,
    UpdateSemesterRequest,
)
from cgpa.grade_table import GradeTable
from cgpa.service import CGPAService

router = APIRouter()

Service = Annotated[CGPAService, Depends(get_cgpa_service)]


# ── Endpoints ──────────────────────────────────────────────────────────────────
@router.get(
    "",
    response_model=RecordOut,
    summary="Get the current user's CGPA record",
)
def get_cgpa(current_user: CurrentUser, service: Service) -> RecordOut:
    """Return every recorded semester plus the overall figures, creating an empty record on first use."""
    return RecordOut.of(service.get_record(current_user.id))


@router.get(
    "/grades",
    response_model=list[GradeOut],
    summary="List accepted grades and their points",
)
def list_grades(
    current_user: CurrentUser,
    table: Annotated[GradeTable, Depends(get_grade_table)],
) -> list[GradeOut]:
    return [GradeOut(grade=e.label, point=e.point, countable=e.countable) for e in table]


@router.post(
    "/calculate",
    response_model=SemesterResponse,
    summary="Calculate and save a semester's GPA",
)
def calculate(
    body: CalculateRequest,
    current_user: CurrentUser,
    service: Service,
) -> SemesterResponse:
    outcome = service.upsert_semester(current_user.id, body.semester_number, body.raw_subjects())
    return SemesterResponse(
        message="GPA calculated and saved successfully",
        semester_gpa=outcome.semester_gpa,
        overall_cgpa=outcome.overall_cgpa,
        cgpa_data=RecordOut.of(outcome.record),
    )


@router.put(
    "/semester/{semester_number}",
    response_model=SemesterResponse,
    summary="Replace the subjects of an existing semester",
)
def update_semester(
    semester_number: str,
    body: UpdateSemesterRequest,
    current_user: CurrentUser,
    service: Service,
) -> SemesterResponse:
    outcome = service.update_semester(current_user.id, semester_number, body.raw_subjects())
    return SemesterResponse(
        message="Semester updated successfully",
        semester_gpa=outcome.semester_gpa,
        overall_cgpa=outcome.overall_cgpa,
        cgpa_data=RecordOut.of(outcome.record),
    )


@router.delete(
    "/semester/{semester_number}",
    response_model=DeleteResponse,
    summary="Delete a semester",
)
def delete_semester(
    semester_number: str,
    current_user: CurrentUser,
    service: Service,
) -> DeleteResponse:
    outcome = service.delete_semester(current_user.id, semester_number)
    return DeleteResponse(
        message="Semester deleted successfully",
        overall_cgpa=outcome.overall_cgpa,
        cgpa_data=RecordOut.of(outcome.record),
    )
