"""
FastAPI dependency providers. Tests swap these out via `app.dependency_overrides`.
"""
from __future__ import annotations

from dataclasses import replace
from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy import Engine

from cgpa.grade_table import GradeTable, STANDARD_GRADE_TABLE
from cgpa.service import CGPAService
from config.settings import settings
from storage.database import get_engine
from storage.repository import RecordRepository, UserRepository


def get_db_engine() -> Engine:
    return get_engine()


@lru_cache(maxsize=1)
def get_grade_table() -> GradeTable:
    """Standard grade table with the credit cap from settings, built once per process."""
    return replace(STANDARD_GRADE_TABLE, max_credits=settings.max_subject_credits)


def get_user_repository(engine: Annotated[Engine, Depends(get_db_engine)]) -> UserRepository:
    return UserRepository(engine)


def get_cgpa_service(
    engine: Annotated[Engine, Depends(get_db_engine)],
    table:  Annotated[GradeTable, Depends(get_grade_table)],
) -> CGPAService:
    return CGPAService(RecordRepository(engine), table)
