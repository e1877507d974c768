"""
Repositories: the persistence collaborators behind the CGPA service and auth.
Every SQLAlchemy failure leaves here as a PersistenceError.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone

from sqlalchemy import Engine, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from cgpa.errors import PersistenceError, ValidationError
from cgpa.models import Record, Semester
from config.logging_config import logger
from storage.database import CGPARecordRow, UserRow


def _aware(ts: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def _to_record(row: CGPARecordRow) -> Record:
    semesters = [Semester.from_dict(s) for s in row.semesters or []]
    semesters = [replace(s, calculated_at=_aware(s.calculated_at)) for s in semesters]
    return Record(
        owner=row.user_id,
        by_number={s.semester_number: s for s in semesters},
        overall_cgpa=row.overall_cgpa,
        total_credits=row.total_credits,
        last_updated=_aware(row.last_updated),
        version=row.version,
    )


class RecordRepository:
    """
    Stores one CGPA record per user.

    `save` is an optimistic compare-and-set on `version`: a record read at
    version N only overwrites the row if it is still at version N.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def find(self, user_id: int) -> Record | None:
        try:
            with Session(self.engine) as session:
                row = session.scalars(
                    select(CGPARecordRow).where(CGPARecordRow.user_id == user_id)
                ).one_or_none()
                return _to_record(row) if row is not None else None
        except SQLAlchemyError as exc:
            logger.error(f"Loading CGPA record for user {user_id} failed: {exc}")
            raise PersistenceError(str(exc)) from exc

    def save(self, record: Record) -> Record:
        payload = {
            "semesters":     [s.to_dict() for s in record.semesters],
            "overall_cgpa":  record.overall_cgpa,
            "total_credits": record.total_credits,
            "last_updated":  record.last_updated,
        }
        try:
            with Session(self.engine) as session, session.begin():
                if record.version == 0:
                    session.add(CGPARecordRow(user_id=record.owner, version=1, **payload))
                    new_version = 1
                else:
                    result = session.execute(
                        update(CGPARecordRow)
                        .where(
                            CGPARecordRow.user_id == record.owner,
                            CGPARecordRow.version == record.version,
                        )
                        .values(version=record.version + 1, **payload)
                    )
                    if result.rowcount != 1:
                        raise PersistenceError("record was modified concurrently")
                    new_version = record.version + 1
        except IntegrityError as exc:
            logger.error(f"CGPA record for user {record.owner} already exists: {exc}")
            raise PersistenceError("record was modified concurrently") from exc
        except SQLAlchemyError as exc:
            logger.error(f"Saving CGPA record for user {record.owner} failed: {exc}")
            raise PersistenceError(str(exc)) from exc

        logger.debug(f"Saved CGPA record for user {record.owner} (version {new_version})")
        return replace(record, version=new_version)


@dataclass(frozen=True)
class StoredUser:
    id:              int
    username:        str
    email:           str
    hashed_password: str


def _to_user(row: UserRow) -> StoredUser:
    return StoredUser(
        id=row.id,
        username=row.username,
        email=row.email,
        hashed_password=row.hashed_password,
    )


class UserRepository:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def create(self, username: str, email: str, hashed_password: str) -> StoredUser:
        try:
            with Session(self.engine) as session, session.begin():
                row = UserRow(username=username, email=email, hashed_password=hashed_password)
                session.add(row)
                session.flush()
                user = _to_user(row)
        except IntegrityError as exc:
            raise ValidationError("User already exists") from exc
        except SQLAlchemyError as exc:
            logger.error(f"Creating user {username} failed: {exc}")
            raise PersistenceError(str(exc)) from exc
        logger.info(f"Registered user {user.username} (id={user.id})")
        return user

    def get_by_id(self, user_id: int) -> StoredUser | None:
        try:
            with Session(self.engine) as session:
                row = session.get(UserRow, user_id)
                return _to_user(row) if row is not None else None
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc

    def get_by_login(self, login: str) -> StoredUser | None:
        """Look a user up by username or email."""
        try:
            with Session(self.engine) as session:
                row = session.scalars(
                    select(UserRow).where(or_(UserRow.username == login, UserRow.email == login))
                ).first()
                return _to_user(row) if row is not None else None
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc
