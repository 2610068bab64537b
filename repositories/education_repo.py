"""
repositories/education_repo.py
------------------------------
Data access layer for education records.
All SQL queries related to the `educations` table live here.

School periods are embedded values, stored as JSONB in `main_school` and
`school_periods`.
"""

from __future__ import annotations

import json
from typing import Optional

import psycopg2
from psycopg2 import extras

from db.context import QueryContext
from db.database import Database
from models.common import enum_or_raw, enum_value
from models.education import Education, EducationFilter, EducationLevel, SchoolPeriod
from repositories.listing import build_list_query
from utils.clock import Clock, utc_now
from utils.errors import CorruptRowError, NotFoundError, StorageError, ValidationError
from utils.keys import generate_id
from utils.logger import get_logger

logger = get_logger(__name__)

TABLE = "educations"
_COLUMNS = "id, main_school, school_periods, level, created_at, updated_at"


class EducationRepository:
    """
    Repository for CRUD operations on the educations table.

    Args:
        db: Query facade.
        clock: Time provider used to stamp created_at/updated_at.
    """

    def __init__(self, db: Database, clock: Clock = utc_now):
        self.db = db
        self.clock = clock

    # ── CREATE ────────────────────────────────────────────

    def create(self, education: Education, ctx: Optional[QueryContext] = None) -> str:
        """
        Insert a new education record.

        Returns:
            The new record's id.

        Raises:
            ValidationError: If the payload (or any school period) is invalid.
            StorageError: If the insert fails.
        """
        if education is None:
            raise ValidationError("failed to validate education: payload missing")
        try:
            education.validate_payload()
        except ValidationError as e:
            raise ValidationError(f"failed to validate education: {e}") from e

        education_id = generate_id()
        now = self.clock()
        sql = f"""
            INSERT INTO {TABLE} ({_COLUMNS})
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING id;
        """
        try:
            row = self.db.query_row(sql, (
                education_id,
                extras.Json(education.main_school.to_dict()),
                extras.Json([p.to_dict() for p in education.school_periods]),
                enum_value(education.level),
                now,
                now,
            ), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to create education: {e}") from e

        if not row or not row[0]:
            raise CorruptRowError("invalid education returned: ID missing")

        logger.info(f"Added education '{education.main_school.name}' #{row[0]}")
        return row[0]

    # ── READ ──────────────────────────────────────────────

    def get(self, education_id: str, ctx: Optional[QueryContext] = None) -> Education:
        """
        Fetch a single education record.

        Raises:
            NotFoundError: If no row has that id.
            CorruptRowError: If the stored row fails validation.
        """
        if not education_id:
            raise ValidationError("failed to get education: ID missing")

        sql = f"SELECT {_COLUMNS} FROM {TABLE} WHERE id = %s;"
        try:
            row = self.db.query_row(sql, (education_id,), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to get education: {e}") from e

        if row is None:
            raise NotFoundError(f"failed to get education: education {education_id} not found")
        return self._load(row)

    def list(self, filt: Optional[EducationFilter] = None, ctx: Optional[QueryContext] = None) -> list[Education]:
        """Fetch one page of education records, optionally for one level."""
        try:
            filt = (filt or EducationFilter()).normalized()
        except ValidationError as e:
            raise ValidationError(f"failed to list educations: {e}") from e

        sql, params = build_list_query(
            f"SELECT {_COLUMNS} FROM {TABLE}",
            filt,
            column="level",
            value=enum_value(filt.level),
        )
        try:
            rows = self.db.query(sql, params, ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to list educations: {e}") from e

        return [self._load(r) for r in rows]

    # ── UPDATE ────────────────────────────────────────────

    def update(self, education: Education, ctx: Optional[QueryContext] = None) -> Optional[Education]:
        """
        Replace the school periods and level of an existing record.

        Returns:
            The stored record, or None if no row has ``education.id``.
        """
        if education is None:
            raise ValidationError("failed to validate education: payload missing")
        if not education.id:
            raise ValidationError("failed to update education: ID missing")
        try:
            education.validate_payload()
        except ValidationError as e:
            raise ValidationError(f"failed to validate education: {e}") from e

        sql = f"""
            UPDATE {TABLE}
            SET main_school = %s, school_periods = %s, level = %s, updated_at = %s
            WHERE id = %s
            RETURNING {_COLUMNS};
        """
        try:
            row = self.db.query_row(sql, (
                extras.Json(education.main_school.to_dict()),
                extras.Json([p.to_dict() for p in education.school_periods]),
                enum_value(education.level),
                self.clock(),
                education.id,
            ), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to update education: {e}") from e

        if row is None:
            return None
        logger.info(f"Updated education #{education.id}")
        return self._load(row)

    # ── DELETE ────────────────────────────────────────────

    def delete(self, education_id: str, ctx: Optional[QueryContext] = None) -> None:
        """
        Delete an education row. Linked projects keep existing with
        education_id set to NULL by the foreign key.

        Raises:
            NotFoundError: If no row has that id.
        """
        if not education_id:
            raise ValidationError("failed to delete education: ID missing")

        sql = f"DELETE FROM {TABLE} WHERE id = %s;"
        try:
            deleted = self.db.execute(sql, (education_id,), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to delete education: {e}") from e

        if deleted == 0:
            raise NotFoundError(f"failed to delete education: education {education_id} not found")
        logger.info(f"Deleted education #{education_id}")

    # ── HELPERS ───────────────────────────────────────────

    def _load(self, row: tuple) -> Education:
        """Map and response-validate a row; any defect is reported as corruption."""
        try:
            education = self._row_to_education(row)
        except (TypeError, ValueError, AttributeError) as e:
            raise CorruptRowError(f"invalid education returned: {e}") from e
        try:
            education.validate_response()
        except ValidationError as e:
            raise CorruptRowError(f"invalid education returned: {e}") from e
        return education

    @staticmethod
    def _row_to_education(row: tuple) -> Education:
        """Convert a database row tuple to an Education domain object."""
        main_school = _json(row[1])
        school_periods = _json(row[2]) or []
        return Education(
            id=row[0],
            main_school=SchoolPeriod.from_dict(main_school) if main_school else None,
            school_periods=[SchoolPeriod.from_dict(p) for p in school_periods],
            level=enum_or_raw(EducationLevel, row[3]),
            created_at=row[4],
            updated_at=row[5],
        )


def _json(value):
    # psycopg2 decodes JSONB already; plain JSON text columns arrive as str
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value
