"""
repositories/skill_repo.py
--------------------------
Data access layer for skills.
All SQL queries related to the `skills` table live here.
"""

from __future__ import annotations

from typing import Optional

import psycopg2

from db.context import QueryContext
from db.database import Database
from models.common import enum_or_raw, enum_value
from models.skill import Skill, SkillCategory, SkillFilter
from repositories.listing import build_list_query
from utils.clock import Clock, utc_now
from utils.errors import CorruptRowError, NotFoundError, StorageError, ValidationError
from utils.keys import generate_id
from utils.logger import get_logger

logger = get_logger(__name__)

TABLE = "skills"
_COLUMNS = "id, icon, hex_color, label, category, created_at, updated_at"


class SkillRepository:
    """Repository for CRUD operations on the skills table."""

    def __init__(self, db: Database, clock: Clock = utc_now):
        self.db = db
        self.clock = clock

    # ── CREATE ────────────────────────────────────────────

    def create(self, skill: Skill, ctx: Optional[QueryContext] = None) -> str:
        """Insert a new skill and return its id."""
        if skill is None:
            raise ValidationError("failed to validate skill: payload missing")
        try:
            skill.validate_payload()
        except ValidationError as e:
            raise ValidationError(f"failed to validate skill: {e}") from e

        skill_id = generate_id()
        now = self.clock()
        sql = f"""
            INSERT INTO {TABLE} ({_COLUMNS})
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            RETURNING id;
        """
        try:
            row = self.db.query_row(sql, (
                skill_id, skill.icon, skill.hex_color, skill.label,
                enum_value(skill.category), now, now,
            ), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to create skill: {e}") from e

        if not row or not row[0]:
            raise CorruptRowError("invalid skill returned: ID missing")

        logger.info(f"Added skill '{skill.label}' #{row[0]}")
        return row[0]

    # ── READ ──────────────────────────────────────────────

    def get(self, skill_id: str, ctx: Optional[QueryContext] = None) -> Skill:
        if not skill_id:
            raise ValidationError("failed to get skill: ID missing")

        sql = f"SELECT {_COLUMNS} FROM {TABLE} WHERE id = %s;"
        try:
            row = self.db.query_row(sql, (skill_id,), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to get skill: {e}") from e

        if row is None:
            raise NotFoundError(f"failed to get skill: skill {skill_id} not found")
        return self._validated(self._row_to_skill(row))

    def list(self, filt: Optional[SkillFilter] = None, ctx: Optional[QueryContext] = None) -> list[Skill]:
        try:
            filt = (filt or SkillFilter()).normalized()
        except ValidationError as e:
            raise ValidationError(f"failed to list skills: {e}") from e

        sql, params = build_list_query(
            f"SELECT {_COLUMNS} FROM {TABLE}",
            filt,
            column="category",
            value=enum_value(filt.category),
        )
        try:
            rows = self.db.query(sql, params, ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to list skills: {e}") from e

        return [self._validated(self._row_to_skill(r)) for r in rows]

    # ── UPDATE ────────────────────────────────────────────

    def update(self, skill: Skill, ctx: Optional[QueryContext] = None) -> Optional[Skill]:
        """Full-payload update; None when no row has ``skill.id``."""
        if skill is None:
            raise ValidationError("failed to validate skill: payload missing")
        if not skill.id:
            raise ValidationError("failed to update skill: ID missing")
        try:
            skill.validate_payload()
        except ValidationError as e:
            raise ValidationError(f"failed to validate skill: {e}") from e

        sql = f"""
            UPDATE {TABLE}
            SET icon = %s, hex_color = %s, label = %s, category = %s, updated_at = %s
            WHERE id = %s
            RETURNING {_COLUMNS};
        """
        try:
            row = self.db.query_row(sql, (
                skill.icon, skill.hex_color, skill.label, enum_value(skill.category),
                self.clock(), skill.id,
            ), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to update skill: {e}") from e

        if row is None:
            return None
        logger.info(f"Updated skill #{skill.id}")
        return self._validated(self._row_to_skill(row))

    # ── DELETE ────────────────────────────────────────────

    def delete(self, skill_id: str, ctx: Optional[QueryContext] = None) -> None:
        if not skill_id:
            raise ValidationError("failed to delete skill: ID missing")

        sql = f"DELETE FROM {TABLE} WHERE id = %s;"
        try:
            deleted = self.db.execute(sql, (skill_id,), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to delete skill: {e}") from e

        if deleted == 0:
            raise NotFoundError(f"failed to delete skill: skill {skill_id} not found")
        logger.info(f"Deleted skill #{skill_id}")

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _validated(skill: Skill) -> Skill:
        try:
            skill.validate_response()
        except ValidationError as e:
            raise CorruptRowError(f"invalid skill returned: {e}") from e
        return skill

    @staticmethod
    def _row_to_skill(row: tuple) -> Skill:
        """Convert a database row tuple to a Skill domain object."""
        return Skill(
            id=row[0],
            icon=row[1],
            hex_color=row[2],
            label=row[3],
            category=enum_or_raw(SkillCategory, row[4]),
            created_at=row[5],
            updated_at=row[6],
        )
