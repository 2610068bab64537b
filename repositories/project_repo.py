"""
repositories/project_repo.py
----------------------------
Data access layer for portfolio projects.
All SQL queries related to the `projects` table live here, including the
batch loader that resolves education -> projects in one round trip.
"""

from __future__ import annotations

from typing import Iterable, Optional

import psycopg2

from db.context import QueryContext
from db.database import Database
from models.common import enum_or_raw, enum_value
from models.project import Project, ProjectFilter, ProjectType
from repositories.listing import build_list_query
from utils.blurhash import BlurHashChecker, is_valid as is_valid_blurhash
from utils.clock import Clock, utc_now
from utils.errors import CorruptRowError, NotFoundError, StorageError, ValidationError
from utils.keys import generate_id
from utils.logger import get_logger

logger = get_logger(__name__)

TABLE = "projects"
_COLUMNS = (
    "id, blur_hash, title, sub_title, description, tags, type, link, "
    "education_id, created_at, updated_at"
)


class ProjectRepository:
    """
    Repository for CRUD operations on the projects table.

    Args:
        db: Query facade.
        clock: Time provider used to stamp created_at/updated_at.
        blur_hash_checker: Decides whether a blur hash is decodable.
    """

    def __init__(
        self,
        db: Database,
        clock: Clock = utc_now,
        blur_hash_checker: BlurHashChecker = is_valid_blurhash,
    ):
        self.db = db
        self.clock = clock
        self.blur_hash_checker = blur_hash_checker

    # ── CREATE ────────────────────────────────────────────

    def create(self, project: Project, ctx: Optional[QueryContext] = None) -> str:
        """
        Insert a new project.

        Returns:
            The new project's id.

        Raises:
            ValidationError: If the payload is invalid (nothing is written).
            StorageError: If the insert fails.
        """
        if project is None:
            raise ValidationError("failed to validate project: payload missing")
        try:
            project.validate_payload(self.blur_hash_checker)
        except ValidationError as e:
            raise ValidationError(f"failed to validate project: {e}") from e

        project_id = generate_id()
        now = self.clock()
        sql = f"""
            INSERT INTO {TABLE} ({_COLUMNS})
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING id;
        """
        try:
            row = self.db.query_row(sql, (
                project_id, project.blur_hash, project.title, project.subtitle,
                project.description, list(project.tags), enum_value(project.type),
                project.link, project.education_id, now, now,
            ), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to create project: {e}") from e

        if not row or not row[0]:
            raise CorruptRowError("invalid project returned: ID missing")

        logger.info(f"Added project '{project.title}' #{row[0]}")
        return row[0]

    # ── READ ──────────────────────────────────────────────

    def get(self, project_id: str, ctx: Optional[QueryContext] = None) -> Project:
        """
        Fetch a single project.

        Raises:
            NotFoundError: If no row has that id.
            CorruptRowError: If the stored row fails validation.
        """
        if not project_id:
            raise ValidationError("failed to get project: ID missing")

        sql = f"SELECT {_COLUMNS} FROM {TABLE} WHERE id = %s;"
        try:
            row = self.db.query_row(sql, (project_id,), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to get project: {e}") from e

        if row is None:
            raise NotFoundError(f"failed to get project: project {project_id} not found")
        return self._validated(self._row_to_project(row))

    def list(self, filt: Optional[ProjectFilter] = None, ctx: Optional[QueryContext] = None) -> list[Project]:
        """
        Fetch one page of projects.

        Args:
            filt: Paging, ordering and optional type filter. Out-of-range
                paging values are clamped, not rejected.
        """
        try:
            filt = (filt or ProjectFilter()).normalized()
        except ValidationError as e:
            raise ValidationError(f"failed to list projects: {e}") from e

        sql, params = build_list_query(
            f"SELECT {_COLUMNS} FROM {TABLE}",
            filt,
            column="type",
            value=enum_value(filt.type),
        )
        try:
            rows = self.db.query(sql, params, ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to list projects: {e}") from e

        return [self._validated(self._row_to_project(r)) for r in rows]

    def list_by_education_id(self, education_id: str, ctx: Optional[QueryContext] = None) -> list[Project]:
        """Projects built during one education record, newest first."""
        if not education_id:
            raise ValidationError("failed to list projects: education ID missing")

        sql = f"""
            SELECT {_COLUMNS} FROM {TABLE}
            WHERE education_id = %s
            ORDER BY created_at DESC;
        """
        try:
            rows = self.db.query(sql, (education_id,), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to query projects by education_id: {e}") from e

        return [self._validated(self._row_to_project(r)) for r in rows]

    def list_by_education_ids(
        self,
        education_ids: Iterable[str],
        ctx: Optional[QueryContext] = None,
    ) -> dict[str, list[Project]]:
        """
        Resolve projects for many education records with a single query.

        Returns:
            Dict keyed by every requested education id, each holding its
            projects newest first (an empty list when it has none). An
            empty id list returns {} without touching the database.
        """
        ids = list(dict.fromkeys(eid for eid in education_ids if eid))
        if not ids:
            return {}

        sql = f"""
            SELECT {_COLUMNS} FROM {TABLE}
            WHERE education_id IN %s
            ORDER BY education_id, created_at DESC;
        """
        try:
            rows = self.db.query(sql, (tuple(ids),), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to batch query projects: {e}") from e

        projects_by_education: dict[str, list[Project]] = {eid: [] for eid in ids}
        for row in rows:
            project = self._validated(self._row_to_project(row))
            projects_by_education.setdefault(project.education_id, []).append(project)
        return projects_by_education

    # ── UPDATE ────────────────────────────────────────────

    def update(self, project: Project, ctx: Optional[QueryContext] = None) -> Optional[Project]:
        """
        Replace every caller-owned field of an existing project.

        Returns:
            The stored project, or None if no row has ``project.id``.
        """
        if project is None:
            raise ValidationError("failed to validate project: payload missing")
        if not project.id:
            raise ValidationError("failed to update project: ID missing")
        try:
            project.validate_payload(self.blur_hash_checker)
        except ValidationError as e:
            raise ValidationError(f"failed to validate project: {e}") from e

        sql = f"""
            UPDATE {TABLE}
            SET blur_hash = %s, title = %s, sub_title = %s, description = %s,
                tags = %s, type = %s, link = %s, education_id = %s, updated_at = %s
            WHERE id = %s
            RETURNING {_COLUMNS};
        """
        try:
            row = self.db.query_row(sql, (
                project.blur_hash, project.title, project.subtitle, project.description,
                list(project.tags), enum_value(project.type), project.link,
                project.education_id, self.clock(), project.id,
            ), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to update project: {e}") from e

        if row is None:
            return None
        logger.info(f"Updated project #{project.id}")
        return self._validated(self._row_to_project(row))

    # ── DELETE ────────────────────────────────────────────

    def delete(self, project_id: str, ctx: Optional[QueryContext] = None) -> None:
        """
        Delete a project row. Its attachments are the caller's concern.

        Raises:
            NotFoundError: If no row has that id.
        """
        if not project_id:
            raise ValidationError("failed to delete project: ID missing")

        sql = f"DELETE FROM {TABLE} WHERE id = %s;"
        try:
            deleted = self.db.execute(sql, (project_id,), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to delete project: {e}") from e

        if deleted == 0:
            raise NotFoundError(f"failed to delete project: project {project_id} not found")
        logger.info(f"Deleted project #{project_id}")

    # ── HELPERS ───────────────────────────────────────────

    def _validated(self, project: Project) -> Project:
        try:
            project.validate_response(self.blur_hash_checker)
        except ValidationError as e:
            raise CorruptRowError(f"invalid project returned: {e}") from e
        return project

    @staticmethod
    def _row_to_project(row: tuple) -> Project:
        """Convert a database row tuple to a Project domain object."""
        return Project(
            id=row[0],
            blur_hash=row[1],
            title=row[2],
            subtitle=row[3],
            description=row[4],
            tags=list(row[5] or []),
            type=enum_or_raw(ProjectType, row[6]),
            link=row[7],
            education_id=row[8],
            created_at=row[9],
            updated_at=row[10],
        )
