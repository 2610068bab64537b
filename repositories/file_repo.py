"""
repositories/file_repo.py
-------------------------
Data access layer for file attachments.
All SQL queries related to the generic `files` table live here.

Attachments are addressed by (parent_table, parent_id, role). The table has
no foreign key to its parents; services/ keep it consistent by writing the
parent before its files and deleting files before their parent.
"""

from typing import Iterable, Optional, Union

import psycopg2

from db.context import QueryContext
from db.database import Database
from models.common import enum_or_raw, enum_value
from models.file import File, FileRole, ParentTable, parse_parent_table, parse_role
from utils.clock import Clock, utc_now
from utils.errors import CorruptRowError, NotFoundError, StorageError, ValidationError
from utils.keys import generate_id
from utils.logger import get_logger

logger = get_logger(__name__)

TABLE = "files"
_COLUMNS = "id, parent_table, parent_id, role, name, url, type, size, created_at, updated_at"


class FileRepository:
    """
    Repository for CRUD operations on the files table.

    Args:
        db: Query facade.
        clock: Time provider used to stamp created_at/updated_at.
    """

    def __init__(self, db: Database, clock: Clock = utc_now):
        self.db = db
        self.clock = clock

    # ── CREATE ────────────────────────────────────────────

    def create(self, file: File, ctx: Optional[QueryContext] = None) -> str:
        """
        Insert a new attachment.

        The caller must have written the parent row already.

        Returns:
            The new file's id.

        Raises:
            ValidationError: If the payload is invalid (nothing is written).
            StorageError: If the insert fails.
        """
        try:
            file.validate_payload()
        except ValidationError as e:
            raise ValidationError(f"failed to validate file: {e}") from e

        file_id = generate_id()
        now = self.clock()
        sql = f"""
            INSERT INTO {TABLE} ({_COLUMNS})
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING id;
        """
        try:
            row = self.db.query_row(sql, (
                file_id, enum_value(file.parent_table), file.parent_id,
                enum_value(file.role), file.name, file.url, file.type,
                file.size, now, now,
            ), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to create file: {e}") from e

        if not row or not row[0]:
            raise CorruptRowError("invalid file returned: ID missing")

        logger.info(f"Added file #{row[0]} to {enum_value(file.parent_table)}/{file.parent_id}")
        return row[0]

    # ── READ ──────────────────────────────────────────────

    def find_by_parent(
        self,
        parent_table: Union[ParentTable, str],
        parent_id: str,
        role: Union[FileRole, str],
        ctx: Optional[QueryContext] = None,
    ) -> list[File]:
        """
        Fetch every attachment of one parent with the given role, newest first.

        All three arguments are required; an empty one is a caller error,
        not an empty result.

        Raises:
            ValidationError: If an argument is empty or names an unknown kind.
        """
        try:
            table = parse_parent_table(parent_table)
            if not parent_id:
                raise ValidationError("parent_id missing")
            file_role = parse_role(role)
        except ValidationError as e:
            raise ValidationError(f"failed to find files: {e}") from e

        sql = f"""
            SELECT {_COLUMNS} FROM {TABLE}
            WHERE parent_table = %s AND parent_id = %s AND role = %s
            ORDER BY created_at DESC;
        """
        try:
            rows = self.db.query(sql, (table.value, parent_id, file_role.value), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to query files by parent: {e}") from e

        return [self._validated(self._row_to_file(r)) for r in rows]

    def find_by_parents(
        self,
        parent_table: Union[ParentTable, str],
        parent_ids: Iterable[str],
        role: Union[FileRole, str],
        ctx: Optional[QueryContext] = None,
    ) -> dict[str, list[File]]:
        """
        Batch form of find_by_parent for many parents of one kind.

        Returns:
            Dict keyed by every requested parent id (files newest first,
            possibly an empty list). An empty id list returns {} without
            touching the database.
        """
        ids = list(dict.fromkeys(pid for pid in parent_ids if pid))
        if not ids:
            return {}

        try:
            table = parse_parent_table(parent_table)
            file_role = parse_role(role)
        except ValidationError as e:
            raise ValidationError(f"failed to find files: {e}") from e

        sql = f"""
            SELECT {_COLUMNS} FROM {TABLE}
            WHERE parent_table = %s AND role = %s AND parent_id IN %s
            ORDER BY parent_id, created_at DESC;
        """
        try:
            rows = self.db.query(sql, (table.value, file_role.value, tuple(ids)), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to batch query files: {e}") from e

        files_by_parent: dict[str, list[File]] = {pid: [] for pid in ids}
        for row in rows:
            file = self._validated(self._row_to_file(row))
            files_by_parent.setdefault(file.parent_id, []).append(file)
        return files_by_parent

    def find_by_id(self, file_id: str, ctx: Optional[QueryContext] = None) -> File:
        """
        Fetch a single attachment.

        Raises:
            ValidationError: If file_id is empty.
            NotFoundError: If no row has that id.
            CorruptRowError: If the stored row fails validation.
        """
        if not file_id:
            raise ValidationError("failed to get file: ID missing")

        sql = f"SELECT {_COLUMNS} FROM {TABLE} WHERE id = %s;"
        try:
            row = self.db.query_row(sql, (file_id,), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to get file: {e}") from e

        if row is None:
            raise NotFoundError(f"failed to get file: file {file_id} not found")
        return self._validated(self._row_to_file(row))

    # ── UPDATE ────────────────────────────────────────────

    def update(self, file: File, ctx: Optional[QueryContext] = None) -> Optional[File]:
        """
        Replace every caller-owned field of an existing attachment.

        Returns:
            The stored file, or None if no row has ``file.id``.
        """
        if not file.id:
            raise ValidationError("failed to update file: ID missing")
        try:
            file.validate_payload()
        except ValidationError as e:
            raise ValidationError(f"failed to validate file: {e}") from e

        sql = f"""
            UPDATE {TABLE}
            SET parent_table = %s, parent_id = %s, role = %s, name = %s,
                url = %s, type = %s, size = %s, updated_at = %s
            WHERE id = %s
            RETURNING {_COLUMNS};
        """
        try:
            row = self.db.query_row(sql, (
                enum_value(file.parent_table), file.parent_id, enum_value(file.role),
                file.name, file.url, file.type, file.size, self.clock(), file.id,
            ), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to update file: {e}") from e

        if row is None:
            return None
        return self._validated(self._row_to_file(row))

    # ── DELETE ────────────────────────────────────────────

    def delete(self, file_id: str, ctx: Optional[QueryContext] = None) -> None:
        """
        Delete one attachment.

        Raises:
            NotFoundError: If no row has that id.
        """
        if not file_id:
            raise ValidationError("failed to delete file: ID missing")

        sql = f"DELETE FROM {TABLE} WHERE id = %s;"
        try:
            deleted = self.db.execute(sql, (file_id,), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to delete file: {e}") from e

        if deleted == 0:
            raise NotFoundError(f"failed to delete file: file {file_id} not found")
        logger.info(f"Deleted file #{file_id}")

    def delete_by_parent(
        self,
        parent_table: Union[ParentTable, str],
        parent_id: str,
        ctx: Optional[QueryContext] = None,
    ) -> int:
        """
        Delete every attachment of a parent, whatever its role.

        A parent with no attachments is not an error.

        Returns:
            Number of rows removed.
        """
        try:
            table = parse_parent_table(parent_table)
            if not parent_id:
                raise ValidationError("parent_id missing")
        except ValidationError as e:
            raise ValidationError(f"failed to delete files: {e}") from e

        sql = f"DELETE FROM {TABLE} WHERE parent_table = %s AND parent_id = %s;"
        try:
            deleted = self.db.execute(sql, (table.value, parent_id), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to delete files by parent: {e}") from e

        if deleted:
            logger.info(f"Deleted {deleted} file(s) of {table.value}/{parent_id}")
        return deleted

    def delete_orphans(
        self,
        parent_table: Union[ParentTable, str],
        ctx: Optional[QueryContext] = None,
    ) -> int:
        """
        Delete attachments of one parent kind whose parent row is gone.

        Idempotent; used by the cleanup sweep to close the window left by
        non-transactional parent deletes.

        Returns:
            Number of rows removed.
        """
        try:
            table = parse_parent_table(parent_table)
        except ValidationError as e:
            raise ValidationError(f"failed to sweep files: {e}") from e

        # table.value comes from a closed enum and doubles as the parent table name
        sql = f"""
            DELETE FROM {TABLE} f
            WHERE f.parent_table = %s
              AND NOT EXISTS (SELECT 1 FROM {table.value} p WHERE p.id = f.parent_id);
        """
        try:
            deleted = self.db.execute(sql, (table.value,), ctx)
        except psycopg2.Error as e:
            raise StorageError(f"failed to sweep orphaned files: {e}") from e

        if deleted:
            logger.warning(f"Removed {deleted} orphaned file(s) of {table.value}")
        return deleted

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _validated(file: File) -> File:
        try:
            file.validate_response()
        except ValidationError as e:
            raise CorruptRowError(f"invalid file returned: {e}") from e
        return file

    @staticmethod
    def _row_to_file(row: tuple) -> File:
        """Convert a database row tuple to a File domain object."""
        return File(
            id=row[0],
            parent_table=enum_or_raw(ParentTable, row[1]),
            parent_id=row[2],
            role=enum_or_raw(FileRole, row[3]),
            name=row[4],
            url=row[5],
            type=row[6],
            size=row[7],
            created_at=row[8],
            updated_at=row[9],
        )
