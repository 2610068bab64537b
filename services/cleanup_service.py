"""
services/cleanup_service.py
---------------------------
Compensating sweep for attachments whose parent row no longer exists.

Parent deletes remove attachments first and the parent second, as two
separate statements. If the process dies in between, or the second step
fails, attachments can outlive their parent. Running the sweep
periodically bounds how long such orphans stay around.
"""

import time
from typing import Optional

from db.context import QueryContext
from db.database import Database
from models.file import ParentTable
from repositories.file_repo import FileRepository
from utils.errors import CatalogError
from utils.logger import get_logger

logger = get_logger(__name__)


class CleanupService:
    """Removes orphaned attachments for every known parent kind."""

    def __init__(self, files: Optional[FileRepository] = None):
        self.files = files or FileRepository(Database())

    def sweep_orphaned_files(self, ctx: Optional[QueryContext] = None) -> dict[str, int]:
        """
        Run one sweep. Safe to repeat; a clean database removes nothing.

        Returns:
            Rows removed per parent kind, e.g. {"projects": 2, "educations": 0, ...}.
        """
        removed = {}
        for parent_table in ParentTable:
            removed[parent_table.value] = self.files.delete_orphans(parent_table, ctx)

        total = sum(removed.values())
        if total:
            logger.info(f"Orphan sweep removed {total} attachment(s): {removed}")
        else:
            logger.info("Orphan sweep found nothing to remove.")
        return removed

    def run_forever(self, interval_seconds: int) -> None:
        """
        Sweep every ``interval_seconds`` until interrupted.

        A failed sweep (CatalogError) is logged and retried next round. Any
        other error, such as a closed pool, is logged and ends the loop.
        """
        logger.info(f"Orphan sweep scheduled every {interval_seconds}s")
        while True:
            try:
                self.sweep_orphaned_files()
            except CatalogError as e:
                # next round retries from scratch
                logger.error(f"Orphan sweep failed: {e}")
            except Exception as e:
                logger.error(f"Orphan sweep stopped by unexpected error: {e}")
                raise
            time.sleep(interval_seconds)
