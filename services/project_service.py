"""
services/project_service.py
---------------------------
Business logic for portfolio projects and their preview images.
Orchestrates between the ProjectRepository and the FileRepository.
"""

from dataclasses import replace
from typing import Iterable, Optional

from db.context import QueryContext
from db.database import Database
from models.file import File, FileRole, ParentTable
from models.project import Project, ProjectFilter
from repositories.file_repo import FileRepository
from repositories.project_repo import ProjectRepository
from utils.errors import CatalogError, ValidationError
from utils.keys import generate_id
from utils.logger import get_logger

logger = get_logger(__name__)


class ProjectService:
    """
    Handles all workflows that touch a project and its previews.

    Write order:
        1. The project row is written before any of its previews.
        2. On delete, previews go first, then the project.

    Neither sequence is a transaction. A crash between the two steps of a
    delete leaves orphaned previews behind; CleanupService removes them.
    """

    def __init__(
        self,
        projects: Optional[ProjectRepository] = None,
        files: Optional[FileRepository] = None,
    ):
        db = Database()
        self.projects = projects or ProjectRepository(db)
        self.files = files or FileRepository(db)

    def create_project(
        self,
        project: Project,
        previews: Iterable[File] = (),
        ctx: Optional[QueryContext] = None,
    ) -> str:
        """
        Create a project, then attach its preview images.

        Every preview is validated before anything is written. If a preview
        still cannot be stored, whatever was written for this project is
        removed again and the original error is re-raised.

        Returns:
            The new project's id.

        Raises:
            ValidationError: If the project or any preview is invalid
                (nothing is written).
        """
        previews = [self._as_preview(p, generate_id()) for p in previews]
        for i, preview in enumerate(previews):
            try:
                preview.validate_payload()
            except ValidationError as e:
                raise ValidationError(f"failed to validate preview[{i}]: {e}") from e

        project_id = self.projects.create(project, ctx)

        try:
            for preview in previews:
                self.files.create(replace(preview, parent_id=project_id), ctx)
        except CatalogError as e:
            logger.error(f"Failed to attach previews to project #{project_id}, rolling back: {e}")
            # the caller's ctx may be the reason we failed; cleanup runs without it
            self._discard(project_id)
            raise

        return project_id

    def get_project(self, project_id: str, ctx: Optional[QueryContext] = None) -> dict:
        """Project with its preview images, newest first."""
        project = self.projects.get(project_id, ctx)
        previews = self.files.find_by_parent(ParentTable.PROJECTS, project.id, FileRole.IMAGE, ctx)
        return self._compose(project, previews)

    def update_project(self, project: Project, ctx: Optional[QueryContext] = None) -> Optional[dict]:
        """
        Full-payload update. Previews are managed through their own files.

        Returns:
            The updated project with previews, or None if it does not exist.
        """
        updated = self.projects.update(project, ctx)
        if updated is None:
            return None
        previews = self.files.find_by_parent(ParentTable.PROJECTS, updated.id, FileRole.IMAGE, ctx)
        return self._compose(updated, previews)

    def delete_project(self, project_id: str, ctx: Optional[QueryContext] = None) -> None:
        """
        Delete a project's attachments, then the project itself.

        Raises:
            NotFoundError: If the project does not exist.
        """
        removed = self.files.delete_by_parent(ParentTable.PROJECTS, project_id, ctx)
        self.projects.delete(project_id, ctx)
        logger.info(f"Deleted project #{project_id} with {removed} attachment(s)")

    def list_projects(self, filt: Optional[ProjectFilter] = None, ctx: Optional[QueryContext] = None) -> list[dict]:
        """
        One page of projects with previews.

        Previews for the whole page come from a single batch query.
        """
        projects = self.projects.list(filt, ctx)
        previews = self.files.find_by_parents(
            ParentTable.PROJECTS, [p.id for p in projects], FileRole.IMAGE, ctx
        )
        return [self._compose(p, previews.get(p.id, [])) for p in projects]

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _compose(project: Project, previews: list[File]) -> dict:
        data = project.to_dict()
        data["previews"] = [f.to_dict() for f in previews]
        return data

    @staticmethod
    def _as_preview(preview: File, parent_id: str) -> File:
        return replace(
            preview,
            parent_table=ParentTable.PROJECTS,
            parent_id=parent_id,
            role=preview.role or FileRole.IMAGE,
        )

    def _discard(self, project_id: str) -> None:
        try:
            self.files.delete_by_parent(ParentTable.PROJECTS, project_id)
            self.projects.delete(project_id)
        except CatalogError as e:
            # the sweep picks up any previews left behind
            logger.error(f"Failed to roll back project #{project_id}: {e}")
