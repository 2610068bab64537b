"""
services/education_service.py
-----------------------------
Business logic for education records and the projects built during them.
"""

from typing import Optional

from db.context import QueryContext
from db.database import Database
from models.education import Education, EducationFilter
from models.file import FileRole, ParentTable
from models.project import Project
from repositories.education_repo import EducationRepository
from repositories.file_repo import FileRepository
from repositories.project_repo import ProjectRepository
from utils.logger import get_logger

logger = get_logger(__name__)


class EducationService:
    """
    Handles all workflows around education records.

    Reads join in the projects that point at each record (and those
    projects' previews) with batch queries: a page of N educations costs
    three round trips, not 1 + N + projects.
    """

    def __init__(
        self,
        educations: Optional[EducationRepository] = None,
        projects: Optional[ProjectRepository] = None,
        files: Optional[FileRepository] = None,
    ):
        db = Database()
        self.educations = educations or EducationRepository(db)
        self.projects = projects or ProjectRepository(db)
        self.files = files or FileRepository(db)

    def create_education(self, education: Education, ctx: Optional[QueryContext] = None) -> str:
        return self.educations.create(education, ctx)

    def get_education(self, education_id: str, ctx: Optional[QueryContext] = None) -> dict:
        """Education record with its projects (newest first) and their previews."""
        education = self.educations.get(education_id, ctx)
        projects = self.projects.list_by_education_id(education.id, ctx)
        return self._compose(education, projects, self._previews_for(projects, ctx))

    def update_education(self, education: Education, ctx: Optional[QueryContext] = None) -> Optional[dict]:
        """
        Returns:
            The updated record with its projects, or None if it does not exist.
        """
        updated = self.educations.update(education, ctx)
        if updated is None:
            return None
        projects = self.projects.list_by_education_id(updated.id, ctx)
        return self._compose(updated, projects, self._previews_for(projects, ctx))

    def delete_education(self, education_id: str, ctx: Optional[QueryContext] = None) -> None:
        """
        Delete the record's attachments, then the record.
        Linked projects survive with education_id cleared by the database.
        """
        removed = self.files.delete_by_parent(ParentTable.EDUCATIONS, education_id, ctx)
        self.educations.delete(education_id, ctx)
        logger.info(f"Deleted education #{education_id} with {removed} attachment(s)")

    def list_educations(self, filt: Optional[EducationFilter] = None, ctx: Optional[QueryContext] = None) -> list[dict]:
        educations = self.educations.list(filt, ctx)
        projects_by_education = self.projects.list_by_education_ids([e.id for e in educations], ctx)

        all_projects = [p for group in projects_by_education.values() for p in group]
        previews = self._previews_for(all_projects, ctx)

        return [
            self._compose(e, projects_by_education.get(e.id, []), previews)
            for e in educations
        ]

    # ── HELPERS ───────────────────────────────────────────

    def _previews_for(self, projects: list[Project], ctx: Optional[QueryContext]) -> dict:
        return self.files.find_by_parents(
            ParentTable.PROJECTS, [p.id for p in projects], FileRole.IMAGE, ctx
        )

    @staticmethod
    def _compose(education: Education, projects: list[Project], previews: dict) -> dict:
        data = education.to_dict()
        data["projects"] = []
        for project in projects:
            item = project.to_dict()
            item["previews"] = [f.to_dict() for f in previews.get(project.id, [])]
            data["projects"].append(item)
        return data
