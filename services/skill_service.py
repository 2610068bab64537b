"""
services/skill_service.py
-------------------------
Business logic for skills.
"""

from typing import Optional

from db.context import QueryContext
from db.database import Database
from models.file import ParentTable
from models.skill import Skill, SkillFilter
from repositories.file_repo import FileRepository
from repositories.skill_repo import SkillRepository
from utils.logger import get_logger

logger = get_logger(__name__)


class SkillService:
    """Thin orchestration over SkillRepository; deletes clean up attachments first."""

    def __init__(
        self,
        skills: Optional[SkillRepository] = None,
        files: Optional[FileRepository] = None,
    ):
        db = Database()
        self.skills = skills or SkillRepository(db)
        self.files = files or FileRepository(db)

    def create_skill(self, skill: Skill, ctx: Optional[QueryContext] = None) -> str:
        return self.skills.create(skill, ctx)

    def get_skill(self, skill_id: str, ctx: Optional[QueryContext] = None) -> dict:
        return self.skills.get(skill_id, ctx).to_dict()

    def update_skill(self, skill: Skill, ctx: Optional[QueryContext] = None) -> Optional[dict]:
        updated = self.skills.update(skill, ctx)
        return updated.to_dict() if updated is not None else None

    def delete_skill(self, skill_id: str, ctx: Optional[QueryContext] = None) -> None:
        removed = self.files.delete_by_parent(ParentTable.SKILLS, skill_id, ctx)
        self.skills.delete(skill_id, ctx)
        logger.info(f"Deleted skill #{skill_id} with {removed} attachment(s)")

    def list_skills(self, filt: Optional[SkillFilter] = None, ctx: Optional[QueryContext] = None) -> list[dict]:
        return [s.to_dict() for s in self.skills.list(filt, ctx)]
