"""
Unit Tests for the Service Layer

Services run on real repositories over the scripted FakeDatabase, so the
recorded statements show both write ordering and round-trip counts.
"""

import psycopg2
import pytest

from db.context import QueryContext
from repositories.education_repo import EducationRepository
from repositories.file_repo import FileRepository
from repositories.project_repo import ProjectRepository
from repositories.skill_repo import SkillRepository
from services.cleanup_service import CleanupService
from services.education_service import EducationService
from services.project_service import ProjectService
from services.skill_service import SkillService
from utils.errors import NotFoundError, OperationCancelled, StorageError, ValidationError
from tests.conftest import (
    EDUCATION_ID, OTHER_EDUCATION_ID, PROJECT_ID, FakeDatabase,
    education_row, file_row, make_file, make_project, project_row, skill_row,
)

SKILL_ID = "1f2e3d4c-5b6a-4978-8695-a4b3c2d1e0f9"


def _echo_id(sql, params):
    return (params[0],)


def _statements(fake_db):
    return [" ".join(sql.split()[:3]) for _, sql, _, _ in fake_db.calls]


class ContextCheckingDatabase(FakeDatabase):
    """FakeDatabase that refuses a round trip for a cancelled context, like Database does."""

    def query_row(self, sql, params=None, ctx=None):
        if ctx is not None:
            ctx.check("query")
        return super().query_row(sql, params, ctx)

    def execute(self, sql, params=None, ctx=None):
        if ctx is not None:
            ctx.check("query")
        return super().execute(sql, params, ctx)


@pytest.fixture
def files(fake_db, clock):
    return FileRepository(fake_db, clock=clock)


@pytest.fixture
def project_service(fake_db, clock, files):
    return ProjectService(projects=ProjectRepository(fake_db, clock=clock), files=files)


@pytest.fixture
def education_service(fake_db, clock, files):
    return EducationService(
        educations=EducationRepository(fake_db, clock=clock),
        projects=ProjectRepository(fake_db, clock=clock),
        files=files,
    )


@pytest.fixture
def skill_service(fake_db, clock, files):
    return SkillService(skills=SkillRepository(fake_db, clock=clock), files=files)


class TestProjectService:
    """Tests for ProjectService."""

    def test_create_writes_project_before_previews(self, project_service, fake_db):
        fake_db.queue(_echo_id, _echo_id, _echo_id)

        project_id = project_service.create_project(
            make_project(), previews=[make_file(), make_file(name="detail.webp")]
        )

        inserts = [sql for _, sql, _, _ in fake_db.calls]
        assert "INSERT INTO projects" in inserts[0]
        assert all("INSERT INTO files" in sql for sql in inserts[1:])
        for _, _, params, _ in fake_db.calls[1:]:
            assert params[1:4] == ("projects", project_id, "image")

    def test_create_without_previews(self, project_service, fake_db):
        fake_db.queue(_echo_id)
        project_service.create_project(make_project())
        assert len(fake_db.calls) == 1

    def test_invalid_project_writes_nothing(self, project_service, fake_db):
        with pytest.raises(ValidationError):
            project_service.create_project(make_project(link=""), previews=[make_file()])
        assert fake_db.calls == []

    def test_failed_preview_rolls_project_back(self, project_service, fake_db):
        fake_db.queue(_echo_id, psycopg2.OperationalError("disk full"), 0, 1)

        with pytest.raises(StorageError, match="failed to create file"):
            project_service.create_project(make_project(), previews=[make_file()])

        assert _statements(fake_db) == [
            "INSERT INTO projects",
            "INSERT INTO files",
            "DELETE FROM files",
            "DELETE FROM projects",
        ]

    def test_invalid_preview_writes_nothing(self, project_service, fake_db):
        with pytest.raises(ValidationError) as excinfo:
            project_service.create_project(
                make_project(), previews=[make_file(), make_file(size=0)]
            )

        assert str(excinfo.value) == "failed to validate preview[1]: size must be greater than 0"
        assert fake_db.calls == []

    def test_preview_without_parent_is_accepted(self, project_service, fake_db):
        fake_db.queue(_echo_id, _echo_id)

        project_id = project_service.create_project(
            make_project(), previews=[make_file(parent_table=None, parent_id=None, role=None)]
        )

        assert fake_db.calls[1][2][1:4] == ("projects", project_id, "image")

    def test_rollback_survives_a_cancelled_context(self, clock):
        db = ContextCheckingDatabase()
        service = ProjectService(
            projects=ProjectRepository(db, clock=clock),
            files=FileRepository(db, clock=clock),
        )
        ctx = QueryContext()

        def insert_then_cancel(sql, params):
            ctx.cancel()
            return (params[0],)

        db.queue(insert_then_cancel, 0, 1)

        with pytest.raises(OperationCancelled):
            service.create_project(make_project(), previews=[make_file()], ctx=ctx)

        assert _statements(db) == [
            "INSERT INTO projects",
            "DELETE FROM files",
            "DELETE FROM projects",
        ]
        assert [call[3] for call in db.calls[1:]] == [None, None]

    def test_failed_rollback_still_raises_original_error(self, project_service, fake_db):
        fake_db.queue(
            _echo_id,
            psycopg2.OperationalError("disk full"),
            psycopg2.OperationalError("connection lost"),
        )
        with pytest.raises(StorageError, match="disk full"):
            project_service.create_project(make_project(), previews=[make_file()])

    def test_get_project_includes_previews(self, project_service, fake_db):
        fake_db.queue(project_row(), [file_row()])

        result = project_service.get_project(PROJECT_ID)

        assert result["id"] == PROJECT_ID
        assert result["sub_title"] == "Grid search visualizer"
        assert [p["name"] for p in result["previews"]] == ["cover.webp"]

    def test_get_missing_project_skips_preview_lookup(self, project_service, fake_db):
        with pytest.raises(NotFoundError):
            project_service.get_project(PROJECT_ID)
        assert len(fake_db.calls) == 1

    def test_update_missing_project(self, project_service, fake_db):
        assert project_service.update_project(make_project(id=PROJECT_ID)) is None
        assert len(fake_db.calls) == 1

    def test_delete_removes_previews_first(self, project_service, fake_db):
        fake_db.queue(2, 1)

        project_service.delete_project(PROJECT_ID)

        assert _statements(fake_db) == [
            "DELETE FROM files",
            "DELETE FROM projects",
        ]

    def test_delete_missing_project(self, project_service, fake_db):
        fake_db.queue(0, 0)
        with pytest.raises(NotFoundError):
            project_service.delete_project(PROJECT_ID)

    def test_list_uses_one_preview_query(self, project_service, fake_db):
        second_id = "6f1d7a2b-3c4d-4e5f-8a6b-7c8d9e0f1a2b"
        fake_db.queue([project_row(), project_row(project_id=second_id)], [file_row()])

        results = project_service.list_projects()

        assert len(fake_db.calls) == 2
        assert len(results[0]["previews"]) == 1
        assert results[1]["previews"] == []

    def test_empty_page_skips_preview_query(self, project_service, fake_db):
        assert project_service.list_projects() == []
        assert len(fake_db.calls) == 1


class TestEducationService:
    """Tests for EducationService."""

    def test_get_education_joins_projects_and_previews(self, education_service, fake_db):
        fake_db.queue(
            education_row(),
            [project_row(education_id=EDUCATION_ID)],
            [file_row()],
        )

        result = education_service.get_education(EDUCATION_ID)

        assert result["level"] == "college"
        assert [p["id"] for p in result["projects"]] == [PROJECT_ID]
        assert len(result["projects"][0]["previews"]) == 1

    def test_get_education_without_projects(self, education_service, fake_db):
        fake_db.queue(education_row(), [])

        result = education_service.get_education(EDUCATION_ID)

        assert result["projects"] == []
        assert len(fake_db.calls) == 2

    def test_list_costs_three_queries(self, education_service, fake_db):
        fake_db.queue(
            [education_row(), education_row(education_id=OTHER_EDUCATION_ID)],
            [project_row(education_id=EDUCATION_ID)],
            [file_row()],
        )

        results = education_service.list_educations()

        assert len(fake_db.calls) == 3
        assert fake_db.calls[1][2] == ((EDUCATION_ID, OTHER_EDUCATION_ID),)
        assert len(results[0]["projects"]) == 1
        assert results[0]["projects"][0]["previews"][0]["parent_id"] == PROJECT_ID
        assert results[1]["projects"] == []

    def test_empty_list(self, education_service, fake_db):
        assert education_service.list_educations() == []
        assert len(fake_db.calls) == 1

    def test_delete_removes_attachments_first(self, education_service, fake_db):
        fake_db.queue(0, 1)

        education_service.delete_education(EDUCATION_ID)

        assert _statements(fake_db) == [
            "DELETE FROM files",
            "DELETE FROM educations",
        ]
        assert fake_db.calls[0][2] == ("educations", EDUCATION_ID)


class TestSkillService:
    """Tests for SkillService."""

    def test_get_skill_returns_dict(self, skill_service, fake_db):
        fake_db.queue(skill_row())
        result = skill_service.get_skill(SKILL_ID)
        assert result["hex_color"] == "#3776AB"
        assert result["category"] == "backend"

    def test_delete_removes_attachments_first(self, skill_service, fake_db):
        fake_db.queue(1, 1)
        skill_service.delete_skill(SKILL_ID)
        assert fake_db.calls[0][2] == ("skills", SKILL_ID)
        assert "DELETE FROM skills" in fake_db.calls[1][1]

    def test_list_skills(self, skill_service, fake_db):
        fake_db.queue([skill_row()])
        assert [s["label"] for s in skill_service.list_skills()] == ["Python"]


class TestCleanupService:
    """Tests for the orphan sweep."""

    def test_sweep_reports_per_parent_kind(self, files, fake_db):
        fake_db.queue(1, 0, 2)

        removed = CleanupService(files=files).sweep_orphaned_files()

        assert removed == {"projects": 1, "educations": 0, "skills": 2}
        assert [call[2] for call in fake_db.calls] == [("projects",), ("educations",), ("skills",)]

    def test_loop_survives_a_failed_sweep(self, files, fake_db, monkeypatch):
        fake_db.queue(psycopg2.OperationalError("connection refused"), 0, 0, 0)
        sleeps = []

        def fake_sleep(seconds):
            sleeps.append(seconds)
            if len(sleeps) == 2:
                raise KeyboardInterrupt

        monkeypatch.setattr("services.cleanup_service.time.sleep", fake_sleep)

        with pytest.raises(KeyboardInterrupt):
            CleanupService(files=files).run_forever(30)

        assert sleeps == [30, 30]
        assert len(fake_db.calls) == 4

    def test_loop_logs_and_stops_on_unexpected_error(self, files, fake_db, monkeypatch, caplog):
        fake_db.queue(RuntimeError("Database pool not initialized. Call init_pool() first."))
        monkeypatch.setattr("services.cleanup_service.time.sleep", lambda seconds: None)

        with pytest.raises(RuntimeError, match="pool not initialized"):
            CleanupService(files=files).run_forever(30)

        assert "Orphan sweep stopped by unexpected error" in caplog.text
        assert len(fake_db.calls) == 1
