"""
Pytest Configuration and Fixtures

Provides a scripted in-memory stand-in for db.database.Database, a fixed
clock and factories for valid entities.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from models.education import Education, EducationLevel, SchoolPeriod
from models.file import File, FileRole, ParentTable
from models.project import Project, ProjectType
from models.skill import Skill, SkillCategory
from utils.clock import fixed_clock

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
LATER = NOW + timedelta(hours=1)

VALID_BLURHASH = "LEHV6nWB2yk8pyo0adR*.7kCMdnj"

PROJECT_ID = "5b0f6a0e-6a53-4c1c-9d8e-2a1f8c3e4b71"
EDUCATION_ID = "0d7c3f9e-1b2a-4e5f-8a9b-c0d1e2f3a4b5"
OTHER_EDUCATION_ID = "9a8b7c6d-5e4f-4a3b-8c2d-1e0f9a8b7c6d"
FILE_ID = "c3d2e1f0-a9b8-4c7d-8e6f-5a4b3c2d1e0f"


# =============================================================================
# Database
# =============================================================================

class FakeDatabase:
    """
    Records every statement and answers from a queue of scripted results.

    Queue entries are returned in order regardless of which primitive is
    called. An entry may be an exception (raised) or a callable taking
    (sql, params) whose return value is used. When the queue is empty,
    query_row returns None, query returns [] and execute returns 0.
    """

    def __init__(self):
        self.calls = []
        self._results = []

    def queue(self, *results):
        self._results.extend(results)
        return self

    def _next(self, sql, params, default):
        if not self._results:
            return default
        result = self._results.pop(0)
        if isinstance(result, BaseException):
            raise result
        if callable(result):
            return result(sql, params)
        return result

    def query_row(self, sql, params=None, ctx=None):
        self.calls.append(("query_row", sql, params, ctx))
        return self._next(sql, params, None)

    def query(self, sql, params=None, ctx=None):
        self.calls.append(("query", sql, params, ctx))
        return self._next(sql, params, [])

    def execute(self, sql, params=None, ctx=None):
        self.calls.append(("execute", sql, params, ctx))
        return self._next(sql, params, 0)

    @property
    def last_sql(self):
        return self.calls[-1][1]

    @property
    def last_params(self):
        return self.calls[-1][2]


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def clock():
    return fixed_clock(NOW)


# =============================================================================
# Entity factories
# =============================================================================

def make_project(**overrides) -> Project:
    data = dict(
        blur_hash=VALID_BLURHASH,
        title="Pathfinder",
        subtitle="Grid search visualizer",
        description="Visualizes A*, Dijkstra and BFS on an editable grid.",
        tags=["react", "typescript"],
        type=ProjectType.WEB,
        link="https://example.com/pathfinder",
    )
    data.update(overrides)
    return Project(**data)


def make_school(**overrides) -> SchoolPeriod:
    data = dict(
        name="State University",
        description="BS Computer Science",
        logo="https://example.com/logo.png",
        blur_hash=VALID_BLURHASH,
        start_date=date(2018, 6, 1),
        end_date=date(2022, 6, 1),
    )
    data.update(overrides)
    return SchoolPeriod(**data)


def make_education(**overrides) -> Education:
    data = dict(main_school=make_school(), level=EducationLevel.COLLEGE)
    data.update(overrides)
    return Education(**data)


def make_skill(**overrides) -> Skill:
    data = dict(
        icon="python",
        hex_color="#3776AB",
        label="Python",
        category=SkillCategory.BACKEND,
    )
    data.update(overrides)
    return Skill(**data)


def make_file(**overrides) -> File:
    data = dict(
        parent_table=ParentTable.PROJECTS,
        parent_id=PROJECT_ID,
        role=FileRole.IMAGE,
        name="cover.webp",
        url="https://cdn.example.com/cover.webp",
        type="image/webp",
        size=20480,
    )
    data.update(overrides)
    return File(**data)


# =============================================================================
# Stored rows (column order matches each repository's SELECT)
# =============================================================================

def project_row(project_id=PROJECT_ID, education_id=None, created_at=NOW, updated_at=NOW, **overrides):
    p = make_project(**overrides)
    return (
        project_id, p.blur_hash, p.title, p.subtitle, p.description, list(p.tags),
        p.type.value, p.link, education_id, created_at, updated_at,
    )


def file_row(file_id=FILE_ID, parent_id=PROJECT_ID, created_at=NOW, updated_at=NOW, **overrides):
    f = make_file(parent_id=parent_id, **overrides)
    return (
        file_id, f.parent_table.value, f.parent_id, f.role.value, f.name, f.url,
        f.type, f.size, created_at, updated_at,
    )


def education_row(education_id=EDUCATION_ID, created_at=NOW, updated_at=NOW, periods=None, level="college"):
    return (
        education_id,
        make_school().to_dict(),
        [p.to_dict() for p in (periods or [])],
        level,
        created_at,
        updated_at,
    )


def skill_row(skill_id="1f2e3d4c-5b6a-4978-8695-a4b3c2d1e0f9", created_at=NOW, updated_at=NOW, **overrides):
    s = make_skill(**overrides)
    return (skill_id, s.icon, s.hex_color, s.label, s.category.value, created_at, updated_at)
