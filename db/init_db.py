"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from db.connection import get_connection, release_connection
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- Educations: one main school plus any number of extra school periods (JSONB)
CREATE TABLE IF NOT EXISTS educations (
    id              TEXT PRIMARY KEY,
    main_school     JSONB NOT NULL,
    school_periods  JSONB NOT NULL DEFAULT '[]'::jsonb,
    level           VARCHAR(30) NOT NULL
                    CHECK (level IN ('elementary', 'junior-high-school', 'senior-high-school', 'college')),
    created_at      TIMESTAMPTZ NOT NULL,
    updated_at      TIMESTAMPTZ NOT NULL,
    CHECK (updated_at >= created_at)
);

-- Projects: portfolio entries, optionally tied to an education record
CREATE TABLE IF NOT EXISTS projects (
    id              TEXT PRIMARY KEY,
    blur_hash       TEXT NOT NULL,
    title           TEXT NOT NULL,
    sub_title       TEXT NOT NULL,
    description     TEXT NOT NULL,
    tags            TEXT[] NOT NULL,
    type            VARCHAR(10) NOT NULL CHECK (type IN ('web', 'mobile', 'game')),
    link            TEXT NOT NULL,
    education_id    TEXT REFERENCES educations(id) ON DELETE SET NULL,
    created_at      TIMESTAMPTZ NOT NULL,
    updated_at      TIMESTAMPTZ NOT NULL,
    CHECK (updated_at >= created_at)
);

-- Skills: icon + color chips grouped by category
CREATE TABLE IF NOT EXISTS skills (
    id              TEXT PRIMARY KEY,
    icon            TEXT NOT NULL,
    hex_color       VARCHAR(7) NOT NULL,
    label           TEXT NOT NULL,
    category        VARCHAR(20) NOT NULL
                    CHECK (category IN ('frontend', 'backend', 'tools', 'others')),
    created_at      TIMESTAMPTZ NOT NULL,
    updated_at      TIMESTAMPTZ NOT NULL,
    CHECK (updated_at >= created_at)
);

-- Files: generic attachments for any parent row, addressed by (parent_table, parent_id).
-- No foreign key: referential integrity is kept by write/delete ordering in services/.
CREATE TABLE IF NOT EXISTS files (
    id              TEXT PRIMARY KEY,
    parent_table    VARCHAR(30) NOT NULL,
    parent_id       TEXT NOT NULL,
    role            VARCHAR(20) NOT NULL,
    name            TEXT NOT NULL,
    url             TEXT NOT NULL,
    type            VARCHAR(255) NOT NULL,
    size            BIGINT NOT NULL CHECK (size > 0),
    created_at      TIMESTAMPTZ NOT NULL,
    updated_at      TIMESTAMPTZ NOT NULL,
    CHECK (updated_at >= created_at)
);

-- Indexes for faster queries
CREATE INDEX IF NOT EXISTS idx_files_parent ON files(parent_table, parent_id, role);
CREATE INDEX IF NOT EXISTS idx_projects_education ON projects(education_id);
CREATE INDEX IF NOT EXISTS idx_projects_created ON projects(created_at);
CREATE INDEX IF NOT EXISTS idx_skills_category ON skills(category);
"""


def create_tables() -> None:
    """
    Execute the schema SQL to create all tables.
    Safe to call multiple times (uses IF NOT EXISTS).
    """
    conn = get_connection()
    try:
        with conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
        conn.commit()
        logger.info("Database schema initialized successfully.")
    except Exception as e:
        conn.rollback()
        logger.error(f"Failed to initialize schema: {e}")
        raise
    finally:
        release_connection(conn)


if __name__ == "__main__":
    from db.connection import init_pool
    init_pool()
    create_tables()
    logger.info("Schema created.")
