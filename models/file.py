"""
models/file.py
--------------
Domain model for file attachments.

A File can belong to any catalog row: the owner is addressed by
(parent_table, parent_id) instead of a dedicated join table per entity,
and `role` says what the attachment is for (e.g. a project's preview image).
"""

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union
from urllib.parse import urlparse

from models.common import enum_value, isoformat
from utils.errors import ValidationError
from utils.keys import is_uuid

_MIME_TYPE_RE = re.compile(r"^[a-z]+/[a-z0-9][a-z0-9\-\+\.]*$")


class ParentTable(str, Enum):
    """Entity kinds that may own attachments. Values are their table names."""
    PROJECTS = "projects"
    EDUCATIONS = "educations"
    SKILLS = "skills"


class FileRole(str, Enum):
    """What an attachment is used for on its parent."""
    IMAGE = "image"


def parse_parent_table(value: Union[ParentTable, str, None]) -> ParentTable:
    if value is None or str(value).strip() == "":
        raise ValidationError("parent_table missing")
    try:
        return ParentTable(value)
    except ValueError:
        raise ValidationError("parent_table invalid") from None


def parse_role(value: Union[FileRole, str, None]) -> FileRole:
    if value is None or str(value).strip() == "":
        raise ValidationError("role missing")
    try:
        return FileRole(value)
    except ValueError:
        raise ValidationError("role invalid") from None


def _validate_uuid(value: Optional[str], label: str) -> None:
    if value is None or value.strip() == "":
        raise ValidationError(f"{label} missing")
    if not is_uuid(value):
        raise ValidationError(f"{label} invalid")


def _validate_url(value: Optional[str]) -> None:
    value = (value or "").strip()
    if not value:
        raise ValidationError("url missing")
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError("url invalid")


def _validate_mime_type(value: Optional[str]) -> None:
    if value is None or value.strip() == "":
        raise ValidationError("type missing")
    # only the media-type part; parameters such as charset are ignored
    base = value.split(";", 1)[0].strip().lower()
    if not _MIME_TYPE_RE.match(base):
        raise ValidationError("invalid type")


@dataclass
class File:
    """
    Metadata for one stored file.

    Attributes:
        parent_table: Kind of the owning row.
        parent_id: Identifier of the owning row.
        role: Purpose of the attachment on its parent.
        name: Original file name.
        url: Public http(s) URL of the stored object.
        type: MIME type, e.g. "image/webp".
        size: Size in bytes, strictly positive.
        id: Primary key (None until created).
        created_at: Set by the repository on create.
        updated_at: Re-stamped by the repository on every update.
    """
    parent_table: ParentTable
    parent_id: str
    role: FileRole
    name: str
    url: str
    type: str
    size: int
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def validate_payload(self) -> None:
        """
        Check the caller-supplied fields.

        Raises:
            ValidationError: On the first rule that fails.
        """
        parse_parent_table(self.parent_table)
        _validate_uuid(self.parent_id, "parent_id")
        parse_role(self.role)
        if not self.name or not self.name.strip():
            raise ValidationError("name missing")
        _validate_url(self.url)
        _validate_mime_type(self.type)
        if self.size is None or self.size <= 0:
            raise ValidationError("size must be greater than 0")

    def validate_response(self) -> None:
        """Payload checks plus the server-assigned id and timestamps."""
        _validate_uuid(self.id, "id")
        self.validate_payload()
        if self.created_at is None:
            raise ValidationError("created_at missing")
        if self.updated_at is None:
            raise ValidationError("updated_at missing")
        if self.created_at > self.updated_at:
            raise ValidationError("created_at cannot be after updated_at")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "parent_table": enum_value(self.parent_table),
            "parent_id": self.parent_id,
            "role": enum_value(self.role),
            "name": self.name,
            "url": self.url,
            "type": self.type,
            "size": self.size,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
