"""
models/project.py
-----------------
Domain model for portfolio projects.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from models.common import ListFilter, coerce_enum, enum_value, isoformat, validate_timestamps
from utils.blurhash import BlurHashChecker, is_valid as is_valid_blurhash
from utils.errors import ValidationError
from utils.keys import is_uuid


class ProjectType(str, Enum):
    WEB = "web"
    MOBILE = "mobile"
    GAME = "game"


@dataclass
class Project:
    """
    A single portfolio entry.

    Attributes:
        blur_hash: BlurHash placeholder for the cover image.
        title: Headline shown on the card.
        subtitle: Short tagline under the title.
        description: Long-form description.
        tags: Technology/topic tags; at least one, none blank.
        type: 'web' | 'mobile' | 'game'.
        link: Where the project lives (site, store page, repository).
        education_id: Education record the project was built during, if any.
        id: Primary key (None for new records).
        created_at: Set by the repository on create.
        updated_at: Re-stamped by the repository on every update.

    Preview images are not stored here; they are File rows owned by the
    project (parent_table='projects', role='image').
    """
    blur_hash: str
    title: str
    subtitle: str
    description: str
    tags: list[str]
    type: ProjectType
    link: str
    education_id: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def validate_payload(self, blur_hash_checker: BlurHashChecker = is_valid_blurhash) -> None:
        """
        Check the caller-supplied fields.

        Args:
            blur_hash_checker: Returns True for a decodable blur hash.

        Raises:
            ValidationError: On the first rule that fails.
        """
        if not self.blur_hash:
            raise ValidationError("blurHash missing")
        if not blur_hash_checker(self.blur_hash):
            raise ValidationError("blurHash invalid")
        if not self.title:
            raise ValidationError("title missing")
        if not self.subtitle:
            raise ValidationError("subTitle missing")
        if not self.description:
            raise ValidationError("description missing")
        if not self.tags:
            raise ValidationError("tags missing")
        for i, tag in enumerate(self.tags):
            if not tag or not tag.strip():
                raise ValidationError(f"tag[{i}] is empty")
        coerce_enum(ProjectType, self.type, "type")
        if not self.link:
            raise ValidationError("link missing")
        if self.education_id is not None and not is_uuid(self.education_id):
            raise ValidationError("education_id invalid")

    def validate_response(self, blur_hash_checker: BlurHashChecker = is_valid_blurhash) -> None:
        """Payload checks plus the server-assigned id and timestamps."""
        if not self.id:
            raise ValidationError("ID missing")
        self.validate_payload(blur_hash_checker)
        validate_timestamps(self.created_at, self.updated_at)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "blurhash": self.blur_hash,
            "title": self.title,
            "sub_title": self.subtitle,
            "description": self.description,
            "tags": list(self.tags),
            "type": enum_value(self.type),
            "link": self.link,
            "education_id": self.education_id,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }


@dataclass
class ProjectFilter(ListFilter):
    """List options for projects; `type` narrows to one ProjectType."""
    type: Optional[ProjectType] = None

    def normalized(self) -> "ProjectFilter":
        filt = super().normalized()
        if filt.type is not None:
            filt.type = coerce_enum(ProjectType, filt.type, "type")
        return filt
