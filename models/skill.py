"""
models/skill.py
---------------
Domain model for skills shown as colored icon chips.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from models.common import ListFilter, coerce_enum, enum_value, isoformat, validate_timestamps
from utils.errors import ValidationError

HEX_COLOR_RE = re.compile(r"#[0-9A-Fa-f]{3}([0-9A-Fa-f]{3})?")


class SkillCategory(str, Enum):
    FRONTEND = "frontend"
    BACKEND = "backend"
    TOOLS = "tools"
    OTHERS = "others"


@dataclass
class Skill:
    """
    Attributes:
        icon: Icon identifier or URL.
        hex_color: Brand color, "#RGB" or "#RRGGBB".
        label: Display name.
        category: 'frontend' | 'backend' | 'tools' | 'others'.
    """
    icon: str
    hex_color: str
    label: str
    category: SkillCategory
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def validate_payload(self) -> None:
        if not self.icon:
            raise ValidationError("icon missing")
        if not self.hex_color:
            raise ValidationError("hex color missing")
        if not HEX_COLOR_RE.fullmatch(self.hex_color):
            raise ValidationError("hex color must be in format #RGB or #RRGGBB")
        if not self.label:
            raise ValidationError("label missing")
        coerce_enum(SkillCategory, self.category, "category")

    def validate_response(self) -> None:
        if not self.id:
            raise ValidationError("ID missing")
        self.validate_payload()
        validate_timestamps(self.created_at, self.updated_at)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "icon": self.icon,
            "hex_color": self.hex_color,
            "label": self.label,
            "category": enum_value(self.category),
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }


@dataclass
class SkillFilter(ListFilter):
    category: Optional[SkillCategory] = None

    def normalized(self) -> "SkillFilter":
        filt = super().normalized()
        if filt.category is not None:
            filt.category = coerce_enum(SkillCategory, filt.category, "category")
        return filt
