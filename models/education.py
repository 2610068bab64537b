"""
models/education.py
-------------------
Domain model for education history.

An Education is one level of schooling (e.g. college) with a main school
and any number of extra school periods (transfers, exchanges). Periods are
embedded values stored as JSON inside the education row.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional

from models.common import ListFilter, coerce_enum, enum_value, isoformat, validate_timestamps
from utils.errors import ValidationError


class EducationLevel(str, Enum):
    ELEMENTARY = "elementary"
    JUNIOR_HIGH_SCHOOL = "junior-high-school"
    SENIOR_HIGH_SCHOOL = "senior-high-school"
    COLLEGE = "college"


@dataclass
class SchoolPeriod:
    """Time spent at one school. Not a standalone entity."""
    name: str = ""
    description: str = ""
    logo: str = ""
    blur_hash: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    link: Optional[str] = None
    honor: Optional[str] = None

    def is_empty(self) -> bool:
        return self == SchoolPeriod()

    def validate(self) -> None:
        if not self.name:
            raise ValidationError("name missing")
        if not self.description:
            raise ValidationError("description missing")
        if not self.logo:
            raise ValidationError("logo missing")
        if not self.blur_hash:
            raise ValidationError("blurHash missing")
        if self.start_date is None:
            raise ValidationError("start date missing")
        if self.end_date is None:
            raise ValidationError("end date missing")
        if not self.end_date > self.start_date:
            raise ValidationError("end date must be after start date")

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "description": self.description,
            "logo": self.logo,
            "blurhash": self.blur_hash,
            "start_date": isoformat(self.start_date),
            "end_date": isoformat(self.end_date),
        }
        if self.link is not None:
            data["link"] = self.link
        if self.honor is not None:
            data["honor"] = self.honor
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "SchoolPeriod":
        """Build from the JSON shape written by to_dict()."""
        return cls(
            name=data.get("name", ""),
            description=data.get("description", ""),
            logo=data.get("logo", ""),
            blur_hash=data.get("blurhash", ""),
            start_date=_parse_date(data.get("start_date")),
            end_date=_parse_date(data.get("end_date")),
            link=data.get("link"),
            honor=data.get("honor"),
        )


def _parse_date(value) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


@dataclass
class Education:
    """
    One level of schooling.

    Attributes:
        main_school: The school this level is known for. Required.
        level: 'elementary' | 'junior-high-school' | 'senior-high-school' | 'college'.
        school_periods: Extra schools attended during the same level.
        id: Primary key (None for new records).
        created_at: Set by the repository on create.
        updated_at: Re-stamped by the repository on every update.

    Projects are not embedded; they point back through Project.education_id.
    """
    main_school: Optional[SchoolPeriod]
    level: EducationLevel
    school_periods: list[SchoolPeriod] = field(default_factory=list)
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def validate_payload(self) -> None:
        """
        Check the caller-supplied fields, including every embedded period.

        Failures inside a period are prefixed with where the period sits,
        e.g. "main school name missing" or "school period[1] logo missing".

        Raises:
            ValidationError: On the first rule that fails.
        """
        if self.main_school is None or self.main_school.is_empty():
            raise ValidationError("main school missing")
        try:
            self.main_school.validate()
        except ValidationError as e:
            raise ValidationError(f"main school {e}") from e

        for i, period in enumerate(self.school_periods or []):
            if period is None or period.is_empty():
                raise ValidationError(f"school period[{i}] is empty")
            try:
                period.validate()
            except ValidationError as e:
                raise ValidationError(f"school period[{i}] {e}") from e

        coerce_enum(EducationLevel, self.level, "level")

    def validate_response(self) -> None:
        """Payload checks plus the server-assigned id and timestamps."""
        if not self.id:
            raise ValidationError("ID missing")
        self.validate_payload()
        validate_timestamps(self.created_at, self.updated_at)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "main_school": self.main_school.to_dict() if self.main_school else None,
            "school_periods": [p.to_dict() for p in self.school_periods],
            "level": enum_value(self.level),
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }


@dataclass
class EducationFilter(ListFilter):
    """List options for educations; `level` narrows to one EducationLevel."""
    level: Optional[EducationLevel] = None

    def normalized(self) -> "EducationFilter":
        filt = super().normalized()
        if filt.level is not None:
            filt.level = coerce_enum(EducationLevel, filt.level, "level")
        return filt
