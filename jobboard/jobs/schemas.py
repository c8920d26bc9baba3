"""
Job listing Pydantic schemas
"""
import re
from typing import Any, List, Optional
from pydantic import BaseModel, field_validator


class JobPosting(BaseModel):
    """Normalized job posting returned by the listing route"""
    id: Optional[int] = None
    role: str = ""
    company: str = ""
    tech_park: str = ""
    description: str = ""
    email: str = ""
    company_profile: str = ""
    skills: List[str] = []
    experience: Optional[str] = None
    address: Optional[str] = None
    deadline: Optional[str] = None

    @field_validator("skills", mode="before")
    @classmethod
    def unique_skills(cls, value: Any) -> List[str]:
        if not value:
            return []
        if isinstance(value, str):
            value = [value]
        seen = []
        for skill in value:
            if skill is None:
                continue
            skill = str(skill)
            if skill not in seen:
                seen.append(skill)
        return seen


class JobFilters(BaseModel):
    """Search terms; blank terms mean no filter"""
    role: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None

    @field_validator("role", "company", "location", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    def active(self) -> dict:
        """Dimension name -> term for the filters that are set"""
        return {name: term for name, term in self.model_dump().items() if term}


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_page(value: Any) -> int:
    """Page number with parseInt-like leniency; anything below 1 becomes 1"""
    if value is None:
        return 1
    if isinstance(value, int):
        page = value
    else:
        match = _LEADING_INT.match(str(value))
        if not match:
            return 1
        page = int(match.group(1))
    return page if page >= 1 else 1
