"""
Common API schemas.
"""

from typing import Optional

from pydantic import BaseModel, Field


class SkillRef(BaseModel):
    """An owned passive skill, by catalog id and rank."""

    id: str
    level: int = Field(default=1, ge=1)


class SeededRequest(BaseModel):
    """Base for requests that roll dice; a seed makes them reproducible."""

    seed: Optional[int] = None
