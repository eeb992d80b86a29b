"""
Loot-related API schemas.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from voidloot.data.models import Item

from .common import SeededRequest


class GenerateLootRequest(SeededRequest):
    """Loot roll request."""

    level: int = Field(default=1, ge=1)
    difficulty: float = Field(default=1.0, gt=0)
    magic_find: float = Field(default=0.0, ge=0)
    count: int = Field(default=1, ge=1, le=50)


class GenerateLootResponse(BaseModel):
    """Rolled drops; empty rolls are skipped."""

    items: List[Item]
    rolls: int


class ItemValueRequest(BaseModel):
    item: Item


class ItemValueResponse(BaseModel):
    value: int
    buy_price: int
    identify_cost: int


class BundleSchema(BaseModel):
    id: str
    name: str
    description: str
    cost: int
    icon: str


class OpenBundleRequest(SeededRequest):
    level: int = Field(default=1, ge=1)
    magic_find: float = Field(default=0.0, ge=0)


class OpenBundleResponse(BaseModel):
    bundle_id: str
    item: Optional[Item] = None
