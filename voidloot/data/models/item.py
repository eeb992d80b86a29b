"""Item data model for Voidloot."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .enums import ItemSlot, Rarity, StatType


class ItemStat(BaseModel):
    """A single rolled stat on an item."""
    type: StatType
    value: float = Field(..., description="Flat bonus (percent points for chance stats)")


class Item(BaseModel):
    """A piece of equipment."""
    id: str = Field(..., description="Unique identifier")
    name: str = Field(..., description="Display name")
    slot: ItemSlot
    rarity: Rarity
    stats: list[ItemStat] = Field(default_factory=list, description="Ordered stat rolls, one per stat type")
    level: int = Field(default=1, ge=1, description="Item level")
    is_identified: bool = Field(default=True, description="Unidentified items sell at a penalty")
    flavor_text: Optional[str] = Field(default=None, description="Lore text revealed on identification")
    icon: str = Field(default="", description="Icon key")
    image_url: Optional[str] = Field(default=None, description="Optional generated artwork")

    @field_validator("stats")
    @classmethod
    def _unique_stat_types(cls, stats: list[ItemStat]) -> list[ItemStat]:
        seen = set()
        for stat in stats:
            if stat.type in seen:
                raise ValueError(f"duplicate stat type on item: {stat.type}")
            seen.add(stat.type)
        return stats

    @property
    def total_stat_value(self) -> float:
        """Sum of all rolled stat values."""
        return sum(stat.value for stat in self.stats)

    def get_stat(self, stat_type: StatType) -> float:
        """Value of a stat on this item, 0 if absent."""
        for stat in self.stats:
            if stat.type == stat_type:
                return stat.value
        return 0.0
