"""Maledict affix catalog loader."""

import json
from functools import lru_cache
from pathlib import Path
from typing import Optional

from ..models.monster import MaledictAffix


CATALOG_DIR = Path(__file__).parent.parent / "catalog"
MALEDICTS_FILE = CATALOG_DIR / "maledicts.json"


@lru_cache(maxsize=1)
def load_maledicts() -> tuple[MaledictAffix, ...]:
    """Load all maledict affixes from JSON file.

    Returns:
        Tuple of affixes in catalog order.
    """
    with open(MALEDICTS_FILE, "r", encoding="utf-8") as f:
        data = json.load(f)

    return tuple(MaledictAffix.model_validate(m) for m in data["maledicts"])


def get_maledict_by_id(affix_id: str) -> Optional[MaledictAffix]:
    """Get a maledict affix by its ID.

    Args:
        affix_id: The unique affix identifier.

    Returns:
        MaledictAffix if found, None otherwise.
    """
    for affix in load_maledicts():
        if affix.id == affix_id:
            return affix
    return None
