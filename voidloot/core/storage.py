"""Save slot persistence.

One JSON file per slot under the configured save directory. Persistence is
best effort: unreadable files are reported as empty slots and load as
``None``.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ValidationError

from voidloot.core.config import settings
from voidloot.core.exceptions import SaveSlotError
from voidloot.core.logging import get_logger
from voidloot.data.models import CharacterState

logger = get_logger(__name__)

SAVE_FILE_PREFIX = "voidloot_save_"
HERO_NAME = "Wanderer"


class SaveSlotMetadata(BaseModel):
    """Summary shown in the slot picker."""

    id: int
    timestamp: Optional[float] = None
    label: str
    is_empty: bool
    hero_name: Optional[str] = None


class SaveSlotStore:
    """
    File-backed save slots.

    Usage:
        store = SaveSlotStore()
        store.save(1, character)
        character = store.load(1)
    """

    def __init__(self, save_dir: Optional[Path] = None, slot_count: Optional[int] = None):
        self.save_dir = Path(save_dir) if save_dir is not None else settings.SAVE_DIR
        self.slot_count = slot_count if slot_count is not None else settings.SAVE_SLOT_COUNT

    def slot_path(self, slot: int) -> Path:
        self._check_slot(slot)
        return self.save_dir / f"{SAVE_FILE_PREFIX}{slot}.json"

    def list_slots(self) -> List[SaveSlotMetadata]:
        """Metadata for every slot, in slot order."""
        slots = []
        for slot in range(1, self.slot_count + 1):
            path = self.slot_path(slot)
            if not path.exists():
                slots.append(SaveSlotMetadata(id=slot, label="Empty Slot", is_empty=True))
                continue

            character = self._read(path)
            if character is None:
                slots.append(SaveSlotMetadata(id=slot, label="Corrupted Slot", is_empty=True))
                continue

            slots.append(SaveSlotMetadata(
                id=slot,
                timestamp=character.timestamp.timestamp(),
                label=f"Level {character.level} Hero",
                is_empty=False,
                hero_name=HERO_NAME,
            ))
        return slots

    def save(self, slot: int, character: CharacterState) -> bool:
        """Write a slot. Failures are logged and reported as False."""
        path = self.slot_path(slot)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(character.model_dump_json(), encoding="utf-8")
        except OSError as e:
            logger.error("save_failed", slot=slot, path=str(path), error=str(e))
            return False
        logger.info("game_saved", slot=slot, level=character.level)
        return True

    def load(self, slot: int) -> Optional[CharacterState]:
        path = self.slot_path(slot)
        if not path.exists():
            return None
        return self._read(path)

    def delete(self, slot: int) -> bool:
        path = self.slot_path(slot)
        if not path.exists():
            return False
        path.unlink()
        return True

    def _read(self, path: Path) -> Optional[CharacterState]:
        try:
            return CharacterState.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning("save_unreadable", path=str(path), error=str(e))
            return None

    def _check_slot(self, slot: int) -> None:
        if not 1 <= slot <= self.slot_count:
            raise SaveSlotError(slot, self.slot_count)
