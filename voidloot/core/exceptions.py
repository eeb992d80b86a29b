"""Exception hierarchy for Voidloot.

Game rules never raise: rejected actions are log lines and empty rolls are
``None``. These exceptions cover lookups and inputs at the edges (catalog ids,
save slots) so the API can map them to HTTP errors.
"""

from __future__ import annotations

from typing import Any


class VoidlootError(Exception):
    """Base exception for all Voidloot errors.

    Attributes:
        message: Human-readable error description.
        details: Additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


class CatalogError(VoidlootError):
    """Raised when a catalog id (skill, affix, preset, bundle) does not exist."""

    def __init__(self, kind: str, entry_id: str) -> None:
        self.kind = kind
        self.entry_id = entry_id
        super().__init__(f"Unknown {kind}", details={"id": entry_id})


class SaveSlotError(VoidlootError):
    """Raised when a save slot number is outside the configured range."""

    def __init__(self, slot: int, slot_count: int) -> None:
        self.slot = slot
        super().__init__(
            "Save slot out of range",
            details={"slot": slot, "valid": f"1..{slot_count}"},
        )
