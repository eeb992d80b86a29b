"""Flavor text collaborator.

Identification text, combat narration, encounter intros, skill lore and
portraits are cosmetic. Providers may be slow or fail; every call goes
through a dispatcher that swaps in a fixed fallback and delivers the result
through a callback so game state never waits on it.
"""

from abc import ABC, abstractmethod
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from voidloot.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

UNIDENTIFIED_PREFIX = "Unidentified "
IDENTIFY_FALLBACK_FLAVOR = "The markings are indecipherable, but the power is undeniable."
NARRATIVE_FALLBACK = "A brutal clash echoes in the darkness."
LORE_FALLBACK = "Knowledge is power, guard it well."


@dataclass(frozen=True)
class IdentifiedText:
    """Name and flavor revealed when an item is identified."""

    name: str
    flavor_text: str


def strip_unidentified(name: str) -> str:
    """Base item name without the unidentified marker."""
    return name.replace(UNIDENTIFIED_PREFIX, "")


def fallback_identification(item_name: str) -> IdentifiedText:
    return IdentifiedText(
        name=f"Ancient {strip_unidentified(item_name)}",
        flavor_text=IDENTIFY_FALLBACK_FLAVOR,
    )


def fallback_encounter(monster_name: str, level: int, is_boss: bool = False) -> str:
    prefix = "Boss" if is_boss else f"Level {level}"
    return f"A {prefix} {monster_name} emerges from the shadows."


class FlavorProvider(ABC):
    """Source of cosmetic text and art."""

    @abstractmethod
    def identify_item(self, item_name: str, slot: str, rarity: str) -> IdentifiedText:
        """Reveal an identified item's name and flavor."""

    @abstractmethod
    def combat_narrative(self, attacker: str, defender: str, action: str) -> str:
        """One-sentence narration of a notable blow."""

    @abstractmethod
    def encounter_description(self, monster_name: str, level: int, is_boss: bool = False) -> str:
        """Intro line when a monster appears."""

    @abstractmethod
    def passive_lore(self, skill_name: str, description: str) -> str:
        """Short aphorism for a passive skill."""

    @abstractmethod
    def portrait(self, description: str) -> Optional[str]:
        """Portrait image reference, or None."""


class StaticFlavorProvider(FlavorProvider):
    """Deterministic provider returning the local fallbacks."""

    def identify_item(self, item_name: str, slot: str, rarity: str) -> IdentifiedText:
        return fallback_identification(item_name)

    def combat_narrative(self, attacker: str, defender: str, action: str) -> str:
        return NARRATIVE_FALLBACK

    def encounter_description(self, monster_name: str, level: int, is_boss: bool = False) -> str:
        return fallback_encounter(monster_name, level, is_boss)

    def passive_lore(self, skill_name: str, description: str) -> str:
        return LORE_FALLBACK

    def portrait(self, description: str) -> Optional[str]:
        return None


def call_with_fallback(fn: Callable[..., T], fallback: T, *args: Any) -> T:
    """Call a provider method, returning the fallback on any failure or empty result."""
    try:
        result = fn(*args)
    except Exception as e:  # providers are untrusted collaborators
        logger.warning("flavor_call_failed", call=getattr(fn, "__name__", str(fn)), error=str(e))
        return fallback
    if not result:
        return fallback
    return result


class FlavorDispatcher:
    """
    Runs provider calls and hands results to callbacks.

    Without an executor the call runs inline (headless simulation, tests);
    with one it runs in the background and the callback fires when done.
    """

    def __init__(
        self,
        provider: Optional[FlavorProvider] = None,
        executor: Optional[Executor] = None,
    ):
        self.provider = provider or StaticFlavorProvider()
        self.executor = executor

    @classmethod
    def background(cls, provider: FlavorProvider, max_workers: int = 2) -> "FlavorDispatcher":
        """Dispatcher that never blocks the caller."""
        return cls(provider, ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="flavor"))

    def request(
        self,
        fn: Callable[..., T],
        fallback: T,
        on_result: Callable[[T], None],
        *args: Any,
    ) -> None:
        """Run ``fn(*args)`` and pass its result (or the fallback) to ``on_result``."""
        if self.executor is None:
            on_result(call_with_fallback(fn, fallback, *args))
            return

        future = self.executor.submit(call_with_fallback, fn, fallback, *args)
        future.add_done_callback(lambda f: on_result(f.result()))

    def narrate(self, attacker: str, defender: str, action: str, on_result: Callable[[str], None]) -> None:
        self.request(self.provider.combat_narrative, NARRATIVE_FALLBACK, on_result, attacker, defender, action)

    def describe_encounter(
        self, monster_name: str, level: int, is_boss: bool, on_result: Callable[[str], None]
    ) -> None:
        self.request(
            self.provider.encounter_description,
            fallback_encounter(monster_name, level, is_boss),
            on_result,
            monster_name, level, is_boss,
        )

    def lore(self, skill_name: str, description: str, on_result: Callable[[str], None]) -> None:
        self.request(self.provider.passive_lore, LORE_FALLBACK, on_result, skill_name, description)

    def portrait(self, description: str, on_result: Callable[[Optional[str]], None]) -> None:
        self.request(self.provider.portrait, None, on_result, description)

    def identify(self, item_name: str, slot: str, rarity: str) -> IdentifiedText:
        """Synchronous identification, used by the merchant flow."""
        return call_with_fallback(
            self.provider.identify_item, fallback_identification(item_name), item_name, slot, rarity
        )

    def shutdown(self) -> None:
        if self.executor is not None:
            self.executor.shutdown(wait=False, cancel_futures=True)
