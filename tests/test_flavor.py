"""Tests for the flavor text dispatcher and its fallbacks."""

import threading
from concurrent.futures import ThreadPoolExecutor

from voidloot.core.flavor import (
    IDENTIFY_FALLBACK_FLAVOR,
    LORE_FALLBACK,
    NARRATIVE_FALLBACK,
    FlavorDispatcher,
    IdentifiedText,
    StaticFlavorProvider,
    call_with_fallback,
    fallback_encounter,
    fallback_identification,
)


class BrokenProvider(StaticFlavorProvider):
    """Provider whose every call fails."""

    def identify_item(self, item_name, slot, rarity):
        raise ConnectionError("offline")

    def combat_narrative(self, attacker, defender, action):
        raise TimeoutError("slow")

    def passive_lore(self, skill_name, description):
        raise ValueError("bad response")


class PoetProvider(StaticFlavorProvider):
    def identify_item(self, item_name, slot, rarity):
        return IdentifiedText(name="Whisperfang", flavor_text="It hums at night.")

    def combat_narrative(self, attacker, defender, action):
        return f"{attacker} strikes {defender} ({action})."

    def portrait(self, description):
        return "portraits/hero.png"


class TestFallbacks:
    """Fallback text tests."""

    def test_identification_fallback(self):
        revealed = fallback_identification("Unidentified Helm")
        assert revealed.name == "Ancient Helm"
        assert revealed.flavor_text == IDENTIFY_FALLBACK_FLAVOR

    def test_encounter_fallback(self):
        assert fallback_encounter("Ghoul", 4) == "A Level 4 Ghoul emerges from the shadows."
        assert fallback_encounter("Overlord", 9, True) == "A Boss Overlord emerges from the shadows."

    def test_call_with_fallback(self):
        assert call_with_fallback(lambda: "ok", "fallback") == "ok"
        assert call_with_fallback(lambda: "", "fallback") == "fallback"
        assert call_with_fallback(lambda: 1 / 0, "fallback") == "fallback"


class TestFlavorDispatcher:
    """Dispatcher tests."""

    def test_default_provider_is_static(self):
        dispatcher = FlavorDispatcher()
        assert isinstance(dispatcher.provider, StaticFlavorProvider)
        assert dispatcher.identify("Unidentified Axe", "Main Hand", "Rare").name == "Ancient Axe"

    def test_inline_delivery(self):
        received = []
        FlavorDispatcher(PoetProvider()).narrate("Hero", "Ghoul", "crit", received.append)
        assert received == ["Hero strikes Ghoul (crit)."]

    def test_failures_use_fallbacks(self):
        dispatcher = FlavorDispatcher(BrokenProvider())
        received = []

        dispatcher.narrate("Hero", "Ghoul", "kill", received.append)
        dispatcher.lore("Magma Veins", "Your blood boils.", received.append)

        assert received == [NARRATIVE_FALLBACK, LORE_FALLBACK]
        assert dispatcher.identify("Unidentified Axe", "Main Hand", "Rare").name == "Ancient Axe"

    def test_identify_from_provider(self):
        revealed = FlavorDispatcher(PoetProvider()).identify("Unidentified Dagger", "Main Hand", "Unique")
        assert revealed == IdentifiedText(name="Whisperfang", flavor_text="It hums at night.")

    def test_portrait(self):
        received = []
        FlavorDispatcher(PoetProvider()).portrait("a weary hero", received.append)
        FlavorDispatcher().portrait("a weary hero", received.append)
        assert received == ["portraits/hero.png", None]

    def test_background_delivery(self):
        """Test callbacks fire from the executor without blocking the caller."""
        done = threading.Event()
        received = []

        def on_result(text):
            received.append(text)
            done.set()

        dispatcher = FlavorDispatcher(PoetProvider(), ThreadPoolExecutor(max_workers=1))
        dispatcher.describe_encounter("Ghoul", 3, False, on_result)

        assert done.wait(timeout=5)
        assert received == ["A Level 3 Ghoul emerges from the shadows."]
        dispatcher.shutdown()

    def test_background_factory(self):
        dispatcher = FlavorDispatcher.background(PoetProvider(), max_workers=1)
        assert dispatcher.executor is not None
        dispatcher.shutdown()
