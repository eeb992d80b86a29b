"""Paced battle driver for interactive play.

Advances one queued action per configured delay on the asyncio event loop,
yielding between actions so the host can render the intermediate state and
accept flee or stance commands.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, Union

from voidloot.core.config import settings
from voidloot.core.logging import get_logger
from voidloot.data.models import CombatStance

from .combat_engine import CombatEngine
from .combat_unit import BattleResult

logger = get_logger(__name__)

ActionCallback = Callable[[CombatEngine], Union[Awaitable[None], None]]


class LiveBattleDriver:
    """
    Runs a started battle at human pace.

    Usage:
        engine.start_battle(monster, level, stats)
        driver = LiveBattleDriver(engine, on_action=render)
        result = await driver.run()

    Cancelling stops the timer and discards the battle; no proc or DoT is
    applied afterwards.
    """

    def __init__(
        self,
        engine: CombatEngine,
        action_delay: Optional[float] = None,
        on_action: Optional[ActionCallback] = None,
    ):
        self.engine = engine
        self.action_delay = settings.ACTION_DELAY if action_delay is None else action_delay
        self.on_action = on_action
        self._task: Optional[asyncio.Task] = None
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    async def run(self) -> BattleResult:
        """Resolve actions until the battle ends or the driver is cancelled."""
        while self.engine.is_fighting() and not self._cancelled:
            await asyncio.sleep(self.action_delay)
            if self._cancelled:
                break
            self.engine.resolve_turn()
            await self._notify()

        return self.engine.get_result()

    def start(self) -> "asyncio.Task[BattleResult]":
        """Schedule ``run`` on the current event loop."""
        self._task = asyncio.ensure_future(self.run())
        return self._task

    def cancel(self) -> None:
        """Stop pacing and abandon the battle."""
        if self._cancelled:
            return
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self.engine.cancel()
        logger.info("live_battle_cancelled", actions=self.engine.state.actions_taken)

    async def flee(self) -> bool:
        escaped = self.engine.flee()
        await self._notify()
        return escaped

    def set_stance(self, stance: CombatStance) -> None:
        self.engine.set_stance(stance)

    async def _notify(self) -> None:
        if self.on_action is None:
            return
        result: Any = self.on_action(self.engine)
        if inspect.isawaitable(result):
            await result
