"""
Live battle WebSocket route.
"""

import asyncio
import contextlib
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from voidloot.combat import CombatEngine, LiveBattleDriver
from voidloot.core.exceptions import CatalogError
from voidloot.core.logging import get_logger

from ..dependencies import get_combat_service
from ..schemas.combat import LiveBattleCommand, LiveBattleSetup
from ..services.combat_service import CombatService
from ..websocket.handlers import battle_snapshot, manager

router = APIRouter()
logger = get_logger(__name__)


@router.websocket("/ws/battle/{room_id}")
async def live_battle(
    websocket: WebSocket,
    room_id: str,
    service: CombatService = Depends(get_combat_service),
):
    """
    Play one paced battle.

    The first client message is a ``LiveBattleSetup``. The server then
    pushes a state message after every action and accepts ``flee``,
    ``stance`` and ``cancel`` commands until a final ``result`` message.
    """
    await manager.connect(websocket, room_id)
    driver: Optional[LiveBattleDriver] = None
    task: Optional[asyncio.Task] = None
    try:
        try:
            setup = LiveBattleSetup.model_validate(await websocket.receive_json())
            player = service.resolve_player(setup.player_stats, setup.preset_id, setup.level)
            monster = service.resolve_monster(setup.monster, setup.level, setup.monster_rarity, setup.seed)
        except (ValidationError, CatalogError) as e:
            await websocket.send_json({"type": "error", "detail": str(e)})
            return

        pending_log: List[Dict[str, str]] = []
        engine = service.create_engine(
            setup.seed,
            add_log=lambda message, category: pending_log.append({"message": message, "category": category}),
        )

        async def push(current: CombatEngine) -> None:
            log = list(pending_log)
            pending_log.clear()
            await manager.broadcast(room_id, battle_snapshot(current, log))

        engine.start_battle(monster, setup.level, player, setup.environment)
        engine.set_stance(setup.stance)
        await push(engine)

        driver = LiveBattleDriver(engine, action_delay=setup.action_delay, on_action=push)
        task = driver.start()

        while not task.done():
            receive = asyncio.ensure_future(websocket.receive_json())
            done, _ = await asyncio.wait({task, receive}, return_when=asyncio.FIRST_COMPLETED)
            if receive not in done:
                receive.cancel()
                break
            await _handle_command(websocket, driver, receive.result())

        await _reap(task)
        result = engine.get_result()
        await manager.broadcast(room_id, {"type": "result", **result.to_dict()})
        logger.info("live_battle_finished", room_id=room_id, phase=result.phase, turns=result.turns)
    except WebSocketDisconnect:
        if driver is not None:
            driver.cancel()
    finally:
        manager.disconnect(websocket, room_id)
        if task is not None and not task.done():
            await _reap(task)


async def _reap(task: asyncio.Task) -> None:
    """Wait for the driver task so its outcome is always retrieved."""
    with contextlib.suppress(asyncio.CancelledError):
        await task


async def _handle_command(websocket: WebSocket, driver: LiveBattleDriver, payload: dict) -> None:
    try:
        command = LiveBattleCommand.model_validate(payload)
    except ValidationError as e:
        await websocket.send_json({"type": "error", "detail": str(e)})
        return

    if command.action == "flee":
        await driver.flee()
    elif command.action == "stance":
        driver.set_stance(command.stance)
    elif command.action == "cancel":
        driver.cancel()
    else:
        await websocket.send_json({"type": "error", "detail": f"Unknown action: {command.action}"})
