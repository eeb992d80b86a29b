"""
WebSocket handlers for live battles.
"""

from typing import Any, Dict, List

from fastapi import WebSocket

from voidloot.combat import CombatEngine


class WebSocketManager:
    """Manage WebSocket connections, grouped by battle room."""

    def __init__(self):
        self.active_connections: Dict[str, List[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, room_id: str):
        """Connect a client to a battle room."""
        await websocket.accept()
        if room_id not in self.active_connections:
            self.active_connections[room_id] = []
        self.active_connections[room_id].append(websocket)

    def disconnect(self, websocket: WebSocket, room_id: str):
        """Disconnect a client from a battle room."""
        if room_id in self.active_connections:
            if websocket in self.active_connections[room_id]:
                self.active_connections[room_id].remove(websocket)
            if not self.active_connections[room_id]:
                del self.active_connections[room_id]

    async def broadcast(self, room_id: str, message: dict):
        """Broadcast message to all clients in a battle room."""
        for connection in list(self.active_connections.get(room_id, [])):
            await connection.send_json(message)


def battle_snapshot(engine: CombatEngine, log: List[Dict[str, str]]) -> Dict[str, Any]:
    """Client-facing view of a running battle."""
    player, enemy = engine.player, engine.enemy
    return {
        "type": "state",
        "phase": engine.state.phase.name.lower(),
        "outcome": engine.state.outcome.name.lower() if engine.state.outcome else None,
        "actions": engine.state.actions_taken,
        "stance": str(engine.state.stance),
        "queue": [str(side) for side in engine.state.turn_queue],
        "player_hp": max(0.0, player.current_hp) if player else 0.0,
        "player_max_hp": player.max_hp if player else 0.0,
        "enemy_hp": max(0.0, enemy.current_hp) if enemy else 0.0,
        "enemy_max_hp": enemy.max_hp if enemy else 0.0,
        "effects": [
            {
                "type": str(effect.type),
                "target": str(effect.target),
                "name": effect.name,
                "stacks": effect.stacks,
                "duration": effect.duration,
            }
            for effect in engine.status_effects.get_effects()
        ],
        "log": log,
    }


manager = WebSocketManager()
