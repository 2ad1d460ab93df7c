from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState
import logging
import asyncio
import json
from uuid import UUID

from ..core.checklist import ItemNotFoundError
from ..core.sessions import RecipeSession, SessionNotFoundError, get_registry

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1")


def decode_frame(message: dict) -> dict:
    """Turn a raw ASGI receive event into an action object."""
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(message.get("code", 1000))
    if message.get("text") is None:
        raise ValueError("Expected a JSON text frame")
    try:
        action = json.loads(message["text"])
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}") from e
    if not isinstance(action, dict):
        raise ValueError("Expected a JSON object")
    return action


async def handle_action(session: RecipeSession, message: dict) -> dict:
    """Apply one checklist action sent by the client and describe the result."""
    action = message.get("action")

    if action == "clear":
        await session.clear()
        return {"type": "cleared"}

    if action not in ("toggle", "delete"):
        return {"error": f"Unknown action: {action!r}"}

    try:
        item_id = UUID(str(message.get("item_id")))
    except ValueError:
        return {"error": f"Invalid item_id: {message.get('item_id')!r}"}

    try:
        if action == "toggle":
            item = session.checklist.toggle(item_id)
            result = {"type": "toggled", "item": item.model_dump(mode="json")}
        else:
            kind = session.checklist.delete(item_id)
            result = {"type": "deleted", "item_id": str(item_id), "kind": kind.value}
    except ItemNotFoundError:
        return {"error": f"Item {item_id} not found"}

    await session.sync_progress()
    result["progress"] = session.checklist.progress().model_dump()
    return result


@router.websocket("/recipes/{recipe_id}/ws")
async def progress_websocket(ws: WebSocket, recipe_id: UUID):
    log.info(f"🔗 New progress WebSocket for {recipe_id}")
    await ws.accept()

    try:
        session = get_registry().get(recipe_id)
    except SessionNotFoundError:
        await ws.send_json({"error": f"Recipe {recipe_id} not found"})
        await ws.close()
        return

    queue = session.subscribe()
    if session.last_state is not None:
        await ws.send_json(session.last_state.model_dump(mode="json"))

    async def pump_states():
        while True:
            state = await queue.get()
            if ws.application_state != WebSocketState.CONNECTED:
                log.warning("❌ WebSocket not connected, activity state dropped")
                return
            await ws.send_json(state.model_dump(mode="json"))

    async def handle_messages():
        while True:
            try:
                message = decode_frame(await ws.receive())
            except ValueError as e:
                await ws.send_json({"error": str(e)})
                continue
            await ws.send_json(await handle_action(session, message))

    pump = asyncio.create_task(pump_states())
    try:
        await handle_messages()
    except WebSocketDisconnect:
        log.info("👋 Client disconnected normally")
    finally:
        pump.cancel()
        session.unsubscribe(queue)
