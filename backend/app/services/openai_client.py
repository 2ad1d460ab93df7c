"""
OpenAI Realtime API client, text modality only.
Based on official OpenAI Realtime API documentation.
"""

import json
import logging
import openai
import websockets
from websockets.asyncio.client import ClientConnection

from ..core.config import Settings, get_settings

log = logging.getLogger(__name__)


class RealtimeAPIError(RuntimeError):
    pass


class OpenAIRealtimeClient:
    def __init__(self, instructions: str, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.instructions = instructions
        self.ws: ClientConnection | None = None
        self.session_id = None

    async def __aenter__(self):
        url = f"wss://api.openai.com/v1/realtime?model={self.settings.openai_model}"

        log.info(f"🔗 Connecting to OpenAI Realtime API: {url}")

        self.ws = await websockets.connect(
            url,
            additional_headers={
                "Authorization": f"Bearer {self.settings.openai_api_key}",
                "OpenAI-Beta": "realtime=v1"
            },
            max_size=4 * 1024 * 1024,
        )

        # Wait for session.created event
        session_created = json.loads(await self.ws.recv())
        if session_created.get("type") == "session.created":
            self.session_id = session_created["session"]["id"]
            log.info(f"✅ Session created: {self.session_id}")
        else:
            log.error(f"❌ Expected session.created, got: {session_created}")

        await self._send({
            "type": "session.update",
            "session": {
                "modalities": ["text"],
                "instructions": self.instructions,
                "turn_detection": None,
                "temperature": self.settings.temperature
            }
        })

        updated_event = json.loads(await self.ws.recv())
        if updated_event.get("type") == "session.updated":
            log.info("✅ Session configured successfully")
        else:
            log.warning(f"⚠️ Expected session.updated, got: {updated_event}")

        return self

    async def __aexit__(self, *exc):
        if self.ws:
            await self.ws.close()
            log.info("🔌 Disconnected from OpenAI Realtime API")

    async def _send(self, message: dict):
        if not self.ws:
            raise RuntimeError("WebSocket not connected")
        await self.ws.send(json.dumps(message))
        log.debug(f"📤 Sent: {message['type']}")

    async def complete(self, prompt: str) -> str:
        """Send one user message and return the full text of the reply."""
        if not self.ws:
            raise RuntimeError("WebSocket not connected")

        await self._send({
            "type": "conversation.item.create",
            "item": {
                "type": "message",
                "role": "user",
                "content": [{"type": "input_text", "text": prompt}]
            }
        })
        await self._send({"type": "response.create", "response": {"modalities": ["text"]}})

        chunks = []
        async for msg in self.ws:
            try:
                data = json.loads(msg)
            except json.JSONDecodeError as e:
                log.error(f"❌ Failed to parse JSON message: {e}")
                continue

            event_type = data.get("type", "unknown")
            log.debug(f"📨 Received event: {event_type}")

            if event_type == "response.text.delta":
                if delta := data.get("delta"):
                    chunks.append(delta)

            elif event_type == "response.done":
                log.info(f"✅ Response generation completed ({len(chunks)} deltas)")
                break

            elif event_type == "error":
                error = data.get("error", {})
                log.error(f"❌ OpenAI API error: {error}")
                raise RealtimeAPIError(str(error.get("message", error)))

            elif event_type not in ["rate_limits.updated"]:
                log.debug(f"📋 Unhandled event type: {event_type}")
        else:
            raise RealtimeAPIError("OpenAI connection closed before the response finished")

        return "".join(chunks)


async def complete(prompt: str, instructions: str) -> str:
    async with OpenAIRealtimeClient(instructions) as client:
        return await client.complete(prompt)


async def check_api_key(settings: Settings | None = None) -> bool:
    """Cheap authenticated call to confirm the configured key is accepted."""
    settings = settings or get_settings()
    if not settings.api_key_configured:
        return False
    try:
        client = openai.AsyncOpenAI(api_key=settings.openai_api_key)
        await client.models.list()
    except openai.OpenAIError as e:
        log.error(f"❌ OpenAI API key validation failed: {e}")
        return False
    log.info("✅ OpenAI API key validation successful")
    return True
