"""WebSocket event stream with ConnectionManager, heartbeat, and Redis Pub/Sub."""
import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder

from portfolio_api.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()

EVENTS_CHANNEL = "ws:events"


class ConnectionManager:
    """Anonymous listeners receiving every published event.

    With Redis available, events go through Pub/Sub so listeners attached to
    other instances receive them too; otherwise they are delivered locally.
    """

    def __init__(self, max_connections: int = 1000):
        self.max_connections = max_connections
        self.active_connections: set[WebSocket] = set()
        self._pubsub = None
        self._listener_task: asyncio.Task | None = None

    @property
    def listener_count(self) -> int:
        return len(self.active_connections)

    async def connect(self, websocket: WebSocket) -> bool:
        if self.listener_count >= self.max_connections:
            await websocket.close(code=1013, reason="Too many connections")
            return False
        await websocket.accept()
        self.active_connections.add(websocket)
        logger.info("WS connected (total=%d)", self.listener_count)
        return True

    async def disconnect(self, websocket: WebSocket):
        self.active_connections.discard(websocket)
        logger.info("WS disconnected (total=%d)", self.listener_count)

    async def broadcast(self, message: dict):
        """Send a message to every local listener; dead sockets are dropped."""
        for ws in list(self.active_connections):
            try:
                await ws.send_json(message)
            except Exception:
                logger.warning("Failed to send WS message, dropping listener")
                self.active_connections.discard(ws)

    async def publish(self, event: str, payload: dict[str, Any] | None = None):
        """Fan an event out to all listeners. Never raises."""
        message = jsonable_encoder({
            "type": event,
            "data": payload or {},
            "timestamp": datetime.now(timezone.utc),
        })
        if self._pubsub is not None:
            try:
                from portfolio_api.utils.redis_client import get_redis
                redis = await get_redis()
                await redis.publish(EVENTS_CHANNEL, json.dumps(message))
                return
            except Exception:
                logger.warning("Redis publish failed for %s, delivering locally", event)
        await self.broadcast(message)

    # --- Redis Pub/Sub for cross-instance support ---

    async def start_redis_listener(self):
        """Start listening to Redis Pub/Sub for cross-instance messages."""
        try:
            from portfolio_api.utils.redis_client import get_redis
            redis = await get_redis()
            self._pubsub = redis.pubsub()
            await self._pubsub.subscribe(EVENTS_CHANNEL)
            self._listener_task = asyncio.create_task(self._redis_listener())
            logger.info("Redis Pub/Sub listener started for WebSocket")
        except Exception:
            self._pubsub = None
            logger.warning("Redis Pub/Sub unavailable, WebSocket limited to single instance")

    async def _redis_listener(self):
        """Background task to receive Redis Pub/Sub messages."""
        try:
            async for message in self._pubsub.listen():
                if message["type"] != "message":
                    continue
                data = message["data"]
                if isinstance(data, bytes):
                    data = data.decode()
                try:
                    msg = json.loads(data)
                except (json.JSONDecodeError, TypeError):
                    continue
                await self.broadcast(msg)
        except asyncio.CancelledError:
            logger.info("Redis Pub/Sub listener cancelled")
        except Exception:
            logger.warning("Redis Pub/Sub listener stopped")
            self._pubsub = None

    async def stop_redis_listener(self):
        """Stop the Redis Pub/Sub listener."""
        if self._listener_task and not self._listener_task.done():
            self._listener_task.cancel()
            try:
                await self._listener_task
            except asyncio.CancelledError:
                pass
        if self._pubsub:
            await self._pubsub.unsubscribe(EVENTS_CHANNEL)
            await self._pubsub.close()
            self._pubsub = None


manager = ConnectionManager(max_connections=settings.WS_MAX_CONNECTIONS)


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """Public event stream with a 90s idle timeout.

    Client should send {"type": "ping"} every 30s to keep alive.
    Server responds with {"type": "pong"}.

    Events pushed to client:
        - new_blog_post / blog_post_updated / blog_post_deleted / blog_liked
        - project_created / project_updated / project_deleted
        - skill_created / skill_updated / skill_deleted
        - journey_added / journey_updated / journey_deleted
        - new_chat_message
        - new_visitor
    """
    if not await manager.connect(websocket):
        return

    try:
        while True:
            try:
                data = await asyncio.wait_for(websocket.receive_text(), timeout=90)
            except asyncio.TimeoutError:
                logger.info("WS idle timeout")
                await websocket.close(code=1000, reason="Timeout")
                break

            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                continue

            if isinstance(msg, dict) and msg.get("type") == "ping":
                await websocket.send_json({"type": "pong"})

    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error")
    finally:
        await manager.disconnect(websocket)
