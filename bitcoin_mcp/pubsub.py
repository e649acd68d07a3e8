"""Redis pub/sub transport for serving capability calls from a worker pool."""
from __future__ import annotations

import asyncio
import json
import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, Optional

from .config import PubSubConfig, RedisConfig

logger = logging.getLogger(__name__)


class RedisPubSub:
    """Request/response delegation over two Redis channels.

    Clients publish ``{"id", "tool", "arguments"}`` on the request channel;
    a worker runs the matching handler and publishes ``{"id", "result"}`` or
    ``{"id", "error"}`` on the response channel.
    """

    def __init__(self, redis_config: RedisConfig, pubsub_config: PubSubConfig) -> None:
        try:
            import redis.asyncio as aioredis
        except ImportError:
            raise ImportError("redis package with async support is required. Install with: pip install redis")
        self._redis_config = redis_config
        self._pubsub_config = pubsub_config
        self._redis: Optional[aioredis.Redis] = None
        self._pubsub: Optional[aioredis.client.PubSub] = None
        self._listener: Optional[asyncio.Task] = None
        self._request_handlers: Dict[str, Callable[..., Awaitable[Any]]] = {}
        self._pending_responses: Dict[str, asyncio.Future] = {}

    async def connect(self) -> None:
        import redis.asyncio as aioredis

        self._redis = aioredis.Redis(
            host=self._redis_config.host,
            port=self._redis_config.port,
            db=self._redis_config.db,
            password=self._redis_config.password,
            decode_responses=self._redis_config.decode_responses,
        )
        await self._redis.ping()
        logger.debug("Connected to Redis at %s:%s", self._redis_config.host, self._redis_config.port)

    async def disconnect(self) -> None:
        if self._listener:
            self._listener.cancel()
            self._listener = None
        if self._pubsub:
            await self._pubsub.unsubscribe()
            await self._pubsub.aclose()
            self._pubsub = None
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    def register_handler(self, tool_name: str, handler: Callable[..., Awaitable[Any]]) -> None:
        self._request_handlers[tool_name] = handler

    async def publish_request(self, tool_name: str, arguments: Dict[str, Any], timeout: float = 30.0) -> Any:
        """Publish a request and wait for its response.

        Raises:
            TimeoutError: no response within ``timeout`` seconds.
            RuntimeError: the worker answered with an error.
        """
        request_id = str(uuid.uuid4())
        request = {"id": request_id, "tool": tool_name, "arguments": arguments}

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending_responses[request_id] = future

        if not self._pubsub:
            self._pubsub = self._redis.pubsub()
            await self._pubsub.subscribe(self._pubsub_config.response_channel)
            self._listener = asyncio.create_task(self._listen_responses())

        await self._redis.publish(self._pubsub_config.request_channel, json.dumps(request))

        try:
            return await asyncio.wait_for(future, timeout=timeout)
        except asyncio.TimeoutError:
            self._pending_responses.pop(request_id, None)
            raise TimeoutError(f"Request {request_id} timed out after {timeout}s")

    async def _listen_responses(self) -> None:
        async for message in self._pubsub.listen():
            if message["type"] != "message":
                continue
            try:
                response = json.loads(message["data"])
            except (TypeError, ValueError):
                logger.warning("Ignoring malformed response message: %r", message["data"])
                continue
            future = self._pending_responses.pop(response.get("id"), None)
            if future is None or future.done():
                continue
            if "error" in response:
                future.set_exception(RuntimeError(response["error"]))
            else:
                future.set_result(response.get("result"))

    async def handle_request(self, raw: Any) -> Optional[Dict[str, Any]]:
        """Run one raw request message; None when the message is not a request."""
        try:
            request = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed request message: %r", raw)
            return None
        if not isinstance(request, dict):
            logger.warning("Ignoring non-object request message: %r", raw)
            return None

        request_id = request.get("id")
        tool_name = request.get("tool")
        arguments = request.get("arguments") or {}

        handler = self._request_handlers.get(tool_name)
        if handler is None:
            return {"id": request_id, "error": f"Unknown tool: {tool_name}"}
        try:
            result = await handler(**arguments)
        except Exception as exc:
            logger.warning("Request %s (%s) failed: %s", request_id, tool_name, exc)
            return {"id": request_id, "error": str(exc)}
        return {"id": request_id, "result": result}

    async def start_worker(self) -> None:
        """Process requests from the request channel until cancelled."""
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self._pubsub_config.request_channel)
        try:
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                response = await self.handle_request(message["data"])
                if response is None:
                    continue
                await self._redis.publish(self._pubsub_config.response_channel, json.dumps(response))
        finally:
            await pubsub.unsubscribe()
            await pubsub.aclose()
