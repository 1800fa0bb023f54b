"""Notifier — best-effort push of named events to connected users.

Learn: notify() is fire-and-forget. It looks the user up in the
registry and, if they're online, schedules the send on the event loop
and returns straight away. Callers never learn whether the push landed
and must not depend on it: every call site also persists its state
change and sends an email.

Wire format is one JSON text frame per event:
    {"type": "<event name>", "data": {...payload...}}
"""

import asyncio
import json
from typing import Any, Iterable

import structlog
from fastapi import Request
from fastapi.encoders import jsonable_encoder

from hireboard.realtime.registry import ConnectionRegistry

logger = structlog.get_logger()


class Notifier:
    """Pushes events to live connections held by a ConnectionRegistry."""

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry
        self._pending: set[asyncio.Task] = set()

    def notify(self, user_id: str, event_name: str, payload: dict[str, Any]) -> None:
        """Push one event to one user if they're connected; drop it otherwise."""
        handle = self.registry.lookup(str(user_id))
        if handle is None:
            logger.debug("notify.dropped", user_id=str(user_id), event_name=event_name)
            return
        self._schedule(handle, self._encode(event_name, payload), user_id=str(user_id))

    def notify_many(
        self, user_ids: Iterable[str], event_name: str, payload: dict[str, Any]
    ) -> None:
        """notify() each id independently. Offline users are skipped."""
        for user_id in user_ids:
            self.notify(user_id, event_name, payload)

    def broadcast(self, event_name: str, payload: dict[str, Any]) -> None:
        """Push to every open connection, registered under a user id or not."""
        message = self._encode(event_name, payload)
        for handle in self.registry.connections():
            self._schedule(handle, message)

    async def flush(self) -> None:
        """Wait for sends still in flight."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ─── Internals ────────────────────────────────────────

    @staticmethod
    def _encode(event_name: str, payload: dict[str, Any]) -> str:
        return json.dumps({"type": event_name, "data": jsonable_encoder(payload)})

    def _schedule(self, handle: Any, message: str, user_id: str | None = None) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("notify.no_event_loop", user_id=user_id)
            return
        task = loop.create_task(self._send(handle, message, user_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send(self, handle: Any, message: str, user_id: str | None) -> None:
        try:
            await handle.send_text(message)
        except Exception as e:
            # Socket went away between lookup and send; the disconnect
            # handler will clean up the registry.
            logger.info("notify.send_failed", user_id=user_id, error=str(e))


def get_notifier(request: Request) -> Notifier:
    """FastAPI dependency returning the app's Notifier (built in create_app)."""
    return request.app.state.notifier
