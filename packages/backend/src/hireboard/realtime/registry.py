"""Connection registry — which users have a live push connection right now.

Two views over the open WebSockets:
- by user id (last connect wins; one handle per user)
- every open connection, including ones that never sent a user id

The first backs targeted notify(), the second backs broadcast(). State is
per-process and starts empty: after a restart every user is "offline"
until they reconnect.
"""

import threading
from typing import Any, Optional

from fastapi import Request


class ConnectionRegistry:
    """In-memory map of user id → connection handle.

    A handle is whatever the transport hands us (a Starlette WebSocket in
    production, a fake in tests). The registry never closes handles; a
    user who opens a second tab replaces the first tab's entry, and the
    first tab stays open but stops receiving targeted pushes.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._by_user: dict[str, Any] = {}
        self._connections: set[Any] = set()

    # ─── User mapping ─────────────────────────────────────

    def register(self, user_id: str, handle: Any) -> None:
        """Map user_id to handle, replacing any previous handle.

        Only the targeted-push mapping changes. Broadcast reach is managed
        separately with attach()/detach().
        """
        if not user_id:
            raise ValueError("user_id is required")
        with self._lock:
            self._by_user[user_id] = handle

    def unregister(self, user_id: str, handle: Any = None) -> None:
        """Drop the mapping for user_id. Unknown ids are ignored.

        Pass the disconnecting handle to avoid evicting a newer
        connection the same user opened in the meantime.
        """
        with self._lock:
            current = self._by_user.get(user_id)
            if current is None:
                return
            if handle is not None and current is not handle:
                return
            del self._by_user[user_id]

    def lookup(self, user_id: str) -> Optional[Any]:
        with self._lock:
            return self._by_user.get(user_id)

    def user_ids(self) -> list[str]:
        with self._lock:
            return list(self._by_user)

    # ─── All open connections ─────────────────────────────

    def attach(self, handle: Any) -> None:
        """Track an open connection for broadcast."""
        with self._lock:
            self._connections.add(handle)

    def detach(self, handle: Any) -> None:
        with self._lock:
            self._connections.discard(handle)

    def connections(self) -> list[Any]:
        with self._lock:
            return list(self._connections)

    def __contains__(self, user_id: object) -> bool:
        with self._lock:
            return user_id in self._by_user

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_user)


def get_registry(request: Request) -> ConnectionRegistry:
    """FastAPI dependency returning the app's ConnectionRegistry (built in create_app)."""
    return request.app.state.registry
