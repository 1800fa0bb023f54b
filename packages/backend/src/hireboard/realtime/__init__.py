"""Real-time push — WebSocket connections keyed by user id.

Events flow one way:
1. Services → Notifier.notify(user_id, event, payload)
2. Notifier → ConnectionRegistry lookup → WebSocket text frame

Delivery is best-effort and in-memory. A user who isn't connected simply
misses the push; the REST API and email are the durable channels.
"""

from hireboard.realtime.notifier import Notifier
from hireboard.realtime.registry import ConnectionRegistry

__all__ = ["ConnectionRegistry", "Notifier"]
