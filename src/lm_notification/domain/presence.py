"""Presence registry: which users hold a live channel, and through which handles.

One instance per process, created with the app and handed by reference to
the websocket endpoint and to every NotificationDispatcher. Entries are
memory-only; clients re-join after a restart.

Every public method takes the lock, so joins and leaves from concurrent
connections never lose a handle, and ``channels_for`` returns a snapshot that
later joins/leaves cannot mutate. A handle that closes right after a snapshot
simply fails its push, which the dispatcher drops.
"""

import threading
from typing import Any, Protocol


class ChannelHandle(Protocol):
    """Anything that can push a JSON event to one client connection."""

    async def send_json(self, data: Any) -> None: ...


class PresenceRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rooms: dict[str, set[ChannelHandle]] = {}
        self._owners: dict[ChannelHandle, str] = {}

    def join(self, user_id: str, handle: ChannelHandle) -> None:
        """Add ``handle`` to the room of ``user_id``.

        A handle re-joining under another identity moves rooms.
        """
        with self._lock:
            previous = self._owners.get(handle)
            if previous is not None and previous != user_id:
                self._discard(previous, handle)
            self._rooms.setdefault(user_id, set()).add(handle)
            self._owners[handle] = user_id

    def leave(self, handle: ChannelHandle) -> str | None:
        """Remove ``handle`` wherever it is. Returns its user id, or None if absent."""
        with self._lock:
            user_id = self._owners.pop(handle, None)
            if user_id is not None:
                self._discard(user_id, handle)
            return user_id

    def channels_for(self, user_id: str) -> frozenset[ChannelHandle]:
        with self._lock:
            return frozenset(self._rooms.get(user_id, ()))

    def is_online(self, user_id: str) -> bool:
        with self._lock:
            return bool(self._rooms.get(user_id))

    def online_users(self) -> list[str]:
        with self._lock:
            return sorted(self._rooms)

    def connection_count(self) -> int:
        with self._lock:
            return len(self._owners)

    def _discard(self, user_id: str, handle: ChannelHandle) -> None:
        room = self._rooms.get(user_id)
        if room is None:
            return
        room.discard(handle)
        if not room:
            del self._rooms[user_id]
