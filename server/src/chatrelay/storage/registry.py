import uuid
from typing import Optional

from chatrelay.errors import RoomNotFound
from chatrelay.logging_config import get_logger
from chatrelay.models.Room import Room

logger = get_logger(__name__)


class RoomRegistry:
    """Owns every live room, keyed by room id.

    Sessions only keep room ids around and must go back through ``lookup``
    on every event, since a room can disappear between two events.
    """

    def __init__(self):
        self._rooms: dict[str, Room] = {}

    def create_room(self, passkey: Optional[str] = None, host_sid: Optional[str] = None) -> str:
        room_id = str(uuid.uuid4())
        self._rooms[room_id] = Room(room_id, passkey, host_sid)
        logger.info(f"Room {room_id} created{' with passkey' if passkey else ' (open)'}")
        return room_id

    def lookup(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def join(self, room_id: str, sid: str, username: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFound("Room no longer exists.")
        room.add_member(sid, username)
        return room

    def leave(self, room_id: str, sid: str) -> Optional[str]:
        """Remove `sid` from the room and return its username, if it had one.

        The room is dropped in the same call once it has no members left,
        provided the leaver was a member or the connection that created it.
        """
        room = self._rooms.get(room_id)
        if room is None:
            return None

        username = room.remove_member(sid)

        if room.is_empty() and (username is not None or sid == room.get_host_sid()):
            del self._rooms[room_id]
            logger.info(f"Room {room_id} deleted (no clients remaining)")

        return username

    def room_ids(self) -> list[str]:
        return list(self._rooms)

    def __contains__(self, room_id):
        return room_id in self._rooms

    def __len__(self):
        return len(self._rooms)
