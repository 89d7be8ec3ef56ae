from chatrelay.logging_config import get_logger
from chatrelay.services.onboarding import format_chat_line

logger = get_logger(__name__)


class BroadcastHub:
    """Fan a line of text out to every connection in a Socket.IO room.

    Delivery is fire-and-forget: whoever is in the room when the emit goes
    out receives it, and a connection dropping mid-broadcast just misses it.
    """

    def __init__(self, sio):
        self.sio = sio

    def announce(self, room_id: str, text: str):
        self.sio.emit('message', text, room=room_id)

    def relay(self, room_id: str, username: str, text: str):
        # The sender is a room member too, so it gets its own line back
        self.announce(room_id, format_chat_line(username, text))

    def announce_all(self, room_ids, text: str):
        room_ids = list(room_ids)
        for room_id in room_ids:
            self.announce(room_id, text)
        logger.debug(f"Announced to {len(room_ids)} rooms: {text}")
