from typing import Optional

from chatrelay.logging_config import get_logger
from chatrelay.models.Outbound import Outbound
from chatrelay.models.Session import Session
from chatrelay.models.Step import Step
from chatrelay.services.broadcast import BroadcastHub
from chatrelay.services.onboarding import (SHUTDOWN_NOTICE, handle_chat_message,
                                           handle_response, initial_prompt,
                                           left_notice)
from chatrelay.storage.registry import RoomRegistry

logger = get_logger(__name__)


def _as_text(data) -> str:
    # Payloads are expected to be strings; anything else counts as empty input
    return data if isinstance(data, str) else ''


class ConnectionLifecycle:
    """Connects transport events to the onboarding state machine.

    One Session is kept per connected SID. Effects returned by the state
    machine are delivered here: private ones to the originating SID, room
    ones through the BroadcastHub.
    """

    def __init__(self, sio, registry: RoomRegistry, sessions: Optional[dict] = None,
                 hub: Optional[BroadcastHub] = None):
        self.sio = sio
        self.registry = registry
        self.sessions: dict[str, Session] = sessions if sessions is not None else {}
        self.hub = hub or BroadcastHub(sio)

    def connect(self, sid):
        logger.info(f"New connection from {sid}")
        self.sessions[sid] = Session(sid)
        self._deliver(sid, [initial_prompt()])

    def response(self, sid, data):
        # A missing session is handed over without a step, which the state
        # machine treats as corrupted and resets
        session = self.sessions.get(sid) or Session(sid, step=None)
        was_chatting = session.step == Step.CHAT

        session, effects = handle_response(session, _as_text(data).strip(), self.registry)
        self.sessions[sid] = session

        if session.step == Step.CHAT and not was_chatting:
            # Enter the Socket.IO room before the join notice goes out
            self.sio.enter_room(sid, session.room_id)
        self._deliver(sid, effects)

    def chat_message(self, sid, data):
        session = self.sessions.get(sid) or Session(sid, step=None)
        session, effects = handle_chat_message(session, _as_text(data), self.registry)
        self.sessions[sid] = session
        self._deliver(sid, effects)

    def quit(self, sid):
        session = self.sessions.get(sid)
        if session is not None:
            username = self._leave_room(session)
            if username:
                logger.info(f"Client {username} quit explicitly from room {session.room_id}")
            session.reset()
        self.sio.disconnect(sid)

    def disconnect(self, sid):
        session = self.sessions.pop(sid, None)
        if session is not None:
            username = self._leave_room(session)
            if username:
                logger.info(f"Client {username} disconnected from room {session.room_id}")
        logger.info(f"Closed connection for {sid}")

    def shutdown(self, grace: float = 1.0):
        """Tell every room the server is going away, then drop all connections"""
        logger.info("Shutting down server...")
        self.hub.announce_all(self.registry.room_ids(), SHUTDOWN_NOTICE)

        # Emits are only queued here; yield so the transport writes them out
        # before the connections are torn down
        self.sio.sleep(grace)

        for sid in list(self.sessions):
            self.sio.disconnect(sid)
        self.sio.sleep(0)

    def _leave_room(self, session: Session) -> Optional[str]:
        if not session.room_id:
            return None

        username = self.registry.leave(session.room_id, session.sid)
        self.sio.leave_room(session.sid, session.room_id)
        if username:
            self.hub.announce(session.room_id, left_notice(username))
        return username

    def _deliver(self, sid, effects: list[Outbound]):
        for effect in effects:
            if not effect.is_broadcast():
                self.sio.emit(effect.event, effect.text, to=sid)
            elif effect.username is not None:
                self.hub.relay(effect.room, effect.username, effect.text)
            else:
                self.hub.announce(effect.room, effect.text)


def register_chat_events(sio, lifecycle: ConnectionLifecycle):
    @sio.event
    def connect(sid, environ, auth=None):
        lifecycle.connect(sid)

    @sio.event
    def disconnect(sid, reason=None):
        lifecycle.disconnect(sid)

    @sio.event
    def response(sid, data):
        """Next line of the onboarding dialogue (or a chat line once in a room)"""
        lifecycle.response(sid, data)

    @sio.event
    def chat_message(sid, data):
        lifecycle.chat_message(sid, data)

    @sio.event
    def quit(sid, data=None):
        lifecycle.quit(sid)
