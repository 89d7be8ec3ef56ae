"""
Onboarding state machine

Every connection walks through the same small dialogue before it can chat:

- choice:           host a new room (1) or connect to an existing one (2)
- host_type:        make the room open (1) or private (2)
- host_passkey:     pick the passkey of a private room
- connect_room:     type the id of the room to join
- connect_passkey:  type the passkey of a private room
- username:         claim a display name, which joins the room
- chat:             every further line is relayed to the room

Transitions are plain functions of (session, text, registry). They never talk
to the transport: they return the next session together with the list of
Outbound effects that the caller should deliver. A rejected input leaves the
session on the same step and re-sends that step's prompt.
"""

from chatrelay.errors import (ChatRelayError, CorruptedState, EmptyField,
                              InvalidChoice, NotInChat, PasskeyMismatch,
                              RoomNotFound)
from chatrelay.logging_config import get_logger
from chatrelay.models.Outbound import Outbound
from chatrelay.models.Session import Session
from chatrelay.models.Step import Step
from chatrelay.storage.registry import RoomRegistry

logger = get_logger(__name__)

PROMPTS = {
    Step.CHOICE: "Enter option (1 for host, 2 for connect): ",
    Step.HOST_TYPE: "Make room [1] open or [2] private: ",
    Step.HOST_PASSKEY: "Set a passkey: ",
    Step.CONNECT_ROOM: "Enter room ID: ",
    Step.CONNECT_PASSKEY: "Enter passkey: ",
    Step.USERNAME: "Enter your username: ",
}

WELCOME_MESSAGE = "Connection successful. Welcome to the chat!"
CHAT_HINT = "type and hit enter to send a message"
SHUTDOWN_NOTICE = "*** Server is shutting down ***"
INVALID_ROOM_MESSAGE = "Not in a valid room or username not set."


def prompt_for(step: Step) -> Outbound:
    return Outbound.prompt(PROMPTS[step])


def room_created_message(room_id: str, passkey=None) -> str:
    suffix = " (passkey required)" if passkey else ""
    return f"Room created with ID: {room_id}\nShare this ID with others to join{suffix}."


def joined_notice(username: str) -> str:
    return f"*** {username} joined the chat ***"


def left_notice(username: str) -> str:
    return f"*** {username} left the chat ***"


def format_chat_line(username: str, text: str) -> str:
    return f"[{username}] {text}"


# -----------------------------
# Step handlers
# -----------------------------
# Each handler mutates the session it is given, appends effects, and raises a
# ChatRelayError when the input is rejected.

def _on_choice(session, text, registry, effects):
    if text == "1":
        session.step = Step.HOST_TYPE
    elif text == "2":
        session.step = Step.CONNECT_ROOM
    else:
        raise InvalidChoice()
    effects.append(prompt_for(session.step))


def _on_host_type(session, text, registry, effects):
    if text == "1":
        _host_room(session, None, registry, effects)
    elif text == "2":
        session.step = Step.HOST_PASSKEY
        effects.append(prompt_for(session.step))
    else:
        raise InvalidChoice()


def _on_host_passkey(session, text, registry, effects):
    if not text:
        raise EmptyField("passkey")
    _host_room(session, text, registry, effects)


def _host_room(session, passkey, registry, effects):
    room_id = registry.create_room(passkey, host_sid=session.sid)
    session.commit_room(room_id)
    session.step = Step.USERNAME
    effects.append(Outbound.message(room_created_message(room_id, passkey)))
    effects.append(prompt_for(session.step))


def _on_connect_room(session, text, registry, effects):
    room = registry.lookup(text)
    if room is None:
        raise RoomNotFound()

    if room.requires_passkey():
        session.pending_room_id = text
        session.step = Step.CONNECT_PASSKEY
    else:
        session.commit_room(text)
        session.step = Step.USERNAME
    effects.append(prompt_for(session.step))


def _on_connect_passkey(session, text, registry, effects):
    # The room may have been deleted since its id was accepted
    room = registry.lookup(session.pending_room_id)
    if room is None or not room.check_passkey(text):
        raise PasskeyMismatch()

    session.commit_room(session.pending_room_id)
    session.step = Step.USERNAME
    effects.append(prompt_for(session.step))


def _on_username(session, text, registry, effects):
    if not text:
        raise EmptyField("username")

    try:
        registry.join(session.room_id, session.sid, text)
    except RoomNotFound:
        session.reset()
        raise

    session.username = text
    session.step = Step.CHAT
    effects.append(Outbound.notice(session.room_id, joined_notice(text)))
    effects.append(Outbound.message(WELCOME_MESSAGE))
    effects.append(Outbound.message(CHAT_HINT))
    logger.info(f"Client {text} joined room {session.room_id}")


def _on_chat(session, text, registry, effects):
    if not text:
        return

    room = registry.lookup(session.room_id)
    username = room.get_username(session.sid) if room is not None else None
    if username is None:
        raise NotInChat(INVALID_ROOM_MESSAGE)

    effects.append(Outbound.chat(session.room_id, username, text))
    logger.info(f"Message from {username} in room {session.room_id}: {text}")


HANDLERS = {
    Step.CHOICE: _on_choice,
    Step.HOST_TYPE: _on_host_type,
    Step.HOST_PASSKEY: _on_host_passkey,
    Step.CONNECT_ROOM: _on_connect_room,
    Step.CONNECT_PASSKEY: _on_connect_passkey,
    Step.USERNAME: _on_username,
    Step.CHAT: _on_chat,
}


def _reset_corrupted(session: Session):
    logger.warning(f"Session {session.sid} found in invalid state {session.step!r}, resetting")
    session.reset()
    return session, [Outbound.error(CorruptedState.message), prompt_for(Step.CHOICE)]


def _reject(session: Session, error: ChatRelayError):
    effects = [Outbound.error(error.message)]
    # The chat step has no prompt: the client stays on its message box
    if session.step in PROMPTS:
        effects.append(prompt_for(session.step))
    return effects


def initial_prompt() -> Outbound:
    return prompt_for(Step.CHOICE)


def handle_response(session: Session, text: str, registry: RoomRegistry):
    """Feed one line of text to the session and return (next session, effects)"""
    session = session.copy()
    if not session.is_consistent():
        return _reset_corrupted(session)

    logger.info(f"Handling response from {session.sid} in state {session.step.value}: {text}")

    effects = []
    try:
        HANDLERS[session.step](session, text, registry, effects)
    except ChatRelayError as error:
        return session, _reject(session, error)
    return session, effects


def handle_chat_message(session: Session, text: str, registry: RoomRegistry):
    """Relay a chat line; anything before the chat step is answered privately"""
    session = session.copy()
    if not session.is_consistent():
        return _reset_corrupted(session)

    if session.step != Step.CHAT:
        return session, _reject(session, NotInChat())

    effects = []
    try:
        _on_chat(session, text, registry, effects)
    except ChatRelayError as error:
        return session, _reject(session, error)
    return session, effects


__all__ = [
    "PROMPTS",
    "WELCOME_MESSAGE",
    "CHAT_HINT",
    "SHUTDOWN_NOTICE",
    "handle_response",
    "handle_chat_message",
    "initial_prompt",
    "prompt_for",
    "room_created_message",
    "joined_notice",
    "left_notice",
    "format_chat_line",
]
