"""
User-facing errors raised while walking a connection through onboarding.

Every error carries the text sent back to the offending connection. None of
them is fatal: the worst outcome is a session reset to the first step.
"""


class ChatRelayError(Exception):
    message = "Something went wrong."

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidChoice(ChatRelayError):
    message = "Invalid option. Choose 1 or 2."


class EmptyField(ChatRelayError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field.capitalize()} cannot be empty.")


class RoomNotFound(ChatRelayError):
    message = "Room does not exist."


class PasskeyMismatch(ChatRelayError):
    message = "Invalid passkey."


class NotInChat(ChatRelayError):
    message = "You must join a room before chatting."


class CorruptedState(ChatRelayError):
    message = "Invalid state. Please reconnect."


__all__ = [
    "ChatRelayError",
    "InvalidChoice",
    "EmptyField",
    "RoomNotFound",
    "PasskeyMismatch",
    "NotInChat",
    "CorruptedState",
]
