from dataclasses import dataclass
from typing import Optional

@dataclass(frozen=True)
class Outbound:
  """One event to send: to the originating connection, or to a whole room when `room` is set"""
  event: str
  text: str
  room: Optional[str] = None
  username: Optional[str] = None

  @classmethod
  def prompt(cls, text: str):
    return cls('prompt', text)

  @classmethod
  def error(cls, text: str):
    return cls('error', text)

  @classmethod
  def message(cls, text: str):
    return cls('message', text)

  @classmethod
  def notice(cls, room_id: str, text: str):
    return cls('message', text, room=room_id)

  @classmethod
  def chat(cls, room_id: str, username: str, text: str):
    return cls('message', text, room=room_id, username=username)

  def is_broadcast(self):
    return self.room is not None
