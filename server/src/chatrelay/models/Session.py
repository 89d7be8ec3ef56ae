import copy
from typing import Optional

from chatrelay.models.Step import Step

# Steps at which the session must already hold a committed room
ROOM_STEPS = (Step.USERNAME, Step.CHAT)

class Session:
  sid: str
  step: Step
  pending_room_id: Optional[str]
  room_id: Optional[str]
  username: Optional[str]

  def __init__(self, sid: str, step: Optional[Step] = Step.CHOICE):
    self.sid = sid
    self.step = step
    self.pending_room_id = None
    self.room_id = None
    self.username = None

  def reset(self):
    self.step = Step.CHOICE
    self.pending_room_id = None
    self.room_id = None
    self.username = None

  def commit_room(self, room_id: str):
    self.pending_room_id = None
    self.room_id = room_id

  def is_consistent(self):
    """Check that the fields present match what the current step needs"""
    if not isinstance(self.step, Step):
      return False
    if self.step == Step.CONNECT_PASSKEY and not self.pending_room_id:
      return False
    if self.step in ROOM_STEPS and not self.room_id:
      return False
    if self.step == Step.CHAT and not self.username:
      return False
    return True

  def copy(self):
    return copy.copy(self)

  def __repr__(self):
    return f"Session(sid={self.sid!r}, step={self.step!r}, room_id={self.room_id!r}, username={self.username!r})"
