from typing import Optional

class Room:
  __room_id: str
  __passkey: Optional[str]
  __members: dict[str, str]

  __host_sid: Optional[str]

  def __init__(self, room_id: str, passkey: Optional[str] = None, host_sid: Optional[str] = None):
    self.__room_id = room_id
    self.__passkey = passkey
    self.__members = {}

    self.__host_sid = host_sid

  def get_passkey(self):
    return self.__passkey

  def requires_passkey(self):
    return bool(self.__passkey)

  def check_passkey(self, attempt: str):
    # Open rooms accept anything; private rooms need the exact string
    if not self.requires_passkey():
      return True
    return attempt == self.__passkey

  def get_members(self):
    return dict(self.__members)

  def add_member(self, sid: str, username: str):
    self.__members[sid] = username

  def remove_member(self, sid: str):
    return self.__members.pop(sid, None)

  def get_username(self, sid: str):
    return self.__members.get(sid)

  def get_num_members(self):
    return len(self.__members)

  def is_empty(self):
    return len(self.__members) == 0

  def get_host_sid(self):
    return self.__host_sid

  def __repr__(self):
    return f"Room(room_id={self.__room_id!r}, members={len(self.__members)}, private={self.requires_passkey()})"
