from enum import Enum

class Step(str, Enum):
  CHOICE = 'choice'
  HOST_TYPE = 'host_type'
  HOST_PASSKEY = 'host_passkey'
  CONNECT_ROOM = 'connect_room'
  CONNECT_PASSKEY = 'connect_passkey'
  USERNAME = 'username'
  CHAT = 'chat'
