from chatrelay.models.Session import Session
from chatrelay.storage.registry import RoomRegistry

# Chat state
sessions: dict[str, Session] = {}   # Store onboarding sessions by SID
registry = RoomRegistry()           # Every live room, by room id
