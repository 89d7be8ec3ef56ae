"""
Multi-room text chat relay over Socket.IO.

Clients pick between hosting a room (open or passkey protected) and joining
one by id, choose a display name, and then exchange chat lines with everyone
else in the same room.
"""

__version__ = "0.1.0"
