import socketio

from chatrelay import config

# Create a Socket.IO server. Handlers run one at a time so that each event is
# fully applied (registry and broadcasts) before the next one is looked at.
sio = socketio.Server(
    async_mode='eventlet',
    cors_allowed_origins=config.cors_origins(),
    async_handlers=False,
)
