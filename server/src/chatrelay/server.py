"""
Chat relay server using Socket.IO

Every connection is walked through a short onboarding dialogue (host or join
a room, passkey, username) and then relays its lines to everyone in the same
room. All rooms live in this process's memory and disappear as soon as their
last member leaves.
"""

import signal
import socket

import eventlet
from eventlet import wsgi
from eventlet.event import Event
import socketio

from chatrelay import config
from chatrelay.logging_config import get_logger, setup_logging
from chatrelay.services.lobby import ConnectionLifecycle, register_chat_events
from chatrelay.services.sio import sio
from chatrelay.storage.chat_states import registry, sessions

logger = get_logger(__name__)

# Create the WSGI app around the Socket.IO server
app = socketio.WSGIApp(sio)

lifecycle = ConnectionLifecycle(sio, registry, sessions)
register_chat_events(sio, lifecycle)

# Set by the signal handler; main() polls it
shutdown_requested = Event()


def get_server_ip():
    """Return this host's outward-facing IPv4 address, or 'localhost'"""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as udp:
        try:
            # No packet is sent; connecting a UDP socket only picks a route
            udp.connect(('10.255.255.255', 1))
            address = udp.getsockname()[0]
        except OSError:
            return 'localhost'
    if address.startswith('127.'):
        return 'localhost'
    return address


def handle_shutdown(signum, frame):
    # Only wake main(); emitting from inside a signal handler would run on the
    # hub, where nothing can be written out
    if not shutdown_requested.ready():
        shutdown_requested.send(signum)


def main():
    setup_logging(
        log_level=config.LOG_LEVEL,
        log_file=config.LOG_FILE or None,
        max_bytes=config.LOG_MAX_BYTES,
        backup_count=config.LOG_BACKUP_COUNT,
    )

    signal.signal(signal.SIGINT, handle_shutdown)
    signal.signal(signal.SIGTERM, handle_shutdown)

    listener = eventlet.listen((config.HOST, config.PORT))
    logger.info(f"Server listening on http://{get_server_ip()}:{config.PORT}")
    eventlet.spawn(wsgi.server, listener, app, log_output=False)

    # The hub only notices the signal on its next wakeup, so check regularly
    while not shutdown_requested.ready():
        eventlet.sleep(0.2)

    lifecycle.shutdown(config.SHUTDOWN_GRACE_SECONDS)
    logger.info("Server closed")


if __name__ == '__main__':
    main()
