import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

HOST = os.getenv('HOST', '0.0.0.0')
PORT = int(os.getenv('PORT', 3000))

# Comma separated list, or '*' for any origin
CORS_ALLOWED_ORIGINS = os.getenv('CORS_ALLOWED_ORIGINS', '*')

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FILE = os.getenv('LOG_FILE', 'chat_server.log')  # empty string disables the file log
LOG_MAX_BYTES = int(os.getenv('LOG_MAX_BYTES', 10 * 1024 * 1024))
LOG_BACKUP_COUNT = int(os.getenv('LOG_BACKUP_COUNT', 5))

# Time given to the shutdown notice to reach clients before they are dropped
SHUTDOWN_GRACE_SECONDS = float(os.getenv('SHUTDOWN_GRACE_SECONDS', 1.0))


def cors_origins(value=None):
    """Turn the CORS setting into what socketio.Server expects"""
    value = CORS_ALLOWED_ORIGINS if value is None else value
    if value.strip() == '*':
        return '*'
    return [origin.strip() for origin in value.split(',') if origin.strip()]
