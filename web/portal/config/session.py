import os

INACTIVITY_LIMIT = 20 * 60  # seconds without activity before forced logout
CHECK_INTERVAL = 2 * 60  # seconds between backend session checks
ACTIVITY_THROTTLE = 1  # activity stamps coalesced to one per this many seconds
BACKEND_TIMEOUT = 10

IDLE_EXPIRED_MESSAGE = 'Session expired due to {minutes} minutes of inactivity'
BACKEND_EXPIRED_MESSAGE = 'Your session has ended. Please sign in again.'


def int_from_env(name, default):
    raw = os.getenv(name)
    if raw is None or raw == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f'{name} must be int')
    if value < 0:
        raise ValueError(f'{name} must be >= 0')
    return value


def bool_from_env(name, default=False):
    raw = os.getenv(name)
    if raw is None or raw == '':
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')
