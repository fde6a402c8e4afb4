import os


def _int_env(name, default):
    try:
        return int(os.environ.get(name, str(default)))
    except ValueError:
        return default


def _origins_env(name, default):
    raw = os.environ.get(name)
    if not raw:
        return list(default)
    return [o.strip() for o in raw.split(',') if o.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Race text length (words) and room capacity
    DEFAULT_WORD_COUNT = _int_env('DEFAULT_WORD_COUNT', 50)
    MAX_PLAYERS_PER_ROOM = _int_env('MAX_PLAYERS_PER_ROOM', 4)
    # Word counts a client may ask for when starting a race
    WORD_COUNT_OPTIONS = (10, 25, 50, 100, 150)
    # Allowed cross-origin endpoints for the channel transport and HTTP API
    SOCKET_CORS_ORIGINS = _origins_env('SOCKET_CORS_ORIGINS', [
        "http://localhost:5173",
        "http://localhost:5174",
        "http://localhost:5175",
    ])
    # 'open' lets connections join a room in any state; 'waiting_only' rejects
    # joins to a race that is already playing or finished
    JOIN_POLICY = os.environ.get('JOIN_POLICY', 'open')
    # Length of room ids minted by POST /api/room
    ROOM_ID_LENGTH = _int_env('ROOM_ID_LENGTH', 8)
    SOCKETIO_NAMESPACE = '/'
