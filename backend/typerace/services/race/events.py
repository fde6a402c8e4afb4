"""Inbound and outbound event types for the race channel.

Inbound events are parsed from raw Socket.IO payloads into one of the
tagged variants below; anything that does not fit raises ``InvalidEvent``.
Outbound messages carry their explicit recipient list so that delivery does
not depend on transport-side room membership.
"""
import math
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Dict, Optional, Tuple, Union

# client -> server
JOIN_ROOM = 'join-room'
START_GAME = 'start-game'
TYPING_UPDATE = 'typing-update'
RESET_GAME = 'reset-game'

# server -> client
CONNECTED = 'connected'
ROOM_STATE = 'room-state'
ROOM_FULL = 'room-full'
JOIN_REJECTED = 'join-rejected'
GAME_STARTED = 'game-started'
PLAYERS_PROGRESS = 'players-progress'
PLAYER_FINISHED = 'player-finished'
GAME_FINISHED = 'game-finished'
GAME_RESET = 'game-reset'
PLAYER_LEFT = 'player-left'


class InvalidEvent(ValueError):
    """Raised for inbound payloads that fail validation."""


@dataclass(frozen=True)
class Join:
    connection_id: str
    room_id: str
    user: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Start:
    connection_id: str
    room_id: str
    word_count: Optional[int] = None


@dataclass(frozen=True)
class TypingUpdate:
    connection_id: str
    room_id: str
    progress: float
    wpm: int
    accuracy: int
    finished: bool


@dataclass(frozen=True)
class Reset:
    connection_id: str
    room_id: str


@dataclass(frozen=True)
class Disconnect:
    connection_id: str


InboundEvent = Union[Join, Start, TypingUpdate, Reset, Disconnect]


@dataclass(frozen=True)
class Outbound:
    event: str
    data: Dict[str, Any]
    recipients: Tuple[str, ...]


def _room_id(data) -> str:
    room_id = data.get('roomId')
    if not isinstance(room_id, str) or not room_id.strip():
        raise InvalidEvent('roomId is required')
    return room_id


def _number(data, key) -> float:
    value = data.get(key)
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidEvent(f'{key} must be a number')
    try:
        value = float(value)
    except OverflowError:
        raise InvalidEvent(f'{key} is out of range')
    if not math.isfinite(value):
        raise InvalidEvent(f'{key} must be finite')
    return value


def _clamp(value, lo, hi):
    return max(lo, min(hi, value))


def parse_event(name: str, data: Any, connection_id: str) -> InboundEvent:
    """Build an inbound event from a raw channel message."""
    if not isinstance(data, dict):
        raise InvalidEvent(f'{name} payload must be an object')

    if name == JOIN_ROOM:
        user = data.get('user')
        if user is None:
            user = {}
        if not isinstance(user, dict):
            raise InvalidEvent('user must be an object')
        return Join(connection_id, _room_id(data), dict(user))

    if name == START_GAME:
        word_count = data.get('wordCount')
        if word_count is not None:
            if isinstance(word_count, bool) or not isinstance(word_count, int):
                raise InvalidEvent('wordCount must be an integer')
        return Start(connection_id, _room_id(data), word_count)

    if name == TYPING_UPDATE:
        room_id = _room_id(data)
        # Reported values are trusted, only their ranges are enforced
        progress = _clamp(_number(data, 'progress'), 0.0, 100.0)
        wpm = max(0, int(round(_number(data, 'wpm'))))
        accuracy = int(_clamp(round(_number(data, 'accuracy')), 0, 100))
        finished = data.get('finished', False)
        if not isinstance(finished, bool):
            raise InvalidEvent('finished must be a boolean')
        return TypingUpdate(connection_id, room_id, progress, wpm, accuracy, finished)

    if name == RESET_GAME:
        return Reset(connection_id, _room_id(data))

    raise InvalidEvent(f'unknown event {name!r}')
