"""Client-side race state.

``RaceAgent`` mirrors the room as the server broadcasts it and turns local
input into throttled ``typing-update`` messages. Ownership is split:

* server broadcasts own the room state, race text, start time, roster and
  this connection's finish position;
* local input owns the typed text, the error set, accuracy, live wpm, the
  local finished flag and the cosmetic trail.

Neither side writes the other's fields.
"""
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from typerace.models import FINISHED, PLAYING, WAITING
from typerace.services.race import metrics
from typerace.services.race.events import (
    CONNECTED, GAME_FINISHED, GAME_RESET, GAME_STARTED, JOIN_REJECTED, JOIN_ROOM,
    PLAYER_FINISHED, PLAYER_LEFT, PLAYERS_PROGRESS, RESET_GAME, ROOM_FULL,
    ROOM_STATE, START_GAME, TYPING_UPDATE,
)

logger = logging.getLogger(__name__)

MODE_WORDS = 'words'
MODE_TIME = 'time'


def _now_ms() -> int:
    return int(time.time() * 1000)


class TrailMarks:
    """Decaying highlight on recently typed indices. Display only."""

    def __init__(self, max_marks: int = 8, decay_step: float = 0.25):
        self.max_marks = max_marks
        self.decay_step = decay_step
        self._marks: Dict[int, float] = {}

    def __len__(self):
        return len(self._marks)

    def __contains__(self, index):
        return index in self._marks

    def mark(self, index: int) -> None:
        self._marks.pop(index, None)
        self._marks[index] = 1.0
        while len(self._marks) > self.max_marks:
            del self._marks[next(iter(self._marks))]

    def decay(self) -> None:
        for index in list(self._marks):
            level = self._marks[index] - self.decay_step
            if level <= 0:
                del self._marks[index]
            else:
                self._marks[index] = level

    def intensity(self, index: int) -> float:
        return self._marks.get(index, 0.0)

    def clear(self) -> None:
        self._marks.clear()


class RaceAgent:

    def __init__(self, room_id: str, user: Dict[str, Any],
                 emit: Optional[Callable[[str, dict], None]] = None,
                 clock: Callable[[], int] = _now_ms,
                 throttle_ms: int = 100,
                 mode: str = MODE_WORDS,
                 time_limit_sec: Optional[float] = None,
                 trail: Optional[TrailMarks] = None):
        if mode not in (MODE_WORDS, MODE_TIME):
            raise ValueError(f'unknown race mode {mode!r}')
        if mode == MODE_TIME and not time_limit_sec:
            raise ValueError('time mode needs time_limit_sec')
        self.room_id = room_id
        self.user = dict(user)
        self.emit = emit or (lambda event, payload: None)
        self.clock = clock
        self.throttle_ms = throttle_ms
        self.mode = mode
        self.time_limit_sec = time_limit_sec
        self.trail = trail or TrailMarks()

        # mirrored from the server
        self.connection_id: Optional[str] = None
        self.room: Optional[dict] = None
        self.state = WAITING
        self.text = ''
        self.start_time: Optional[int] = None
        self.players: List[dict] = []
        self.position: Optional[int] = None
        self.room_full = False
        self.join_rejected: Optional[str] = None

        # local
        self._started_at: Optional[int] = None
        self._last_report: Optional[int] = None
        self._pending = False
        self._clear_local()

        self._handlers = {
            CONNECTED: self.on_connected,
            ROOM_STATE: self.on_room_state,
            ROOM_FULL: self.on_room_full,
            JOIN_REJECTED: self.on_join_rejected,
            GAME_STARTED: self.on_game_started,
            PLAYERS_PROGRESS: self.on_players_progress,
            PLAYER_FINISHED: self.on_player_finished,
            GAME_FINISHED: self.on_game_finished,
            GAME_RESET: self.on_game_reset,
            PLAYER_LEFT: self.on_player_left,
        }

    def _clear_local(self) -> None:
        self.typed = ''
        self.errors: List[int] = []
        self.accuracy = 100
        self.wpm = 0
        self.finished = False
        self.trail.clear()
        self._last_report = None
        self._pending = False

    # ---- outbound commands ----

    def join(self) -> None:
        self.emit(JOIN_ROOM, {'roomId': self.room_id, 'user': dict(self.user)})

    def request_start(self, word_count: Optional[int] = None) -> None:
        if self.state != WAITING:
            return
        payload = {'roomId': self.room_id}
        if word_count is not None:
            payload['wordCount'] = word_count
        self.emit(START_GAME, payload)

    def request_reset(self) -> None:
        self.emit(RESET_GAME, {'roomId': self.room_id})

    # ---- inbound broadcasts ----

    def handle(self, event: str, data: Optional[dict] = None) -> None:
        handler = self._handlers.get(event)
        if handler is None:
            logger.debug(f"[agent] ignoring event={event}")
            return
        handler(data or {})

    def on_connected(self, data):
        self.connection_id = data.get('connectionId')

    def on_room_state(self, data):
        room = data.get('room') or {}
        self.room = room
        self.players = list(room.get('players') or [])
        self.state = room.get('state', self.state)
        if room.get('text'):
            self.text = room['text']
        self.start_time = room.get('startTime')
        if self.state == PLAYING and self._started_at is None:
            # Joined a race already under way
            self._started_at = self.clock()
        self._sync_own_position()

    def on_room_full(self, data):
        self.room_full = True

    def on_join_rejected(self, data):
        self.join_rejected = data.get('reason', 'rejected')

    def on_game_started(self, data):
        self.text = data.get('text', self.text)
        self.start_time = data.get('startTime')
        self.state = PLAYING
        self.position = None
        self._clear_local()
        self._started_at = self.clock()

    def on_players_progress(self, data):
        self.players = list(data.get('players') or [])
        self._sync_own_position()

    def on_player_finished(self, data):
        if self.connection_id is not None and data.get('playerId') == self.connection_id:
            self.position = data.get('position')

    def on_game_finished(self, data):
        self.state = FINISHED
        if data.get('players') is not None:
            self.players = list(data['players'])
            self._sync_own_position()

    def on_game_reset(self, data):
        self.text = data.get('text', self.text)
        self.state = WAITING
        self.start_time = None
        self.position = None
        self._started_at = None
        self._clear_local()

    def on_player_left(self, data):
        player_id = data.get('playerId')
        self.players = [p for p in self.players if p.get('connectionId') != player_id]

    def _sync_own_position(self):
        if self.connection_id is None:
            return
        for player in self.players:
            if player.get('connectionId') == self.connection_id:
                self.position = player.get('position')
                return

    # ---- local input ----

    def accepts_input(self) -> bool:
        return self.state == PLAYING and not self.finished

    def elapsed_seconds(self) -> float:
        if self._started_at is None:
            return 0.0
        return max(0.0, (self.clock() - self._started_at) / 1000.0)

    def time_remaining(self) -> Optional[float]:
        if self.mode != MODE_TIME:
            return None
        return max(0.0, self.time_limit_sec - self.elapsed_seconds())

    def progress(self) -> float:
        if not self.text:
            return 0.0
        return min(len(self.typed) / len(self.text) * 100, 100.0)

    def handle_input(self, value: str) -> bool:
        """Apply the full current input; returns False when input is refused."""
        if not self.accepts_input():
            return False
        grew = len(value) > len(self.typed)
        self.typed = value
        text = self.text
        self.errors = [i for i, ch in enumerate(value) if i >= len(text) or ch != text[i]]
        self.accuracy = metrics.accuracy(len(value) - len(self.errors), len(value))
        self.wpm = metrics.wpm(len(value), self.elapsed_seconds())
        if grew:
            self.trail.mark(len(value) - 1)
        if value == text:
            self.finished = True
            self._report(force=True)
        else:
            self._report()
        return True

    def press(self, char: str) -> bool:
        return self.handle_input(self.typed + char)

    def backspace(self) -> bool:
        return self.handle_input(self.typed[:-1])

    def tick(self) -> None:
        """Periodic timer: live wpm, timed-mode expiry, throttled flush."""
        self.trail.decay()
        if not self.accepts_input():
            return
        self.wpm = metrics.wpm(len(self.typed), self.elapsed_seconds())
        if self.mode == MODE_TIME and self.time_remaining() <= 0:
            logger.info(f"[agent] time limit reached room={self.room_id}")
            self.finished = True
            self._report(force=True)
            return
        if self._pending:
            self._report()

    def _report(self, force: bool = False) -> None:
        now = self.clock()
        if not force and self._last_report is not None and now - self._last_report < self.throttle_ms:
            self._pending = True
            return
        self._last_report = now
        self._pending = False
        self.emit(TYPING_UPDATE, {
            'roomId': self.room_id,
            'progress': self.progress(),
            'wpm': self.wpm,
            'accuracy': self.accuracy,
            'finished': self.finished,
        })

    def character_class(self, index: int) -> str:
        cursor = len(self.typed)
        if index < cursor:
            return 'incorrect' if index in self.errors else 'correct'
        if index == cursor:
            return 'current'
        return 'pending'
