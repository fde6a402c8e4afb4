from typing import Any, Dict, List, Optional

WAITING = 'waiting'
PLAYING = 'playing'
FINISHED = 'finished'


class Player:
    """A connection's per-race state inside a Room."""

    def __init__(self, connection_id: str, user: Dict[str, Any]):
        self.connection_id = connection_id
        self.user = dict(user)
        self.clear_race()

    def clear_race(self) -> None:
        """Reset race fields in place; identity is kept."""
        self.progress = 0
        self.wpm = 0
        self.accuracy = 100
        self.finished = False
        self.position: Optional[int] = None

    def to_dict(self):
        return {
            'connectionId': self.connection_id,
            'user': dict(self.user),
            'progress': self.progress,
            'wpm': self.wpm,
            'accuracy': self.accuracy,
            'finished': self.finished,
            'position': self.position,
        }


class Room:
    """Server-owned aggregate for one race session.

    ``players`` is a plain dict keyed by connection id, so iteration follows
    join order.
    """

    def __init__(self, room_id: str, text: str, max_players: int, word_count: int):
        if not text:
            raise ValueError('race text must be non-empty')
        self.id = room_id
        self.state = WAITING
        self.text = text
        self.start_time: Optional[int] = None
        self.max_players = max_players
        self.word_count = word_count
        self.players: Dict[str, Player] = {}

    def is_full(self) -> bool:
        return len(self.players) >= self.max_players

    def is_empty(self) -> bool:
        return not self.players

    def finished_count(self) -> int:
        return sum(1 for p in self.players.values() if p.finished)

    def all_finished(self) -> bool:
        return bool(self.players) and all(p.finished for p in self.players.values())

    def players_list(self) -> List[dict]:
        return [p.to_dict() for p in self.players.values()]

    def to_dict(self):
        return {
            'id': self.id,
            'state': self.state,
            'text': self.text,
            'startTime': self.start_time,
            'maxPlayers': self.max_players,
            'players': self.players_list(),
        }


class ConnectionBinding:
    """Which room (and as whom) a live connection is currently bound to."""

    def __init__(self, connection_id: str, room_id: str, user: Dict[str, Any]):
        self.connection_id = connection_id
        self.room_id = room_id
        self.user = dict(user)

    def __repr__(self):
        return f"<ConnectionBinding {self.connection_id} -> {self.room_id}>"
