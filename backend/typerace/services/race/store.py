import logging
import uuid
from typing import Callable, Dict, Optional

from typerace.models import Room
from .text import generate_words

logger = logging.getLogger(__name__)


class RoomStore:
    """Owns the mapping of room ids to Room aggregates."""

    def __init__(self, max_players: int = 4, word_count: int = 50,
                 text_source: Callable[[int], str] = generate_words,
                 id_length: int = 8):
        self.max_players = max_players
        self.word_count = word_count
        self.text_source = text_source
        self.id_length = id_length
        self._rooms: Dict[str, Room] = {}

    def __len__(self):
        return len(self._rooms)

    def __contains__(self, room_id):
        return room_id in self._rooms

    def new_text(self, word_count: Optional[int] = None) -> str:
        return self.text_source(word_count or self.word_count)

    def get_room(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def get_or_create_room(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            room = Room(room_id, self.new_text(), self.max_players, self.word_count)
            self._rooms[room_id] = room
            logger.info(f"[room-create] room={room_id} max_players={room.max_players}")
        return room

    def create_room(self) -> Room:
        """Create an empty waiting room under a freshly minted short id."""
        while True:
            room_id = uuid.uuid4().hex[:self.id_length]
            if room_id not in self._rooms:
                return self.get_or_create_room(room_id)

    def remove_room_if_empty(self, room_id: str) -> bool:
        room = self._rooms.get(room_id)
        if room is None or not room.is_empty():
            return False
        del self._rooms[room_id]
        logger.info(f"[room-destroy] room={room_id}")
        return True

    def clear(self) -> None:
        self._rooms.clear()
