import logging
import threading
from typing import Callable, List, Mapping

from .dispatcher import EventDispatcher, JOIN_OPEN, now_ms
from .events import InboundEvent, Outbound
from .registry import ConnectionRegistry
from .store import RoomStore
from .text import generate_words

logger = logging.getLogger(__name__)


class RaceRuntime:
    """Owns the store, the connection registry and the dispatcher.

    ``process`` is the single serialization point: one inbound event is
    applied and its outbound messages delivered before the next event is
    looked at, whichever worker the transport runs handlers on.
    """

    def __init__(self, max_players: int = 4, word_count: int = 50,
                 join_policy: str = JOIN_OPEN, word_count_options=(),
                 id_length: int = 8,
                 text_source: Callable[[int], str] = generate_words,
                 clock: Callable[[], int] = now_ms):
        self.store = RoomStore(max_players=max_players, word_count=word_count,
                               text_source=text_source, id_length=id_length)
        self.registry = ConnectionRegistry()
        self.dispatcher = EventDispatcher(self.store, self.registry, clock=clock,
                                          join_policy=join_policy,
                                          word_count_options=word_count_options)
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config: Mapping, **overrides) -> 'RaceRuntime':
        options = dict(
            max_players=int(config.get('MAX_PLAYERS_PER_ROOM', 4)),
            word_count=int(config.get('DEFAULT_WORD_COUNT', 50)),
            join_policy=config.get('JOIN_POLICY', JOIN_OPEN),
            word_count_options=tuple(config.get('WORD_COUNT_OPTIONS', ())),
            id_length=int(config.get('ROOM_ID_LENGTH', 8)),
        )
        options.update(overrides)
        return cls(**options)

    def process(self, event: InboundEvent,
                deliver: Callable[[Outbound], None]) -> List[Outbound]:
        with self._lock:
            outbound = self.dispatcher.dispatch(event)
            for message in outbound:
                deliver(message)
            return outbound

    def create_room(self):
        with self._lock:
            return self.store.create_room()

    def room_snapshot(self, room_id: str):
        with self._lock:
            room = self.store.get_room(room_id)
            return room.to_dict() if room is not None else None

    def shutdown(self) -> None:
        with self._lock:
            logger.info(f"[shutdown] rooms={len(self.store)} connections={len(self.registry)}")
            self.store.clear()
            self.registry.clear()
