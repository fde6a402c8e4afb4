import logging
import time
from typing import Callable, List, Optional, Sequence

from typerace.models import WAITING, PLAYING, Player, Room
from . import state_machine
from .events import (
    GAME_FINISHED, GAME_RESET, GAME_STARTED, JOIN_REJECTED, PLAYER_FINISHED,
    PLAYER_LEFT, PLAYERS_PROGRESS, ROOM_FULL, ROOM_STATE,
    Disconnect, InboundEvent, Join, Outbound, Reset, Start, TypingUpdate,
)
from .registry import ConnectionRegistry
from .store import RoomStore

logger = logging.getLogger(__name__)

JOIN_OPEN = 'open'
JOIN_WAITING_ONLY = 'waiting_only'
JOIN_POLICIES = (JOIN_OPEN, JOIN_WAITING_ONLY)


def now_ms() -> int:
    return int(time.time() * 1000)


class EventDispatcher:
    """Applies inbound events to rooms and returns the messages to deliver.

    The dispatcher never talks to a transport. Every call to ``dispatch``
    mutates at most the rooms the event targets and returns the outbound
    messages in the order they must be delivered. Callers are responsible
    for running one ``dispatch`` at a time.
    """

    def __init__(self, store: RoomStore, registry: ConnectionRegistry,
                 clock: Callable[[], int] = now_ms,
                 join_policy: str = JOIN_OPEN,
                 word_count_options: Optional[Sequence[int]] = None):
        if join_policy not in JOIN_POLICIES:
            raise ValueError(f'unknown join policy {join_policy!r}')
        self.store = store
        self.registry = registry
        self.clock = clock
        self.join_policy = join_policy
        self.word_count_options = tuple(word_count_options or ())
        self._handlers = {
            Join: self._join,
            Start: self._start,
            TypingUpdate: self._typing_update,
            Reset: self._reset,
            Disconnect: self._disconnect,
        }

    def dispatch(self, event: InboundEvent) -> List[Outbound]:
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f'unsupported event {event!r}')
        return handler(event)

    # ---- helpers ----

    @staticmethod
    def _to_room(room: Room, event: str, data: dict) -> Outbound:
        return Outbound(event, data, tuple(room.players))

    def _room_state(self, room: Room) -> Outbound:
        return self._to_room(room, ROOM_STATE, {'room': room.to_dict()})

    def _leave(self, connection_id: str, room_id: str) -> List[Outbound]:
        self.registry.unbind(connection_id)
        room = self.store.get_room(room_id)
        if room is None or connection_id not in room.players:
            return []
        del room.players[connection_id]
        out = [self._to_room(room, PLAYER_LEFT, {'playerId': connection_id})]
        logger.info(f"[leave] room={room_id} sid={connection_id} players={len(room.players)}")
        if self.store.remove_room_if_empty(room_id):
            return out
        # The departed player may have been the last one still racing
        if state_machine.complete_if_all_finished(room):
            logger.info(f"[finish] room={room_id} all remaining players finished")
            out.append(self._to_room(room, GAME_FINISHED, {'players': room.players_list()}))
        out.append(self._room_state(room))
        return out

    # ---- handlers ----

    def _join(self, event: Join) -> List[Outbound]:
        cid, room_id = event.connection_id, event.room_id
        out: List[Outbound] = []
        binding = self.registry.lookup(cid)
        if binding is not None:
            current = self.store.get_room(binding.room_id)
            if binding.room_id == room_id and current is not None and cid in current.players:
                # Re-join of the same room keeps the race stats
                current.players[cid].user = dict(event.user)
                self.registry.bind(cid, room_id, event.user)
                return [self._room_state(current)]
            out.extend(self._leave(cid, binding.room_id))

        room = self.store.get_room(room_id)
        if room is not None:
            if room.is_full():
                logger.info(f"[room-full] room={room_id} sid={cid} max_players={room.max_players}")
                out.append(Outbound(ROOM_FULL, {'roomId': room_id}, (cid,)))
                return out
            if self.join_policy == JOIN_WAITING_ONLY and room.state != WAITING:
                logger.info(f"[join-rejected] room={room_id} sid={cid} state={room.state}")
                out.append(Outbound(JOIN_REJECTED, {'roomId': room_id, 'reason': 'in-progress'}, (cid,)))
                return out
        else:
            room = self.store.get_or_create_room(room_id)

        room.players[cid] = Player(cid, event.user)
        self.registry.bind(cid, room_id, event.user)
        logger.info(f"[join] room={room_id} sid={cid} players={len(room.players)}")
        out.append(self._room_state(room))
        return out

    def _start(self, event: Start) -> List[Outbound]:
        room = self.store.get_room(event.room_id)
        if room is None or room.state != WAITING:
            logger.debug(f"[start-ignored] room={event.room_id} sid={event.connection_id}")
            return []
        if event.word_count in self.word_count_options:
            room.word_count = event.word_count
        state_machine.start(room, self.store.new_text(room.word_count), self.clock())
        logger.info(f"[start] room={room.id} players={len(room.players)} words={room.word_count}")
        return [self._to_room(room, GAME_STARTED, {'text': room.text, 'startTime': room.start_time})]

    def _typing_update(self, event: TypingUpdate) -> List[Outbound]:
        room = self.store.get_room(event.room_id)
        if room is None or room.state != PLAYING:
            logger.debug(f"[typing-ignored] room={event.room_id} sid={event.connection_id}")
            return []
        player = room.players.get(event.connection_id)
        if player is None:
            logger.debug(f"[typing-ignored] room={event.room_id} sid={event.connection_id} not a player")
            return []

        player.progress = event.progress
        player.wpm = event.wpm
        player.accuracy = event.accuracy

        out: List[Outbound] = []
        if event.finished and state_machine.mark_finished(room, player):
            logger.info(f"[player-finished] room={room.id} sid={player.connection_id} position={player.position}")
            out.append(self._to_room(room, PLAYER_FINISHED, {
                'playerId': player.connection_id,
                'position': player.position,
                'wpm': player.wpm,
                'accuracy': player.accuracy,
            }))
            if state_machine.complete_if_all_finished(room):
                logger.info(f"[finish] room={room.id} all players finished")
                out.append(self._to_room(room, GAME_FINISHED, {'players': room.players_list()}))
        out.append(self._to_room(room, PLAYERS_PROGRESS, {'players': room.players_list()}))
        return out

    def _reset(self, event: Reset) -> List[Outbound]:
        room = self.store.get_room(event.room_id)
        if room is None:
            logger.debug(f"[reset-ignored] room={event.room_id} sid={event.connection_id}")
            return []
        state_machine.reset(room, self.store.new_text(room.word_count))
        logger.info(f"[reset] room={room.id}")
        return [self._to_room(room, GAME_RESET, {'text': room.text})]

    def _disconnect(self, event: Disconnect) -> List[Outbound]:
        binding = self.registry.lookup(event.connection_id)
        if binding is None:
            return []
        return self._leave(event.connection_id, binding.room_id)
