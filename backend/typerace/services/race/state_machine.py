"""Legal state transitions for a Room.

waiting -> playing   explicit start, only from waiting
playing -> finished  automatic, once every current player has finished
any     -> waiting   explicit reset, always succeeds

Each function mutates the room in place and reports whether a transition
happened; callers turn that into exactly one outbound broadcast.
"""
from typerace.models import FINISHED, PLAYING, WAITING, Player, Room


def _clear_players(room: Room) -> None:
    for player in room.players.values():
        player.clear_race()


def start(room: Room, text: str, now: int) -> bool:
    if room.state != WAITING:
        return False
    room.text = text
    room.start_time = now
    _clear_players(room)
    room.state = PLAYING
    return True


def reset(room: Room, text: str) -> None:
    room.text = text
    room.start_time = None
    _clear_players(room)
    room.state = WAITING


def mark_finished(room: Room, player: Player) -> bool:
    """Flip ``player.finished`` and assign its finish position.

    The position is 1 + the number of players in the room who had already
    finished, so it follows the order finish events are applied.
    """
    if player.finished:
        return False
    position = room.finished_count() + 1
    player.finished = True
    player.position = position
    return True


def complete_if_all_finished(room: Room) -> bool:
    if room.state != PLAYING or not room.all_finished():
        return False
    room.state = FINISHED
    room.start_time = None
    return True
