import pytest

from typerace.models import FINISHED, PLAYING, WAITING, Player, Room
from typerace.services.race import state_machine
from typerace.services.race.text import COMMON_WORDS, generate_words


def _room(*sids):
    room = Room('r1', 'some text', max_players=4, word_count=5)
    for sid in sids:
        room.players[sid] = Player(sid, {'uid': sid})
    return room


def test_room_requires_text():
    with pytest.raises(ValueError):
        Room('r1', '', max_players=4, word_count=5)


def test_start_only_from_waiting():
    room = _room('a')
    assert state_machine.start(room, 'new text', 123)
    assert room.state == PLAYING
    assert room.start_time == 123
    assert room.text == 'new text'
    assert not state_machine.start(room, 'other', 456)
    assert room.text == 'new text'
    assert room.start_time == 123


def test_start_clears_player_race_fields():
    room = _room('a')
    player = room.players['a']
    player.progress, player.wpm, player.accuracy = 50, 80, 70
    player.finished, player.position = True, 1
    state_machine.start(room, 'x', 1)
    assert player.to_dict() == {
        'connectionId': 'a', 'user': {'uid': 'a'}, 'progress': 0, 'wpm': 0,
        'accuracy': 100, 'finished': False, 'position': None,
    }


def test_positions_follow_finish_order():
    room = _room('p1', 'p2', 'p3')
    state_machine.start(room, 'x', 1)
    for sid in ('p2', 'p1', 'p3'):
        assert state_machine.mark_finished(room, room.players[sid])
    assert [room.players[s].position for s in ('p2', 'p1', 'p3')] == [1, 2, 3]


def test_mark_finished_only_once():
    room = _room('a', 'b')
    state_machine.start(room, 'x', 1)
    assert state_machine.mark_finished(room, room.players['a'])
    assert not state_machine.mark_finished(room, room.players['a'])
    assert room.players['a'].position == 1


def test_position_counts_only_players_still_in_room():
    room = _room('a', 'b', 'c')
    state_machine.start(room, 'x', 1)
    state_machine.mark_finished(room, room.players['a'])
    del room.players['a']
    state_machine.mark_finished(room, room.players['b'])
    assert room.players['b'].position == 1


def test_complete_if_all_finished():
    room = _room('a', 'b')
    state_machine.start(room, 'x', 1)
    state_machine.mark_finished(room, room.players['a'])
    assert not state_machine.complete_if_all_finished(room)
    assert room.state == PLAYING
    state_machine.mark_finished(room, room.players['b'])
    assert state_machine.complete_if_all_finished(room)
    assert room.state == FINISHED
    assert room.start_time is None


def test_complete_requires_playing_state():
    room = _room('a')
    room.players['a'].finished = True
    assert not state_machine.complete_if_all_finished(room)
    assert room.state == WAITING


def test_reset_from_any_state():
    room = _room('a')
    state_machine.start(room, 'x', 1)
    state_machine.mark_finished(room, room.players['a'])
    state_machine.complete_if_all_finished(room)
    state_machine.reset(room, 'fresh')
    assert room.state == WAITING
    assert room.start_time is None
    assert room.text == 'fresh'
    assert room.players['a'].finished is False
    assert room.players['a'].position is None


def test_generate_words():
    text = generate_words(7)
    words = text.split(' ')
    assert len(words) == 7
    assert all(w in COMMON_WORDS for w in words)
    assert generate_words(0)
