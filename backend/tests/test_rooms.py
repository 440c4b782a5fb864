import random
import re

import pytest

from codeduel.errors import (
    AlreadyInRoom,
    InvalidRoomCode,
    NotRoomHost,
    RoomFull,
    RoomNotFound,
    RoomNotReady,
)
from codeduel.services.rooms import generate_room_code


class ScriptedRng:
    """Returns pre-baked code characters, one code per ``choices`` call."""

    def __init__(self, codes):
        self.codes = list(codes)

    def choices(self, population, k):
        return list(self.codes.pop(0))


def _room(arena, host='host', difficulty='easy'):
    arena.connect(host)
    return arena.rooms.create(host, difficulty)


def test_generated_codes_are_six_alphanumerics():
    code = generate_room_code(set(), random.Random(1))
    assert re.match(r'^[A-Z0-9]{6}$', code)


def test_generator_skips_codes_in_use():
    rng = ScriptedRng(['AAAAAA', 'BBBBBB', 'CCCCCC'])
    assert generate_room_code({'AAAAAA', 'BBBBBB'}, rng) == 'CCCCCC'


def test_create_makes_host_sole_member(arena, recorder):
    room = _room(arena)
    assert room.players == ['host']
    assert room.host == 'host'
    assert arena.sessions.room_of('host') == room.room_id
    assert recorder.to('host', 'room_created') == [{
        'roomId': room.room_id, 'host': 'host', 'players': ['host'], 'difficulty': 'easy', 'isReady': False,
    }]


def test_create_never_reuses_an_active_code(arena):
    arena.rooms.rng = ScriptedRng(['ABC123', 'ABC123', 'XYZ789'])
    first = _room(arena, 'h1')
    second = _room(arena, 'h2')
    assert first.room_id == 'ABC123'
    assert second.room_id == 'XYZ789'


def test_join_broadcasts_roster_to_everyone(arena, recorder):
    room = _room(arena)
    arena.connect('guest')
    arena.rooms.join('guest', room.room_id)

    [joined] = recorder.to('guest', 'room_joined')
    assert joined['players'] == ['host', 'guest']
    assert joined['isReady'] is True
    assert recorder.to('host', 'room_updated')[-1]['players'] == ['host', 'guest']
    assert recorder.to('guest', 'room_updated')[-1]['isReady'] is True


def test_join_errors(arena):
    room = _room(arena)
    for sid in ('guest', 'late'):
        arena.connect(sid)
    with pytest.raises(InvalidRoomCode):
        arena.rooms.join('guest', 'abc')
    with pytest.raises(RoomNotFound):
        arena.rooms.join('guest', 'ZZZZZZ')
    with pytest.raises(AlreadyInRoom):
        arena.rooms.join('host', room.room_id)
    arena.rooms.join('guest', room.room_id)
    with pytest.raises(RoomFull):
        arena.rooms.join('late', room.room_id)


def test_joining_a_room_leaves_the_queue(arena, recorder):
    room = _room(arena)
    arena.connect('guest')
    arena.connect('other')
    arena.queue.join('guest', 'hard')
    arena.queue.join('other', 'medium')
    recorder.clear()
    arena.rooms.join('guest', room.room_id)
    assert arena.queue.positions() == [('other', 'medium')]
    assert recorder.to('other', 'queue_update')[-1]['totalWaiting'] == 1


def test_host_leaving_hands_over_to_next_member(arena, recorder):
    room = _room(arena)
    arena.connect('guest')
    arena.rooms.join('guest', room.room_id)
    recorder.clear()

    arena.rooms.leave('host', room.room_id)
    assert arena.store.custom_rooms.get(room.room_id).host == 'guest'
    assert arena.sessions.room_of('host') is None
    assert recorder.to('guest', 'room_updated') == [{
        'roomId': room.room_id, 'host': 'guest', 'players': ['guest'], 'difficulty': 'easy', 'isReady': False,
    }]
    assert recorder.to('host') == []


def test_last_member_leaving_deletes_room(arena):
    room = _room(arena)
    arena.rooms.leave('host', room.room_id)
    assert arena.store.custom_rooms.get(room.room_id) is None


def test_leave_unknown_room_is_ignored(arena, recorder):
    arena.connect('guest')
    arena.rooms.leave('guest', 'NOPE00')
    assert recorder.events == []


def test_start_requires_host_and_two_players(arena):
    room = _room(arena)
    arena.connect('guest')
    with pytest.raises(RoomNotReady):
        arena.rooms.start(room.room_id, 'host')
    arena.rooms.join('guest', room.room_id)
    with pytest.raises(NotRoomHost):
        arena.rooms.start(room.room_id, 'guest')
    with pytest.raises(RoomNotFound):
        arena.rooms.start('NOPE00', 'host')


def test_start_hands_room_to_duel(arena, recorder):
    room = _room(arena, difficulty='hard')
    arena.connect('guest')
    arena.rooms.join('guest', room.room_id)
    problem_id = arena.rooms.start(room.room_id, 'host')

    assert arena.store.custom_rooms.get(room.room_id) is None
    state = arena.duel.state_of(room.room_id)
    assert state['problemId'] == problem_id == 'trapping-rain-water'
    assert state['submissions'] == {}
    for sid in ('host', 'guest'):
        assert arena.sessions.room_of(sid) == room.room_id
        [payload] = recorder.to(sid, 'room_match_start')
        assert payload['problem']['id'] == problem_id


def test_leaving_started_room_notifies_opponent(arena, recorder):
    room = _room(arena)
    arena.connect('guest')
    arena.rooms.join('guest', room.room_id)
    arena.rooms.start(room.room_id, 'host')
    recorder.clear()

    arena.rooms.leave('guest', room.room_id)
    assert recorder.to('host', 'opponent_left') == [{}]
    assert arena.sessions.room_of('guest') is None


def test_disconnect_from_lobby_reassigns_host(arena, recorder):
    room = _room(arena)
    arena.connect('guest')
    arena.rooms.join('guest', room.room_id)
    recorder.clear()
    arena.disconnect('host')
    assert arena.store.custom_rooms.get(room.room_id).players == ['guest']
    assert recorder.to('guest', 'room_updated')[-1]['host'] == 'guest'
    assert recorder.to('guest', 'opponent_left') == []


def test_sweep_removes_only_old_unstarted_rooms(arena, recorder):
    old = _room(arena, 'h1')
    fresh = _room(arena, 'h2')
    started = _room(arena, 'h3')
    arena.connect('g3')
    arena.rooms.join('g3', started.room_id)
    arena.rooms.start(started.room_id, 'h3')
    old.created_at -= 4000
    recorder.clear()

    assert arena.rooms.sweep_idle() == [old.room_id]
    assert arena.store.custom_rooms.get(old.room_id) is None
    assert arena.store.custom_rooms.get(fresh.room_id) is not None
    assert arena.duel.state_of(started.room_id) is not None
    assert arena.sessions.room_of('h1') is None
    assert recorder.to('h1', 'room_error') == [{'message': 'Room expired'}]


def test_sweeper_is_off_in_tests(flask_app):
    from codeduel.services.sweeper import start_room_sweeper
    assert start_room_sweeper(flask_app) is False


def test_sweep_once_expires_rooms_of_the_app(flask_app):
    from codeduel.services.sweeper import sweep_once
    arena = flask_app.extensions['codeduel']
    arena.connect('lonely')
    room = arena.rooms.create('lonely', 'any')
    assert sweep_once(flask_app) == []
    room.created_at -= 7200
    assert sweep_once(flask_app) == [room.room_id]
    assert arena.stats()['customRooms'] == 0
