from flask import current_app, request
from flask_socketio import emit

from codeduel import socketio
from codeduel.errors import DuelError, RoomError, RoomNotFound
from codeduel.validation import normalize_difficulty


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _arena():
    return current_app.extensions['codeduel']


def _room_id(data):
    room_id = (data or {}).get('roomId')
    return room_id if isinstance(room_id, str) else None


def make_emitter(namespace: str):
    """Build the send function services use to reach a single session."""
    def _emit(event, payload, to):
        # socketio.emit rather than emit: services may run outside the sender's context
        socketio.emit(event, payload, to=to, namespace=namespace)
    return _emit


def handle_connect(auth=None):
    sid = _get_sid()
    _arena().connect(sid)
    emit('connected', {'sessionId': sid})


def handle_disconnect(reason=None):
    _arena().disconnect(_get_sid())


# ---- Matchmaking ----

def handle_join_queue(data=None):
    difficulty = normalize_difficulty((data or {}).get('difficulty'))
    try:
        _arena().queue.join(_get_sid(), difficulty)
    except RoomError as exc:
        emit('room_error', {'message': exc.message})


def handle_leave_queue(data=None):
    _arena().queue.leave(_get_sid())


# ---- Custom rooms ----

def handle_create_room(data=None):
    difficulty = normalize_difficulty((data or {}).get('difficulty'))
    try:
        _arena().rooms.create(_get_sid(), difficulty)
    except RoomError as exc:
        emit('room_error', {'message': exc.message})


def handle_join_room(data=None):
    code = (data or {}).get('roomCode')
    try:
        _arena().rooms.join(_get_sid(), code)
    except RoomError as exc:
        current_app.logger.info(f"[room-join-rejected] sid={_get_sid()} code={code} reason={exc.message}")
        emit('room_error', {'message': exc.message})


def handle_leave_room(data=None):
    room_id = _room_id(data)
    if room_id:
        _arena().rooms.leave(_get_sid(), room_id)


def handle_start_room_match(data=None):
    try:
        room_id = _room_id(data)
        if not room_id:
            raise RoomNotFound()
        _arena().rooms.start(room_id, _get_sid())
    except RoomError as exc:
        emit('room_error', {'message': exc.message})


# ---- Duel ----

def handle_run_code(data=None):
    data = data or {}
    try:
        _arena().duel.run(_get_sid(), data.get('code'), data.get('language'))
    except DuelError as exc:
        emit('submission_error', {'message': exc.message})


def handle_submit_code(data=None):
    data = data or {}
    try:
        _arena().duel.submit(_get_sid(), data.get('code'), data.get('language'))
    except DuelError as exc:
        emit('submission_error', {'message': exc.message})


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('join_queue', handle_join_queue, namespace=namespace)
    socketio.on_event('leave_queue', handle_leave_queue, namespace=namespace)
    socketio.on_event('create_room', handle_create_room, namespace=namespace)
    socketio.on_event('join_room', handle_join_room, namespace=namespace)
    socketio.on_event('leave_room', handle_leave_room, namespace=namespace)
    socketio.on_event('start_room_match', handle_start_room_match, namespace=namespace)
    socketio.on_event('run_code', handle_run_code, namespace=namespace)
    socketio.on_event('submit_code', handle_submit_code, namespace=namespace)
