import random
import string
import time
from typing import Callable, Container, List, Optional

from codeduel.errors import (
    AlreadyInRoom,
    NotRoomHost,
    RoomFull,
    RoomNotFound,
    RoomNotReady,
)
from codeduel.models import CustomRoom
from codeduel.problems import problem_for_difficulty
from codeduel.services.sessions import SessionDirectory
from codeduel.state import DuelStore, Outbox
from codeduel.validation import validate_room_code

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits
ROOM_CODE_LENGTH = 6


def generate_room_code(taken: Container[str], rng=random, length: int = ROOM_CODE_LENGTH) -> str:
    """Generate a short room code not present in ``taken``."""
    while True:
        code = ''.join(rng.choices(ROOM_CODE_ALPHABET, k=length))
        if code not in taken:
            return code


class RoomRegistry:
    """Host-owned custom rooms, from creation until the match starts.

    Once started, a room leaves the registry; the duel coordinator keeps
    its problem and submissions under the same id.
    """

    def __init__(self, store: DuelStore, sessions: SessionDirectory, queue, duel, emit: Callable,
                 logger=None, idle_timeout_sec: int = 3600, rng=random):
        self.store = store
        self.sessions = sessions
        self.queue = queue
        self.duel = duel
        self.emit = emit
        self.logger = logger
        self.idle_timeout_sec = idle_timeout_sec
        self.rng = rng

    def create(self, host: str, difficulty: str) -> Optional[CustomRoom]:
        outbox = Outbox()
        with self.store.atomic() as s:
            if not self.sessions.is_registered(host):
                return None
            if self.sessions.room_of(host) in s.custom_rooms:
                raise AlreadyInRoom('Leave your current room first')
            self._release_other_memberships(host, outbox)
            # Started rooms keep their code as duel id, so those are taken too
            taken = set(s.custom_rooms) | set(s.submissions)
            room = CustomRoom(generate_room_code(taken, self.rng), host, difficulty)
            s.custom_rooms[room.room_id] = room
            self.sessions.bind(host, room.room_id)
            outbox.add('room_created', room.to_dict(), host)
            if self.logger:
                self.logger.info(f"[room-create] room={room.room_id} host={host} difficulty={difficulty}")
        outbox.flush(self.emit)
        return room

    def join(self, sid: str, code: str) -> Optional[CustomRoom]:
        validate_room_code(code)
        outbox = Outbox()
        with self.store.atomic() as s:
            if not self.sessions.is_registered(sid):
                return None
            room = s.custom_rooms.get(code)
            if room is None:
                raise RoomNotFound()
            if room.is_full:
                raise RoomFull()
            if sid in room.players:
                raise AlreadyInRoom()
            if self.sessions.room_of(sid) in s.custom_rooms:
                raise AlreadyInRoom('Leave your current room first')
            self._release_other_memberships(sid, outbox)
            room.players.append(sid)
            self.sessions.bind(sid, code)
            payload = room.to_dict()
            outbox.add('room_joined', payload, sid)
            self._roster(room, outbox)
            if self.logger:
                self.logger.info(f"[room-join] room={code} sid={sid} players={len(room.players)}/{room.capacity}")
        outbox.flush(self.emit)
        return room

    def leave(self, sid: str, room_id: str) -> None:
        outbox = Outbox()
        with self.store.atomic() as s:
            room = s.custom_rooms.get(room_id)
            if room is None:
                # Already started: leaving means walking out of the duel
                if room_id and self.sessions.room_of(sid) == room_id:
                    self.duel.release(sid, outbox)
            elif sid in room.players:
                self._remove_member(room, sid, outbox)
                if self.sessions.room_of(sid) == room_id:
                    self.sessions.unbind(sid)
        outbox.flush(self.emit)

    def remove_member(self, sid: str) -> None:
        """Drop ``sid`` from whichever not-yet-started room it sits in."""
        outbox = Outbox()
        with self.store.atomic() as s:
            room = s.custom_rooms.get(self.sessions.room_of(sid) or '')
            if room is not None and sid in room.players:
                self._remove_member(room, sid, outbox)
                self.sessions.unbind(sid)
        outbox.flush(self.emit)

    def start(self, room_id: str, requester: str) -> Optional[str]:
        outbox = Outbox()
        with self.store.atomic() as s:
            room = s.custom_rooms.get(room_id)
            if room is None:
                raise RoomNotFound()
            if room.host != requester:
                raise NotRoomHost()
            if len(room.players) != room.capacity:
                raise RoomNotReady()
            problem = problem_for_difficulty(room.difficulty, self.rng)
            self.duel.open(room_id, problem.id)
            for sid in room.players:
                outbox.add('room_match_start', {'problem': problem.to_dict()}, sid)
            del s.custom_rooms[room_id]
            if self.logger:
                self.logger.info(f"[room-start] room={room_id} problem={problem.id}")
        outbox.flush(self.emit)
        return problem.id

    def sweep_idle(self, now: Optional[float] = None) -> List[str]:
        """Delete rooms that were created too long ago and never started."""
        now = time.time() if now is None else now
        outbox = Outbox()
        expired = []
        with self.store.atomic() as s:
            for room_id, room in list(s.custom_rooms.items()):
                if now - room.created_at <= self.idle_timeout_sec:
                    continue
                del s.custom_rooms[room_id]
                expired.append(room_id)
                for sid in room.players:
                    if self.sessions.room_of(sid) == room_id:
                        self.sessions.unbind(sid)
                    outbox.add('room_error', {'message': 'Room expired'}, sid)
                if self.logger:
                    self.logger.info(f"[room-expire] room={room_id} age={int(now - room.created_at)}s")
        outbox.flush(self.emit)
        return expired

    def _release_other_memberships(self, sid: str, outbox: Outbox) -> None:
        self.queue.drop(sid, outbox)
        self.duel.release(sid, outbox)

    def _remove_member(self, room: CustomRoom, sid: str, outbox: Outbox) -> None:
        room.players.remove(sid)
        if not room.players:
            del self.store.custom_rooms[room.room_id]
            if self.logger:
                self.logger.info(f"[room-delete] room={room.room_id} empty")
            return
        if room.host == sid:
            room.host = room.players[0]
            if self.logger:
                self.logger.info(f"[room-host] room={room.room_id} host={room.host}")
        self._roster(room, outbox)

    def _roster(self, room: CustomRoom, outbox: Outbox) -> None:
        payload = room.to_dict()
        for sid in room.players:
            outbox.add('room_updated', payload, sid)
