"""In-memory state shared by the duel services.

Nothing is persisted. A single :class:`DuelStore` is created per app and
handed to every service; services never keep their own copies of
membership data.

All multi-step mutations go through ``store.atomic()``. The lock is
re-entrant so a service holding it may call into another service that
takes it again. Judge calls must never happen while it is held.
"""
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from codeduel.models import CustomRoom, QueueEntry, Submission


class DuelStore:
    def __init__(self):
        self._lock = threading.RLock()
        # sid -> bound room id (None while unbound)
        self.sessions: Dict[str, Optional[str]] = {}
        # join order is match order
        self.queue: List[QueueEntry] = []
        self.custom_rooms: Dict[str, CustomRoom] = {}
        self.room_problems: Dict[str, str] = {}
        self.submissions: Dict[str, Dict[str, Submission]] = {}
        self.revealed: Set[str] = set()

    @contextmanager
    def atomic(self):
        with self._lock:
            yield self

    # ---- sessions ----

    def add_session(self, sid: str) -> bool:
        with self._lock:
            if sid in self.sessions:
                return False
            self.sessions[sid] = None
            return True

    def drop_session(self, sid: str) -> bool:
        with self._lock:
            if sid not in self.sessions:
                return False
            del self.sessions[sid]
            return True

    def set_room(self, sid: str, room_id: Optional[str]) -> None:
        with self._lock:
            if sid in self.sessions:
                self.sessions[sid] = room_id

    def room_of(self, sid: str) -> Optional[str]:
        with self._lock:
            return self.sessions.get(sid)

    def members_of(self, room_id: str) -> List[str]:
        with self._lock:
            return [sid for sid, rid in self.sessions.items() if rid == room_id]

    # ---- queue ----

    def queue_index(self, sid: str) -> int:
        with self._lock:
            for idx, entry in enumerate(self.queue):
                if entry.sid == sid:
                    return idx
            return -1

    def remove_queue_entries(self, *sids: str) -> List[QueueEntry]:
        with self._lock:
            removed = [e for e in self.queue if e.sid in sids]
            if removed:
                self.queue = [e for e in self.queue if e.sid not in sids]
            return removed

    # ---- duels ----

    def open_duel(self, room_id: str, problem_id: str) -> None:
        with self._lock:
            current = self.room_problems.get(room_id)
            if current is not None and current != problem_id:
                raise ValueError(f'room {room_id} already has problem {current}')
            self.room_problems[room_id] = problem_id
            self.submissions.setdefault(room_id, {})

    def close_duel(self, room_id: str) -> None:
        with self._lock:
            self.room_problems.pop(room_id, None)
            self.submissions.pop(room_id, None)
            self.revealed.discard(room_id)

    def counts(self) -> Dict[str, int]:
        with self._lock:
            return {
                'sessions': len(self.sessions),
                'queued': len(self.queue),
                'customRooms': len(self.custom_rooms),
                'activeDuels': len(self.submissions),
            }


class Outbox:
    """Socket events collected while the store lock is held, sent after release."""

    def __init__(self):
        self.events: List[Tuple[str, Any, str]] = []

    def add(self, event: str, payload: Any, to: str) -> None:
        self.events.append((event, payload, to))

    def flush(self, emit: Callable[[str, Any, str], None]) -> None:
        events, self.events = self.events, []
        for event, payload, to in events:
            emit(event, payload, to)
