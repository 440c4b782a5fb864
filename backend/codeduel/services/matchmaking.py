import random
from typing import Callable, Optional

from codeduel.errors import AlreadyInRoom
from codeduel.models import ANY_DIFFICULTY, QueueEntry
from codeduel.problems import problem_for_difficulty
from codeduel.services.sessions import SessionDirectory
from codeduel.state import DuelStore, Outbox


def estimated_wait(index: int) -> int:
    """Seconds a session at 0-based ``index`` can expect to wait."""
    return max(10, 30 - index * 5)


def resolve_difficulty(joiner: QueueEntry, opponent: QueueEntry) -> str:
    if joiner.difficulty != ANY_DIFFICULTY:
        return joiner.difficulty
    return opponent.difficulty


class MatchmakingQueue:
    """Quick-match queue.

    Entries are scanned in join order, so a joiner is paired with the
    earliest-joined compatible entry. Two entries are compatible when
    either prefers ``any`` or both prefer the same difficulty.
    """

    def __init__(self, store: DuelStore, sessions: SessionDirectory, duel, emit: Callable,
                 logger=None, rng=random):
        self.store = store
        self.sessions = sessions
        self.duel = duel
        self.emit = emit
        self.logger = logger
        self.rng = rng

    def join(self, sid: str, difficulty: str) -> Optional[str]:
        """Queue ``sid`` and try to pair it at once. Returns the new room id on a match."""
        outbox = Outbox()
        room_id = None
        with self.store.atomic() as s:
            if not self.sessions.is_registered(sid) or s.queue_index(sid) >= 0:
                return None
            if self.sessions.room_of(sid) in s.custom_rooms:
                raise AlreadyInRoom('Leave your room before joining the queue')
            entry = QueueEntry(sid, difficulty)
            s.queue.append(entry)
            if self.logger:
                self.logger.info(f"[queue-join] sid={sid} difficulty={difficulty} size={len(s.queue)}")
            room_id = self._try_match(entry, outbox)
            self._queue_updates(outbox)
        outbox.flush(self.emit)
        return room_id

    def leave(self, sid: str) -> bool:
        outbox = Outbox()
        with self.store.atomic():
            removed = self.drop(sid, outbox)
        outbox.flush(self.emit)
        return removed

    # Disconnect cascade uses the same path as an explicit leave
    remove = leave

    def drop(self, sid: str, outbox: Outbox) -> bool:
        """Remove ``sid`` from the queue; the caller holds the store lock."""
        if not self.store.remove_queue_entries(sid):
            return False
        if self.logger:
            self.logger.info(f"[queue-leave] sid={sid} size={len(self.store.queue)}")
        self._queue_updates(outbox)
        return True

    def positions(self):
        with self.store.atomic() as s:
            return [(e.sid, e.difficulty) for e in s.queue]

    def _try_match(self, entry: QueueEntry, outbox: Outbox) -> Optional[str]:
        s = self.store
        opponent = next(
            (other for other in s.queue if other.sid != entry.sid and entry.accepts(other)),
            None,
        )
        if opponent is None:
            return None
        s.remove_queue_entries(entry.sid, opponent.sid)

        difficulty = resolve_difficulty(entry, opponent)
        problem = problem_for_difficulty(difficulty, self.rng)
        room_id = f"room_{entry.sid}_{opponent.sid}"

        # A session belongs to one room at a time; leaving an old duel tells its
        # opponent, unless that opponent is the one being paired again
        previous = self.sessions.room_of(entry.sid)
        rematch = previous is not None and previous == self.sessions.room_of(opponent.sid)
        for sid in (entry.sid, opponent.sid):
            self.duel.release(sid, outbox, notify=not rematch)
        self.duel.open(room_id, problem.id)
        self.sessions.bind(entry.sid, room_id)
        self.sessions.bind(opponent.sid, room_id)

        problem_data = problem.to_dict()
        outbox.add('match_found', {'roomId': room_id, 'opponentId': opponent.sid, 'problem': problem_data}, entry.sid)
        outbox.add('match_found', {'roomId': room_id, 'opponentId': entry.sid, 'problem': problem_data}, opponent.sid)
        if self.logger:
            self.logger.info(f"[match-created] room={room_id} difficulty={difficulty} problem={problem.id}")
        return room_id

    def _queue_updates(self, outbox: Outbox) -> None:
        total = len(self.store.queue)
        for idx, entry in enumerate(self.store.queue):
            outbox.add('queue_update', {
                'position': idx + 1,
                'totalWaiting': total,
                'estimatedWaitTime': estimated_wait(idx),
            }, entry.sid)
