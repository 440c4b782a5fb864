"""Duel domain services.

This package holds the matchmaking, room and duel logic. Socket handlers
and HTTP routes call into an :class:`Arena`, which wires the services to
one shared store so transport concerns stay out of the game rules.
"""
import random
from typing import Any, Callable, Dict, Optional

from codeduel.services.duel import DuelCoordinator
from codeduel.services.judge import Judge0Client
from codeduel.services.matchmaking import MatchmakingQueue
from codeduel.services.rate_limit import SubmissionRateGovernor
from codeduel.services.rooms import RoomRegistry
from codeduel.services.sessions import SessionDirectory
from codeduel.state import DuelStore


class Arena:
    def __init__(self, config: Dict[str, Any], emit: Callable, judge=None, logger=None,
                 store: Optional[DuelStore] = None, rng=random, clock=None):
        self.store = store or DuelStore()
        self.emit = emit
        self.logger = logger
        self.judge = judge or Judge0Client(
            config.get('JUDGE0_URL', 'http://localhost:2358'),
            timeout=float(config.get('JUDGE_TIMEOUT_SEC', 15)),
            logger=logger,
        )
        governor_kwargs = {'clock': clock} if clock else {}
        self.governor = SubmissionRateGovernor(
            limit=int(config.get('SUBMISSION_LIMIT', 5)),
            window_sec=float(config.get('SUBMISSION_WINDOW_SEC', 60)),
            **governor_kwargs,
        )
        self.sessions = SessionDirectory(self.store, logger)
        self.duel = DuelCoordinator(
            self.store, self.sessions, self.governor, self.judge, emit, logger,
            limits={
                'cpuTime': config.get('JUDGE_CPU_TIME_LIMIT', 5),
                'wallTime': config.get('JUDGE_WALL_TIME_LIMIT', 10),
                'memory': config.get('JUDGE_MEMORY_LIMIT', 256000),
            },
            max_code_length=int(config.get('MAX_CODE_LENGTH', 50000)),
        )
        self.queue = MatchmakingQueue(self.store, self.sessions, self.duel, emit, logger, rng)
        self.rooms = RoomRegistry(
            self.store, self.sessions, self.queue, self.duel, emit, logger,
            idle_timeout_sec=int(config.get('ROOM_IDLE_TIMEOUT_SEC', 3600)),
            rng=rng,
        )
        # Disconnect cascade, in order
        self.sessions.on_teardown(self.queue.remove)
        self.sessions.on_teardown(self.rooms.remove_member)
        self.sessions.on_teardown(self.duel.abandon)
        self.sessions.on_teardown(self.governor.forget)

    def connect(self, sid: str) -> None:
        self.sessions.register(sid)

    def disconnect(self, sid: str) -> None:
        self.sessions.teardown(sid)

    def stats(self) -> Dict[str, int]:
        return self.store.counts()
