"""Duel coordination: Run, Submit and the one-time reveal.

A Submit records a placeholder, releases the store lock, waits on the
judge, then takes the lock once more to attach results and decide the
reveal. Anything can happen to the room while the judge runs (the
opponent submits, either side disconnects), so the second step checks
the room again and gives up quietly if it has gone.
"""
from typing import Any, Callable, Dict, Optional

from codeduel.errors import MatchFinished, ProblemNotFound, RateLimited
from codeduel.models import Submission, TestResults
from codeduel.problems import get_problem
from codeduel.services.judge import run_test_cases
from codeduel.services.rate_limit import SubmissionRateGovernor
from codeduel.services.scoring import determine_winner
from codeduel.services.sessions import SessionDirectory
from codeduel.state import DuelStore, Outbox
from codeduel.validation import validate_code, validate_language


class DuelCoordinator:
    def __init__(self, store: DuelStore, sessions: SessionDirectory, governor: SubmissionRateGovernor,
                 judge, emit: Callable, logger=None, limits: Optional[Dict[str, Any]] = None, max_code_length: int = 50000):
        self.store = store
        self.sessions = sessions
        self.governor = governor
        self.judge = judge
        self.emit = emit
        self.logger = logger
        self.limits = limits
        self.max_code_length = max_code_length

    def open(self, room_id: str, problem_id: str) -> None:
        self.store.open_duel(room_id, problem_id)

    def state_of(self, room_id: str) -> Optional[Dict[str, Any]]:
        with self.store.atomic() as s:
            if room_id not in s.submissions:
                return None
            return {
                'problemId': s.room_problems.get(room_id),
                'submissions': dict(s.submissions[room_id]),
                'revealed': room_id in s.revealed,
            }

    def release(self, sid: str, outbox: Outbox, notify: bool = True) -> bool:
        """Unbind ``sid`` from its duel; the caller holds the store lock.

        The remaining member hears ``opponent_left`` unless ``notify`` is
        false. Submissions stay so they can still be inspected; the duel is
        purged once nobody is bound to it.
        """
        s = self.store
        room_id = self.sessions.room_of(sid)
        if room_id is None or room_id not in s.submissions:
            return False
        self.sessions.unbind(sid)
        remaining = self.sessions.members_of(room_id)
        if notify:
            for other in remaining:
                outbox.add('opponent_left', {}, other)
        if not remaining:
            s.close_duel(room_id)
        if self.logger:
            self.logger.info(f"[duel-leave] room={room_id} sid={sid} remaining={len(remaining)}")
        return True

    def abandon(self, sid: str) -> None:
        outbox = Outbox()
        with self.store.atomic():
            self.release(sid, outbox)
        outbox.flush(self.emit)

    def _validate(self, code, language) -> None:
        validate_code(code, self.max_code_length)
        validate_language(language)

    def run(self, sid: str, code: str, language: str) -> Optional[TestResults]:
        """Run against the visible test cases only; nothing is recorded."""
        self._validate(code, language)
        with self.store.atomic() as s:
            room_id = self.sessions.room_of(sid)
            problem_id = s.room_problems.get(room_id) if room_id else None
            if problem_id is None:
                return None
        problem = get_problem(problem_id)
        if problem is None:
            raise ProblemNotFound()
        results = run_test_cases(self.judge, code, language, problem.visible_test_cases,
                                 self.limits, self.logger)
        self.emit('run_results', results.to_dict(), sid)
        return results

    def submit(self, sid: str, code: str, language: str) -> Optional[bool]:
        """Score ``code`` on every test case. Returns True if this call revealed the duel."""
        self._validate(code, language)
        outbox = Outbox()
        with self.store.atomic() as s:
            room_id = self.sessions.room_of(sid)
            subs = s.submissions.get(room_id) if room_id else None
            if subs is None:
                return None
            problem = get_problem(s.room_problems.get(room_id))
            if problem is None:
                raise ProblemNotFound()
            if room_id in s.revealed:
                raise MatchFinished()
            if not self.governor.check(sid):
                raise RateLimited()
            submission = Submission(sid, code, language)
            subs[sid] = submission
            outbox.add('testing_code', {'message': 'Running test cases...'}, sid)
            for other in self.sessions.members_of(room_id):
                if other != sid:
                    outbox.add('opponent_submitted', {}, other)
        outbox.flush(self.emit)
        if self.logger:
            self.logger.info(f"[submit] room={room_id} sid={sid} language={language} "
                             f"budget={self.governor.remaining(sid)}")

        results = None
        try:
            results = run_test_cases(self.judge, code, language, problem.test_cases,
                                     self.limits, self.logger)
        except Exception:
            if self.logger:
                self.logger.exception(f"[submit-error] room={room_id} sid={sid}")
            self.emit('submission_error', {'message': 'Failed to run test cases'}, sid)
        return self._score(room_id, submission, results)

    def _score(self, room_id: str, submission: Submission, results: Optional[TestResults]) -> bool:
        outbox = Outbox()
        revealed = False
        with self.store.atomic() as s:
            subs = s.submissions.get(room_id)
            if subs is None:
                # Both players left while the judge was running
                return False
            submission.test_results = results
            submission.scored = True
            if results is not None:
                outbox.add('test_results', results.to_dict(redact_hidden=True), submission.sid)
            if (
                subs.get(submission.sid) is submission
                and room_id not in s.revealed
                and len(subs) == 2
                and all(sub.scored for sub in subs.values())
            ):
                s.revealed.add(room_id)
                revealed = True
                solutions = sorted(subs.values(), key=lambda sub: sub.submit_time)
                winner = determine_winner(solutions)
                payload = {
                    'solutions': [sub.to_dict() for sub in solutions],
                    'winner': winner,
                    'problem': get_problem(s.room_problems[room_id]).to_dict(include_hidden=True),
                }
                for sid in self.sessions.members_of(room_id):
                    outbox.add('reveal_solutions', payload, sid)
                if self.logger:
                    self.logger.info(f"[reveal] room={room_id} winner={winner}")
        outbox.flush(self.emit)
        return revealed
