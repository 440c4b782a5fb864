import time
from typing import Any, Dict, List, Optional

DIFFICULTIES = ('easy', 'medium', 'hard')
ANY_DIFFICULTY = 'any'


class TestCase:
    __test__ = False  # not a pytest class

    def __init__(self, input: str, expected_output: str, is_hidden: bool = False):
        self.input = input
        self.expected_output = expected_output
        self.is_hidden = is_hidden

    def to_dict(self):
        return {
            'input': self.input,
            'expectedOutput': self.expected_output,
            'isHidden': self.is_hidden,
        }


class Problem:
    def __init__(self, id: str, title: str, difficulty: str, description: str,
                 examples: List[Dict[str, str]], constraints: List[str],
                 test_cases: List[TestCase], starter_code: Dict[str, str]):
        self.id = id
        self.title = title
        self.difficulty = difficulty
        self.description = description
        self.examples = examples
        self.constraints = constraints
        self.test_cases = test_cases
        self.starter_code = starter_code

    @property
    def visible_test_cases(self) -> List[TestCase]:
        return [tc for tc in self.test_cases if not tc.is_hidden]

    def to_dict(self, include_hidden=False):
        cases = self.test_cases if include_hidden else self.visible_test_cases
        return {
            'id': self.id,
            'title': self.title,
            'difficulty': self.difficulty,
            'description': self.description,
            'examples': list(self.examples),
            'constraints': list(self.constraints),
            'testCases': [tc.to_dict() for tc in cases],
            'starterCode': dict(self.starter_code),
        }


class TestResults:
    """Outcome of running one piece of code against a list of test cases."""
    __test__ = False

    def __init__(self, results: List[Dict[str, Any]]):
        self.results = results

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r['passed'])

    @property
    def total(self) -> int:
        return len(self.results)

    def to_dict(self, redact_hidden=False):
        results = []
        for r in self.results:
            item = dict(r)
            if redact_hidden and item.get('hidden'):
                item['input'] = ''
                item['expected'] = ''
                item['actual'] = ''
            results.append(item)
        return {'passed': self.passed, 'total': self.total, 'results': results}


class QueueEntry:
    def __init__(self, sid: str, difficulty: str, joined_at: Optional[float] = None):
        self.sid = sid
        self.difficulty = difficulty
        self.joined_at = joined_at if joined_at is not None else time.time()

    def accepts(self, other: 'QueueEntry') -> bool:
        return (
            self.difficulty == ANY_DIFFICULTY
            or other.difficulty == ANY_DIFFICULTY
            or self.difficulty == other.difficulty
        )

    def __repr__(self):
        return f'<QueueEntry {self.sid} {self.difficulty}>'


class CustomRoom:
    capacity = 2

    def __init__(self, room_id: str, host: str, difficulty: str, created_at: Optional[float] = None):
        self.room_id = room_id
        self.host = host
        self.players = [host]
        self.difficulty = difficulty
        self.created_at = created_at if created_at is not None else time.time()

    @property
    def is_full(self) -> bool:
        return len(self.players) >= self.capacity

    def to_dict(self):
        return {
            'roomId': self.room_id,
            'host': self.host,
            'players': list(self.players),
            'difficulty': self.difficulty,
            'isReady': len(self.players) == self.capacity,
        }


class Submission:
    def __init__(self, sid: str, code: str, language: str, submit_time: Optional[float] = None):
        self.sid = sid
        self.code = code
        self.language = language
        self.test_results: Optional[TestResults] = None
        self.submit_time = submit_time if submit_time is not None else time.time()
        # Set once the judge call has returned or failed
        self.scored = False

    def to_dict(self):
        return {
            'socketId': self.sid,
            'code': self.code,
            'language': self.language,
            'testResults': self.test_results.to_dict() if self.test_results else None,
            'submitTime': int(self.submit_time * 1000),
        }
