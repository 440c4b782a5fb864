"""Client for the external Judge0-compatible code execution service.

``execute`` never raises: transport errors, timeouts and malformed
responses all come back as an "Internal Error" result so a broken judge
costs one test run, not a whole duel.
"""
import logging
from typing import Any, Dict, Iterable, Optional

import requests

from codeduel.models import TestCase, TestResults

log = logging.getLogger(__name__)

LANGUAGE_IDS = {
    'javascript': 63,  # Node.js
    'python': 71,      # Python 3
    'java': 62,        # Java
}

STATUS_ACCEPTED = 3
STATUS_INTERNAL_ERROR = 13

DEFAULT_LIMITS = {'cpuTime': 5, 'wallTime': 10, 'memory': 256000}


def failure_result(message: str, stderr: Optional[str] = None) -> Dict[str, Any]:
    return {
        'statusId': STATUS_INTERNAL_ERROR,
        'statusDescription': 'Internal Error',
        'stdout': None,
        'stderr': stderr,
        'compileOutput': None,
        'timeMs': 0,
        'memoryKb': 0,
        'message': message,
    }


def _time_ms(value) -> int:
    try:
        return int(round(float(value) * 1000))
    except (TypeError, ValueError):
        return 0


class Judge0Client:
    def __init__(self, base_url: str, timeout: float = 15.0, session: Optional[requests.Session] = None,
                 logger=None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logger or log

    def execute(self, code: str, language_id: int, stdin: str, limits: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        limits = {**DEFAULT_LIMITS, **(limits or {})}
        body = {
            'source_code': code,
            'language_id': language_id,
            'stdin': stdin,
            'cpu_time_limit': limits['cpuTime'],
            'wall_time_limit': limits['wallTime'],
            'memory_limit': limits['memory'],
            'max_processes_and_or_threads': 60,
            'enable_network': False,
        }
        try:
            resp = self.session.post(
                f"{self.base_url}/submissions",
                params={'base64_encoded': 'false', 'wait': 'true'},
                json=body,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.HTTPError as exc:
            detail = {}
            try:
                detail = exc.response.json() or {}
            except ValueError:
                pass
            if not isinstance(detail, dict):
                detail = {}
            self.logger.warning(f"[judge-error] status={exc.response.status_code} detail={detail}")
            return failure_result(detail.get('message') or str(exc), detail.get('stderr'))
        except (requests.RequestException, ValueError) as exc:
            self.logger.warning(f"[judge-error] {exc}")
            return failure_result(str(exc))

        if not isinstance(data, dict):
            return failure_result('Malformed judge response')
        self.logger.debug(f"[judge-response] {data}")
        status = data.get('status')
        if not isinstance(status, dict):
            status = {}
        return {
            'statusId': status.get('id', STATUS_INTERNAL_ERROR),
            'statusDescription': status.get('description', 'Internal Error'),
            'stdout': data.get('stdout'),
            'stderr': data.get('stderr'),
            'compileOutput': data.get('compile_output'),
            'timeMs': _time_ms(data.get('time')),
            'memoryKb': data.get('memory') or 0,
            'message': data.get('message'),
        }

    def is_healthy(self) -> bool:
        try:
            resp = self.session.get(f"{self.base_url}/about", timeout=5)
        except requests.RequestException as exc:
            self.logger.warning(f"[judge-health] unreachable: {exc}")
            return False
        return resp.status_code == 200


def _normalize(text: Optional[str]) -> str:
    return (text or '').strip().replace('\r\n', '\n')


def run_test_cases(judge, code: str, language: str, test_cases: Iterable[TestCase],
                   limits: Optional[Dict[str, Any]] = None, logger=None) -> TestResults:
    """Run ``code`` against each test case in order and collect the verdicts."""
    logger = logger or log
    language_id = LANGUAGE_IDS[language]
    results = []
    for idx, tc in enumerate(test_cases, start=1):
        expected = _normalize(tc.expected_output)
        try:
            result = judge.execute(code, language_id, tc.input, limits)
        except Exception as exc:
            logger.exception(f"[judge-case] case={idx} failed")
            results.append({
                'input': tc.input,
                'expected': expected,
                'actual': '',
                'passed': False,
                'error': str(exc),
                'time': 0,
                'memory': 0,
                'status': 'Error',
                'hidden': tc.is_hidden,
            })
            continue
        actual = _normalize(result.get('stdout'))
        passed = result.get('statusId') == STATUS_ACCEPTED and actual == expected
        results.append({
            'input': tc.input,
            'expected': expected,
            'actual': actual,
            'passed': passed,
            'error': result.get('stderr') or result.get('compileOutput') or result.get('message') or None,
            'time': result.get('timeMs', 0),
            'memory': result.get('memoryKb', 0),
            'status': result.get('statusDescription'),
            'hidden': tc.is_hidden,
        })
    outcome = TestResults(results)
    logger.info(f"[judge-run] language={language} passed={outcome.passed}/{outcome.total}")
    return outcome
