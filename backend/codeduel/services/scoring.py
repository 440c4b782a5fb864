from typing import Sequence

from codeduel.models import Submission


def _rank(sub: Submission):
    has_results = sub.test_results is not None
    passed = sub.test_results.passed if has_results else 0
    # Lower sorts first: results present, more passed, earlier submit, then sid
    return (not has_results, -passed, sub.submit_time, sub.sid)


def determine_winner(submissions: Sequence[Submission]) -> str:
    """Return the sid of the winning submission.

    Submissions with results beat submissions without; more passed test
    cases wins; equal passed counts go to the earlier submit time; two
    failed executions also go to the earlier submitter.
    """
    if not submissions:
        raise ValueError('no submissions to rank')
    return min(submissions, key=_rank).sid
