from codeduel.services.rate_limit import SubmissionRateGovernor


def test_sixth_submission_in_window_is_rejected(clock):
    governor = SubmissionRateGovernor(limit=5, window_sec=60, clock=clock)
    for _ in range(5):
        assert governor.check('alice')
        clock.advance(1)
    assert not governor.check('alice')
    assert governor.remaining('alice') == 0


def test_capacity_returns_as_timestamps_age_out(clock):
    governor = SubmissionRateGovernor(limit=5, window_sec=60, clock=clock)
    for _ in range(5):
        assert governor.check('alice')
        clock.advance(10)
    # first accepted at t=0, now t=50
    assert not governor.check('alice')
    clock.advance(9.5)
    assert not governor.check('alice')
    clock.advance(0.5)  # t=60: the t=0 entry leaves the window
    assert governor.check('alice')
    assert not governor.check('alice')


def test_rejections_do_not_extend_the_window(clock):
    governor = SubmissionRateGovernor(limit=1, window_sec=60, clock=clock)
    assert governor.check('alice')
    clock.advance(30)
    assert not governor.check('alice')
    clock.advance(30)
    assert governor.check('alice')


def test_sessions_are_independent(clock):
    governor = SubmissionRateGovernor(limit=1, window_sec=60, clock=clock)
    assert governor.check('alice')
    assert governor.check('bob')
    assert not governor.check('alice')


def test_forget_clears_history(clock):
    governor = SubmissionRateGovernor(limit=1, window_sec=60, clock=clock)
    assert governor.check('alice')
    governor.forget('alice')
    assert governor.remaining('alice') == 1
    assert governor.check('alice')
