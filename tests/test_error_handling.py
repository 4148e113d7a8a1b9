import pytest

from aideploy.util.error_handling import PollPolicy, PollTimeout, fallback, poll_until


def test_policy_defaults():
    policy = PollPolicy()
    assert policy.max_attempts == 50
    assert policy.interval == 6.0
    assert policy.delay(1) == policy.delay(10) == 6.0


def test_policy_backoff_is_capped():
    policy = PollPolicy(max_attempts=5, interval=1.0, backoff=2.0, max_interval=3.0)
    assert [policy.delay(m) for m in range(1, 5)] == [1.0, 2.0, 3.0, 3.0]


@pytest.mark.parametrize("kwargs", [
    {"max_attempts": 0},
    {"interval": -1},
    {"backoff": 0.5},
])
def test_policy_rejects_bad_values(kwargs):
    with pytest.raises(ValueError):
        PollPolicy(**kwargs)


def test_poll_until_immediate_success_does_not_sleep(fake_sleep):
    assert poll_until(lambda: True, PollPolicy(), sleep=fake_sleep) == 1
    assert fake_sleep.calls == []


def test_poll_until_succeeds_later(fake_sleep):
    answers = iter([False, False, True])
    attempt = poll_until(lambda: next(answers), PollPolicy(interval=2.0), sleep=fake_sleep)
    assert attempt == 3
    assert fake_sleep.calls == [2.0, 2.0]


def test_poll_until_times_out(fake_sleep):
    checks = []

    def check():
        checks.append(1)
        return False

    with pytest.raises(PollTimeout) as exc:
        poll_until(check, PollPolicy(max_attempts=4, interval=1.0), sleep=fake_sleep, label="thing")
    assert len(checks) == 4
    assert fake_sleep.calls == [1.0, 1.0, 1.0]
    assert exc.value.attempts == 4
    assert "thing" in str(exc.value)


def test_poll_until_first_attempt_counts_against_budget(fake_sleep):
    checks = []

    def check():
        checks.append(1)
        return False

    with pytest.raises(PollTimeout):
        poll_until(check, PollPolicy(max_attempts=3), sleep=fake_sleep, first_attempt=2)
    assert len(checks) == 2
    assert len(fake_sleep.calls) == 2


def test_fallback_primary_succeeds():
    alternate_calls = []
    result = fallback(lambda: "primary", lambda: alternate_calls.append(1))
    assert result == ("primary", False)
    assert alternate_calls == []


def test_fallback_runs_alternate_once():
    calls = []

    def primary():
        calls.append("primary")
        raise RuntimeError("boom")

    def alternate():
        calls.append("alternate")
        return "alt"

    assert fallback(primary, alternate) == ("alt", True)
    assert calls == ["primary", "alternate"]


def test_fallback_alternate_error_propagates():
    def boom():
        raise KeyError("nope")

    with pytest.raises(KeyError):
        fallback(boom, boom)


def test_fallback_unhandled_error_skips_alternate():
    def primary():
        raise TypeError("not handled")

    with pytest.raises(TypeError):
        fallback(primary, lambda: "alt", handled=(ValueError,))


def test_fallback_requires_callables():
    with pytest.raises(TypeError):
        fallback("primary", lambda: None)
