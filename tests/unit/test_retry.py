"""
Test retry policies and backoff behavior.
"""

import threading
from unittest.mock import Mock

import pytest

from soapy_cake.recovery import ExponentialBackoff


class Transient(Exception):
    pass


class Fatal(Exception):
    pass


def flaky(failures, exc=Transient, result="ok"):
    """A callable failing ``failures`` times before returning ``result``."""
    return Mock(side_effect=[exc(f"attempt {i}") for i in range(failures)] + [result])


class TestExponentialBackoff:

    def test_delays_grow_by_factor(self):
        policy = ExponentialBackoff(max_attempts=5, base_delay=1.0, factor=3.0)
        assert [policy.calculate_delay(n) for n in range(1, 5)] == [1.0, 3.0, 9.0, 27.0]

    def test_succeeds_after_failures(self):
        sleep = Mock()
        policy = ExponentialBackoff(max_attempts=5, retry_on=(Transient,), sleep=sleep)
        func = flaky(3)

        assert policy.execute(func, "arg", key="value") == "ok"
        assert func.call_count == 4
        func.assert_called_with("arg", key="value")
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 3.0, 9.0]

    def test_reraises_last_error_when_exhausted(self):
        sleep = Mock()
        policy = ExponentialBackoff(max_attempts=3, retry_on=(Transient,), sleep=sleep)
        func = flaky(5)

        with pytest.raises(Transient, match="attempt 2"):
            policy.execute(func)
        assert func.call_count == 3
        assert sleep.call_count == 2

    def test_non_retryable_aborts_immediately(self):
        sleep = Mock()
        policy = ExponentialBackoff(max_attempts=5, retry_on=(Transient,), sleep=sleep)
        func = flaky(1, exc=Fatal)

        with pytest.raises(Fatal):
            policy.execute(func)
        assert func.call_count == 1
        sleep.assert_not_called()

    def test_single_attempt(self):
        policy = ExponentialBackoff(max_attempts=1, retry_on=(Transient,), sleep=Mock())
        with pytest.raises(Transient):
            policy.execute(flaky(1))

    def test_stats(self):
        policy = ExponentialBackoff(max_attempts=5, retry_on=(Transient,), sleep=Mock())
        policy.execute(flaky(2))
        with pytest.raises(Fatal):
            policy.execute(flaky(1, exc=Fatal))

        assert policy.get_stats() == {
            "total_attempts": 4,
            "total_retries": 2,
            "total_successes": 1,
            "total_failures": 1,
        }

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            ExponentialBackoff(max_attempts=0)

    def test_logs_to_given_logger(self):
        logger = Mock()
        policy = ExponentialBackoff(max_attempts=3, retry_on=(Transient,), sleep=Mock(), logger=logger)

        policy.execute(flaky(1))

        logger.warning.assert_called_once()
        assert "Attempt 1/3 failed: attempt 0" in logger.warning.call_args.args[0]
        logger.info.assert_called_once_with("Operation succeeded on attempt 2")

    def test_stats_across_threads(self):
        policy = ExponentialBackoff(max_attempts=2, retry_on=(Transient,), sleep=Mock())

        def work():
            for _ in range(200):
                policy.execute(lambda: "ok")

        threads = [threading.Thread(target=work) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        stats = policy.get_stats()
        assert stats["total_attempts"] == stats["total_successes"] == 1600
