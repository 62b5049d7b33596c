"""Tests for simulated execution and token estimation."""

import pytest

from skillforge.execution import SimulatedExecutor
from skillforge.tokens import CharRatioEstimator, estimate_tokens


class SleepRecorder:
    """Stand-in for time.sleep that records requested durations."""

    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


class TestTokenEstimation:
    """Tests for the character-ratio token estimate."""

    def test_floor_of_quarter_length(self):
        """Test four characters per token, rounded down."""
        assert estimate_tokens("") == 0
        assert estimate_tokens("abc") == 0
        assert estimate_tokens("abcd" * 3) == 3
        assert estimate_tokens("abcd" * 3 + "ab") == 3

    def test_custom_ratio(self):
        """Test a different characters-per-token ratio."""
        assert CharRatioEstimator(chars_per_token=2).estimate("abcdef") == 3

    def test_invalid_ratio(self):
        """Test a non-positive ratio is rejected."""
        with pytest.raises(ValueError):
            CharRatioEstimator(chars_per_token=0)


class TestSimulatedExecutor:
    """Tests for the simulated executor."""

    def test_seeded_runs_repeat(self):
        """Test the same seed yields the same results."""
        content = "x" * 400
        first = SimulatedExecutor(seed=7, sleep=SleepRecorder())
        second = SimulatedExecutor(seed=7, sleep=SleepRecorder())

        assert [first.execute(content) for _ in range(5)] == [
            second.execute(content) for _ in range(5)
        ]

    def test_latency_in_range(self):
        """Test latency stays inside the configured bounds."""
        sleep = SleepRecorder()
        executor = SimulatedExecutor(
            min_latency_ms=200.0,
            max_latency_ms=300.0,
            failure_probability=0.0,
            seed=1,
            sleep=sleep,
        )

        results = [executor.execute("content") for _ in range(20)]

        assert all(200.0 <= r.elapsed_ms <= 300.0 for r in results)
        assert sleep.calls == pytest.approx([r.elapsed_ms / 1000 for r in results])

    def test_output_tokens_proportional_to_input(self):
        """Test output is 30-70% of the input estimate."""
        executor = SimulatedExecutor(failure_probability=0.0, seed=3, sleep=SleepRecorder())

        results = [executor.execute("x" * 400) for _ in range(20)]

        assert all(r.success for r in results)
        assert all(30 <= r.output_tokens <= 70 for r in results)

    def test_always_failing(self):
        """Test failure probability 1 fails every run with no output."""
        executor = SimulatedExecutor(failure_probability=1.0, seed=3, sleep=SleepRecorder())

        results = [executor.execute("x" * 400) for _ in range(10)]

        assert not any(r.success for r in results)
        assert all(r.output_tokens == 0 for r in results)

    def test_timeout(self):
        """Test a latency past the timeout is cut off and fails."""
        sleep = SleepRecorder()
        executor = SimulatedExecutor(
            min_latency_ms=5000.0,
            max_latency_ms=5000.0,
            failure_probability=0.0,
            timeout=1.0,
            sleep=sleep,
        )

        result = executor.execute("content")

        assert result.success is False
        assert result.elapsed_ms == 1000.0
        assert result.output_tokens == 0
        assert sleep.calls == [1.0]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"min_latency_ms": -1.0},
            {"min_latency_ms": 500.0, "max_latency_ms": 100.0},
            {"timeout": 0},
        ],
    )
    def test_invalid_parameters(self, kwargs):
        """Test invalid latency ranges and timeouts are rejected."""
        with pytest.raises(ValueError):
            SimulatedExecutor(**kwargs)
