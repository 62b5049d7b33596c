"""Tests for candidate scoring."""

import pytest

from skillforge.analyzer import Analyzer, score
from skillforge.db import utcnow
from skillforge.models.ledger import AggregateView, EventModule, RunSample
from skillforge.models.pipeline import Recommendation


def aggregate(**kwargs):
    return AggregateView(skill_id=kwargs.pop("skill_id", "summarize"), **kwargs)


def record_runs(ledger, skill_id, count, elapsed_ms=100.0, tokens_in=100, tokens_out=10):
    for _ in range(count):
        ledger.record_run(
            RunSample(
                skill_id=skill_id,
                elapsed_ms=elapsed_ms,
                tokens_in=tokens_in,
                tokens_out=tokens_out,
                success=True,
                timestamp=utcnow(),
            )
        )


class TestRecommendation:
    """Tests for score thresholds."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (0, Recommendation.OK),
            (24, Recommendation.OK),
            (25, Recommendation.MONITOR),
            (49, Recommendation.MONITOR),
            (50, Recommendation.OPTIMIZE),
            (100, Recommendation.OPTIMIZE),
        ],
    )
    def test_boundaries(self, value, expected):
        """Test recommendation boundaries at 25 and 50."""
        assert Recommendation.from_score(value) == expected


class TestScore:
    """Tests for the scoring formula."""

    def test_healthy_skill_scores_zero(self):
        """Test that nothing triggers below every threshold."""
        result = score(
            aggregate(
                avg_elapsed_ms=500.0,
                avg_tokens_in=800.0,
                avg_tokens_out=200.0,
                total_runs=10,
                p95_elapsed_ms=900.0,
            )
        )

        assert result.score == 0
        assert result.reasons == []
        assert result.recommendation == Recommendation.OK

    def test_empty_aggregate_scores_zero(self):
        """Test an aggregate with no runs."""
        result = score(aggregate())

        assert result.score == 0
        assert result.reasons == []

    def test_thresholds_are_strict(self):
        """Test values exactly at each threshold contribute nothing."""
        result = score(
            aggregate(
                avg_elapsed_ms=2000.0,
                avg_tokens_in=2000.0,
                total_runs=20,
                failure_rate=0.05,
                p95_elapsed_ms=4000.0,
            )
        )

        assert result.score == 0
        assert result.reasons == []

    def test_token_factor_is_capped(self):
        """Test token contribution tops out at 30."""
        result = score(aggregate(avg_tokens_in=9000.0))

        assert result.score == 30
        assert result.reasons == ["High token usage: 9000 avg tokens/run"]

    def test_latency_factor_is_capped(self):
        """Test latency contribution tops out at 25."""
        result = score(aggregate(avg_elapsed_ms=60000.0, p95_elapsed_ms=60000.0))

        assert result.score == 25
        assert result.reasons == ["Slow execution: 60000ms avg"]

    def test_rounds_half_up(self):
        """Test a 0.5 contribution rounds up to 1."""
        assert score(aggregate(avg_tokens_in=2050.0)).score == 1
        assert score(aggregate(avg_tokens_in=2049.0)).score == 0

    def test_all_five_factors(self):
        """Test a skill that trips every factor, in reporting order."""
        result = score(
            aggregate(
                avg_elapsed_ms=2500.0,
                avg_tokens_in=2000.0,
                avg_tokens_out=500.0,
                total_runs=30,
                failure_rate=0.1,
                p95_elapsed_ms=6000.0,
            )
        )

        # 5 + 2.5 + 20 + 10 + 3 = 40.5
        assert result.score == 41
        assert result.recommendation == Recommendation.MONITOR
        assert result.reasons == [
            "High token usage: 2500 avg tokens/run",
            "Slow execution: 2500ms avg",
            "Latency spikes: P95 6000ms vs avg 2500ms",
            "High failure rate: 10.0%",
            "High volume: 30 runs",
        ]

    def test_maximum_score(self):
        """Test every factor at its cap sums to 100."""
        result = score(
            aggregate(
                avg_elapsed_ms=7000.0,
                avg_tokens_in=4000.0,
                avg_tokens_out=1000.0,
                total_runs=200,
                failure_rate=0.2,
                p95_elapsed_ms=15000.0,
            )
        )

        assert result.score == 100
        assert result.recommendation == Recommendation.OPTIMIZE
        assert len(result.reasons) == 5

    def test_deterministic(self):
        """Test the same aggregate always scores the same."""
        view = aggregate(avg_elapsed_ms=3100.0, avg_tokens_in=2600.0, total_runs=25)

        first = score(view)
        second = score(view)

        assert first.score == second.score
        assert first.reasons == second.reasons
        assert first.recommendation == second.recommendation


class TestAnalyzer:
    """Tests for ranking tracked skills."""

    def test_analyze_reads_ledger(self, ledger):
        """Test analyze scores the ledger aggregate."""
        record_runs(ledger, "slow", 5, elapsed_ms=7000.0)

        result = Analyzer(ledger).analyze("slow")

        assert result.aggregate.total_runs == 5
        assert result.score == 25

    def test_analyze_all_sorted_and_stable(self, ledger):
        """Test ranking is by score, ties keep first-seen order."""
        record_runs(ledger, "alpha", 3)
        record_runs(ledger, "beta", 3)
        record_runs(ledger, "gamma", 3)
        record_runs(ledger, "delta", 3, elapsed_ms=7000.0, tokens_in=6000)

        results = Analyzer(ledger).analyze_all()

        assert [r.skill_id for r in results] == ["delta", "alpha", "beta", "gamma"]
        assert results[0].recommendation == Recommendation.OPTIMIZE

    def test_analyze_all_empty(self, ledger):
        """Test analyzing an empty ledger."""
        assert Analyzer(ledger).analyze_all() == []

    def test_record_writes_events(self, ledger):
        """Test one analyzer event per result."""
        record_runs(ledger, "slow", 3, elapsed_ms=7000.0, tokens_in=6000)
        analyzer = Analyzer(ledger)

        analyzer.record(analyzer.analyze_all())

        events = ledger.recent_events(skill_id="slow")
        assert len(events) == 1
        assert events[0].module == EventModule.ANALYZER
        assert events[0].action == "optimize"
        assert events[0].details.startswith("Score 55: High token usage")
