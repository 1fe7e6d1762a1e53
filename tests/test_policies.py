"""Tests for scoring and block policies."""

from datetime import time

import pytest

from taskplanner.domain.policies import DefaultBlockPolicy, DefaultScoringPolicy


class TestDefaultScoringPolicy:
    """Tests for DefaultScoringPolicy."""

    def test_default_weights(self):
        """Importance dominates, the rest share the remainder."""
        policy = DefaultScoringPolicy()
        assert policy.weights() == {
            "importance": 0.50,
            "deadline": 0.15,
            "difficulty": 0.15,
            "size": 0.10,
            "risk": 0.10,
        }

    def test_weights_must_sum_to_one(self):
        """Weights that do not sum to 1.0 are rejected."""
        with pytest.raises(ValueError):
            DefaultScoringPolicy(importance_weight=0.6)

    def test_rebalanced_weights_are_accepted(self):
        """Custom weights are fine as long as they sum to 1.0."""
        policy = DefaultScoringPolicy(importance_weight=0.4, deadline_weight=0.25)
        assert sum(policy.weights().values()) == pytest.approx(1.0)

    def test_no_due_date_has_no_urgency(self):
        policy = DefaultScoringPolicy()
        assert policy.deadline_urgency(None) == 0.0

    def test_overdue_is_most_urgent(self):
        """Due now or in the past gives full urgency."""
        policy = DefaultScoringPolicy()
        assert policy.deadline_urgency(0) == 1.0
        assert policy.deadline_urgency(-3.5) == 1.0

    def test_urgency_steps(self):
        """Urgency drops in steps as the deadline moves out."""
        policy = DefaultScoringPolicy()
        assert policy.deadline_urgency(0.5) == 0.9
        assert policy.deadline_urgency(1) == 0.9
        assert policy.deadline_urgency(2) == 0.7
        assert policy.deadline_urgency(3) == 0.7
        assert policy.deadline_urgency(5) == 0.5
        assert policy.deadline_urgency(7) == 0.5
        assert policy.deadline_urgency(10) == 0.3
        assert policy.deadline_urgency(14) == 0.3
        assert policy.deadline_urgency(30) == 0.1

    def test_urgency_is_monotonic(self):
        """Sooner deadlines are never less urgent."""
        policy = DefaultScoringPolicy()
        days = [-1, 0, 0.5, 1, 2, 3, 4, 7, 8, 14, 15, 60]
        values = [policy.deadline_urgency(d) for d in days]
        assert values == sorted(values, reverse=True)

    def test_size_cap(self):
        policy = DefaultScoringPolicy()
        assert policy.size_cap_minutes() == 480

    def test_risk_boost(self):
        """Dependencies and blocked status add up."""
        policy = DefaultScoringPolicy()
        assert policy.risk_boost(False, False) == 0.0
        assert policy.risk_boost(True, False) == pytest.approx(0.2)
        assert policy.risk_boost(False, True) == pytest.approx(0.3)
        assert policy.risk_boost(True, True) == pytest.approx(0.5)


class TestDefaultBlockPolicy:
    """Tests for DefaultBlockPolicy."""

    def test_default_block_bounds(self):
        """Blocks are 30 minutes to 3 hours."""
        policy = DefaultBlockPolicy()
        assert policy.min_block_minutes() == 30
        assert policy.max_block_minutes() == 180

    def test_custom_block_bounds(self):
        policy = DefaultBlockPolicy(min_block=15, max_block=90)
        assert policy.min_block_minutes() == 15
        assert policy.max_block_minutes() == 90

    def test_weekday_default_window(self):
        """Weekdays default to 09:00-17:00."""
        policy = DefaultBlockPolicy()
        for day in range(5):
            windows = policy.default_windows(day)
            assert len(windows) == 1
            assert windows[0].day_of_week == day
            assert windows[0].start_time == time(9, 0)
            assert windows[0].end_time == time(17, 0)

    def test_weekend_has_no_default_window(self):
        policy = DefaultBlockPolicy()
        assert policy.default_windows(5) == []
        assert policy.default_windows(6) == []

    def test_custom_working_days(self):
        """A Sunday-to-Thursday week gets Sunday defaults and no Friday."""
        policy = DefaultBlockPolicy(working_days=(6, 0, 1, 2, 3))
        assert len(policy.default_windows(6)) == 1
        assert policy.default_windows(4) == []
