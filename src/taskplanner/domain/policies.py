"""Policy definitions for planning rules.

This module contains configurable policies that define the business rules
for priority scoring and calendar block sizing. Policies are kept separate
from the scheduling engine to allow independent testing and easy modification.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import time
from typing import Optional

from taskplanner.domain.models import AvailabilityWindow


class ScoringPolicy(ABC):
    """Abstract base class for priority scoring policies."""

    @abstractmethod
    def weights(self) -> dict[str, float]:
        """Factor weights keyed by factor name. Must sum to 1.0."""
        pass

    @abstractmethod
    def deadline_urgency(self, days_until_due: Optional[float]) -> float:
        """Urgency in [0, 1] for a deadline.

        Args:
            days_until_due: Fractional days until the due date (negative or
                zero when overdue), or None when the task has no due date.
        """
        pass

    @abstractmethod
    def size_cap_minutes(self) -> int:
        """Estimate at which the inverted size factor bottoms out."""
        pass

    @abstractmethod
    def risk_boost(self, has_dependencies: bool, is_blocked: bool) -> float:
        """Additive risk factor for dependency and blocked state."""
        pass


class BlockPolicy(ABC):
    """Abstract base class for calendar block sizing policies."""

    @abstractmethod
    def min_block_minutes(self) -> int:
        """Smallest block worth scheduling."""
        pass

    @abstractmethod
    def max_block_minutes(self) -> int:
        """Largest block before a task gets split."""
        pass

    @abstractmethod
    def default_windows(self, day_of_week: int) -> list[AvailabilityWindow]:
        """Windows assumed for a weekday with no configured availability."""
        pass


@dataclass
class DefaultScoringPolicy(ScoringPolicy):
    """Default priority scoring policy.

    Weighted factors:
    - Importance: 0.50
    - Deadline urgency: 0.15
    - Difficulty (inverted, easier first): 0.15
    - Size (inverted, smaller first): 0.10
    - Risk boost: 0.10

    Deadline urgency steps:
    - Overdue: 1.0
    - Due within 1 day: 0.9, 3 days: 0.7, 7 days: 0.5, 14 days: 0.3
    - Later: 0.1
    - No due date: 0.0
    """

    importance_weight: float = 0.50
    deadline_weight: float = 0.15
    difficulty_weight: float = 0.15
    size_weight: float = 0.10
    risk_weight: float = 0.10

    # (max days until due, urgency), checked in order
    deadline_steps: list[tuple[float, float]] = field(
        default_factory=lambda: [
            (0, 1.0),
            (1, 0.9),
            (3, 0.7),
            (7, 0.5),
            (14, 0.3),
        ]
    )
    far_deadline_urgency: float = 0.1

    size_cap: int = 480  # 8 hours

    dependency_boost: float = 0.2
    blocked_boost: float = 0.3

    def __post_init__(self):
        total = sum(self.weights().values())
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"Scoring weights must sum to 1.0, got {total}")

    def weights(self) -> dict[str, float]:
        return {
            "importance": self.importance_weight,
            "deadline": self.deadline_weight,
            "difficulty": self.difficulty_weight,
            "size": self.size_weight,
            "risk": self.risk_weight,
        }

    def deadline_urgency(self, days_until_due: Optional[float]) -> float:
        if days_until_due is None:
            return 0.0
        for max_days, urgency in self.deadline_steps:
            if days_until_due <= max_days:
                return urgency
        return self.far_deadline_urgency

    def size_cap_minutes(self) -> int:
        return self.size_cap

    def risk_boost(self, has_dependencies: bool, is_blocked: bool) -> float:
        boost = 0.0
        if has_dependencies:
            boost += self.dependency_boost
        if is_blocked:
            boost += self.blocked_boost
        return boost


@dataclass
class DefaultBlockPolicy(BlockPolicy):
    """Default block sizing policy.

    - Minimum block: 30 minutes
    - Maximum block: 180 minutes (3 hours)
    - Default availability: 09:00-17:00 Monday to Friday, none on weekends

    Both limits are policy, not hard laws; requests may override them.
    """

    min_block: int = 30
    max_block: int = 180
    default_start: time = time(9, 0)
    default_end: time = time(17, 0)
    working_days: tuple[int, ...] = (0, 1, 2, 3, 4)

    def min_block_minutes(self) -> int:
        return self.min_block

    def max_block_minutes(self) -> int:
        return self.max_block

    def default_windows(self, day_of_week: int) -> list[AvailabilityWindow]:
        if day_of_week not in self.working_days:
            return []
        return [AvailabilityWindow(day_of_week, self.default_start, self.default_end)]
