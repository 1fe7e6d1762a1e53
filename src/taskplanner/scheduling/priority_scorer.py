"""Priority scoring for tasks.

This module implements the deterministic heuristic score:
1. Importance (ordinal / 4)
2. Deadline urgency (stepped by days until due)
3. Difficulty, inverted so easier tasks come first
4. Size, inverted so smaller tasks come first
5. Risk boost for dependencies and blocked status

An optional advisory source can nudge the final score. Advisory failures
never abort scoring.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Optional

from taskplanner.domain.models import (
    AdvisoryScore,
    Difficulty,
    Importance,
    PriorityResult,
    Task,
    TaskStatus,
)
from taskplanner.domain.policies import DefaultScoringPolicy, ScoringPolicy
from taskplanner.scheduling.advisory import AdvisoryScorer

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400.0


class PriorityScorer:
    """Computes priority scores and rationales for tasks.

    Example:
        >>> scorer = PriorityScorer()
        >>> score, rationale = scorer.score(task, now=datetime(2024, 1, 15, 9, 0))
        >>> results = scorer.score_batch(tasks)  # Sorted by final score
    """

    def __init__(
        self,
        scoring_policy: Optional[ScoringPolicy] = None,
        advisory: Optional[AdvisoryScorer] = None,
        advisory_weight: float = 0.3,
        advisory_timeout_seconds: float = 5.0,
        rescore_interval: timedelta = timedelta(minutes=15),
    ):
        """Initialize scorer.

        Args:
            scoring_policy: Weights and factor rules.
            advisory: Optional advisory source blended into the final score.
            advisory_weight: Share of the final score given to the advisory
                score when one is available.
            advisory_timeout_seconds: Upper bound on waiting for the advisory
                source.
            rescore_interval: How long a computed score stays fresh when the
                task's scoring inputs have not changed.
        """
        if not 0.0 <= advisory_weight <= 1.0:
            raise ValueError(f"advisory_weight must be in [0, 1], got {advisory_weight}")
        self.scoring_policy = scoring_policy or DefaultScoringPolicy()
        self.advisory = advisory
        self.advisory_weight = advisory_weight
        self.advisory_timeout_seconds = advisory_timeout_seconds
        self.rescore_interval = rescore_interval

    def score(self, task: Task, now: Optional[datetime] = None) -> tuple[float, str]:
        """Compute the heuristic score and rationale for one task.

        Args:
            task: Task to score.
            now: Reference time for deadline urgency.

        Returns:
            Tuple of (score in [0, 1], rationale).
        """
        if now is None:
            now = datetime.now()

        days_until_due = self._days_until_due(task, now)
        factors = self.factor_scores(task, days_until_due)
        weights = self.scoring_policy.weights()

        score = sum(weights[name] * value for name, value in factors.items())
        score = min(1.0, max(0.0, score))

        return score, self.rationale(task, days_until_due)

    def factor_scores(self, task: Task, days_until_due: Optional[float]) -> dict[str, float]:
        """Unweighted factor values for a task."""
        size_cap = self.scoring_policy.size_cap_minutes()
        return {
            "importance": task.importance.value / 4.0,
            "deadline": self.scoring_policy.deadline_urgency(days_until_due),
            "difficulty": 1.0 - task.difficulty.value / 5.0,
            "size": 1.0 - min(1.0, task.estimated_minutes / size_cap),
            "risk": self.scoring_policy.risk_boost(
                task.has_dependencies, task.status == TaskStatus.BLOCKED
            ),
        }

    def rationale(self, task: Task, days_until_due: Optional[float]) -> str:
        """Human-readable reasons behind a heuristic score."""
        reasons = []

        if task.importance.value >= Importance.HIGH.value:
            reasons.append("High importance")

        if days_until_due is not None:
            if days_until_due <= 0:
                reasons.append("Overdue!")
            elif days_until_due <= 3:
                reasons.append("Due soon")

        if task.difficulty.value <= Difficulty.EASY.value:
            reasons.append("Quick win opportunity")

        if task.has_dependencies:
            reasons.append("Has dependencies")

        if not reasons:
            reasons.append("Standard priority")

        return "; ".join(reasons)

    def score_batch(
        self,
        tasks: list[Task],
        now: Optional[datetime] = None,
    ) -> list[PriorityResult]:
        """Score many tasks, blending in advisory scores where available.

        Each task's derived priority fields are updated in place.

        Args:
            tasks: Tasks to score.
            now: Reference time for deadline urgency.

        Returns:
            PriorityResults sorted by final score, highest first.
        """
        if now is None:
            now = datetime.now()

        results = []
        for task in tasks:
            heuristic, rationale = self.score(task, now)
            results.append(
                PriorityResult(
                    task_id=task.id,
                    heuristic_score=heuristic,
                    final_score=heuristic,
                    rationale=rationale,
                )
            )

        adjustments = self._fetch_advisory(tasks)
        for result in results:
            advisory = adjustments.get(result.task_id)
            if advisory is None:
                continue
            advisory_score = min(1.0, max(0.0, float(advisory.score)))
            result.advisory_score = advisory_score
            result.final_score = (
                (1.0 - self.advisory_weight) * result.heuristic_score
                + self.advisory_weight * advisory_score
            )
            if advisory.rationale:
                result.rationale = advisory.rationale

        tasks_by_id = {t.id: t for t in tasks}
        for result in results:
            self._apply(tasks_by_id[result.task_id], result.final_score, result.rationale, now)

        results.sort(key=lambda r: r.final_score, reverse=True)
        return results

    def needs_refresh(self, task: Task, now: datetime) -> bool:
        """Check whether a task's stored priority is stale."""
        if task.priority_computed_at is None:
            return True
        if task.priority_inputs != task.scoring_inputs():
            return True
        return now - task.priority_computed_at >= self.rescore_interval

    def refresh(self, task: Task, now: Optional[datetime] = None) -> bool:
        """Recompute a task's heuristic priority if it is stale.

        Returns:
            True if the task was rescored.
        """
        if now is None:
            now = datetime.now()
        if not self.needs_refresh(task, now):
            return False
        score, rationale = self.score(task, now)
        self._apply(task, score, rationale, now)
        return True

    def rank(self, tasks: list[Task], now: Optional[datetime] = None) -> list[Task]:
        """Refresh stale scores and order tasks most urgent first.

        Ties are broken by the earliest due date; tasks without a due date
        go last among equals.
        """
        if now is None:
            now = datetime.now()
        for task in tasks:
            self.refresh(task, now)
        return sorted(
            tasks,
            key=lambda t: (-t.priority_score, t.due_date or datetime.max),
        )

    def _fetch_advisory(self, tasks: list[Task]) -> dict[str, AdvisoryScore]:
        """Call the advisory source, bounded in time and isolated from errors."""
        if self.advisory is None or not tasks:
            return {}

        outcome: dict = {}

        def call_advisory():
            try:
                outcome["adjustments"] = self.advisory.get_adjustments(tasks)
            except Exception as exc:
                outcome["error"] = exc

        # Daemon so a hung source cannot hold the process open at exit
        thread = threading.Thread(target=call_advisory, name="advisory-scorer", daemon=True)
        thread.start()
        thread.join(self.advisory_timeout_seconds)

        if thread.is_alive():
            logger.warning(
                "Advisory scoring timed out after %.1fs, using heuristic only",
                self.advisory_timeout_seconds,
            )
            return {}
        if "error" in outcome:
            logger.warning(
                "Advisory scoring failed, using heuristic only", exc_info=outcome["error"]
            )
            return {}

        adjustments = outcome.get("adjustments")
        if not isinstance(adjustments, dict):
            logger.warning(
                "Advisory scoring returned %s instead of a mapping, ignoring",
                type(adjustments).__name__,
            )
            return {}

        valid = {}
        for task_id, advisory in adjustments.items():
            if not isinstance(advisory, AdvisoryScore) or not isinstance(
                advisory.score, (int, float)
            ):
                logger.warning("Ignoring malformed advisory entry for task %s", task_id)
                continue
            valid[task_id] = advisory
        return valid

    @staticmethod
    def _apply(task: Task, score: float, rationale: str, now: datetime) -> None:
        task.priority_score = score
        task.priority_rationale = rationale
        task.priority_computed_at = now
        task.priority_inputs = task.scoring_inputs()

    @staticmethod
    def _days_until_due(task: Task, now: datetime) -> Optional[float]:
        if task.due_date is None:
            return None
        return (task.due_date - now).total_seconds() / SECONDS_PER_DAY
