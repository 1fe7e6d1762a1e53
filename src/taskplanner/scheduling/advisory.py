"""Advisory priority sources.

An advisory scorer supplies optional secondary priority scores that get
blended into the heuristic score. Advisory sources are allowed to be slow,
wrong, or broken; the priority scorer isolates them and falls back to the
heuristic score on any failure.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Callable, Optional

from taskplanner.domain.models import AdvisoryScore, Task

logger = logging.getLogger(__name__)


class AdvisoryScorer(ABC):
    """Abstract base class for advisory priority sources."""

    @abstractmethod
    def get_adjustments(self, tasks: list[Task]) -> dict[str, AdvisoryScore]:
        """Get advisory scores keyed by task ID.

        Tasks without an entry keep their heuristic score. Implementations
        may raise or block; callers must isolate them.
        """
        pass


class NullAdvisoryScorer(AdvisoryScorer):
    """Advisory source that never has an opinion."""

    def get_adjustments(self, tasks: list[Task]) -> dict[str, AdvisoryScore]:
        return {}


class StaticAdvisoryScorer(AdvisoryScorer):
    """Advisory source backed by a fixed mapping.

    Handy as a stand-in for a real integration in tests and demos.

    Args:
        scores: Mapping of task ID to score, or to (score, rationale).
    """

    def __init__(self, scores: dict):
        self.scores = scores
        self.calls = 0

    def get_adjustments(self, tasks: list[Task]) -> dict[str, AdvisoryScore]:
        self.calls += 1
        adjustments = {}
        for task in tasks:
            value = self.scores.get(task.id)
            if value is None:
                continue
            if isinstance(value, AdvisoryScore):
                adjustments[task.id] = value
            elif isinstance(value, tuple):
                adjustments[task.id] = AdvisoryScore(score=value[0], rationale=value[1])
            else:
                adjustments[task.id] = AdvisoryScore(score=value)
        return adjustments


class CompletionAdvisoryScorer(AdvisoryScorer):
    """Advisory source that asks a text-completion model for priorities.

    The model is prompted with one line per task and asked to answer with
    ``TASK_ID: score (rationale)`` lines. Any text around those lines is
    ignored, and tasks the reply does not mention get no adjustment.

    Args:
        complete: Callable taking a prompt and returning the model's reply.
    """

    PROMPT_HEADER = "Analyze these tasks and suggest priority adjustments (0.0-1.0 scale):"
    PROMPT_FOOTER = (
        "For each task, respond with:\n"
        "TASK_ID: score (rationale)\n"
        "\n"
        "Consider: urgency, impact, dependencies, effort-to-value ratio."
    )

    def __init__(self, complete: Callable[[str], Optional[str]]):
        self.complete = complete

    def get_adjustments(self, tasks: list[Task]) -> dict[str, AdvisoryScore]:
        if not tasks:
            return {}
        response = self.complete(self.build_prompt(tasks))
        if not response:
            return {}
        return self.parse_response(response, tasks)

    def build_prompt(self, tasks: list[Task]) -> str:
        """Build the prompt listing every task."""
        lines = []
        for task in tasks:
            due = task.due_date.strftime("%Y-%m-%d") if task.due_date else "none"
            lines.append(
                f"- [{task.id}] {task.title}: importance={task.importance.name.lower()}, "
                f"difficulty={task.difficulty.name.lower()}, due={due}, "
                f"est={task.estimated_minutes}min"
            )
        return f"{self.PROMPT_HEADER}\n\n" + "\n".join(lines) + f"\n\n{self.PROMPT_FOOTER}"

    def parse_response(self, response: str, tasks: list[Task]) -> dict[str, AdvisoryScore]:
        """Extract ``TASK_ID: score (rationale)`` entries from free text."""
        adjustments = {}
        for task in tasks:
            pattern = re.escape(task.id) + r"\]?[:\s]+([0-9]*\.?[0-9]+)\s*(?:\(([^)]*)\))?"
            match = re.search(pattern, response)
            if match is None:
                continue
            score = float(match.group(1))
            rationale = (match.group(2) or "").strip() or None
            adjustments[task.id] = AdvisoryScore(
                score=min(1.0, max(0.0, score)),
                rationale=rationale,
            )
        logger.debug("Advisory reply covered %d of %d tasks", len(adjustments), len(tasks))
        return adjustments
