"""Validation module for verifying scheduling results.

This module provides a single source of truth for the invariants a
scheduling result must satisfy. Results can be validated before they are
shown to a user or written back to a calendar.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from taskplanner.domain.models import (
    CalendarBlock,
    SchedulingResult,
    Task,
)
from taskplanner.domain.policies import BlockPolicy, DefaultBlockPolicy


class ValidationErrorType(Enum):
    """Types of validation errors."""

    INVALID_BLOCK_INTERVAL = "invalid_block_interval"
    BLOCK_TOO_LONG = "block_too_long"
    BLOCKS_OVERLAP = "blocks_overlap"
    UNKNOWN_TASK = "unknown_task"
    TASK_OVER_SCHEDULED = "task_over_scheduled"
    SHORTFALL_NOT_REPORTED = "shortfall_not_reported"
    SHORTFALL_MISMATCH = "shortfall_mismatch"
    SUCCESS_FLAG_MISMATCH = "success_flag_mismatch"


@dataclass
class ValidationError:
    """A single validation error."""

    error_type: ValidationErrorType
    message: str
    task_id: Optional[str] = None
    block_id: Optional[str] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.task_id:
            parts.append(f"Task {self.task_id}:")
        parts.append(self.message)
        if self.block_id is not None:
            parts.append(f"(block {self.block_id})")
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of validating a scheduling result."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)


class ScheduleValidator:
    """Validates scheduling results against the engine's invariants.

    Example:
        >>> validator = ScheduleValidator()
        >>> result = validator.validate(scheduling_result, tasks_map)
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error)
    """

    def __init__(self, block_policy: Optional[BlockPolicy] = None):
        self.block_policy = block_policy or DefaultBlockPolicy()

    def validate(
        self,
        result: SchedulingResult,
        tasks_map: dict[str, Task],
        max_block_minutes: Optional[int] = None,
    ) -> ValidationResult:
        """Validate a complete scheduling result.

        Args:
            result: The scheduling result to validate.
            tasks_map: Dict mapping task IDs to Task objects.
            max_block_minutes: Block length limit the result was built with.
                Defaults to the block policy maximum.

        Returns:
            ValidationResult with is_valid flag and any errors.
        """
        if max_block_minutes is None:
            max_block_minutes = self.block_policy.max_block_minutes()

        validation = ValidationResult(is_valid=True)

        for block in result.blocks:
            self._validate_block(block, tasks_map, max_block_minutes, validation)

        self._validate_overlaps(result.blocks, validation)
        self._validate_task_totals(result, tasks_map, validation)

        expected_success = not result.unschedulable
        if result.success != expected_success:
            validation.add_error(
                ValidationError(
                    error_type=ValidationErrorType.SUCCESS_FLAG_MISMATCH,
                    message=(
                        f"success={result.success} but "
                        f"{len(result.unschedulable)} task(s) are unschedulable"
                    ),
                )
            )

        if result.cancelled:
            validation.add_warning(
                f"Scheduling was cancelled after {result.tasks_processed} of "
                f"{result.tasks_considered} tasks"
            )

        return validation

    def _validate_block(
        self,
        block: CalendarBlock,
        tasks_map: dict[str, Task],
        max_block_minutes: int,
        validation: ValidationResult,
    ) -> None:
        """Validate a single block."""
        if block.end_time <= block.start_time:
            validation.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_BLOCK_INTERVAL,
                    message="Block ends before it starts",
                    task_id=block.task_id,
                    block_id=block.id,
                )
            )

        if block.duration_minutes > max_block_minutes:
            validation.add_error(
                ValidationError(
                    error_type=ValidationErrorType.BLOCK_TOO_LONG,
                    message=(
                        f"Block is {block.duration_minutes} minutes "
                        f"(max {max_block_minutes})"
                    ),
                    task_id=block.task_id,
                    block_id=block.id,
                    details={"duration_minutes": block.duration_minutes},
                )
            )

        if block.task_id is not None and block.task_id not in tasks_map:
            validation.add_error(
                ValidationError(
                    error_type=ValidationErrorType.UNKNOWN_TASK,
                    message=f"Unknown task ID: {block.task_id}",
                    task_id=block.task_id,
                    block_id=block.id,
                )
            )

    def _validate_overlaps(
        self,
        blocks: list[CalendarBlock],
        validation: ValidationResult,
    ) -> None:
        """Check adjacent blocks in start order for overlaps."""
        ordered = sorted(blocks, key=lambda b: b.start_time)
        for current, following in zip(ordered, ordered[1:]):
            if current.overlaps(following):
                validation.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.BLOCKS_OVERLAP,
                        message=f"Block overlaps block {following.id}",
                        task_id=current.task_id,
                        block_id=current.id,
                    )
                )

    def _validate_task_totals(
        self,
        result: SchedulingResult,
        tasks_map: dict[str, Task],
        validation: ValidationResult,
    ) -> None:
        """Check scheduled minutes per task against estimates."""
        unschedulable = {u.task_id: u for u in result.unschedulable}
        scheduled_task_ids = {b.task_id for b in result.blocks if b.task_id is not None}

        for task_id in scheduled_task_ids | set(unschedulable):
            task = tasks_map.get(task_id)
            if task is None:
                continue

            scheduled = result.scheduled_minutes(task_id)
            if scheduled > task.estimated_minutes:
                validation.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.TASK_OVER_SCHEDULED,
                        message=(
                            f"Scheduled {scheduled} minutes for a "
                            f"{task.estimated_minutes}-minute task"
                        ),
                        task_id=task_id,
                    )
                )
            elif scheduled < task.estimated_minutes:
                entry = unschedulable.get(task_id)
                if entry is None:
                    validation.add_error(
                        ValidationError(
                            error_type=ValidationErrorType.SHORTFALL_NOT_REPORTED,
                            message=(
                                f"Only {scheduled} of {task.estimated_minutes} "
                                f"minutes scheduled but task is not reported"
                            ),
                            task_id=task_id,
                        )
                    )
                elif entry.shortfall_minutes != task.estimated_minutes - scheduled:
                    validation.add_error(
                        ValidationError(
                            error_type=ValidationErrorType.SHORTFALL_MISMATCH,
                            message=(
                                f"Reported shortfall {entry.shortfall_minutes} != "
                                f"actual {task.estimated_minutes - scheduled}"
                            ),
                            task_id=task_id,
                        )
                    )
