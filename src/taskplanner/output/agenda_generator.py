"""Plain-text agenda output for scheduling results.

This module creates a text view of a scheduling result showing:
- Blocks grouped by day
- Hours booked per day
- Unschedulable tasks with their shortfall
- Conflicts that were repaired
"""

from collections import defaultdict
from pathlib import Path
from typing import Union

from taskplanner.domain.models import CalendarBlock, SchedulingResult, Task


class AgendaGenerator:
    """Generates a human-readable agenda from a scheduling result."""

    def generate(
        self,
        result: SchedulingResult,
        tasks_map: dict[str, Task],
        output_path: Union[str, Path],
    ) -> str:
        """Generate the agenda and save it to a file.

        Args:
            result: The scheduling result to render.
            tasks_map: Dict mapping task IDs to Task objects.
            output_path: Path to save the text file.

        Returns:
            The generated text content.
        """
        content = self._generate_content(result, tasks_map)
        Path(output_path).write_text(content)
        return content

    def generate_to_string(
        self,
        result: SchedulingResult,
        tasks_map: dict[str, Task],
    ) -> str:
        """Generate the agenda and return it as a string."""
        return self._generate_content(result, tasks_map)

    def _generate_content(
        self,
        result: SchedulingResult,
        tasks_map: dict[str, Task],
    ) -> str:
        lines = []

        lines.append("=" * 80)
        lines.append("SCHEDULE AGENDA")
        lines.append("=" * 80)
        lines.append(result.message or "")
        lines.append("")

        by_day: dict = defaultdict(list)
        for block in result.blocks:
            by_day[block.start_time.date()].append(block)

        for day in sorted(by_day):
            blocks = sorted(by_day[day], key=lambda b: b.start_time)
            booked = sum(b.duration_minutes for b in blocks)
            lines.append("-" * 80)
            lines.append(f"{day.strftime('%A, %B %d, %Y')}  ({booked / 60:.1f}h booked)")
            lines.append("-" * 80)
            for block in blocks:
                lines.append(self._format_block(block, tasks_map))
            lines.append("")

        if not by_day:
            lines.append("No blocks scheduled.")
            lines.append("")

        lines.append("-" * 80)
        lines.append("UNSCHEDULABLE TASKS")
        lines.append("-" * 80)
        if result.unschedulable:
            for entry in result.unschedulable:
                task = tasks_map.get(entry.task_id)
                title = task.title if task else entry.task_id
                lines.append(
                    f"  {title}: needs {entry.required_minutes} min, "
                    f"{entry.available_minutes} min were free, "
                    f"short by {entry.shortfall_minutes} min ({entry.reason})"
                )
        else:
            lines.append("  None")
        lines.append("")

        lines.append("-" * 80)
        lines.append("CONFLICTS")
        lines.append("-" * 80)
        if result.conflicts:
            for conflict in result.conflicts:
                lines.append(
                    f"  {conflict.overlap_start.strftime('%Y-%m-%d %H:%M')}-"
                    f"{conflict.overlap_end.strftime('%H:%M')} "
                    f"({conflict.overlap_minutes} min): {conflict.resolution}"
                )
        else:
            lines.append("  None")

        if result.cancelled:
            lines.append("")
            lines.append(
                f"NOTE: cancelled after {result.tasks_processed} of "
                f"{result.tasks_considered} tasks"
            )

        return "\n".join(lines) + "\n"

    @staticmethod
    def _format_block(block: CalendarBlock, tasks_map: dict[str, Task]) -> str:
        span = f"{block.start_time.strftime('%H:%M')}-{block.end_time.strftime('%H:%M')}"
        line = f"  {span}  {block.title:<45} {block.duration_minutes:>4} min"
        task = tasks_map.get(block.task_id) if block.task_id else None
        if task is not None:
            line += f"  [score {task.priority_score:.2f}]"
        return line
