"""Command-line interface for the task planner."""

import argparse
import logging
import sys
from datetime import datetime, time, timedelta
from typing import Optional

from taskplanner.domain.models import (
    AvailabilityWindow,
    BlockStatus,
    CalendarBlock,
    Difficulty,
    Importance,
    ScheduleRequest,
    Task,
    TaskStatus,
)
from taskplanner.output.agenda_generator import AgendaGenerator
from taskplanner.output.pdf_generator import PDFGenerator
from taskplanner.scheduling.advisory import StaticAdvisoryScorer
from taskplanner.scheduling.scheduler import Scheduler
from taskplanner.scheduling.task_service import TaskService
from taskplanner.storage.memory import InMemoryBlockStore, InMemoryTaskStore
from taskplanner.validation.validator import ScheduleValidator


def create_sample_tasks(count: int = 10, now: Optional[datetime] = None) -> list[Task]:
    """Create sample tasks for demos.

    Args:
        count: Number of tasks to create.
        now: Reference time for due dates. Defaults to the current time.
    """
    if now is None:
        now = datetime.now()

    titles = [
        "Write quarterly report", "Fix login bug", "Review pull requests",
        "Plan sprint", "Update documentation", "Refactor billing module",
        "Prepare demo", "Answer support tickets", "Design onboarding flow",
        "Benchmark database", "Draft blog post", "Clean up backlog",
        "Migrate CI pipeline", "Interview candidate", "Audit permissions",
    ]
    durations = [240, 60, 45, 90, 120, 300, 90, 30, 180, 150]
    importances = list(Importance)
    difficulties = list(Difficulty)

    tasks = []
    for i in range(count):
        title = titles[i % len(titles)]
        if i >= len(titles):
            title = f"{title} {i // len(titles) + 1}"

        # Spread deadlines: some overdue, some soon, some far, some none
        due_date = None
        if i % 4 != 3:
            due_date = now + timedelta(days=(i * 3) % 20 - 2)

        dependencies = []
        if i % 5 == 4 and tasks:
            dependencies.append(tasks[i - 1].id)

        task = Task(
            id=f"T{i + 1:03d}",
            title=title,
            estimated_minutes=durations[i % len(durations)],
            importance=importances[i % len(importances)],
            difficulty=difficulties[(i * 2) % len(difficulties)],
            due_date=due_date,
            dependencies=dependencies,
            status=TaskStatus.BLOCKED if i % 7 == 6 else TaskStatus.NOT_STARTED,
        )
        tasks.append(task)

    return tasks


def create_sample_commitments(start: datetime) -> list[CalendarBlock]:
    """Create a few recurring meetings for the week starting at start."""
    blocks = []
    for day in range(7):
        current = start + timedelta(days=day)
        if current.weekday() >= 5:
            continue
        standup = datetime.combine(current.date(), time(9, 30))
        blocks.append(
            CalendarBlock(
                title="Standup",
                start_time=standup,
                end_time=standup + timedelta(minutes=15),
                status=BlockStatus.ACCEPTED,
                is_external=True,
            )
        )
        if current.weekday() in (1, 3):
            sync = datetime.combine(current.date(), time(14, 0))
            blocks.append(
                CalendarBlock(
                    title="Team sync",
                    start_time=sync,
                    end_time=sync + timedelta(hours=1),
                    status=BlockStatus.ACCEPTED,
                    is_external=True,
                )
            )
    return blocks


def run_demo(
    task_count: int = 10,
    days: int = 7,
    output_path: Optional[str] = None,
    agenda_path: Optional[str] = None,
    evening_hours: bool = False,
) -> None:
    """Run a demo schedule generation."""
    print(f"Scheduling {task_count} sample tasks over {days} days...")

    now = datetime.now()
    tasks = create_sample_tasks(task_count, now)
    tasks_map = {t.id: t for t in tasks}

    start = datetime.combine(now.date(), time.min)
    end = start + timedelta(days=days - 1)
    commitments = create_sample_commitments(start)

    windows = []
    if evening_hours:
        windows = AvailabilityWindow.weekdays(time(9, 0), time(12, 0))
        windows += AvailabilityWindow.weekdays(time(13, 0), time(17, 0))
        windows += AvailabilityWindow.weekdays(time(19, 0), time(21, 0))

    scheduler = Scheduler(InMemoryTaskStore(tasks), InMemoryBlockStore(commitments))
    request = ScheduleRequest(
        task_ids=list(tasks_map),
        schedule_start=start,
        schedule_end=end,
        availability_windows=windows,
        existing_blocks=commitments,
    )
    result = scheduler.build_schedule(request, now=now)

    validator = ScheduleValidator()
    validation = validator.validate(result, tasks_map, request.max_block_minutes)

    print(f"\n{'=' * 60}")
    print(f"Schedule: {start.date()} to {end.date()}")
    print(f"{'=' * 60}")

    summary = result.get_summary()
    print(f"  {summary['message']}")
    print(f"  Total Blocks: {summary['total_blocks']}")
    print(f"  Scheduled Hours: {summary['scheduled_minutes'] / 60:.1f}")
    print(f"  Unschedulable Tasks: {summary['unschedulable_tasks']}")
    print(f"  Conflicts Repaired: {summary['conflicts']}")

    print(f"\nPriority Order:")
    for task in sorted(tasks, key=lambda t: t.priority_score, reverse=True):
        print(f"  {task.priority_score:.3f}  {task.title:<30} {task.priority_rationale}")

    if validation.is_valid:
        print(f"\nValidation: PASSED")
    else:
        print(f"\nValidation: FAILED ({len(validation.errors)} errors)")
        for error in validation.errors[:5]:
            print(f"    - {error}")

    agenda = AgendaGenerator()
    if agenda_path:
        agenda.generate(result, tasks_map, agenda_path)
        print(f"\nAgenda saved to: {agenda_path}")
    else:
        print()
        print(agenda.generate_to_string(result, tasks_map))

    if output_path:
        PDFGenerator().generate(result, tasks_map, output_path, week_start=start.date())
        print(f"PDF saved to: {output_path}")


def run_score_demo(task_count: int = 10, advisory: bool = False) -> None:
    """Score sample tasks and print the ranking."""
    now = datetime.now()
    tasks = create_sample_tasks(task_count, now)
    store = InMemoryTaskStore(tasks)

    advisory_scorer = None
    if advisory:
        # Pretend an assistant strongly prefers every third task
        advisory_scorer = StaticAdvisoryScorer(
            {t.id: (0.95, "Assistant flagged as high leverage") for t in tasks[::3]}
        )

    service = TaskService(store, advisory=advisory_scorer)
    results = service.score_priorities([t.id for t in tasks], now=now)

    print(f"{'Rank':>4}  {'Task':<30} {'Heur.':>6} {'Adv.':>6} {'Final':>6}  Rationale")
    for rank, result in enumerate(results, 1):
        title = store.get_task(result.task_id).title
        advisory_str = f"{result.advisory_score:.2f}" if result.advisory_score is not None else "-"
        print(
            f"{rank:>4}  {title[:30]:<30} {result.heuristic_score:>6.3f} "
            f"{advisory_str:>6} {result.final_score:>6.3f}  {result.rationale}"
        )


def run_resolve_demo() -> None:
    """Show conflict repair on a small set of overlapping blocks."""
    day = datetime.combine(datetime.now().date(), time.min)
    blocks = [
        CalendarBlock("Design review", day.replace(hour=10), day.replace(hour=11)),
        CalendarBlock("Customer call", day.replace(hour=10, minute=30), day.replace(hour=11, minute=30)),
        CalendarBlock("Code review", day.replace(hour=11, minute=15), day.replace(hour=12)),
        CalendarBlock("Lunch", day.replace(hour=13), day.replace(hour=14)),
    ]

    print("Before:")
    for block in blocks:
        print(f"  {block.start_time.strftime('%H:%M')}-{block.end_time.strftime('%H:%M')}  {block.title}")

    scheduler = Scheduler(InMemoryTaskStore())
    conflicts = scheduler.resolve_conflicts(blocks)

    print(f"\nConflicts: {len(conflicts)}")
    titles = {b.id: b.title for b in blocks}
    for conflict in conflicts:
        print(
            f"  {titles[conflict.block1_id]} / {titles[conflict.block2_id]}: "
            f"{conflict.overlap_start.strftime('%H:%M')}-{conflict.overlap_end.strftime('%H:%M')} "
            f"-> {conflict.resolution}"
        )

    print("\nAfter:")
    for block in blocks:
        print(f"  {block.start_time.strftime('%H:%M')}-{block.end_time.strftime('%H:%M')}  {block.title}")


def main() -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="Task Planner - Prioritize tasks and auto-schedule your week",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s demo                       Schedule 10 sample tasks over 7 days
  %(prog)s demo --count 20            Schedule 20 sample tasks
  %(prog)s demo --output week.pdf     Generate PDF output
  %(prog)s demo --evenings            Use split windows with evening hours

  %(prog)s score                      Rank sample tasks by priority
  %(prog)s score --advisory           Blend in a sample advisory source

  %(prog)s resolve-demo               Show overlap repair
        """,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    demo_parser = subparsers.add_parser("demo", help="Run demo schedule generation")
    demo_parser.add_argument(
        "--count", "-c",
        type=int,
        default=10,
        help="Number of tasks to generate (default: 10)",
    )
    demo_parser.add_argument(
        "--days", "-d",
        type=int,
        default=7,
        help="Number of days to schedule (default: 7)",
    )
    demo_parser.add_argument(
        "--output", "-o",
        type=str,
        help="Output PDF file path",
    )
    demo_parser.add_argument(
        "--agenda", "-a",
        type=str,
        help="Write the text agenda to this file instead of printing it",
    )
    demo_parser.add_argument(
        "--evenings",
        action="store_true",
        help="Use split weekday windows including evening hours",
    )

    score_parser = subparsers.add_parser("score", help="Rank sample tasks by priority")
    score_parser.add_argument(
        "--count", "-c",
        type=int,
        default=10,
        help="Number of tasks to generate (default: 10)",
    )
    score_parser.add_argument(
        "--advisory",
        action="store_true",
        help="Blend in scores from a sample advisory source",
    )

    subparsers.add_parser("resolve-demo", help="Show overlap detection and repair")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "demo":
        run_demo(args.count, args.days, args.output, args.agenda, args.evenings)
        return 0
    elif args.command == "score":
        run_score_demo(args.count, args.advisory)
        return 0
    elif args.command == "resolve-demo":
        run_resolve_demo()
        return 0
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
