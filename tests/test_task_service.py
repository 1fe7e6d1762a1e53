"""Tests for task management and priority scoring through the service."""

from datetime import datetime, timedelta

import pytest

from taskplanner.domain.models import Difficulty, Importance, TaskQuery, TaskStatus
from taskplanner.scheduling.advisory import AdvisoryScorer, StaticAdvisoryScorer
from taskplanner.scheduling.task_service import TaskService
from taskplanner.storage.base import TaskNotFoundError
from taskplanner.storage.memory import InMemoryTaskStore

NOW = datetime(2024, 1, 15, 9, 0)


class BrokenAdvisory(AdvisoryScorer):
    def get_adjustments(self, tasks):
        raise ConnectionError("no route to host")


class TestTaskService:
    """Tests for TaskService CRUD."""

    @pytest.fixture
    def store(self):
        return InMemoryTaskStore()

    @pytest.fixture
    def service(self, store):
        return TaskService(store)

    def test_create_task_scores_and_saves(self, service, store):
        task = service.create_task(
            "Prepare slides", now=NOW, estimated_minutes=45, importance=Importance.HIGH
        )

        assert store.get_task(task.id) is task
        assert task.priority_score > 0
        assert task.priority_rationale == "High importance"
        assert task.priority_computed_at == NOW
        assert task.created_at == NOW

    def test_create_task_rejects_bad_estimate(self, service, store):
        with pytest.raises(ValueError):
            service.create_task("Broken", now=NOW, estimated_minutes=0)
        assert len(store) == 0

    def test_update_rescores(self, service):
        task = service.create_task("Pay invoice", now=NOW)
        before = task.priority_score

        service.update_task(
            task.id, now=NOW + timedelta(minutes=1), due_date=NOW + timedelta(hours=2)
        )

        assert task.priority_score > before
        assert "Due soon" in task.priority_rationale
        assert task.updated_at == NOW + timedelta(minutes=1)

    def test_update_to_completed_sets_timestamp(self, service):
        task = service.create_task("Ship", now=NOW)
        later = NOW + timedelta(hours=3)
        service.update_task(task.id, now=later, status=TaskStatus.COMPLETED)
        assert task.completed_at == later

    def test_update_unknown_field(self, service):
        task = service.create_task("Ship", now=NOW)
        with pytest.raises(ValueError):
            service.update_task(task.id, now=NOW, priority_score=1.0)

    def test_update_bad_estimate(self, service):
        task = service.create_task("Ship", now=NOW)
        with pytest.raises(ValueError):
            service.update_task(task.id, now=NOW, estimated_minutes=-5)
        assert task.estimated_minutes == 60

    def test_update_converts_plain_enum_values(self, service):
        """Raw ordinals and status strings are turned into enum members."""
        task = service.create_task("Ship", now=NOW)
        before = task.priority_score

        service.update_task(
            task.id,
            now=NOW + timedelta(minutes=1),
            importance=3,
            difficulty=2,
            status="in_progress",
        )

        assert task.importance is Importance.HIGH
        assert task.difficulty is Difficulty.EASY
        assert task.status is TaskStatus.IN_PROGRESS
        assert task.priority_score > before
        assert task.priority_rationale == "High importance; Quick win opportunity"

    def test_update_rejects_values_outside_enum(self, service):
        task = service.create_task("Ship", now=NOW)
        with pytest.raises(ValueError):
            service.update_task(task.id, now=NOW, importance=9)
        with pytest.raises(ValueError):
            service.update_task(task.id, now=NOW, status="someday")
        assert task.importance is Importance.MEDIUM
        assert task.status is TaskStatus.NOT_STARTED

    def test_update_unknown_task(self, service):
        with pytest.raises(TaskNotFoundError):
            service.update_task("missing", now=NOW, title="x")

    def test_delete(self, service):
        task = service.create_task("Temp", now=NOW)
        assert service.delete_task(task.id) is True
        assert service.get_task(task.id) is None
        assert service.delete_task(task.id) is False

    def test_dependencies_change_rationale(self, service):
        base = service.create_task("Design", now=NOW)
        task = service.create_task("Build", now=NOW)

        service.add_dependency(task.id, base.id, now=NOW)
        assert task.dependencies == [base.id]
        assert "Has dependencies" in task.priority_rationale

        service.add_dependency(task.id, base.id, now=NOW)
        assert task.dependencies == [base.id]

        service.remove_dependency(task.id, base.id, now=NOW)
        assert task.dependencies == []
        assert task.priority_rationale == "Standard priority"

    def test_list_tasks_with_query(self, service):
        service.create_task("A", now=NOW, project_id="p1", importance=Importance.LOW)
        service.create_task("B", now=NOW, project_id="p1", importance=Importance.CRITICAL)
        service.create_task("C", now=NOW, project_id="p2")

        tasks = service.list_tasks(TaskQuery(project_id="p1"))
        assert [t.title for t in tasks] == ["B", "A"]

        assert len(service.list_tasks(TaskQuery(project_id="p1", limit=1))) == 1
        assert len(service.list_tasks()) == 3


class TestScorePriorities:
    """Tests for TaskService.score_priorities."""

    @pytest.fixture
    def store(self):
        return InMemoryTaskStore()

    def make_tasks(self, service):
        low = service.create_task("Low", now=NOW, importance=Importance.LOW)
        high = service.create_task("High", now=NOW, importance=Importance.CRITICAL)
        return low, high

    def test_ranked_results(self, store):
        service = TaskService(store)
        low, high = self.make_tasks(service)

        results = service.score_priorities([low.id, high.id, "missing"], now=NOW)

        assert [r.task_id for r in results] == [high.id, low.id]
        scores = [r.final_score for r in results]
        assert scores == sorted(scores, reverse=True)
        for result in results:
            assert 0.0 <= result.final_score <= 1.0

    def test_advisory_is_blended_and_stored(self, store):
        service = TaskService(store)
        low, high = self.make_tasks(service)
        service.scorer.advisory = StaticAdvisoryScorer({low.id: (0.9, "Customer waiting")})

        results = service.score_priorities([low.id, high.id], now=NOW)

        result = next(r for r in results if r.task_id == low.id)
        assert result.final_score == pytest.approx(0.7 * result.heuristic_score + 0.27)
        assert store.get_task(low.id).priority_score == pytest.approx(result.final_score)
        assert store.get_task(low.id).priority_rationale == "Customer waiting"

    def test_broken_advisory_falls_back(self, store):
        service = TaskService(store, advisory=BrokenAdvisory())
        low, high = self.make_tasks(service)

        results = service.score_priorities([low.id, high.id], now=NOW)

        assert [r.task_id for r in results] == [high.id, low.id]
        for result in results:
            assert result.final_score == result.heuristic_score

    def test_empty(self, store):
        assert TaskService(store).score_priorities([], now=NOW) == []
