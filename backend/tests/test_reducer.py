"""Tests for projectpilot.engine.reducer module."""
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from projectpilot.engine.reducer import (
    TaskIndex,
    apply_update,
    build_project,
    clamp_progress,
    reconcile_tasks,
    reply_message,
)
from projectpilot.schemas.consultancy import ProjectCreationResult, TaskUpdate
from projectpilot.schemas.project import Blocker, Priorities, Project, TaskStatus

from conftest import creation_payload, make_project, make_task, make_update


class TestProgress:
    """Progress is a clamped running total."""

    @pytest.mark.parametrize("current,delta,expected", [
        (95, 20, 100),
        (5, -20, 0),
        (40, 15, 55),
        (0, 0, 0),
        (100, -100, 0),
        (60, -10, 50),
    ])
    def test_progress_is_clamped(self, current, delta, expected):
        project = make_project(progress=current)
        result = apply_update(project, make_update(progressUpdate=delta))
        assert result.progress == expected

    def test_clamp_progress_bounds(self):
        assert clamp_progress(-1) == 0
        assert clamp_progress(101) == 100
        assert clamp_progress(42) == 42


class TestTaskAdd:
    """Tests for the add action."""

    def test_add_appends_new_task_with_defaults(self):
        project = make_project(make_task("t1", "Design UI"))
        update = make_update(taskUpdates=[
            {"taskId": "Write tests", "name": "Write tests", "action": "add"},
        ])

        result = apply_update(project, update)

        assert [t.name for t in result.tasks] == ["Design UI", "Write tests"]
        added = result.tasks[1]
        assert added.description == ""
        assert added.status == TaskStatus.NOT_STARTED
        assert added.subtasks == []

    def test_add_generates_local_id_instead_of_temporary_key(self):
        project = make_project()
        update = make_update(taskUpdates=[
            {"taskId": "Write tests", "name": "Write tests", "action": "add"},
        ])

        added = apply_update(project, update).tasks[0]

        assert added.id != "Write tests"
        assert added.id.startswith("id_")

    def test_add_keeps_supplied_description_and_status(self):
        update = make_update(taskUpdates=[{
            "name": "Set up CI",
            "description": "GitHub Actions pipeline",
            "status": "In Progress",
            "action": "add",
        }])

        added = apply_update(make_project(), update).tasks[0]

        assert added.description == "GitHub Actions pipeline"
        assert added.status == TaskStatus.IN_PROGRESS

    def test_add_is_noop_when_name_exists(self):
        project = make_project(make_task("t1", "Design UI", "Wireframes"))
        update = make_update(taskUpdates=[
            {"name": "Design UI", "description": "Something else", "action": "add"},
        ])

        result = apply_update(project, update)

        assert len(result.tasks) == 1
        assert result.tasks[0].description == "Wireframes"

    def test_add_is_noop_when_id_exists(self):
        project = make_project(make_task("t1", "Design UI"))
        update = make_update(taskUpdates=[{"taskId": "t1", "name": "Other", "action": "add"}])

        result = apply_update(project, update)

        assert [t.name for t in result.tasks] == ["Design UI"]

    def test_repeated_add_in_one_update_creates_one_task(self):
        update = make_update(taskUpdates=[
            {"name": "Write tests", "action": "add"},
            {"name": "Write tests", "action": "add"},
        ])

        result = apply_update(make_project(), update)

        assert [t.name for t in result.tasks] == ["Write tests"]


class TestTaskUpdate:
    """Tests for the update and complete actions."""

    def test_update_is_partial_patch(self):
        project = make_project(make_task("t1", "A", "D"))
        update = make_update(taskUpdates=[{"action": "update", "name": "A", "status": "In Progress"}])

        task = apply_update(project, update).tasks[0]

        assert task.name == "A"
        assert task.description == "D"
        assert task.status == TaskStatus.IN_PROGRESS

    def test_empty_description_does_not_overwrite(self):
        project = make_project(make_task("t1", "A", "D"))
        update = make_update(taskUpdates=[{"action": "update", "name": "A", "description": ""}])

        assert apply_update(project, update).tasks[0].description == "D"

    def test_complete_sets_status_and_keeps_position(self):
        project = make_project(
            make_task("t1", "Implement search"),
            make_task("t2", "Build favorites"),
        )
        update = make_update(taskUpdates=[
            {"name": "Implement search", "action": "complete", "status": "Completed"},
        ])

        result = apply_update(project, update)

        assert [t.id for t in result.tasks] == ["t1", "t2"]
        assert result.tasks[0].status == TaskStatus.COMPLETED

    def test_update_by_id_can_rename(self):
        project = make_project(make_task("t1", "Search"))
        update = make_update(taskUpdates=[
            {"taskId": "t1", "name": "Full-text search", "action": "update"},
        ])

        task = apply_update(project, update).tasks[0]

        assert task.id == "t1"
        assert task.name == "Full-text search"

    def test_dangling_update_is_ignored(self):
        project = make_project(make_task("t1", "A", "D"))
        update = make_update(taskUpdates=[
            {"taskId": "nope", "name": "Ghost", "action": "update", "status": "Blocked"},
        ])

        result = apply_update(project, update)

        assert result.tasks == project.tasks

    def test_id_match_takes_precedence_over_name(self):
        project = make_project(
            make_task("t1", "Search"),
            make_task("t2", "Favorites"),
        )
        update = make_update(taskUpdates=[
            {"taskId": "t2", "name": "Search", "action": "update", "status": "Blocked"},
        ])

        result = apply_update(project, update)

        assert result.tasks[0].status == TaskStatus.NOT_STARTED
        assert result.tasks[1].status == TaskStatus.BLOCKED

    def test_shared_name_resolves_to_most_recent_task(self):
        project = make_project(
            make_task("t1", "Polish"),
            make_task("t2", "Polish"),
        )
        update = make_update(taskUpdates=[{"name": "Polish", "action": "complete", "status": "Completed"}])

        result = apply_update(project, update)

        assert result.tasks[0].status == TaskStatus.NOT_STARTED
        assert result.tasks[1].status == TaskStatus.COMPLETED

    def test_name_matching_is_case_sensitive(self):
        project = make_project(make_task("t1", "Search"))
        update = make_update(taskUpdates=[{"name": "search", "action": "update", "status": "Blocked"}])

        assert apply_update(project, update).tasks[0].status == TaskStatus.NOT_STARTED


class TestTaskRemove:
    """Tests for the remove action."""

    def test_remove_existing_task(self):
        project = make_project(make_task("t1", "A"), make_task("t2", "B"))
        update = make_update(taskUpdates=[{"action": "remove", "name": "A"}])

        result = apply_update(project, update)

        assert [t.name for t in result.tasks] == ["B"]

    def test_remove_missing_task_is_noop(self):
        project = make_project(make_task("t2", "B"))
        update = make_update(taskUpdates=[{"action": "remove", "name": "A"}])

        assert apply_update(project, update).tasks == project.tasks

    def test_updates_apply_sequentially(self):
        """Later entries in the same update see earlier effects."""
        project = make_project(make_task("t1", "A"))
        update = make_update(taskUpdates=[
            {"action": "remove", "name": "A"},
            {"action": "update", "name": "A", "status": "Blocked"},
            {"action": "add", "name": "A"},
            {"action": "update", "name": "A", "status": "In Progress"},
        ])

        result = apply_update(project, update)

        assert len(result.tasks) == 1
        assert result.tasks[0].id != "t1"
        assert result.tasks[0].status == TaskStatus.IN_PROGRESS


class TestBlockers:
    """Blockers only ever accumulate."""

    def test_blockers_are_appended_in_order(self):
        project = make_project()
        project = project.model_copy(update={
            "blockers": [Blocker(id="b0", description="Old blocker")],
        })
        update = make_update(blockers=[
            {"description": "No API key"},
            {"description": "Designer on leave"},
        ])

        result = apply_update(project, update)

        assert [b.description for b in result.blockers] == [
            "Old blocker", "No API key", "Designer on leave",
        ]
        assert result.blockers[0].id == "b0"
        assert all(not b.resolved for b in result.blockers)
        assert len({b.id for b in result.blockers}) == 3

    @pytest.mark.parametrize("counts", [[0, 1, 2], [3, 0, 1], [1, 1, 1]])
    def test_blocker_list_grows_by_exactly_n(self, counts):
        project = make_project()
        for n in counts:
            before = len(project.blockers)
            project = apply_update(project, make_update(
                blockers=[{"description": f"blocker {i}"} for i in range(n)],
            ))
            assert len(project.blockers) == before + n

    def test_absent_blockers_leave_list_unchanged(self):
        project = apply_update(make_project(), make_update(blockers=[{"description": "x"}]))
        result = apply_update(project, make_update())
        assert result.blockers == project.blockers


class TestPriorities:
    """Priorities are running totals of deltas."""

    def test_successive_deltas_accumulate(self):
        project = make_project()
        project = apply_update(project, make_update(priorityUpdate={"speed": 2}))
        project = apply_update(project, make_update(priorityUpdate={"speed": -1}))

        assert project.priorities == Priorities(speed=1, scope=0)

    def test_missing_priority_update_leaves_totals(self):
        project = apply_update(make_project(), make_update(priorityUpdate={"speed": 3, "scope": -2}))
        result = apply_update(project, make_update())

        assert result.priorities == Priorities(speed=3, scope=-2)

    def test_explicit_zero_and_absent_are_both_noops(self):
        project = make_project()
        zero = apply_update(project, make_update(priorityUpdate={"speed": 0, "scope": 0}))
        empty = apply_update(project, make_update(priorityUpdate={}))

        assert zero.priorities == project.priorities
        assert empty.priorities == project.priorities


class TestSuggestedActions:
    def test_replaced_wholesale(self):
        result = apply_update(make_project(), make_update(suggestedActions=["A", "B"]))
        assert result.suggested_actions == ["A", "B"]

    def test_empty_list_clears(self):
        result = apply_update(make_project(), make_update(suggestedActions=[]))
        assert result.suggested_actions == []


class TestPurity:
    def test_apply_update_does_not_mutate_input(self):
        project = make_project(make_task("t1", "A", "D"), make_task("t2", "B"), progress=30)
        before = project.model_dump()
        update = make_update(
            progressUpdate=50,
            priorityUpdate={"speed": 1, "scope": 1},
            blockers=[{"description": "Blocked"}],
            suggestedActions=["Next"],
            taskUpdates=[
                {"name": "A", "action": "complete", "status": "Completed"},
                {"name": "B", "action": "remove"},
                {"name": "C", "action": "add"},
            ],
        )

        result = apply_update(project, update)

        assert project.model_dump() == before
        assert result is not project
        assert result.tasks is not project.tasks

    def test_untouched_fields_are_carried_over(self):
        project = make_project(make_task("t1", "A"))
        result = apply_update(project, make_update())

        assert result.project_name == project.project_name
        assert result.project_goals == project.project_goals
        assert result.timeline == project.timeline
        assert result.tasks == project.tasks


class TestTaskIndex:
    def test_rename_moves_name_entry(self):
        index = TaskIndex([make_task("t1", "Old")])
        index.replace(make_task("t1", "New"))

        assert index.resolve(None, "Old") is None
        assert index.resolve(None, "New").id == "t1"

    def test_duplicate_id_rejected(self):
        index = TaskIndex([make_task("t1", "A")])
        with pytest.raises(ValueError):
            index.add(make_task("t1", "B"))

    def test_reconcile_without_updates_returns_same_order(self):
        tasks = [make_task("t1", "A"), make_task("t2", "B"), make_task("t3", "C")]
        updates = [TaskUpdate(name="Z", action="remove")]
        assert [t.id for t in reconcile_tasks(tasks, updates)] == ["t1", "t2", "t3"]


class TestBuildProject:
    def test_initial_project_state(self):
        now = datetime(2026, 10, 16, 9, 0, tzinfo=timezone.utc)
        result = ProjectCreationResult.model_validate(creation_payload(task_count=4))

        project = build_project(result, now)

        assert project.project_name == "Recipe App"
        assert project.progress == 0
        assert project.priorities == Priorities(speed=0, scope=0)
        assert len(project.tasks) == 4
        assert len({t.id for t in project.tasks}) == 4
        assert all(t.status == TaskStatus.NOT_STARTED for t in project.tasks)
        assert project.blockers == []
        assert project.stakeholders == []
        assert project.resources == []
        assert project.timeline.start_date == now
        assert project.timeline.target_date is None
        assert project.suggested_actions == ["Plan the search feature", "Sketch the main screens"]

    def test_reply_message(self):
        now = datetime(2026, 10, 16, tzinfo=timezone.utc)
        message = reply_message("Hello", now)
        assert (message.sender, message.text, message.timestamp) == ("ai", "Hello", now)


class TestTaskStatus:
    @pytest.mark.parametrize("raw", ["Not Started", "NotStarted", "not_started", "notstarted"])
    def test_compact_spellings_are_accepted(self, raw):
        assert TaskStatus(raw) is TaskStatus.NOT_STARTED


class TestProjectDocument:
    def test_duplicate_task_ids_rejected(self):
        document = make_project(make_task("t1", "A"), make_task("t2", "B")).to_document()
        document["tasks"][1]["id"] = "t1"

        with pytest.raises(ValidationError, match="Duplicate task id"):
            Project.model_validate(document)

    def test_open_blockers_skips_resolved(self):
        project = make_project()
        project.blockers = [
            Blocker(id="b1", description="No designer"),
            Blocker(id="b2", description="API quota", resolved=True),
        ]

        assert [b.id for b in project.open_blockers()] == ["b1"]
