import itertools
import unittest

from taskboard.actions import (
    AddMainTask,
    AddProject,
    AddSubtask,
    DeleteMainTask,
    DeleteProject,
    DeleteSubtask,
    DuplicateMainTask,
    InitProjects,
    SetSelectedProject,
    ToggleMainTaskExpand,
    ToggleProjectExpand,
    ToggleSubtaskComplete,
    UpdateMainTask,
    UpdateProject,
    UpdateSubtask,
)
from taskboard.models import MainTask, Project, StoreState, Subtask
from taskboard.store.reducer import reduce


def _allocator(prefix: str = "id"):
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


def _sample_state() -> StoreState:
    return StoreState(
        projects=[
            Project(
                id="P1",
                title="Website",
                mainTasks=[
                    MainTask(
                        id="T1",
                        title="Design",
                        subtasks=[
                            Subtask(id="S1", title="Wireframes", completed=True, estimatedTime=60),
                            Subtask(id="S2", title="Mockups", completed=False, estimatedTime=90),
                        ],
                    ),
                    MainTask(id="T2", title="Build"),
                ],
            ),
            Project(id="P2", title="Garden"),
        ],
        selectedProjectId="P1",
    )


class ProjectActionTests(unittest.TestCase):
    def test_init_replaces_projects(self) -> None:
        state = _sample_state()
        new = reduce(state, InitProjects(projects=[Project(id="X", title="X")]))
        self.assertEqual([p.id for p in new.projects], ["X"])
        self.assertIsNone(new.selectedProjectId)

    def test_init_keeps_selection_still_present(self) -> None:
        state = _sample_state()
        new = reduce(state, InitProjects(projects=[Project(id="P1", title="Website")]))
        self.assertEqual(new.selectedProjectId, "P1")

    def test_init_empty_clears_selection(self) -> None:
        new = reduce(_sample_state(), InitProjects(projects=[]))
        self.assertEqual(new.projects, [])
        self.assertIsNone(new.selectedProjectId)

    def test_add_project_appends_expanded_and_selects_it(self) -> None:
        state = StoreState()
        new = reduce(state, AddProject(title="Kitchen"), _allocator())
        self.assertEqual(len(new.projects), 1)
        project = new.projects[0]
        self.assertEqual(project.id, "id-1")
        self.assertEqual(project.title, "Kitchen")
        self.assertEqual(project.mainTasks, [])
        self.assertTrue(project.isExpanded)
        self.assertEqual(new.selectedProjectId, "id-1")
        self.assertEqual(state.projects, [])

    def test_add_project_uses_id_assigned_in_process(self) -> None:
        new = reduce(StoreState(), AddProject(title="Kitchen", id="fixed"), _allocator())
        self.assertEqual(new.projects[0].id, "fixed")

    def test_update_project_title(self) -> None:
        new = reduce(_sample_state(), UpdateProject(id="P2", title="Allotment"))
        self.assertEqual(new.projects[1].title, "Allotment")
        self.assertEqual(new.projects[0].title, "Website")

    def test_delete_project_cascades_and_clears_selection(self) -> None:
        state = _sample_state()
        new = reduce(state, DeleteProject(id="P1"))
        self.assertEqual([p.id for p in new.projects], ["P2"])
        self.assertIsNone(new.selectedProjectId)
        remaining_ids = {t.id for p in new.projects for t in p.mainTasks}
        self.assertNotIn("T1", remaining_ids)

    def test_delete_other_project_keeps_selection(self) -> None:
        new = reduce(_sample_state(), DeleteProject(id="P2"))
        self.assertEqual(new.selectedProjectId, "P1")

    def test_toggle_project_expand(self) -> None:
        new = reduce(_sample_state(), ToggleProjectExpand(id="P1"))
        self.assertFalse(new.projects[0].isExpanded)
        self.assertTrue(reduce(new, ToggleProjectExpand(id="P1")).projects[0].isExpanded)

    def test_set_and_clear_selected_project(self) -> None:
        state = _sample_state()
        self.assertEqual(reduce(state, SetSelectedProject(projectId="P2")).selectedProjectId, "P2")
        self.assertIsNone(reduce(state, SetSelectedProject(projectId="")).selectedProjectId)
        self.assertIsNone(reduce(state, SetSelectedProject()).selectedProjectId)

    def test_selecting_unknown_project_is_a_no_op(self) -> None:
        state = _sample_state()
        self.assertIs(reduce(state, SetSelectedProject(projectId="ghost")), state)
        empty = StoreState()
        self.assertIs(reduce(empty, SetSelectedProject(projectId="P1")), empty)


class MainTaskActionTests(unittest.TestCase):
    def test_add_main_task(self) -> None:
        new = reduce(_sample_state(), AddMainTask(projectId="P2", title="Plant"), _allocator("t"))
        task = new.projects[1].mainTasks[0]
        self.assertEqual(task.id, "t-1")
        self.assertEqual(task.title, "Plant")
        self.assertEqual(task.subtasks, [])
        self.assertTrue(task.isExpanded)

    def test_update_main_task(self) -> None:
        new = reduce(_sample_state(), UpdateMainTask(projectId="P1", taskId="T2", title="Ship"))
        self.assertEqual(new.projects[0].mainTasks[1].title, "Ship")

    def test_delete_main_task_removes_subtasks(self) -> None:
        new = reduce(_sample_state(), DeleteMainTask(projectId="P1", taskId="T1"))
        self.assertEqual([t.id for t in new.projects[0].mainTasks], ["T2"])

    def test_toggle_main_task_expand(self) -> None:
        new = reduce(_sample_state(), ToggleMainTaskExpand(projectId="P1", taskId="T1"))
        self.assertFalse(new.projects[0].mainTasks[0].isExpanded)
        self.assertTrue(new.projects[0].mainTasks[1].isExpanded)

    def test_duplicate_main_task(self) -> None:
        state = _sample_state()
        source = state.projects[0].mainTasks[0]
        new = reduce(state, DuplicateMainTask(projectId="P1", task=source), _allocator("dup"))

        tasks = new.projects[0].mainTasks
        self.assertEqual(len(tasks), 3)
        clone = tasks[-1]
        self.assertEqual(clone.title, "Design (copy)")
        self.assertTrue(clone.isExpanded)
        self.assertEqual(len(clone.subtasks), len(source.subtasks))
        self.assertTrue(all(not s.completed for s in clone.subtasks))
        self.assertEqual([s.title for s in clone.subtasks], ["Wireframes", "Mockups"])
        self.assertEqual([s.estimatedTime for s in clone.subtasks], [60, 90])

        source_ids = {source.id, *(s.id for s in source.subtasks)}
        clone_ids = {clone.id, *(s.id for s in clone.subtasks)}
        self.assertEqual(len(clone_ids), 3)
        self.assertTrue(source_ids.isdisjoint(clone_ids))
        # Source untouched
        self.assertTrue(tasks[0].subtasks[0].completed)


class SubtaskActionTests(unittest.TestCase):
    def test_add_subtask_starts_incomplete(self) -> None:
        new = reduce(
            _sample_state(),
            AddSubtask(projectId="P1", taskId="T2", title="Deploy", estimatedTime=30),
            _allocator("s"),
        )
        subtask = new.projects[0].mainTasks[1].subtasks[0]
        self.assertEqual(subtask.id, "s-1")
        self.assertEqual(subtask.estimatedTime, 30)
        self.assertFalse(subtask.completed)

    def test_update_subtask_title_and_time(self) -> None:
        new = reduce(
            _sample_state(),
            UpdateSubtask(projectId="P1", taskId="T1", subtaskId="S2", title="Hi-fi mockups", estimatedTime=120),
        )
        subtask = new.projects[0].mainTasks[0].subtasks[1]
        self.assertEqual(subtask.title, "Hi-fi mockups")
        self.assertEqual(subtask.estimatedTime, 120)
        self.assertFalse(subtask.completed)

    def test_delete_subtask(self) -> None:
        new = reduce(_sample_state(), DeleteSubtask(projectId="P1", taskId="T1", subtaskId="S1"))
        self.assertEqual([s.id for s in new.projects[0].mainTasks[0].subtasks], ["S2"])

    def test_toggle_twice_restores_completion(self) -> None:
        state = _sample_state()
        action = ToggleSubtaskComplete(projectId="P1", taskId="T1", subtaskId="S1")
        once = reduce(state, action)
        self.assertFalse(once.projects[0].mainTasks[0].subtasks[0].completed)
        twice = reduce(once, action)
        self.assertEqual(twice, state)


class StructuralMissTests(unittest.TestCase):
    def test_missing_ids_return_the_same_state(self) -> None:
        state = _sample_state()
        misses = [
            UpdateProject(id="nope", title="x"),
            DeleteProject(id="nope"),
            ToggleProjectExpand(id="nope"),
            AddMainTask(projectId="nope", title="x"),
            UpdateMainTask(projectId="P1", taskId="nope", title="x"),
            DeleteMainTask(projectId="P1", taskId="nope"),
            ToggleMainTaskExpand(projectId="nope", taskId="T1"),
            AddSubtask(projectId="P1", taskId="nope", title="x", estimatedTime=5),
            UpdateSubtask(projectId="P1", taskId="T1", subtaskId="nope", title="x", estimatedTime=5),
            DeleteSubtask(projectId="P1", taskId="T1", subtaskId="nope"),
            ToggleSubtaskComplete(projectId="P2", taskId="T1", subtaskId="S1"),
            DuplicateMainTask(projectId="nope", task=state.projects[0].mainTasks[0]),
        ]
        for action in misses:
            with self.subTest(action=action.type):
                self.assertIs(reduce(state, action), state)

    def test_untouched_branches_are_shared(self) -> None:
        state = _sample_state()
        new = reduce(state, ToggleSubtaskComplete(projectId="P1", taskId="T1", subtaskId="S2"))
        self.assertIsNot(new, state)
        self.assertIs(new.projects[1], state.projects[1])
        self.assertIs(new.projects[0].mainTasks[1], state.projects[0].mainTasks[1])
        self.assertIs(new.projects[0].mainTasks[0].subtasks[0], state.projects[0].mainTasks[0].subtasks[0])


if __name__ == "__main__":
    unittest.main()
