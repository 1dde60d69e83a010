"""Unit tests for task commands."""

import asyncio

from typer.testing import CliRunner

from focusflow.adapters.sqlite import SqliteTaskRepository
from focusflow.commands.tasks import app
from focusflow.models import TaskCreate
from focusflow.utils.exit_codes import ERROR_NOT_FOUND

runner = CliRunner()


class TestTasksCommand:
    """Tests for 'focusflow tasks' commands."""

    def test_list_empty(self, cli_env):
        result = runner.invoke(app, ["list"])

        assert result.exit_code == 0
        assert "No tasks found" in result.output

    def test_add_then_list(self, cli_env):
        added = runner.invoke(app, ["add", "Write report", "--estimate", "3"])
        assert added.exit_code == 0, added.output
        assert "Added task" in added.output
        assert "--task-id" in added.output

        result = runner.invoke(app, ["list"])

        assert "Write report" in result.output
        assert "0/3" in result.output

    def test_list_limit(self, cli_env):
        for title in ("one", "two"):
            runner.invoke(app, ["add", title])

        result = runner.invoke(app, ["list", "--limit", "1"])

        assert "Tasks (1)" in result.output


def add_task(cli_env, title="Write report"):
    tasks = SqliteTaskRepository(cli_env.db_path)
    return tasks, asyncio.run(tasks.add(TaskCreate(title=title)))


class TestTaskLifecycleCommands:
    """Tests for 'focusflow tasks done/reopen/delete'."""

    def test_done_hides_task_from_default_list(self, cli_env):
        tasks, task = add_task(cli_env)

        result = runner.invoke(app, ["done", task.id])

        assert result.exit_code == 0, result.output
        assert "Completed: Write report" in result.output
        assert asyncio.run(tasks.get(task.id)).is_completed is True
        assert "No tasks found" in runner.invoke(app, ["list"]).output
        assert "Write report" in runner.invoke(app, ["list", "--all"]).output

    def test_reopen(self, cli_env):
        tasks, task = add_task(cli_env)
        runner.invoke(app, ["done", task.id])

        result = runner.invoke(app, ["reopen", task.id])

        assert result.exit_code == 0, result.output
        assert asyncio.run(tasks.get(task.id)).is_completed is False

    def test_done_missing(self, cli_env):
        result = runner.invoke(app, ["done", "task-404"])

        assert result.exit_code == ERROR_NOT_FOUND
        assert "Task not found" in result.output

    def test_delete_with_yes(self, cli_env):
        _, task = add_task(cli_env)

        result = runner.invoke(app, ["delete", task.id, "--yes"])

        assert result.exit_code == 0, result.output
        assert "No tasks found" in runner.invoke(app, ["list", "--all"]).output

    def test_delete_cancelled_at_prompt(self, cli_env):
        _, task = add_task(cli_env)

        result = runner.invoke(app, ["delete", task.id], input="n\n")

        assert result.exit_code == 0
        assert "Cancelled" in result.output
        assert "Write report" in runner.invoke(app, ["list"]).output

    def test_delete_missing(self, cli_env):
        result = runner.invoke(app, ["delete", "task-404", "--yes"])

        assert result.exit_code == ERROR_NOT_FOUND
