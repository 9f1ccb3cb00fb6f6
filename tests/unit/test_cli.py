"""Tests for the command-line interface."""

import json
from datetime import datetime

import pytest
from typer.testing import CliRunner

from task_pipeline.cli import app
from task_pipeline.task_store import TaskStore

runner = CliRunner()


@pytest.fixture
def seeded_store(store_path, reference_now: datetime):
    """Store file holding one task due on the reference date."""
    store = TaskStore(store_path)
    task = store.create("今天交报告", now=reference_now)
    return store_path, task


class TestParseCommand:
    def test_json_output(self):
        result = runner.invoke(app, ["parse", "明天下午3点开会", "--now", "2024-06-10T09:00:00", "--json"])
        assert result.exit_code == 0

        record = json.loads(result.output)
        assert record["dueDate"] == "2024-06-11"
        assert record["startTime"] == "15:00"
        assert record["category"] == "work"

    def test_table_with_explain(self):
        result = runner.invoke(app, ["parse", "复习会议资料", "--explain"])
        assert result.exit_code == 0
        assert "复习" in result.output
        assert "会议" in result.output

    def test_blank_text(self):
        result = runner.invoke(app, ["parse", "   "])
        assert result.exit_code == 1
        assert "must not be empty" in result.output


class TestStoreCommands:
    def test_add(self, store_path):
        result = runner.invoke(app, ["add", "明天开会", "--store", str(store_path)])
        assert result.exit_code == 0
        assert len(TaskStore(store_path).get_all()) == 1

    def test_add_blank(self, store_path):
        result = runner.invoke(app, ["add", " ", "--store", str(store_path)])
        assert result.exit_code == 1
        assert not store_path.exists()

    def test_list_pending(self, seeded_store):
        store_path, task = seeded_store
        result = runner.invoke(app, ["list", "--pending", "--store", str(store_path)])
        assert result.exit_code == 0
        assert task.id in result.output

    def test_done(self, seeded_store):
        store_path, task = seeded_store
        result = runner.invoke(app, ["done", task.id, "--store", str(store_path)])
        assert result.exit_code == 0
        assert TaskStore(store_path).get(task.id).completed

    def test_done_unknown_id(self, store_path):
        result = runner.invoke(app, ["done", "missing", "--store", str(store_path)])
        assert result.exit_code == 1
        assert "Task not found" in result.output

    def test_update(self, seeded_store):
        store_path, task = seeded_store
        result = runner.invoke(app, [
            "update", task.id, "--due", "2024-07-01", "--start", "10:00", "--store", str(store_path),
        ])
        assert result.exit_code == 0
        updated = TaskStore(store_path).get(task.id)
        assert updated.due_date.isoformat() == "2024-07-01"
        assert updated.start_time.hour == 10

    def test_update_nothing(self, seeded_store):
        store_path, task = seeded_store
        result = runner.invoke(app, ["update", task.id, "--store", str(store_path)])
        assert result.exit_code == 1

    def test_delete(self, seeded_store):
        store_path, task = seeded_store
        result = runner.invoke(app, ["delete", task.id, "--yes", "--store", str(store_path)])
        assert result.exit_code == 0
        assert TaskStore(store_path).get_all() == []

    def test_batch_complete(self, seeded_store):
        store_path, task = seeded_store
        result = runner.invoke(app, ["batch", "complete", task.id, "--store", str(store_path)])
        assert result.exit_code == 0
        assert TaskStore(store_path).get(task.id).completed

    def test_batch_unknown_action(self, seeded_store):
        store_path, task = seeded_store
        result = runner.invoke(app, ["batch", "archive", task.id, "--store", str(store_path)])
        assert result.exit_code == 1
        assert "Unsupported batch action" in result.output

    def test_batch_bad_data(self, seeded_store):
        store_path, task = seeded_store
        result = runner.invoke(app, ["batch", "update", task.id, "--data", "{oops", "--store", str(store_path)])
        assert result.exit_code == 1


class TestRemindAndStats:
    def test_remind_marks_task(self, seeded_store):
        store_path, task = seeded_store
        result = runner.invoke(app, ["remind", "--today", "2024-06-10", "--store", str(store_path)])

        assert result.exit_code == 0
        assert "今天截止" in result.output
        assert TaskStore(store_path).get(task.id).today_reminded

        again = runner.invoke(app, ["remind", "--today", "2024-06-10", "--store", str(store_path)])
        assert "No reminders due" in again.output

    def test_watch_rescans_on_a_timer(self, seeded_store, monkeypatch):
        """Watch mode sleeps between scans and fires each reminder once."""
        store_path, task = seeded_store
        sleeps = []
        monkeypatch.setattr("task_pipeline.cli.time.sleep", sleeps.append)

        result = runner.invoke(app, [
            "remind", "--watch", "--interval", "30", "--max-scans", "2",
            "--today", "2024-06-10", "--store", str(store_path),
        ])

        assert result.exit_code == 0
        assert sleeps == [30]
        assert result.output.count("今天截止") == 1
        assert "2 scan(s) done" in result.output
        assert TaskStore(store_path).get(task.id).today_reminded

    def test_watch_stops_on_interrupt(self, seeded_store, monkeypatch):
        store_path, _ = seeded_store

        def interrupt(seconds):
            raise KeyboardInterrupt

        monkeypatch.setattr("task_pipeline.cli.time.sleep", interrupt)
        result = runner.invoke(app, ["remind", "--watch", "--store", str(store_path)])

        assert result.exit_code == 0
        assert "Stopped watching" in result.output

    def test_stats(self, seeded_store):
        store_path, _ = seeded_store
        result = runner.invoke(app, ["stats", "--today", "2024-06-10", "--store", str(store_path)])
        assert result.exit_code == 0
        assert "Due today" in result.output


class TestExportImportCommands:
    def test_round_trip(self, seeded_store, tmp_path):
        store_path, task = seeded_store
        export_file = tmp_path / "backup.json"

        result = runner.invoke(app, ["export", "-o", str(export_file), "--store", str(store_path)])
        assert result.exit_code == 0
        assert json.loads(export_file.read_text(encoding="utf-8"))["tasks"][0]["id"] == task.id

        target = tmp_path / "restored.json"
        result = runner.invoke(app, ["import", str(export_file), "--store", str(target)])
        assert result.exit_code == 0
        assert [t.id for t in TaskStore(target).get_all()] == [task.id]

    def test_import_invalid(self, store_path, tmp_path):
        bad_file = tmp_path / "bad.json"
        bad_file.write_text('{"foo": 1}', encoding="utf-8")

        result = runner.invoke(app, ["import", str(bad_file), "--store", str(store_path)])
        assert result.exit_code == 1
        assert "tasks" in result.output
