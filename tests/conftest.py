"""Shared test fixtures and configuration."""

from datetime import datetime

import pytest

from task_pipeline.task_store import TaskStore


@pytest.fixture
def reference_now() -> datetime:
    """Fixed reference time: Monday 2024-06-10, 09:00."""
    return datetime(2024, 6, 10, 9, 0)


@pytest.fixture
def store_path(tmp_path):
    """Path of an isolated task store file."""
    return tmp_path / "tasks.json"


@pytest.fixture
def store(store_path) -> TaskStore:
    """Empty task store backed by a temp file."""
    return TaskStore(store_path)
