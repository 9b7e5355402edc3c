from datetime import datetime, timedelta

import pytest

from tasktidy.storage.db import Database
from tasktidy.storage.models import Task, TaskSource

DAY1 = datetime(2025, 3, 1, 9, 0, 0)


def make_task(task_id, title, source=TaskSource.MANUAL, source_id=None,
              description=None, day=0, user_id="u1", priority=None):
    return Task(
        id=task_id,
        title=title,
        source=source,
        source_id=source_id,
        description=description,
        priority=priority,
        user_id=user_id,
        created_at=DAY1 + timedelta(days=day),
    )


@pytest.fixture
def db(tmp_path):
    return Database(tmp_path / "data" / "tasktidy.db")
