import pytest
from pydantic import ValidationError as PydanticValidationError

from tasktidy.config import load_config
from tasktidy.storage.models import TaskSource


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("TASKTIDY_DATA_DIR", "TASKTIDY_USER_ID", "TASKTIDY_THRESHOLD",
                "TASKTIDY_STATS_TIMEFRAME", "TASKTIDY_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)


def test_defaults_when_file_missing(tmp_path):
    config = load_config(tmp_path / "missing.yaml")
    assert config.dedup.similarity_threshold == 0.70
    assert set(config.dedup.integration_sources) == {TaskSource.CALENDAR, TaskSource.EMAIL}
    assert config.stats.default_timeframe == "7 days"
    assert config.db_path.name == "tasktidy.db"


def test_yaml_file_then_env_override(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text(
        "dedup:\n"
        "  similarity_threshold: 0.8\n"
        "  integration_sources: [calendar, email, todoist]\n"
        "user:\n"
        "  user_id: family-7\n"
    )
    monkeypatch.setenv("TASKTIDY_THRESHOLD", "0.9")
    monkeypatch.setenv("TASKTIDY_DATA_DIR", str(tmp_path / "data"))

    config = load_config(path)
    assert config.dedup.similarity_threshold == 0.9
    assert TaskSource.TODOIST in config.dedup.integration_sources
    assert config.user.user_id == "family-7"
    assert config.db_path == tmp_path / "data" / "tasktidy.db"


def test_invalid_values_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("dedup:\n  similarity_threshold: 1.5\n")
    with pytest.raises(PydanticValidationError):
        load_config(path)


def test_non_mapping_yaml_ignored(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")
    assert load_config(path).user.user_id == "default"
