"""Runtime configuration loading tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.runtime_config import ensure_runtime_dirs, load_effective_config, merge_dicts


def test_defaults_apply_without_config_files(tmp_path: Path) -> None:
    config = load_effective_config(tmp_path)

    assert config["paths"]["db_path"] == "data/tasks.db"
    assert config["logging"]["level"] == "WARNING"


def test_local_override_wins(tmp_path: Path) -> None:
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "default.yaml").write_text("logging:\n  level: INFO\n", encoding="utf-8")
    (config_dir / "local.yaml").write_text("paths:\n  db_path: other/db.sqlite\n", encoding="utf-8")

    config = load_effective_config(tmp_path)
    paths = ensure_runtime_dirs(tmp_path, config)

    assert config["logging"]["level"] == "INFO"
    assert config["paths"]["activity_log_path"] == "logs/activity.jsonl"
    assert paths["db_path"] == (tmp_path / "other" / "db.sqlite").resolve()
    assert paths["db_path"].parent.is_dir()


def test_non_mapping_config_is_rejected(tmp_path: Path) -> None:
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "default.yaml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_effective_config(tmp_path)


def test_merge_dicts_is_recursive() -> None:
    merged = merge_dicts({"a": {"b": 1, "c": 2}, "d": 3}, {"a": {"c": 5}})
    assert merged == {"a": {"b": 1, "c": 5}, "d": 3}
