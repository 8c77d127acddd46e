"""Config: YAML file, .env and environment overrides."""

from __future__ import annotations

import os

import yaml

from focusflow.config import Config, Settings


def write_yaml(root, data):
    (root / "config.yaml").write_text(yaml.safe_dump(data), encoding="utf-8")


def test_defaults_without_files(tmp_path):
    config = Config(project_root=tmp_path)
    settings = config.settings()
    assert settings == Settings()
    assert settings.focus_seconds == 1500
    assert config.get_db_path() == str(tmp_path / "data" / "focusflow.db")
    assert config.session_log_url == ""
    assert config.notifications == "console"


def test_example_is_copied_on_first_run(tmp_path):
    (tmp_path / "config.example.yaml").write_text("focus_duration: 45\n", encoding="utf-8")
    config = Config(project_root=tmp_path)
    assert (tmp_path / "config.yaml").exists()
    assert config.settings().focus_minutes == 45


def test_yaml_values(tmp_path):
    write_yaml(tmp_path, {
        "focus_duration": "custom",
        "custom_focus_duration": 50,
        "pause_lock": True,
        "auto_assign_task": "yes",
        "session_log": {"url": "https://x.supabase.co", "api_key": "k"},
        "db_path": str(tmp_path / "other.db"),
    })
    config = Config(project_root=tmp_path)
    settings = config.settings()
    assert settings.focus_minutes == 50
    assert settings.pause_lock and settings.auto_assign_task
    assert not settings.auto_complete_parent_task
    assert config.session_log_url == "https://x.supabase.co"
    assert config.session_log_api_key == "k"
    assert config.get_db_path() == str(tmp_path / "other.db")


def test_invalid_focus_duration_falls_back(tmp_path):
    write_yaml(tmp_path, {"focus_duration": 33})
    assert Config(project_root=tmp_path).focus_duration == 25


def test_env_overrides_yaml(tmp_path, monkeypatch):
    write_yaml(tmp_path, {"focus_duration": 25, "pause_lock": False})
    monkeypatch.setenv("FOCUS_DURATION", "60")
    monkeypatch.setenv("PAUSE_LOCK", "true")
    settings = Config(project_root=tmp_path).settings()
    assert settings.focus_minutes == 60
    assert settings.pause_lock


def test_dotenv_file_is_loaded(tmp_path):
    (tmp_path / ".env").write_text("SESSION_LOG_URL=https://from-env.example\n", encoding="utf-8")
    config = Config(project_root=tmp_path)
    assert config.session_log_url == "https://from-env.example"
    assert os.environ["SESSION_LOG_URL"] == "https://from-env.example"


def test_malformed_yaml_is_ignored(tmp_path):
    (tmp_path / "config.yaml").write_text("focus_duration: [unclosed\n", encoding="utf-8")
    assert Config(project_root=tmp_path).settings() == Settings()


def test_save_setting_round_trip(tmp_path):
    write_yaml(tmp_path, {"pause_lock": False, "user_id": "me"})
    config = Config(project_root=tmp_path)
    assert config.save_setting("pause_lock", True)
    reloaded = Config(project_root=tmp_path)
    assert reloaded.settings().pause_lock
    assert reloaded.user_id == "me"


def test_save_setting_over_non_mapping_file(tmp_path):
    (tmp_path / "config.yaml").write_text("- just\n- a list\n", encoding="utf-8")
    config = Config(project_root=tmp_path)
    assert config.save_setting("pause_lock", True)
    assert yaml.safe_load((tmp_path / "config.yaml").read_text(encoding="utf-8")) == {"pause_lock": True}
    assert Config(project_root=tmp_path).settings().pause_lock
