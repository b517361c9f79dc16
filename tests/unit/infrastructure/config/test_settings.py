import pytest
import yaml

from ytcomments.domain.models.common import BackoffPolicy
from ytcomments.infrastructure.config import settings


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.safe_dump({
            "developerKey": "YAML_KEY",
            "rate_limit": {"capacity": 3, "interval_seconds": 0.5},
            "output": {"dir": "out"},
        }),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def loaded(config_file):
    settings.load_configuration(config_file=config_file, force=True)
    yield config_file
    settings.load_configuration(config_file=config_file.parent / "missing.yaml", force=True)


def test_nested_yaml_lookup(loaded):
    assert settings.get_config("rate_limit.capacity") == 3
    assert settings.get_rate_limit_settings() == {"capacity": 3, "interval_seconds": 0.5}
    assert settings.get_output_dir().name == "out"


def test_missing_key_returns_default(loaded):
    assert settings.get_config("nothing.here", "fallback") == "fallback"


def test_environment_overrides_yaml(loaded, monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_CAPACITY", "9")
    assert settings.get_config("rate_limit.capacity") == 9


def test_test_config_overrides_environment(loaded, monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_CAPACITY", "9")
    settings.set_config_for_testing({"rate_limit.capacity": 42})
    assert settings.get_config("rate_limit.capacity") == 42


def test_developer_key_prefers_environment(loaded, monkeypatch):
    assert settings.get_developer_key() == "DUMMY_TEST_KEY"
    monkeypatch.delenv("YOUTUBE_API_KEY")
    assert settings.get_developer_key() == "YAML_KEY"


def test_no_developer_key_anywhere(tmp_path, monkeypatch):
    monkeypatch.delenv("YOUTUBE_API_KEY")
    settings.load_configuration(config_file=tmp_path / "absent.yaml", force=True)
    assert settings.get_developer_key() is None


def test_save_developer_key_keeps_other_settings(loaded, monkeypatch):
    path = settings.save_developer_key("NEW_KEY")

    assert path == loaded
    saved = yaml.safe_load(loaded.read_text(encoding="utf-8"))
    assert saved["developerKey"] == "NEW_KEY"
    assert saved["rate_limit"] == {"capacity": 3, "interval_seconds": 0.5}
    monkeypatch.delenv("YOUTUBE_API_KEY")
    assert settings.get_developer_key() == "NEW_KEY"


def test_save_developer_key_creates_file(tmp_path):
    target = tmp_path / "nested" / "config.yaml"
    settings.save_developer_key("FRESH", config_file=target)
    assert yaml.safe_load(target.read_text(encoding="utf-8")) == {"developerKey": "FRESH"}


def test_backoff_policy_defaults(loaded):
    assert settings.get_backoff_policy() == BackoffPolicy()


def test_backoff_policy_from_settings(loaded):
    settings.set_config_for_testing({
        "retry.initial_interval": 0.1,
        "retry.multiplier": 2,
        "retry.randomization_factor": 0,
        "retry.max_interval": 1,
        "retry.max_elapsed_seconds": None,
        "retry.max_retries": 5,
    })
    policy = settings.get_backoff_policy()
    assert policy.initial_interval == 0.1
    assert policy.multiplier == 2.0
    assert policy.max_interval == 1.0
    assert policy.max_retries == 5


@pytest.mark.parametrize("value, expected", [(True, True), ("yes", True), ("false", False), (0, False)])
def test_fail_fast_flag(loaded, value, expected):
    assert settings.fail_fast_on_input_error() is False
    settings.set_config_for_testing({"retry.fail_fast_on_input_error": value})
    assert settings.fail_fast_on_input_error() is expected
