from pathlib import Path

from triagecli.infrastructure.config import settings
from triagecli.infrastructure.config.settings import (
    DEFAULT_PROXY_URL,
    get_backoff_policy,
    get_config,
    get_min_request_interval,
    get_page_size,
    load_configuration,
    resolve_endpoint,
    set_config_for_testing,
)


def test_defaults_without_any_configuration():
    load_configuration()

    assert get_page_size() == 20
    assert get_min_request_interval() == 0.35
    assert get_backoff_policy() == {
        "max_retries": 5,
        "initial_delay": 1.0,
        "factor": 2.0,
        "max_delay": None,
    }


def test_proxy_used_without_direct_credentials():
    endpoint = resolve_endpoint()

    assert endpoint.base_url == DEFAULT_PROXY_URL
    assert endpoint.headers == {}
    assert not endpoint.using_direct


def test_proxy_used_when_only_base_url_set(monkeypatch):
    monkeypatch.setenv("BASE_URL", "https://direct.test/api")

    assert resolve_endpoint().base_url == DEFAULT_PROXY_URL


def test_direct_endpoint_when_base_url_and_key_set(monkeypatch):
    monkeypatch.setenv("BASE_URL", "https://direct.test/api")
    monkeypatch.setenv("X_API_KEY", "12345")

    endpoint = resolve_endpoint()

    assert endpoint.using_direct
    assert endpoint.base_url == "https://direct.test/api"
    # numeric-looking keys stay strings
    assert endpoint.headers == {"x-api-key": "12345"}


def test_proxy_url_override(monkeypatch):
    monkeypatch.setenv("CF_PROXY_URL", "https://proxy.test/api")
    assert resolve_endpoint().base_url == "https://proxy.test/api"


def test_dotenv_file_is_loaded(tmp_path: Path):
    env_file = tmp_path / ".env"
    env_file.write_text("BASE_URL=https://from-dotenv.test/api\nX_API_KEY=dotenv-key\n")

    load_configuration(env_file=env_file)
    endpoint = resolve_endpoint()

    assert endpoint.using_direct
    assert endpoint.headers == {"x-api-key": "dotenv-key"}


def test_environment_wins_over_dotenv(tmp_path: Path, monkeypatch):
    (tmp_path / ".env").write_text("X_API_KEY=dotenv-key\nBASE_URL=https://from-dotenv.test/api\n")
    monkeypatch.setenv("X_API_KEY", "env-key")

    load_configuration()

    assert resolve_endpoint().headers == {"x-api-key": "env-key"}


def test_yaml_sections_are_flattened(tmp_path: Path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "api:\n  page_size: 5\n  base_url: https://yaml.test/api\n  key: yaml-key\n"
        "retry:\n  max_retries: 2\n  max_backoff_seconds: 3\n"
        "rate_limit:\n  min_interval_seconds: 0.5\n"
    )

    load_configuration(config_file=config_file)

    assert get_page_size() == 5
    assert get_min_request_interval() == 0.5
    assert get_backoff_policy()["max_retries"] == 2
    assert get_backoff_policy()["max_delay"] == 3.0
    assert resolve_endpoint().base_url == "https://yaml.test/api"


def test_invalid_yaml_is_logged_not_raised(tmp_path: Path, caplog):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("api: [unclosed\n")

    load_configuration(config_file=config_file)

    assert "Failed to load or parse YAML config" in caplog.text
    assert get_page_size() == 20


def test_env_values_override_yaml_and_are_converted(tmp_path: Path, monkeypatch):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("api:\n  page_size: 5\n")
    monkeypatch.setenv("API_PAGE_SIZE", "50")

    load_configuration(config_file=config_file)

    assert get_config("api.page_size") == 50


def test_test_config_has_highest_priority(monkeypatch):
    monkeypatch.setenv("API_PAGE_SIZE", "50")
    set_config_for_testing({"api.page_size": 7})

    assert get_page_size() == 7


def test_load_configuration_runs_once(tmp_path: Path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("api:\n  page_size: 5\n")
    load_configuration(config_file=config_file)
    config_file.write_text("api:\n  page_size: 9\n")

    load_configuration(config_file=config_file)
    assert get_page_size() == 5

    settings.reset_configuration()
    load_configuration(config_file=config_file)
    assert get_page_size() == 9
