from __future__ import annotations

import pytest

from mr_nag.config import load_config
from mr_nag.config import parse_non_negative_int
from mr_nag.errors import ConfigurationError

BASE_ENV = {
    "GITLAB_TOKEN": "t",
    "GITLAB_HOST": "gitlab.example.com",
    "GITLAB_PROJECT_ID": "42",
}


def test_load_config_requires_everything() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        load_config(cli_values={}, environ={})
    message = str(excinfo.value)
    assert "--gitlab-token (GITLAB_TOKEN)" in message
    assert "--gitlab-host (GITLAB_HOST)" in message
    assert "--gitlab-project-id (GITLAB_PROJECT_ID)" in message


@pytest.mark.parametrize("missing", ["GITLAB_TOKEN", "GITLAB_HOST", "GITLAB_PROJECT_ID"])
def test_load_config_names_the_missing_field(missing: str) -> None:
    environ = {k: v for k, v in BASE_ENV.items() if k != missing}
    with pytest.raises(ConfigurationError) as excinfo:
        load_config(cli_values={}, environ=environ)
    assert missing in str(excinfo.value)
    others = [k for k in BASE_ENV if k != missing]
    assert all(k not in str(excinfo.value) for k in others)


def test_load_config_treats_empty_values_as_missing() -> None:
    environ = {**BASE_ENV, "GITLAB_TOKEN": ""}
    with pytest.raises(ConfigurationError, match="GITLAB_TOKEN"):
        load_config(cli_values={"gitlab_token": ""}, environ=environ)


def test_load_config_env_only_ok() -> None:
    cfg = load_config(cli_values={}, environ=BASE_ENV)
    assert cfg.gitlab_token.get_secret_value() == "t"
    assert cfg.gitlab_host == "gitlab.example.com"
    assert cfg.gitlab_project_id == 42
    assert cfg.gitlab_base_url == "https://gitlab.example.com"
    assert cfg.slack_webhook_url is None
    assert cfg.target_branch is None
    assert cfg.min_dwell_secs is None
    assert cfg.http_timeout_secs == 30.0
    assert cfg.max_pages == 100
    assert cfg.log_level == "WARNING"


def test_load_config_flag_wins_over_env() -> None:
    environ = {**BASE_ENV, "TARGET_BRANCH": "main"}
    cfg = load_config(
        cli_values={"gitlab_project_id": "7", "target_branch": "production", "gitlab_token": None},
        environ=environ,
    )
    assert cfg.gitlab_project_id == 7
    assert cfg.target_branch == "production"
    assert cfg.gitlab_token.get_secret_value() == "t"


def test_load_config_token_is_not_printed() -> None:
    cfg = load_config(cli_values={}, environ={**BASE_ENV, "GITLAB_TOKEN": "super-secret"})
    assert "super-secret" not in repr(cfg)


@pytest.mark.parametrize("value", [0, 1, 42, 10**12])
def test_project_id_round_trips(value: int) -> None:
    cfg = load_config(cli_values={"gitlab_project_id": str(value)}, environ=BASE_ENV)
    assert cfg.gitlab_project_id == value


@pytest.mark.parametrize("raw", ["abc", "-1", "1.5", "", " ", "1e3", "0x10", "٣"])
def test_project_id_rejects_non_numeric(raw: str) -> None:
    with pytest.raises(ConfigurationError):
        parse_non_negative_int("gitlab_project_id", raw)


def test_project_id_invalid_via_env() -> None:
    with pytest.raises(ConfigurationError, match="--gitlab-project-id"):
        load_config(cli_values={}, environ={**BASE_ENV, "GITLAB_PROJECT_ID": "project"})


@pytest.mark.parametrize(
    "raw",
    ["gitlab.example.com", "https://gitlab.example.com", "https://gitlab.example.com/", " gitlab.example.com "],
)
def test_gitlab_host_is_normalized(raw: str) -> None:
    cfg = load_config(cli_values={"gitlab_host": raw}, environ=BASE_ENV)
    assert cfg.gitlab_host == "gitlab.example.com"


def test_gitlab_host_rejects_plain_http() -> None:
    with pytest.raises(ConfigurationError, match="HTTPS"):
        load_config(cli_values={"gitlab_host": "http://gitlab.example.com"}, environ=BASE_ENV)


def test_load_config_rejects_invalid_webhook_url() -> None:
    with pytest.raises(ConfigurationError):
        load_config(cli_values={"slack_webhook_url": "not a url"}, environ=BASE_ENV)


def test_load_config_optional_values() -> None:
    environ = {
        **BASE_ENV,
        "SLACK_WEBHOOK_URL": "https://hooks.slack.com/services/T000/B000/XXXX",
        "MIN_DWELL_SECS": "3600",
        "HTTP_TIMEOUT_SECS": "5.5",
        "MAX_PAGES": "3",
        "LOG_LEVEL": "debug",
    }
    cfg = load_config(cli_values={}, environ=environ)
    assert str(cfg.slack_webhook_url) == "https://hooks.slack.com/services/T000/B000/XXXX"
    assert cfg.min_dwell_secs == 3600
    assert cfg.http_timeout_secs == 5.5
    assert cfg.max_pages == 3
    assert cfg.log_level == "DEBUG"


@pytest.mark.parametrize(
    "key,value",
    [("HTTP_TIMEOUT_SECS", "0"), ("HTTP_TIMEOUT_SECS", "soon"), ("MAX_PAGES", "0"), ("LOG_LEVEL", "loud"), ("MIN_DWELL_SECS", "-5")],
)
def test_load_config_rejects_invalid_optional_values(key: str, value: str) -> None:
    with pytest.raises(ConfigurationError):
        load_config(cli_values={}, environ={**BASE_ENV, key: value})


def test_config_is_immutable() -> None:
    cfg = load_config(cli_values={}, environ=BASE_ENV)
    with pytest.raises(Exception):
        cfg.gitlab_project_id = 1  # type: ignore[misc]
