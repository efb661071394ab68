"""
运行配置解析。

设计目标：
- **严格**：缺少必填参数直接报错（cron 场景下“看起来跑了其实没配置好”最难排查）
- **类型安全**：使用 Pydantic 校验 URL/整数等，减少运行时踩坑
- **可测试**：核心函数接收 `cli_values` 与 `environ` 显式输入，不读全局状态
- **优先级**：命令行参数 > 同名环境变量
"""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, SecretStr, ValidationError, field_validator

from mr_nag.errors import ConfigurationError

REQUIRED_OPTIONS: tuple[str, ...] = ("gitlab_token", "gitlab_host", "gitlab_project_id")

OPTIONAL_OPTIONS: tuple[str, ...] = (
    "slack_webhook_url",
    "target_branch",
    "min_dwell_secs",
    "http_timeout_secs",
    "max_pages",
    "log_level",
)

LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class NagConfig(BaseModel):
    """一次检查所需的全部参数（启动时构造一次，之后只读）。"""

    model_config = ConfigDict(frozen=True)

    slack_webhook_url: HttpUrl | None = None
    gitlab_token: SecretStr
    gitlab_host: str = Field(min_length=1)
    gitlab_project_id: int = Field(ge=0)
    target_branch: str | None = None
    min_dwell_secs: int | None = Field(default=None, ge=0)
    http_timeout_secs: float = Field(default=30.0, gt=0)
    max_pages: int = Field(default=100, gt=0)
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @property
    def gitlab_base_url(self) -> str:
        return f"https://{self.gitlab_host}"


def option_flag(name: str) -> str:
    """`gitlab_token` -> `--gitlab-token`"""
    return "--" + name.replace("_", "-")


def option_env(name: str) -> str:
    """`gitlab_token` -> `GITLAB_TOKEN`"""
    return name.upper()


def parse_non_negative_int(name: str, raw: str) -> int:
    """只接受 ASCII 十进制数字串（不接受符号、小数、科学计数法）。"""
    value = raw.strip()
    if not value or not value.isascii() or not value.isdigit():
        raise ConfigurationError(f"{option_flag(name)} must be a non-negative integer, got {raw!r}")
    return int(value)


def normalize_gitlab_host(raw: str) -> str:
    """接受 `gitlab.example.com` 或 `https://gitlab.example.com/`，只保留 host 部分。"""
    host = raw.strip()
    if host.lower().startswith("http://"):
        raise ConfigurationError("--gitlab-host must use HTTPS (drop the http:// prefix)")
    if host.lower().startswith("https://"):
        host = host[len("https://") :]
    host = host.rstrip("/")
    if not host:
        raise ConfigurationError("--gitlab-host must not be empty")
    return host


def resolve_option(name: str, cli_values: Mapping[str, str | None], environ: Mapping[str, str]) -> str | None:
    """命令行优先，其次环境变量；空字符串视为未设置。"""
    flag_value = cli_values.get(name)
    if flag_value:
        return flag_value
    env_value = environ.get(option_env(name))
    if env_value:
        return env_value
    return None


def load_config(cli_values: Mapping[str, str | None], environ: Mapping[str, str]) -> NagConfig:
    """
    合并命令行与环境变量并校验。

    - **输入**：`cli_values`（option 名 -> 原始字符串或 None），`environ`（例如 `os.environ`）
    - **输出**：`NagConfig`
    - **失败**：缺失/非法则抛 `ConfigurationError`（错误信息里带上 flag 与环境变量名）
    """
    raw: dict[str, str | None] = {
        name: resolve_option(name, cli_values, environ) for name in REQUIRED_OPTIONS + OPTIONAL_OPTIONS
    }

    missing: list[str] = [f"{option_flag(name)} ({option_env(name)})" for name in REQUIRED_OPTIONS if raw[name] is None]
    if missing:
        raise ConfigurationError(f"Missing required parameters: {', '.join(missing)}")

    values: dict[str, object] = {
        "gitlab_token": raw["gitlab_token"],
        "gitlab_host": normalize_gitlab_host(str(raw["gitlab_host"])),
        "gitlab_project_id": parse_non_negative_int("gitlab_project_id", str(raw["gitlab_project_id"])),
        "slack_webhook_url": raw["slack_webhook_url"],
        "target_branch": raw["target_branch"],
    }
    if raw["min_dwell_secs"] is not None:
        values["min_dwell_secs"] = parse_non_negative_int("min_dwell_secs", raw["min_dwell_secs"])
    if raw["max_pages"] is not None:
        values["max_pages"] = raw["max_pages"]
    if raw["http_timeout_secs"] is not None:
        values["http_timeout_secs"] = raw["http_timeout_secs"]
    if raw["log_level"] is not None:
        values["log_level"] = raw["log_level"]

    # 交给 Pydantic 做类型校验（例如 URL 合法性）
    try:
        return NagConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
