"""
错误分类（exit code 与错误类型一一对应）。

约定：
- 所有错误对本次调用都是终止性的，不做内部重试（交给外部 cron 重新调度）
- CLI 只认 `MrNagError`，其它异常视为程序 bug（exit 1）
"""

from __future__ import annotations


class MrNagError(RuntimeError):
    """所有可预期错误的基类。"""

    exit_code: int = 1
    kind: str = "MrNagError"


class ConfigurationError(MrNagError):
    """参数缺失 / 非法。"""

    exit_code = 2
    kind = "ConfigurationError"


class NetworkError(MrNagError):
    """传输层失败（DNS、TLS、连接拒绝、超时）。"""

    exit_code = 3
    kind = "NetworkError"


class AuthError(MrNagError):
    """GitLab 拒绝了 token（401/403）。"""

    exit_code = 4
    kind = "AuthError"


class ApiError(MrNagError):
    """GitLab 或 webhook 返回了非成功状态码。"""

    exit_code = 5
    kind = "ApiError"

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class DecodeError(MrNagError):
    """响应 body 无法解析成预期结构。"""

    exit_code = 6
    kind = "DecodeError"
