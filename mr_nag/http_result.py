"""
HTTP 调用边界的结果类型。

为什么不直接 raise：
- 状态码分支（auth / api / network）在这里统一归类成 `HttpFailure`
- 各 client 在自己的公开方法里再把 failure 转成对应异常，不让 httpx 异常穿透到 pipeline
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import dataclass
from typing import Literal, Union

import httpx

from mr_nag.errors import ApiError
from mr_nag.errors import AuthError
from mr_nag.errors import MrNagError
from mr_nag.errors import NetworkError

logger = logging.getLogger(__name__)

FailureKind = Literal["network", "auth", "api"]

AUTH_STATUSES: frozenset[int] = frozenset({401, 403})


@dataclass(frozen=True)
class HttpSuccess:
    """2xx 响应。"""

    response: httpx.Response


@dataclass(frozen=True)
class HttpFailure:
    """归类后的失败（带上状态码与 body 便于排查）。"""

    kind: FailureKind
    message: str
    status_code: int | None = None
    body: str = ""


HttpResult = Union[HttpSuccess, HttpFailure]


def _display_url(url: str, redact_path: bool) -> str:
    """webhook URL 的 path 本身就是密钥，日志里只保留 host。"""
    if not redact_path:
        return url
    parsed = httpx.URL(url)
    return f"{parsed.scheme}://{parsed.host}/***"


async def send(
    http_client: httpx.AsyncClient,
    method: str,
    url: str,
    auth_statuses: Collection[int] = AUTH_STATUSES,
    redact_path: bool = False,
    **kwargs: object,
) -> HttpResult:
    """
    发起单次请求并归类结果。

    - auth_statuses：哪些状态码算作鉴权失败（webhook 传空集合，全部按 api 处理）
    - redact_path：日志与错误信息里隐藏 URL path
    - 超时属于 `httpx.TransportError`，归为 network
    """
    shown = _display_url(url, redact_path)
    try:
        response = await http_client.request(method, url, **kwargs)
    except httpx.TransportError as exc:
        logger.error(f"HTTP {method} {shown} failed: {exc!r}")
        return HttpFailure(kind="network", message=f"{method} {shown} failed: {exc!r}")

    if 200 <= response.status_code < 300:
        return HttpSuccess(response=response)

    kind: FailureKind = "auth" if response.status_code in auth_statuses else "api"
    logger.error(f"HTTP {method} {shown} returned {response.status_code}")
    return HttpFailure(
        kind=kind,
        message=f"{method} {shown} returned {response.status_code}",
        status_code=response.status_code,
        body=response.text,
    )


def failure_to_error(failure: HttpFailure, service: str) -> MrNagError:
    """把 `HttpFailure` 转成异常（调用方负责 raise）。"""
    if failure.kind == "network":
        return NetworkError(f"{service}: {failure.message}")
    if failure.kind == "auth":
        return AuthError(f"{service} rejected the credentials ({failure.status_code}): {failure.body}")
    return ApiError(
        f"{service} error {failure.status_code}: {failure.body}",
        status_code=failure.status_code,
        body=failure.body,
    )
