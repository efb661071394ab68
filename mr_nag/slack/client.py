"""
Slack incoming webhook 客户端。

约定：
- 每次调用最多一次 POST，不重试
- 401/403 对 webhook 没有特殊含义，统一按 `ApiError` 处理
"""

from __future__ import annotations

import logging

import httpx

from mr_nag.http_result import HttpFailure
from mr_nag.http_result import failure_to_error
from mr_nag.http_result import send
from mr_nag.slack.message import SlackWebhookPayload

logger = logging.getLogger(__name__)


class SlackWebhookClient:
    def __init__(self, webhook_url: str, http_client: httpx.AsyncClient) -> None:
        self._webhook_url = webhook_url
        self._http_client = http_client

    async def post_message(self, payload: SlackWebhookPayload) -> None:
        """POST 消息；非 2xx 抛 `ApiError`，传输失败抛 `NetworkError`。"""
        logger.info(f"Slack webhook request: {len(payload.blocks)} block(s)")
        result = await send(
            self._http_client,
            "POST",
            self._webhook_url,
            auth_statuses=(),
            redact_path=True,
            json=payload.model_dump(),
        )
        if isinstance(result, HttpFailure):
            raise failure_to_error(result, service="Slack webhook")
        logger.info(f"Slack webhook response: {result.response.status_code}")
