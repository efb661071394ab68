"""
Nag pipeline（核心流程编排）。

固定 4 阶段，只向前流动：
Config -> Fetch open MRs -> Filter（target branch / dwell）-> Notify（或跳过）

注意：
- 任一阶段失败直接抛错，不报告“部分成功”（fetch 成功但 webhook 失败也是整体失败）
- 不做重试，由外部 cron 重新调度
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

import httpx

from mr_nag.config import NagConfig
from mr_nag.gitlab.adapter import to_merge_requests
from mr_nag.gitlab.client import GitLabClient
from mr_nag.nag.filters import filter_by_min_dwell
from mr_nag.nag.filters import filter_by_target_branch
from mr_nag.nag.models import MergeRequest
from mr_nag.slack.client import SlackWebhookClient
from mr_nag.slack.message import build_notification_payload

logger = logging.getLogger(__name__)


class NagStatus(str, enum.Enum):
    NOTHING_TO_NOTIFY = "nothing_to_notify"
    NOTIFIED = "notified"
    SKIPPED_NO_WEBHOOK = "skipped_no_webhook"


@dataclass(frozen=True)
class NagOutcome:
    """一次检查的结果（CLI 用它决定输出内容）。"""

    status: NagStatus
    fetched: int
    matched: list[MergeRequest] = field(default_factory=list)


def build_gitlab_client(config: NagConfig, http_client: httpx.AsyncClient) -> GitLabClient:
    return GitLabClient(
        base_url=config.gitlab_base_url,
        private_token=config.gitlab_token.get_secret_value(),
        http_client=http_client,
        max_pages=config.max_pages,
    )


async def fetch_open_merge_requests(config: NagConfig, http_client: httpx.AsyncClient) -> list[MergeRequest]:
    gitlab_client = build_gitlab_client(config, http_client)
    raw = await gitlab_client.list_open_merge_requests(config.gitlab_project_id)
    return to_merge_requests(raw)


def select_merge_requests(config: NagConfig, mrs: list[MergeRequest], now: datetime) -> list[MergeRequest]:
    matched = filter_by_target_branch(mrs, config.target_branch)
    return filter_by_min_dwell(matched, config.min_dwell_secs, now=now)


async def notify(config: NagConfig, http_client: httpx.AsyncClient, mrs: list[MergeRequest]) -> NagStatus:
    """
    发送通知。

    - 列表为空：不发任何请求
    - 没配置 webhook：跳过（但状态与“没有 MR”区分开，CLI 会打印数量）
    """
    if not mrs:
        return NagStatus.NOTHING_TO_NOTIFY
    if config.slack_webhook_url is None:
        logger.info(f"{len(mrs)} merge request(s) matched but no webhook is configured")
        return NagStatus.SKIPPED_NO_WEBHOOK

    payload = build_notification_payload(mrs, target_branch=config.target_branch)
    slack_client = SlackWebhookClient(webhook_url=str(config.slack_webhook_url), http_client=http_client)
    await slack_client.post_message(payload)
    return NagStatus.NOTIFIED


async def run_nag(config: NagConfig, http_client: httpx.AsyncClient, now: datetime | None = None) -> NagOutcome:
    """
    跑一次完整检查。

    - http_client：调用方创建并负责关闭（timeout 在那里设置）
    - now：dwell 过滤的参考时间，默认当前 UTC 时间（测试时注入）
    """
    mrs = await fetch_open_merge_requests(config, http_client)
    logger.info(f"Fetched {len(mrs)} open merge request(s) from project {config.gitlab_project_id}")

    matched = select_merge_requests(config, mrs, now=now or datetime.now(timezone.utc))
    logger.info(f"{len(matched)} merge request(s) left after filtering")

    status = await notify(config, http_client, matched)
    return NagOutcome(status=status, fetched=len(mrs), matched=matched)
