"""
Slack webhook 消息体构造。

注意：
- 这里是**确定性输出**，同样的 MR 列表总是得到同样的消息
- `text` 是纯文本兜底（通知预览等），`blocks` 是 Block Kit 富文本
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, Field

from mr_nag.nag.models import MergeRequest

# Slack incoming webhook 的硬限制：超过会被整条拒绝（invalid_blocks）
MAX_BLOCKS = 50
MAX_SECTION_TEXT = 3000
# 标题 1 个 + 结尾 "and K more" 1 个
MAX_MERGE_REQUEST_BLOCKS = MAX_BLOCKS - 2


class SlackWebhookPayload(BaseModel):
    """Incoming webhook 的 JSON body（只用到 text + blocks）。"""

    text: str
    blocks: list[dict[str, object]] = Field(default_factory=list)


def escape_mrkdwn(text: str) -> str:
    """Slack 要求转义的三个控制字符。"""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def escape_link_label(text: str) -> str:
    """`<url|label>` 里的 label 不能含 `|`。"""
    return escape_mrkdwn(text).replace("|", "¦")


def truncate(text: str, limit: int = MAX_SECTION_TEXT) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


def build_headline(count: int, target_branch: str | None) -> str:
    suffix = "." if target_branch is None else f" to target branch: {target_branch}."
    return f"{count} merge request(s) awaiting merge{suffix}"


def format_merge_request_line(mr: MergeRequest) -> str:
    """纯文本单行：标题 + 分支 + 链接。"""
    return f"- {mr.title} ({mr.source_branch} → {mr.target_branch}): {mr.web_url}"


def format_merge_request_section(mr: MergeRequest) -> str:
    author = f" by {escape_mrkdwn(mr.author)}" if mr.author else ""
    branches = f"`{escape_mrkdwn(mr.source_branch)}` → `{escape_mrkdwn(mr.target_branch)}`"
    # 链接部分先截 label，保证 `<url|label>` 结构不被截断
    label = truncate(escape_link_label(mr.title), MAX_SECTION_TEXT // 2)
    return truncate(f"<{mr.web_url}|{label}>{author}\n{branches}")


def _section(text: str) -> dict[str, object]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": truncate(text)}}


def build_notification_payload(mrs: Sequence[MergeRequest], target_branch: str | None) -> SlackWebhookPayload:
    """
    将 MR 列表拼成一条 Slack 消息。

    - mrs：已过滤的 MR（调用方保证非空）
    - target_branch：有值时写进标题，方便频道里一眼看出是哪个分支
    - blocks 最多 MAX_BLOCKS 个，超出部分折叠成 "and K more"；`text` 始终包含完整列表
    """
    headline = build_headline(len(mrs), target_branch)
    lines: list[str] = [headline]
    lines.extend(format_merge_request_line(mr) for mr in mrs)

    blocks: list[dict[str, object]] = [_section(f"*{escape_mrkdwn(headline)}*")]
    blocks.extend(_section(format_merge_request_section(mr)) for mr in mrs[:MAX_MERGE_REQUEST_BLOCKS])
    hidden = len(mrs) - MAX_MERGE_REQUEST_BLOCKS
    if hidden > 0:
        blocks.append(_section(f"…and {hidden} more merge request(s)."))
    return SlackWebhookPayload(text="\n".join(lines), blocks=blocks)
