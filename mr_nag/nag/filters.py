"""
MR 过滤（纯函数，无副作用，不会失败）。
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from mr_nag.nag.models import MergeRequest


def filter_by_target_branch(mrs: Sequence[MergeRequest], target_branch: str | None) -> list[MergeRequest]:
    """
    只保留 target branch 完全相等（大小写敏感，不支持 glob/regex）的 MR。

    target_branch 为 None 时原样返回（同样的元素、同样的顺序）。
    """
    if target_branch is None:
        return list(mrs)
    return [mr for mr in mrs if mr.target_branch == target_branch]


def filter_by_min_dwell(mrs: Sequence[MergeRequest], min_dwell_secs: int | None, now: datetime) -> list[MergeRequest]:
    """
    只保留“闲置”至少 min_dwell_secs 秒的 MR（now - updated_at）。

    - min_dwell_secs 为 None 时原样返回
    - now 由调用方注入，便于测试；必须是 timezone-aware（GitLab 返回的 updated_at 带时区）
    """
    if min_dwell_secs is None:
        return list(mrs)
    return [mr for mr in mrs if (now - mr.updated_at).total_seconds() >= min_dwell_secs]
