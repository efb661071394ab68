"""
GitLab -> 领域模型 adapter。

职责：
- 将 GitLab API 的 MR schema 转换为平台无关的 `MergeRequest`
- 只做数据归一化，不做过滤/业务决策
"""

from __future__ import annotations

from collections.abc import Iterable

from mr_nag.gitlab.schemas import GitLabMergeRequest
from mr_nag.nag.models import MergeRequest


def to_merge_request(mr: GitLabMergeRequest) -> MergeRequest:
    return MergeRequest(
        id=mr.id,
        iid=mr.iid,
        title=mr.title,
        source_branch=mr.source_branch,
        target_branch=mr.target_branch,
        web_url=mr.web_url,
        updated_at=mr.updated_at,
        author=mr.author.username if mr.author is not None else None,
    )


def to_merge_requests(mrs: Iterable[GitLabMergeRequest]) -> list[MergeRequest]:
    return [to_merge_request(mr) for mr in mrs]
