"""
领域模型（与 GitLab API 结构解耦）。
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class MergeRequest(BaseModel):
    """一个处于 open 状态的 MR（反序列化后只读）。"""

    model_config = ConfigDict(frozen=True)

    id: int
    iid: int
    title: str
    source_branch: str
    target_branch: str
    web_url: str
    updated_at: datetime
    author: str | None = None
