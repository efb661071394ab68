"""
GitLab API response schemas（Pydantic）。

说明：
- 只覆盖 `GET /projects/:id/merge_requests` 里我们用到的字段子集
- 其余字段忽略；schema 校验失败会立刻暴露问题（比“默默 None”安全）
"""

from __future__ import annotations

from pydantic import AwareDatetime, BaseModel


class GitLabUser(BaseModel):
    """MR author 子结构（只取 username）。"""

    username: str

class GitLabMergeRequest(BaseModel):
    """MR 列表接口返回数组中的单个元素。"""

    id: int
    iid: int
    project_id: int
    title: str
    state: str
    source_branch: str
    target_branch: str
    web_url: str
    updated_at: AwareDatetime
    author: GitLabUser | None = None
    draft: bool = False
