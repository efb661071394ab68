"""
GitLab API 客户端（外部系统连接器）。

约定：
- 这里只做“HTTP 调用 + 错误处理 + schema 校验”，不做业务决策（分支过滤在 nag/filters.py）
- 分页按页顺序拉取（下一页是否存在取决于上一页的响应），用 `max_pages` 兜底
- 发生错误时**直接抛错**，不要吞异常（cron 场景靠 exit code 告警）
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

import httpx
from pydantic import ValidationError

from mr_nag.errors import ApiError
from mr_nag.errors import DecodeError
from mr_nag.gitlab.schemas import GitLabMergeRequest
from mr_nag.http_result import HttpFailure
from mr_nag.http_result import failure_to_error
from mr_nag.http_result import send

logger = logging.getLogger(__name__)

OPENED_STATE = "opened"


def _decode_page(response: httpx.Response) -> list[GitLabMergeRequest]:
    """把单页 body 解析成 MR 列表；任何结构问题都归为 `DecodeError`。"""
    try:
        data = response.json()
    except ValueError as exc:
        # JSONDecodeError 与 UnicodeDecodeError（非 UTF-8 body）都是 ValueError
        raise DecodeError(f"GitLab returned invalid JSON: {response.text[:200]!r}") from exc
    if not isinstance(data, list):
        raise DecodeError(f"Unexpected GitLab response shape for merge requests: {str(data)[:200]}")
    try:
        return [GitLabMergeRequest.model_validate(x) for x in data]
    except ValidationError as exc:
        raise DecodeError(f"GitLab merge request does not match schema: {exc}") from exc


def _next_page(response: httpx.Response, page: int, batch_size: int) -> int | None:
    """
    计算下一页页码。

    - GitLab 默认会返回 `X-Next-Page`（最后一页为空字符串）
    - 没有这个 header 时（例如大结果集关闭了 count），一直翻到空页为止
    """
    header = response.headers.get("X-Next-Page")
    if header is None:
        return page + 1 if batch_size > 0 else None
    header = header.strip()
    if not header:
        return None
    try:
        return int(header)
    except ValueError as exc:
        raise DecodeError(f"Invalid X-Next-Page header: {header!r}") from exc


class GitLabClient:
    """最小 GitLab API client（只读：列出 open MR）。"""

    def __init__(
        self,
        base_url: str,
        private_token: str,
        http_client: httpx.AsyncClient,
        per_page: int = 100,
        max_pages: int = 100,
    ) -> None:
        """
        - base_url: GitLab 实例地址（不包含末尾 /）
        - private_token: PRIVATE-TOKEN（需要 read_api 权限）
        - http_client: 复用的 httpx.AsyncClient（timeout 在外面统一设置）
        - max_pages: 分页上限，防止异常的 API 让我们无限翻页
        """
        self._base_url = base_url.rstrip("/")
        self._private_token = private_token
        self._http_client = http_client
        self._per_page = per_page
        self._max_pages = max_pages

    def _headers(self) -> dict[str, str]:
        """GitLab API 鉴权头。"""
        return {"PRIVATE-TOKEN": self._private_token}

    async def iter_open_merge_request_pages(self, project_id: int) -> AsyncIterator[list[GitLabMergeRequest]]:
        """
        逐页产出 open MR（lazy，消费到耗尽为止）。

        - GitLab v4 API: GET /projects/:id/merge_requests?state=opened&page=N
        - 超过 max_pages 仍有下一页则抛 `ApiError`（宁可失败也不要静默截断）
        """
        url = f"{self._base_url}/api/v4/projects/{project_id}/merge_requests"
        page: int | None = 1
        fetched_pages = 0
        while page is not None:
            if fetched_pages >= self._max_pages:
                raise ApiError(f"GitLab pagination exceeded max_pages={self._max_pages} for project {project_id}")

            logger.info(f"GitLab request: project={project_id}, page={page}")
            result = await send(
                self._http_client,
                "GET",
                url,
                headers=self._headers(),
                params={"state": OPENED_STATE, "per_page": self._per_page, "page": page},
            )
            if isinstance(result, HttpFailure):
                raise failure_to_error(result, service="GitLab API")

            batch = _decode_page(result.response)
            fetched_pages += 1
            logger.info(f"GitLab response: page={page}, {len(batch)} merge request(s)")
            page = _next_page(result.response, page=page, batch_size=len(batch))
            if batch:
                yield batch

    async def list_open_merge_requests(self, project_id: int) -> list[GitLabMergeRequest]:
        """
        拉取项目全部 open MR（按 API 返回顺序拼接，不重新排序）。

        注意：即使请求带了 state=opened，也再过滤一次 state，保证下游只拿到 open 的 MR。
        """
        all_items: list[GitLabMergeRequest] = []
        async for batch in self.iter_open_merge_request_pages(project_id):
            for mr in batch:
                if mr.state != OPENED_STATE:
                    logger.debug(f"Dropping merge request !{mr.iid} in state {mr.state!r}")
                    continue
                all_items.append(mr)
        return all_items
