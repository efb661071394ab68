"""
本地 Mock GitLab API + Slack webhook server（只覆盖 mr-nag 用到的接口）。

用途：
- 在没有真实 GitLab / Slack 的情况下，本地跑通：
  list open MRs（分页）-> filter -> POST webhook

启动：
  python -m mr_nag.dev.mock_gitlab_server
然后（mock 只支持 http，所以用 httpx 直连测试，或在前面挂 TLS 代理）：
  curl -H 'PRIVATE-TOKEN: dev-token' 'http://127.0.0.1:9002/api/v4/projects/1/merge_requests?state=opened'
"""

from __future__ import annotations

import uvicorn
from fastapi import FastAPI
from fastapi import Header
from fastapi import HTTPException
from fastapi import Request
from fastapi import Response

DEV_TOKEN = "dev-token"


def _default_merge_requests() -> list[dict[str, object]]:
    return [
        {
            "id": 101,
            "iid": 1,
            "project_id": 1,
            "title": "Release 1.4.0",
            "state": "opened",
            "source_branch": "release/1.4.0",
            "target_branch": "production",
            "web_url": "https://gitlab.example.com/group/project/-/merge_requests/1",
            "updated_at": "2024-05-01T08:00:00.000Z",
            "author": {"username": "alice"},
            "draft": False,
        },
        {
            "id": 102,
            "iid": 2,
            "project_id": 1,
            "title": "Bump httpx",
            "state": "opened",
            "source_branch": "deps/httpx",
            "target_branch": "main",
            "web_url": "https://gitlab.example.com/group/project/-/merge_requests/2",
            "updated_at": "2024-05-02T09:30:00.000Z",
            "author": {"username": "bob"},
            "draft": False,
        },
        {
            "id": 103,
            "iid": 3,
            "project_id": 1,
            "title": "Hotfix: null check",
            "state": "opened",
            "source_branch": "hotfix/null-check",
            "target_branch": "production",
            "web_url": "https://gitlab.example.com/group/project/-/merge_requests/3",
            "updated_at": "2024-05-03T10:15:00.000Z",
            "author": None,
            "draft": True,
        },
    ]


def create_app(merge_requests: list[dict[str, object]] | None = None, token: str = DEV_TOKEN) -> FastAPI:
    """创建 mock app（测试里可以传入自定义 MR 列表）。"""
    app = FastAPI(title="Mock GitLab API", version="0.1.0")
    items = _default_merge_requests() if merge_requests is None else merge_requests
    webhooks: list[dict[str, object]] = []

    @app.get("/api/v4/projects/{project_id}/merge_requests")
    async def list_merge_requests(
        project_id: int,
        response: Response,
        state: str | None = None,
        page: int = 1,
        per_page: int = 20,
        private_token: str | None = Header(default=None, alias="PRIVATE-TOKEN"),
    ) -> list[dict[str, object]]:
        if private_token != token:
            raise HTTPException(status_code=401, detail="401 Unauthorized")

        selected = [
            mr for mr in items if mr["project_id"] == project_id and (state is None or mr["state"] == state)
        ]
        start = (page - 1) * per_page
        chunk = selected[start : start + per_page]
        has_next = start + per_page < len(selected)
        response.headers["X-Page"] = str(page)
        response.headers["X-Per-Page"] = str(per_page)
        response.headers["X-Next-Page"] = str(page + 1) if has_next else ""
        response.headers["X-Total"] = str(len(selected))
        return chunk

    @app.post("/slack/webhook")
    async def slack_webhook(request: Request) -> Response:
        webhooks.append(await request.json())
        # Slack 成功时返回纯文本 "ok"
        return Response(content="ok", media_type="text/plain")

    @app.get("/__debug__/webhooks")
    async def debug_webhooks() -> dict[str, object]:
        return {"count": len(webhooks), "webhooks": webhooks}

    return app


app = create_app()


def main() -> None:
    uvicorn.run(app, host="127.0.0.1", port=9002)


if __name__ == "__main__":
    main()
