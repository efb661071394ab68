from __future__ import annotations

from collections.abc import Callable

import pytest


def _mr_json(iid: int, target_branch: str = "main", state: str = "opened", **overrides: object) -> dict[str, object]:
    data: dict[str, object] = {
        "id": 1000 + iid,
        "iid": iid,
        "project_id": 42,
        "title": f"MR {iid}",
        "state": state,
        "source_branch": f"feature/{iid}",
        "target_branch": target_branch,
        "web_url": f"https://gitlab.example.com/group/project/-/merge_requests/{iid}",
        "updated_at": "2024-05-01T08:00:00.000Z",
        "author": {"username": "alice"},
    }
    data.update(overrides)
    return data


@pytest.fixture
def mr_json() -> Callable[..., dict[str, object]]:
    """构造 GitLab MR JSON（字段与 v4 API 一致）。"""
    return _mr_json
