from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from mr_nag.nag.filters import filter_by_min_dwell
from mr_nag.nag.filters import filter_by_target_branch
from mr_nag.nag.models import MergeRequest

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _mr(iid: int, target_branch: str = "main", idle: timedelta = timedelta(hours=1)) -> MergeRequest:
    return MergeRequest(
        id=1000 + iid,
        iid=iid,
        title=f"MR {iid}",
        source_branch=f"feature/{iid}",
        target_branch=target_branch,
        web_url=f"https://gitlab.example.com/g/p/-/merge_requests/{iid}",
        updated_at=NOW - idle,
    )


def test_filter_without_branch_is_identity() -> None:
    mrs = [_mr(3, "production"), _mr(1), _mr(2, "dev")]
    assert filter_by_target_branch(mrs, None) == mrs


def test_filter_without_branch_on_empty_list() -> None:
    assert filter_by_target_branch([], None) == []


def test_filter_keeps_exact_matches_in_order() -> None:
    mrs = [_mr(1, "production"), _mr(2, "main"), _mr(3, "production"), _mr(4, "production-hotfix")]
    result = filter_by_target_branch(mrs, "production")
    assert [mr.iid for mr in result] == [1, 3]


@pytest.mark.parametrize("branch", ["Production", "prod*", "prod", "production "])
def test_filter_is_case_sensitive_and_literal(branch: str) -> None:
    assert filter_by_target_branch([_mr(1, "production")], branch) == []


def test_filter_is_idempotent() -> None:
    mrs = [_mr(1, "production"), _mr(2, "main"), _mr(3, "production")]
    once = filter_by_target_branch(mrs, "production")
    assert filter_by_target_branch(once, "production") == once


def test_filter_does_not_mutate_input() -> None:
    mrs = [_mr(1, "production"), _mr(2, "main")]
    filter_by_target_branch(mrs, "production")
    assert [mr.iid for mr in mrs] == [1, 2]


def test_min_dwell_none_is_identity() -> None:
    mrs = [_mr(1, idle=timedelta(seconds=1)), _mr(2, idle=timedelta(days=3))]
    assert filter_by_min_dwell(mrs, None, now=NOW) == mrs


def test_min_dwell_keeps_only_idle_merge_requests() -> None:
    mrs = [
        _mr(1, idle=timedelta(minutes=5)),
        _mr(2, idle=timedelta(hours=2)),
        _mr(3, idle=timedelta(hours=1)),
    ]
    result = filter_by_min_dwell(mrs, 3600, now=NOW)
    assert [mr.iid for mr in result] == [2, 3]


def test_min_dwell_zero_keeps_everything() -> None:
    mrs = [_mr(1, idle=timedelta(0)), _mr(2)]
    assert filter_by_min_dwell(mrs, 0, now=NOW) == mrs
