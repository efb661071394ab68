"""
命令行入口（一次性检查，适合 cron 调度）。

这里做三件事：
- 解析命令行 + 环境变量（严格校验，缺失直接失败）
- 组装 HTTP client 并跑 pipeline
- 把结果映射成 stdout 输出与 exit code

exit code：0 成功；2 配置错误；3 网络；4 鉴权；5 API；6 解码；1 未预期异常
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Mapping, Sequence

import anyio
import httpx

from mr_nag.config import NagConfig
from mr_nag.config import OPTIONAL_OPTIONS
from mr_nag.config import REQUIRED_OPTIONS
from mr_nag.config import load_config
from mr_nag.errors import MrNagError
from mr_nag.nag.models import MergeRequest
from mr_nag.pipeline import NagOutcome
from mr_nag.pipeline import NagStatus
from mr_nag.pipeline import run_nag

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

DESCRIPTION = (
    "Notify a Slack webhook if open merge requests exist for a GitLab project. "
    "Performs one check and exits; run it under cron. "
    "Every option can also be given as an environment variable named after the long flag "
    "(e.g. --gitlab-token -> GITLAB_TOKEN); the flag wins when both are set."
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mr-nag", description=DESCRIPTION)
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-s",
        "--slack-webhook-url",
        help="Webhook URL to notify if open merge requests are found [env: SLACK_WEBHOOK_URL]",
    )
    parser.add_argument(
        "-t",
        "--gitlab-token",
        help="GitLab token with read_api access to the project (required) [env: GITLAB_TOKEN]",
    )
    parser.add_argument(
        "-g",
        "--gitlab-host",
        help='GitLab host, e.g. "gitlab.example.com"; HTTPS on port 443 (required) [env: GITLAB_HOST]',
    )
    parser.add_argument(
        "-i",
        "--gitlab-project-id",
        help="Numeric GitLab project ID to check (required) [env: GITLAB_PROJECT_ID]",
    )
    parser.add_argument(
        "-T",
        "--target-branch",
        help="Only merge requests targeting exactly this branch trigger a notification [env: TARGET_BRANCH]",
    )
    parser.add_argument(
        "-d",
        "--min-dwell-secs",
        help="Only notify about merge requests idle for at least this many seconds [env: MIN_DWELL_SECS]",
    )
    parser.add_argument(
        "--http-timeout-secs",
        help="Timeout for every HTTP call, default 30 [env: HTTP_TIMEOUT_SECS]",
    )
    parser.add_argument(
        "--max-pages",
        help="Upper bound on GitLab result pages, default 100 [env: MAX_PAGES]",
    )
    parser.add_argument(
        "--log-level",
        help="Log level for stderr diagnostics, default WARNING [env: LOG_LEVEL]",
    )
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def describe_merge_request(mr: MergeRequest, target_branch: str | None) -> str:
    suffix = "" if target_branch is None else f" to target branch: {target_branch}"
    return f"MR is awaiting merge{suffix}: {mr.title} {mr.web_url}"


def summarize(outcome: NagOutcome) -> str:
    """成功路径的最后一行输出（即使没配置 webhook 也能看到数量）。"""
    count = len(outcome.matched)
    if outcome.status is NagStatus.NOTHING_TO_NOTIFY:
        return "No open merge requests found."
    if outcome.status is NagStatus.NOTIFIED:
        return f"Found {count} open merge request(s); notification sent."
    return f"Found {count} open merge request(s); no webhook configured, notification skipped."


async def _run(config: NagConfig, transport: httpx.AsyncBaseTransport | None) -> NagOutcome:
    async with httpx.AsyncClient(timeout=httpx.Timeout(config.http_timeout_secs), transport=transport) as http_client:
        return await run_nag(config, http_client)


def main(
    argv: Sequence[str] | None = None,
    environ: Mapping[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """
    CLI 主函数（返回 exit code，便于测试）。

    - argv / environ 默认取进程参数与 `os.environ`
    - transport：测试时注入 `httpx.MockTransport`，默认走真实网络
    - `--help` / `--version` 由 argparse 直接 exit 0
    """
    args = build_parser().parse_args(argv)
    cli_values: dict[str, str | None] = {name: getattr(args, name) for name in REQUIRED_OPTIONS + OPTIONAL_OPTIONS}

    try:
        config = load_config(cli_values, os.environ if environ is None else environ)
        configure_logging(config.log_level)
        outcome = anyio.run(_run, config, transport)
    except MrNagError as exc:
        print(f"error: {exc.kind}: {exc}", file=sys.stderr)
        return exc.exit_code

    logger.info(f"Done: status={outcome.status.value}, fetched={outcome.fetched}, matched={len(outcome.matched)}")
    for mr in outcome.matched:
        print(describe_merge_request(mr, config.target_branch))
    print(summarize(outcome))
    return 0


if __name__ == "__main__":
    sys.exit(main())
