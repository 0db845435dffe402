"""CLI entry point for the pull request blame audit."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

import requests

from .auditor import audit_pull_request
from .config import ConfigError, load_config
from .errors import AuditError
from .github_client import GitHubClient
from .report import emit_annotations, escape_data, log_report, write_jsonl


def _action_input(name: str) -> Optional[str]:
    # GitHub Actions exposes `with:` inputs as INPUT_<NAME> environment variables
    value = os.environ.get(f"INPUT_{name.upper()}", "").strip()
    return value or None


def _in_actions() -> bool:
    return os.environ.get("GITHUB_ACTIONS") == "true"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="caught-lines",
        description="Report pull request lines overwritten by commits outside the pull request",
    )
    parser.add_argument(
        "--owner",
        default=_action_input("owner"),
        help="Repository owner (defaults to INPUT_OWNER)",
    )
    parser.add_argument(
        "--repository",
        default=_action_input("repository"),
        help="Repository name (defaults to INPUT_REPOSITORY)",
    )
    parser.add_argument(
        "--pull-number",
        default=_action_input("pull_number"),
        help="Pull request number (defaults to INPUT_PULL_NUMBER)",
    )
    parser.add_argument(
        "--token",
        default=None,
        help="GitHub token (defaults to INPUT_TOKEN, then GITHUB_TOKEN env)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to audit config JSON (optional)",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Output JSONL path for per-file results (optional)",
    )
    parser.add_argument(
        "--history-page-size",
        type=int,
        default=None,
        help="History nodes fetched per request (overrides config)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Files classified concurrently (overrides config)",
    )
    parser.add_argument(
        "--fail-on-caught",
        action="store_true",
        help="Exit with status 1 when any caught line is found",
    )
    parser.add_argument(
        "--annotations",
        action="store_true",
        default=_in_actions(),
        help="Print GitHub Actions annotations (default when GITHUB_ACTIONS=true)",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )

    missing = [
        flag
        for flag, value in (
            ("--owner", args.owner),
            ("--repository", args.repository),
            ("--pull-number", args.pull_number),
        )
        if not value
    ]
    if missing:
        parser.error(f"missing required input: {', '.join(missing)}")
    try:
        pull_number = int(args.pull_number)
    except ValueError:
        parser.error(f"--pull-number must be an integer, got {args.pull_number!r}")

    try:
        config = load_config(args.config)
        if args.history_page_size is not None:
            config.history_page_size = args.history_page_size
        if args.workers is not None:
            config.workers = args.workers
        if args.fail_on_caught:
            config.fail_on_caught = True
        config.validate()
    except ConfigError as e:
        logging.error("%s", e)
        raise SystemExit(2)

    env_token = os.environ.get("GITHUB_TOKEN")
    if args.token and env_token and args.token != env_token:
        logging.error("Token mismatch: --token differs from GITHUB_TOKEN")
        raise SystemExit(2)

    token = args.token or _action_input("token") or env_token
    if not token:
        logging.warning("GITHUB_TOKEN not set; the GraphQL API requires authentication")

    client = GitHubClient(token=token, base_url=config.base_url)

    try:
        report = audit_pull_request(client, config, args.owner, args.repository, pull_number)
    except (AuditError, requests.RequestException) as e:
        logging.error("Audit of %s/%s#%s failed: %s", args.owner, args.repository, pull_number, e)
        if _in_actions():
            print(f"::error::{escape_data(str(e))}")
        raise SystemExit(1)

    log_report(report)
    if args.output:
        write_jsonl(report, Path(args.output))
    if args.annotations:
        emit_annotations(report, sys.stdout)

    if config.fail_on_caught and report.caught_count:
        logging.error("%d caught lines found", report.caught_count)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
