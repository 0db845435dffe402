"""Enumerate the paths a pull request touches."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .github_client import GitHubClient
from .pagination import DEFAULT_MAX_PAGES, iter_pages, require

LOGGER = logging.getLogger(__name__)


def list_changed_files(
    client: GitHubClient,
    owner: str,
    repository: str,
    number: int,
    page_size: int = 100,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> List[str]:
    """Return changed paths in API order. Duplicates are passed through as returned."""
    paths: List[str] = []

    def fetch(cursor: Optional[str]) -> Dict[str, Any]:
        return client.pull_request_files(
            owner, repository, number, cursor=cursor, page_size=page_size
        )

    def connection_of(page: Dict[str, Any]) -> Dict[str, Any]:
        return require(page, "repository", "pullRequest", "files")

    for _, connection in iter_pages(
        fetch, connection_of, max_pages=max_pages, label=f"PR #{number} files"
    ):
        for node in connection.get("nodes") or []:
            if node and node.get("path"):
                paths.append(node["path"])

    LOGGER.info("PR #%s: %d changed files", number, len(paths))
    return paths
