"""Classify blamed line ranges of a file as PR-owned or foreign."""
from __future__ import annotations

import logging
from typing import AbstractSet, Any, Dict, Iterable, Iterator, List, Optional, Set

from .errors import MalformedResponseError
from .github_client import GitHubClient
from .models import (
    STATUS_CLASSIFIED,
    STATUS_HISTORY_NOT_FOUND,
    STATUS_NEWLY_INTRODUCED,
    BlameRange,
    CaughtLine,
    ClassificationResult,
    CommitSet,
    HistoryNode,
)
from .pagination import DEFAULT_MAX_PAGES, iter_pages, require

LOGGER = logging.getLogger(__name__)


def parse_blame_range(raw: Dict[str, Any]) -> BlameRange:
    """Build a BlameRange from a GraphQL `BlameRange` object."""
    start = require(raw, "startingLine")
    end = require(raw, "endingLine")
    if not isinstance(start, int) or not isinstance(end, int) or start < 1 or end < start:
        raise MalformedResponseError(f"invalid blame range {start!r}-{end!r}")
    commit = require(raw, "commit")
    return BlameRange(
        starting_line=start,
        ending_line=end,
        commit_id=require(commit, "oid"),
        message_headline=commit.get("messageHeadline") or "",
    )


def parse_history_node(raw: Dict[str, Any]) -> HistoryNode:
    ranges = (raw.get("blame") or {}).get("ranges") or []
    return HistoryNode(
        commit_id=require(raw, "oid"),
        ranges=[parse_blame_range(r) for r in ranges if r],
    )


def iter_history(
    client: GitHubClient,
    owner: str,
    repository: str,
    oid: str,
    path: str,
    page_size: int = 100,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> Iterator[HistoryNode]:
    """Yield the history of `path` reachable from `oid`, newest revision first."""

    def fetch(cursor: Optional[str]) -> Dict[str, Any]:
        return client.file_history(
            owner, repository, oid, path, cursor=cursor, page_size=page_size
        )

    def connection_of(page: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        target = require(page, "repository").get("object")
        if not target:
            LOGGER.debug("commit %s not found while walking %s", oid, path)
            return None
        return target.get("history")

    for _, connection in iter_pages(
        fetch, connection_of, max_pages=max_pages, label=f"history of {path}"
    ):
        for node in connection.get("nodes") or []:
            if node:
                yield parse_history_node(node)


def _first_owned_line(owned: Set[int], blame_range: BlameRange) -> Optional[int]:
    for line in range(blame_range.starting_line, blame_range.ending_line + 1):
        if line in owned:
            return line
    return None


def classify_ranges(
    commit_ids: AbstractSet[str],
    nodes: Iterable[HistoryNode],
    path: str,
) -> ClassificationResult:
    """
    Classify every blame range of every history node.

    Ranges attributed to a commit in `commit_ids` mark their lines as PR-owned.
    Ownership is add-only: nothing seen later removes a line from the owned set.
    A foreign range that covers an owned line yields one CaughtLine for the
    lowest such line; the remaining owned lines in that range are not reported.

    Args:
        commit_ids: Commit ids belonging to the pull request
        nodes: History nodes in the order they were fetched
        path: File path, copied onto the result

    Returns:
        ClassificationResult with status classified, history_not_found or
        newly_introduced
    """
    owned: Set[int] = set()
    caught: List[CaughtLine] = []
    node_count = 0
    foreign_seen = False

    for node in nodes:
        node_count += 1
        for blame_range in node.ranges:
            if blame_range.commit_id in commit_ids:
                owned.update(range(blame_range.starting_line, blame_range.ending_line + 1))
                continue

            foreign_seen = True
            line = _first_owned_line(owned, blame_range)
            if line is None:
                continue
            caught.append(
                CaughtLine(
                    path=path,
                    line=line,
                    commit_id=blame_range.commit_id,
                    message_headline=blame_range.message_headline,
                    range_start=blame_range.starting_line,
                    range_end=blame_range.ending_line,
                )
            )

    if node_count == 0:
        status = STATUS_HISTORY_NOT_FOUND
    elif owned and not foreign_seen:
        status = STATUS_NEWLY_INTRODUCED
    else:
        status = STATUS_CLASSIFIED

    return ClassificationResult(
        path=path,
        status=status,
        owned_lines=sorted(owned),
        caught=caught,
        history_nodes=node_count,
    )


def classify_file(
    client: GitHubClient,
    owner: str,
    repository: str,
    commit_set: CommitSet,
    path: str,
    page_size: int = 100,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> ClassificationResult:
    """Walk a file's history on the merge commit and classify its blame."""
    nodes = iter_history(
        client,
        owner,
        repository,
        commit_set.merge_commit,
        path,
        page_size=page_size,
        max_pages=max_pages,
    )
    result = classify_ranges(commit_set.commit_ids, nodes, path)
    LOGGER.debug(
        "%s: %s, %d history nodes, %d owned lines, %d caught",
        path,
        result.status,
        result.history_nodes,
        len(result.owned_lines),
        len(result.caught),
    )
    return result
