"""Resolve the commits that belong to a pull request."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Set, Tuple

from .errors import MalformedResponseError, PreconditionError
from .github_client import GitHubClient
from .models import CommitSet
from .pagination import DEFAULT_MAX_PAGES, iter_pages, require

LOGGER = logging.getLogger(__name__)


def _oid(ref: Optional[Dict[str, Any]]) -> Optional[str]:
    if not ref:
        return None
    return ref.get("oid") or None


def select_merge_commit(pull: Dict[str, Any]) -> Tuple[str, bool]:
    """
    Pick the commit blame is computed against.

    The actual merge commit wins over the potential merge commit.

    Returns:
        Tuple of (commit id, whether it is the actual merge commit)
    """
    merge_commit = _oid(pull.get("mergeCommit"))
    if merge_commit:
        return merge_commit, True
    potential = _oid(pull.get("potentialMergeCommit"))
    if potential:
        return potential, False
    raise PreconditionError("pull request has neither a merge commit nor a potential merge commit")


def resolve_commit_set(
    client: GitHubClient,
    owner: str,
    repository: str,
    number: int,
    page_size: int = 100,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> CommitSet:
    """Collect every commit id of a pull request and the merge commit to blame against."""
    commit_ids: Set[str] = set()
    merge_commit: Optional[str] = None
    merged = False

    def fetch(cursor: Optional[str]) -> Dict[str, Any]:
        return client.pull_request_commits(
            owner, repository, number, cursor=cursor, page_size=page_size
        )

    def connection_of(page: Dict[str, Any]) -> Dict[str, Any]:
        return require(page, "repository", "pullRequest", "commits")

    pages = iter_pages(fetch, connection_of, max_pages=max_pages, label=f"PR #{number} commits")
    for page, connection in pages:
        if merge_commit is None:
            merge_commit, merged = select_merge_commit(require(page, "repository", "pullRequest"))
            commit_ids.add(merge_commit)

        for node in connection.get("nodes") or []:
            if not node:
                continue
            oid = _oid(node.get("commit"))
            if oid:
                commit_ids.add(oid)

    if merge_commit is None:
        raise MalformedResponseError(f"no commit pages returned for PR #{number}")

    LOGGER.info(
        "PR #%s: %d commits, blaming against %s commit %s",
        number,
        len(commit_ids),
        "merge" if merged else "potential merge",
        merge_commit,
    )
    return CommitSet(commit_ids=frozenset(commit_ids), merge_commit=merge_commit, merged=merged)
