from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

# (starting line, ending line, commit oid)
RangeSpec = Tuple[int, int, str]
# (history node oid, blame ranges of the file at that revision)
NodeSpec = Tuple[str, Sequence[RangeSpec]]


def headline(oid: str) -> str:
    return f"headline of {oid}"


def _page(items: Sequence[Any], cursor: Optional[str], page_size: int) -> Tuple[List[Any], Dict[str, Any]]:
    start = int(cursor.split(":", 1)[1]) if cursor else 0
    end = start + page_size
    page_info = {"hasNextPage": end < len(items), "endCursor": f"cursor:{end}"}
    return list(items[start:end]), page_info


class FakeGraphQLClient:
    """Serves canned GraphQL pages the way GitHubClient's query methods return them."""

    def __init__(
        self,
        commits: Sequence[str] = (),
        files: Sequence[str] = (),
        histories: Optional[Dict[str, Any]] = None,
        merge_commit: Optional[str] = None,
        potential_merge_commit: Optional[str] = None,
    ):
        self.commits = list(commits)
        self.files = list(files)
        self.histories = histories or {}
        self.merge_commit = merge_commit
        self.potential_merge_commit = potential_merge_commit
        self.calls: List[Tuple[Any, ...]] = []

    def calls_to(self, name: str) -> List[Tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == name]

    def pull_request_commits(self, owner, repo, number, cursor=None, page_size=100):
        self.calls.append(("commits", cursor, page_size))
        nodes, page_info = _page(self.commits, cursor, page_size)
        pull = {
            "mergeCommit": {"oid": self.merge_commit} if self.merge_commit else None,
            "potentialMergeCommit": (
                {"oid": self.potential_merge_commit} if self.potential_merge_commit else None
            ),
            "commits": {
                "pageInfo": page_info,
                "nodes": [{"commit": {"oid": oid}} for oid in nodes],
            },
        }
        return {"repository": {"pullRequest": pull}}

    def pull_request_files(self, owner, repo, number, cursor=None, page_size=100):
        self.calls.append(("files", cursor, page_size))
        nodes, page_info = _page(self.files, cursor, page_size)
        files = {"pageInfo": page_info, "nodes": [{"path": path} for path in nodes]}
        return {"repository": {"pullRequest": {"files": files}}}

    def file_history(self, owner, repo, oid, path, cursor=None, page_size=100):
        self.calls.append(("history", cursor, page_size, oid, path))
        history = self.histories.get(path, [])
        if isinstance(history, Exception):
            raise history
        if history is None:
            return {"repository": {"object": None}}
        nodes, page_info = _page(history, cursor, page_size)
        return {
            "repository": {
                "object": {
                    "history": {
                        "pageInfo": page_info,
                        "nodes": [
                            {
                                "oid": node_oid,
                                "blame": {
                                    "ranges": [
                                        {
                                            "startingLine": start,
                                            "endingLine": end,
                                            "commit": {
                                                "oid": commit,
                                                "messageHeadline": headline(commit),
                                            },
                                        }
                                        for start, end, commit in ranges
                                    ]
                                },
                            }
                            for node_oid, ranges in nodes
                        ],
                    }
                }
            }
        }


@pytest.fixture
def widgets_client() -> FakeGraphQLClient:
    """acme/widgets#42: merged as M, commits C1 and C2, one changed file."""
    return FakeGraphQLClient(
        commits=["C1", "C2"],
        files=["a.txt"],
        merge_commit="M",
        histories={
            "a.txt": [
                ("M", [(1, 5, "C1")]),
                ("P1", [(1, 3, "F0"), (4, 5, "C1")]),
            ],
        },
    )
