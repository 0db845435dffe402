from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional

STATUS_CLASSIFIED = "classified"
STATUS_HISTORY_NOT_FOUND = "history_not_found"
STATUS_NEWLY_INTRODUCED = "newly_introduced"
STATUS_FAILED = "failed"


@dataclass(frozen=True)
class CommitSet:
    """Commits belonging to a pull request and the commit blame runs against."""
    commit_ids: FrozenSet[str]
    merge_commit: str
    merged: bool  # True when merge_commit is the actual merge, not the potential one

    def __contains__(self, commit_id: object) -> bool:
        return commit_id in self.commit_ids

    def __len__(self) -> int:
        return len(self.commit_ids)


@dataclass(frozen=True)
class BlameRange:
    """A contiguous span of a file attributed to the commit that last touched it."""
    starting_line: int
    ending_line: int
    commit_id: str
    message_headline: str = ""


@dataclass
class HistoryNode:
    """One revision in a file's history along with its blame."""
    commit_id: str
    ranges: List[BlameRange] = field(default_factory=list)


@dataclass
class CaughtLine:
    """A PR-owned line overlapped by a range from a commit outside the PR."""
    path: str
    line: int
    commit_id: str
    message_headline: str
    range_start: int
    range_end: int


@dataclass
class ClassificationResult:
    """Outcome of classifying one changed file."""
    path: str
    status: str
    owned_lines: List[int] = field(default_factory=list)
    caught: List[CaughtLine] = field(default_factory=list)
    history_nodes: int = 0
    error: Optional[str] = None


@dataclass
class AuditReport:
    """Per-file results for a single pull request."""
    owner: str
    repository: str
    number: int
    merge_commit: str
    merged: bool
    commit_count: int
    results: List[ClassificationResult] = field(default_factory=list)

    @property
    def caught_count(self) -> int:
        return sum(len(result.caught) for result in self.results)

    @property
    def failed_count(self) -> int:
        return sum(1 for result in self.results if result.status == STATUS_FAILED)
