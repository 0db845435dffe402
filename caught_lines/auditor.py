"""Audit a pull request for PR-owned lines overwritten before merge."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List

from .blame_classifier import classify_file
from .changed_files import list_changed_files
from .commit_set import resolve_commit_set
from .config import AuditConfig
from .github_client import GitHubClient
from .models import STATUS_FAILED, AuditReport, ClassificationResult, CommitSet

LOGGER = logging.getLogger(__name__)


class PullRequestAuditor:
    """Runs the commit-set, changed-file and blame stages for one pull request."""

    def __init__(self, client: GitHubClient, config: AuditConfig):
        self.client = client
        self.config = config

    def audit(self, owner: str, repository: str, number: int) -> AuditReport:
        """
        Classify every file changed by a pull request.

        Failures while resolving commits or listing files propagate to the
        caller. Failures while classifying a single file are logged and
        recorded as a failed result so the remaining files still run.
        """
        LOGGER.info("Auditing %s/%s#%s", owner, repository, number)

        commit_set = resolve_commit_set(
            self.client,
            owner,
            repository,
            number,
            page_size=self.config.commit_page_size,
            max_pages=self.config.max_pages,
        )
        paths = list_changed_files(
            self.client,
            owner,
            repository,
            number,
            page_size=self.config.file_page_size,
            max_pages=self.config.max_pages,
        )

        report = AuditReport(
            owner=owner,
            repository=repository,
            number=number,
            merge_commit=commit_set.merge_commit,
            merged=commit_set.merged,
            commit_count=len(commit_set),
        )
        report.results = self._classify_all(owner, repository, commit_set, paths)

        LOGGER.info(
            "Audit complete: %d files, %d caught lines, %d failed files",
            len(report.results), report.caught_count, report.failed_count
        )
        return report

    def _classify_all(
        self, owner: str, repository: str, commit_set: CommitSet, paths: List[str]
    ) -> List[ClassificationResult]:
        if self.config.workers <= 1 or len(paths) <= 1:
            return [self._classify_one(owner, repository, commit_set, path) for path in paths]

        # map() keeps results in enumerator order
        with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
            return list(
                executor.map(
                    lambda path: self._classify_one(owner, repository, commit_set, path),
                    paths,
                )
            )

    def _classify_one(
        self, owner: str, repository: str, commit_set: CommitSet, path: str
    ) -> ClassificationResult:
        try:
            return classify_file(
                self.client,
                owner,
                repository,
                commit_set,
                path,
                page_size=self.config.history_page_size,
                max_pages=self.config.max_pages,
            )
        except Exception as e:
            LOGGER.error("Error classifying %s: %s", path, e)
            return ClassificationResult(path=path, status=STATUS_FAILED, error=str(e))


def audit_pull_request(
    client: GitHubClient,
    config: AuditConfig,
    owner: str,
    repository: str,
    number: int,
) -> AuditReport:
    return PullRequestAuditor(client, config).audit(owner, repository, number)
