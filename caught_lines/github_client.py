from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import requests

LOGGER = logging.getLogger(__name__)

PULL_REQUEST_COMMITS_QUERY = """
query($owner: String!, $repo: String!, $number: Int!, $cursor: String, $pageSize: Int!) {
    repository(owner: $owner, name: $repo) {
        pullRequest(number: $number) {
            mergeCommit {
                oid
            }
            potentialMergeCommit {
                oid
            }
            commits(first: $pageSize, after: $cursor) {
                pageInfo {
                    hasNextPage
                    endCursor
                }
                nodes {
                    commit {
                        oid
                    }
                }
            }
        }
    }
}
"""

PULL_REQUEST_FILES_QUERY = """
query($owner: String!, $repo: String!, $number: Int!, $cursor: String, $pageSize: Int!) {
    repository(owner: $owner, name: $repo) {
        pullRequest(number: $number) {
            files(first: $pageSize, after: $cursor) {
                pageInfo {
                    hasNextPage
                    endCursor
                }
                nodes {
                    path
                }
            }
        }
    }
}
"""

FILE_HISTORY_QUERY = """
query($owner: String!, $repo: String!, $oid: GitObjectID!, $path: String!, $cursor: String, $pageSize: Int!) {
    repository(owner: $owner, name: $repo) {
        object(oid: $oid) {
            ... on Commit {
                history(first: $pageSize, after: $cursor, path: $path) {
                    pageInfo {
                        hasNextPage
                        endCursor
                    }
                    nodes {
                        oid
                        blame(path: $path) {
                            ranges {
                                startingLine
                                endingLine
                                commit {
                                    oid
                                    messageHeadline
                                }
                            }
                        }
                    }
                }
            }
        }
    }
}
"""


class GitHubClient:
    def __init__(self, token: Optional[str] = None, base_url: str = "https://api.github.com"):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/vnd.github+json"})
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})

    @property
    def graphql_url(self) -> str:
        # GitHub Enterprise serves REST under /api/v3 and GraphQL under /api/graphql
        if self.base_url.endswith("/api/v3"):
            return self.base_url[: -len("/v3")] + "/graphql"
        return f"{self.base_url}/graphql"

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        resp = self.session.request(method, url, **kwargs)
        if resp.status_code == 403 and resp.headers.get("X-RateLimit-Remaining") == "0":
            reset = int(resp.headers.get("X-RateLimit-Reset", "0"))
            sleep_for = max(0, reset - int(time.time()))
            LOGGER.warning("rate limit hit; sleeping for %ss", sleep_for)
            time.sleep(sleep_for)
            resp = self.session.request(method, url, **kwargs)
        return resp

    def post_graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        resp = self.request("POST", self.graphql_url, json={"query": query, "variables": variables})
        if resp.status_code >= 400:
            raise requests.HTTPError(f"{resp.status_code}: {resp.text}", response=resp)
        payload = resp.json()
        if payload.get("errors"):
            raise requests.HTTPError(f"GraphQL error: {payload['errors']}", response=resp)
        return payload["data"]

    def pull_request_commits(
        self,
        owner: str,
        repo: str,
        number: int,
        cursor: Optional[str] = None,
        page_size: int = 100,
    ) -> Dict[str, Any]:
        """Fetch one page of a pull request's commits plus its merge commit ids."""
        variables = {
            "owner": owner,
            "repo": repo,
            "number": number,
            "cursor": cursor,
            "pageSize": page_size,
        }
        return self.post_graphql(PULL_REQUEST_COMMITS_QUERY, variables)

    def pull_request_files(
        self,
        owner: str,
        repo: str,
        number: int,
        cursor: Optional[str] = None,
        page_size: int = 100,
    ) -> Dict[str, Any]:
        """Fetch one page of the paths changed by a pull request."""
        variables = {
            "owner": owner,
            "repo": repo,
            "number": number,
            "cursor": cursor,
            "pageSize": page_size,
        }
        return self.post_graphql(PULL_REQUEST_FILES_QUERY, variables)

    def file_history(
        self,
        owner: str,
        repo: str,
        oid: str,
        path: str,
        cursor: Optional[str] = None,
        page_size: int = 100,
    ) -> Dict[str, Any]:
        """Fetch one page of a file's history at `oid`, newest first, with blame per revision."""
        variables = {
            "owner": owner,
            "repo": repo,
            "oid": oid,
            "path": path,
            "cursor": cursor,
            "pageSize": page_size,
        }
        return self.post_graphql(FILE_HISTORY_QUERY, variables)
