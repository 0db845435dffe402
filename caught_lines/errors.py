"""Exceptions raised while auditing a pull request."""
from __future__ import annotations


class AuditError(RuntimeError):
    """Base class for audit failures."""


class PreconditionError(AuditError):
    """The pull request has neither a merge commit nor a potential merge commit."""


class PaginationError(AuditError):
    """A paginated connection did not terminate cleanly."""


class MalformedResponseError(AuditError):
    """The GraphQL payload is missing a field the audit depends on."""
