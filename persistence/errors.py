from __future__ import annotations


class DocProcError(Exception):
    """Base class for every error raised by the document procedures."""


class QueryError(DocProcError):
    """The query gateway could not execute a query."""


class StoreError(DocProcError):
    """A create/replace/delete request failed."""


class QuotaExceededError(StoreError):
    """The host will not accept more work in the current invocation."""


class ConflictError(StoreError):
    """A document with the same id already exists."""


class DocumentNotFoundError(StoreError):
    """No document is stored under the requested identity."""


class InvalidInputError(DocProcError):
    """Procedure arguments are missing or malformed."""
