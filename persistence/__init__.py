from __future__ import annotations

from .budget import RequestBudget, budget_from_settings
from .collection_state import CollectionState, DiskCollectionRepository, collection_link
from .errors import (
    ConflictError,
    DocProcError,
    DocumentNotFoundError,
    InvalidInputError,
    QueryError,
    QuotaExceededError,
    StoreError,
)
from .interfaces import (
    CreateRequest,
    Document,
    DocumentStore,
    InsertOutcome,
    QueryGateway,
    ResponseSink,
    document_link,
)
from .repositories import DiskCollection

__all__ = [
    "RequestBudget",
    "budget_from_settings",
    "CollectionState",
    "DiskCollectionRepository",
    "collection_link",
    "DiskCollection",
    "CreateRequest",
    "Document",
    "DocumentStore",
    "InsertOutcome",
    "QueryGateway",
    "ResponseSink",
    "document_link",
    "DocProcError",
    "QueryError",
    "StoreError",
    "QuotaExceededError",
    "ConflictError",
    "DocumentNotFoundError",
    "InvalidInputError",
]
