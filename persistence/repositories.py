from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

from .budget import RequestBudget
from .collection_state import DiskCollectionRepository
from .errors import QueryError
from .interfaces import CreateRequest, Document, DocumentStore, InsertOutcome, QueryGateway
from .query import parse_query

logger = logging.getLogger(__name__)


class DiskCollection(QueryGateway, DocumentStore):
    """
    Async query gateway + document store over one disk-backed collection.

    Uses asyncio.to_thread to keep file I/O off the event loop. Every request
    is charged against `budget`; a create that finds the budget exhausted is
    rejected synchronously and never scheduled.
    """

    def __init__(self, name: str, budget: RequestBudget | None = None) -> None:
        self._repo = DiskCollectionRepository(name)
        self._budget = budget if budget is not None else RequestBudget.unlimited()

    @property
    def name(self) -> str:
        return self._repo.name

    @property
    def budget(self) -> RequestBudget:
        return self._budget

    def get_self_link(self) -> str:
        return self._repo.link

    def _check_collection(self, collection_link: str) -> None:
        if collection_link != self._repo.link:
            raise QueryError(f"unknown collection {collection_link!r} (this is {self._repo.link!r})")

    async def query_documents(self, collection_link: str, query: str) -> list[Document]:
        self._check_collection(collection_link)
        conditions = parse_query(query)
        self._budget.acquire("query")
        docs = await asyncio.to_thread(self._repo.find, conditions)
        logger.debug("COLLECTION %s: query %r matched %d document(s)", self.name, query, len(docs))
        return docs

    def create_document(self, collection_link: str, doc: Mapping[str, Any]) -> CreateRequest:
        self._check_collection(collection_link)
        if not self._budget.try_acquire():
            logger.info("COLLECTION %s: create rejected, budget exhausted (used=%d)", self.name, self._budget.used)
            return CreateRequest(InsertOutcome.REJECTED)
        task = asyncio.get_running_loop().create_task(asyncio.to_thread(self._repo.insert, doc))
        return CreateRequest(InsertOutcome.ACCEPTED, task)

    async def replace_document(self, document_link: str, doc: Mapping[str, Any]) -> Document:
        self._budget.acquire(f"replace of {document_link}")
        return await asyncio.to_thread(self._repo.replace, document_link, doc)

    async def delete_document(self, document_link: str) -> Document:
        self._budget.acquire(f"delete of {document_link}")
        return await asyncio.to_thread(self._repo.delete, document_link)
