from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Iterable, TypeVar

from persistence.budget import RequestBudget
from persistence.interfaces import Document, DocumentStore, QueryGateway, ResponseSink
from persistence.repositories import DiskCollection

T = TypeVar("T")

_UNSET = object()


class Response(ResponseSink):
    """Single-assignment response body of one invocation."""

    def __init__(self) -> None:
        self._body: Any = _UNSET

    @property
    def is_set(self) -> bool:
        return self._body is not _UNSET

    @property
    def body(self) -> Any:
        if self._body is _UNSET:
            raise LookupError("response body was never set")
        return self._body

    def set_body(self, value: Any) -> None:
        if self._body is not _UNSET:
            raise RuntimeError("response body already set for this invocation")
        self._body = value


@dataclass
class Invocation:
    """Everything one procedure call is allowed to touch."""

    gateway: QueryGateway
    store: DocumentStore
    collection_link: str
    response: ResponseSink = field(default_factory=Response)

    @classmethod
    def for_collection(
        cls,
        name: str,
        *,
        budget: RequestBudget | None = None,
        response: ResponseSink | None = None,
    ) -> "Invocation":
        collection = DiskCollection(name, budget=budget)
        return cls(
            gateway=collection,
            store=collection,
            collection_link=collection.get_self_link(),
            response=response if response is not None else Response(),
        )

    async def query(self, query: str) -> list[Document]:
        return await self.gateway.query_documents(self.collection_link, query)


async def gather_writes(writes: Iterable[Awaitable[T]]) -> list[T]:
    """
    Run `writes` concurrently and wait until every one has settled.

    Results come back in submission order. If any write failed, the first
    failure (in submission order) is raised, but only after the others have
    finished, so no write is still landing once the caller sees the error.
    """
    results = await asyncio.gather(*writes, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results
