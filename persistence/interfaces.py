from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Awaitable, Mapping, Protocol

from .errors import StoreError

Document = dict[str, Any]


class InsertOutcome(enum.Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class CreateRequest:
    """
    Synchronous answer to a create call.

    `completion` is only set for accepted requests. A rejected request never
    completes; the host dropped it before doing any work.
    """

    outcome: InsertOutcome
    completion: Awaitable[Document] | None = None

    @property
    def accepted(self) -> bool:
        return self.outcome is InsertOutcome.ACCEPTED


class QueryGateway(Protocol):
    async def query_documents(self, collection_link: str, query: str) -> list[Document]:
        """Return every document of the collection matching `query` (raises QueryError)."""
        ...


class DocumentStore(Protocol):
    def create_document(self, collection_link: str, doc: Mapping[str, Any]) -> CreateRequest:
        ...

    async def replace_document(self, document_link: str, doc: Mapping[str, Any]) -> Document:
        ...

    async def delete_document(self, document_link: str) -> Document:
        ...


class ResponseSink(Protocol):
    def set_body(self, value: Any) -> None:
        ...


def document_link(doc: Mapping[str, Any]) -> str:
    link = doc.get("_self")
    if not isinstance(link, str) or not link:
        raise StoreError(f"document has no _self link (id={doc.get('id')!r})")
    return link
