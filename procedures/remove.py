from __future__ import annotations

import logging

from persistence.interfaces import Document, document_link

from .context import Invocation, gather_writes

logger = logging.getLogger(__name__)


async def remove(invocation: Invocation, query: str, one: bool = False) -> list[Document]:
    """
    findAndRemove: delete every document matching `query` (or only the first).

    Deletes run concurrently; acknowledgements are returned in the order the
    documents were selected, not the order the deletes completed. A failed
    delete is raised only after every other delete has settled.
    """
    docs = await invocation.query(query)
    selected = docs[:1] if one else docs

    links = [document_link(doc) for doc in selected]
    acks = await gather_writes(invocation.store.delete_document(link) for link in links)
    logger.debug("REMOVE: query %r deleted %d document(s)", query, len(acks))

    body = list(acks)
    invocation.response.set_body(body)
    return body
