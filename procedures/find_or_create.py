from __future__ import annotations

import logging
from typing import Any, Mapping

from persistence.errors import InvalidInputError, QuotaExceededError
from persistence.interfaces import Document

from .context import Invocation

logger = logging.getLogger(__name__)


async def find_or_create(invocation: Invocation, query: str, candidate: Mapping[str, Any]) -> Document:
    """
    Return the first document matching `query`; create `candidate` only when
    nothing matches. Re-running the same call after a successful create finds
    the stored document and writes nothing.
    """
    if not isinstance(candidate, Mapping):
        raise InvalidInputError(f"candidate must be a mapping, got {type(candidate).__name__}")

    docs = await invocation.query(query)
    if docs:
        invocation.response.set_body(docs[0])
        return docs[0]

    request = invocation.store.create_document(invocation.collection_link, candidate)
    if not request.accepted or request.completion is None:
        raise QuotaExceededError("create was not accepted; retry the call")
    created = await request.completion
    logger.debug("FIND OR CREATE: no match for %r, created %s", query, created.get("_self"))
    invocation.response.set_body(created)
    return created
