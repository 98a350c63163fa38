from __future__ import annotations

import inspect
import logging
from typing import Any, Mapping

from persistence.interfaces import Document, document_link

from .context import Invocation, gather_writes
from .errors import InvalidPatchError
from .merge import merge

logger = logging.getLogger(__name__)


async def update(invocation: Invocation, query: str, patch: Any, one: bool = False) -> Document | list[Document] | None:
    """
    findAndModify: merge `patch` into every document matching `query` (or only
    the first one when `one`) and replace them in the store.

    All documents are merged before the first write is issued, and the
    response is only set once every replacement has been confirmed. A failed
    replacement is raised only after the others have settled.

    Examples::

        update(inv, '{}', {"active": True})
        update(inv, '{"name": "bar"}', {"name": "foo"}, True)
        update(inv, '{"arr": {"$in": [3]}}', {"arr": {"$concat": [4, 5]}})
    """
    # Callers may hand over a pending value instead of a literal patch.
    if inspect.isawaitable(patch):
        patch = await patch
    if not isinstance(patch, Mapping):
        raise InvalidPatchError(f"patch must be a mapping, got {type(patch).__name__}")

    docs = await invocation.query(query)
    selected = docs[:1] if one else docs

    for doc in selected:
        merge(doc, patch)

    links = [document_link(doc) for doc in selected]
    persisted = await gather_writes(
        invocation.store.replace_document(link, doc) for link, doc in zip(links, selected)
    )
    logger.debug("UPDATE: query %r matched %d, replaced %d", query, len(docs), len(persisted))

    body: Document | list[Document] | None
    if one:
        body = persisted[0] if persisted else None
    else:
        body = list(persisted)
    invocation.response.set_body(body)
    return body
