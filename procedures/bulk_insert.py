"""
Resumable bulk insertion under a host quota.

The host may stop accepting work at any create call. A single invocation
therefore writes one document at a time, counts only confirmed writes and,
when a create is rejected, reports how many documents made it. The caller
re-invokes with the remaining suffix (see `resume_bulk_insert`).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Sequence

from persistence.errors import InvalidInputError, QuotaExceededError

from .context import Invocation

logger = logging.getLogger(__name__)


@dataclass
class BulkInsertJob:
    documents: Sequence[Mapping[str, Any]]
    # Index of the next document not yet confirmed persisted.
    cursor: int = 0

    @property
    def done(self) -> bool:
        return self.cursor >= len(self.documents)

    @property
    def next_document(self) -> Mapping[str, Any]:
        return self.documents[self.cursor]

    @property
    def remaining(self) -> list[Mapping[str, Any]]:
        return list(self.documents[self.cursor:])

    def advance(self) -> int:
        if self.done:
            raise IndexError("bulk insert job is already complete")
        self.cursor += 1
        return self.cursor


def _validate_documents(documents: Any) -> list[Mapping[str, Any]]:
    if documents is None:
        raise InvalidInputError("The array is undefined or null.")
    if isinstance(documents, (str, bytes, Mapping)) or not isinstance(documents, Sequence):
        raise InvalidInputError(f"documents must be an array, got {type(documents).__name__}")
    for i, doc in enumerate(documents):
        if not isinstance(doc, Mapping):
            raise InvalidInputError(f"documents[{i}] must be an object, got {type(doc).__name__}")
    return list(documents)


async def bulk_insert(invocation: Invocation, documents: Sequence[Mapping[str, Any]]) -> int:
    """
    bulkCreate: create `documents` in order and return how many were persisted.

    The returned count is the resume point: a follow-up call with
    ``documents[count:]`` continues where this one stopped. A failed write
    aborts the invocation without a response; documents written before it
    stay written.
    """
    job = BulkInsertJob(_validate_documents(documents))

    while not job.done:
        request = invocation.store.create_document(invocation.collection_link, job.next_document)
        if not request.accepted or request.completion is None:
            # No completion will ever arrive for a rejected request.
            logger.info("BULK INSERT: rejected at cursor=%d of %d", job.cursor, len(job.documents))
            break
        await request.completion
        job.advance()

    if job.done:
        logger.debug("BULK INSERT: persisted all %d document(s)", job.cursor)
    invocation.response.set_body(job.cursor)
    return job.cursor


async def resume_bulk_insert(
    invoke: Callable[[list[Mapping[str, Any]]], Awaitable[int]],
    documents: Sequence[Mapping[str, Any]],
) -> int:
    """
    Drive `invoke` (one bulk_insert invocation per call) until every document
    is persisted, feeding each call the suffix the previous one did not reach.

    Raises QuotaExceededError when an invocation persists nothing, since
    re-invoking would loop forever.
    """
    job = BulkInsertJob(_validate_documents(documents))
    invocations = 0
    while not job.done:
        remaining = job.remaining
        count = await invoke(remaining)
        invocations += 1
        if not isinstance(count, int) or count < 0 or count > len(remaining):
            raise InvalidInputError(f"bulk insert reported an impossible count {count!r}")
        if count == 0:
            raise QuotaExceededError(
                f"bulk insert made no progress at document {job.cursor} of {len(job.documents)}"
            )
        job.cursor += count
        logger.info(
            "BULK INSERT: invocation %d persisted %d, total %d of %d",
            invocations,
            count,
            job.cursor,
            len(job.documents),
        )
    return job.cursor
