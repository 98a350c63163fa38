from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Sequence

from settings import get_settings

from .bulk_insert import bulk_insert
from .context import Invocation
from .errors import InvalidInputError
from .find_or_create import find_or_create
from .remove import remove
from .update import update

logger = logging.getLogger(__name__)

ProcedureBody = Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class Procedure:
    id: str
    body: ProcedureBody


UPDATE = Procedure(id="findAndModify", body=update)
FIND_OR_CREATE = Procedure(id="findOrCreate", body=find_or_create)
REMOVE = Procedure(id="findAndRemove", body=remove)
BULK_CREATE = Procedure(id="bulkCreate", body=bulk_insert)

PROCEDURES: dict[str, Procedure] = {p.id: p for p in (UPDATE, FIND_OR_CREATE, REMOVE, BULK_CREATE)}


def get_procedure(procedure_id: str) -> Procedure:
    try:
        return PROCEDURES[procedure_id]
    except KeyError:
        raise InvalidInputError(f"unknown procedure {procedure_id!r}") from None


async def execute(procedure_id: str, invocation: Invocation, params: Sequence[Any] = ()) -> Any:
    """Run a procedure by id with positional `params`, as the host would invoke it."""
    procedure = get_procedure(procedure_id)
    try:
        inspect.signature(procedure.body).bind(invocation, *params)
    except TypeError as e:
        raise InvalidInputError(f"{procedure_id}: {e}") from e

    if get_settings().debug_log_requests:
        logger.info("PROCEDURE %s on %s with %d param(s)", procedure_id, invocation.collection_link, len(params))
    return await procedure.body(invocation, *params)
