from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from persistence.budget import budget_from_settings
from persistence.errors import (
    ConflictError,
    DocProcError,
    DocumentNotFoundError,
    InvalidInputError,
    QueryError,
    QuotaExceededError,
    StoreError,
)
from procedures import PROCEDURES, Invocation, execute

router = APIRouter(tags=["procedures"])
logger = logging.getLogger(__name__)

# Most specific first.
ERROR_STATUS: list[tuple[type[DocProcError], int]] = [
    (QuotaExceededError, 429),
    (ConflictError, 409),
    (DocumentNotFoundError, 404),
    (StoreError, 500),
    (QueryError, 400),
    (InvalidInputError, 400),
]


class ProcedureCall(BaseModel):
    params: list[Any] = Field(default_factory=list)


def status_for(error: DocProcError) -> int:
    for error_type, status in ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 500


def new_invocation(collection: str) -> Invocation:
    return Invocation.for_collection(collection, budget=budget_from_settings())


@router.get("/colls/{collection}/sprocs")
async def list_procedures(collection: str) -> dict[str, Any]:
    return {"collection": collection, "procedures": sorted(PROCEDURES)}


@router.post("/colls/{collection}/sprocs/{procedure_id}")
async def run_procedure(collection: str, procedure_id: str, call: ProcedureCall) -> dict[str, Any]:
    if procedure_id not in PROCEDURES:
        raise HTTPException(status_code=404, detail=f"unknown procedure {procedure_id!r}")

    try:
        invocation = new_invocation(collection)
        await execute(procedure_id, invocation, call.params)
    except DocProcError as e:
        status = status_for(e)
        if status >= 500:
            logger.warning("PROCEDURE %s on %s failed: %r", procedure_id, collection, e)
        else:
            logger.info("PROCEDURE %s on %s aborted (%d): %s", procedure_id, collection, status, e)
        raise HTTPException(status_code=status, detail={"error": type(e).__name__, "message": str(e)}) from e

    return {"body": invocation.response.body}
