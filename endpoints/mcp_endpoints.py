from __future__ import annotations

import logging
from typing import Any, Literal

from typing_extensions import TypedDict

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from endpoints.procedure_endpoints import new_invocation
from persistence.errors import DocProcError
from procedures import execute, resume_bulk_insert
from settings import get_settings

SETTINGS = get_settings()

logger = logging.getLogger(__name__)


class ToolTextContent(TypedDict):
    type: Literal["text"]
    text: str


class ProcedureToolResponse(TypedDict, total=False):
    content: list[ToolTextContent]
    structuredContent: dict[str, Any]


def _collection(name: str | None) -> str:
    if name is None or not name.strip():
        return SETTINGS.default_collection
    return name.strip()


def _reply(message: str | None = None, **structured: Any) -> ProcedureToolResponse:
    return {
        "content": ([{"type": "text", "text": message}] if message else []),
        "structuredContent": structured,
    }


def _failed(tool: str, error: DocProcError) -> ProcedureToolResponse:
    logger.info("MCP %s: %s: %s", tool, type(error).__name__, error)
    return _reply(f"{type(error).__name__}: {error}", error=type(error).__name__)


mcp = FastMCP(
    "Document procedures",
    stateless_http=True,
    json_response=True,
    # FastMCP enables DNS rebinding protection on localhost, which rejects
    # proxied Host headers with 421.
    transport_security=TransportSecuritySettings(enable_dns_rebinding_protection=False),
)


@mcp.tool()
async def find_and_modify(
    query: str,
    patch: dict[str, Any],
    one: bool = False,
    collection: str | None = None,
) -> ProcedureToolResponse:
    """
    Merges `patch` into documents matching the JSON filter `query`.
    Values like {"$push": 3} run an operator on the stored value.
    """
    name = _collection(collection)
    try:
        body = await execute("findAndModify", new_invocation(name), [query, patch, one])
    except DocProcError as e:
        return _failed("find_and_modify", e)
    documents = [body] if isinstance(body, dict) else (body or [])
    return _reply(f"Updated {len(documents)} document(s) in {name}.", documents=documents)


@mcp.tool()
async def find_or_create(query: str, document: dict[str, Any], collection: str | None = None) -> ProcedureToolResponse:
    """
    Returns the first document matching `query`, creating `document` if none does.
    """
    name = _collection(collection)
    try:
        body = await execute("findOrCreate", new_invocation(name), [query, document])
    except DocProcError as e:
        return _failed("find_or_create", e)
    return _reply(f"Document {body.get('id')} in {name}.", documents=[body])


@mcp.tool()
async def find_and_remove(query: str, one: bool = False, collection: str | None = None) -> ProcedureToolResponse:
    """
    Deletes documents matching `query` (only the first when `one`).
    """
    name = _collection(collection)
    try:
        acks = await execute("findAndRemove", new_invocation(name), [query, one])
    except DocProcError as e:
        return _failed("find_and_remove", e)
    return _reply(f"Removed {len(acks)} document(s) from {name}.", documents=acks)


@mcp.tool()
async def bulk_create(documents: list[dict[str, Any]], collection: str | None = None) -> ProcedureToolResponse:
    """
    Inserts `documents` in order, re-invoking with the remainder whenever the
    per-invocation budget runs out.
    """
    name = _collection(collection)

    async def _invoke(remaining: list[Any]) -> int:
        return await execute("bulkCreate", new_invocation(name), [remaining])

    try:
        count = await resume_bulk_insert(_invoke, documents)
    except DocProcError as e:
        return _failed("bulk_create", e)
    return _reply(f"Inserted {count} document(s) into {name}.", count=count)
