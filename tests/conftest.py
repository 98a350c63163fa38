from __future__ import annotations

import asyncio
import copy
import importlib
import sys
import uuid
from pathlib import Path
from typing import Any, Mapping

import pytest

# Ensure the repository root (parent of ./tests) is importable during pytest collection.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from persistence.errors import DocumentNotFoundError, StoreError  # noqa: E402
from persistence.interfaces import CreateRequest, InsertOutcome  # noqa: E402
from persistence.query import matches, parse_query  # noqa: E402


@pytest.fixture
def sandbox_project(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """
    Point DATA_DIR at a temp directory so tests never touch real ./data.
    """
    data = tmp_path / "data"
    monkeypatch.setenv("DATA_DIR", str(data))
    monkeypatch.setenv("REQUEST_BUDGET", "1000")
    monkeypatch.setenv("TIME_BUDGET_MS", "0")
    return tmp_path


@pytest.fixture
def reload_endpoints(sandbox_project: Path) -> None:
    """
    Endpoint modules read settings at import time; reload after sandboxing.
    """
    import endpoints.mcp_endpoints as mcp_endpoints
    import endpoints.procedure_endpoints as procedure_endpoints

    importlib.reload(procedure_endpoints)
    importlib.reload(mcp_endpoints)


class ScriptedCollection:
    """
    In-memory query gateway + document store whose host behaviour is scripted.

    - `accept_creates`: how many creates are accepted before every further
      create is rejected (None = unlimited).
    - `fail_create_at`: index of the accepted create whose completion fails.
    - `fail_links`: document links whose replace/delete fails immediately.
    - `write_delays`: seconds a replace/delete of a given link takes.

    Records every call so tests can assert on write counts and on the
    one-outstanding-create rule.
    """

    link = "colls/scripted"

    def __init__(
        self,
        docs: list[dict[str, Any]] | None = None,
        *,
        accept_creates: int | None = None,
        fail_create_at: int | None = None,
        fail_links: set[str] | None = None,
        write_delays: dict[str, float] | None = None,
    ) -> None:
        self.docs: dict[str, dict[str, Any]] = {}
        self.accept_creates = accept_creates
        self.fail_create_at = fail_create_at
        self.fail_links = set(fail_links or ())
        self.write_delays = dict(write_delays or {})
        self.writes_in_flight = 0
        self.create_calls = 0
        self.accepted_creates = 0
        self.completed_creates = 0
        self.in_flight = 0
        self.max_in_flight = 0
        self.replace_calls: list[str] = []
        self.delete_calls: list[str] = []
        self.query_calls: list[str] = []
        for doc in docs or []:
            self._put(doc)

    def _put(self, doc: Mapping[str, Any]) -> dict[str, Any]:
        stored = copy.deepcopy(dict(doc))
        stored.setdefault("id", uuid.uuid4().hex)
        stored["_self"] = f"{self.link}/docs/{stored['id']}"
        self.docs[stored["id"]] = stored
        return copy.deepcopy(stored)

    async def query_documents(self, collection_link: str, query: str) -> list[dict[str, Any]]:
        self.query_calls.append(query)
        conditions = parse_query(query)
        await asyncio.sleep(0)
        return [copy.deepcopy(d) for d in self.docs.values() if matches(d, conditions)]

    def create_document(self, collection_link: str, doc: Mapping[str, Any]) -> CreateRequest:
        self.create_calls += 1
        if self.accept_creates is not None and self.accepted_creates >= self.accept_creates:
            return CreateRequest(InsertOutcome.REJECTED)
        index = self.accepted_creates
        self.accepted_creates += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        return CreateRequest(InsertOutcome.ACCEPTED, self._complete_create(index, doc))

    async def _complete_create(self, index: int, doc: Mapping[str, Any]) -> dict[str, Any]:
        await asyncio.sleep(0)
        self.in_flight -= 1
        if index == self.fail_create_at:
            raise StoreError(f"write {index} failed")
        self.completed_creates += 1
        return self._put(doc)

    async def _write(self, document_link: str, delay: float) -> str:
        self.writes_in_flight += 1
        try:
            if document_link in self.fail_links:
                raise StoreError(f"write to {document_link} failed")
            await asyncio.sleep(self.write_delays.get(document_link, delay))
        finally:
            self.writes_in_flight -= 1
        return document_link.rsplit("/", 1)[-1]

    async def replace_document(self, document_link: str, doc: Mapping[str, Any]) -> dict[str, Any]:
        self.replace_calls.append(document_link)
        doc_id = await self._write(document_link, 0)
        if doc_id not in self.docs:
            raise DocumentNotFoundError(document_link)
        return self._put(doc)

    async def delete_document(self, document_link: str) -> dict[str, Any]:
        self.delete_calls.append(document_link)
        # Later selections finish first, so completion order != selection order.
        doc_id = await self._write(document_link, 0.001 * (len(self.docs) - len(self.delete_calls)))
        prior = self.docs.pop(doc_id, None)
        if prior is None:
            raise DocumentNotFoundError(document_link)
        return prior


@pytest.fixture
def scripted():
    """Factory for a ScriptedCollection plus an Invocation bound to it."""
    from procedures.context import Invocation

    def _make(docs: list[dict[str, Any]] | None = None, **kwargs: Any) -> tuple[ScriptedCollection, Invocation]:
        collection = ScriptedCollection(docs, **kwargs)
        invocation = Invocation(gateway=collection, store=collection, collection_link=collection.link)
        return collection, invocation

    return _make
