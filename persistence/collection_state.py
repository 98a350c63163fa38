from __future__ import annotations

import copy
import time
import uuid
from typing import Any, Mapping

from pydantic import BaseModel, Field

from .disk_store import DiskJsonDocumentStore
from .errors import ConflictError, DocumentNotFoundError, StoreError
from . import paths
from .query import matches


class CollectionState(BaseModel):
    """
    Mirrors the on-disk collection file:
      { "name": "<collection>", "documents": { "<id>": {...}, ... } }

    `documents` keeps insertion order, which is also query result order.
    """

    name: str
    documents: dict[str, dict[str, Any]] = Field(default_factory=dict)

    @classmethod
    def from_disk_doc(cls, name: str, doc: Mapping[str, Any]) -> "CollectionState":
        if not doc:
            return cls(name=name)
        return cls.model_validate({**doc, "name": name})

    def to_disk_doc(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


def collection_link(name: str) -> str:
    return f"colls/{name}"


def document_self_link(collection: str, doc_id: str) -> str:
    return f"{collection_link(collection)}/docs/{doc_id}"


class DiskCollectionRepository:
    """
    Synchronous, disk-backed collection of JSON documents.

    Every write is a full load/modify/save cycle of the collection file run
    under that file's lock.
    """

    def __init__(self, name: str):
        self._name = name
        self._store = DiskJsonDocumentStore(paths.collection_path(paths.data_dir(), name))

    @property
    def name(self) -> str:
        return self._name

    @property
    def link(self) -> str:
        return collection_link(self._name)

    def _state(self, raw: Mapping[str, Any]) -> CollectionState:
        try:
            return CollectionState.from_disk_doc(self._name, raw)
        except ValueError as e:
            raise StoreError(f"collection {self._name!r} is corrupt: {e}") from e

    def find(self, conditions: Mapping[str, Any]) -> list[dict[str, Any]]:
        state = self._state(self._store.load())
        return [copy.deepcopy(d) for d in state.documents.values() if matches(d, conditions)]

    def insert(self, doc: Mapping[str, Any]) -> dict[str, Any]:
        new_doc = copy.deepcopy(dict(doc))
        doc_id = new_doc.get("id")
        if doc_id is None:
            doc_id = uuid.uuid4().hex
        elif not isinstance(doc_id, str) or not doc_id:
            raise StoreError(f"document id must be a non-empty string, got {doc_id!r}")
        new_doc["id"] = doc_id
        self._stamp(new_doc)

        def _insert(raw: dict[str, Any]) -> dict[str, Any]:
            state = self._state(raw)
            if doc_id in state.documents:
                raise ConflictError(f"document {doc_id!r} already exists in {self._name!r}")
            state.documents[doc_id] = new_doc
            self._commit(raw, state)
            return copy.deepcopy(new_doc)

        return self._store.mutate(_insert)

    def replace(self, link: str, doc: Mapping[str, Any]) -> dict[str, Any]:
        doc_id = self._id_from_link(link)
        new_doc = copy.deepcopy(dict(doc))
        if new_doc.get("id", doc_id) != doc_id:
            raise StoreError(f"cannot change id of {link} to {new_doc.get('id')!r}")
        new_doc["id"] = doc_id
        self._stamp(new_doc)

        def _replace(raw: dict[str, Any]) -> dict[str, Any]:
            state = self._state(raw)
            if doc_id not in state.documents:
                raise DocumentNotFoundError(f"{link} does not exist")
            state.documents[doc_id] = new_doc
            self._commit(raw, state)
            return copy.deepcopy(new_doc)

        return self._store.mutate(_replace)

    def delete(self, link: str) -> dict[str, Any]:
        doc_id = self._id_from_link(link)

        def _delete(raw: dict[str, Any]) -> dict[str, Any]:
            state = self._state(raw)
            prior = state.documents.pop(doc_id, None)
            if prior is None:
                raise DocumentNotFoundError(f"{link} does not exist")
            self._commit(raw, state)
            return prior

        return self._store.mutate(_delete)

    def _commit(self, raw: dict[str, Any], state: CollectionState) -> None:
        try:
            disk_doc = state.to_disk_doc()
        except ValueError as e:
            raise StoreError(f"document is not JSON-serializable: {e}") from e
        raw.clear()
        raw.update(disk_doc)

    def _stamp(self, doc: dict[str, Any]) -> None:
        doc["_self"] = document_self_link(self._name, doc["id"])
        doc["_ts"] = int(time.time())

    def _id_from_link(self, link: str) -> str:
        prefix = f"{self.link}/docs/"
        if not isinstance(link, str) or not link.startswith(prefix) or len(link) == len(prefix):
            raise DocumentNotFoundError(f"{link!r} is not a document of {self._name!r}")
        return link[len(prefix):]
