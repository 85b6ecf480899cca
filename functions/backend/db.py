"""
Document store abstraction for Firestore and an in-memory test implementation.

Paths are slash-separated Firestore paths, e.g. "users/{uid}/aiProfiles".
Collection paths have an odd number of segments, document paths an even one.
"""

from __future__ import annotations

import threading
import uuid
from copy import deepcopy
from typing import Any, Dict, Optional, Protocol, Sequence

from firebase_admin import firestore
from google.api_core import exceptions
from google.cloud.firestore_v1.base_query import FieldFilter

# (field, operator, value); only equality filters are used by the stores.
Filter = tuple[str, str, Any]


class DocumentStore(Protocol):
    """Interface for the document operations the stores need."""

    def get(self, path: str) -> Optional[dict]:
        ...

    def add(self, collection_path: str, data: dict) -> str:
        ...

    def set(self, path: str, data: dict, merge: bool = False) -> None:
        ...

    def update(self, path: str, data: dict) -> None:
        ...

    def delete(self, path: str) -> None:
        ...

    def query(
        self,
        collection_path: str,
        filters: Sequence[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[tuple[str, dict]]:
        ...

    def set_exclusive_flag(
        self,
        collection_path: str,
        doc_id: str,
        field: str,
        extra: dict | None = None,
    ) -> None:
        """
        Atomically sets `field` to True on one document and to False on every
        other document in the collection where it is currently True. `extra`
        fields are written to every touched document.
        """
        ...


def _split_document_path(path: str) -> tuple[str, str]:
    collection_path, _, doc_id = path.rpartition("/")
    if not collection_path or not doc_id:
        raise ValueError(f"Not a document path: {path}")
    return collection_path, doc_id


class InMemoryDocumentStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, dict]] = {}
        self._lock = threading.RLock()

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self.collections.clear()

    def get(self, path: str) -> Optional[dict]:
        collection_path, doc_id = _split_document_path(path)
        with self._lock:
            data = self.collections.get(collection_path, {}).get(doc_id)
            return deepcopy(data) if data is not None else None

    def add(self, collection_path: str, data: dict) -> str:
        doc_id = uuid.uuid4().hex
        with self._lock:
            self.collections.setdefault(collection_path, {})[doc_id] = deepcopy(data)
        return doc_id

    def set(self, path: str, data: dict, merge: bool = False) -> None:
        collection_path, doc_id = _split_document_path(path)
        with self._lock:
            docs = self.collections.setdefault(collection_path, {})
            if merge and doc_id in docs:
                docs[doc_id].update(deepcopy(data))
            else:
                docs[doc_id] = deepcopy(data)

    def update(self, path: str, data: dict) -> None:
        collection_path, doc_id = _split_document_path(path)
        with self._lock:
            doc = self.collections.get(collection_path, {}).get(doc_id)
            if doc is None:
                raise exceptions.NotFound(f"No document to update: {path}")
            doc.update(deepcopy(data))

    def delete(self, path: str) -> None:
        collection_path, doc_id = _split_document_path(path)
        with self._lock:
            self.collections.get(collection_path, {}).pop(doc_id, None)

    def query(
        self,
        collection_path: str,
        filters: Sequence[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[tuple[str, dict]]:
        with self._lock:
            docs = list(self.collections.get(collection_path, {}).items())

        for field, op, value in filters:
            if op != "==":
                raise ValueError(f"Unsupported filter operator: {op}")
            docs = [(doc_id, doc) for doc_id, doc in docs if doc.get(field) == value]

        if order_by:
            # Firestore omits documents that lack the ordering field.
            docs = [(doc_id, doc) for doc_id, doc in docs if doc.get(order_by) is not None]
            docs.sort(key=lambda item: item[1][order_by], reverse=descending)

        if limit is not None:
            docs = docs[:limit]
        return [(doc_id, deepcopy(doc)) for doc_id, doc in docs]

    def set_exclusive_flag(
        self,
        collection_path: str,
        doc_id: str,
        field: str,
        extra: dict | None = None,
    ) -> None:
        extra = extra or {}
        with self._lock:
            docs = self.collections.get(collection_path, {})
            if doc_id not in docs:
                raise exceptions.NotFound(
                    f"No document to update: {collection_path}/{doc_id}"
                )
            for other_id, doc in docs.items():
                if other_id != doc_id and doc.get(field) is True:
                    doc.update({field: False, **deepcopy(extra)})
            docs[doc_id].update({field: True, **deepcopy(extra)})


class FirestoreDocumentStore:
    """
    Firestore-backed implementation using the firebase_admin client.
    """

    def __init__(self, client=None):
        self.client = client or firestore.client()

    def get(self, path: str) -> Optional[dict]:
        snapshot = self.client.document(path).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    def add(self, collection_path: str, data: dict) -> str:
        _, doc_ref = self.client.collection(collection_path).add(data)
        return doc_ref.id

    def set(self, path: str, data: dict, merge: bool = False) -> None:
        self.client.document(path).set(data, merge=merge)

    def update(self, path: str, data: dict) -> None:
        self.client.document(path).update(data)

    def delete(self, path: str) -> None:
        self.client.document(path).delete()

    def _build_query(
        self,
        collection_path: str,
        filters: Sequence[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ):
        query = self.client.collection(collection_path)
        for field, op, value in filters:
            query = query.where(filter=FieldFilter(field, op, value))
        if order_by:
            direction = (
                firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            )
            query = query.order_by(order_by, direction=direction)
        if limit is not None:
            query = query.limit(limit)
        return query

    def query(
        self,
        collection_path: str,
        filters: Sequence[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[tuple[str, dict]]:
        query = self._build_query(collection_path, filters, order_by, descending, limit)
        return [(snapshot.id, snapshot.to_dict()) for snapshot in query.stream()]

    def set_exclusive_flag(
        self,
        collection_path: str,
        doc_id: str,
        field: str,
        extra: dict | None = None,
    ) -> None:
        extra = extra or {}
        collection = self.client.collection(collection_path)
        target_ref = collection.document(doc_id)
        flagged_query = collection.where(filter=FieldFilter(field, "==", True))
        transaction = self.client.transaction()

        @firestore.transactional
        def _swap_flag_transaction(transaction, target_ref):
            # All reads must happen before the first write in a transaction.
            target = target_ref.get(transaction=transaction)
            if not target.exists:
                raise exceptions.NotFound(
                    f"No document to update: {collection_path}/{doc_id}"
                )
            flagged = list(flagged_query.stream(transaction=transaction))

            for snapshot in flagged:
                if snapshot.id != doc_id:
                    transaction.update(snapshot.reference, {field: False, **extra})
            transaction.update(target_ref, {field: True, **extra})

        _swap_flag_transaction(transaction, target_ref)
