from __future__ import annotations

import copy
import sys
import uuid
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))


class FakeSnapshot:
    def __init__(self, doc_id: str, data: dict | None) -> None:
        self.id = doc_id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> dict | None:
        return copy.deepcopy(self._data)


class FakeDocument:
    def __init__(self, docs: dict, doc_id: str) -> None:
        self._docs = docs
        self.id = doc_id

    def get(self) -> FakeSnapshot:
        return FakeSnapshot(self.id, self._docs.get(self.id))

    def set(self, data: dict) -> None:
        self._docs[self.id] = copy.deepcopy(data)

    def delete(self) -> None:
        self._docs.pop(self.id, None)


class FakeQuery:
    """Supports the subset of the Firestore query API used by the storage."""

    def __init__(self, client: "FakeFirestoreClient", docs: dict, filters: tuple = ()) -> None:
        self._client = client
        self._docs = docs
        self.filters = filters

    def where(self, *, filter) -> "FakeQuery":
        self._client.applied_filters.append((filter.field_path, filter.op_string, filter.value))
        return FakeQuery(self._client, self._docs, self.filters + (filter,))

    def stream(self):
        for doc_id, data in list(self._docs.items()):
            if all(self._passes(f, data) for f in self.filters):
                yield FakeSnapshot(doc_id, copy.deepcopy(data))

    @staticmethod
    def _passes(field_filter, data: dict) -> bool:
        assert field_filter.op_string == "==", field_filter.op_string
        return data.get(field_filter.field_path) == field_filter.value


class FakeCollection(FakeQuery):
    def document(self, doc_id: str | None = None) -> FakeDocument:
        return FakeDocument(self._docs, doc_id or uuid.uuid4().hex)


class FakeFirestoreClient:
    """In-process stand-in for :class:`google.cloud.firestore.Client`."""

    def __init__(self) -> None:
        self.collections: dict[str, dict] = {}
        self.applied_filters: list[tuple] = []

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self, self.collections.setdefault(name, {}))


@pytest.fixture
def firestore_client() -> FakeFirestoreClient:
    return FakeFirestoreClient()
