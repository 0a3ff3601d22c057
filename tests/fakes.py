"""In-memory stand-in for the parts of the Firestore client the shop uses."""

import copy
import uuid

from google.api_core import exceptions as google_exceptions


class FakeSnapshot:
    def __init__(self, reference, data):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None

    def get(self, field):
        return (self._data or {}).get(field)


class FakeDocumentRef:
    def __init__(self, collection, doc_id):
        self._collection = collection
        self.id = doc_id

    @property
    def _store(self):
        return self._collection._docs

    def get(self):
        return FakeSnapshot(self, copy.deepcopy(self._store.get(self.id)))

    def set(self, data, merge=False):
        if merge and self.id in self._store:
            self._store[self.id].update(copy.deepcopy(data))
        else:
            self._store[self.id] = copy.deepcopy(data)

    def update(self, data):
        if self.id not in self._store:
            raise google_exceptions.NotFound(f"No document to update: {self.id}")
        self._store[self.id].update(copy.deepcopy(data))

    def delete(self):
        self._store.pop(self.id, None)


class FakeQuery:
    OPS = {
        "==": lambda a, b: a == b,
        "!=": lambda a, b: a != b,
        "<": lambda a, b: a is not None and a < b,
        "<=": lambda a, b: a is not None and a <= b,
        ">": lambda a, b: a is not None and a > b,
        ">=": lambda a, b: a is not None and a >= b,
    }

    def __init__(self, collection, filters=None, limit=None):
        self._collection = collection
        self._filters = filters or []
        self._limit = limit

    def where(self, field, op, value):
        return FakeQuery(self._collection, self._filters + [(field, op, value)], self._limit)

    def limit(self, count):
        return FakeQuery(self._collection, self._filters, count)

    def stream(self):
        results = []
        for doc_id, data in list(self._collection._docs.items()):
            if all(self.OPS[op](data.get(field), value) for field, op, value in self._filters):
                results.append(FakeSnapshot(self._collection.document(doc_id), copy.deepcopy(data)))
        if self._limit is not None:
            results = results[: self._limit]
        return iter(results)

    def get(self):
        return list(self.stream())


class FakeCollection(FakeQuery):
    def __init__(self, name):
        self.id = name
        self._docs = {}
        super().__init__(self)

    def document(self, doc_id=None):
        return FakeDocumentRef(self, doc_id or uuid.uuid4().hex[:20])


class FakeBatch:
    def __init__(self, db):
        self._db = db
        self._ops = []

    def set(self, ref, data, merge=False):
        self._ops.append((ref, data, merge))

    def commit(self):
        self._db.commit_sizes.append(len(self._ops))
        for ref, data, merge in self._ops:
            ref.set(data, merge=merge)
        self._ops = []


class FakeFirestore:
    def __init__(self):
        self._collections = {}
        self.commit_sizes = []

    def collection(self, name):
        if name not in self._collections:
            self._collections[name] = FakeCollection(name)
        return self._collections[name]

    def batch(self):
        return FakeBatch(self)

    # test helper: raw documents of a collection
    def docs(self, name):
        return self.collection(name)._docs
