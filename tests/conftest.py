"""Shared fixtures: an in-memory stand-in for the Motor database."""
import asyncio
import re
from types import SimpleNamespace

import pytest
from bson.objectid import ObjectId

import database


def _lookup(document, dotted):
    values = [document]
    for part in dotted.split("."):
        next_values = []
        for value in values:
            if isinstance(value, list):
                next_values.extend(v.get(part) for v in value if isinstance(v, dict))
            elif isinstance(value, dict):
                next_values.append(value.get(part))
        values = next_values
    flat = []
    for value in values:
        if isinstance(value, list):
            flat.extend(value)
        else:
            flat.append(value)
    return flat


def _matches_condition(values, condition):
    if isinstance(condition, dict) and any(k.startswith("$") for k in condition):
        for op, arg in condition.items():
            if op == "$regex":
                flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
                if not any(isinstance(v, str) and re.search(arg, v, flags) for v in values):
                    return False
            elif op == "$options":
                continue
            elif op == "$ne":
                if any(v == arg for v in values):
                    return False
            elif op == "$in":
                if not any(v in arg for v in values):
                    return False
            elif op == "$gte":
                if not any(v is not None and v >= arg for v in values):
                    return False
            elif op == "$lte":
                if not any(v is not None and v <= arg for v in values):
                    return False
            else:
                raise NotImplementedError(op)
        return True
    return any(v == condition for v in values)


def matches(document, query):
    for key, condition in query.items():
        if key == "$or":
            if not any(matches(document, sub) for sub in condition):
                return False
        elif not _matches_condition(_lookup(document, key), condition):
            return False
    return True


class FakeCursor:
    def __init__(self, documents):
        self._documents = documents
        self._skip = 0
        self._limit = 0

    def sort(self, key_or_list, direction=1):
        fields = key_or_list if isinstance(key_or_list, list) else [(key_or_list, direction)]
        for key, order in reversed(fields):
            self._documents.sort(key=lambda d: (d.get(key) is None, str(d.get(key))), reverse=order == -1)
        return self

    def skip(self, count):
        self._skip = count
        return self

    def limit(self, count):
        self._limit = count
        return self

    async def to_list(self, length=None):
        await asyncio.sleep(0)
        docs = self._documents[self._skip:]
        if self._limit:
            docs = docs[:self._limit]
        return [dict(d) for d in docs]


def _positional_index(document, query, array_field):
    # Index of the first array element matched by an equality condition in the query
    prefix = array_field + "."
    for key, condition in query.items():
        if key.startswith(prefix) and not isinstance(condition, dict):
            sub = key[len(prefix):]
            for index, element in enumerate(document.get(array_field, [])):
                if isinstance(element, dict) and element.get(sub) == condition:
                    return index
    raise ValueError(f"positional operator did not find a match for {array_field}")


def _apply_update(document, query, update):
    for key, value in update.get("$set", {}).items():
        if key.endswith(".$"):
            array_field = key[:-2]
            document[array_field][_positional_index(document, query, array_field)] = value
        else:
            document[key] = value
    for key, value in update.get("$push", {}).items():
        target = document.setdefault(key, [])
        if isinstance(value, dict) and "$each" in value:
            target.extend(value["$each"])
            for sort_key, order in value.get("$sort", {}).items():
                target.sort(key=lambda d: d.get(sort_key), reverse=order == -1)
        else:
            target.append(value)


class FakeCollection:
    """Each call yields to the event loop once, like a round trip to the server."""

    def __init__(self):
        self.documents = []

    async def find_one(self, query):
        await asyncio.sleep(0)
        for document in self.documents:
            if matches(document, query):
                return dict(document)
        return None

    def find(self, query=None):
        return FakeCursor([d for d in self.documents if matches(d, query or {})])

    async def count_documents(self, query):
        await asyncio.sleep(0)
        return sum(1 for d in self.documents if matches(d, query))

    def _insert(self, document):
        document = dict(document)
        document.setdefault("_id", ObjectId())
        self.documents.append(document)
        return document["_id"]

    async def insert_one(self, document):
        await asyncio.sleep(0)
        return SimpleNamespace(inserted_id=self._insert(document))

    async def update_one(self, query, update, upsert=False):
        await asyncio.sleep(0)
        for document in self.documents:
            if matches(document, query):
                _apply_update(document, query, update)
                return SimpleNamespace(matched_count=1, modified_count=1, upserted_id=None)
        if not upsert:
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)
        document = {k: v for k, v in query.items() if not k.startswith("$") and not isinstance(v, dict)}
        document.update(update.get("$setOnInsert", {}))
        _apply_update(document, {}, update)
        return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=self._insert(document))

    async def delete_one(self, query):
        await asyncio.sleep(0)
        for index, document in enumerate(self.documents):
            if matches(document, query):
                del self.documents[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def delete_many(self, query):
        await asyncio.sleep(0)
        kept = [d for d in self.documents if not matches(d, query)]
        deleted = len(self.documents) - len(kept)
        self.documents[:] = kept
        return SimpleNamespace(deleted_count=deleted)


class FakeDatabase(dict):
    def __missing__(self, name):
        collection = self[name] = FakeCollection()
        return collection


@pytest.fixture
def fake_db(monkeypatch):
    fake = FakeDatabase()
    monkeypatch.setattr(database, "db", fake)
    return fake


@pytest.fixture
def employee_doc():
    return {
        "_id": ObjectId(),
        "employee_number": "EMP001",
        "full_name": "Nimal Perera",
        "designation": "Development Officer",
        "ministry": "Agriculture",
        "gender": "Male",
        "mobile_number": "071 234 5678",
        "email_address": "nimal@example.com",
        "nic_number": "199012345678",
        "date_of_birth": "05-05-1990",
        "age": 35,
        "salary_code": "M1",
        "central_provincial": "Central",
        "service_confirmed": True,
    }


@pytest.fixture
def employee_payload():
    return {
        "employee_number": "EMP100",
        "full_name": "Kamala Silva",
        "designation": "District Officer",
        "ministry": "Health",
        "gender": "Female",
        "mobile_number": "077 123 4567",
        "email_address": "kamala@example.com",
        "nic_number": "198565512345",
        "date_of_birth": "15-02-1985",
        "salary_code": "A1",
    }
