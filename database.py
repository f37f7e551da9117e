"""
Database Helper Functions

MongoDB connection lifecycle plus thin CRUD helpers over named collections.
Documents arrive here already validated; nothing in this module checks shape.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING, MongoClient

from config import Settings

logger = logging.getLogger(__name__)

_client = None
db = None


def connect(settings: Settings) -> bool:
    global _client, db
    if not (settings.database_url and settings.database_name):
        logger.warning("DATABASE_URL or DATABASE_NAME not set; running without a database")
        return False
    _client = MongoClient(settings.database_url)
    db = _client[settings.database_name]
    logger.info("Connected to MongoDB database %r", settings.database_name)
    return True


def close() -> None:
    global _client, db
    if _client is not None:
        _client.close()
        logger.info("MongoDB connection closed")
    _client = None
    db = None


def ensure_indexes() -> None:
    _ensure_db()
    db["user"].create_index("email", unique=True)
    db["menuitem"].create_index("category")
    db["menuitem"].create_index("available")
    db["order"].create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
    db["order"].create_index("status")


def _ensure_db():
    if db is None:
        raise RuntimeError("Database not available. Check DATABASE_URL and DATABASE_NAME environment variables.")


def _to_dict(data: Union[BaseModel, dict]) -> dict:
    if isinstance(data, BaseModel):
        return data.model_dump()
    return dict(data)


def to_object_id(_id: str) -> ObjectId:
    """Parse a hex id string; raises bson.errors.InvalidId when malformed."""
    if not isinstance(_id, str):
        raise InvalidId(f"{_id!r} is not a valid ObjectId")
    return ObjectId(_id)


def is_object_id(_id: Any) -> bool:
    return isinstance(_id, str) and ObjectId.is_valid(_id)


# CRUD helpers

def create_document(collection_name: str, data: Union[BaseModel, dict]) -> str:
    _ensure_db()
    payload = _to_dict(data)
    now = datetime.now(timezone.utc)
    payload['created_at'] = now
    payload['updated_at'] = now
    result = db[collection_name].insert_one(payload)
    return str(result.inserted_id)


def insert_documents(collection_name: str, items: Iterable[Union[BaseModel, dict]]) -> List[str]:
    _ensure_db()
    now = datetime.now(timezone.utc)
    payloads = []
    for item in items:
        payload = _to_dict(item)
        payload['created_at'] = now
        payload['updated_at'] = now
        payloads.append(payload)
    if not payloads:
        return []
    result = db[collection_name].insert_many(payloads)
    return [str(i) for i in result.inserted_ids]


def get_documents(collection_name: str, filter_dict: Optional[dict] = None, limit: Optional[int] = None, sort: Optional[list] = None) -> List[dict]:
    _ensure_db()
    cursor = db[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(int(limit))
    return [serialize_doc(doc) for doc in cursor]


def get_document(collection_name: str, filter_dict: dict) -> Optional[dict]:
    _ensure_db()
    return serialize_doc(db[collection_name].find_one(filter_dict))


def get_document_by_id(collection_name: str, _id: str) -> Optional[dict]:
    _ensure_db()
    doc = db[collection_name].find_one({"_id": to_object_id(_id)})
    return serialize_doc(doc)


def get_documents_by_ids(collection_name: str, ids: Iterable[str]) -> List[dict]:
    _ensure_db()
    object_ids = [to_object_id(i) for i in ids]
    return [serialize_doc(doc) for doc in db[collection_name].find({"_id": {"$in": object_ids}})]


def update_document(collection_name: str, _id: str, update_data: Union[BaseModel, Dict[str, Any]]) -> Optional[dict]:
    """Apply a $set and return the updated document, or None when nothing matched."""
    _ensure_db()
    update = {"$set": _to_dict(update_data)}
    update["$set"]["updated_at"] = datetime.now(timezone.utc)
    oid = to_object_id(_id)
    result = db[collection_name].update_one({"_id": oid}, update)
    if result.matched_count == 0:
        return None
    return serialize_doc(db[collection_name].find_one({"_id": oid}))


def delete_document(collection_name: str, _id: str) -> bool:
    _ensure_db()
    result = db[collection_name].delete_one({"_id": to_object_id(_id)})
    return result.deleted_count > 0


def count_documents(collection_name: str, filter_dict: Optional[dict] = None) -> int:
    _ensure_db()
    return db[collection_name].count_documents(filter_dict or {})


def distinct_values(collection_name: str, key: str, filter_dict: Optional[dict] = None) -> List[Any]:
    _ensure_db()
    return sorted(db[collection_name].distinct(key, filter_dict or {}))


# Utility

def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    if not doc:
        return None
    d = dict(doc)
    if "_id" in d:
        d["_id"] = str(d["_id"])  # convert ObjectId to string
    return d
