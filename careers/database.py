"""MongoDB connection management for the careers stores.

Every store in the app (drafts, applications, contact messages, newsletter
subscribers) is optional: with ``ENABLE_MONGODB`` unset the services fall
back to memory or report the write as disabled.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

_LOGGER = logging.getLogger(__name__)

_client: Optional[MongoClient] = None
_database: Optional[Database] = None

DEFAULT_DATABASE_NAME = "corecrew_careers"
SERVER_SELECTION_TIMEOUT_MS = 10_000


def mongo_enabled() -> bool:
    return os.getenv("ENABLE_MONGODB", "false").lower() == "true"


def get_mongo_client() -> MongoClient:
    """Get or create the shared client; requests fail fast when the server is gone."""
    global _client
    if _client is None:
        mongo_uri = os.getenv("MONGODB_URI", "mongodb://localhost:27017/")
        _client = MongoClient(mongo_uri, serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS)
    return _client


def get_database() -> Database:
    global _database
    if _database is None:
        _database = get_mongo_client()[os.getenv("MONGODB_DATABASE", DEFAULT_DATABASE_NAME)]
    return _database


def get_collection(name: str) -> Optional[Collection]:
    """Return a collection, or None when MongoDB is disabled or misconfigured."""
    if not mongo_enabled():
        return None

    try:
        return get_database()[name]
    except PyMongoError:
        _LOGGER.warning("MongoDB collection %s unavailable", name, exc_info=True)
        return None


def close_mongo_connection() -> None:
    global _client, _database
    if _client is not None:
        _client.close()
        _client = None
        _database = None
