# ==============================================
# ProfileClient
# ==============================================
#
# PURPOSE:
#   Manages the MongoDB connection and streams the database
#   profiler collection (system.profile) into the report run.
#
# CLASS: ProfileClient
# --------------------
#   Stateful: holds the connection to MongoDB.
#
#   Constructor:
#   ------------
#   - __init__(host, port, database, user=None, password=None, uri=None)
#
#   Methods:
#   --------
#   - connect() -> None
#       Establish connection and ping the server.
#
#   - disconnect() -> None
#       Close connection.
#
#   - build_filter(timespan_seconds, excluded_namespace, excluded_ops, now) -> dict
#       The upstream pre-filter: skip our own namespace, skip getmore,
#       only records newer than now - timespan.
#
#   - stream_profile(...) -> Iterator[dict]
#       Lazily yield profiler documents, oldest first. Driver errors
#       while iterating become ProfileStreamError.
#
#   - profiling_level() -> dict
#       {"was": <level>, "slowms": <ms>, ...} from the profile command.
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with ProfileClient(...) as client:` usage.
#
# ==============================================

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Iterator, Optional
from urllib.parse import quote_plus

import pymongo
from pymongo import MongoClient as PyMongoClient
from pymongo.errors import ConnectionFailure, OperationFailure, PyMongoError

from profile_shapes.errors import ProfileStreamError


class ProfileClient:
    PROFILE_COLLECTION = "system.profile"

    def __init__(self, host, port, database, user=None, password=None, uri=None):
        # Store connection params. Don't connect yet.
        self.host = host
        self.port = port
        self.database = database
        self.user = user
        self.password = password
        self.uri = uri
        self.client = None  # Will hold the actual MongoDB client connection

    def connection_uri(self) -> str:
        if self.uri:
            return self.uri
        if self.user and self.password:
            credentials = f"{quote_plus(self.user)}:{quote_plus(self.password)}@"
        else:
            credentials = ""
        return f"mongodb://{credentials}{self.host}:{self.port}/{self.database}"

    def connect(self):
        # Establish connection to MongoDB.
        try:
            self.client = PyMongoClient(self.connection_uri())
            # Test connection
            self.client.admin.command('ping')
            print("✓ Connected to MongoDB successfully.")
        except ConnectionFailure as e:
            print(f"✗ Could not connect to MongoDB: {e}")
            raise
        except OperationFailure as e:
            print(f"✗ Authentication failed: {e}")
            raise

    def disconnect(self):
        # Close connection.
        if self.client:
            self.client.close()
            print("✓ Disconnected from MongoDB.")
            self.client = None

    @staticmethod
    def build_filter(
        timespan_seconds: Optional[int] = None,
        excluded_namespace: Optional[str] = None,
        excluded_ops: Optional[Iterable[str]] = None,
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Build the system.profile query used to pre-filter records.

        Args:
            timespan_seconds: Only records newer than now - timespan (None/0 = no bound)
            excluded_namespace: Namespace to skip, usually the profiler's own
            excluded_ops: Operation kinds to skip, usually ["getmore"]
            now: Reference time, defaults to the current UTC time

        Returns:
            A MongoDB filter document
        """
        query: Dict[str, Any] = {}
        if excluded_namespace:
            query["ns"] = {"$ne": excluded_namespace}
        ops = list(excluded_ops or [])
        if ops:
            query["op"] = {"$nin": ops}
        if timespan_seconds:
            now = now or datetime.now(timezone.utc)
            query["ts"] = {"$gte": now - timedelta(seconds=timespan_seconds)}
        return query

    def stream_profile(
        self,
        timespan_seconds: Optional[int] = None,
        excluded_namespace: Optional[str] = None,
        excluded_ops: Optional[Iterable[str]] = None,
        now: Optional[datetime] = None
    ) -> Iterator[Dict[str, Any]]:
        """
        Yield profiler documents one at a time, oldest first.

        Nothing is read ahead of the consumer beyond the driver's own
        cursor batch.

        Raises:
            ProfileStreamError: if the driver fails mid-stream
        """
        if not self.client:
            raise RuntimeError("Not connected to MongoDB.")
        collection = self.client[self.database][self.PROFILE_COLLECTION]
        query = self.build_filter(timespan_seconds, excluded_namespace, excluded_ops, now)

        try:
            cursor = collection.find(query).sort("ts", pymongo.ASCENDING)
            for document in cursor:
                yield document
        except PyMongoError as e:
            raise ProfileStreamError(
                f"Reading {self.database}.{self.PROFILE_COLLECTION} failed: {e}"
            ) from e

    def profiling_level(self) -> Dict[str, Any]:
        # Level -1 reads the current settings without changing them.
        if not self.client:
            raise RuntimeError("Not connected to MongoDB.")
        return self.client[self.database].command("profile", -1)

    def __enter__(self):
        # For `with ProfileClient(...) as client:` usage.
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
