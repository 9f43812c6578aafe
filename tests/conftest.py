# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# Shared fixtures for all tests. No live MongoDB is needed:
# the profiler source is replaced with FakeProfileClient.
#
# FIXTURES:
# ---------
# - profile_record  → factory for system.profile documents
# - make_request    → factory for NormalizedRequest values
# - sample_records  → a small mixed profiler window
# - app_config      → AppConfig pointed at database "shop"
# - fake_client     → factory for FakeProfileClient
#
# ==============================================

from datetime import datetime, timedelta

import pytest

from profile_shapes.config import AppConfig, MongoConfig, ProfileConfig, ReportConfig, reset_config
from profile_shapes.normalization.raw_record import OperationKind
from profile_shapes.normalization.record_normalizer import NormalizedRequest

BASE_TS = datetime(2024, 3, 1, 12, 0, 0)


def _plan(*stages):
    """Build an execStats chain from the root stage inwards."""
    root = None
    for stage in reversed(stages):
        node = {"stage": stage}
        if root is not None:
            node["inputStage"] = root
        root = node
    return root


class FakeProfileClient:
    """Stands in for ProfileClient; replays a fixed list of documents."""

    PROFILE_COLLECTION = "system.profile"

    def __init__(self, records=None, fail_after=None, level=None):
        self.records = list(records or [])
        self.fail_after = fail_after
        self.level = level or {"was": 1, "slowms": 100, "ok": 1.0}
        self.connected = False
        self.connect_calls = 0
        self.stream_calls = []

    def connect(self):
        self.connect_calls += 1
        self.connected = True

    def disconnect(self):
        self.connected = False

    def stream_profile(self, timespan_seconds=None, excluded_namespace=None, excluded_ops=None, now=None):
        self.stream_calls.append({
            "timespan_seconds": timespan_seconds,
            "excluded_namespace": excluded_namespace,
            "excluded_ops": list(excluded_ops or []),
        })
        return self._generate()

    def _generate(self):
        for index, record in enumerate(self.records):
            if self.fail_after is not None and index >= self.fail_after:
                raise ConnectionError("cursor killed")
            yield record

    def profiling_level(self):
        return dict(self.level)


@pytest.fixture(autouse=True)
def _fresh_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def profile_record():
    """Factory for system.profile documents with sensible defaults."""

    def make(
        op="query",
        collection="users",
        query_filter=None,
        sort=None,
        returned=1,
        examined=10,
        minutes=0,
        plan=("FETCH", "IXSCAN"),
        database="shop",
        **extra
    ):
        record = {
            "op": op,
            "ns": f"{database}.{collection}",
            "nreturned": returned,
            "docsExamined": examined,
            "ts": BASE_TS + timedelta(minutes=minutes),
        }
        if plan:
            record["execStats"] = _plan(*plan)
        if op == "query":
            query = {"find": collection}
            if query_filter is not None:
                query["filter"] = query_filter
            if sort is not None:
                query["sort"] = sort
            record["query"] = query
        record.update(extra)
        return record

    return make


@pytest.fixture
def make_request():
    """Factory for NormalizedRequest values with a given score."""

    def make(returned=0, examined=0, scan=False, ts=None, collection="users",
             filter_fields=("name",), kind=OperationKind.QUERY):
        return NormalizedRequest(
            operation_kind=kind,
            op=kind.value,
            namespace=f"shop.{collection}",
            collection=collection,
            returned=returned,
            examined=examined,
            selectivity_score=returned - examined,
            filter_fields=tuple(filter_fields),
            sort_fields=(),
            contains_collection_scan=scan,
            timestamp=ts,
        )

    return make


@pytest.fixture
def sample_records(profile_record):
    """A profiler window with two problem shapes, one good shape and noise."""
    return [
        # users by email: full scans, badly unselective
        profile_record(query_filter={"email": "a@example.com"}, returned=1, examined=5000,
                       plan=("COLLSCAN",), minutes=0),
        profile_record(query_filter={"email": "b@example.com"}, returned=1, examined=5002,
                       plan=("COLLSCAN",), minutes=5),
        # orders by status sorted by date: somewhat unselective
        profile_record(collection="orders", query_filter={"status": "new"}, sort={"created": -1},
                       returned=10, examined=40, minutes=1),
        # users by _id: perfectly selective
        profile_record(query_filter={"_id": 7}, returned=1, examined=1, minutes=2),
        # noise the classifier must ignore
        profile_record(op="insert", examined=0, returned=0, plan=None),
        profile_record(op="getmore", examined=100, returned=100, plan=None),
        profile_record(query_filter={}, returned=50, examined=50, minutes=3),
        profile_record(op="command", collection="orders", plan=None,
                       command={"count": "orders", "query": {"status": "new"}}),
    ]


@pytest.fixture
def app_config():
    return AppConfig(
        mongo=MongoConfig(database="shop"),
        profile=ProfileConfig(timespan_seconds=3600, excluded_namespace="shop.system.profile"),
        report=ReportConfig(problems_only=True, limit=0),
    )


@pytest.fixture
def fake_client():
    return FakeProfileClient
