"""
==============================================
Report Pipeline
==============================================

Wires configuration, the MongoDB profiler source and the ShapeReport
run together. The CLI is a thin layer over this class.

USAGE EXAMPLES:

1. Ranked report for the configured database:
    from profile_shapes.pipeline import ReportPipeline

    with ReportPipeline() as pipeline:
        result = pipeline.run_report()
        for cohort in result.cohorts:
            print(cohort.shape_key, cohort.average_score)

2. Every over-examining record, one by one:
    with ReportPipeline() as pipeline:
        for entry in pipeline.scan():
            print(entry)

3. Check that the profiler is switched on:
    with ReportPipeline() as pipeline:
        print(pipeline.get_status())
"""

from typing import Any, Dict, Iterator, Optional

from profile_shapes.analysis.decision import AnalyzableMode
from profile_shapes.config import AppConfig, get_config
from profile_shapes.report.listing import list_inefficient
from profile_shapes.shape_report import ReportResult, ShapeReport
from profile_shapes.storage.mongo_client import ProfileClient


class ReportPipeline:
    """
    High-level wrapper around ProfileClient + ShapeReport.
    Connects lazily on first use; close() or the context manager
    releases the connection.
    """

    def __init__(self, config: Optional[AppConfig] = None, client: Optional[ProfileClient] = None):
        """
        Args:
            config: Optional configuration. If None, loads from environment.
            client: Optional ProfileClient (tests inject a fake one).
        """
        self._config = config or get_config()
        self._client = client or ProfileClient(
            host=self._config.mongo.host,
            port=self._config.mongo.port,
            database=self._config.mongo.database,
            user=self._config.mongo.user,
            password=self._config.mongo.password,
            uri=self._config.mongo.uri
        )
        self._connected = False

    @property
    def config(self) -> AppConfig:
        return self._config

    def run_report(self) -> ReportResult:
        """
        Stream the profiler window and build the ranked report.

        Returns:
            ReportResult with ranked cohorts and run counters

        Raises:
            ProfileStreamError: the stream broke; no report is produced
        """
        report = ShapeReport(
            database=self._config.mongo.database,
            problems_only=self._config.report.problems_only,
            limit=self._config.report.limit
        )
        print(f"🔎 Reading {self._config.mongo.database}.{ProfileClient.PROFILE_COLLECTION} "
              f"({self._describe_window()})")
        result = report.run(self._records())
        print(f"✓ {result.records_seen} records read, {result.eligible_records} grouped into "
              f"{len(result.all_cohorts)} shapes, {result.records_ignored} ignored, "
              f"{result.anomalies} anomalies ({result.elapsed_seconds}s)")
        return result

    def scan(self, mode: AnalyzableMode = AnalyzableMode.OVER_EXAMINED) -> Iterator[str]:
        """Yield one formatted entry per record flagged by the analyzable check."""
        return list_inefficient(self._records(), self._config.mongo.database, mode)

    def get_status(self) -> Dict[str, Any]:
        self._ensure_connected()
        level = self._client.profiling_level()
        return {
            "database": self._config.mongo.database,
            "profiling_level": level.get("was"),
            "slowms": level.get("slowms"),
            "timespan_seconds": self._config.profile.timespan_seconds,
            "excluded_namespace": self._config.profile.excluded_namespace,
            "excluded_ops": list(self._config.profile.excluded_ops),
        }

    def _records(self) -> Iterator[Dict[str, Any]]:
        self._ensure_connected()
        profile = self._config.profile
        return self._client.stream_profile(
            timespan_seconds=profile.timespan_seconds,
            excluded_namespace=profile.excluded_namespace,
            excluded_ops=profile.excluded_ops
        )

    def _ensure_connected(self) -> None:
        if not self._connected:
            self._client.connect()
            self._connected = True

    def _describe_window(self) -> str:
        seconds = self._config.profile.timespan_seconds
        return f"last {seconds}s" if seconds else "entire profile"

    def close(self) -> None:
        if self._connected:
            self._client.disconnect()
            self._connected = False

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False
