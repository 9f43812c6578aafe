# ==============================================
# Tests for ReportPipeline
# ==============================================

import pytest

from profile_shapes.analysis.decision import AnalyzableMode
from profile_shapes.errors import ProfileStreamError
from profile_shapes.pipeline import ReportPipeline


class TestReportPipeline:
    def test_run_report(self, app_config, fake_client, sample_records):
        client = fake_client(sample_records)
        with ReportPipeline(app_config, client=client) as pipeline:
            result = pipeline.run_report()
        assert [cohort.average_score for cohort in result.cohorts] == [-5000, -30]
        assert result.records_seen == 8

    def test_filters_passed_to_source(self, app_config, fake_client):
        client = fake_client([])
        ReportPipeline(app_config, client=client).run_report()
        assert client.stream_calls == [{
            "timespan_seconds": 3600,
            "excluded_namespace": "shop.system.profile",
            "excluded_ops": ["getmore"],
        }]

    def test_connects_lazily_once(self, app_config, fake_client):
        client = fake_client([])
        pipeline = ReportPipeline(app_config, client=client)
        assert client.connect_calls == 0
        pipeline.run_report()
        pipeline.run_report()
        assert client.connect_calls == 1

    def test_close_disconnects(self, app_config, fake_client):
        client = fake_client([])
        with ReportPipeline(app_config, client=client) as pipeline:
            pipeline.get_status()
            assert client.connected
        assert not client.connected

    def test_stream_failure(self, app_config, fake_client, sample_records):
        pipeline = ReportPipeline(app_config, client=fake_client(sample_records, fail_after=3))
        with pytest.raises(ProfileStreamError, match="cursor killed"):
            pipeline.run_report()

    def test_report_options_from_config(self, app_config, fake_client, sample_records):
        app_config.report.problems_only = False
        app_config.report.limit = 1
        result = ReportPipeline(app_config, client=fake_client(sample_records)).run_report()
        assert len(result.cohorts) == 1
        assert len(result.all_cohorts) == 3

    def test_scan(self, app_config, fake_client, profile_record):
        records = [
            profile_record(query_filter={"a": 1}, returned=2, examined=9),
            profile_record(query_filter={"a": 1}, returned=2, examined=2),
        ]
        pipeline = ReportPipeline(app_config, client=fake_client(records))
        assert len(list(pipeline.scan())) == 1
        assert len(list(pipeline.scan(AnalyzableMode.EXACT_MATCH))) == 1

    def test_status(self, app_config, fake_client):
        status = ReportPipeline(app_config, client=fake_client(level={"was": 2, "slowms": 50})).get_status()
        assert status["database"] == "shop"
        assert status["profiling_level"] == 2
        assert status["slowms"] == 50
        assert status["excluded_ops"] == ["getmore"]
