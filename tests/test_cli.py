# ==============================================
# Tests for the command line entry point
# ==============================================

import json

import pytest

from profile_shapes.cli import apply_overrides, build_parser, main
from profile_shapes.pipeline import ReportPipeline


@pytest.fixture
def pipeline_for(app_config, fake_client):
    def make(records, **client_options):
        return ReportPipeline(app_config, client=fake_client(records, **client_options))
    return make


class TestCommands:
    def test_report_table(self, pipeline_for, sample_records, capsys):
        assert main(["report"], pipeline=pipeline_for(sample_records)) == 0
        out = capsys.readouterr().out
        assert "AVG" in out
        assert "-5000" in out

    def test_empty_report_is_success(self, pipeline_for, capsys):
        assert main(["report"], pipeline=pipeline_for([])) == 0
        assert "No inefficient query shapes found." in capsys.readouterr().out

    def test_report_json_keeps_stdout_clean(self, pipeline_for, sample_records, capsys):
        assert main(["report", "--json"], pipeline=pipeline_for(sample_records)) == 0
        captured = capsys.readouterr()
        payload = json.loads(captured.out)
        assert len(payload["cohorts"]) == 2
        assert payload["run"]["records_ignored"] == 4
        assert "Reading shop.system.profile" in captured.err

    def test_stream_failure_exit_code(self, pipeline_for, sample_records, capsys):
        assert main(["report"], pipeline=pipeline_for(sample_records, fail_after=2)) == 1
        captured = capsys.readouterr()
        assert "aborted" in captured.err
        assert "AVG" not in captured.out

    def test_scan(self, pipeline_for, sample_records, capsys):
        assert main(["scan"], pipeline=pipeline_for(sample_records)) == 0
        out = capsys.readouterr().out
        assert "shop.users   --   1 / 5000" in out
        assert "4 records flagged (over-examined)" in out

    def test_scan_mode_is_validated(self, pipeline_for):
        with pytest.raises(SystemExit):
            main(["scan", "--mode", "sideways"], pipeline=pipeline_for([]))

    def test_status(self, pipeline_for, capsys):
        assert main(["status"], pipeline=pipeline_for([])) == 0
        assert "database: shop" in capsys.readouterr().out

    def test_subcommand_required(self):
        with pytest.raises(SystemExit):
            main([])


class TestApplyOverrides:
    def test_no_overrides(self, app_config):
        args = build_parser().parse_args(["report"])
        assert apply_overrides(app_config, args) == app_config

    def test_report_options(self, app_config):
        args = build_parser().parse_args(["--timespan", "0", "report", "--all", "--limit", "5"])
        config = apply_overrides(app_config, args)
        assert config.profile.timespan_seconds == 0
        assert config.report.problems_only is False
        assert config.report.limit == 5

    def test_database_moves_default_excluded_namespace(self, app_config):
        args = build_parser().parse_args(["--database", "crm", "status"])
        config = apply_overrides(app_config, args)
        assert config.mongo.database == "crm"
        assert config.profile.excluded_namespace == "crm.system.profile"

    def test_custom_excluded_namespace_is_kept(self, app_config):
        app_config.profile.excluded_namespace = "shop.audit"
        args = build_parser().parse_args(["--database", "crm", "status"])
        assert apply_overrides(app_config, args).profile.excluded_namespace == "shop.audit"

    def test_original_config_untouched(self, app_config):
        args = build_parser().parse_args(["--database", "crm", "report", "--all"])
        apply_overrides(app_config, args)
        assert app_config.mongo.database == "shop"
        assert app_config.report.problems_only is True
