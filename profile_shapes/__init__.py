# ==============================================
# Profiler Query-Shape Report
# ==============================================
#
# Package Structure (4 Topics + Orchestrator):
#
# profile_shapes/
# ├── normalization/    # Topic 1: Parse and normalize raw profiler records
# ├── analysis/         # Topic 2: Classify shapes, aggregate cohorts, rank
# ├── storage/          # Topic 3: Stream system.profile from MongoDB
# ├── report/           # Topic 4: Summaries for the console / JSON
# ├── config.py         # Configuration management
# ├── shape_report.py   # Run orchestrator (one batch pass)
# ├── pipeline.py       # Config + MongoDB + orchestrator wiring
# └── cli.py            # Command line entry point
#
# ==============================================

__version__ = "0.1.0"
