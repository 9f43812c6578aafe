# ==============================================
# Configuration Management
# ==============================================
#
# PURPOSE:
#   Load and validate all configuration from environment
#   variables / .env file. Provides typed config objects
#   to all other modules.
#
# CLASSES:
# --------
# - MongoConfig (dataclass)
#     uri: str | None        (default None, overrides host/port/user)
#     host: str              (default "localhost")
#     port: int              (default 27017)
#     user: str | None       (default None)
#     password: str | None   (default None)
#     database: str          (default "test")
#
# - ProfileConfig (dataclass)
#     timespan_seconds: int           (default 86400)
#     excluded_namespace: str | None  (default "<database>.system.profile")
#     excluded_ops: list[str]         (default ["getmore"])
#
# - ReportConfig (dataclass)
#     problems_only: bool    (default True)
#     limit: int             (default 0 → no limit)
#
# - AppConfig (dataclass)
#     mongo: MongoConfig
#     profile: ProfileConfig
#     report: ReportConfig
#
# FUNCTIONS:
# ----------
# - get_config() -> AppConfig
#     Load .env using python-dotenv, construct AppConfig.
#     Returns the same singleton on repeated calls.
#
# - reset_config() -> None
#     Drop the cached singleton (tests, CLI overrides).
#
# USAGE:
# ------
#   from profile_shapes.config import get_config
#   config = get_config()
#   print(config.mongo.database)
#   print(config.profile.timespan_seconds)
#
# ==============================================

import os
from dataclasses import dataclass, field
from typing import List, Optional
from pathlib import Path

from dotenv import load_dotenv


def _env_flag(name: str, default: bool) -> bool:
    """Interpret common truthy/falsey environment values."""
    value = os.getenv(name)
    if value is None:
        return default

    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _env_list(name: str, default: List[str]) -> List[str]:
    value = os.getenv(name)
    if value is None:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class MongoConfig:
    """MongoDB connection configuration."""
    uri: Optional[str] = None
    host: str = "localhost"
    port: int = 27017
    user: Optional[str] = None
    password: Optional[str] = None
    database: str = "test"


@dataclass
class ProfileConfig:
    """Upstream pre-filters applied when reading system.profile."""
    timespan_seconds: int = 86400
    excluded_namespace: Optional[str] = None
    excluded_ops: List[str] = field(default_factory=lambda: ["getmore"])


@dataclass
class ReportConfig:
    """Ranking and output options."""
    problems_only: bool = True
    limit: int = 0


@dataclass
class AppConfig:
    """Main application configuration."""
    mongo: MongoConfig
    profile: ProfileConfig
    report: ReportConfig


# Singleton instance
_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Load configuration from environment variables / .env file.
    Returns the same singleton instance on repeated calls.

    Returns:
        AppConfig: Application configuration
    """
    global _config_instance

    if _config_instance is not None:
        return _config_instance

    # Load .env file from project root
    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(dotenv_path=env_path)

    # Build MongoDB configuration
    mongo_config = MongoConfig(
        uri=os.getenv("MONGO_URI") or None,
        host=os.getenv("MONGO_HOST", "localhost"),
        port=int(os.getenv("MONGO_PORT", "27017")),
        user=os.getenv("MONGO_USER") or None,
        password=os.getenv("MONGO_PASSWORD") or None,
        database=os.getenv("MONGO_DATABASE", "test")
    )

    # The profiler's own collection is excluded unless told otherwise
    excluded_namespace = os.getenv(
        "PROFILE_EXCLUDED_NAMESPACE",
        f"{mongo_config.database}.system.profile"
    ) or None

    profile_config = ProfileConfig(
        timespan_seconds=int(os.getenv("PROFILE_TIMESPAN_SECONDS", "86400")),
        excluded_namespace=excluded_namespace,
        excluded_ops=_env_list("PROFILE_EXCLUDED_OPS", ["getmore"])
    )

    report_config = ReportConfig(
        problems_only=_env_flag("REPORT_PROBLEMS_ONLY", default=True),
        limit=int(os.getenv("REPORT_LIMIT", "0"))
    )

    _config_instance = AppConfig(
        mongo=mongo_config,
        profile=profile_config,
        report=report_config
    )

    return _config_instance


def reset_config() -> None:
    """Forget the cached configuration so the next get_config() reloads it."""
    global _config_instance
    _config_instance = None
