import yaml
import os
from typing import Optional
from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    url: str
    echo: bool = False


class RankingConfig(BaseModel):
    """
    Read-path and sweep behaviour of the candidate ranking service.
    """
    default_limit: int = Field(default=5, ge=1)
    max_limit: int = Field(default=100, ge=1)
    # Fire a background recalculation when a read finds stale or empty rankings
    auto_refresh_on_read: bool = True
    # Maximum number of jobs picked up by one stale sweep
    stale_sweep_limit: int = Field(default=10, ge=1)
    # Also re-run jobs left in ERROR by a previous attempt (after STALE ones)
    retry_errored_jobs: bool = False
    # Also re-run COMPLETED jobs last calculated this many hours ago (after STALE
    # and ERROR ones), so recency bonuses follow the clock; None disables it
    refresh_completed_after_hours: Optional[float] = Field(default=None, gt=0)
    # Thread pool size for detached recalculations
    background_workers: int = Field(default=4, ge=1)


class BulkConfig(BaseModel):
    """
    Pacing of the bulk ranking processor.
    """
    max_jobs: int = Field(default=50, ge=1)
    high_priority_batch_size: int = Field(default=5, ge=1)
    normal_priority_batch_size: int = Field(default=2, ge=1)
    normal_priority_delay_seconds: float = Field(default=1.0, ge=0)


class SchedulerConfig(BaseModel):
    enabled: bool = True
    interval_seconds: int = Field(default=300, ge=1)


class WebConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080


class LoggingConfig(BaseModel):
    level: str = "INFO"


class AppConfig(BaseModel):
    database: DatabaseConfig
    ranking: RankingConfig = Field(default_factory=RankingConfig)
    bulk: BulkConfig = Field(default_factory=BulkConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    web: WebConfig = Field(default_factory=WebConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


CONFIG_PATH_ENV = "RANKING_CONFIG"


def load_config(config_path: Optional[str] = None) -> AppConfig:
    # Explicit path, else RANKING_CONFIG (set by `main.py serve --config`), else config.yaml
    if config_path is None:
        config_path = os.environ.get(CONFIG_PATH_ENV, "config.yaml")

    # If not found at relative path (e.g. running from a subdirectory), try the project root
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    data: dict = {}
    if os.path.exists(config_path):
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}

    # Allow env var override for DB URL
    env_db_url = os.environ.get("DATABASE_URL")
    if env_db_url:
        data.setdefault('database', {})
        data['database']['url'] = env_db_url

    env_interval = os.environ.get("RANKING_SWEEP_INTERVAL")
    if env_interval:
        if data.get('scheduler') is None:
            data['scheduler'] = {}
        data['scheduler']['interval_seconds'] = int(env_interval)

    env_log_level = os.environ.get("LOG_LEVEL")
    if env_log_level:
        if data.get('logging') is None:
            data['logging'] = {}
        data['logging']['level'] = env_log_level

    return AppConfig(**data)


def get_default_config(database_url: Optional[str] = None) -> AppConfig:
    """Config with every section at its defaults (used by tests and scripts)."""
    return AppConfig(database=DatabaseConfig(url=database_url or "sqlite://"))
