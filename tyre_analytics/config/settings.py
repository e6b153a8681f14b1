"""
Tyre Depot Analytics
Centralized Configuration Management

This module provides configuration management using Pydantic settings with
environment variable support, validation, and type safety.
"""

from functools import lru_cache
from typing import Optional, List
from pydantic import Field, field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """PostgreSQL Database Configuration"""

    model_config = SettingsConfigDict(env_prefix="POSTGRES_")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    db: str = Field(default="tyre_depot", description="Database name")
    user: str = Field(default="tyre_depot", description="Database user")
    password: SecretStr = Field(default="secure_password", description="Database password")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    echo: bool = Field(default=False, description="Echo SQL queries")
    url: Optional[str] = Field(default=None, alias="DATABASE_URL", description="Database URL (overrides host/port)")

    @property
    def async_url(self) -> str:
        """Async database URL for asyncpg - uses DATABASE_URL if set"""
        if self.url:
            return self.url
        return f"postgresql+asyncpg://{self.user}:{self.password.get_secret_value()}@{self.host}:{self.port}/{self.db}"


class RedisSettings(BaseSettings):
    """Redis Cache Configuration"""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    enabled: bool = Field(default=True, description="Cache analytics responses in Redis")
    host: str = Field(default="localhost", description="Redis host")
    port: int = Field(default=6379, description="Redis port")
    password: Optional[SecretStr] = Field(default=None, description="Redis password")
    db: int = Field(default=0, description="Redis database number")
    max_connections: int = Field(default=50, description="Max connections")
    socket_timeout: int = Field(default=5, description="Socket timeout in seconds")
    url: Optional[str] = Field(default=None, alias="REDIS_URL", description="Redis URL (overrides host/port)")

    def get_url(self) -> str:
        """Redis connection URL - uses REDIS_URL if set, otherwise builds from host/port"""
        if self.url:
            return self.url
        if self.password:
            return f"redis://:{self.password.get_secret_value()}@{self.host}:{self.port}/{self.db}"
        return f"redis://{self.host}:{self.port}/{self.db}"


class SecuritySettings(BaseSettings):
    """Security and Authentication Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    jwt_secret_key: SecretStr = Field(default="jwt-secret-change-me", alias="JWT_SECRET_KEY", description="JWT secret key")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM", description="JWT algorithm")
    admin_role: str = Field(default="admin", alias="ADMIN_ROLE", description="Role claim required for analytics")

    # Rate limiting
    rate_limit_requests: int = Field(default=100, alias="RATE_LIMIT_REQUESTS", description="Rate limit requests")
    rate_limit_window_seconds: int = Field(default=60, alias="RATE_LIMIT_WINDOW_SECONDS", description="Rate limit window")

    # CORS
    cors_origins: List[str] = Field(
        default=["http://localhost:5173", "http://localhost:3000"],
        description="Allowed CORS origins"
    )


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", alias="LOG_FORMAT", description="Log format: json or text")


class AnalyticsSettings(BaseSettings):
    """
    Analytics Engine Configuration

    Every threshold used by the reports lives here so that it can be tuned
    per deployment without touching the computations.
    """

    model_config = SettingsConfigDict(env_prefix="ANALYTICS_")

    store_timezone: str = Field(default="Asia/Manila", description="Timezone that defines a calendar day")
    query_timeout_seconds: float = Field(default=10.0, description="Upper bound for a single snapshot fetch")
    best_sellers_limit: int = Field(default=10, description="Default number of best sellers")

    # Forecast
    forecast_horizon_days: int = Field(default=30, description="Days projected past the history")
    forecast_min_history_days: int = Field(default=7, description="Minimum daily points needed to forecast")
    forecast_confidence_z: float = Field(default=1.96, description="Z multiplier of the confidence band")
    forecast_seasonality_min_days: int = Field(default=14, description="History needed before weekday factors apply")

    # Seasonal trends
    seasonal_min_months: int = Field(default=12, description="Months of data needed for seasonal analysis")
    seasonal_band_sigma: float = Field(default=0.5, description="Std deviations that mark a peak or low month")

    # Churn
    churn_gap_multiplier: float = Field(default=2.0, description="Multiple of the personal purchase gap before churn")
    churn_threshold_days: int = Field(default=90, description="Inactivity threshold when history is too short")
    churn_min_orders_for_gap: int = Field(default=2, description="Orders needed to estimate a personal gap")
    churn_min_gap_days: float = Field(default=1.0, description="Floor for the personal purchase gap")

    # Inventory
    inventory_period_days: int = Field(default=30, description="Trailing sales window")
    inventory_lead_time_days: float = Field(default=7.0, description="Supplier lead time")
    inventory_safety_factor: float = Field(default=0.5, description="Safety stock as a share of lead time demand")
    inventory_review_period_days: float = Field(default=14.0, description="Days between stock reviews")
    inventory_urgent_ratio: float = Field(default=0.5, description="Share of reorder point below which reorder is urgent")
    inventory_overstock_ratio: float = Field(default=2.0, description="Multiple of optimal stock above which stock is excess")

    # Product insights
    insights_period_days: int = Field(default=30, description="Length of each comparison window")

    @field_validator("forecast_horizon_days", "inventory_period_days", "insights_period_days")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Reject windows that would divide by zero"""
        if v < 1:
            raise ValueError("Must be at least 1")
        return v

    @field_validator("forecast_min_history_days")
    @classmethod
    def validate_min_history(cls, v: int) -> int:
        """A trend line and its residual spread need two points"""
        if v < 2:
            raise ValueError("Must be at least 2")
        return v


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="tyre-depot-analytics", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
