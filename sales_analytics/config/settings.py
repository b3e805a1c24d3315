"""
Sales Warehouse Analytics
Centralized Configuration Management

Pydantic settings for the reporting engine, the warehouse sources and the
serving layer. Every section can be overridden with environment variables.
"""

from datetime import date
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _strictly_ascending(values: List[int]) -> bool:
    return all(a < b for a, b in zip(values, values[1:]))


class ReportingSettings(BaseSettings):
    """Segmentation thresholds and KPI parameters for the report views"""

    model_config = SettingsConfigDict(env_prefix="REPORT_")

    vip_min_lifespan_months: int = Field(default=12, ge=0, description="Minimum lifespan for VIP/Regular customers")
    vip_min_spend: float = Field(default=5000.0, ge=0, description="Spend a VIP customer must exceed")
    product_high_threshold: float = Field(default=50000.0, ge=0, description="Revenue a High-Performer must exceed")
    product_mid_threshold: float = Field(default=10000.0, ge=0, description="Minimum revenue of a Mid-Range product")
    age_group_bounds: List[int] = Field(
        default=[20, 30, 40, 50],
        description="Lower edges of the age groups after the first one",
    )
    cost_range_bounds: List[float] = Field(
        default=[100.0, 500.0, 1000.0],
        description="Edges of the product cost ranges",
    )
    reference_date: Optional[date] = Field(
        default=None,
        description="Date recency and age are measured against (today when unset)",
    )
    include_inactive: bool = Field(
        default=True,
        description="Keep customers/products without any dated sale in the reports",
    )

    @field_validator("age_group_bounds", "cost_range_bounds")
    @classmethod
    def validate_bounds(cls, v: List) -> List:
        """Bounds must be non-empty and strictly ascending"""
        if not v:
            raise ValueError("At least one bound is required")
        if not _strictly_ascending(v):
            raise ValueError(f"Bounds must be strictly ascending: {v}")
        return v

    @model_validator(mode="after")
    def validate_product_tiers(self) -> "ReportingSettings":
        """The mid-range tier cannot start above the high tier"""
        if self.product_mid_threshold > self.product_high_threshold:
            raise ValueError(
                "product_mid_threshold must not exceed product_high_threshold "
                f"({self.product_mid_threshold} > {self.product_high_threshold})"
            )
        return self


class DatabaseSettings(BaseSettings):
    """PostgreSQL warehouse configuration"""

    model_config = SettingsConfigDict(env_prefix="POSTGRES_")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    db: str = Field(default="data_warehouse_analytics", alias="database", description="Database name")
    user: str = Field(default="analytics", description="Database user")
    password: SecretStr = Field(default="secure_password", description="Database password")
    echo: bool = Field(default=False, description="Echo SQL queries")
    url: Optional[str] = Field(default=None, description="Full SQLAlchemy URL (overrides host/port)")

    @property
    def async_url(self) -> str:
        """Async database URL for asyncpg"""
        if self.url:
            return self.url
        return f"postgresql+asyncpg://{self.user}:{self.password.get_secret_value()}@{self.host}:{self.port}/{self.db}"


class DataLakeSettings(BaseSettings):
    """File-based warehouse and report output locations"""

    model_config = SettingsConfigDict(env_prefix="DATA_")

    warehouse_path: str = Field(default="./data/gold", description="Directory holding the warehouse tables")
    reports_path: str = Field(default="./data/reports", description="Directory reports are written to")
    default_format: str = Field(default="csv", description="Warehouse file format: csv or parquet")
    fact_sales_file: str = Field(default="fact_sales", description="Sales fact file stem")
    dim_customers_file: str = Field(default="dim_customers", description="Customer dimension file stem")
    dim_products_file: str = Field(default="dim_products", description="Product dimension file stem")


class MonitoringSettings(BaseSettings):
    """Logging configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or text")


class DataQualitySettings(BaseSettings):
    """Input quality check configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    enable_data_quality_checks: bool = Field(
        default=True,
        alias="ENABLE_DATA_QUALITY_CHECKS",
        description="Validate warehouse tables before building reports"
    )


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
    app_name: str = Field(default="sales-analytics", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8088"],
        description="Allowed CORS origins"
    )

    # Where the warehouse tables are read from
    warehouse_source: str = Field(default="files", alias="WAREHOUSE_SOURCE", description="files or database")

    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    reporting: ReportingSettings = Field(default_factory=ReportingSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    data_lake: DataLakeSettings = Field(default_factory=DataLakeSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    data_quality: DataQualitySettings = Field(default_factory=DataQualitySettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @field_validator("warehouse_source")
    @classmethod
    def validate_source(cls, v: str) -> str:
        allowed = ["files", "database"]
        if v.lower() not in allowed:
            raise ValueError(f"Warehouse source must be one of: {allowed}")
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


settings = get_settings()
