"""
Electronics Retailer Analytics
Centralized Configuration Management

Configuration is loaded with Pydantic settings from environment variables
and an optional .env file.
"""

from functools import lru_cache
from typing import List, Optional
from pydantic import Field, field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Relational source database configuration"""

    model_config = SettingsConfigDict(env_prefix="POSTGRES_")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    db: str = Field(default="electronics_retailer", description="Database name")
    user: str = Field(default="analyst", description="Database user")
    password: SecretStr = Field(default="analyst", description="Database password")
    echo: bool = Field(default=False, description="Echo SQL queries")
    url: Optional[str] = Field(default=None, alias="DATABASE_URL", description="Full URL (overrides host/port)")

    @property
    def sync_url(self) -> str:
        """Sync database URL for psycopg2, or DATABASE_URL when set"""
        if self.url:
            return self.url
        return f"postgresql+psycopg2://{self.user}:{self.password.get_secret_value()}@{self.host}:{self.port}/{self.db}"


class DataSourceSettings(BaseSettings):
    """File-based dataset location and format"""

    model_config = SettingsConfigDict(env_prefix="DATA_")

    source_path: str = Field(default="./data/electronics", description="Directory holding the table files")
    file_format: str = Field(default="csv", description="csv, parquet, json or jsonl")

    # Table file stems
    sales_table: str = Field(default="sales", description="Sales fact file stem")
    products_table: str = Field(default="products", description="Products file stem")
    customers_table: str = Field(default="customers", description="Customers file stem")
    stores_table: str = Field(default="stores", description="Stores file stem")
    currency_table: str = Field(default="currency", description="Currency file stem")

    null_values: List[str] = Field(
        default=["", "NULL", "null", "None", "NA", "N/A"],
        description="CSV null markers",
    )

    @field_validator("file_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate file format value"""
        allowed = ["csv", "parquet", "json", "jsonl"]
        if v.lower() not in allowed:
            raise ValueError(f"File format must be one of: {allowed}")
        return v.lower()


class ReportSettings(BaseSettings):
    """Report engine tuning"""

    model_config = SettingsConfigDict(env_prefix="REPORT_")

    precision: int = Field(default=2, ge=0, description="Decimal places for monetary outputs")
    top_n_stores: int = Field(default=3, ge=1, description="Stores kept per country in the top stores report")
    quartile_buckets: int = Field(default=4, ge=1, description="Bucket count for underperforming stores")
    parallel: bool = Field(default=False, description="Evaluate reports on a thread pool")
    max_workers: int = Field(default=4, ge=1, description="Thread pool size for parallel runs")
    print_rows: int = Field(default=25, description="Rows printed per report by the console runner, -1 for all")


class MonitoringSettings(BaseSettings):
    """Logging configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="text", alias="LOG_FORMAT", description="Log format: json or text")


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
    app_name: str = Field(default="electronics-retail-analytics", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    data_source: DataSourceSettings = Field(default_factory=DataSourceSettings)
    reports: ReportSettings = Field(default_factory=ReportSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

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


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
