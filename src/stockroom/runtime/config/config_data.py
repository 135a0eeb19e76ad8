"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class AppConfig(BaseModel):
    """Application configuration model."""

    name: str = Field(default="stockroom", description="Application name")
    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="plain", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class RelationalStorageConfig(BaseModel):
    """Embedded SQL database configuration."""

    url: str = Field(
        default="sqlite:///./data/estoque.db",
        description="SQLAlchemy connection URL of the products database",
    )
    echo: bool = Field(default=False, description="Echo SQL statements")
    timeout: int = Field(default=20, description="SQLite lock timeout in seconds")


class KeyValueStorageConfig(BaseModel):
    """Flat key/value store configuration."""

    driver: Literal["file", "redis", "memory"] = Field(
        default="file", description="Key/value primitive holding the collection"
    )
    path: str = Field(
        default="./data/estoque.kv", description="dbm file used by the file driver"
    )
    url: str | None = Field(
        default=None, description="Redis URL used by the redis driver"
    )
    storage_key: str = Field(
        default="estoque_products",
        description="Key under which the serialized product list is stored",
    )


class StorageConfig(BaseModel):
    """Product storage backend selection."""

    backend: Literal["auto", "relational", "key_value"] = Field(
        default="auto",
        description="Storage backend; 'auto' picks relational when sqlite3 is usable",
    )
    relational: RelationalStorageConfig = Field(
        default_factory=RelationalStorageConfig
    )
    key_value: KeyValueStorageConfig = Field(default_factory=KeyValueStorageConfig)


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    storage: StorageConfig = Field(
        default_factory=StorageConfig, description="Product storage configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
