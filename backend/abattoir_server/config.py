"""
Configuration management for the abattoir server.

All configuration is done via environment variables - no config files.
This module provides typed configuration classes with validation.

Invariants:
    - All settings have sensible defaults for local development
    - Production deployments MUST set DATA_DIR to a persistent volume
    - MAX_RECORD_SIZE only grows; shrinking it can make stored rows unreadable

How to change safely:
    - Add new settings with defaults that maintain backward compatibility
    - Keep env variable names stable, they are part of the deployment contract
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# Roughly three months, the default gap between scheduled maintenance visits
DEFAULT_MAINTENANCE_INTERVAL_MS = 7_884_000 * 1000


@dataclass(frozen=True)
class StorageConfig:
    """Local storage configuration.

    Attributes:
        data_dir: Directory holding the ledger database
        db_name: File name of the SQLite database
        wal_mode: SQLite WAL mode enabled
        busy_timeout_ms: SQLite busy timeout in milliseconds
        cache_size_pages: SQLite cache size in pages (negative = KB)
        max_record_size: Upper bound in bytes for one encoded record
        scan_batch_size: Rows fetched per round trip during a full scan
    """

    data_dir: str = "/var/lib/abattoir"
    db_name: str = "ledger.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000
    cache_size_pages: int = -16000  # 16MB
    max_record_size: int = 512
    scan_batch_size: int = 256

    @classmethod
    def from_env(cls) -> StorageConfig:
        """Load configuration from environment variables."""
        return cls(
            data_dir=os.getenv("DATA_DIR", "/var/lib/abattoir"),
            db_name=os.getenv("LEDGER_DB_NAME", "ledger.db"),
            wal_mode=os.getenv("SQLITE_WAL_MODE", "true").lower() == "true",
            busy_timeout_ms=int(os.getenv("SQLITE_BUSY_TIMEOUT_MS", "5000")),
            cache_size_pages=int(os.getenv("SQLITE_CACHE_SIZE", "-16000")),
            max_record_size=int(os.getenv("MAX_RECORD_SIZE", "512")),
            scan_batch_size=int(os.getenv("SCAN_BATCH_SIZE", "256")),
        )


@dataclass(frozen=True)
class HttpConfig:
    """HTTP adapter configuration.

    Attributes:
        host: Address to bind
        port: Port to listen on
        cors_origins: Allowed CORS origins ("*" allows any)
    """

    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: tuple[str, ...] = ("*",)

    @classmethod
    def from_env(cls) -> HttpConfig:
        """Load configuration from environment variables."""
        origins = os.getenv("HTTP_CORS_ORIGINS", "*")
        return cls(
            host=os.getenv("HTTP_HOST", "0.0.0.0"),
            port=int(os.getenv("HTTP_PORT", "8080")),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        )


@dataclass(frozen=True)
class AnalyticsConfig:
    """Business rule constants used by operations and analytics.

    Attributes:
        low_stock_threshold_kg: Products lighter than this are low stock
        maintenance_interval_ms: Default gap to the next maintenance date
    """

    low_stock_threshold_kg: float = 10.0
    maintenance_interval_ms: int = DEFAULT_MAINTENANCE_INTERVAL_MS

    @classmethod
    def from_env(cls) -> AnalyticsConfig:
        """Load configuration from environment variables."""
        return cls(
            low_stock_threshold_kg=float(os.getenv("LOW_STOCK_THRESHOLD_KG", "10.0")),
            maintenance_interval_ms=int(
                os.getenv("MAINTENANCE_INTERVAL_MS", str(DEFAULT_MAINTENANCE_INTERVAL_MS))
            ),
        )


@dataclass(frozen=True)
class ObservabilityConfig:
    """Logging configuration.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Log format (json, text)
    """

    log_level: str = "INFO"
    log_format: str = "json"

    @classmethod
    def from_env(cls) -> ObservabilityConfig:
        """Load configuration from environment variables."""
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "json"),
        )


@dataclass
class ServerConfig:
    """Complete server configuration.

    Attributes:
        storage: Local storage configuration
        http: HTTP adapter configuration
        analytics: Business rule constants
        observability: Logging configuration
    """

    storage: StorageConfig = field(default_factory=StorageConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    @classmethod
    def from_env(cls) -> ServerConfig:
        """Load complete configuration from environment variables.

        Returns:
            ServerConfig with all sections populated from environment.

        Raises:
            ValueError: If configuration is missing or invalid.
        """
        config = cls(
            storage=StorageConfig.from_env(),
            http=HttpConfig.from_env(),
            analytics=AnalyticsConfig.from_env(),
            observability=ObservabilityConfig.from_env(),
        )

        config.validate()
        return config

    def validate(self) -> None:
        """Validate configuration consistency.

        Raises:
            ValueError: If configuration is invalid.
        """
        if self.storage.max_record_size <= 0:
            raise ValueError(
                f"MAX_RECORD_SIZE must be positive, got {self.storage.max_record_size}"
            )
        if self.storage.scan_batch_size <= 0:
            raise ValueError(
                f"SCAN_BATCH_SIZE must be positive, got {self.storage.scan_batch_size}"
            )
        if not self.storage.db_name:
            raise ValueError("LEDGER_DB_NAME cannot be empty")
        if self.analytics.low_stock_threshold_kg < 0:
            raise ValueError("LOW_STOCK_THRESHOLD_KG cannot be negative")
        if self.observability.log_format not in ("json", "text"):
            raise ValueError(
                f"Invalid LOG_FORMAT '{self.observability.log_format}'. Must be one of: json, text"
            )

        if not os.path.exists(self.storage.data_dir):
            logger.warning(
                f"Data directory does not exist: {self.storage.data_dir}. "
                "It will be created on first open."
            )

    def log_config(self) -> None:
        """Log configuration."""
        logger.info(
            "Server configuration loaded",
            extra={
                "data_dir": self.storage.data_dir,
                "db_name": self.storage.db_name,
                "wal_mode": self.storage.wal_mode,
                "max_record_size": self.storage.max_record_size,
                "http_bind": f"{self.http.host}:{self.http.port}",
                "low_stock_threshold_kg": self.analytics.low_stock_threshold_kg,
                "log_level": self.observability.log_level,
            },
        )
