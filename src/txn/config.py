"""
txnctl Configuration

This module provides configuration management for txnctl using Pydantic Settings.
All configuration values can be set via environment variables or .env file.
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class TxnCtlConfig(BaseSettings):
    """
    txnctl Configuration

    All settings can be overridden via environment variables.
    Example: TXNCTL_ENDPOINT=10.0.0.5:2379 txnctl txn
    """

    # ========== Store Configuration ==========
    endpoint: str = Field(
        default="127.0.0.1:2379",
        description="Store endpoint (host:port or http(s) URL)"
    )

    # ========== HTTP Timeout Configuration ==========
    http_connect_timeout: int = Field(
        default=5,
        description="HTTP connection timeout in seconds"
    )
    http_read_timeout: int = Field(
        default=30,
        description="HTTP read timeout in seconds"
    )

    # ========== Logging Configuration ==========
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    class Config:
        env_prefix = "TXNCTL_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global configuration instance
config = TxnCtlConfig()


def get_config() -> TxnCtlConfig:
    """
    Get the global configuration instance.

    Returns:
        TxnCtlConfig: The global configuration instance
    """
    return config
