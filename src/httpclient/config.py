"""
=============================================================================
CLIENT CONFIGURATION
=============================================================================

Centralized configuration for the HTTP client.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m httpclient example.com --timeout 5              │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── HTTP_CLIENT_TIMEOUT=5 python -m httpclient example.com    │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    └─────────────────────────────────────────────────────────────────────┘

Values are validated once, up front, so a bad port or timeout fails
before any connection is attempted.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class ClientConfig:
    """
    Configuration for HTTPClient and the command-line tool.

    NETWORK SETTINGS
    - port, timeout, buffer_size

    RESPONSE LIMITS
    - max_response_size

    IDENTITY / LOGGING
    - user_agent, log_level
    """

    port: int = 80
    """Default server port when the caller does not give one."""

    timeout: Optional[float] = 30.0
    """
    Socket timeout in seconds for connect, send and receive.
    None = blocking forever.
    """

    buffer_size: int = 8192
    """Size of the read and write buffers on each connection."""

    max_response_size: int = 10 * 1024 * 1024  # 10 MB
    """Largest response (headers plus body) the client will accept."""

    user_agent: str = "PyHTTPClient/1.0"
    """Value sent in the User-Agent header by HTTPClient.get()."""

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """
        Create configuration from environment variables.

        HTTP_CLIENT_PORT         Default port (default: 80)
        HTTP_CLIENT_TIMEOUT      Timeout in seconds, "none" to block (default: 30)
        HTTP_CLIENT_BUFFER_SIZE  Buffer size in bytes (default: 8192)
        HTTP_CLIENT_USER_AGENT   User-Agent header (default: PyHTTPClient/1.0)
        HTTP_CLIENT_LOG_LEVEL    Logging level (default: INFO)
        """
        timeout = os.getenv("HTTP_CLIENT_TIMEOUT", "30")
        return cls(
            port=int(os.getenv("HTTP_CLIENT_PORT", "80")),
            timeout=None if timeout.lower() == "none" else float(timeout),
            buffer_size=int(os.getenv("HTTP_CLIENT_BUFFER_SIZE", "8192")),
            user_agent=os.getenv("HTTP_CLIENT_USER_AGENT", "PyHTTPClient/1.0"),
            log_level=os.getenv("HTTP_CLIENT_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: Describing the first invalid setting.
        """
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 1-65535.")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.max_response_size <= 0:
            raise ValueError("max_response_size must be > 0")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")
