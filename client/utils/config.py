"""
Client configuration module.

This module handles client-side configuration settings.
"""

from common.constants import (
    DEFAULT_HOST, DEFAULT_PORT, MAX_RETRY_ATTEMPTS, RECONNECT_ATTEMPTS, RECONNECT_DELAY_BASE,
    CLIENT_READ_LIMIT
)


class ClientConfig:
    """Client configuration class."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT):
        self.host = host
        self.port = port

        # Connection settings
        self.retry_attempts = MAX_RETRY_ATTEMPTS
        self.reconnect_attempts = RECONNECT_ATTEMPTS
        self.reconnect_delay_base = RECONNECT_DELAY_BASE
        self.read_limit = CLIENT_READ_LIMIT
