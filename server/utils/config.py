"""
Server configuration module.

This module handles server-side configuration settings.
"""

from typing import Optional

from common.constants import DEFAULT_SERVER_HOST, DEFAULT_PORT, MAX_MESSAGE_SIZE, SEND_TIMEOUT


class ServerConfig:
    """Server configuration class."""

    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT,
                 strict_messages: bool = False, log_file: Optional[str] = None):
        self.host = host
        self.port = port

        # Logging configuration
        self.log_file = log_file

        # Chat settings
        # Drop messages from connections without a username instead of relaying them
        self.strict_messages = strict_messages

        # Connection settings
        self.send_timeout = SEND_TIMEOUT
        self.max_message_size = MAX_MESSAGE_SIZE

    def get_connection_info(self):
        """Get connection information."""
        return {
            'host': self.host,
            'port': self.port
        }
