"""
Server logging module.

This module handles server-side logging functionality.
"""

import logging
from typing import Optional

from common.constants import LOG_FORMAT, LOG_DATE_FORMAT


class ServerLogger:
    """Server logging class."""

    def __init__(self, log_level: int = logging.INFO, log_file: Optional[str] = None):
        self.logger = logging.getLogger('chat_hub_server')
        self.configure(log_level, log_file)

    def configure(self, log_level: int = logging.INFO, log_file: Optional[str] = None):
        """(Re)build handlers for the given level and optional log file."""
        self.logger.setLevel(log_level)

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)
            handler.close()

        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def log_connection(self, addr, connection_id: str):
        """Log client connection."""
        self.info(f"New connection from {addr}, connection_id={connection_id}")

    def log_username_assigned(self, username: str, connection_id: str):
        """Log username assignment."""
        self.info(f"Client connected: {connection_id} as {username}")

    def log_disconnect(self, username: Optional[str], connection_id: str):
        """Log client disconnect."""
        self.info(f"Client disconnected: {connection_id} ({username})")

    def log_message(self, username: Optional[str], connection_id: str, message):
        """Log chat message."""
        self.info(f"Received message from {username} (connection_id={connection_id}): {message}")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")


# Global logger instance
logger = ServerLogger()
