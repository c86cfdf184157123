"""
Client logging module.

This module handles client-side logging functionality.
"""

import logging
import sys
from typing import List

from common.constants import LOG_FORMAT, LOG_DATE_FORMAT


class ClientLogger:
    """Client logging class."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger('chat_hub_client')
        self.logger.setLevel(log_level)

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        # Create console handler
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

        self.logger.addHandler(console_handler)

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

    def log_connection(self, host: str, port: int, success: bool):
        """Log connection attempt."""
        status = "Connected" if success else "Failed to connect"
        self.info(f"{status} to {host}:{port}")

    def show_assigned_username(self, username: str):
        self.info(f"[SUCCESS] You are chatting as '{username}'")

    def show_online_users(self, users: List[str]):
        """Show online user list."""
        self.info(f"[INFO] Online users ({len(users)}): {', '.join(users)}")

    def show_user_joined(self, username: str, text: str, current_username: str):
        """Show user joined notification."""
        if username != current_username:
            self.info(f"[EVENT] {text}")

    def show_user_left(self, username: str, text: str):
        """Show user left notification."""
        self.info(f"[EVENT] {text}")

    def show_interactive_mode_info(self):
        """Show interactive mode information."""
        self.info("[INFO] Type messages to chat (Ctrl+C to exit)")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")


# Global logger instance
logger = ClientLogger()
