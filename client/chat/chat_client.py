"""
Chat client module.

This module handles client-side chat messaging functionality.
"""

import asyncio
from typing import Optional

from common.constants import EventTypes
from common.protocol_definitions import encode_message, create_chat_message
from client.utils.logger import logger


class ChatClient:
    """Client-side chat functionality."""

    def __init__(self, writer: Optional[asyncio.StreamWriter] = None):
        self.writer = writer
        self.username: Optional[str] = None

    def set_writer(self, writer: asyncio.StreamWriter):
        """Set the writer for sending messages."""
        self.writer = writer

    def set_username(self, username: str):
        """Set the username the hub assigned to us."""
        self.username = username

    async def send_message(self, message: dict) -> bool:
        """Send a JSON message to the server."""
        if not self.writer:
            logger.error("[ERROR] Not connected to server")
            return False

        try:
            self.writer.write(encode_message(message))
            await self.writer.drain()
            return True
        except Exception as e:
            logger.error(f"[ERROR] Failed to send message: {e}")
            return False

    async def send_chat(self, message: str) -> bool:
        """Send a chat message."""
        return await self.send_message(create_chat_message(message))

    async def handle_message(self, message: dict):
        """Handle chat messages from server."""
        if message.get('type', '') == EventTypes.MESSAGE:
            await self._handle_chat_message(message)

    async def _handle_chat_message(self, message: dict):
        """Handle incoming chat message."""
        username = message.get('username')
        text = message.get('message', '')

        if username is not None and username == self.username:
            logger.info(f"[CHAT] You: {text}")
        else:
            logger.info(f"[CHAT] {username or 'unknown'}: {text}")
