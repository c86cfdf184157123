"""
Chat server module.

This module tracks connected participants, hands out their usernames and
fans chat events out to every connection.
"""

import asyncio
from typing import Dict, List, Optional

from common.constants import SEND_TIMEOUT
from common.protocol_definitions import (
    ChatMessage, encode_message, create_assigned_username_message,
    create_online_users_message, create_user_joined_message,
    create_user_left_message, create_broadcast_chat_message
)
from server.chat.username_pool import UsernamePool
from server.utils.logger import logger


class ChatServer:
    """Server-side chat functionality."""

    def __init__(self, username_pool: Optional[UsernamePool] = None,
                 strict_messages: bool = False, send_timeout: float = SEND_TIMEOUT):
        self.username_pool = username_pool or UsernamePool()
        self.usernames: Dict[str, str] = {}  # connection_id -> username
        self.clients: Dict[str, asyncio.StreamWriter] = {}  # connection_id -> writer
        self.strict_messages = strict_messages
        self.send_timeout = send_timeout
        self.lock = asyncio.Lock()  # Protect pool, usernames and clients together

    async def _deliver(self, connection_id: str, writer: asyncio.StreamWriter, data: bytes) -> bool:
        try:
            writer.write(data)
            await asyncio.wait_for(writer.drain(), timeout=self.send_timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning(f"Timed out sending to connection_id={connection_id}")
        except Exception as e:
            logger.error(f"Failed to send to connection_id={connection_id}: {e}")
        self._evict(connection_id, writer)
        return False

    def _evict(self, connection_id: str, writer: asyncio.StreamWriter):
        """
        Stop sending to a connection that failed a delivery and close it.

        Its username stays registered until the transport reports the
        disconnect, which then runs the usual departure announcements.
        """
        if self.clients.get(connection_id) is writer:
            del self.clients[connection_id]
            logger.warning(f"Evicting unresponsive connection_id={connection_id}")
        try:
            writer.close()
        except Exception as e:
            logger.debug(f"Error closing connection_id={connection_id}: {e}")

    async def broadcast(self, message: dict) -> List[str]:
        """
        Send a JSON message to all connected clients.

        Deliveries run concurrently over a snapshot of the current clients, so
        one slow or broken connection does not hold up the others. Returns the
        ids of connections the message could not be delivered to.
        """
        data = encode_message(message)
        targets = list(self.clients.items())
        if not targets:
            return []

        results = await asyncio.gather(
            *(self._deliver(connection_id, writer, data) for connection_id, writer in targets)
        )
        return [connection_id for (connection_id, _), ok in zip(targets, results) if not ok]

    async def send_message(self, connection_id: str, message: dict) -> bool:
        """Send a JSON message to a specific client."""
        writer = self.clients.get(connection_id)
        if writer is None:
            return False
        return await self._deliver(connection_id, writer, encode_message(message))

    async def handle_connect(self, connection_id: str, writer: asyncio.StreamWriter) -> str:
        """Register a new connection and announce its username to everyone."""
        async with self.lock:
            self.clients[connection_id] = writer
            username = self.username_pool.assign()
            self.usernames[connection_id] = username

            logger.log_username_assigned(username, connection_id)

            await self.send_message(connection_id, create_assigned_username_message(username))
            await self.broadcast(create_online_users_message(self.get_online_users()))
            await self.broadcast(create_user_joined_message(username))

        return username

    async def handle_disconnect(self, connection_id: str):
        """Forget a connection and, if it had a username, announce its departure."""
        async with self.lock:
            self.clients.pop(connection_id, None)
            username = self.usernames.get(connection_id)

            logger.log_disconnect(username, connection_id)

            if username is None:
                return

            self.username_pool.release(username)
            del self.usernames[connection_id]

            await self.broadcast(create_online_users_message(self.get_online_users()))
            await self.broadcast(create_user_left_message(username))

    async def handle_message(self, connection_id: str, message) -> bool:
        """Relay a chat message to every participant, the sender included."""
        async with self.lock:
            username = self.usernames.get(connection_id)
            logger.log_message(username, connection_id, message)

            if username is None and self.strict_messages:
                logger.warning(f"Dropping message from unregistered connection_id={connection_id}")
                return False

            chat = ChatMessage(sender_id=connection_id, username=username, message=message)
            await self.broadcast(create_broadcast_chat_message(chat))
            return True

    def get_username(self, connection_id: str) -> Optional[str]:
        """Get the username held by a connection."""
        return self.usernames.get(connection_id)

    def get_online_users(self) -> List[str]:
        """Get the usernames of all connected participants."""
        return list(self.usernames.values())

    def get_participant_count(self) -> int:
        """Get the number of current participants."""
        return len(self.usernames)
