"""
Protocol definitions for the Chat Hub.

This module defines the message structures exchanged between the hub and its
clients. Every message is a JSON object with a ``type`` field, sent as a
single UTF-8 line.
"""

import asyncio
import json
from typing import Dict, Any, Optional, List
from dataclasses import dataclass

from common.constants import EventTypes


@dataclass
class ChatMessage:
    """Chat message relayed from one participant to everyone."""
    sender_id: str
    username: Optional[str]
    message: str


def encode_message(message: Dict[str, Any]) -> bytes:
    """Serialize a message into a newline-terminated JSON frame."""
    return json.dumps(message, ensure_ascii=False).encode('utf-8') + b'\n'


def decode_message(data: bytes) -> Dict[str, Any]:
    """Parse a single JSON frame. Raises ``json.JSONDecodeError`` or ``ValueError``."""
    message = json.loads(data.decode('utf-8').strip())
    if not isinstance(message, dict):
        raise ValueError("Message must be a JSON object")
    return message


class FrameTooLargeError(Exception):
    """A line exceeded the reader's limit. The whole line has been discarded."""


async def _skip_line(reader: asyncio.StreamReader):
    """Discard input up to and including the next newline, or until EOF."""
    while True:
        try:
            await reader.readuntil(b'\n')
            return
        except asyncio.LimitOverrunError as e:
            await reader.readexactly(e.consumed)
        except asyncio.IncompleteReadError:
            return


async def read_frame(reader: asyncio.StreamReader) -> bytes:
    """
    Read one newline-terminated frame.

    Returns ``b''`` at EOF; a last line without a newline is returned as is.
    A line longer than the reader's limit is skipped entirely, including any
    part that has not arrived yet, and ``FrameTooLargeError`` is raised.
    """
    try:
        return await reader.readuntil(b'\n')
    except asyncio.IncompleteReadError as e:
        return e.partial
    except asyncio.LimitOverrunError:
        await _skip_line(reader)
        raise FrameTooLargeError("Message too large")


def create_chat_message(message: str) -> Dict[str, Any]:
    """Create an outgoing chat message."""
    return {
        "type": EventTypes.MESSAGE,
        "message": message
    }


def create_assigned_username_message(username: str) -> Dict[str, Any]:
    """Create an assigned username message."""
    return {
        "type": EventTypes.ASSIGNED_USERNAME,
        "username": username
    }


def create_online_users_message(users: List[str]) -> Dict[str, Any]:
    """Create an online users message."""
    return {
        "type": EventTypes.ONLINE_USERS,
        "users": users
    }


def create_user_joined_message(username: str) -> Dict[str, Any]:
    """Create a user joined message."""
    return {
        "type": EventTypes.USER_JOINED,
        "username": username,
        "message": f"{username} has joined the chat"
    }


def create_user_left_message(username: str) -> Dict[str, Any]:
    """Create a user left message."""
    return {
        "type": EventTypes.USER_LEFT,
        "username": username,
        "message": f"{username} has left the chat"
    }


def create_broadcast_chat_message(chat: ChatMessage) -> Dict[str, Any]:
    """
    Create the chat message fanned out to every participant.

    The ``username`` key is left out when the sender has no username.
    """
    message: Dict[str, Any] = {"type": EventTypes.MESSAGE}
    if chat.username is not None:
        message["username"] = chat.username
    message["message"] = chat.message
    message["senderId"] = chat.sender_id
    return message


def create_error_message(message: str) -> Dict[str, Any]:
    """Create an error message."""
    return {
        "type": EventTypes.ERROR,
        "message": message
    }
