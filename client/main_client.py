#!/usr/bin/env python3
"""
Chat Hub Client - Main Entry Point

This is the main entry point for the console client. It connects to the hub,
prints everything the hub broadcasts and sends each line typed on stdin as a
chat message.
"""

import argparse
import asyncio
import json
import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from client.chat.chat_client import ChatClient
from client.utils.config import ClientConfig
from client.utils.logger import logger
from common.constants import EventTypes, DEFAULT_HOST, DEFAULT_PORT
from common.protocol_definitions import FrameTooLargeError, read_frame, decode_message


class ChatHubClient:
    """Main client class that integrates all functionality."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT):
        self.config = ClientConfig(host, port)
        self.reader = None
        self.writer = None
        self.running = False
        self.username = None
        self.online_users = []

        self.chat_client = ChatClient()

    async def connect(self, retry_count: int = None, base_delay: float = None):
        """Establish connection to the server with retry logic and exponential backoff."""
        retry_count = retry_count or self.config.retry_attempts
        base_delay = self.config.reconnect_delay_base if base_delay is None else base_delay
        attempt = 0

        while attempt < retry_count:
            try:
                self.reader, self.writer = await asyncio.open_connection(
                    self.config.host, self.config.port, limit=self.config.read_limit
                )
                logger.log_connection(self.config.host, self.config.port, True)
                self.running = True
                self.chat_client.set_writer(self.writer)
                return True
            except OSError as e:
                attempt += 1
                logger.log_connection(self.config.host, self.config.port, False)
                logger.log_error("connection", e)

                if attempt < retry_count:
                    delay = base_delay * (2 ** (attempt - 1))  # Exponential backoff
                    logger.info(f"[INFO] Retrying connection in {delay}s (attempt {attempt}/{retry_count})...")
                    await asyncio.sleep(delay)
                else:
                    logger.error(f"[ERROR] Failed to connect after {retry_count} attempts")
        return False

    async def listen_for_messages(self):
        """Listen for incoming messages from server with automatic reconnection."""
        while self.running:
            try:
                try:
                    data = await read_frame(self.reader)
                except FrameTooLargeError:
                    logger.warning("[WARNING] Skipped a message larger than the read limit")
                    continue

                if not data:
                    logger.info("[INFO] Server closed connection, attempting to reconnect...")
                    await self._reconnect()
                    continue

                try:
                    await self.handle_message(decode_message(data))
                except (json.JSONDecodeError, ValueError) as e:
                    logger.error(f"[ERROR] Malformed JSON received: {e}")

            except asyncio.CancelledError:
                logger.info("[INFO] Listener cancelled")
                break
            except ConnectionError as e:
                logger.error(f"[ERROR] Connection lost: {e}")
                if self.running and await self._reconnect():
                    continue
                break

    async def _reconnect(self):
        """Reconnect to the server with exponential backoff."""
        if self.writer:
            self.writer.close()

        for attempt in range(self.config.reconnect_attempts):
            delay = self.config.reconnect_delay_base * (2 ** attempt)
            logger.info(f"[INFO] Attempting to reconnect in {delay}s "
                        f"(attempt {attempt + 1}/{self.config.reconnect_attempts})...")
            await asyncio.sleep(delay)

            if await self.connect(retry_count=1):
                logger.info("[INFO] Reconnected successfully!")
                return True

        logger.error("[ERROR] Failed to reconnect after multiple attempts")
        self.running = False
        return False

    async def handle_message(self, message: dict):
        """Handle different types of messages from server."""
        msg_type = message.get('type', '')

        if msg_type == EventTypes.ASSIGNED_USERNAME:
            self.username = message.get('username')
            self.chat_client.set_username(self.username)
            logger.show_assigned_username(self.username)

        elif msg_type == EventTypes.ONLINE_USERS:
            self.online_users = message.get('users', [])
            logger.show_online_users(self.online_users)

        elif msg_type == EventTypes.USER_JOINED:
            logger.show_user_joined(message.get('username'), message.get('message', ''), self.username)

        elif msg_type == EventTypes.USER_LEFT:
            logger.show_user_left(message.get('username'), message.get('message', ''))

        elif msg_type == EventTypes.ERROR:
            error_msg = message.get('message', 'Unknown error')
            logger.error(f"[ERROR] Server error: {error_msg}")

        else:
            await self.chat_client.handle_message(message)

    async def close(self):
        """Stop listening and close the connection."""
        self.running = False
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except ConnectionError:
                pass
        logger.info("[INFO] Disconnected from server")

    async def interactive_mode(self):
        """Run client with interactive chat input."""
        if not await self.connect():
            return

        listener_task = asyncio.create_task(self.listen_for_messages())
        logger.show_interactive_mode_info()

        loop = asyncio.get_running_loop()
        try:
            while self.running:
                user_input = await loop.run_in_executor(None, sys.stdin.readline)
                if not user_input:
                    break  # EOF
                if user_input.strip():
                    await self.chat_client.send_chat(user_input.strip())
        except asyncio.CancelledError:
            pass
        finally:
            listener_task.cancel()
            try:
                await listener_task
            except asyncio.CancelledError:
                pass
            await self.close()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Chat Hub Client')
    parser.add_argument('--server-ip', type=str, default=DEFAULT_HOST,
                        help=f'Server IP address (default: {DEFAULT_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'Server port (default: {DEFAULT_PORT})')
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    client = ChatHubClient(host=args.server_ip, port=args.port)

    try:
        asyncio.run(client.interactive_mode())
    except KeyboardInterrupt:
        print("\n[INFO] Interrupted by user")
    except Exception as e:
        logger.log_error("client", e)


if __name__ == "__main__":
    main()
