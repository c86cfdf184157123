#!/usr/bin/env python3
"""
Chat Hub Server - Main Entry Point

This is the main entry point for the server application.
It accepts TCP connections speaking line-delimited JSON and feeds their
connect, message and disconnect events into the chat server.
"""

import argparse
import asyncio
import json
import logging
import uuid

import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from server.chat.chat_server import ChatServer
from server.utils.config import ServerConfig
from server.utils.logger import logger
from common.constants import EventTypes, DEFAULT_SERVER_HOST, DEFAULT_PORT
from common.protocol_definitions import (
    FrameTooLargeError, read_frame, decode_message, create_error_message
)


class ChatHubServer:
    """Main server class that wires the TCP transport to the chat server."""

    def __init__(self, config: ServerConfig = None, chat_server: ChatServer = None):
        self.config = config or ServerConfig()
        self.chat_server = chat_server or ChatServer(
            strict_messages=self.config.strict_messages,
            send_timeout=self.config.send_timeout
        )
        self.server = None

    @staticmethod
    def get_next_connection_id() -> str:
        """Issue a fresh opaque connection id."""
        return uuid.uuid4().hex

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """Handle individual client connection."""
        addr = writer.get_extra_info('peername')
        connection_id = self.get_next_connection_id()

        logger.log_connection(addr, connection_id)

        try:
            await self.chat_server.handle_connect(connection_id, writer)

            while True:
                # Read line-delimited JSON
                try:
                    data = await read_frame(reader)
                except FrameTooLargeError:
                    logger.warning(f"Message too large from connection_id={connection_id}")
                    await self.chat_server.send_message(connection_id, create_error_message("Message too large"))
                    continue

                if not data:
                    break

                await self.dispatch(connection_id, data)

        except asyncio.CancelledError:
            logger.info(f"Connection cancelled for connection_id={connection_id}")
        except ConnectionError as e:
            logger.warning(f"Connection lost for connection_id={connection_id}: {e}")
        except Exception as e:
            logger.error(f"Socket error for connection_id={connection_id}: {e}")
        finally:
            await self.chat_server.handle_disconnect(connection_id)
            writer.close()
            try:
                await writer.wait_closed()
            except Exception as e:
                logger.debug(f"Error closing connection_id={connection_id}: {e}")

    async def dispatch(self, connection_id: str, data: bytes):
        """Parse one frame and route it to the matching handler."""
        try:
            message = decode_message(data)
        except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as e:
            logger.error(f"Malformed JSON from connection_id={connection_id}: {e}")
            await self.chat_server.send_message(connection_id, create_error_message("Malformed JSON"))
            return

        msg_type = message.get('type', '')
        if not isinstance(msg_type, str) or len(msg_type) == 0:
            logger.warning(f"Received message with invalid type from connection_id={connection_id}")
            await self.chat_server.send_message(connection_id, create_error_message("Missing message type"))
            return

        logger.debug(f"Received from connection_id={connection_id}: {msg_type}")

        if msg_type == EventTypes.MESSAGE:
            # Support both "message" and "text" fields for compatibility
            payload = message.get('message', message.get('text'))
            if payload is None:
                await self.chat_server.send_message(connection_id, create_error_message("Missing message payload"))
                return
            if not isinstance(payload, str):
                logger.warning(f"Non-string payload from connection_id={connection_id}")
                await self.chat_server.send_message(connection_id, create_error_message("Message payload must be a string"))
                return
            await self.chat_server.handle_message(connection_id, payload)
        else:
            logger.warning(f"Unknown message type '{msg_type}' from connection_id={connection_id}")
            await self.chat_server.send_message(connection_id, create_error_message(f"Unknown message type '{msg_type}'"))

    async def start(self):
        """Bind the listening socket."""
        self.server = await asyncio.start_server(
            self.handle_client,
            self.config.host,
            self.config.port,
            limit=self.config.max_message_size
        )

        addr = ', '.join(str(sock.getsockname()) for sock in self.server.sockets)
        logger.info(f"Server listening on {addr}")
        return self.server

    async def serve_forever(self):
        """Start the server and run until cancelled."""
        server = await self.start()
        async with server:
            await server.serve_forever()

    async def stop(self):
        """Stop accepting connections."""
        if self.server is not None:
            self.server.close()
            await self.server.wait_closed()
            self.server = None


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Chat Hub Server')
    parser.add_argument('--host', type=str, default=DEFAULT_SERVER_HOST,
                        help=f'Host to bind to (default: {DEFAULT_SERVER_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'TCP port to listen on (default: {DEFAULT_PORT})')
    parser.add_argument('--strict-messages', action='store_true',
                        help='Drop chat messages from connections without a username')
    parser.add_argument('--log-file', type=str, default=None,
                        help='Also write logs to this file')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        strict_messages=args.strict_messages,
        log_file=args.log_file
    )
    logger.configure(logging.DEBUG if args.debug else logging.INFO, config.log_file)

    info = config.get_connection_info()
    logger.info(f"Server binding to {info['host']}:{info['port']}")
    server = ChatHubServer(config)

    try:
        asyncio.run(server.serve_forever())
    except KeyboardInterrupt:
        logger.info("Server shutting down...")
    except Exception as e:
        logger.log_error("server", e)
        raise


if __name__ == "__main__":
    main()
