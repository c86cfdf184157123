#!/usr/bin/env python3
"""
Chat Hub Client - Main Entry Point

Console client for the chat hub. The hub picks your username; every line you
type is sent to all connected participants.

Usage:
    python main_client.py [--server-ip HOST] [--port PORT]
"""

from client.main_client import main


if __name__ == "__main__":
    main()
