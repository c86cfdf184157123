#!/usr/bin/env python3
"""
Chat Hub Server - Main Entry Point

Runs the broadcast chat hub: every client gets a username from the name pool
and every chat message is relayed to all connected clients.

Usage:
    python main_server.py

Optional arguments:
    --host HOST           Bind address (default: 0.0.0.0)
    --port PORT           TCP port (default: 4000)
    --strict-messages     Drop messages from connections without a username
    --log-file FILE       Also write logs to FILE
    --debug               Enable debug logging
"""

from server.main_server import main


if __name__ == "__main__":
    main()
