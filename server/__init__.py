"""
Server package for the Chat Hub.

This package contains all server-side functionality including:
- Client connection management
- Username assignment
- Chat message broadcasting
- Configuration and utilities
"""
