"""
Client package for the Chat Hub.

This package contains all client-side functionality including:
- Connecting to the hub
- Chat messaging
- Configuration and utilities
"""
