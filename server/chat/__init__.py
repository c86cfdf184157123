"""
Chat module for server-side messaging functionality.

Handles:
- Username pool management
- Participant presence tracking
- Chat message broadcasting
"""
