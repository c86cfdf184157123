"""
Chat module for client-side messaging functionality.

Handles:
- Sending chat messages
- Rendering chat messages from other participants
"""
