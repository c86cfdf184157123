"""
Shared constants for the Chat Hub.

This module contains all constants used across client and server components.
"""

# Network Configuration
DEFAULT_HOST = 'localhost'
DEFAULT_SERVER_HOST = '0.0.0.0'
DEFAULT_PORT = 4000

# Buffer Sizes
MAX_MESSAGE_SIZE = 1024 * 1024  # 1MB per line
# Relayed chat frames carry the sender line plus username and senderId
CLIENT_READ_LIMIT = 2 * MAX_MESSAGE_SIZE

# Timeouts
SEND_TIMEOUT = 5.0  # seconds per delivery

# Reconnection
MAX_RETRY_ATTEMPTS = 3
RECONNECT_ATTEMPTS = 5
RECONNECT_DELAY_BASE = 1.0  # seconds

# Logging
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Username pool, handed out in this order
CANDIDATE_NAMES = (
    'Bilal',
    'Noman',
    'Azeem',
    'Khuzaima',
    'Ahmed',
    'Ali',
    'Hassan',
    'Usman',
    'Hamza',
    'Zain',
    'Fahad',
    'Saad',
    'Omar',
    'Ibrahim',
    'Yousuf',
    'Haris',
    'Adnan',
    'Imran',
    'Tariq',
    'Shahid',
)


# Event Types
class EventTypes:
    # Client to Server
    MESSAGE = 'message'

    # Server to Client
    ASSIGNED_USERNAME = 'assigned-username'
    ONLINE_USERS = 'online-users'
    USER_JOINED = 'user-joined'
    USER_LEFT = 'user-left'
    ERROR = 'error'
