"""Broker connection state enumeration."""
from enum import Enum


class ConnectionState(Enum):
    """Enumeration of all possible broker session states."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"  # Reported once, then folds back to DISCONNECTED
