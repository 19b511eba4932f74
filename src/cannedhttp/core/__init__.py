"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing underneath the HTTP layer.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  • Creates the TCP listening socket, binds IP:PORT                  │
    │  • Runs the accept() loop                                           │
    │  • Hands every new connection to HTTPServer                         │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ one thread per connection
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  • Wraps a client socket                                            │
    │  • Buffered reading (TCP is a stream, not messages!)                │
    │  • Tracks state (NEW → READING → PROCESSING → WRITING)              │
    │  • Half-closes on the way out                                       │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # Listener - accepts connections
    "Connection",       # Wrapper for client socket - handles I/O
    "ConnectionState",  # Enum for connection lifecycle states
]
