# booking_provisioning/storage/__init__.py

"""Storage module initialization.

Provides SQLite connection setup and schema initialization.
"""

from .sqlite_base import (
    open_sqlite_connection,
    init_sqlite_db,
    close_sqlite_connection
)

__all__ = [
    "open_sqlite_connection",
    "init_sqlite_db",
    "close_sqlite_connection"
]
