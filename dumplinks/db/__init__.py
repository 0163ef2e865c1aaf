"""Database layer package.

Public re-exports so callers can write::

    from dumplinks.db import get_connection, init_db
"""

from dumplinks.db.connection import get_connection
from dumplinks.db.migrations import init_db

__all__ = ["get_connection", "init_db"]
