import logging
import sqlite3
from typing import Optional

from st.errors import DuplicateLinkError, StorageError

logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """CREATE TABLE IF NOT EXISTS links (
    name TEXT NOT NULL PRIMARY KEY,
    url TEXT NOT NULL
)"""


class LinkStore:
    """SQLite-backed table of short names and the URLs they point to.

    Every call opens its own connection and runs a single statement, so the
    store can be shared between the server's worker threads. Isolation
    between concurrent inserts is left to SQLite.
    """

    def __init__(self, path: str):
        self.path = path

    def __repr__(self) -> str:
        return f"LinkStore({self.path!r})"

    def get_db_connection(self) -> sqlite3.Connection:
        """Opens a connection to the link database."""
        try:
            return sqlite3.connect(self.path)
        except sqlite3.Error as e:
            raise StorageError(f"error opening sqlite db {self.path}: {e}") from e

    def initialize(self) -> None:
        """Creates the links table if it does not exist yet."""
        conn = self.get_db_connection()
        try:
            with conn:
                conn.execute(CREATE_TABLE_SQL)
        except sqlite3.Error as e:
            raise StorageError(f"error initializing database {self.path}: {e}") from e
        finally:
            conn.close()
        logger.info("Link database ready at %s", self.path)

    def add_link(self, name: str, url: str) -> None:
        """Inserts a new link. Existing names are rejected, never overwritten."""
        conn = self.get_db_connection()
        try:
            with conn:
                conn.execute("INSERT INTO links (name, url) VALUES (?, ?)", (name, url))
        except sqlite3.IntegrityError as e:
            raise DuplicateLinkError(name) from e
        except sqlite3.Error as e:
            raise StorageError(f"error adding link {name}: {e}") from e
        finally:
            conn.close()

    def get_link(self, name: str) -> Optional[str]:
        """Returns the URL stored for ``name``, or None if there is no such link."""
        logger.info("Fetching link %s", name)
        conn = self.get_db_connection()
        try:
            row = conn.execute("SELECT url FROM links WHERE name = ?", (name,)).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"error retrieving link {name}: {e}") from e
        finally:
            conn.close()

        if row is None:
            logger.info("link not found")
            return None
        return row[0]
