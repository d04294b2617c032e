"""Neo4j-backed key-value persistence for the team manager collections."""

import json
import logging
import os
from contextlib import contextmanager
from typing import Any, Generator, Optional

from neo4j import GraphDatabase, Driver, Session
from neo4j.exceptions import ClientError

logger = logging.getLogger(__name__)


class Neo4jDatabase:
    """Neo4j database connection manager.

    Each logical collection is stored as a single ``(:Collection {key})`` node
    holding the JSON-encoded value. Writes always replace the whole value.
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
    ):
        self.uri = uri or os.getenv("NEO4J_URI", "bolt://localhost:7687")
        self.user = user or os.getenv("NEO4J_USER", "neo4j")
        self.password = password or os.getenv("NEO4J_PASSWORD", "password")
        self._driver: Optional[Driver] = None

    def connect(self) -> None:
        """Establish connection to Neo4j database."""
        if self._driver is None:
            self._driver = GraphDatabase.driver(
                self.uri,
                auth=(self.user, self.password),
            )

    def close(self) -> None:
        """Close database connection."""
        if self._driver:
            self._driver.close()
            self._driver = None

    @property
    def driver(self) -> Driver:
        """Get the database driver, connecting if necessary."""
        if self._driver is None:
            self.connect()
        return self._driver  # type: ignore

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Create a database session context manager."""
        session = self.driver.session()
        try:
            yield session
        finally:
            session.close()

    def execute_query(
        self, query: str, parameters: Optional[dict[str, Any]] = None
    ) -> list[dict[str, Any]]:
        """Execute a Cypher query and return results."""
        with self.session() as session:
            result = session.run(query, parameters or {})
            return [dict(record) for record in result]

    def execute_write(
        self, query: str, parameters: Optional[dict[str, Any]] = None
    ) -> None:
        """Execute a write query."""
        with self.session() as session:
            session.run(query, parameters or {})

    def load_collection(self, key: str, default: Any = None) -> Any:
        """Return the stored value for ``key``, or ``default`` if never saved."""
        rows = self.execute_query(
            "MATCH (c:Collection {key: $key}) RETURN c.value as value",
            {"key": key},
        )
        if not rows or rows[0]["value"] is None:
            return default
        return json.loads(rows[0]["value"])

    def save_collection(self, key: str, value: Any) -> None:
        """Replace the stored value for ``key``."""
        self.execute_write(
            """
            MERGE (c:Collection {key: $key})
            SET c.value = $value
            """,
            {"key": key, "value": json.dumps(value, ensure_ascii=False)},
        )
        logger.debug("Saved collection %s", key)

    def clear_database(self) -> None:
        """Remove every stored collection."""
        self.execute_write("MATCH (c:Collection) DETACH DELETE c")

    def create_constraints(self) -> None:
        """Create the uniqueness constraint on collection keys."""
        try:
            self.execute_write(
                "CREATE CONSTRAINT collection_key IF NOT EXISTS "
                "FOR (c:Collection) REQUIRE c.key IS UNIQUE"
            )
        except ClientError as exc:
            logger.debug("Constraint not created: %s", exc)
