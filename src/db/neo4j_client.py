from neo4j import GraphDatabase, Driver
from config.settings import settings
from utils.logger import logger
from typing import Optional, List

class Neo4jClient:
    def __init__(self, uri: str = None, user: str = None, password: str = None):
        self.uri = uri or settings.NEO4J_URI
        self.user = user or settings.NEO4J_USER
        self.password = password if password is not None else settings.NEO4J_PASSWORD
        self._driver: Optional[Driver] = None

    @property
    def driver(self) -> Driver:
        # Connect on first use so importing the module never opens a socket
        if self._driver is None:
            self._driver = GraphDatabase.driver(
                self.uri,
                auth=(self.user, self.password),
                connection_timeout=30,
                max_connection_lifetime=300,
            )
            self._verify_connection()
        return self._driver

    def _verify_connection(self) -> None:
        with self._driver.session() as session:
            session.run("RETURN 1 AS test")
        logger.info("Neo4j connection established")

    def close(self) -> None:
        if self._driver is None:
            return
        self._driver.close()
        self._driver = None
        logger.info("Neo4j connection closed")

    def execute_query(self, query: str, params: dict = None) -> List[dict]:
        with self.driver.session() as session:
            result = session.run(query, params or {})
            return [dict(record) for record in result]

# Singleton instance
neo4j_client = Neo4jClient()
