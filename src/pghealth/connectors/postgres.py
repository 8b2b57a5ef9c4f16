import logging
from typing import Any, Dict
from sqlalchemy import event
from sqlalchemy.engine import Engine
from .base import SQLAlchemyConnector

logger = logging.getLogger(__name__)

APPLICATION_NAME = "pghealth"

class PostgresConnector(SQLAlchemyConnector):
    """
    PostgreSQL specific implementation.
    On top of the statement whitelist, every session is switched to READ ONLY transactions.
    """

    @staticmethod
    def _set_readonly_session_listener(dbapi_connection, connection_record):
        """
        Strategy 2: Transaction-Level Read-Only Mode.
        Runs on the raw DBAPI connection once, right after it is opened.
        """
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("SET SESSION CHARACTERISTICS AS TRANSACTION READ ONLY")
        finally:
            cursor.close()
        dbapi_connection.commit()

    def _engine_options(self) -> Dict[str, Any]:
        return {
            "pool_pre_ping": True,
            "connect_args": {"application_name": APPLICATION_NAME},
        }

    def _register_listeners(self, engine: Engine) -> None:
        super()._register_listeners(engine)
        event.listen(engine, "connect", self._set_readonly_session_listener)
        logger.debug("Registered read-only listeners for host %s", self.host)
