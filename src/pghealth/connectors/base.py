import logging
import time
from typing import Any, Dict, List, Mapping, Optional
from sqlalchemy import create_engine, text, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from ..domain.models import HealthStatus, ConnectionHealth, PgHost
from ..exceptions import ConnectionError, QueryExecutionFailed

logger = logging.getLogger(__name__)

SLOW_RESPONSE_MS = 5000

class SQLAlchemyConnector:
    """
    Read-only connection to a single database host.
    Generic for any SQLAlchemy dialect, specialized for PostgreSQL in postgres.py.
    """
    def __init__(self, connection_string: str, host: PgHost):
        self.connection_string = connection_string
        self._host = host
        self._engine: Optional[Engine] = None

    @property
    def host(self) -> PgHost:
        return self._host

    @staticmethod
    def _enforce_read_only_listener(conn, cursor, statement, parameters, context, executemany):
        """
        Strategy 1: Event Hook (Interceptor).
        Blocks any SQL that doesn't start with a whitelist keyword.
        """
        sql = statement.strip().upper()

        allowed_starts = (
            "SELECT",
            "WITH",
            "EXPLAIN",
            "SHOW",
            "SET",  # session configuration only
        )

        if not any(sql.startswith(keyword) for keyword in allowed_starts):
            raise PermissionError(
                f"SAFETY BLOCK: Operation blocked! Only read-only queries are allowed. "
                f"Attempted: {sql[:50]}..."
            )

    def _engine_options(self) -> Dict[str, Any]:
        return {}

    def _register_listeners(self, engine: Engine) -> None:
        event.listen(engine, "before_cursor_execute", self._enforce_read_only_listener)

    def connect(self) -> None:
        if not self._engine:
            try:
                # Create engine but don't connect yet (lazy)
                engine = create_engine(self.connection_string, **self._engine_options())
                self._register_listeners(engine)
                self._engine = engine
            except (SQLAlchemyError, ImportError) as e:
                raise ConnectionError(f"Failed to create engine for host {self._host}: {e}")

    def close(self) -> None:
        if self._engine:
            self._engine.dispose()
            self._engine = None

    def execute(
        self,
        query: str,
        params: Optional[Mapping[str, Any]] = None,
        timeout_ms: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        self.connect()
        try:
            with self._engine.connect() as conn:
                if timeout_ms:
                    # Local to the implicit transaction, gone once the query returns
                    conn.execute(
                        text("select set_config('statement_timeout', :timeout, true)"),
                        {"timeout": f"{timeout_ms}ms"},
                    )
                result = conn.execute(text(query), dict(params or {}))
                return [dict(row) for row in result.mappings()]
        except SQLAlchemyError as e:
            raise QueryExecutionFailed(self._host.name, str(e), e) from e

    def check_health(self) -> ConnectionHealth:
        start_time = time.time()
        status = HealthStatus.FAILED
        error_msg = None

        try:
            self.connect()
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
                status = HealthStatus.SUCCESS
        except (SQLAlchemyError, ConnectionError) as e:
            error_msg = str(e)
            status = HealthStatus.FAILED
            logger.warning("Host %s is unreachable: %s", self._host, e)

        latency = (time.time() - start_time) * 1000  # ms

        # Driver timeouts surface as errors, this only flags slow successful pings
        if latency > SLOW_RESPONSE_MS and status == HealthStatus.SUCCESS:
            status = HealthStatus.TIMEOUT

        return ConnectionHealth(
            host_name=self._host.name,
            status=status,
            latency_ms=round(latency, 2),
            error_message=error_msg,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._host})"
