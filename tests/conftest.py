import threading
from typing import Any, Dict, List, Optional
import pytest
from pghealth.catalog import load_sql
from pghealth.checks.statistics import LAST_STATS_RESET_QUERY
from pghealth.domain.models import ConnectionHealth, HealthStatus, HostRole, PgHost


class FakeConnection:
    """In-process stand-in for a host: answers diagnostic queries with canned rows."""

    def __init__(
        self,
        name: str,
        rows: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        role: HostRole = HostRole.PRIMARY,
        error: Optional[Exception] = None,
        stats_reset=None,
        healthy: bool = True,
    ):
        self.host = PgHost(name=name, address=f"{name}:5432/app", role=role)
        self.rows = rows or {}
        self.error = error
        self.stats_reset = stats_reset
        self.healthy = healthy
        self.calls = []
        self.closed = False
        self._lock = threading.Lock()

    def execute(self, query, params=None, timeout_ms=None):
        with self._lock:
            self.calls.append((query, dict(params or {}), timeout_ms))
        if query == LAST_STATS_RESET_QUERY:
            return [{"stats_reset": self.stats_reset}]
        if self.error is not None:
            raise self.error
        for diagnostic_name, rows in self.rows.items():
            if query == load_sql(diagnostic_name):
                return [dict(r) for r in rows]
        return []

    def diagnostic_calls(self):
        return [c for c in self.calls if c[0] != LAST_STATS_RESET_QUERY]

    def check_health(self) -> ConnectionHealth:
        if self.healthy:
            return ConnectionHealth(host_name=self.host.name, status=HealthStatus.SUCCESS, latency_ms=1.0)
        return ConnectionHealth(host_name=self.host.name, status=HealthStatus.FAILED, error_message="refused")

    def close(self) -> None:
        self.closed = True


class FakeTopology:
    def __init__(self, primary: FakeConnection, *replicas: FakeConnection):
        self.primary = primary
        self.replicas = list(replicas)
        self.primary_requests = 0
        self.all_requests = 0

    def primary_connection(self):
        self.primary_requests += 1
        return self.primary

    def all_connections(self):
        self.all_requests += 1
        return [self.primary, *self.replicas]


def unused_index_row(table, index, scans=0, size=8192):
    return {"table_name": table, "index_name": index, "index_size_in_bytes": size, "index_scans": scans}


def missing_index_row(table, seq_scans=100, index_scans=0, size=65536):
    return {"table_name": table, "table_size_in_bytes": size, "seq_scans": seq_scans, "index_scans": index_scans}


@pytest.fixture
def primary():
    return FakeConnection("primary")


@pytest.fixture
def replica():
    return FakeConnection("replica-1", role=HostRole.REPLICA)
