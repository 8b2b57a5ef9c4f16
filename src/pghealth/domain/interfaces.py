from typing import Any, Dict, List, Mapping, Optional, Protocol, runtime_checkable
from .models import ConnectionHealth, PgHost

@runtime_checkable
class HostConnection(Protocol):
    """
    Interface for a connection to exactly one database host.
    """
    @property
    def host(self) -> PgHost:
        ...

    def execute(
        self,
        query: str,
        params: Optional[Mapping[str, Any]] = None,
        timeout_ms: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Runs a read-only query and returns every row as a dict keyed by column name."""
        ...

    def check_health(self) -> ConnectionHealth:
        ...

    def close(self) -> None:
        ...

@runtime_checkable
class ClusterTopology(Protocol):
    """
    Pre-resolved set of hosts. The primary comes first in all_connections().
    """
    def primary_connection(self) -> HostConnection:
        ...

    def all_connections(self) -> List[HostConnection]:
        ...
