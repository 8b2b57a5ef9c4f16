from typing import List, Sequence
from ..domain.interfaces import HostConnection

class StaticClusterTopology:
    """
    Fixed primary plus replicas, resolved from configuration.
    Failover detection is left to whoever builds the topology.
    """
    def __init__(self, primary: HostConnection, replicas: Sequence[HostConnection] = ()):
        if primary is None:
            raise ValueError("primary cannot be None")
        self._primary = primary
        self._replicas = list(replicas)

    def primary_connection(self) -> HostConnection:
        return self._primary

    def all_connections(self) -> List[HostConnection]:
        return [self._primary, *self._replicas]

    def close(self) -> None:
        for connection in self.all_connections():
            connection.close()
