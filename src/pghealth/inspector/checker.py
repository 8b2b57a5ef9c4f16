import logging
from typing import List
from ..domain.interfaces import ClusterTopology
from ..domain.models import ConnectionHealth, HealthStatus

logger = logging.getLogger(__name__)

class ConnectionChecker:
    """
    SRP: Responsible only for connectivity checks.
    """
    def __init__(self, topology: ClusterTopology):
        self.topology = topology

    def check_health(self) -> List[ConnectionHealth]:
        results = []
        for connection in self.topology.all_connections():
            health = connection.check_health()
            logger.debug("Host %s: %s (%sms)", connection.host, health.status.value, health.latency_ms)
            results.append(health)
        return results

    def all_healthy(self, results: List[ConnectionHealth]) -> bool:
        return all(r.status == HealthStatus.SUCCESS for r in results)
