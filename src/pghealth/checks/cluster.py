import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Dict, List, Optional, Sequence
from ..catalog import get_query_provider
from ..domain.context import PgContext
from ..domain.exclusions import Exclusion
from ..domain.interfaces import ClusterTopology, HostConnection
from ..domain.models import DbObject, PgHost
from ..exceptions import MisconfiguredAcrossClusterDiagnostic
from .diagnostics import Diagnostic, MergeStrategy
from .host import CheckOnHost
from .statistics import StatisticsOnHost

logger = logging.getLogger(__name__)


class CheckOnCluster:
    """
    Runs one diagnostic against a cluster.

    On-primary diagnostics run once on the primary and the result is returned as is.
    Across-cluster diagnostics run on every host in topology order and the per-host
    results are combined by the merge strategy. A failure on any host fails the whole call.

    One CheckOnHost is created per host on first use and reused afterwards.
    Safe to share between caller threads.
    """

    def __init__(
        self,
        topology: ClusterTopology,
        diagnostic: Diagnostic,
        merge_strategy: Optional[MergeStrategy] = None,
        max_workers: int = 1,
    ):
        merge_strategy = merge_strategy or diagnostic.merge_strategy
        if diagnostic.is_across_cluster() and merge_strategy is None:
            raise MisconfiguredAcrossClusterDiagnostic(diagnostic.name)
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        self.diagnostic = diagnostic
        self.merge_strategy = merge_strategy
        self._topology = topology
        self._provider = get_query_provider(diagnostic)
        self._max_workers = max_workers
        self._checks_on_hosts: Dict[PgHost, CheckOnHost] = {}
        self._stats_resets: Dict[PgHost, Optional[datetime]] = {}
        self._lock = threading.Lock()

    def check_on_host(self, connection: HostConnection) -> CheckOnHost:
        host = connection.host
        with self._lock:
            check = self._checks_on_hosts.get(host)
            if check is None:
                check = CheckOnHost(connection, self.diagnostic, self._provider)
                self._checks_on_hosts[host] = check
            return check

    def last_stats_reset(self, host: PgHost) -> Optional[datetime]:
        """Last statistics reset seen for the host during a runtime across-cluster check."""
        with self._lock:
            return self._stats_resets.get(host)

    def check(self, context: Optional[PgContext] = None, exclusion: Optional[Exclusion] = None) -> List[DbObject]:
        if not self.diagnostic.is_across_cluster():
            return self.check_on_host(self._topology.primary_connection()).check(context, exclusion)

        connections = self._topology.all_connections()
        if self.diagnostic.is_runtime():
            self._refresh_stats_resets(connections)

        checks = [self.check_on_host(connection) for connection in connections]
        results = self._run_on_hosts(checks, context, exclusion)
        return self.merge_strategy(results)

    def _refresh_stats_resets(self, connections: Sequence[HostConnection]) -> None:
        for connection in connections:
            last_reset = StatisticsOnHost(connection).log_last_reset()
            with self._lock:
                self._stats_resets[connection.host] = last_reset

    def _run_on_hosts(
        self,
        checks: Sequence[CheckOnHost],
        context: Optional[PgContext],
        exclusion: Optional[Exclusion],
    ) -> List[List[DbObject]]:
        if self._max_workers == 1 or len(checks) <= 1:
            return [check.check(context, exclusion) for check in checks]

        workers = min(self._max_workers, len(checks))
        logger.debug("Running '%s' on %d hosts with %d workers", self.diagnostic.name, len(checks), workers)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(check.check, context, exclusion) for check in checks]
            try:
                # Collected in topology order whatever the completion order.
                return [future.result() for future in futures]
            except Exception:
                for future in futures:
                    future.cancel()
                raise

    def __repr__(self) -> str:
        return f"CheckOnCluster({self.diagnostic.name})"


def build_check_on_cluster(
    topology: ClusterTopology,
    diagnostic: Diagnostic,
    merge_strategy: Optional[MergeStrategy] = None,
    max_workers: int = 1,
) -> CheckOnCluster:
    return CheckOnCluster(topology, diagnostic, merge_strategy, max_workers)
