from typing import List, Optional
from pydantic import BaseModel
from ..checks.database import DatabaseChecks
from ..domain.context import PgContext
from ..domain.exclusions import Exclusion
from ..domain.interfaces import ClusterTopology
from ..domain.models import ConnectionHealth
from .checker import ConnectionChecker
from .summary import DiagnosticCount, HealthInspector, HealthSummary

class InspectionReport(BaseModel):
    health: List[ConnectionHealth]
    summary: Optional[HealthSummary] = None

class InspectorFacade:
    """
    Facade Pattern: connectivity first, then the health summary.
    """
    def __init__(
        self,
        topology: ClusterTopology,
        context: Optional[PgContext] = None,
        exclusion: Optional[Exclusion] = None,
        max_workers: int = 1,
    ):
        self._checker = ConnectionChecker(topology)
        self._topology = topology
        self._context = context
        self._exclusion = exclusion
        self._max_workers = max_workers

    def run_diagnostics(self) -> InspectionReport:
        # 1. Check connections first (Fail Fast)
        health = self._checker.check_health()
        if not self._checker.all_healthy(health):
            return InspectionReport(health=health, summary=None)

        # 2. Run every diagnostic only if all hosts answer
        checks = DatabaseChecks(self._topology, max_workers=self._max_workers)
        summary = HealthInspector(checks, self._context, self._exclusion).run()
        return InspectionReport(health=health, summary=summary)

__all__ = [
    "ConnectionChecker",
    "DiagnosticCount",
    "HealthInspector",
    "HealthSummary",
    "InspectionReport",
    "InspectorFacade",
]
