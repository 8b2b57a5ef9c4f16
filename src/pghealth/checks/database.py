from typing import Dict, FrozenSet, List, Optional, Union
from ..domain.context import PgContext
from ..domain.exclusions import Exclusion
from ..domain.interfaces import ClusterTopology
from ..domain.models import DbObject
from ..exceptions import ConfigurationError
from .cluster import CheckOnCluster
from .diagnostics import ALL_DIAGNOSTICS, Diagnostic, get_diagnostic, list_diagnostics


class DatabaseChecks:
    """
    Entry point for running diagnostics against a cluster.
    Every registered diagnostic gets its coordinator up front, so wiring errors surface here.
    """
    def __init__(self, topology: ClusterTopology, max_workers: int = 1):
        self._topology = topology
        self._checks: Dict[str, CheckOnCluster] = {
            d.name: CheckOnCluster(topology, d, max_workers=max_workers) for d in ALL_DIAGNOSTICS
        }

    def list_diagnostics(self) -> FrozenSet[Diagnostic]:
        return list_diagnostics()

    def get_check(self, diagnostic: Union[Diagnostic, str]) -> CheckOnCluster:
        name = diagnostic if isinstance(diagnostic, str) else diagnostic.name
        check = self._checks.get(get_diagnostic(name).name)
        if check is None:
            raise ConfigurationError(f"No check registered for diagnostic '{name}'")
        return check

    def check(
        self,
        diagnostic: Union[Diagnostic, str],
        context: Optional[PgContext] = None,
        exclusion: Optional[Exclusion] = None,
    ) -> List[DbObject]:
        return self.get_check(diagnostic).check(context, exclusion)
