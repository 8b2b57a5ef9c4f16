import logging
from datetime import datetime
from typing import Iterable, List, Optional
from pydantic import BaseModel, Field
from ..checks.database import DatabaseChecks
from ..checks.diagnostics import Diagnostic, list_diagnostics
from ..domain.context import PgContext
from ..domain.exclusions import Exclusion

logger = logging.getLogger(__name__)

class DiagnosticCount(BaseModel):
    diagnostic_name: str
    count: int

class HealthSummary(BaseModel):
    generated_at: datetime = Field(default_factory=datetime.now)
    counts: List[DiagnosticCount] = []

    @property
    def total(self) -> int:
        return sum(c.count for c in self.counts)

    def to_lines(self) -> List[str]:
        """One tab-separated line per diagnostic: timestamp, name, number of findings."""
        timestamp = self.generated_at.isoformat(timespec="seconds")
        return [f"{timestamp}\t{c.diagnostic_name}\t{c.count}" for c in self.counts]

class HealthInspector:
    """
    Runs a set of diagnostics and counts the findings of each.
    A failing diagnostic fails the whole summary.
    """
    def __init__(
        self,
        checks: DatabaseChecks,
        context: Optional[PgContext] = None,
        exclusion: Optional[Exclusion] = None,
    ):
        self.checks = checks
        self.context = context
        self.exclusion = exclusion

    def run(self, diagnostics: Optional[Iterable[Diagnostic]] = None) -> HealthSummary:
        if diagnostics is None:
            diagnostics = list_diagnostics()
        selected = sorted(diagnostics, key=lambda d: d.name)
        counts = []
        for diagnostic in selected:
            findings = self.checks.check(diagnostic, self.context, self.exclusion)
            if findings:
                logger.warning("%s: %d finding(s)", diagnostic.name, len(findings))
            counts.append(DiagnosticCount(diagnostic_name=diagnostic.name, count=len(findings)))
        return HealthSummary(counts=counts)
