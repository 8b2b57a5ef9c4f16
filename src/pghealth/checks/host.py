import logging
from typing import Any, Dict, List, Optional
from ..catalog import QueryProvider, get_query_provider
from ..domain.context import DEFAULT_CONTEXT, PgContext
from ..domain.exclusions import Exclusion, exclude_nothing
from ..domain.interfaces import HostConnection
from ..domain.models import DbObject, PgHost
from ..exceptions import PgHealthException, QueryExecutionFailed
from .diagnostics import Diagnostic, QueryParams

logger = logging.getLogger(__name__)


def bind_params(diagnostic: Diagnostic, context: PgContext) -> Dict[str, Any]:
    """Named parameters for the diagnostic query. The schema name is always bound, never inlined."""
    params: Dict[str, Any] = {"schema_name_param": context.schema_name}
    if diagnostic.query_params == QueryParams.SCHEMA_AND_BLOAT:
        params["bloat_percentage_threshold"] = context.bloat_percentage_threshold
    elif diagnostic.query_params == QueryParams.SCHEMA_AND_REMAINING:
        params["remaining_percentage_threshold"] = context.remaining_percentage_threshold
    return params


class CheckOnHost:
    """
    Runs one diagnostic against one host.
    Rows are mapped to entities, filtered by the exclusion and returned in natural order.
    """
    def __init__(self, connection: HostConnection, diagnostic: Diagnostic, provider: Optional[QueryProvider] = None):
        self.connection = connection
        self.diagnostic = diagnostic
        self.provider = provider or get_query_provider(diagnostic)

    @property
    def host(self) -> PgHost:
        return self.connection.host

    def check(self, context: Optional[PgContext] = None, exclusion: Optional[Exclusion] = None) -> List[DbObject]:
        context = context or DEFAULT_CONTEXT
        exclusion = exclusion or exclude_nothing()

        logger.debug(
            "Going to execute '%s' on host %s (schema '%s')",
            self.diagnostic.name, self.host, context.schema_name,
        )
        try:
            rows = self.connection.execute(
                self.provider.sql,
                bind_params(self.diagnostic, context),
                timeout_ms=context.statement_timeout_ms,
            )
        except PgHealthException:
            raise
        except Exception as e:
            raise QueryExecutionFailed(self.host.name, str(e), e) from e
        try:
            entities = [self.provider.map_row(row) for row in rows]
        except (ValueError, KeyError, TypeError) as e:
            raise QueryExecutionFailed(
                self.host.name, f"Unexpected row shape for '{self.diagnostic.name}': {e}", e,
            ) from e
        result = sorted(entity for entity in entities if not exclusion(entity))
        logger.debug(
            "'%s' on host %s returned %d row(s), %d after exclusions",
            self.diagnostic.name, self.host, len(entities), len(result),
        )
        return result

    def __repr__(self) -> str:
        return f"CheckOnHost({self.diagnostic.name}, {self.host})"


def execute_on_host(
    connection: HostConnection,
    diagnostic: Diagnostic,
    context: Optional[PgContext] = None,
    exclusion: Optional[Exclusion] = None,
) -> List[DbObject]:
    return CheckOnHost(connection, diagnostic).check(context, exclusion)
