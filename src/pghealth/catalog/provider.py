from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
from ..checks.diagnostics import ALL_DIAGNOSTICS, Diagnostic
from ..domain.models import DbObject
from ..exceptions import ConfigurationError
from .mappers import RowMapper, map_duplicated_foreign_keys, map_duplicated_indexes, map_into

QUERIES_DIR = Path(__file__).parent / "queries"


@lru_cache(maxsize=None)
def load_sql(diagnostic_name: str) -> str:
    sql_path = QUERIES_DIR / f"{diagnostic_name}.sql"
    if not sql_path.exists():
        raise ConfigurationError(f"No query found for diagnostic '{diagnostic_name}': {sql_path}")
    return sql_path.read_text(encoding="utf-8").strip()


class QueryProvider:
    """
    Supplies the parametrized SQL and the row mapping for one diagnostic.
    """
    def __init__(self, diagnostic: Diagnostic, mapper: Optional[RowMapper] = None):
        self.diagnostic = diagnostic
        self._mapper = mapper or map_into(diagnostic.result_type)

    @property
    def sql(self) -> str:
        return load_sql(self.diagnostic.name)

    def map_row(self, row: Mapping[str, Any]) -> DbObject:
        return self._mapper(row)

    def __repr__(self) -> str:
        return f"QueryProvider({self.diagnostic.name})"


_CUSTOM_MAPPERS: Dict[str, RowMapper] = {
    "duplicated_indexes": map_duplicated_indexes,
    "intersected_indexes": map_duplicated_indexes,
    "duplicated_foreign_keys": map_duplicated_foreign_keys,
    "intersected_foreign_keys": map_duplicated_foreign_keys,
}

_PROVIDERS: Dict[str, QueryProvider] = {
    d.name: QueryProvider(d, _CUSTOM_MAPPERS.get(d.name)) for d in ALL_DIAGNOSTICS
}


def get_query_provider(diagnostic: Diagnostic) -> QueryProvider:
    provider = _PROVIDERS.get(diagnostic.name)
    if provider is None:
        raise ConfigurationError(f"No query provider registered for diagnostic '{diagnostic.name}'")
    return provider
