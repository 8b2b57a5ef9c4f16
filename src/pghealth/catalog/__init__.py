from .provider import QueryProvider, get_query_provider, load_sql

__all__ = ["QueryProvider", "get_query_provider", "load_sql"]
