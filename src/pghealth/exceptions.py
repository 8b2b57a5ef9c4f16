from typing import Optional


class PgHealthException(Exception):
    """Base Exception Class"""
    pass

class ConnectionError(PgHealthException):
    """Connection Failure"""
    pass

class ConfigurationError(PgHealthException):
    """Configuration Error"""
    pass

class InvalidIdentifier(PgHealthException):
    """Schema name is not a legal SQL identifier"""

    def __init__(self, value: object):
        super().__init__(f"Not a valid SQL identifier: {value!r}")
        self.value = value

class QueryExecutionFailed(PgHealthException):
    """Query failed on a single host (connectivity or SQL error)"""

    def __init__(self, host: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(f"Query execution failed on host '{host}': {message}")
        self.host = host
        self.cause = cause

class MisconfiguredAcrossClusterDiagnostic(ConfigurationError):
    """Across-cluster diagnostic wired without a merge strategy"""

    def __init__(self, diagnostic_name: str):
        super().__init__(
            f"Merge strategy is required for across-cluster diagnostic '{diagnostic_name}'"
        )
        self.diagnostic_name = diagnostic_name
