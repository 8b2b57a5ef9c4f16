from typing import Union
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from ..config import AppConfig, HostConfig
from ..domain.models import HostRole, PgHost
from ..exceptions import ConfigurationError
from .base import SQLAlchemyConnector
from .postgres import PostgresConnector
from .topology import StaticClusterTopology

DEFAULT_PORT = 5432

def host_from_config(config: HostConfig) -> PgHost:
    """Host identity from the connection URL, without the credentials."""
    try:
        url = make_url(config.connection_string)
    except ArgumentError as e:
        raise ConfigurationError(f"Invalid connection string for host '{config.alias}': {e}")

    if url.get_backend_name() == "sqlite":
        address = url.database or ":memory:"
    else:
        address = f"{url.host or 'localhost'}:{url.port or DEFAULT_PORT}/{url.database or ''}"
    return PgHost(name=config.alias, address=address, role=config.role)

def get_connector(config: Union[str, HostConfig], alias: str = "unknown") -> SQLAlchemyConnector:
    """
    Factory function to create the appropriate connector instance.
    Accepts either a connection string (str) or a HostConfig object.
    """
    if not isinstance(config, HostConfig):
        config = HostConfig(alias=alias, connection_string=config, role=HostRole.PRIMARY)

    host = host_from_config(config)
    if config.connection_string.startswith(("postgresql", "postgres")):
        return PostgresConnector(config.connection_string, host)
    # Default fallback to SQLAlchemy generic
    return SQLAlchemyConnector(config.connection_string, host)

def build_topology(app_config: AppConfig) -> StaticClusterTopology:
    if not app_config.hosts:
        raise ConfigurationError("No hosts configured")

    primary = get_connector(app_config.primary_host())
    replicas = [get_connector(h) for h in app_config.hosts if h.role == HostRole.REPLICA]
    return StaticClusterTopology(primary, replicas)
