from typing import List, Optional
from pathlib import Path
import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, ValidationError, model_validator
from .domain.context import PgContext, make_context
from .domain.exclusions import (
    Exclusion, by_bloat, by_index_name, by_min_size, by_sequence_name, by_table_name, exclude_nothing,
)
from .domain.models import DuplicatedIndexes, HostRole, Index, Table
from .exceptions import ConfigurationError

class HostConfig(BaseModel):
    alias: str
    connection_string: str
    role: HostRole = HostRole.PRIMARY

class ExclusionsConfig(BaseModel):
    """Known-acceptable findings to drop from every report."""
    index_name_exclusions: List[str] = []
    table_name_exclusions: List[str] = []
    sequence_name_exclusions: List[str] = []
    index_size_threshold_in_bytes: int = Field(default=0, ge=0)
    table_size_threshold_in_bytes: int = Field(default=0, ge=0)
    bloat_size_threshold_in_bytes: int = Field(default=0, ge=0)
    bloat_percentage_threshold: float = Field(default=0.0, ge=0.0, le=100.0)

    def to_exclusion(self, context: Optional[PgContext] = None) -> Exclusion:
        exclusion = exclude_nothing()
        if self.index_name_exclusions:
            exclusion = exclusion | by_index_name(self.index_name_exclusions, context)
        if self.table_name_exclusions:
            exclusion = exclusion | by_table_name(self.table_name_exclusions, context)
        if self.sequence_name_exclusions:
            exclusion = exclusion | by_sequence_name(self.sequence_name_exclusions, context)
        if self.index_size_threshold_in_bytes:
            exclusion = exclusion | by_min_size(self.index_size_threshold_in_bytes, (Index, DuplicatedIndexes))
        if self.table_size_threshold_in_bytes:
            exclusion = exclusion | by_min_size(self.table_size_threshold_in_bytes, (Table,))
        if self.bloat_size_threshold_in_bytes or self.bloat_percentage_threshold:
            exclusion = exclusion | by_bloat(self.bloat_size_threshold_in_bytes, self.bloat_percentage_threshold)
        return exclusion

class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PGHEALTH_")

    hosts: List[HostConfig] = []
    schema_name: str = "public"
    bloat_percentage_threshold: float = Field(default=10.0, ge=0.0, le=100.0)
    remaining_percentage_threshold: float = Field(default=10.0, ge=0.0, le=100.0)
    statement_timeout_ms: Optional[int] = Field(default=None, gt=0)
    max_workers: int = Field(default=1, ge=1)
    exclusions: ExclusionsConfig = ExclusionsConfig()

    @model_validator(mode="after")
    def _check_hosts(self) -> "AppConfig":
        if not self.hosts:
            return self
        primaries = [h.alias for h in self.hosts if h.role == HostRole.PRIMARY]
        if len(primaries) != 1:
            raise ValueError(f"Exactly one primary host is required, found {len(primaries)}: {primaries}")
        aliases = [h.alias for h in self.hosts]
        if len(set(aliases)) != len(aliases):
            raise ValueError(f"Host aliases must be unique: {aliases}")
        return self

    @classmethod
    def from_yaml(cls, config_path: Path) -> "AppConfig":
        if not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")

        try:
            with open(config_path, "r") as f:
                raw_config = yaml.safe_load(f) or {}
            return cls(**raw_config)
        except (ValidationError, yaml.YAMLError, TypeError) as e:
            raise ConfigurationError(f"Invalid configuration format: {e}")

    def get_host_config(self, alias: str) -> HostConfig:
        for host in self.hosts:
            if host.alias == alias:
                return host
        raise ConfigurationError(f"Host alias '{alias}' not found in config")

    def primary_host(self) -> HostConfig:
        for host in self.hosts:
            if host.role == HostRole.PRIMARY:
                return host
        raise ConfigurationError("No primary host configured")

    def build_context(self, schema_name: Optional[str] = None) -> PgContext:
        """Context for one run. Raises InvalidIdentifier for a bad schema name."""
        try:
            return make_context(
                schema_name or self.schema_name,
                bloat_percentage_threshold=self.bloat_percentage_threshold,
                remaining_percentage_threshold=self.remaining_percentage_threshold,
                statement_timeout_ms=self.statement_timeout_ms,
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid context settings: {e}")
