from enum import Enum
from typing import Any, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

class HealthStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    TIMEOUT = "timeout"

class HostRole(str, Enum):
    PRIMARY = "primary"
    REPLICA = "replica"

class ConnectionHealth(BaseModel):
    host_name: str
    status: HealthStatus
    latency_ms: Optional[float] = None
    error_message: Optional[str] = None

class PgHost(BaseModel):
    """
    Identity of a single database host.
    Used as a cache key and to tell which host produced a row; never holds a connection.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    address: str
    role: HostRole = HostRole.PRIMARY

    @property
    def is_primary(self) -> bool:
        return self.role == HostRole.PRIMARY

    def __str__(self) -> str:
        return f"{self.name} ({self.address})"


class DbObject(BaseModel):
    """
    Base class for every finding produced by a diagnostic.

    Findings are immutable once mapped from a row. Equality and hashing use the
    natural key only: the same index reported by two hosts with different scan
    counters is a single finding.
    """
    model_config = ConfigDict(frozen=True)

    @property
    def natural_key(self) -> Tuple[Any, ...]:
        raise NotImplementedError

    @property
    def name(self) -> str:
        """Primary object name (index, table, constraint, ...)"""
        raise NotImplementedError

    @property
    def names(self) -> Tuple[str, ...]:
        """All object names this finding can be matched by."""
        return (self.name,)

    @property
    def table_names(self) -> Tuple[str, ...]:
        return ()

    @property
    def column_names(self) -> Tuple[str, ...]:
        return ()

    @property
    def size_in_bytes(self) -> Optional[int]:
        return None

    def sort_key(self) -> Tuple[Any, ...]:
        tables = self.table_names
        return (tables[0] if tables else "", self.natural_key)

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self.natural_key == other.natural_key

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.natural_key))

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, DbObject):
            return NotImplemented
        return self.sort_key() < other.sort_key()


# Tables

class Table(DbObject):
    table_name: str
    table_size_in_bytes: int = Field(default=0, ge=0)

    @property
    def natural_key(self) -> Tuple[Any, ...]:
        return (self.table_name,)

    @property
    def name(self) -> str:
        return self.table_name

    @property
    def table_names(self) -> Tuple[str, ...]:
        return (self.table_name,)

    @property
    def size_in_bytes(self) -> Optional[int]:
        return self.table_size_in_bytes

class TableWithBloat(Table):
    bloat_size_in_bytes: int = Field(ge=0)
    bloat_percentage: float = Field(ge=0.0, le=100.0)

class TableWithMissingIndex(Table):
    seq_scans: int = Field(ge=0)
    index_scans: int = Field(ge=0)


# Indexes

class Index(DbObject):
    table_name: str
    index_name: str
    index_size_in_bytes: int = Field(default=0, ge=0)

    @property
    def natural_key(self) -> Tuple[Any, ...]:
        return (self.table_name, self.index_name)

    @property
    def name(self) -> str:
        return self.index_name

    @property
    def table_names(self) -> Tuple[str, ...]:
        return (self.table_name,)

    @property
    def size_in_bytes(self) -> Optional[int]:
        return self.index_size_in_bytes

class IndexWithBloat(Index):
    bloat_size_in_bytes: int = Field(ge=0)
    bloat_percentage: float = Field(ge=0.0, le=100.0)

class UnusedIndex(Index):
    index_scans: int = Field(ge=0)

class IndexWithNulls(Index):
    nullable_column: str

    @property
    def column_names(self) -> Tuple[str, ...]:
        return (self.nullable_column,)

class IndexWithColumns(Index):
    columns: Tuple[str, ...] = ()

    @property
    def column_names(self) -> Tuple[str, ...]:
        return self.columns

class DuplicatedIndexes(DbObject):
    """Two or more indexes on the same table that fully or partially overlap."""
    table_name: str
    indexes: Tuple[Index, ...] = Field(min_length=2)

    @property
    def index_names(self) -> Tuple[str, ...]:
        return tuple(sorted(i.index_name for i in self.indexes))

    @property
    def natural_key(self) -> Tuple[Any, ...]:
        return (self.table_name, self.index_names)

    @property
    def name(self) -> str:
        return ", ".join(self.index_names)

    @property
    def names(self) -> Tuple[str, ...]:
        return self.index_names

    @property
    def table_names(self) -> Tuple[str, ...]:
        return (self.table_name,)

    @property
    def size_in_bytes(self) -> Optional[int]:
        return sum(i.index_size_in_bytes for i in self.indexes)


# Columns

class Column(DbObject):
    table_name: str
    column_name: str
    not_null: bool = False

    @property
    def natural_key(self) -> Tuple[Any, ...]:
        return (self.table_name, self.column_name)

    @property
    def name(self) -> str:
        return self.column_name

    @property
    def table_names(self) -> Tuple[str, ...]:
        return (self.table_name,)

    @property
    def column_names(self) -> Tuple[str, ...]:
        return (self.column_name,)

class ColumnWithSerialType(Column):
    serial_type: str
    sequence_name: str


# Constraints

class ForeignKey(DbObject):
    table_name: str
    constraint_name: str
    columns: Tuple[str, ...] = ()

    @property
    def natural_key(self) -> Tuple[Any, ...]:
        return (self.table_name, self.constraint_name)

    @property
    def name(self) -> str:
        return self.constraint_name

    @property
    def table_names(self) -> Tuple[str, ...]:
        return (self.table_name,)

    @property
    def column_names(self) -> Tuple[str, ...]:
        return self.columns

class DuplicatedForeignKeys(DbObject):
    table_name: str
    foreign_keys: Tuple[ForeignKey, ...] = Field(min_length=2)

    @property
    def constraint_names(self) -> Tuple[str, ...]:
        return tuple(sorted(fk.constraint_name for fk in self.foreign_keys))

    @property
    def natural_key(self) -> Tuple[Any, ...]:
        return (self.table_name, self.constraint_names)

    @property
    def name(self) -> str:
        return ", ".join(self.constraint_names)

    @property
    def names(self) -> Tuple[str, ...]:
        return self.constraint_names

    @property
    def table_names(self) -> Tuple[str, ...]:
        return (self.table_name,)

class Constraint(DbObject):
    table_name: str
    constraint_name: str
    constraint_type: str

    @property
    def natural_key(self) -> Tuple[Any, ...]:
        return (self.table_name, self.constraint_name)

    @property
    def name(self) -> str:
        return self.constraint_name

    @property
    def table_names(self) -> Tuple[str, ...]:
        return (self.table_name,)


# Other objects

class StoredFunction(DbObject):
    function_name: str
    function_signature: str = ""

    @property
    def natural_key(self) -> Tuple[Any, ...]:
        return (self.function_name, self.function_signature)

    @property
    def name(self) -> str:
        return self.function_name

class SequenceState(DbObject):
    sequence_name: str
    data_type: str
    remaining_percentage: float = Field(ge=0.0, le=100.0)

    @property
    def natural_key(self) -> Tuple[Any, ...]:
        return (self.sequence_name,)

    @property
    def name(self) -> str:
        return self.sequence_name

class AnyObject(DbObject):
    object_name: str
    object_type: str

    @property
    def natural_key(self) -> Tuple[Any, ...]:
        return (self.object_type, self.object_name)

    @property
    def name(self) -> str:
        return self.object_name
