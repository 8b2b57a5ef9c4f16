"""
Diagnostic Registry

The closed set of anti-patterns pghealth knows how to detect. Each diagnostic
is a plain descriptor: the coordinator and host executor are generic and are
parametrized by it.
"""

import re
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple, Type
from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from ..domain.models import (
    AnyObject, Column, ColumnWithSerialType, Constraint, DbObject, DuplicatedForeignKeys,
    DuplicatedIndexes, ForeignKey, Index, IndexWithBloat, IndexWithColumns, IndexWithNulls,
    SequenceState, StoredFunction, Table, TableWithBloat, TableWithMissingIndex, UnusedIndex,
)
from ..exceptions import ConfigurationError
from . import merge

MergeStrategy = Callable[[Sequence[Sequence[DbObject]]], List[DbObject]]

_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")


class Staticness(str, Enum):
    STATIC = "static"
    RUNTIME = "runtime"

class ExecutionTopology(str, Enum):
    ON_PRIMARY = "on_primary"
    ACROSS_CLUSTER = "across_cluster"

class QueryParams(str, Enum):
    """Which parameters, besides the schema name, a diagnostic query binds."""
    SCHEMA = "schema"
    SCHEMA_AND_BLOAT = "schema_and_bloat"
    SCHEMA_AND_REMAINING = "schema_and_remaining"


class Diagnostic(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    result_type: Type[DbObject]
    staticness: Staticness = Staticness.STATIC
    topology: ExecutionTopology = ExecutionTopology.ON_PRIMARY
    merge_strategy: Optional[MergeStrategy] = None
    query_params: QueryParams = QueryParams.SCHEMA

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not _NAME_PATTERN.match(value):
            raise ValueError(f"Diagnostic name must be lower-case snake_case, got {value!r}")
        return value

    @model_validator(mode="after")
    def _check_topology(self) -> "Diagnostic":
        # Counters differ between hosts only for runtime data.
        if self.is_across_cluster() and not self.is_runtime():
            raise ValueError(f"Across-cluster diagnostic '{self.name}' must be runtime")
        return self

    def is_static(self) -> bool:
        return self.staticness == Staticness.STATIC

    def is_runtime(self) -> bool:
        return self.staticness == Staticness.RUNTIME

    def is_across_cluster(self) -> bool:
        return self.topology == ExecutionTopology.ACROSS_CLUSTER

    def __str__(self) -> str:
        return self.name


def _runtime(name: str, result_type: Type[DbObject], **kwargs) -> Diagnostic:
    return Diagnostic(name=name, result_type=result_type, staticness=Staticness.RUNTIME, **kwargs)


BLOATED_INDEXES = _runtime("bloated_indexes", IndexWithBloat, query_params=QueryParams.SCHEMA_AND_BLOAT)
BLOATED_TABLES = _runtime("bloated_tables", TableWithBloat, query_params=QueryParams.SCHEMA_AND_BLOAT)
DUPLICATED_INDEXES = Diagnostic(name="duplicated_indexes", result_type=DuplicatedIndexes)
FOREIGN_KEYS_WITHOUT_INDEX = Diagnostic(name="foreign_keys_without_index", result_type=ForeignKey)
INDEXES_WITH_NULL_VALUES = Diagnostic(name="indexes_with_null_values", result_type=IndexWithNulls)
INTERSECTED_INDEXES = Diagnostic(name="intersected_indexes", result_type=DuplicatedIndexes)
INVALID_INDEXES = Diagnostic(name="invalid_indexes", result_type=Index)
TABLES_WITH_MISSING_INDEXES = _runtime(
    "tables_with_missing_indexes", TableWithMissingIndex,
    topology=ExecutionTopology.ACROSS_CLUSTER, merge_strategy=merge.union,
)
TABLES_WITHOUT_PRIMARY_KEY = Diagnostic(name="tables_without_primary_key", result_type=Table)
UNUSED_INDEXES = _runtime(
    "unused_indexes", UnusedIndex,
    topology=ExecutionTopology.ACROSS_CLUSTER, merge_strategy=merge.intersection,
)
TABLES_WITHOUT_DESCRIPTION = Diagnostic(name="tables_without_description", result_type=Table)
COLUMNS_WITHOUT_DESCRIPTION = Diagnostic(name="columns_without_description", result_type=Column)
COLUMNS_WITH_JSON_TYPE = Diagnostic(name="columns_with_json_type", result_type=Column)
COLUMNS_WITH_SERIAL_TYPES = Diagnostic(name="columns_with_serial_types", result_type=ColumnWithSerialType)
FUNCTIONS_WITHOUT_DESCRIPTION = Diagnostic(name="functions_without_description", result_type=StoredFunction)
INDEXES_WITH_BOOLEAN = Diagnostic(name="indexes_with_boolean", result_type=IndexWithColumns)
NOT_VALID_CONSTRAINTS = Diagnostic(name="not_valid_constraints", result_type=Constraint)
BTREE_INDEXES_ON_ARRAY_COLUMNS = Diagnostic(name="btree_indexes_on_array_columns", result_type=IndexWithColumns)
SEQUENCE_OVERFLOW = _runtime("sequence_overflow", SequenceState, query_params=QueryParams.SCHEMA_AND_REMAINING)
PRIMARY_KEYS_WITH_SERIAL_TYPES = Diagnostic(name="primary_keys_with_serial_types", result_type=ColumnWithSerialType)
DUPLICATED_FOREIGN_KEYS = Diagnostic(name="duplicated_foreign_keys", result_type=DuplicatedForeignKeys)
INTERSECTED_FOREIGN_KEYS = Diagnostic(name="intersected_foreign_keys", result_type=DuplicatedForeignKeys)
POSSIBLE_OBJECT_NAME_OVERFLOW = Diagnostic(name="possible_object_name_overflow", result_type=AnyObject)
TABLES_NOT_LINKED_TO_OTHERS = Diagnostic(name="tables_not_linked_to_others", result_type=Table)
FOREIGN_KEYS_WITH_UNMATCHED_COLUMN_TYPE = Diagnostic(
    name="foreign_keys_with_unmatched_column_type", result_type=ForeignKey,
)
TABLES_WITH_ZERO_OR_ONE_COLUMN = Diagnostic(name="tables_with_zero_or_one_column", result_type=Table)
OBJECTS_NOT_FOLLOWING_NAMING_CONVENTION = Diagnostic(
    name="objects_not_following_naming_convention", result_type=AnyObject,
)

ALL_DIAGNOSTICS: Tuple[Diagnostic, ...] = (
    BLOATED_INDEXES,
    BLOATED_TABLES,
    DUPLICATED_INDEXES,
    FOREIGN_KEYS_WITHOUT_INDEX,
    INDEXES_WITH_NULL_VALUES,
    INTERSECTED_INDEXES,
    INVALID_INDEXES,
    TABLES_WITH_MISSING_INDEXES,
    TABLES_WITHOUT_PRIMARY_KEY,
    UNUSED_INDEXES,
    TABLES_WITHOUT_DESCRIPTION,
    COLUMNS_WITHOUT_DESCRIPTION,
    COLUMNS_WITH_JSON_TYPE,
    COLUMNS_WITH_SERIAL_TYPES,
    FUNCTIONS_WITHOUT_DESCRIPTION,
    INDEXES_WITH_BOOLEAN,
    NOT_VALID_CONSTRAINTS,
    BTREE_INDEXES_ON_ARRAY_COLUMNS,
    SEQUENCE_OVERFLOW,
    PRIMARY_KEYS_WITH_SERIAL_TYPES,
    DUPLICATED_FOREIGN_KEYS,
    INTERSECTED_FOREIGN_KEYS,
    POSSIBLE_OBJECT_NAME_OVERFLOW,
    TABLES_NOT_LINKED_TO_OTHERS,
    FOREIGN_KEYS_WITH_UNMATCHED_COLUMN_TYPE,
    TABLES_WITH_ZERO_OR_ONE_COLUMN,
    OBJECTS_NOT_FOLLOWING_NAMING_CONVENTION,
)


def _index_by_name(diagnostics: Sequence[Diagnostic]) -> Dict[str, Diagnostic]:
    registry: Dict[str, Diagnostic] = {}
    for diagnostic in diagnostics:
        if diagnostic.name in registry:
            raise ConfigurationError(f"Duplicate diagnostic name '{diagnostic.name}'")
        registry[diagnostic.name] = diagnostic
    return registry


_REGISTRY = _index_by_name(ALL_DIAGNOSTICS)


def list_diagnostics() -> FrozenSet[Diagnostic]:
    return frozenset(_REGISTRY.values())


def get_diagnostic(name: str) -> Diagnostic:
    try:
        return _REGISTRY[name.strip().lower()]
    except KeyError:
        raise ConfigurationError(f"Unknown diagnostic '{name}'") from None
