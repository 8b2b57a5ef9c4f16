from typing import Any, Callable, Mapping, Type
from ..domain.models import DbObject, DuplicatedForeignKeys, DuplicatedIndexes, ForeignKey, Index

RowMapper = Callable[[Mapping[str, Any]], DbObject]


def map_into(result_type: Type[DbObject]) -> RowMapper:
    """Mapper for queries whose column names match the entity fields one to one."""
    def mapper(row: Mapping[str, Any]) -> DbObject:
        return result_type.model_validate(dict(row))
    return mapper


def map_duplicated_indexes(row: Mapping[str, Any]) -> DuplicatedIndexes:
    table_name = row["table_name"]
    indexes = [
        Index(table_name=table_name, index_name=name, index_size_in_bytes=size)
        for name, size in zip(row["index_names"], row["index_sizes"])
    ]
    return DuplicatedIndexes(table_name=table_name, indexes=indexes)


def map_duplicated_foreign_keys(row: Mapping[str, Any]) -> DuplicatedForeignKeys:
    table_name = row["table_name"]
    columns = row.get("columns") or ()
    foreign_keys = [
        ForeignKey(table_name=table_name, constraint_name=name, columns=columns)
        for name in row["constraint_names"]
    ]
    return DuplicatedForeignKeys(table_name=table_name, foreign_keys=foreign_keys)
