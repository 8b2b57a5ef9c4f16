import logging
import pytest
from pydantic import ValidationError
from conftest import FakeConnection, unused_index_row
from pghealth.catalog import load_sql
from pghealth.checks.diagnostics import DUPLICATED_INDEXES, SEQUENCE_OVERFLOW, UNUSED_INDEXES
from pghealth.checks.host import CheckOnHost, execute_on_host
from pghealth.domain.context import make_context
from pghealth.domain.exclusions import by_index_name
from pghealth.domain.models import DuplicatedIndexes, UnusedIndex
from pghealth.exceptions import QueryExecutionFailed

def test_rows_are_mapped_sorted_and_filtered():
    """Test that rows become entities in natural order and excluded ones are dropped."""
    connection = FakeConnection("primary", rows={"unused_indexes": [
        unused_index_row("t2", "z_idx"),
        unused_index_row("t1", "b_idx"),
        unused_index_row("t1", "a_idx"),
    ]})
    result = execute_on_host(connection, UNUSED_INDEXES, exclusion=by_index_name("b_idx"))
    assert [(r.table_name, r.index_name) for r in result] == [("t1", "a_idx"), ("t2", "z_idx")]
    assert all(isinstance(r, UnusedIndex) for r in result)

def test_schema_is_bound_not_inlined():
    """Test that the schema name travels as a parameter and the SQL text is unchanged."""
    connection = FakeConnection("primary")
    context = make_context('"; truncate table clients;"')
    CheckOnHost(connection, UNUSED_INDEXES).check(context)
    query, params, _ = connection.calls[0]
    assert query == load_sql("unused_indexes")
    assert "truncate" not in query
    assert params == {"schema_name_param": "; truncate table clients;"}

def test_default_context_and_timeout():
    """Test that no context means the public schema and the timeout is passed through."""
    connection = FakeConnection("primary")
    execute_on_host(connection, SEQUENCE_OVERFLOW)
    _, params, timeout_ms = connection.calls[0]
    assert params == {"schema_name_param": "public", "remaining_percentage_threshold": 10.0}
    assert timeout_ms is None

    execute_on_host(connection, SEQUENCE_OVERFLOW, make_context(statement_timeout_ms=1500))
    assert connection.calls[1][2] == 1500

def test_empty_result_is_not_an_error():
    """Test that no rows give an empty list."""
    assert execute_on_host(FakeConnection("primary"), UNUSED_INDEXES) == []

def test_grouped_rows_use_custom_mapper():
    """Test that duplicated index rows are mapped to groups of indexes."""
    connection = FakeConnection("primary", rows={"duplicated_indexes": [{
        "table_name": "orders",
        "index_names": ["orders_a_idx", "orders_b_idx"],
        "index_sizes": [8192, 16384],
    }]})
    [group] = execute_on_host(connection, DUPLICATED_INDEXES)
    assert isinstance(group, DuplicatedIndexes)
    assert group.index_names == ("orders_a_idx", "orders_b_idx")
    assert group.size_in_bytes == 24576

def test_lower_level_errors_are_wrapped():
    """Test that driver errors surface as QueryExecutionFailed with the cause kept."""
    cause = OSError("connection reset")
    connection = FakeConnection("replica-1", error=cause)
    with pytest.raises(QueryExecutionFailed) as excinfo:
        execute_on_host(connection, UNUSED_INDEXES)
    assert excinfo.value.host == "replica-1"
    assert excinfo.value.cause is cause
    assert excinfo.value.__cause__ is cause

def test_malformed_rows_are_wrapped():
    """Test that a row missing entity columns surfaces as QueryExecutionFailed."""
    connection = FakeConnection("primary", rows={"unused_indexes": [{"table_name": "orders"}]})
    with pytest.raises(QueryExecutionFailed) as excinfo:
        execute_on_host(connection, UNUSED_INDEXES)
    assert excinfo.value.host == "primary"
    assert "unused_indexes" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, ValidationError)

def test_malformed_grouped_rows_are_wrapped():
    """Test that a grouped row without its index list surfaces as QueryExecutionFailed."""
    connection = FakeConnection("primary", rows={"duplicated_indexes": [{"table_name": "orders"}]})
    with pytest.raises(QueryExecutionFailed):
        execute_on_host(connection, DUPLICATED_INDEXES)

def test_query_execution_failed_is_not_wrapped_twice():
    """Test that an already wrapped failure propagates unchanged."""
    original = QueryExecutionFailed("primary", "boom")
    with pytest.raises(QueryExecutionFailed) as excinfo:
        execute_on_host(FakeConnection("primary", error=original), UNUSED_INDEXES)
    assert excinfo.value is original

def test_host_is_logged_before_query(caplog):
    """Test that the target host is logged at debug level."""
    with caplog.at_level(logging.DEBUG, logger="pghealth.checks.host"):
        execute_on_host(FakeConnection("primary"), UNUSED_INDEXES)
    assert "unused_indexes" in caplog.text
    assert "primary" in caplog.text
