import pytest
from pghealth.domain.context import make_context
from pghealth.domain.exclusions import (
    by_attribute, by_bloat, by_column_name, by_constraint_name, by_index_name, by_min_size, by_name,
    by_sequence_name, by_size, by_table_name, exclude_nothing,
)
from pghealth.domain.models import (
    DuplicatedIndexes, ForeignKey, Index, IndexWithBloat, SequenceState, Table, TableWithBloat,
)

def _index(name="x", size=100, table="orders"):
    return Index(table_name=table, index_name=name, index_size_in_bytes=size)

def test_exclude_nothing_keeps_everything():
    """Test that the default exclusion never drops anything."""
    exclusion = exclude_nothing()
    assert not exclusion(_index())
    assert not exclusion(Table(table_name="t"))

def test_by_name_is_case_insensitive():
    """Test that name matching ignores case on both sides."""
    exclusion = by_name({"Orders_PKey"})
    assert exclusion(_index(name="orders_pkey"))
    assert not exclusion(_index(name="orders_idx"))

def test_by_name_accepts_a_single_string():
    """Test that a single name works like a one element set."""
    assert by_name("x")(_index(name="X"))

def test_by_name_with_context_enriches_names():
    """Test that names are schema qualified for non default schemas."""
    context = make_context("demo")
    exclusion = by_name("orders_idx", context)
    assert exclusion(_index(name="demo.orders_idx"))
    assert not exclusion(_index(name="orders_idx"))

def test_by_index_name_in_mixed_case_schema():
    """Test that names in a quoted schema match the quoted catalog rendering."""
    context = make_context('"MySchema"')
    exclusion = by_index_name("orders_idx", context)
    assert exclusion(_index(name='"MySchema".orders_idx', table='"MySchema".orders'))
    assert not exclusion(_index(name="MySchema.orders_idx", table="MySchema.orders"))

def test_by_name_and_by_size_composition():
    """Test that AND excludes only when the name matches and the size exceeds the threshold."""
    exclusion = by_name({"x"}).and_(by_size(50))
    assert exclusion(_index(name="x", size=100))
    assert not exclusion(_index(name="x", size=10))
    assert not exclusion(_index(name="y", size=100))

def test_composing_exclude_nothing_excludes_nothing():
    """Test that combining two no-op exclusions is still a no-op."""
    combined = exclude_nothing() & exclude_nothing()
    assert not combined(_index())
    assert not (exclude_nothing() | exclude_nothing())(_index())

def test_or_composition():
    """Test that OR excludes when either side does."""
    exclusion = by_name("x") | by_table_name("audit")
    assert exclusion(_index(name="x"))
    assert exclusion(_index(name="y", table="audit"))
    assert not exclusion(_index(name="y"))

def test_by_index_name_matches_duplicated_indexes():
    """Test that index name exclusions also apply to groups of indexes."""
    duplicated = DuplicatedIndexes(
        table_name="orders",
        indexes=[_index(name="a"), _index(name="b")],
    )
    assert by_index_name("b")(duplicated)
    assert not by_index_name("c")(duplicated)
    assert not by_index_name("orders")(Table(table_name="orders"))

def test_by_sequence_column_and_constraint_name():
    """Test the attribute specific exclusions."""
    sequence = SequenceState(sequence_name="orders_id_seq", data_type="integer", remaining_percentage=5.0)
    assert by_sequence_name("ORDERS_ID_SEQ")(sequence)
    fk = ForeignKey(table_name="orders", constraint_name="orders_customer_fk", columns=["customer_id"])
    assert by_column_name("customer_id")(fk)
    assert by_constraint_name("orders_customer_fk")(fk)
    assert not by_constraint_name("orders_customer_fk")(_index())

def test_by_attribute_skips_entities_without_attribute():
    """Test that entities lacking the attribute are kept."""
    assert not by_attribute("sequence_name", "x")(_index())

def test_size_thresholds():
    """Test by_size and by_min_size bounds."""
    assert by_size(100)(_index(size=101))
    assert not by_size(100)(_index(size=100))
    assert by_min_size(100)(_index(size=99))
    assert not by_min_size(100)(_index(size=100))

def test_min_size_scoped_to_types():
    """Test that a scoped size threshold ignores other entity types."""
    exclusion = by_min_size(1000, (Table,))
    assert exclusion(Table(table_name="t", table_size_in_bytes=10))
    assert not exclusion(_index(size=10))

def test_by_bloat():
    """Test that bloat below either threshold is excluded and zero thresholds exclude nothing."""
    bloated = IndexWithBloat(
        table_name="t", index_name="i", index_size_in_bytes=1000,
        bloat_size_in_bytes=500, bloat_percentage=50.0,
    )
    assert not by_bloat(100, 10.0)(bloated)
    assert by_bloat(1000, 10.0)(bloated)
    assert by_bloat(100, 60.0)(bloated)
    assert not by_bloat(0, 0.0)(bloated)
    assert not by_bloat(1000, 60.0)(_index())
    table = TableWithBloat(table_name="t", bloat_size_in_bytes=10, bloat_percentage=1.0)
    assert by_bloat(100, 0.0)(table)

@pytest.mark.parametrize("factory, args", [
    (by_size, (-1,)),
    (by_min_size, (-1,)),
    (by_bloat, (-1, 10.0)),
    (by_bloat, (0, 101.0)),
    (by_name, (None,)),
    (by_name, ([""],)),
    (by_table_name, (["ok", " "],)),
])
def test_invalid_arguments(factory, args):
    """Test that factories reject invalid arguments."""
    with pytest.raises(ValueError):
        factory(*args)
