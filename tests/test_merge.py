import itertools
from pghealth.checks.merge import intersection, union
from pghealth.domain.models import DuplicatedIndexes, Index, UnusedIndex

A = UnusedIndex(table_name="t1", index_name="a_idx", index_scans=0)
B = UnusedIndex(table_name="t1", index_name="b_idx", index_scans=0)
C = UnusedIndex(table_name="t2", index_name="c_idx", index_scans=0)
D = UnusedIndex(table_name="t3", index_name="d_idx", index_scans=0)

def test_union_of_two_hosts():
    """Test that [A,B] and [B,C] merge to exactly A, B, C."""
    assert union([[A, B], [B, C]]) == [A, B, C]

def test_union_is_independent_of_host_order():
    """Test that the union result does not depend on which host answered first."""
    results = [[A, B], [B, C], [D]]
    for permutation in itertools.permutations(results):
        assert union(list(permutation)) == [A, B, C, D]

def test_union_of_nothing():
    """Test that no hosts or only empty lists give an empty result."""
    assert union([]) == []
    assert union([[], []]) == []

def test_intersection_of_three_hosts():
    """Test that [A,B,C], [B,C], [B,C,D] intersect to exactly B, C."""
    assert intersection([[A, B, C], [B, C], [B, C, D]]) == [B, C]

def test_intersection_with_empty_host():
    """Test that one host without findings empties the result."""
    assert intersection([[A, B], []]) == []

def test_intersection_of_no_hosts_is_empty():
    """Test that an empty host list yields an empty result, not an error."""
    assert intersection([]) == []

def test_intersection_single_host_is_sorted_copy():
    """Test that a single host result is returned sorted and de-duplicated."""
    assert intersection([[C, A, A]]) == [A, C]

def test_natural_key_ignores_counters():
    """Test that the same index with different scan counters is one finding."""
    on_primary = UnusedIndex(table_name="t1", index_name="a_idx", index_scans=3)
    on_replica = UnusedIndex(table_name="t1", index_name="a_idx", index_scans=7)
    assert on_primary == on_replica
    assert hash(on_primary) == hash(on_replica)
    merged = intersection([[on_primary], [on_replica]])
    assert len(merged) == 1
    assert merged[0].index_scans == 3

def test_entities_of_different_types_are_not_equal():
    """Test that equality also requires the same entity type."""
    assert Index(table_name="t1", index_name="a_idx") != A

def test_duplicated_indexes_key_is_order_insensitive():
    """Test that groups of indexes compare by their sorted member names."""
    first = DuplicatedIndexes(table_name="t", indexes=[
        Index(table_name="t", index_name="i1"), Index(table_name="t", index_name="i2"),
    ])
    second = DuplicatedIndexes(table_name="t", indexes=[
        Index(table_name="t", index_name="i2", index_size_in_bytes=10), Index(table_name="t", index_name="i1"),
    ])
    assert first == second
    assert union([[first], [second]]) == [first]
