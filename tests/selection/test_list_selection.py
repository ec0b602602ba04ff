"""Tests for ListSelection partitions and desired-state checks."""

import pytest

pytestmark = pytest.mark.unit

from poolauto.contracts import NilRecordError
from poolauto.records import ResourceRecord
from poolauto.selection import ListSelection, is_desired_state, matches_desired

from helpers.fake_records import make_node, make_nodes


ZONE_A = [{"matchLabels": {"zone": "a"}}]


@pytest.fixture
def nodes():
    return [
        make_node("n1", labels={"zone": "a"}),
        make_node("n2", labels={"zone": "b"}),
        make_node("n3", labels={"zone": "a"}),
    ]


class TestPartition:
    """Matches and no-matches."""

    def test_partition_keeps_input_order(self, nodes):
        selection = ListSelection(ZONE_A, nodes)
        assert [r.name for r in selection.matches] == ["n1", "n3"]
        assert [r.name for r in selection.nomatches] == ["n2"]

    def test_empty_selector_matches_all(self, nodes):
        partition = ListSelection(None, nodes).partition()
        assert partition.match_count(3)
        assert partition.no_match_count(0)

    def test_empty_records(self):
        partition = ListSelection(ZONE_A, []).partition()
        assert partition.match_count(0)
        assert partition.no_match_count(0)

    def test_nil_record_rejected(self, nodes):
        with pytest.raises(NilRecordError) as exc:
            ListSelection(ZONE_A, [nodes[0], None])
        assert exc.value.index == 1

    def test_partition_is_cached(self, nodes):
        selection = ListSelection(ZONE_A, nodes)
        assert selection.partition() is selection.partition()

    def test_cache_can_be_disabled(self, nodes):
        selection = ListSelection(ZONE_A, nodes, disable_cache=True)
        assert selection.partition() is not selection.partition()

    def test_invalidate_recomputes(self, nodes):
        selection = ListSelection(ZONE_A, nodes)
        first = selection.partition()
        selection.invalidate()
        assert selection.partition() is not first

    def test_with_records_starts_fresh(self, nodes):
        selection = ListSelection(ZONE_A, nodes)
        other = selection.with_records(nodes[:1])
        assert [r.name for r in other.matches] == ["n1"]


class TestPartitionReaders:
    """Contains/count readers."""

    @pytest.fixture
    def partition(self, nodes):
        return ListSelection(ZONE_A, nodes).partition()

    def test_contains_by_identity(self, partition):
        assert partition.match_contains(make_node("n1"))
        assert not partition.match_contains(make_node("n2"))
        assert partition.no_match_contains(make_node("n2"))

    def test_contains_nil_target(self, partition):
        with pytest.raises(NilRecordError):
            partition.match_contains(None)

    def test_contains_all_is_exact(self, partition):
        assert partition.match_contains_all([make_node("n3"), make_node("n1")])
        assert not partition.match_contains_all([make_node("n1")])
        assert partition.no_match_contains_all([make_node("n2")])

    def test_counts(self, partition):
        assert partition.match_count(2)
        assert not partition.match_count(3)


class TestMatchesDesired:
    """Desired-state comparison."""

    def test_partial_document_already_applied(self, nodes):
        desired = {"apiVersion": "v1", "kind": "Node",
                   "metadata": {"name": "n1", "labels": {"zone": "a"}}}
        assert matches_desired(None, nodes, desired)

    def test_differing_value(self, nodes):
        desired = {"apiVersion": "v1", "kind": "Node",
                   "metadata": {"name": "n1", "labels": {"zone": "b"}}}
        assert not matches_desired(None, nodes, desired)

    def test_not_found_is_false(self, nodes):
        desired = {"apiVersion": "v1", "kind": "Node", "metadata": {"name": "n9"}}
        assert matches_desired(None, nodes, desired) is False

    def test_desired_must_match_selector(self, nodes):
        desired = {"apiVersion": "v1", "kind": "Node", "metadata": {"name": "n2"}}
        assert matches_desired(ZONE_A, nodes, desired) is False

    def test_nil_desired(self, nodes):
        with pytest.raises(NilRecordError):
            matches_desired(None, nodes, None)

    def test_record_as_desired(self, nodes):
        assert matches_desired(None, nodes, nodes[2])

    def test_matches_desired_all(self, nodes):
        partition = ListSelection(None, nodes).partition()
        assert partition.matches_desired_all(nodes)
        assert not partition.matches_desired_all([])
        assert not partition.matches_desired_all(nodes + make_nodes("n9"))

    def test_list_values_are_replaced(self):
        observed = ResourceRecord(kind="Node", name="n1", fields={"spec": {"taints": ["a", "b"]}})
        assert is_desired_state(observed, {"kind": "Node", "metadata": {"name": "n1"},
                                           "spec": {"taints": ["a", "b"]}})
        assert not is_desired_state(observed, {"kind": "Node", "metadata": {"name": "n1"},
                                               "spec": {"taints": ["a"]}})
