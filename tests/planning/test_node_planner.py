"""Tests for node plan evaluation: first run, keep, grow and shrink."""

import pytest

pytestmark = pytest.mark.unit

from poolauto.contracts import (
    ConfigValidationError,
    InsufficientNodesError,
    InvalidRecordError,
    NilRecordError,
)
from poolauto.planning import EligibleNodes, NodePlanner, validate_pool_counts
from poolauto.records import PlanNode

from helpers.fake_records import make_device, make_node, make_nodes


def plan_of(*names):
    return [PlanNode(n, f"uid-{n}") for n in names]


def names(plan):
    return [entry.name for entry in plan]


class TestEligibleNodes:
    """Eligibility computation."""

    def test_non_node_records_are_ignored(self):
        records = make_nodes("a", "b") + [make_device("bd1", "a")]
        eligibility = EligibleNodes.compute(records)
        assert len(eligibility.all_nodes) == 2
        assert len(eligibility) == 2

    def test_selector_filters_nodes(self):
        records = [make_node("a", labels={"pool": "yes"}), make_node("b")]
        eligibility = EligibleNodes.compute(records, [{"matchLabels": {"pool": "yes"}}])
        assert eligibility.plan_nodes() == plan_of("a")
        assert len(eligibility.all_nodes) == 2

    def test_lookup_uses_name_and_uid(self):
        eligibility = EligibleNodes.compute(make_nodes("a"))
        assert eligibility.contains(PlanNode("a", "uid-a"))
        assert not eligibility.contains(PlanNode("a", "other"))
        assert eligibility.find(PlanNode("a", "uid-a")).name == "a"

    def test_nil_record(self):
        with pytest.raises(NilRecordError):
            EligibleNodes.compute([make_node("a"), None])


class TestFirstEvaluation:
    """No observed plan."""

    def test_takes_first_min_eligible(self, three_nodes):
        planner = NodePlanner.from_records(three_nodes)
        assert names(planner.evaluate_desired_nodes([], 2, 3)) == ["a", "b"]

    def test_none_observed_plan_is_first_evaluation(self, three_nodes):
        planner = NodePlanner.from_records(three_nodes)
        assert names(planner.evaluate_desired_nodes(None, 3, 5)) == ["a", "b", "c"]

    def test_insufficient_nodes(self, three_nodes):
        planner = NodePlanner.from_records(three_nodes)
        with pytest.raises(InsufficientNodesError) as exc:
            planner.evaluate_desired_nodes([], 4, 5)
        assert (exc.value.want, exc.value.got) == (4, 3)


class TestSubsequentEvaluation:
    """Observed plans are kept, grown or shrunk."""

    def test_within_bounds_is_unchanged(self, three_nodes):
        planner = NodePlanner.from_records(three_nodes)
        assert names(planner.evaluate_desired_nodes(plan_of("c", "a"), 1, 3)) == ["c", "a"]

    def test_ineligible_entries_are_dropped(self, three_nodes):
        planner = NodePlanner.from_records(three_nodes)
        plan = planner.evaluate_desired_nodes(plan_of("a", "gone", "b"), 2, 3)
        assert names(plan) == ["a", "b"]

    def test_uid_change_makes_entry_ineligible(self, three_nodes):
        planner = NodePlanner.from_records(three_nodes)
        plan = planner.evaluate_desired_nodes([PlanNode("a", "old-uid"), *plan_of("b")], 2, 3)
        assert names(plan) == ["b", "a"]

    def test_duplicate_entries_collapse(self, three_nodes):
        planner = NodePlanner.from_records(three_nodes)
        plan = planner.evaluate_desired_nodes(plan_of("a", "a", "b"), 2, 3)
        assert names(plan) == ["a", "b"]

    def test_dict_entries_are_accepted(self, three_nodes):
        planner = NodePlanner.from_records(three_nodes)
        plan = planner.evaluate_desired_nodes([{"name": "b", "uid": "uid-b"}], 1, 2)
        assert plan == plan_of("b")

    def test_grow_appends_in_enumeration_order(self, three_nodes):
        planner = NodePlanner.from_records(three_nodes)
        plan = planner.evaluate_desired_nodes(plan_of("c"), 3, 3)
        assert names(plan) == ["c", "a", "b"]

    def test_grow_is_superset_of_observed(self):
        planner = NodePlanner.from_records(make_nodes("a", "b", "c", "d", "e"))
        observed = plan_of("d", "b")
        plan = planner.evaluate_desired_nodes(observed, 4, 5)
        assert plan[:2] == observed
        assert len(plan) == 4

    def test_grow_insufficient(self, three_nodes):
        planner = NodePlanner.from_records(three_nodes)
        with pytest.raises(InsufficientNodesError) as exc:
            planner.evaluate_desired_nodes(plan_of("a"), 4, 4)
        assert (exc.value.want, exc.value.got) == (4, 3)

    def test_shrink_drops_newest(self):
        planner = NodePlanner.from_records(make_nodes("a", "b", "c", "d"))
        plan = planner.evaluate_desired_nodes(plan_of("a", "b", "c", "d"), 2, 3)
        assert names(plan) == ["a", "b", "c"]

    def test_shrink_orders_by_age(self):
        planner = NodePlanner.from_records(make_nodes("a", "b", "c", "d"))
        plan = planner.evaluate_desired_nodes(plan_of("d", "c", "b", "a"), 1, 2)
        assert names(plan) == ["a", "b"]

    def test_shrink_ties_break_on_name(self):
        records = [make_node("y", age_days=0), make_node("x", age_days=0), make_node("z", age_days=1)]
        planner = NodePlanner.from_records(records)
        plan = planner.evaluate_desired_nodes(plan_of("z", "y", "x"), 1, 2)
        assert names(plan) == ["x", "y"]

    def test_shrink_without_timestamp(self):
        planner = NodePlanner.from_records([make_node("a"), make_node("b")])
        with pytest.raises(InvalidRecordError, match="missing creation timestamp"):
            planner.evaluate_desired_nodes(plan_of("a", "b"), 1, 1)

    def test_evaluation_is_idempotent(self, three_nodes):
        planner = NodePlanner.from_records(three_nodes)
        first = planner.evaluate_desired_nodes([], 2, 3)
        assert planner.evaluate_desired_nodes(first, 2, 3) == first


class TestPoolCountValidation:
    """Bounds checks."""

    def test_min_greater_than_max(self, three_nodes):
        planner = NodePlanner.from_records(three_nodes)
        with pytest.raises(ConfigValidationError, match="can't be less than"):
            planner.evaluate_desired_nodes([], 3, 2)

    def test_zero_min(self):
        with pytest.raises(ConfigValidationError, match="can't be 0"):
            validate_pool_counts(0, 2)

    def test_negative(self):
        with pytest.raises(ConfigValidationError, match="must not be negative"):
            validate_pool_counts(-1, 2)
