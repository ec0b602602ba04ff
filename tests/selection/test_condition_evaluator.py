"""Tests for named condition evaluation over record batches."""

import pytest

pytestmark = pytest.mark.unit

from poolauto.contracts import (
    ConfigValidationError,
    NilRecordError,
    NotEvaluatedError,
    UnknownConditionError,
)
from poolauto.selection import ConditionEvaluator, all_of, has_label, kind_equals

from helpers.fake_records import make_device, make_node


@pytest.fixture
def batch():
    return [
        make_node("n1", labels={"zone": "a"}),
        make_node("n2", labels={"zone": "b"}),
        make_device("bd1", "n1"),
        make_device("bd2", "n2"),
    ]


@pytest.fixture
def evaluator():
    ev = ConditionEvaluator()
    ev.register_condition("nodes", all_of(kind_equals("Node")))
    ev.register_condition("zone-a", all_of(kind_equals("Node"), has_label("zone", "a")))
    return ev


class TestEvaluateAll:
    """Partitioning by condition name."""

    def test_matches_per_condition(self, evaluator, batch):
        result = evaluator.evaluate_all(batch)

        nodes = result.matches_for("nodes")
        assert nodes.any_matched is True
        assert [r.name for r in nodes.records] == ["n1", "n2"]
        assert [r.name for r in result.matches_for("zone-a").records] == ["n1"]

    def test_first_match(self, evaluator, batch):
        result = evaluator.evaluate_all(batch)
        assert result.first_match("zone-a").name == "n1"

    def test_no_match_reports_false(self, batch):
        ev = ConditionEvaluator().register_condition("pools", kind_equals("CStorPoolCluster"))
        result = ev.evaluate_all(batch)
        assert result.matches_for("pools") == ((), False)
        assert result.first_match("pools") is None

    def test_failure_reasons_are_prefixed_and_ordered(self, evaluator, batch):
        result = evaluator.evaluate_all(batch)

        reasons = result.failure_reasons_for(batch[2])

        assert reasons == (
            "nodes: IsKind failed: Want 'Node' got 'BlockDevice'",
            "zone-a: IsKind failed: Want 'Node' got 'BlockDevice'",
        )

    def test_failure_reasons_for_partial_failure(self, evaluator, batch):
        result = evaluator.evaluate_all(batch)
        reasons = result.failure_reasons_for(batch[1])
        assert len(reasons) == 1
        assert reasons[0].startswith("zone-a: HasLabel failed")

    def test_rejects(self, evaluator, batch):
        result = evaluator.evaluate_all(batch)
        assert [r.name for r in result.rejects()] == ["bd1", "bd2"]

    def test_all_failure_reasons_keyed_by_unique_name(self, evaluator, batch):
        result = evaluator.evaluate_all(batch)
        reasons = result.all_failure_reasons()
        assert "openebs.io/v1alpha1/BlockDevice/openebs/bd1" in reasons
        assert "v1/Node/n1" not in reasons

    def test_results_are_deterministic(self, evaluator, batch):
        first = evaluator.evaluate_all(batch)
        second = evaluator.evaluate_all(batch)
        assert first.all_failure_reasons() == second.all_failure_reasons()
        assert first.matches_for("zone-a") == second.matches_for("zone-a")


class TestUsageErrors:
    """Reading out of order or with unknown names."""

    def test_read_before_evaluate(self, evaluator):
        with pytest.raises(NotEvaluatedError):
            evaluator.matches_for("nodes")

    def test_unknown_condition(self, evaluator, batch):
        evaluator.evaluate_all(batch)
        with pytest.raises(UnknownConditionError, match="'storage'"):
            evaluator.matches_for("storage")

    def test_nil_in_batch_aborts(self, evaluator, batch):
        with pytest.raises(NilRecordError) as exc:
            evaluator.evaluate_all(batch[:1] + [None] + batch[1:])
        assert exc.value.index == 1
        with pytest.raises(NotEvaluatedError):
            evaluator.result

    def test_no_conditions_registered(self, batch):
        with pytest.raises(ConfigValidationError, match="No conditions"):
            ConditionEvaluator().evaluate_all(batch)

    def test_empty_name(self):
        with pytest.raises(ConfigValidationError):
            ConditionEvaluator().register_condition("", kind_equals("Node"))

    def test_reregistering_discards_results(self, evaluator, batch):
        evaluator.evaluate_all(batch)
        evaluator.register_condition("zone-a", all_of(has_label("zone", "b")))

        assert evaluator.condition_names == ("nodes", "zone-a")
        with pytest.raises(NotEvaluatedError):
            evaluator.result
        result = evaluator.evaluate_all(batch)
        assert [r.name for r in result.matches_for("zone-a").records] == ["n2"]
