"""Node set planning.

Decides which nodes host a pool, given the previously observed plan and
min/max bounds. The plan is stable: nodes already in the observed plan stay
as long as they are eligible and the bounds allow it. Growth adds eligible
nodes in enumeration order; shrinking drops the most recently created
nodes first.
"""

import logging
from typing import Iterable, Mapping, Optional, Sequence, Union

from poolauto.contracts.failure import (
    ConfigValidationError,
    InsufficientNodesError,
    InvalidRecordError,
    NilRecordError,
)
from poolauto.records.record import NODE_KIND, PlanNode, ResourceRecord
from poolauto.selection.listing import ListSelection
from poolauto.selection.selector import SelectorLike


logger = logging.getLogger(__name__)

PlanEntry = Union[PlanNode, Mapping[str, str]]


class EligibleNodes:
    """Node records of a batch and the subset the selector accepts.

    Built once with compute() and never changed afterwards.
    """

    def __init__(self, all_nodes: Iterable[ResourceRecord], nodes: Iterable[ResourceRecord]):
        self.all_nodes = tuple(all_nodes)
        self.nodes = tuple(nodes)
        self._by_key = {(n.name, n.uid): n for n in self.nodes}

    @classmethod
    def compute(cls, records: Iterable[ResourceRecord],
                selector: SelectorLike = None) -> "EligibleNodes":
        """Keep records of kind Node, then those matching ``selector``.

        Raises
        ------
        NilRecordError
            If ``records`` contains None.
        """
        all_nodes = []
        for index, record in enumerate(records):
            if record is None:
                raise NilRecordError(index)
            if record.kind == NODE_KIND:
                all_nodes.append(record)
        eligible = ListSelection(selector, all_nodes).compute().matches
        logger.debug("Eligible nodes: %d of %d", len(eligible), len(all_nodes))
        return cls(all_nodes, eligible)

    def __len__(self) -> int:
        return len(self.nodes)

    def find(self, entry: PlanNode) -> Optional[ResourceRecord]:
        return self._by_key.get((entry.name, entry.uid))

    def contains(self, entry: PlanNode) -> bool:
        return (entry.name, entry.uid) in self._by_key

    def plan_nodes(self) -> list[PlanNode]:
        return [PlanNode.from_record(n) for n in self.nodes]


def _creation_key(record: ResourceRecord) -> tuple:
    if record.creation_timestamp is None:
        raise InvalidRecordError(
            f"Can't rank node {record.name!r}: missing creation timestamp"
        )
    return (record.creation_timestamp, record.name, record.uid)


def validate_pool_counts(min_count: int, max_count: int) -> None:
    """Reject negative counts, min > max and a zero minimum.

    Raises
    ------
    ConfigValidationError
        On any violation.
    """
    if min_count < 0 or max_count < 0:
        raise ConfigValidationError(
            f"Invalid pool counts: min {min_count} and max {max_count} must not be negative"
        )
    if min_count > max_count:
        raise ConfigValidationError(
            f"MaxPoolCount {max_count} can't be less than MinPoolCount {min_count}"
        )
    if min_count == 0:
        raise ConfigValidationError("MinPoolCount can't be 0")


class NodePlanner:
    """Computes the desired node plan for one pool.

    Parameters
    ----------
    eligibility : EligibleNodes
        Node records and their eligible subset, computed once.

    Examples
    --------
    >>> planner = NodePlanner.from_records(records, selector)
    >>> planner.evaluate_desired_nodes([], min_count=2, max_count=4)
    [PlanNode(name='a', uid='ua'), PlanNode(name='b', uid='ub')]
    """

    def __init__(self, eligibility: EligibleNodes):
        self.eligibility = eligibility

    @classmethod
    def from_records(cls, records: Iterable[ResourceRecord],
                     selector: SelectorLike = None) -> "NodePlanner":
        return cls(EligibleNodes.compute(records, selector))

    @property
    def all_node_count(self) -> int:
        return len(self.eligibility.all_nodes)

    @property
    def eligible_node_count(self) -> int:
        return len(self.eligibility)

    def evaluate_desired_nodes(self, observed_plan: Optional[Sequence[PlanEntry]],
                               min_count: int, max_count: int) -> list[PlanNode]:
        """Return the desired node plan.

        Parameters
        ----------
        observed_plan : sequence of PlanNode, optional
            Previously applied plan. Empty or None on first evaluation.
        min_count, max_count : int
            Inclusive bounds on the plan size.

        Returns
        -------
        list of PlanNode
            First evaluation: the first ``min_count`` eligible nodes.
            Otherwise the observed nodes that are still eligible, trimmed to
            ``max_count`` oldest-first or topped up to ``min_count`` with
            eligible nodes in enumeration order.

        Raises
        ------
        ConfigValidationError
            If counts are negative, min > max or min is zero.
        InsufficientNodesError
            If there are not enough eligible nodes to reach ``min_count``.
        InvalidRecordError
            If shrinking needs a creation timestamp that a node lacks.
        """
        validate_pool_counts(min_count, max_count)
        observed = [PlanNode.from_dict(entry) for entry in observed_plan or ()]
        eligible = self.eligibility.plan_nodes()

        if not observed:
            if len(eligible) < min_count:
                raise InsufficientNodesError(min_count, len(eligible))
            logger.debug("First evaluation: selecting %d of %d eligible nodes",
                         min_count, len(eligible))
            return eligible[:min_count]

        includes: list[PlanNode] = []
        for entry in observed:
            if self.eligibility.contains(entry) and entry not in includes:
                includes.append(entry)
        k = len(includes)

        if min_count <= k <= max_count:
            logger.debug("Keeping %d observed nodes", k)
            return includes

        if k > max_count:
            ranked = sorted(includes, key=lambda e: _creation_key(self.eligibility.find(e)))
            dropped = ranked[max_count:]
            logger.debug("Shrinking plan from %d to %d: dropping %s",
                         k, max_count, [e.name for e in dropped])
            return ranked[:max_count]

        needed = min_count - k
        candidates = [entry for entry in eligible if entry not in includes]
        if len(candidates) < needed:
            raise InsufficientNodesError(min_count, k + len(candidates))
        added = candidates[:needed]
        logger.debug("Growing plan from %d to %d: adding %s",
                     k, min_count, [e.name for e in added])
        return includes + added
