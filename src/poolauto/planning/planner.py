"""Top-level pool planning.

PoolPlanner ties the pieces together for one invocation:

1. Partition records into nodes and selected block devices
2. Resolve unset pool counts against the fleet
3. Plan the node set
4. Pick devices of one class per planned host, preferring what is already
   in use
5. Build the topology and enforce output contracts

The planner is a pure function of (records, observed state, config). It
does no I/O and keeps no state between plan() calls.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Mapping, Optional, Sequence, Union

from poolauto.contracts import assert_node_plan, assert_topology
from poolauto.contracts.failure import ConfigValidationError, InsufficientNodesError
from poolauto.planning.devices import (
    group_device_names_by_class_and_host,
    host_name_of,
    observed_devices_by_host,
    observed_host_names,
)
from poolauto.planning.node_planner import NodePlanner, PlanEntry
from poolauto.planning.topology import PoolTopology, build_topology, order_devices
from poolauto.records.raid import min_group_size
from poolauto.records.record import BLOCK_DEVICE_KIND, NODE_KIND, PlanNode, ResourceRecord
from poolauto.selection.evaluator import ConditionEvaluator
from poolauto.selection.predicate import all_of, kind_equals

if TYPE_CHECKING:
    from poolauto.schemas.internal import InternalConfig


logger = logging.getLogger(__name__)

NODES = "nodes"
DEVICES = "devices"


def resolve_pool_counts(
    min_count: Optional[int],
    max_count: Optional[int],
    all_node_count: int,
    eligible_node_count: int,
    default_min_pool_count: int = 3,
    max_pool_count_offset: int = 2,
) -> tuple[int, int]:
    """Fill in unset pool counts.

    An unset minimum becomes the smallest of ``default_min_pool_count``, the
    node count and the eligible node count. An unset maximum becomes the
    minimum plus ``max_pool_count_offset``.

    Parameters
    ----------
    min_count, max_count : int, optional
        Configured bounds. None or 0 means unset for the minimum, None
        means unset for the maximum.

    Returns
    -------
    tuple of int
        (min_count, max_count)

    Raises
    ------
    ConfigValidationError
        If a count is negative or the maximum is less than the minimum.
    InsufficientNodesError
        If the minimum is unset and no eligible node exists.

    Examples
    --------
    >>> resolve_pool_counts(None, None, all_node_count=5, eligible_node_count=4)
    (3, 5)
    >>> resolve_pool_counts(None, None, all_node_count=5, eligible_node_count=2)
    (2, 4)
    """
    if min_count is not None and min_count < 0:
        raise ConfigValidationError(f"MinPoolCount {min_count} can't be negative")
    if max_count is not None and max_count < 0:
        raise ConfigValidationError(f"MaxPoolCount {max_count} can't be negative")

    if not min_count:
        min_count = min(default_min_pool_count, all_node_count, eligible_node_count)
        if min_count <= 0:
            raise InsufficientNodesError(
                1, eligible_node_count,
                "MinPoolCount can't be 0: Preferred nodes not found",
            )
    if max_count is None:
        max_count = min_count + max_pool_count_offset
    if min_count > max_count:
        raise ConfigValidationError(
            f"MaxPoolCount {max_count} can't be less than MinPoolCount {min_count}"
        )
    return min_count, max_count


def _pick_device_class(host: str, by_class: Mapping[str, Mapping[str, Sequence[str]]],
                       observed: Sequence[str]) -> Optional[tuple[str, Sequence[str]]]:
    """Device class a host draws its devices from.

    The class holding most of the host's observed devices wins, then the
    class with most devices on the host, then the first class seen.
    """
    observed = set(observed)
    best = None
    best_score = None
    for device_class, hosts in by_class.items():
        names = hosts.get(host)
        if not names:
            continue
        score = (sum(1 for name in names if name in observed), len(names))
        if best_score is None or score > best_score:
            best, best_score = (device_class, names), score
    return best


@dataclass(frozen=True)
class PlanningResult:
    """Desired state produced by one plan() call."""
    node_plan: tuple[PlanNode, ...]
    topology: PoolTopology
    min_pool_count: int
    max_pool_count: int
    skipped_hosts: tuple[str, ...] = field(default=())

    def to_document(self) -> dict:
        return {
            "minPoolCount": self.min_pool_count,
            "maxPoolCount": self.max_pool_count,
            "nodePlan": [node.to_dict() for node in self.node_plan],
            "skippedHosts": list(self.skipped_hosts),
            "topology": self.topology.to_document(),
        }


class PoolPlanner:
    """Plans nodes and device groups for one pool cluster.

    Parameters
    ----------
    config : InternalConfig
        Resolved runtime configuration.

    Examples
    --------
    >>> planner = PoolPlanner(config)
    >>> result = planner.plan(records)
    >>> [n.name for n in result.node_plan]
    ['node-a', 'node-b', 'node-c']
    """

    def __init__(self, config: "InternalConfig"):
        self.config = config
        self.host_label_key = config.planner.host_label_key
        self.raid_type = config.pool.raid_type

    def _partition(self, records: Sequence[ResourceRecord]):
        evaluator = ConditionEvaluator()
        evaluator.register_condition(NODES, all_of(kind_equals(NODE_KIND)))
        evaluator.register_condition(
            DEVICES,
            all_of(kind_equals(BLOCK_DEVICE_KIND), self.config.devices.selector.to_condition()),
        )
        result = evaluator.evaluate_all(records)
        if logger.isEnabledFor(logging.DEBUG):
            for name, reasons in result.all_failure_reasons().items():
                logger.debug("Not selected %s: %s", name, "; ".join(reasons))
        return result.matches_for(NODES).records, result.matches_for(DEVICES).records

    def _desired_devices(self, hosts: Sequence[str], devices: Sequence[ResourceRecord],
                         observed: Mapping[str, Sequence[str]]):
        per_host = self.config.devices.count_per_host or min_group_size(self.raid_type)
        by_class = group_device_names_by_class_and_host(devices, self.host_label_key)

        desired: dict[str, list[str]] = {}
        skipped: list[str] = []
        for host in hosts:
            picked = _pick_device_class(host, by_class, observed.get(host, ()))
            if picked is None:
                logger.warning("Host %s has no eligible block devices; skipping", host)
                skipped.append(host)
                continue
            device_class, names = picked
            logger.debug("Host %s uses %d %s devices", host, len(names), device_class)
            desired[host] = order_devices(observed.get(host, ()), names)[:per_host]
        return desired, skipped

    def plan(
        self,
        records: Iterable[ResourceRecord],
        observed_plan: Optional[Sequence[PlanEntry]] = None,
        observed_topology: Optional[Union[PoolTopology, Mapping]] = None,
    ) -> PlanningResult:
        """Compute the desired node plan and topology.

        Parameters
        ----------
        records : iterable of ResourceRecord
            Nodes and block devices of the fleet. Other kinds are ignored.
        observed_plan : sequence of PlanNode, optional
            Node plan applied previously.
        observed_topology : PoolTopology or dict, optional
            Pool cluster applied previously (model or document form).

        Returns
        -------
        PlanningResult

        Raises
        ------
        ConfigValidationError, InsufficientNodesError,
        DeviceCountConstraintError, InvalidRecordError
            When the inputs cannot be planned.
        """
        records = list(records)
        if observed_topology is not None and not isinstance(observed_topology, PoolTopology):
            observed_topology = PoolTopology.from_document(
                observed_topology, host_label_key=self.host_label_key
            )

        nodes, devices = self._partition(records)
        node_planner = NodePlanner.from_records(nodes, self.config.pool.allowed_nodes)

        min_count, max_count = resolve_pool_counts(
            self.config.pool.min_pool_count,
            self.config.pool.max_pool_count,
            node_planner.all_node_count,
            node_planner.eligible_node_count,
            self.config.planner.default_min_pool_count,
            self.config.planner.max_pool_count_offset,
        )
        logger.info(
            "Planning %s/%s: %d eligible of %d nodes, pool count [%d, %d], raid %s",
            self.config.pool.namespace, self.config.pool.name,
            node_planner.eligible_node_count, node_planner.all_node_count,
            min_count, max_count, self.raid_type,
        )

        node_plan = node_planner.evaluate_desired_nodes(observed_plan, min_count, max_count)
        assert_node_plan(node_plan, min_count, max_count,
                         node_planner.eligibility.plan_nodes())

        by_key = {(n.name, n.uid): n for n in node_planner.eligibility.nodes}
        hosts = [host_name_of(by_key[(e.name, e.uid)], self.host_label_key) for e in node_plan]

        desired, skipped = self._desired_devices(
            hosts, devices, observed_devices_by_host(observed_topology)
        )
        topology = build_topology(
            observed_host_names(observed_topology),
            observed_devices_by_host(observed_topology),
            desired,
            self.raid_type,
            self.config.pool.annotations,
            name=self.config.pool.name,
            namespace=self.config.pool.namespace,
            labels=self.config.pool.labels,
            host_label_key=self.host_label_key,
        )
        assert_topology(topology)

        logger.info(
            "Planned %d nodes and %d pools (%d hosts skipped)",
            len(node_plan), len(topology.pools), len(skipped),
        )
        return PlanningResult(
            node_plan=tuple(node_plan),
            topology=topology,
            min_pool_count=min_count,
            max_pool_count=max_count,
            skipped_hosts=tuple(skipped),
        )
