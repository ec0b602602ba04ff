"""Node and topology planning."""

from poolauto.planning.devices import (
    device_class_of,
    group_device_names_by_class_and_host,
    group_device_names_by_host,
    host_name_of,
    observed_devices_by_host,
    observed_host_names,
)
from poolauto.planning.node_planner import EligibleNodes, NodePlanner, validate_pool_counts
from poolauto.planning.planner import PlanningResult, PoolPlanner, resolve_pool_counts
from poolauto.planning.topology import (
    PoolSpec,
    PoolTopology,
    RaidGroup,
    build_topology,
    order_devices,
    order_hosts,
)

__all__ = [
    "device_class_of",
    "group_device_names_by_class_and_host",
    "group_device_names_by_host",
    "host_name_of",
    "observed_devices_by_host",
    "observed_host_names",
    "EligibleNodes",
    "NodePlanner",
    "validate_pool_counts",
    "PlanningResult",
    "PoolPlanner",
    "resolve_pool_counts",
    "PoolSpec",
    "PoolTopology",
    "RaidGroup",
    "build_topology",
    "order_devices",
    "order_hosts",
]
