"""Topology contract.

Enforces the guarantee that a built topology only contains well formed
device groups.
"""

from typing import TYPE_CHECKING

from poolauto.contracts.base import require
from poolauto.records.raid import min_group_size

if TYPE_CHECKING:
    from poolauto.planning.topology import PoolTopology


def assert_topology(topology: "PoolTopology") -> None:
    """Enforce topology contract.

    Called after build_topology(). Verifies group sizes, device uniqueness
    per host and host uniqueness.

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    size = min_group_size(topology.raid_type)

    hosts = [pool.host_name for pool in topology.pools]
    require(
        len(set(hosts)) == len(hosts),
        f"Topology contract violated: duplicate hosts in {hosts}"
    )

    for pool in topology.pools:
        require(
            len(pool.raid_groups) > 0,
            f"Topology contract violated: host '{pool.host_name}' has no groups"
        )
        devices = []
        for group in pool.raid_groups:
            require(
                group.type == topology.raid_type,
                f"Topology contract violated: group type '{group.type}' on host "
                f"'{pool.host_name}', expected '{topology.raid_type}'"
            )
            require(
                len(group.block_devices) == size,
                f"Topology contract violated: group of {len(group.block_devices)} "
                f"devices on host '{pool.host_name}', expected {size}"
            )
            devices.extend(group.block_devices)
        require(
            len(set(devices)) == len(devices),
            f"Topology contract violated: duplicate devices on host '{pool.host_name}'"
        )
