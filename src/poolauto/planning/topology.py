"""Pool topology model and builder.

build_topology() turns a per-host list of desired devices into a pool
topology, keeping whatever the observed topology already had in place:

- hosts that are still desired keep their observed order, new hosts follow
- devices that are still desired keep their observed order, new ones follow
- every host needs a positive multiple of the RAID minimum group size
- groups are contiguous slices of exactly the minimum size
"""

import logging
from typing import Any, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

from poolauto.contracts.failure import (
    ConfigValidationError,
    DeviceCountConstraintError,
    InvalidRecordError,
)
from poolauto.records.raid import (
    DEFAULT_RAID_TYPE,
    RaidType,
    min_group_size,
    parse_raid_type,
    validate_group_device_count,
)
from poolauto.records.record import (
    DEFAULT_HOST_LABEL_KEY,
    DEFAULT_NAMESPACE,
    DEFAULT_POOL_NAME,
    POOL_API_VERSION,
    POOL_CLUSTER_KIND,
    ResourceRecord,
)

logger = logging.getLogger(__name__)


class _TopologyModel(BaseModel):
    model_config = ConfigDict(extra='forbid', frozen=True, use_enum_values=True)


class RaidGroup(_TopologyModel):
    """One redundancy group: exactly the RAID minimum number of devices."""
    type: RaidType
    block_devices: tuple[str, ...]

    def to_document(self) -> dict:
        return {
            "type": self.type,
            "isWriteCache": False,
            "isSpare": False,
            "isReadCache": False,
            "blockDevices": [{"blockDeviceName": name} for name in self.block_devices],
        }


class PoolSpec(_TopologyModel):
    """The pool placed on one host."""
    host_name: str
    raid_groups: tuple[RaidGroup, ...]

    @property
    def block_devices(self) -> tuple[str, ...]:
        return tuple(d for group in self.raid_groups for d in group.block_devices)

    def to_document(self, raid_type: str, host_label_key: str) -> dict:
        return {
            "nodeSelector": {host_label_key: self.host_name},
            "raidGroups": [group.to_document() for group in self.raid_groups],
            "poolConfig": {
                "defaultRaidGroupType": raid_type,
                "overProvisioning": False,
                "compression": "off",
            },
        }


class PoolTopology(_TopologyModel):
    """Desired (or observed) layout of pools across hosts."""
    name: str = DEFAULT_POOL_NAME
    namespace: str = DEFAULT_NAMESPACE
    raid_type: RaidType = Field(DEFAULT_RAID_TYPE, validate_default=True)
    annotations: dict[str, str] = Field(default_factory=dict)
    labels: dict[str, str] = Field(default_factory=dict)
    host_label_key: str = DEFAULT_HOST_LABEL_KEY
    pools: tuple[PoolSpec, ...] = ()

    def host_names(self) -> list[str]:
        """Host names in pool order."""
        return [pool.host_name for pool in self.pools]

    def devices_by_host(self) -> dict[str, list[str]]:
        """Device names per host, in group order."""
        return {pool.host_name: list(pool.block_devices) for pool in self.pools}

    def to_document(self) -> dict:
        """Render the pool cluster document."""
        metadata: dict[str, Any] = {"name": self.name, "namespace": self.namespace}
        if self.annotations:
            metadata["annotations"] = dict(self.annotations)
        if self.labels:
            metadata["labels"] = dict(self.labels)
        return {
            "apiVersion": POOL_API_VERSION,
            "kind": POOL_CLUSTER_KIND,
            "metadata": metadata,
            "spec": {
                "pools": [
                    pool.to_document(self.raid_type, self.host_label_key)
                    for pool in self.pools
                ],
            },
        }

    @classmethod
    def from_document(cls, document: Union[Mapping[str, Any], ResourceRecord],
                      host_label_key: str = DEFAULT_HOST_LABEL_KEY) -> "PoolTopology":
        """Parse an observed pool cluster document.

        Raises
        ------
        InvalidRecordError
            If the document is not a pool cluster, a pool lacks its host
            selector or a group holds an invalid number of devices for its
            RAID type.
        """
        if isinstance(document, ResourceRecord):
            document = document.to_document()
        if not isinstance(document, Mapping):
            raise InvalidRecordError(f"Invalid pool cluster document: {document!r}")
        kind = document.get("kind", POOL_CLUSTER_KIND)
        if kind != POOL_CLUSTER_KIND:
            raise InvalidRecordError(
                f"Invalid pool cluster document: Want kind {POOL_CLUSTER_KIND!r} got {kind!r}"
            )
        metadata = document.get("metadata") or {}
        pools_doc = (document.get("spec") or {}).get("pools") or []

        raid_type = None
        pools = []
        for index, pool_doc in enumerate(pools_doc):
            host = (pool_doc.get("nodeSelector") or {}).get(host_label_key)
            if not host:
                raise InvalidRecordError(
                    f"Invalid pool cluster document: pool {index} has no "
                    f"{host_label_key!r} node selector"
                )
            pool_raid = (pool_doc.get("poolConfig") or {}).get("defaultRaidGroupType")
            groups = []
            for group_doc in pool_doc.get("raidGroups") or []:
                group_type = group_doc.get("type") or pool_raid or DEFAULT_RAID_TYPE.value
                devices = tuple(
                    device["blockDeviceName"]
                    for device in group_doc.get("blockDevices") or []
                    if device.get("blockDeviceName")
                )
                group_raid = parse_raid_type(group_type)
                try:
                    validate_group_device_count(group_raid, len(devices))
                except ConfigValidationError as exc:
                    raise InvalidRecordError(
                        f"Invalid pool cluster document: host {host!r}: {exc}"
                    ) from exc
                groups.append(RaidGroup(type=group_raid, block_devices=devices))
                raid_type = raid_type or group_type
            raid_type = raid_type or pool_raid
            pools.append(PoolSpec(host_name=host, raid_groups=tuple(groups)))

        return cls(
            name=metadata.get("name") or DEFAULT_POOL_NAME,
            namespace=metadata.get("namespace") or DEFAULT_NAMESPACE,
            raid_type=parse_raid_type(raid_type or DEFAULT_RAID_TYPE),
            annotations=metadata.get("annotations") or {},
            labels=metadata.get("labels") or {},
            host_label_key=host_label_key,
            pools=tuple(pools),
        )


def _ordered_unique(items) -> list:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def order_devices(observed: Sequence[str], desired: Sequence[str]) -> list[str]:
    """Observed devices still desired (observed order), then new ones.

    Examples
    --------
    >>> order_devices(["bd2", "bd1", "bd9"], ["bd1", "bd3", "bd2"])
    ['bd2', 'bd1', 'bd3']
    """
    wanted = set(desired)
    kept = [d for d in _ordered_unique(observed) if d in wanted]
    kept_set = set(kept)
    return kept + [d for d in _ordered_unique(desired) if d not in kept_set]


def order_hosts(host_order: Sequence[str], desired_hosts: Sequence[str]) -> list[str]:
    """Observed hosts still desired (observed order), then new hosts."""
    return order_devices(host_order, desired_hosts)


def build_topology(
    host_order: Optional[Sequence[str]],
    observed_host_to_devices: Optional[Mapping[str, Sequence[str]]],
    desired_host_to_devices: Mapping[str, Sequence[str]],
    raid_type: Union[str, RaidType],
    annotations: Optional[Mapping[str, str]] = None,
    *,
    name: str = DEFAULT_POOL_NAME,
    namespace: str = DEFAULT_NAMESPACE,
    labels: Optional[Mapping[str, str]] = None,
    host_label_key: str = DEFAULT_HOST_LABEL_KEY,
) -> PoolTopology:
    """Build a pool topology that stays close to the observed one.

    Parameters
    ----------
    host_order : sequence of str, optional
        Observed host order. Hosts no longer desired are dropped.
    observed_host_to_devices : mapping, optional
        Observed device names per host.
    desired_host_to_devices : mapping
        Desired device names per host. Hosts absent here are dropped; an
        explicit empty list is a zero count and therefore invalid.
    raid_type : str or RaidType
        Group type for every host.
    annotations, labels : mapping, optional
        Copied verbatim onto the topology.
    name, namespace : str
        Identity of the pool cluster.
    host_label_key : str
        Label used as node affinity in the rendered document.

    Returns
    -------
    PoolTopology
        Same inputs always give an identical topology.

    Raises
    ------
    ConfigValidationError
        If the RAID type is unknown or name/namespace are empty.
    DeviceCountConstraintError
        If any host's device count is not a positive multiple of the RAID
        minimum group size. Every offending host is listed in
        ``violations``.

    Examples
    --------
    >>> topo = build_topology([], {}, {"node-001": ["bd1", "bd2"]}, "mirror", {})
    >>> [g.block_devices for g in topo.pools[0].raid_groups]
    [('bd1', 'bd2')]
    """
    kind = parse_raid_type(raid_type)
    if not name or not name.strip():
        raise ConfigValidationError("Invalid pool topology: Missing name")
    if not namespace or not namespace.strip():
        raise ConfigValidationError("Invalid pool topology: Missing namespace")

    size = min_group_size(kind)
    observed = observed_host_to_devices or {}
    hosts = order_hosts(list(host_order or ()), list(desired_host_to_devices))

    final: dict[str, list[str]] = {}
    violations = []
    for host in hosts:
        devices = order_devices(observed.get(host, ()), desired_host_to_devices[host])
        if not devices or len(devices) % size != 0:
            violations.append((host, len(devices)))
        final[host] = devices

    if violations:
        host, count = violations[0]
        raise DeviceCountConstraintError(host, kind.value, count, size, violations)

    pools = []
    for host in hosts:
        devices = final[host]
        groups = tuple(
            RaidGroup(type=kind, block_devices=tuple(devices[i:i + size]))
            for i in range(0, len(devices), size)
        )
        pools.append(PoolSpec(host_name=host, raid_groups=groups))

    logger.debug(
        "Built %s topology %s/%s over %d hosts",
        kind.value, namespace, name, len(pools),
    )
    return PoolTopology(
        name=name,
        namespace=namespace,
        raid_type=kind,
        annotations=dict(annotations or {}),
        labels=dict(labels or {}),
        host_label_key=host_label_key,
        pools=tuple(pools),
    )
