"""Grouping of block devices and observed pools by host.

Devices are grouped first by class and then by host. A device class is the
device type and drive type, plus the physical sector size when one is
reported, e.g. ``disk-HDD``, ``disk-SSD-4096``. A raid group is only ever
formed from devices of one class, so an SSD never mirrors an HDD.
"""

import logging
from typing import Iterable, Optional

from poolauto.contracts.failure import InvalidRecordError, NilRecordError
from poolauto.planning.topology import PoolTopology
from poolauto.records.record import (
    BLOCK_DEVICE_KIND,
    DEFAULT_HOST_LABEL_KEY,
    NODE_KIND,
    ResourceRecord,
)

logger = logging.getLogger(__name__)

DEVICE_TYPE_PATH = "spec.details.deviceType"
DRIVE_TYPE_PATH = "spec.details.driveType"
SECTOR_SIZE_PATH = "spec.details.physicalSectorSize"

DEVICE_TYPE_UNKNOWN = "Unknown"
DRIVE_TYPE_UNKNOWN = "Unknown"


def host_name_of(record: ResourceRecord, host_label_key: str = DEFAULT_HOST_LABEL_KEY) -> str:
    """Host a record lives on.

    Nodes without the host label fall back to their own name; any other
    record must carry the label.

    Raises
    ------
    InvalidRecordError
        If a non-node record has no host label.
    """
    host = record.labels.get(host_label_key)
    if host:
        return host
    if record.kind == NODE_KIND:
        return record.name
    raise InvalidRecordError(
        f"Can't find host for {record.kind} {record.name!r}: missing label {host_label_key!r}"
    )


def device_class_of(device: ResourceRecord) -> str:
    """Class key of a block device.

    Examples
    --------
    >>> device_class_of(ssd_with_4k_sectors)
    'disk-SSD-4096'
    >>> device_class_of(ResourceRecord(kind="BlockDevice", name="bd1"))
    'Unknown-Unknown'
    """
    _, device_type = device.lookup(DEVICE_TYPE_PATH)
    _, drive_type = device.lookup(DRIVE_TYPE_PATH)
    key = f"{device_type or DEVICE_TYPE_UNKNOWN}-{drive_type or DRIVE_TYPE_UNKNOWN}"

    found, sector_size = device.lookup(SECTOR_SIZE_PATH)
    if found and sector_size not in (None, "", 0, "0"):
        key = f"{key}-{sector_size}"
    return key


def _checked_devices(devices: Iterable[ResourceRecord], host_label_key: str):
    """Yield (host, device) pairs, skipping devices that have no host."""
    for index, device in enumerate(devices):
        if device is None:
            raise NilRecordError(index, what="block device")
        if device.kind != BLOCK_DEVICE_KIND:
            raise InvalidRecordError(
                f"Invalid kind {device.kind!r} for {device.name!r}: want {BLOCK_DEVICE_KIND!r}"
            )
        try:
            host = host_name_of(device, host_label_key)
        except InvalidRecordError:
            logger.warning("Block device %s not considered: host name not present", device.name)
            continue
        yield host, device


def group_device_names_by_host(devices: Iterable[ResourceRecord],
                               host_label_key: str = DEFAULT_HOST_LABEL_KEY) -> dict[str, list[str]]:
    """Device names per host, hosts in order of first appearance.

    Devices without a host label are skipped with a warning.

    Raises
    ------
    NilRecordError
        If ``devices`` contains None.
    InvalidRecordError
        If a record is not a block device.
    """
    grouped: dict[str, list[str]] = {}
    for host, device in _checked_devices(devices, host_label_key):
        names = grouped.setdefault(host, [])
        if device.name not in names:
            names.append(device.name)
    return grouped


def group_device_names_by_class_and_host(
    devices: Iterable[ResourceRecord],
    host_label_key: str = DEFAULT_HOST_LABEL_KEY,
) -> dict[str, dict[str, list[str]]]:
    """Device names per class, then per host.

    Classes and hosts appear in order of first appearance. Devices without
    a host label are skipped with a warning.

    Returns
    -------
    dict
        ``{device class: {host: [device name, ...]}}``

    Raises
    ------
    NilRecordError
        If ``devices`` contains None.
    InvalidRecordError
        If a record is not a block device.
    """
    grouped: dict[str, dict[str, list[str]]] = {}
    for host, device in _checked_devices(devices, host_label_key):
        names = grouped.setdefault(device_class_of(device), {}).setdefault(host, [])
        if device.name not in names:
            names.append(device.name)
    return grouped


def observed_host_names(topology: Optional[PoolTopology]) -> list[str]:
    if topology is None:
        return []
    return topology.host_names()


def observed_devices_by_host(topology: Optional[PoolTopology]) -> dict[str, list[str]]:
    if topology is None:
        return {}
    return topology.devices_by_host()
