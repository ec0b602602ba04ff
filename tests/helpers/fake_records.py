"""Builders for fake resource records used across the test suite."""

from datetime import datetime, timedelta, timezone

from poolauto.records import (
    BLOCK_DEVICE_KIND,
    DEFAULT_HOST_LABEL_KEY,
    NODE_KIND,
    ResourceRecord,
)

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_node(name, uid=None, age_days=None, labels=None, host=None):
    """Node record; ``age_days`` is the creation offset from EPOCH in days."""
    node_labels = {DEFAULT_HOST_LABEL_KEY: host or name}
    node_labels.update(labels or {})
    return ResourceRecord(
        api_version="v1",
        kind=NODE_KIND,
        name=name,
        uid=uid if uid is not None else f"uid-{name}",
        creation_timestamp=None if age_days is None else EPOCH + timedelta(days=age_days),
        labels=node_labels,
    )


def make_nodes(*names, labels=None):
    """Nodes created one day apart, in argument order."""
    return [make_node(n, age_days=i, labels=labels) for i, n in enumerate(names)]


def make_device(name, host, state="Active", labels=None, namespace="openebs", **fields):
    device_labels = {DEFAULT_HOST_LABEL_KEY: host}
    device_labels.update(labels or {})
    extra = {"status": {"state": state}}
    extra.update(fields)
    return ResourceRecord(
        api_version="openebs.io/v1alpha1",
        kind=BLOCK_DEVICE_KIND,
        name=name,
        namespace=namespace,
        uid=f"uid-{name}",
        labels=device_labels,
        fields=extra,
    )


def make_devices(host, *names, **kwargs):
    return [make_device(n, host, **kwargs) for n in names]


def make_disk(name, host, drive_type, sector_size=None, device_type="disk", **kwargs):
    """Block device reporting its device type, drive type and sector size."""
    details = {"deviceType": device_type, "driveType": drive_type}
    if sector_size is not None:
        details["physicalSectorSize"] = sector_size
    return make_device(name, host, spec={"details": details}, **kwargs)


def make_pool_document(pools, raid_type="mirror", name="pool-cluster", namespace="default"):
    """Pool cluster document from ``{host: [[dev, ...], ...]}`` group lists."""
    return {
        "apiVersion": "openebs.io/v1alpha1",
        "kind": "CStorPoolCluster",
        "metadata": {"name": name, "namespace": namespace},
        "spec": {
            "pools": [
                {
                    "nodeSelector": {DEFAULT_HOST_LABEL_KEY: host},
                    "raidGroups": [
                        {
                            "type": raid_type,
                            "blockDevices": [{"blockDeviceName": d} for d in group],
                        }
                        for group in groups
                    ],
                    "poolConfig": {"defaultRaidGroupType": raid_type},
                }
                for host, groups in pools.items()
            ],
        },
    }
