"""Resource record value types, plan entries and RAID tables."""

from poolauto.records.record import (
    BLOCK_DEVICE_KIND,
    DEFAULT_HOST_LABEL_KEY,
    NODE_KIND,
    POOL_API_VERSION,
    POOL_CLUSTER_KIND,
    FieldLookup,
    PlanNode,
    ResourceRecord,
)
from poolauto.records.raid import (
    DEFAULT_RAID_TYPE,
    RAID_MIN_GROUP_SIZE,
    SUPPORTED_RAID_TYPES,
    RaidType,
    is_valid_device_count,
    min_group_size,
    parse_raid_type,
    validate_group_device_count,
)

__all__ = [
    "BLOCK_DEVICE_KIND",
    "DEFAULT_HOST_LABEL_KEY",
    "NODE_KIND",
    "POOL_API_VERSION",
    "POOL_CLUSTER_KIND",
    "FieldLookup",
    "PlanNode",
    "ResourceRecord",
    "DEFAULT_RAID_TYPE",
    "RAID_MIN_GROUP_SIZE",
    "SUPPORTED_RAID_TYPES",
    "RaidType",
    "is_valid_device_count",
    "min_group_size",
    "parse_raid_type",
    "validate_group_device_count",
]
