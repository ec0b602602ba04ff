"""RAID types and their minimum device group sizes."""

from enum import Enum
from types import MappingProxyType
from typing import Union

from poolauto.contracts.failure import ConfigValidationError


class RaidType(str, Enum):
    """Supported device group redundancy schemes."""
    STRIPE = "stripe"
    MIRROR = "mirror"
    RAIDZ = "raidz"
    RAIDZ2 = "raidz2"


DEFAULT_RAID_TYPE = RaidType.MIRROR

# Minimum number of devices that form one group of each type.
RAID_MIN_GROUP_SIZE = MappingProxyType({
    RaidType.STRIPE: 1,
    RaidType.MIRROR: 2,
    RaidType.RAIDZ: 3,
    RaidType.RAIDZ2: 6,
})

SUPPORTED_RAID_TYPES = tuple(t.value for t in RaidType)


def parse_raid_type(raid_type: Union[str, RaidType]) -> RaidType:
    """Normalise a RAID type name.

    Raises
    ------
    ConfigValidationError
        If the name is not one of the supported types.
    """
    if isinstance(raid_type, RaidType):
        return raid_type
    if isinstance(raid_type, str):
        try:
            return RaidType(raid_type.strip().lower())
        except ValueError:
            pass
    raise ConfigValidationError(
        f"Invalid RAID type {raid_type!r}: Supports {', '.join(SUPPORTED_RAID_TYPES)}",
        raid_type=raid_type,
    )


def min_group_size(raid_type: Union[str, RaidType]) -> int:
    """Return the minimum device group size for ``raid_type``.

    Examples
    --------
    >>> min_group_size("mirror")
    2
    >>> min_group_size(RaidType.RAIDZ2)
    6
    """
    return RAID_MIN_GROUP_SIZE[parse_raid_type(raid_type)]


def is_valid_device_count(raid_type: Union[str, RaidType], count: int) -> bool:
    """True if ``count`` is a positive exact multiple of the group size."""
    size = min_group_size(raid_type)
    return count > 0 and count % size == 0


def validate_group_device_count(raid_type: Union[str, RaidType], count: int) -> None:
    """Validate the device count of a single, explicitly sized group.

    Stricter than the per-host rule: a mirror group holds exactly 2 devices,
    a stripe any positive count, raidz ``2^n + 1`` and raidz2 ``2^n + 2``
    devices for some n >= 1.

    Raises
    ------
    ConfigValidationError
        If ``count`` is not a valid size for one group of ``raid_type``.
    """
    kind = parse_raid_type(raid_type)
    if kind is RaidType.STRIPE:
        valid = count > 0
    elif kind is RaidType.MIRROR:
        valid = count == 2
    elif kind is RaidType.RAIDZ:
        valid = _is_power_of_two(count - 1)
    else:
        valid = _is_power_of_two(count - 2)
    if not valid:
        raise ConfigValidationError(
            f"Invalid device count {count} for a {kind.value} group",
            raid_type=kind.value,
            count=count,
        )


def _is_power_of_two(n: int) -> bool:
    return n >= 2 and n & (n - 1) == 0
