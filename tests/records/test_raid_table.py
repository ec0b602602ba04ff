import pytest

from poolauto.contracts import ConfigValidationError
from poolauto.records import (
    RAID_MIN_GROUP_SIZE,
    RaidType,
    is_valid_device_count,
    min_group_size,
    parse_raid_type,
    validate_group_device_count,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize("raid_type, size", [
    ("stripe", 1),
    ("mirror", 2),
    ("raidz", 3),
    ("raidz2", 6),
])
def test_min_group_size(raid_type, size):
    assert min_group_size(raid_type) == size
    assert min_group_size(RaidType(raid_type)) == size


def test_raid_names_are_case_insensitive():
    assert parse_raid_type(" RAIDZ2 ") is RaidType.RAIDZ2


def test_unknown_raid_type_is_rejected():
    with pytest.raises(ConfigValidationError, match="Invalid RAID type 'raid5'"):
        min_group_size("raid5")


def test_table_is_read_only():
    with pytest.raises(TypeError):
        RAID_MIN_GROUP_SIZE[RaidType.MIRROR] = 3


@pytest.mark.parametrize("raid_type, count, valid", [
    ("mirror", 2, True),
    ("mirror", 4, True),
    ("mirror", 3, False),
    ("mirror", 0, False),
    ("raidz", 6, True),
    ("raidz", 4, False),
    ("raidz2", 12, True),
    ("raidz2", 8, False),
    ("stripe", 5, True),
])
def test_device_count_multiple(raid_type, count, valid):
    assert is_valid_device_count(raid_type, count) is valid


@pytest.mark.parametrize("raid_type, count", [
    ("mirror", 2),
    ("stripe", 7),
    ("raidz", 3),
    ("raidz", 5),
    ("raidz", 9),
    ("raidz2", 4),
    ("raidz2", 6),
    ("raidz2", 10),
])
def test_single_group_sizes_accepted(raid_type, count):
    validate_group_device_count(raid_type, count)


@pytest.mark.parametrize("raid_type, count", [
    ("mirror", 4),
    ("stripe", 0),
    ("raidz", 4),
    ("raidz", 2),
    ("raidz2", 7),
    ("raidz2", 3),
])
def test_single_group_sizes_rejected(raid_type, count):
    with pytest.raises(ConfigValidationError, match="Invalid device count"):
        validate_group_device_count(raid_type, count)
