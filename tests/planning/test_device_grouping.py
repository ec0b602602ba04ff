import logging

import pytest

from poolauto.contracts import InvalidRecordError, NilRecordError
from poolauto.planning import (
    PoolTopology,
    device_class_of,
    group_device_names_by_class_and_host,
    group_device_names_by_host,
    host_name_of,
    observed_devices_by_host,
    observed_host_names,
)
from poolauto.records import ResourceRecord

from helpers.fake_records import (
    make_device,
    make_devices,
    make_disk,
    make_node,
    make_pool_document,
)

pytestmark = pytest.mark.unit


def test_devices_grouped_in_first_seen_host_order():
    devices = [
        make_device("bd3", "h2"),
        make_device("bd1", "h1"),
        make_device("bd4", "h2"),
    ]
    assert group_device_names_by_host(devices) == {"h2": ["bd3", "bd4"], "h1": ["bd1"]}


def test_duplicate_device_names_collapse():
    devices = make_devices("h1", "bd1", "bd1", "bd2")
    assert group_device_names_by_host(devices) == {"h1": ["bd1", "bd2"]}


def test_custom_host_label_key():
    device = make_device("bd1", "h1", labels={"example.com/host": "rack-7"})
    assert group_device_names_by_host([device], "example.com/host") == {"rack-7": ["bd1"]}


def test_non_device_record_rejected():
    with pytest.raises(InvalidRecordError, match="Invalid kind 'Node'"):
        group_device_names_by_host([make_node("h1")])


def test_nil_device_rejected():
    with pytest.raises(NilRecordError, match="index 1"):
        group_device_names_by_host([make_device("bd1", "h1"), None])


def test_device_without_host_label_rejected():
    device = ResourceRecord(kind="BlockDevice", name="bd1")
    with pytest.raises(InvalidRecordError, match="missing label"):
        host_name_of(device)


def test_device_without_host_label_is_skipped(caplog):
    devices = [make_device("bd1", "h1"), ResourceRecord(kind="BlockDevice", name="stray")]

    with caplog.at_level(logging.WARNING, logger="poolauto.planning.devices"):
        grouped = group_device_names_by_host(devices)

    assert grouped == {"h1": ["bd1"]}
    assert "stray" in caplog.text


def test_device_class_keys():
    assert device_class_of(make_disk("bd1", "h1", "SSD", 4096)) == "disk-SSD-4096"
    assert device_class_of(make_disk("bd2", "h1", "HDD")) == "disk-HDD"
    assert device_class_of(make_disk("bd3", "h1", "HDD", 0)) == "disk-HDD"
    assert device_class_of(make_disk("bd4", "h1", "", device_type="")) == "Unknown-Unknown"
    assert device_class_of(make_device("bd5", "h1")) == "Unknown-Unknown"


def test_devices_grouped_by_class_then_host():
    devices = [
        make_disk("ssd1", "h1", "SSD"),
        make_disk("hdd1", "h1", "HDD", 512),
        make_disk("ssd2", "h2", "SSD"),
        make_disk("ssd3", "h1", "SSD"),
        ResourceRecord(kind="BlockDevice", name="stray"),
    ]

    assert group_device_names_by_class_and_host(devices) == {
        "disk-SSD": {"h1": ["ssd1", "ssd3"], "h2": ["ssd2"]},
        "disk-HDD-512": {"h1": ["hdd1"]},
    }


def test_class_grouping_rejects_other_kinds():
    with pytest.raises(InvalidRecordError, match="Invalid kind 'Node'"):
        group_device_names_by_class_and_host([make_node("h1")])


def test_node_falls_back_to_its_name():
    node = ResourceRecord(kind="Node", name="worker-1")
    assert host_name_of(node) == "worker-1"


def test_node_label_wins_over_name():
    assert host_name_of(make_node("worker-1", host="ip-10-0-0-1")) == "ip-10-0-0-1"


def test_observed_helpers_without_topology():
    assert observed_host_names(None) == []
    assert observed_devices_by_host(None) == {}


def test_observed_helpers_with_topology():
    topology = PoolTopology.from_document(
        make_pool_document({"h2": [["c", "d"]], "h1": [["a", "b"]]})
    )
    assert observed_host_names(topology) == ["h2", "h1"]
    assert observed_devices_by_host(topology) == {"h2": ["c", "d"], "h1": ["a", "b"]}
