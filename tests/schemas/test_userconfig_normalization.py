import pytest
from pydantic import ValidationError

from poolauto.schemas.user import UserConfig


def test_uppercase_keys_are_handled():
    raw = {
        "POOL_NAME": "fast-pool",
        "NAMESPACE": "openebs",
        "MIN_POOL_COUNT": 2,
        "MAX_POOL_COUNT": 4,
        "RAID_TYPE": "RAIDZ",
        "DEVICES_PER_HOST": 3,
        "LOG_LEVEL": "debug",
    }

    user = UserConfig.model_validate(raw)

    assert user.pool_name == "fast-pool"
    assert user.namespace == "openebs"
    assert (user.min_pool_count, user.max_pool_count) == (2, 4)
    assert user.raid_type == "raidz"
    assert user.devices_per_host == 3
    assert user.log_level == "DEBUG"


def test_field_names_are_accepted_too():
    user = UserConfig(pool_name="p", raid_type="Mirror")
    assert user.pool_name == "p"
    assert user.raid_type == "mirror"


def test_unknown_keys_are_ignored():
    raw = {"POOL_NAME": "p", "UNKNOWN_LEGACY": 12345}
    user = UserConfig.model_validate(raw)

    assert user.pool_name == "p"
    # Unknown key should not become an attribute nor raise
    assert not hasattr(user, "UNKNOWN_LEGACY")


def test_invalid_raid_type_is_rejected():
    with pytest.raises(ValidationError, match="Invalid RAID type 'raid5'"):
        UserConfig.model_validate({"RAID_TYPE": "raid5"})


def test_whitespace_is_stripped():
    user = UserConfig.model_validate({"POOL_NAME": "  fast  "})
    assert user.pool_name == "fast"


def test_overrides_only_contain_given_values():
    user = UserConfig.model_validate({"RAID_TYPE": "stripe", "LOG_FILE": "/tmp/plan.log"})

    overrides = user.to_internal_overrides()

    assert overrides == {
        "pool": {"raid_type": "stripe"},
        "logging": {"log_file": "/tmp/plan.log"},
    }


def test_selector_overrides_use_document_keys():
    user = UserConfig.model_validate({"ALLOWED_NODES": [{"matchLabels": {"zone": "a"}}]})

    selector = user.to_internal_overrides()["pool"]["allowed_nodes"]

    assert selector["selectorTerms"][0]["matchLabels"] == {"zone": "a"}


def test_host_label_key_goes_to_planner_section():
    user = UserConfig.model_validate({"HOST_LABEL_KEY": "example.com/host"})
    assert user.to_internal_overrides() == {"planner": {"host_label_key": "example.com/host"}}
