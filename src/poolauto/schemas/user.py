"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs with flat UPPERCASE aliases (e.g.
RAID_TYPE → raid_type, MIN_POOL_COUNT → min_pool_count) as well as nested
sections for advanced users.

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults. Unknown keys are ignored.
"""

from typing import Optional
from pydantic import Field, field_validator

from poolauto.schemas.base import PoolAutoBaseModel
from poolauto.schemas.param import LogLevel, RaidTypeName, normalize_raid_type
from poolauto.selection.selector import Selector


class UserPlannerConfig(PoolAutoBaseModel):
    """User-facing planner defaults."""
    default_min_pool_count: Optional[int] = None
    max_pool_count_offset: Optional[int] = None
    host_label_key: Optional[str] = None


class UserPoolConfig(PoolAutoBaseModel):
    """User-facing pool config."""
    name: Optional[str] = None
    namespace: Optional[str] = None
    min_pool_count: Optional[int] = None
    max_pool_count: Optional[int] = None
    raid_type: Optional[RaidTypeName] = None
    allowed_nodes: Optional[Selector] = None
    annotations: Optional[dict[str, str]] = None
    labels: Optional[dict[str, str]] = None

    @field_validator("raid_type", mode="before")
    @classmethod
    def coerce_raid_type(cls, v):
        return normalize_raid_type(v)


class UserDeviceConfig(PoolAutoBaseModel):
    """User-facing device selection config."""
    selector: Optional[Selector] = None
    count_per_host: Optional[int] = None


def _selector_override(selector: Optional[Selector]) -> Optional[dict]:
    if selector is None:
        return None
    return selector.model_dump(by_alias=True)


class UserConfig(PoolAutoBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    Usage
    -----
        user_cfg = UserConfig.model_validate({
            "RAID_TYPE": "raidz",
            "MIN_POOL_COUNT": 3,
            "ALLOWED_NODES": [{"matchLabels": {"storage": "true"}}],
        })

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    pool_name: Optional[str] = Field(None, alias="POOL_NAME")
    namespace: Optional[str] = Field(None, alias="NAMESPACE")
    min_pool_count: Optional[int] = Field(None, alias="MIN_POOL_COUNT")
    max_pool_count: Optional[int] = Field(None, alias="MAX_POOL_COUNT")
    raid_type: Optional[RaidTypeName] = Field(None, alias="RAID_TYPE")
    allowed_nodes: Optional[Selector] = Field(None, alias="ALLOWED_NODES")
    device_selector: Optional[Selector] = Field(None, alias="DEVICE_SELECTOR")
    devices_per_host: Optional[int] = Field(None, alias="DEVICES_PER_HOST")
    annotations: Optional[dict[str, str]] = Field(None, alias="ANNOTATIONS")
    labels: Optional[dict[str, str]] = Field(None, alias="LABELS")
    host_label_key: Optional[str] = Field(None, alias="HOST_LABEL_KEY")
    log_level: Optional[LogLevel] = Field(None, alias="LOG_LEVEL")
    log_file: Optional[str] = Field(None, alias="LOG_FILE")

    # Nested overrides (advanced users)
    planner: Optional[UserPlannerConfig] = None
    pool: Optional[UserPoolConfig] = None
    devices: Optional[UserDeviceConfig] = None

    model_config = PoolAutoBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("raid_type", mode="before")
    @classmethod
    def coerce_raid_type(cls, v):
        """Accept any case for RAID type names."""
        return normalize_raid_type(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        # Planner section
        planner = {}
        if self.host_label_key is not None:
            planner["host_label_key"] = self.host_label_key
        if self.planner is not None:
            planner.update(self.planner.model_dump(exclude_none=True))
        if planner:
            overrides["planner"] = planner

        # Pool section
        pool = {}
        if self.pool_name is not None:
            pool["name"] = self.pool_name
        if self.namespace is not None:
            pool["namespace"] = self.namespace
        if self.min_pool_count is not None:
            pool["min_pool_count"] = self.min_pool_count
        if self.max_pool_count is not None:
            pool["max_pool_count"] = self.max_pool_count
        if self.raid_type is not None:
            pool["raid_type"] = self.raid_type
        if self.allowed_nodes is not None:
            pool["allowed_nodes"] = _selector_override(self.allowed_nodes)
        if self.annotations is not None:
            pool["annotations"] = dict(self.annotations)
        if self.labels is not None:
            pool["labels"] = dict(self.labels)

        # Merge with explicit pool config
        if self.pool is not None:
            explicit = self.pool.model_dump(exclude_none=True, exclude={"allowed_nodes"})
            pool.update(explicit)
            if self.pool.allowed_nodes is not None:
                pool["allowed_nodes"] = _selector_override(self.pool.allowed_nodes)
        if pool:
            overrides["pool"] = pool

        # Devices section
        devices = {}
        if self.device_selector is not None:
            devices["selector"] = _selector_override(self.device_selector)
        if self.devices_per_host is not None:
            devices["count_per_host"] = self.devices_per_host
        if self.devices is not None:
            if self.devices.selector is not None:
                devices["selector"] = _selector_override(self.devices.selector)
            if self.devices.count_per_host is not None:
                devices["count_per_host"] = self.devices.count_per_host
        if devices:
            overrides["devices"] = devices

        # Logging section
        logging_cfg = {}
        if self.log_level is not None:
            logging_cfg["level"] = self.log_level
        if self.log_file is not None:
            logging_cfg["log_file"] = self.log_file
        if logging_cfg:
            overrides["logging"] = logging_cfg

        return overrides
