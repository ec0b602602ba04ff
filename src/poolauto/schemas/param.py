"""ParamConfig: Expert defaults for pool planning.

This module defines the complete default configuration. ALL planning
parameters must have defaults here. No runtime code defines fallback values;
this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator

from poolauto.records.raid import SUPPORTED_RAID_TYPES
from poolauto.records.record import DEFAULT_HOST_LABEL_KEY, DEFAULT_NAMESPACE, DEFAULT_POOL_NAME
from poolauto.schemas.base import PoolAutoBaseModel
from poolauto.selection.selector import Selector


RaidTypeName = Literal["stripe", "mirror", "raidz", "raidz2"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def normalize_raid_type(v):
    """Lower-case and strip RAID type names."""
    if isinstance(v, str):
        v = v.strip().lower()
        if v not in SUPPORTED_RAID_TYPES:
            raise ValueError(
                f"Invalid RAID type {v!r}: Supports {', '.join(SUPPORTED_RAID_TYPES)}"
            )
    return v


# =============================================================================
# Nested Configuration Models
# =============================================================================

class PlannerConfig(PoolAutoBaseModel):
    """Defaults used when pool counts are left unset."""
    default_min_pool_count: int = Field(
        3, ge=1, description="Upper bound for a defaulted minimum pool count")
    max_pool_count_offset: int = Field(
        2, ge=0, description="Defaulted max pool count is min plus this offset")
    host_label_key: str = Field(
        DEFAULT_HOST_LABEL_KEY, min_length=1,
        description="Label that names the host of nodes and block devices")


class PoolConfig(PoolAutoBaseModel):
    """Identity and shape of the pool cluster."""
    name: str = Field(DEFAULT_POOL_NAME, min_length=1)
    namespace: str = Field(DEFAULT_NAMESPACE, min_length=1)
    min_pool_count: Optional[int] = Field(None, ge=0, description="None derives it from the fleet")
    max_pool_count: Optional[int] = Field(None, ge=0, description="None derives it from min")
    raid_type: RaidTypeName = "mirror"
    allowed_nodes: Selector = Field(default_factory=Selector)
    annotations: dict[str, str] = Field(default_factory=dict)
    labels: dict[str, str] = Field(default_factory=dict)

    @field_validator("raid_type", mode="before")
    @classmethod
    def coerce_raid_type(cls, v):
        return normalize_raid_type(v)


class DeviceConfig(PoolAutoBaseModel):
    """Block device selection."""
    selector: Selector = Field(default_factory=Selector)
    count_per_host: Optional[int] = Field(
        None, ge=1, description="Devices per host; None uses the RAID minimum group size")


class LoggingConfig(PoolAutoBaseModel):
    """Logging configuration."""
    level: LogLevel = "INFO"
    log_file: Optional[str] = None

    @field_validator("level", mode="before")
    @classmethod
    def upper_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(PoolAutoBaseModel):
    """Complete expert configuration with all defaults.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)

    Runtime code only sees InternalConfig.
    """

    planner: PlannerConfig = Field(default_factory=PlannerConfig)
    pool: PoolConfig = Field(default_factory=PoolConfig)
    devices: DeviceConfig = Field(default_factory=DeviceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
