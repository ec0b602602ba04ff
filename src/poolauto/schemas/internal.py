"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized and frozen.

The two optional pool counts are deliberate: None means "derive from the
fleet" and the planner resolves it against the eligible node count.
"""

from typing import Optional
from pydantic import ConfigDict, Field, model_validator

from poolauto.records.raid import min_group_size
from poolauto.schemas.base import PoolAutoBaseModel
from poolauto.schemas.param import LogLevel, RaidTypeName
from poolauto.selection.selector import Selector


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalPlannerConfig(PoolAutoBaseModel):
    """Runtime planner defaults."""
    default_min_pool_count: int = Field(ge=1)
    max_pool_count_offset: int = Field(ge=0)
    host_label_key: str = Field(min_length=1)


class InternalPoolConfig(PoolAutoBaseModel):
    """Runtime pool configuration."""
    name: str = Field(min_length=1)
    namespace: str = Field(min_length=1)
    min_pool_count: Optional[int] = Field(ge=0)
    max_pool_count: Optional[int] = Field(ge=0)
    raid_type: RaidTypeName
    allowed_nodes: Selector
    annotations: dict[str, str]
    labels: dict[str, str]


class InternalDeviceConfig(PoolAutoBaseModel):
    """Runtime device selection."""
    selector: Selector
    count_per_host: Optional[int] = Field(ge=1)


class InternalLoggingConfig(PoolAutoBaseModel):
    """Runtime logging configuration."""
    level: LogLevel
    log_file: Optional[str]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(PoolAutoBaseModel):
    """Authoritative runtime configuration.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.raid_type = config.pool.raid_type  # NOT .get()

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults beyond the documented pool count derivation
    - NO validation in runtime code
    """

    planner: InternalPlannerConfig
    pool: InternalPoolConfig
    devices: InternalDeviceConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def check_pool_shape(self):
        """Explicit bounds must be ordered; device count must fit the RAID type."""
        low, high = self.pool.min_pool_count, self.pool.max_pool_count
        if low is not None and high is not None and low > high:
            raise ValueError(
                f"max_pool_count {high} can't be less than min_pool_count {low}"
            )
        count = self.devices.count_per_host
        if count is not None:
            size = min_group_size(self.pool.raid_type)
            if count % size != 0:
                raise ValueError(
                    f"count_per_host {count} must be a multiple of {size} "
                    f"for RAID type {self.pool.raid_type!r}"
                )
        return self
