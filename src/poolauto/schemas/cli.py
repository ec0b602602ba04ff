"""CLIConfig: Command-line operational overrides.

Minimal configuration for parameters that commonly change between runs:
RAID type, pool count bounds, namespace, verbosity.

This schema handles command-line arguments parsed by argparse.
"""

from typing import Optional
from pydantic import Field, field_validator, model_validator

from poolauto.schemas.base import PoolAutoBaseModel
from poolauto.schemas.param import LogLevel, RaidTypeName, normalize_raid_type


class CLIConfig(PoolAutoBaseModel):
    """Command-line configuration overrides.

    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(raid_type="raidz", min_pool_count=3)
        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    pool_name: Optional[str] = None
    namespace: Optional[str] = None
    raid_type: Optional[RaidTypeName] = None
    min_pool_count: Optional[int] = Field(None, ge=0)
    max_pool_count: Optional[int] = Field(None, ge=0)
    log_level: Optional[LogLevel] = None
    log_file: Optional[str] = None

    @field_validator("raid_type", mode="before")
    @classmethod
    def coerce_raid_type(cls, v):
        return normalize_raid_type(v)

    @model_validator(mode="after")
    def check_count_order(self):
        """Both bounds given on the command line must be ordered."""
        if (self.min_pool_count is not None and self.max_pool_count is not None
                and self.min_pool_count > self.max_pool_count):
            raise ValueError(
                f"max_pool_count {self.max_pool_count} can't be less than "
                f"min_pool_count {self.min_pool_count}"
            )
        return self

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        pool = {}
        if self.pool_name is not None:
            pool["name"] = self.pool_name
        if self.namespace is not None:
            pool["namespace"] = self.namespace
        if self.raid_type is not None:
            pool["raid_type"] = self.raid_type
        if self.min_pool_count is not None:
            pool["min_pool_count"] = self.min_pool_count
        if self.max_pool_count is not None:
            pool["max_pool_count"] = self.max_pool_count
        if pool:
            overrides["pool"] = pool

        logging_cfg = {}
        if self.log_level is not None:
            logging_cfg["level"] = self.log_level
        if self.log_file is not None:
            logging_cfg["log_file"] = self.log_file
        if logging_cfg:
            overrides["logging"] = logging_cfg

        return overrides
