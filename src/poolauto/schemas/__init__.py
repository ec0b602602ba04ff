"""Pydantic configuration schemas for poolauto.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
"""

from poolauto.schemas.resolve import resolve_config
from poolauto.schemas.internal import InternalConfig
from poolauto.schemas.param import ParamConfig
from poolauto.schemas.user import UserConfig
from poolauto.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
]
