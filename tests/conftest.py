"""Root-level pytest fixtures for the poolauto test suite.

Provides shared configuration fixtures following the Pydantic-based
configuration layers, plus record builders.
"""

import pytest
from pathlib import Path
import tempfile
import shutil

from poolauto.schemas import ParamConfig, UserConfig, resolve_config

from helpers.fake_records import make_devices, make_nodes


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides)."""
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_raidz(make_config):
    ...     config = make_config(raid_type="raidz")
    ...     assert config.pool.raid_type == "raidz"
    """
    def _make(**user_overrides):
        """Create InternalConfig with user overrides."""
        if user_overrides:
            user = UserConfig(**user_overrides)
            return resolve_config(param_config, user, None)
        else:
            return resolve_config(param_config, None, None)

    return _make


# =============================================================================
# Record Fixtures
# =============================================================================

@pytest.fixture
def three_nodes():
    """Nodes a, b, c created one day apart (a oldest)."""
    return make_nodes("a", "b", "c")


@pytest.fixture
def small_fleet():
    """Three labelled nodes with two active devices each."""
    records = make_nodes("node-a", "node-b", "node-c", labels={"storage": "enabled"})
    for host in ("node-a", "node-b", "node-c"):
        records.extend(make_devices(host, f"{host}-bd1", f"{host}-bd2"))
    return records


# =============================================================================
# Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)
