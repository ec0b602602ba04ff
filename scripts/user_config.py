"""poolauto User Configuration.

This is the user-facing configuration file. Modify settings here to customize
the planner behavior. Expert defaults live in poolauto.schemas.param.

Usage:
    python scripts/run_pool_planner.py scripts/example_state.json --config scripts/user_config.py
    python scripts/run_pool_planner.py scripts/example_state.json --config scripts/user_config.py --raid-type raidz
"""

CONFIG = {
    # ========================================================================
    # POOL CLUSTER IDENTITY
    # ========================================================================
    "POOL_NAME": "fast-pool",
    "NAMESPACE": "openebs",
    "LABELS": {"app": "poolauto"},
    "ANNOTATIONS": {},

    # ========================================================================
    # POOL SIZE & REDUNDANCY
    # ========================================================================
    "RAID_TYPE": "mirror",     # "stripe", "mirror", "raidz" or "raidz2"
    "MIN_POOL_COUNT": None,    # None = min(3, eligible nodes)
    "MAX_POOL_COUNT": None,    # None = min + 2
    "DEVICES_PER_HOST": None,  # None = RAID minimum group size

    # ========================================================================
    # SELECTION
    # ========================================================================
    # Nodes that may host a pool (OR of terms, AND within a term)
    "ALLOWED_NODES": [
        {"matchLabels": {"storage": "enabled"}},
    ],
    # Block devices that may join a pool
    "DEVICE_SELECTOR": [
        {"matchFields": {"status.state": "Active"}},
    ],

    # ========================================================================
    # LOGGING
    # ========================================================================
    "LOG_LEVEL": "INFO",
}
