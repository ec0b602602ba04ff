#!/usr/bin/env python3
"""``poolauto`` Pool Planner Runner.

Usage:
    python scripts/run_pool_planner.py scripts/example_state.json
    python scripts/run_pool_planner.py scripts/example_state.json --config scripts/user_config.py
    python scripts/run_pool_planner.py scripts/example_state.json --raid-type raidz --min-pool-count 3

Note: User config in scripts/user_config.py, expert defaults in poolauto.schemas.param
"""

import sys
import argparse
from pathlib import Path

from pydantic import ValidationError

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from poolauto.cli import run_planner
from poolauto.contracts import PoolAutoError


def main():
    parser = argparse.ArgumentParser(description="Plan storage pools from an observed state file")
    parser.add_argument("state", help="Path to JSON state file (records, observedPlan, observedTopology)")
    parser.add_argument("--config", help="Path to user config file")
    parser.add_argument("--pool-name", help="Override pool cluster name")
    parser.add_argument("--namespace", help="Override pool cluster namespace")
    parser.add_argument("--raid-type", choices=["stripe", "mirror", "raidz", "raidz2"],
                        help="Override RAID type")
    parser.add_argument("--min-pool-count", type=int, help="Override minimum pool count")
    parser.add_argument("--max-pool-count", type=int, help="Override maximum pool count")
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument("--output", help="Write desired state JSON here instead of stdout")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    cli_args = {
        "pool_name": args.pool_name,
        "namespace": args.namespace,
        "raid_type": args.raid_type,
        "min_pool_count": args.min_pool_count,
        "max_pool_count": args.max_pool_count,
        "log_file": args.log_file,
    }

    try:
        run_planner(
            args.state,
            user_config_path=args.config,
            cli_args=cli_args,
            output_path=args.output,
            verbose=args.verbose,
        )
    except (PoolAutoError, ValidationError, FileNotFoundError) as e:
        print(f"Planning failed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
