"""Core pool planning execution logic.

This module contains the actual planner runner, separated from argument
parsing. Scripts are thin wrappers; this is the real implementation and the
only place that reads or writes files.
"""

import json
import logging
import importlib.util
from pathlib import Path
from typing import Any, Dict, Optional

from poolauto.contracts.failure import InvalidRecordError
from poolauto.planning import PoolPlanner, PoolTopology
from poolauto.records import PlanNode, ResourceRecord
from poolauto.schemas import CLIConfig, InternalConfig, ParamConfig, UserConfig, resolve_config


logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing CONFIG dict.

    Returns
    -------
    dict
        Raw user configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("poolauto_user_config", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    # Find CONFIG dict
    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def load_state(state_path: str) -> Dict[str, Any]:
    """Load the observed state file.

    The file is JSON with ``records`` (or ``items``) holding resource
    documents, and optional ``observedPlan`` and ``observedTopology``.

    Returns
    -------
    dict
        ``records`` (list of ResourceRecord), ``observed_plan`` (list of
        PlanNode) and ``observed_topology`` (PoolTopology document or None).

    Raises
    ------
    FileNotFoundError
        If the state file does not exist.
    InvalidRecordError
        If the file is not a JSON object or a record is malformed.
    """
    path = Path(state_path)
    if not path.exists():
        raise FileNotFoundError(f"State not found: {path}")

    with open(path) as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise InvalidRecordError(f"State file {path} must hold a JSON object")

    documents = raw.get("records", raw.get("items", []))
    return {
        "records": [ResourceRecord.from_document(doc) for doc in documents],
        "observed_plan": [PlanNode.from_dict(entry) for entry in raw.get("observedPlan") or []],
        "observed_topology": raw.get("observedTopology"),
    }


def setup_logging(config: InternalConfig) -> None:
    """Configure the root logger from ``config.logging``.

    Clears existing handlers, then adds a console handler and, when
    ``log_file`` is set, a file handler.
    """
    log_level = getattr(logging, config.logging.level, logging.INFO)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    if config.logging.log_file:
        log_path = Path(config.logging.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    root.addHandler(ch)

    logger.info("Logging: level=%s, file=%s", config.logging.level, config.logging.log_file)


def resolve_run_config(
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    verbose: bool = False,
) -> InternalConfig:
    """Resolve configuration (Param < User < CLI) for one run."""
    param_cfg = ParamConfig()

    if user_config_path:
        user_cfg = UserConfig.model_validate(load_user_config_dict(user_config_path))
    else:
        user_cfg = UserConfig()

    cli_args = dict(cli_args or {})
    if verbose and "log_level" not in cli_args:
        cli_args["log_level"] = "DEBUG"

    # Filter None values
    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    return resolve_config(param_cfg, user_cfg, cli_cfg)


def run_planner(
    state_path: str,
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    output_path: Optional[str] = None,
    verbose: bool = False,
    configure_logging: bool = True,
) -> dict:
    """Plan the desired pool state for an observed state file.

    This is the core execution function. It:
    1. Loads and resolves configuration (Param < User < CLI)
    2. Configures logging
    3. Loads records and the observed plan/topology
    4. Runs PoolPlanner and writes the desired state as JSON

    Parameters
    ----------
    state_path : str
        JSON file with records and the observed state.
    user_config_path : str, optional
        Python file with a CONFIG dict.
    cli_args : dict, optional
        CLI argument overrides. Keys: pool_name, namespace, raid_type,
        min_pool_count, max_pool_count, log_level, log_file. All optional.
    output_path : str, optional
        Where to write the desired state. Printed to stdout when omitted.
    verbose : bool, optional
        If True, enable DEBUG logging and print full resolved config.
    configure_logging : bool, optional
        Set to False when the caller manages logging.

    Returns
    -------
    dict
        The desired state document.

    Raises
    ------
    FileNotFoundError
        If an input file does not exist.
    pydantic.ValidationError
        If configuration validation fails.
    PoolAutoError
        If the observed state cannot be planned.

    Examples
    --------
    Plan with the defaults::

        run_planner("state.json")

    Plan with a user config and CLI overrides::

        run_planner(
            "state.json",
            "scripts/user_config.py",
            cli_args={"raid_type": "raidz", "min_pool_count": 3},
            output_path="desired.json",
        )
    """
    config = resolve_run_config(user_config_path, cli_args, verbose)
    if configure_logging:
        setup_logging(config)

    state = load_state(state_path)

    print(f"\n{'='*60}")
    print("Pool Planner")
    print('='*60)
    print(f"State:   {state_path}")
    print(f"Config:  {user_config_path or '(defaults)'}")
    print(f"Pool:    {config.pool.namespace}/{config.pool.name}")
    print(f"RAID:    {config.pool.raid_type}")
    print(f"Records: {len(state['records'])}")
    print('='*60)

    if verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(mode="json", by_alias=True), indent=2))
        print('='*60)

    observed_topology = state["observed_topology"]
    if observed_topology is not None:
        observed_topology = PoolTopology.from_document(
            observed_topology, host_label_key=config.planner.host_label_key
        )

    result = PoolPlanner(config).plan(
        state["records"],
        observed_plan=state["observed_plan"],
        observed_topology=observed_topology,
    )
    document = result.to_document()

    rendered = json.dumps(document, indent=2)
    if output_path:
        out = Path(output_path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(rendered + "\n")
        logger.info("Desired state written to %s", out)
    else:
        print(rendered)

    return document
