"""Node plan contract.

Enforces the guarantee that a node plan handed to topology building is
within bounds, free of duplicates and made only of eligible nodes.
"""

from typing import Iterable, Sequence

from poolauto.contracts.base import require


def assert_node_plan(plan: Sequence, min_count: int, max_count: int,
                     eligible: Iterable = ()) -> None:
    """Enforce node plan contract.

    Parameters
    ----------
    plan : sequence of PlanNode
        Output of NodePlanner.evaluate_desired_nodes()

    min_count, max_count : int
        Resolved pool count bounds.

    eligible : iterable of PlanNode, optional
        When given, every plan entry must be one of these.

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    require(
        min_count <= len(plan) <= max_count,
        f"Node plan contract violated: {len(plan)} nodes outside [{min_count}, {max_count}]"
    )

    keys = [(node.name, node.uid) for node in plan]
    require(
        len(set(keys)) == len(keys),
        f"Node plan contract violated: duplicate entries in {keys}"
    )

    eligible_keys = {(node.name, node.uid) for node in eligible}
    if eligible_keys:
        strangers = [key for key in keys if key not in eligible_keys]
        require(
            not strangers,
            f"Node plan contract violated: ineligible nodes {strangers}"
        )
