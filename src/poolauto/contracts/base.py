"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for all contracts.
It enforces semantic invariants of planner output, not input validation.
"""

from poolauto.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Enforce a planning contract.

    Called at stage boundaries to verify the preceding stage produced the
    guaranteed invariants. Fail-fast: no recovery, no fallback.

    Parameters
    ----------
    condition : bool
        The invariant that must be true. If False, ContractViolation is raised.

    message : str
        Error message explaining the contract violation.

    Raises
    ------
    ContractViolation
        If condition is False. This indicates a bug in planner logic.

    Examples
    --------
    >>> require(len(plan) >= min_count, "Node plan contract: plan below minimum")
    """
    if not condition:
        raise ContractViolation(message)
