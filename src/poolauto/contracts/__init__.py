"""Planning contracts and the error hierarchy.

Key principle:
- Pydantic validates config correctness
- PoolAutoError subclasses report inputs that cannot be planned
- Contracts validate planner correctness
"""

from poolauto.contracts.failure import (
    PoolAutoError,
    ConfigValidationError,
    EvaluatorUsageError,
    NotEvaluatedError,
    UnknownConditionError,
    InvalidRecordError,
    NilRecordError,
    InsufficientNodesError,
    DeviceCountConstraintError,
    ContractViolation,
)
from poolauto.contracts.base import require
from poolauto.contracts.plan import assert_node_plan
from poolauto.contracts.topology import assert_topology

__all__ = [
    "PoolAutoError",
    "ConfigValidationError",
    "EvaluatorUsageError",
    "NotEvaluatedError",
    "UnknownConditionError",
    "InvalidRecordError",
    "NilRecordError",
    "InsufficientNodesError",
    "DeviceCountConstraintError",
    "ContractViolation",
    "require",
    "assert_node_plan",
    "assert_topology",
]
