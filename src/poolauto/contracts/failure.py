"""Exception hierarchy for pool planning.

Planning fails fast and once. Every error the planner can raise for bad
input derives from PoolAutoError and carries the context needed to report
it. ContractViolation stays separate: it signals a planner bug, not bad
input.

Key distinction:
- pydantic.ValidationError: malformed configuration file or CLI values
- PoolAutoError subclasses: inputs that cannot be planned
- ContractViolation: planner produced output breaking its own invariants
"""

from typing import Optional


class PoolAutoError(Exception):
    """Base class for all planning errors."""

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context


class ConfigValidationError(PoolAutoError, ValueError):
    """Planning parameters are invalid.

    Raised for unknown RAID types, negative pool counts, min greater than
    max, a zero minimum, and malformed checks or conditions.
    """


class EvaluatorUsageError(PoolAutoError, RuntimeError):
    """The condition evaluator was used out of order."""


class NotEvaluatedError(EvaluatorUsageError):
    """Results were read before evaluate_all() was invoked."""

    def __init__(self, message: str = "Eval must be invoked before reading results"):
        super().__init__(message)


class UnknownConditionError(EvaluatorUsageError):
    """A condition name was never registered."""

    def __init__(self, name: str):
        super().__init__(f"Invalid condition {name!r}", name=name)
        self.name = name


class InvalidRecordError(PoolAutoError, ValueError):
    """A resource record is malformed for the operation requested."""


class NilRecordError(InvalidRecordError):
    """A batch contained None where a record was expected."""

    def __init__(self, index: Optional[int] = None, what: str = "record"):
        if index is None:
            message = f"Nil {what} found"
        else:
            message = f"Nil {what} found at index {index}"
        super().__init__(message, index=index)
        self.index = index


class InsufficientNodesError(PoolAutoError):
    """Not enough eligible nodes to satisfy the requested pool count."""

    def __init__(self, want: int, got: int, message: Optional[str] = None):
        if message is None:
            message = f"Insufficient eligible nodes: want {want} got {got}"
        super().__init__(message, want=want, got=got)
        self.want = want
        self.got = got


class DeviceCountConstraintError(PoolAutoError):
    """A host's device count is not a positive multiple of the RAID minimum.

    The first offending host is exposed through ``host``, ``raid_type``,
    ``count`` and ``multiple``; ``violations`` lists every offender as
    (host, count) pairs in host order.
    """

    def __init__(self, host: str, raid_type: str, count: int, multiple: int,
                 violations: Optional[list] = None):
        message = (
            f"Invalid disk count {count} w.r.t RAID {raid_type!r} on host {host!r}: "
            f"want a positive multiple of {multiple}"
        )
        if violations and len(violations) > 1:
            others = ", ".join(f"{h}={c}" for h, c in violations[1:])
            message = f"{message} (also: {others})"
        super().__init__(message, host=host, raid_type=raid_type,
                         count=count, multiple=multiple)
        self.host = host
        self.raid_type = raid_type
        self.count = count
        self.multiple = multiple
        self.violations = list(violations) if violations else [(host, count)]


class ContractViolation(RuntimeError):
    """Raised when a planning contract is violated.

    This indicates a bug in planner logic, not bad user input. It means a
    planning stage did not produce the invariants it promised.
    """
    pass
