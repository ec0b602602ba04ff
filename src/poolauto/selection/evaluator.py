"""Named condition evaluation over a batch of records.

Register named conditions, run them once over a batch, then read the
partitioned results. Evaluation and reading are separate steps: the
evaluator hands back an immutable EvaluationResult, so readers never see a
half-evaluated batch.
"""

import logging
from typing import Iterable, NamedTuple, Optional, Union

from poolauto.contracts.failure import (
    ConfigValidationError,
    NilRecordError,
    NotEvaluatedError,
    UnknownConditionError,
)
from poolauto.records.record import ResourceRecord
from poolauto.selection.predicate import Check, Condition, all_of


logger = logging.getLogger(__name__)


class ConditionMatches(NamedTuple):
    records: tuple[ResourceRecord, ...]
    any_matched: bool


class EvaluationResult:
    """Outcome of one ConditionEvaluator.evaluate_all() pass.

    Parameters
    ----------
    condition_names : tuple of str
        Registered names in registration order.
    records : tuple of ResourceRecord
        The evaluated batch.
    passed : dict
        Condition name to indices of records that passed it.
    reasons : list of tuple
        Per record index, ``"<name>: <reason>"`` strings for every
        condition the record failed, in registration order.
    """

    def __init__(self, condition_names, records, passed, reasons):
        self._names = tuple(condition_names)
        self._records = tuple(records)
        self._passed = {name: tuple(indices) for name, indices in passed.items()}
        self._reasons = tuple(tuple(r) for r in reasons)

    @property
    def condition_names(self) -> tuple[str, ...]:
        return self._names

    @property
    def records(self) -> tuple[ResourceRecord, ...]:
        return self._records

    def _indices(self, name: str) -> tuple[int, ...]:
        if name not in self._passed:
            raise UnknownConditionError(name)
        return self._passed[name]

    def matches_for(self, name: str) -> ConditionMatches:
        """Records that passed condition ``name``, in batch order."""
        records = tuple(self._records[i] for i in self._indices(name))
        return ConditionMatches(records, bool(records))

    def first_match(self, name: str) -> Optional[ResourceRecord]:
        indices = self._indices(name)
        if not indices:
            return None
        return self._records[indices[0]]

    def failure_reasons_for(self, record: ResourceRecord) -> tuple[str, ...]:
        """Failure reasons of every batch entry sharing ``record``'s identity."""
        if record is None:
            raise NilRecordError()
        reasons: list[str] = []
        for index, candidate in enumerate(self._records):
            if candidate.identity == record.identity:
                reasons.extend(self._reasons[index])
        return tuple(reasons)

    def all_failure_reasons(self) -> dict[str, tuple[str, ...]]:
        """Unique record name to failure reasons, for records that failed any."""
        collected: dict[str, list[str]] = {}
        for record, reasons in zip(self._records, self._reasons):
            if reasons:
                collected.setdefault(record.unique_name, []).extend(reasons)
        return {name: tuple(reasons) for name, reasons in collected.items()}

    def rejects(self) -> tuple[ResourceRecord, ...]:
        """Records that passed none of the registered conditions."""
        matched = set()
        for indices in self._passed.values():
            matched.update(indices)
        return tuple(r for i, r in enumerate(self._records) if i not in matched)


class ConditionEvaluator:
    """Evaluates named conditions against a batch of records.

    Examples
    --------
    >>> evaluator = ConditionEvaluator()
    >>> evaluator.register_condition("nodes", all_of(kind_equals("Node")))
    >>> result = evaluator.evaluate_all(records)
    >>> result.matches_for("nodes").records
    """

    def __init__(self):
        self._conditions: dict[str, Condition] = {}
        self._result: Optional[EvaluationResult] = None

    def register_condition(self, name: str, condition: Union[Condition, Check]) -> "ConditionEvaluator":
        """Register ``condition`` under ``name``.

        Re-registering a name replaces the condition but keeps its position.
        Previous results are discarded.

        Raises
        ------
        ConfigValidationError
            If the name is empty or the condition is not a Condition/Check.
        """
        if not isinstance(name, str) or not name.strip():
            raise ConfigValidationError("Invalid condition name: name is empty")
        if isinstance(condition, Check):
            condition = all_of(condition)
        if not isinstance(condition, Condition):
            raise ConfigValidationError(f"Invalid condition {name!r}: got {condition!r}")
        self._conditions[name] = condition
        self._result = None
        return self

    @property
    def condition_names(self) -> tuple[str, ...]:
        return tuple(self._conditions)

    def evaluate_all(self, records: Iterable[ResourceRecord]) -> EvaluationResult:
        """Evaluate every registered condition against every record once.

        Raises
        ------
        ConfigValidationError
            If no condition is registered.
        NilRecordError
            If the batch contains None; nothing is evaluated.
        """
        if not self._conditions:
            raise ConfigValidationError("No conditions were registered")
        batch = list(records)
        for index, record in enumerate(batch):
            if record is None:
                raise NilRecordError(index)

        passed: dict[str, list[int]] = {name: [] for name in self._conditions}
        reasons: list[list[str]] = [[] for _ in batch]
        for index, record in enumerate(batch):
            for name, condition in self._conditions.items():
                outcome = condition.evaluate(record)
                if outcome.passed:
                    passed[name].append(index)
                else:
                    reasons[index].extend(f"{name}: {reason}" for reason in outcome.reasons)

        self._result = EvaluationResult(self._conditions, batch, passed, reasons)
        logger.debug(
            "Evaluated %d conditions over %d records: %s",
            len(self._conditions), len(batch),
            {name: len(indices) for name, indices in passed.items()},
        )
        return self._result

    @property
    def result(self) -> EvaluationResult:
        if self._result is None:
            raise NotEvaluatedError()
        return self._result

    def matches_for(self, name: str) -> ConditionMatches:
        return self.result.matches_for(name)

    def failure_reasons_for(self, record: ResourceRecord) -> tuple[str, ...]:
        return self.result.failure_reasons_for(record)

    def rejects(self) -> tuple[ResourceRecord, ...]:
        return self.result.rejects()
