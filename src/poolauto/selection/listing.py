"""Selector driven partitioning of record lists.

ListSelection filters a collection by a selector into matches and
no-matches. Computing the partition is an explicit step; the stored
partition is reused until ``invalidate()`` is called, unless caching is
disabled. A new collection means a new ListSelection.

matches_desired() answers "is the observed record already in the desired
state?" by merging a partial desired document onto the observed one and
comparing the result with the observed document.
"""

import logging
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from poolauto.contracts.failure import NilRecordError
from poolauto.core.merge import deep_merge
from poolauto.records.record import ResourceRecord
from poolauto.selection.evaluator import ConditionEvaluator
from poolauto.selection.selector import Selector, SelectorLike, as_selector


logger = logging.getLogger(__name__)

DesiredLike = Union[ResourceRecord, Mapping[str, Any]]

_MATCH = "match"


def _desired_identity(desired: DesiredLike) -> tuple[str, str, str, str]:
    if isinstance(desired, ResourceRecord):
        return desired.identity
    metadata = desired.get("metadata") or {}
    return (
        desired.get("apiVersion", ""),
        desired.get("kind", ""),
        metadata.get("namespace") or "",
        metadata.get("name", ""),
    )


def _desired_document(desired: DesiredLike) -> dict:
    if isinstance(desired, ResourceRecord):
        return desired.to_document()
    return dict(desired)


def _contains(records: Sequence[ResourceRecord], target: ResourceRecord) -> bool:
    if target is None:
        raise NilRecordError(what="target")
    return any(record.identity == target.identity for record in records)


def is_desired_state(observed: ResourceRecord, desired: DesiredLike) -> bool:
    """True if merging ``desired`` onto ``observed`` changes nothing."""
    observed_doc = observed.to_document()
    merged = deep_merge(observed_doc, _desired_document(desired))
    return merged == observed_doc


class SelectionPartition:
    """Matches and no-matches of one selection pass, with pure readers."""

    def __init__(self, matches: Iterable[ResourceRecord], nomatches: Iterable[ResourceRecord]):
        self.matches = tuple(matches)
        self.nomatches = tuple(nomatches)

    def match_contains(self, target: ResourceRecord) -> bool:
        return _contains(self.matches, target)

    def no_match_contains(self, target: ResourceRecord) -> bool:
        return _contains(self.nomatches, target)

    def match_contains_all(self, targets: Sequence[ResourceRecord]) -> bool:
        """True if the matches are exactly ``targets`` (any order)."""
        return len(self.matches) == len(targets) and all(
            self.match_contains(t) for t in targets
        )

    def no_match_contains_all(self, targets: Sequence[ResourceRecord]) -> bool:
        """True if the no-matches are exactly ``targets`` (any order)."""
        return len(self.nomatches) == len(targets) and all(
            self.no_match_contains(t) for t in targets
        )

    def match_count(self, count: int) -> bool:
        return len(self.matches) == count

    def no_match_count(self, count: int) -> bool:
        return len(self.nomatches) == count

    def matches_desired(self, desired: Optional[DesiredLike]) -> bool:
        """True if a match shares ``desired``'s identity and is already in
        the desired state. Not found is False.

        Raises
        ------
        NilRecordError
            If ``desired`` is None.
        """
        if desired is None:
            raise NilRecordError(what="desired state")
        identity = _desired_identity(desired)
        for observed in self.matches:
            if observed.identity == identity:
                return is_desired_state(observed, desired)
        return False

    def matches_desired_all(self, desired: Sequence[DesiredLike]) -> bool:
        """True if every desired entry matches. An empty list is False."""
        if not desired:
            return False
        return all(self.matches_desired(d) for d in desired)


class ListSelection:
    """Partition ``records`` by ``selector``.

    Parameters
    ----------
    selector : Selector, dict, list or None
        None or an empty selector matches every record.
    records : iterable of ResourceRecord
        The collection to filter.
    disable_cache : bool
        When True, partition() recomputes on every call.

    Raises
    ------
    NilRecordError
        If ``records`` contains None.
    """

    def __init__(self, selector: SelectorLike, records: Iterable[ResourceRecord],
                 disable_cache: bool = False):
        self.selector: Selector = as_selector(selector)
        self.records = tuple(records)
        for index, record in enumerate(self.records):
            if record is None:
                raise NilRecordError(index)
        self.disable_cache = disable_cache
        self._partition: Optional[SelectionPartition] = None

    def compute(self) -> SelectionPartition:
        """Run the selection and store the partition."""
        evaluator = ConditionEvaluator()
        evaluator.register_condition(_MATCH, self.selector.to_condition())
        result = evaluator.evaluate_all(self.records)
        matches = result.matches_for(_MATCH).records
        nomatches = result.rejects()
        self._partition = SelectionPartition(matches, nomatches)
        logger.debug("Selection: %d matches, %d no-matches", len(matches), len(nomatches))
        return self._partition

    def partition(self) -> SelectionPartition:
        """Stored partition, computing it when absent or caching is off."""
        if self.disable_cache or self._partition is None:
            return self.compute()
        return self._partition

    def invalidate(self) -> None:
        self._partition = None

    def with_records(self, records: Iterable[ResourceRecord]) -> "ListSelection":
        """A fresh selection over ``records`` with the same selector."""
        return ListSelection(self.selector, records, disable_cache=self.disable_cache)

    @property
    def matches(self) -> tuple[ResourceRecord, ...]:
        return self.partition().matches

    @property
    def nomatches(self) -> tuple[ResourceRecord, ...]:
        return self.partition().nomatches


def matches_desired(selector: SelectorLike, observed_records: Iterable[ResourceRecord],
                    desired: Optional[DesiredLike]) -> bool:
    """Is the observed record identified by ``desired`` already in that state?

    The observed record must match ``selector`` and share apiVersion, kind,
    namespace and name with ``desired``. ``desired`` may be a partial
    document: fields it omits are taken from the observed record, lists it
    carries replace the observed lists.

    Returns
    -------
    bool
        False when no matching observed record exists.

    Raises
    ------
    NilRecordError
        If ``desired`` is None or ``observed_records`` contains None.

    Examples
    --------
    >>> desired = {"apiVersion": "v1", "kind": "Node",
    ...            "metadata": {"name": "a", "labels": {"zone": "x"}}}
    >>> matches_desired(None, [node_a], desired)
    True
    """
    if desired is None:
        raise NilRecordError(what="desired state")
    return ListSelection(selector, observed_records).partition().matches_desired(desired)
