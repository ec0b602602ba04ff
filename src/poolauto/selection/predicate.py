"""Composable predicates over resource records.

A Check is one primitive test that either passes (returns None) or
returns a human readable failure reason. A Condition composes checks and
other conditions with AND (default) or OR semantics:

- AND stops at the first failing child and records its reason(s)
- OR stops at the first passing child, otherwise records every reason

Constructors validate their arguments eagerly and raise
ConfigValidationError for missing kinds, keys or empty maps.
"""

from enum import Enum
from typing import Any, Callable, Iterable, Mapping, NamedTuple, Optional, Sequence, Union

from poolauto.contracts.failure import ConfigValidationError, NilRecordError
from poolauto.records.record import ResourceRecord


class Operator(str, Enum):
    """How a Condition combines its children."""
    AND = "and"
    OR = "or"


class ExpressionOperator(str, Enum):
    """Operators of field, label and annotation expressions."""
    IN = "In"
    NOT_IN = "NotIn"
    EXISTS = "Exists"
    DOES_NOT_EXIST = "DoesNotExist"


class SliceOperator(str, Enum):
    """Operators of slice expressions.

    ``In`` means every value is present (any order), ``Equals`` means the
    slice is exactly the values in the same order.
    """
    IN = "In"
    NOT_IN = "NotIn"
    EQUALS = "Equals"
    NOT_EQUALS = "NotEquals"


class ConditionOutcome(NamedTuple):
    passed: bool
    reasons: tuple[str, ...] = ()


class Check:
    """A single named test against a record.

    Parameters
    ----------
    description : str
        Short readable form, e.g. ``IsKind(Node)``.
    test : callable
        ``test(record) -> Optional[str]``; None means pass, a string is the
        failure reason.
    """

    def __init__(self, description: str, test: Callable[[ResourceRecord], Optional[str]]):
        self.description = description
        self._test = test

    def evaluate(self, record: ResourceRecord) -> Optional[str]:
        return self._test(record)

    def __repr__(self) -> str:
        return f"Check({self.description})"


def _text(value: Any) -> Any:
    """Scalar values compare as text, the way selectors state them."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


def _values_equal(actual: Any, expected: Any) -> bool:
    return actual == expected or _text(actual) == _text(expected)


def _require_text(value: Any, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigValidationError(message)
    return value


def match_all() -> Check:
    """A check that every record passes."""
    return Check("MatchAll", lambda record: None)


def kind_equals(kind: str) -> Check:
    _require_text(kind, "Invalid IsKind: Missing kind")

    def test(record):
        if record.kind == kind:
            return None
        return f"IsKind failed: Want {kind!r} got {record.kind!r}"

    return Check(f"IsKind({kind})", test)


def api_version_equals(api_version: str) -> Check:
    _require_text(api_version, "Invalid IsAPIVersion: Missing apiVersion")

    def test(record):
        if record.api_version == api_version:
            return None
        return f"IsAPIVersion failed: Want {api_version!r} got {record.api_version!r}"

    return Check(f"IsAPIVersion({api_version})", test)


def uid_equals(uid: str) -> Check:
    _require_text(uid, "Invalid IsUID: Missing uid")

    def test(record):
        if record.uid == uid:
            return None
        return f"IsUID failed: Want {uid!r} got {record.uid!r}"

    return Check(f"IsUID({uid})", test)


def field_path_equals(path: str, value: Any) -> Check:
    _require_text(path, "Invalid FieldPathEquals: Missing path")

    def test(record):
        found, actual = record.lookup(path)
        if not found:
            return f"FieldPathEquals failed: Path {path!r} not found"
        if _values_equal(actual, value):
            return None
        return f"FieldPathEquals failed: Path {path!r}: Want {value!r} got {actual!r}"

    return Check(f"FieldPathEquals({path}={value})", test)


def has_label(key: str, value: str) -> Check:
    _require_text(key, "Invalid HasLabel: Missing label key")

    def test(record):
        if key in record.labels and record.labels[key] == value:
            return None
        return f"HasLabel failed: Can't find label key {key!r} with value {value!r}"

    return Check(f"HasLabel({key}={value})", test)


def has_labels(labels: Mapping[str, str]) -> Check:
    if not labels:
        raise ConfigValidationError("Invalid HasLabels: No labels were provided")
    checks = [has_label(key, value) for key, value in labels.items()]

    def test(record):
        for check in checks:
            reason = check.evaluate(record)
            if reason is not None:
                return reason
        return None

    return Check(f"HasLabels({dict(labels)})", test)


def has_annotation(key: str, value: str) -> Check:
    _require_text(key, "Invalid HasAnnotation: Missing annotation key")

    def test(record):
        if key in record.annotations and record.annotations[key] == value:
            return None
        return f"HasAnnotation failed: Can't find annotation key {key!r} with value {value!r}"

    return Check(f"HasAnnotation({key}={value})", test)


def has_annotations(annotations: Mapping[str, str]) -> Check:
    if not annotations:
        raise ConfigValidationError("Invalid HasAnnotations: No annotations were provided")
    checks = [has_annotation(key, value) for key, value in annotations.items()]

    def test(record):
        for check in checks:
            reason = check.evaluate(record)
            if reason is not None:
                return reason
        return None

    return Check(f"HasAnnotations({dict(annotations)})", test)


def _as_list(value: Any) -> Optional[list]:
    if isinstance(value, (list, tuple)):
        return [_text(item) for item in value]
    return None


def contains_slice(path: str, values: Sequence[str], ordered: bool = False) -> Check:
    """The list at ``path`` holds every value, or equals ``values`` when ordered."""
    _require_text(path, "Invalid ContainsSlice: Missing path")
    if not values:
        raise ConfigValidationError(f"Invalid ContainsSlice: No values were provided for {path!r}")
    wanted = [_text(v) for v in values]

    def test(record):
        found, actual = record.lookup(path)
        items = _as_list(actual) if found else None
        if items is None:
            return f"ContainsSlice failed: Path {path!r} is not a list"
        if ordered:
            if items == wanted:
                return None
            return f"ContainsSlice failed: Path {path!r}: Want {wanted!r} got {items!r}"
        missing = [v for v in wanted if v not in items]
        if not missing:
            return None
        return f"ContainsSlice failed: Path {path!r}: Missing {missing!r}"

    relation = "equals" if ordered else "contains"
    return Check(f"ContainsSlice({path} {relation} {wanted})", test)


def _validate_expression(label: str, key: str, operator: ExpressionOperator,
                         values: Sequence[str]) -> ExpressionOperator:
    _require_text(key, f"Invalid {label}: Missing key")
    try:
        operator = ExpressionOperator(operator)
    except ValueError as exc:
        raise ConfigValidationError(f"Invalid {label}: Unsupported operator {operator!r}") from exc
    if operator in (ExpressionOperator.IN, ExpressionOperator.NOT_IN) and not values:
        raise ConfigValidationError(
            f"Invalid {label}: Operator {operator.value} on {key!r} needs values"
        )
    if operator in (ExpressionOperator.EXISTS, ExpressionOperator.DOES_NOT_EXIST) and values:
        raise ConfigValidationError(
            f"Invalid {label}: Operator {operator.value} on {key!r} takes no values"
        )
    return operator


def _expression_check(label: str, key: str, operator: ExpressionOperator,
                      values: Sequence[str],
                      lookup: Callable[[ResourceRecord], tuple]) -> Check:
    operator = _validate_expression(label, key, operator, values)
    wanted = [_text(v) for v in values]

    def test(record):
        found, actual = lookup(record)
        if operator is ExpressionOperator.EXISTS:
            passed = found
        elif operator is ExpressionOperator.DOES_NOT_EXIST:
            passed = not found
        elif operator is ExpressionOperator.IN:
            passed = found and _text(actual) in wanted
        else:
            passed = not found or _text(actual) not in wanted
        if passed:
            return None
        if found:
            return f"{label} failed: {key!r} {operator.value} {wanted!r}: got {actual!r}"
        return f"{label} failed: {key!r} {operator.value} {wanted!r}: not found"

    return Check(f"{label}({key} {operator.value} {wanted})", test)


def field_path_matches(path: str, operator: Union[str, ExpressionOperator],
                       values: Sequence[str] = ()) -> Check:
    return _expression_check("FieldPathMatches", path, operator, values,
                             lambda record: record.lookup(path))


def label_matches(key: str, operator: Union[str, ExpressionOperator],
                  values: Sequence[str] = ()) -> Check:
    return _expression_check("LabelMatches", key, operator, values,
                             lambda record: (key in record.labels, record.labels.get(key)))


def annotation_matches(key: str, operator: Union[str, ExpressionOperator],
                       values: Sequence[str] = ()) -> Check:
    return _expression_check("AnnotationMatches", key, operator, values,
                             lambda record: (key in record.annotations,
                                             record.annotations.get(key)))


def slice_matches(path: str, operator: Union[str, SliceOperator],
                  values: Sequence[str]) -> Check:
    _require_text(path, "Invalid SliceMatches: Missing path")
    try:
        operator = SliceOperator(operator)
    except ValueError as exc:
        raise ConfigValidationError(
            f"Invalid SliceMatches: Unsupported operator {operator!r}"
        ) from exc
    if not values:
        raise ConfigValidationError(
            f"Invalid SliceMatches: Operator {operator.value} on {path!r} needs values"
        )
    wanted = [_text(v) for v in values]

    def test(record):
        found, actual = record.lookup(path)
        items = (_as_list(actual) if found else None) or []
        if operator is SliceOperator.IN:
            passed = all(v in items for v in wanted)
        elif operator is SliceOperator.NOT_IN:
            passed = not any(v in items for v in wanted)
        elif operator is SliceOperator.EQUALS:
            passed = items == wanted
        else:
            passed = items != wanted
        if passed:
            return None
        return f"SliceMatches failed: {path!r} {operator.value} {wanted!r}: got {items!r}"

    return Check(f"SliceMatches({path} {operator.value} {wanted})", test)


class Condition:
    """AND/OR composition of checks and nested conditions.

    Parameters
    ----------
    children : iterable of Check or Condition
        At least one child is required.
    operator : Operator
        ``Operator.AND`` (default) or ``Operator.OR``.

    Raises
    ------
    ConfigValidationError
        If no children are given or a child is neither a Check nor a
        Condition.

    Examples
    --------
    >>> cond = all_of(kind_equals("Node"), has_label("zone", "a"))
    >>> cond.matches(node_record)
    True
    """

    def __init__(self, children: Iterable[Union[Check, "Condition"]],
                 operator: Union[str, Operator] = Operator.AND):
        children = tuple(children)
        if not children:
            raise ConfigValidationError("Invalid condition: No checks were provided")
        for child in children:
            if not isinstance(child, (Check, Condition)):
                raise ConfigValidationError(
                    f"Invalid condition: Unsupported child {child!r}"
                )
        try:
            self.operator = Operator(operator)
        except ValueError as exc:
            raise ConfigValidationError(
                f"Invalid condition: Unsupported operator {operator!r}"
            ) from exc
        self.children = children

    def evaluate(self, record: ResourceRecord) -> ConditionOutcome:
        if record is None:
            raise NilRecordError()
        reasons: list[str] = []
        for child in self.children:
            passed, child_reasons = _evaluate_child(child, record)
            if self.operator is Operator.AND:
                if not passed:
                    return ConditionOutcome(False, child_reasons)
            else:
                if passed:
                    return ConditionOutcome(True, ())
                reasons.extend(child_reasons)
        if self.operator is Operator.AND:
            return ConditionOutcome(True, ())
        return ConditionOutcome(False, tuple(reasons))

    def matches(self, record: ResourceRecord) -> bool:
        return self.evaluate(record).passed

    def __repr__(self) -> str:
        joined = f" {self.operator.value.upper()} ".join(
            child.description if isinstance(child, Check) else repr(child)
            for child in self.children
        )
        return f"({joined})"


def _evaluate_child(child, record) -> tuple[bool, tuple[str, ...]]:
    if isinstance(child, Condition):
        return child.evaluate(record)
    reason = child.evaluate(record)
    if reason is None:
        return True, ()
    return False, (reason,)


def all_of(*children: Union[Check, Condition]) -> Condition:
    """AND-composed condition."""
    return Condition(children, Operator.AND)


def any_of(*children: Union[Check, Condition]) -> Condition:
    """OR-composed condition."""
    return Condition(children, Operator.OR)
