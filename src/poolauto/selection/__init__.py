"""Record selection: predicates, named evaluation, selectors and listings."""

from poolauto.selection.predicate import (
    Check,
    Condition,
    ConditionOutcome,
    ExpressionOperator,
    Operator,
    SliceOperator,
    all_of,
    annotation_matches,
    any_of,
    api_version_equals,
    contains_slice,
    field_path_equals,
    field_path_matches,
    has_annotation,
    has_annotations,
    has_label,
    has_labels,
    kind_equals,
    label_matches,
    match_all,
    slice_matches,
    uid_equals,
)
from poolauto.selection.evaluator import ConditionEvaluator, ConditionMatches, EvaluationResult
from poolauto.selection.selector import (
    Selector,
    SelectorRequirement,
    SelectorTerm,
    SliceRequirement,
    as_selector,
)
from poolauto.selection.listing import (
    ListSelection,
    SelectionPartition,
    is_desired_state,
    matches_desired,
)

__all__ = [
    "Check",
    "Condition",
    "ConditionOutcome",
    "ExpressionOperator",
    "Operator",
    "SliceOperator",
    "all_of",
    "annotation_matches",
    "any_of",
    "api_version_equals",
    "contains_slice",
    "field_path_equals",
    "field_path_matches",
    "has_annotation",
    "has_annotations",
    "has_label",
    "has_labels",
    "kind_equals",
    "label_matches",
    "match_all",
    "slice_matches",
    "uid_equals",
    "ConditionEvaluator",
    "ConditionMatches",
    "EvaluationResult",
    "Selector",
    "SelectorRequirement",
    "SelectorTerm",
    "SliceRequirement",
    "as_selector",
    "ListSelection",
    "SelectionPartition",
    "is_desired_state",
    "matches_desired",
]
