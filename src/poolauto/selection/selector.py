"""Selector schemas: OR of terms, AND within a term.

Selectors are configuration, so they are Pydantic models that accept the
camelCase keys used in resource documents. Every selector compiles to a
predicate Condition; matching always goes through the predicate evaluator.
"""

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from poolauto.records.record import ResourceRecord
from poolauto.selection.predicate import (
    Condition,
    ExpressionOperator,
    SliceOperator,
    all_of,
    annotation_matches,
    any_of,
    contains_slice,
    field_path_equals,
    field_path_matches,
    has_annotation,
    has_label,
    label_matches,
    match_all,
    slice_matches,
)


class _SelectorModel(BaseModel):
    model_config = ConfigDict(
        extra='forbid',
        frozen=True,
        populate_by_name=True,
        use_enum_values=True,
        str_strip_whitespace=True,
    )


class SelectorRequirement(_SelectorModel):
    """``key operator values`` for fields, labels and annotations."""
    key: str = Field(..., min_length=1)
    operator: ExpressionOperator
    values: tuple[str, ...] = ()

    @field_validator("values", mode="before")
    @classmethod
    def coerce_values(cls, v):
        """Accept a single string or scalars."""
        if v is None:
            return ()
        if isinstance(v, (str, int, float, bool)):
            v = [v]
        return tuple(str(item) for item in v)

    @model_validator(mode="after")
    def check_values_for_operator(self):
        if self.operator in ("In", "NotIn") and not self.values:
            raise ValueError(f"operator {self.operator} on {self.key!r} needs values")
        if self.operator in ("Exists", "DoesNotExist") and self.values:
            raise ValueError(f"operator {self.operator} on {self.key!r} takes no values")
        return self


class SliceRequirement(_SelectorModel):
    """``path operator values`` against a list valued path."""
    key: str = Field(..., min_length=1)
    operator: SliceOperator
    values: tuple[str, ...] = Field(..., min_length=1)

    @field_validator("values", mode="before")
    @classmethod
    def coerce_values(cls, v):
        if isinstance(v, str):
            v = [v]
        return tuple(str(item) for item in v)


class SelectorTerm(_SelectorModel):
    """Conjunction of constraints. A term with no constraints matches all."""
    match_fields: dict[str, str] = Field(default_factory=dict, alias="matchFields")
    match_field_expressions: tuple[SelectorRequirement, ...] = Field(
        (), alias="matchFieldExpressions")
    match_labels: dict[str, str] = Field(default_factory=dict, alias="matchLabels")
    match_label_expressions: tuple[SelectorRequirement, ...] = Field(
        (), alias="matchLabelExpressions")
    match_annotations: dict[str, str] = Field(default_factory=dict, alias="matchAnnotations")
    match_annotation_expressions: tuple[SelectorRequirement, ...] = Field(
        (), alias="matchAnnotationExpressions")
    match_slice: dict[str, tuple[str, ...]] = Field(default_factory=dict, alias="matchSlice")
    match_slice_expressions: tuple[SliceRequirement, ...] = Field(
        (), alias="matchSliceExpressions")

    @field_validator("match_fields", mode="before")
    @classmethod
    def coerce_field_values(cls, v):
        """Field values are compared as text."""
        if isinstance(v, dict):
            return {
                key: ("true" if value is True else "false" if value is False else str(value))
                for key, value in v.items()
            }
        return v

    def is_empty(self) -> bool:
        return not any((
            self.match_fields, self.match_field_expressions,
            self.match_labels, self.match_label_expressions,
            self.match_annotations, self.match_annotation_expressions,
            self.match_slice, self.match_slice_expressions,
        ))

    def to_condition(self) -> Condition:
        checks = []
        for path, value in self.match_fields.items():
            checks.append(field_path_equals(path, value))
        for req in self.match_field_expressions:
            checks.append(field_path_matches(req.key, req.operator, req.values))
        for key, value in self.match_labels.items():
            checks.append(has_label(key, value))
        for req in self.match_label_expressions:
            checks.append(label_matches(req.key, req.operator, req.values))
        for key, value in self.match_annotations.items():
            checks.append(has_annotation(key, value))
        for req in self.match_annotation_expressions:
            checks.append(annotation_matches(req.key, req.operator, req.values))
        for path, values in self.match_slice.items():
            checks.append(contains_slice(path, values))
        for req in self.match_slice_expressions:
            checks.append(slice_matches(req.key, req.operator, req.values))
        if not checks:
            checks.append(match_all())
        return all_of(*checks)

    def matches(self, record: ResourceRecord) -> bool:
        return self.to_condition().matches(record)


class Selector(_SelectorModel):
    """Disjunction of selector terms.

    A record matches when it matches at least one term. A selector without
    terms matches every record.

    Examples
    --------
    >>> sel = Selector.model_validate(
    ...     {"selectorTerms": [{"matchLabels": {"pool": "fast"}}]}
    ... )
    >>> sel.matches(node)
    True
    """
    selector_terms: tuple[SelectorTerm, ...] = Field((), alias="selectorTerms")

    @model_validator(mode="before")
    @classmethod
    def accept_term_list(cls, data: Any) -> Any:
        """A bare list of terms is shorthand for ``{"selectorTerms": [...]}``."""
        if isinstance(data, (list, tuple)):
            return {"selectorTerms": list(data)}
        return data

    def is_empty(self) -> bool:
        return not self.selector_terms

    def to_condition(self) -> Condition:
        if not self.selector_terms:
            return any_of(match_all())
        return any_of(*(term.to_condition() for term in self.selector_terms))

    def matches(self, record: ResourceRecord) -> bool:
        return self.to_condition().matches(record)

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_defaults=True)


SelectorLike = Union[Selector, dict, list, None]


def as_selector(selector: SelectorLike) -> Selector:
    """Coerce a selector, its document form or None (match all) to Selector."""
    if selector is None:
        return Selector()
    if isinstance(selector, Selector):
        return selector
    return Selector.model_validate(selector)
