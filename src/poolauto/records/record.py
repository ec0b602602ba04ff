"""Resource record value types.

A ResourceRecord is the read-only input the planner works on: a node, a
block device or a previously applied pool cluster document. Well known
metadata is held in named fields; everything else (spec, status, ...) lives
in the ``fields`` extension map and is reached with dotted path lookups.
"""

import copy
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping, NamedTuple, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from poolauto.contracts.failure import InvalidRecordError, NilRecordError


NODE_KIND = "Node"
BLOCK_DEVICE_KIND = "BlockDevice"
POOL_CLUSTER_KIND = "CStorPoolCluster"
POOL_API_VERSION = "openebs.io/v1alpha1"
DEFAULT_HOST_LABEL_KEY = "kubernetes.io/hostname"
DEFAULT_POOL_NAME = "pool-cluster"
DEFAULT_NAMESPACE = "default"

_METADATA_SCALARS = {
    "name": "name",
    "namespace": "namespace",
    "uid": "uid",
    "creationTimestamp": "creation_timestamp",
    "finalizers": "finalizers",
}
_METADATA_MAPS = {"labels": "labels", "annotations": "annotations"}


class FieldLookup(NamedTuple):
    """Result of a path lookup: ``found`` is False when the path is absent."""
    found: bool
    value: Any = None


_MISSING = FieldLookup(False, None)


def _empty_map():
    return MappingProxyType({})


def _format_timestamp(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


class ResourceRecord(BaseModel):
    """Immutable resource record.

    Metadata maps and the ``fields`` map are copied on construction and held
    read-only; lookups hand out copies of nested values. Records hash by
    ``identity``.

    Parameters
    ----------
    api_version : str
        API group/version of the record (alias ``apiVersion``).
    kind : str
        Record kind, e.g. ``Node`` or ``BlockDevice``.
    name : str
        Record name, unique per (apiVersion, kind, namespace).
    namespace : str
        Empty for cluster scoped records.
    uid : str
        Identifier that changes when a record is deleted and re-created.
    creation_timestamp : datetime, optional
        Creation time used to rank nodes when a plan shrinks.
    labels, annotations : Mapping[str, str]
        Metadata maps.
    finalizers : tuple[str, ...]
        Metadata finalizers.
    fields : Mapping
        Every other top-level section of the record document.
    """

    model_config = ConfigDict(
        frozen=True,
        extra='forbid',
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    api_version: str = Field("", alias="apiVersion")
    kind: str
    name: str
    namespace: str = ""
    uid: str = ""
    creation_timestamp: Optional[datetime] = Field(None, alias="creationTimestamp")
    labels: Mapping[str, str] = Field(default_factory=_empty_map)
    annotations: Mapping[str, str] = Field(default_factory=_empty_map)
    finalizers: tuple[str, ...] = ()
    fields: Mapping[str, Any] = Field(default_factory=_empty_map)

    @field_validator("labels", "annotations", "fields", mode="after")
    @classmethod
    def read_only_maps(cls, v):
        """Detach from the caller's maps and wrap them read-only."""
        return MappingProxyType(copy.deepcopy(dict(v)))

    @field_validator("creation_timestamp", mode="after")
    @classmethod
    def assume_utc(cls, v):
        """Naive timestamps are taken as UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def __hash__(self):
        return hash(self.identity)

    @property
    def identity(self) -> tuple[str, str, str, str]:
        """(apiVersion, kind, namespace, name) used for hashing and dedup."""
        return (self.api_version, self.kind, self.namespace, self.name)

    @property
    def unique_name(self) -> str:
        """``apiVersion/kind[/namespace]/name``."""
        parts = [self.api_version, self.kind]
        if self.namespace:
            parts.append(self.namespace)
        parts.append(self.name)
        return "/".join(parts)

    def same_identity(self, other: "ResourceRecord") -> bool:
        return other is not None and self.identity == other.identity

    def lookup(self, path: str) -> FieldLookup:
        """Resolve a dotted path against the record.

        ``kind``, ``apiVersion`` and ``metadata.*`` resolve against the named
        fields. Label and annotation keys may themselves contain dots, so
        everything after ``metadata.labels.`` is taken as one key. Every
        other path walks the ``fields`` map.

        Parameters
        ----------
        path : str
            Dotted path such as ``metadata.labels.kubernetes.io/hostname``
            or ``spec.devlinks``.

        Returns
        -------
        FieldLookup
            ``found`` is False when any segment of the path is absent.

        Examples
        --------
        >>> record.lookup("spec.capacity.storage")
        FieldLookup(found=True, value='100Gi')
        >>> record.lookup("spec.missing")
        FieldLookup(found=False, value=None)
        """
        if not path:
            return _MISSING
        if path == "kind":
            return FieldLookup(True, self.kind)
        if path == "apiVersion":
            return FieldLookup(True, self.api_version)
        if path == "metadata":
            return FieldLookup(True, self.to_document()["metadata"])
        if path.startswith("metadata."):
            return self._lookup_metadata(path[len("metadata."):])

        current: Any = self.fields
        for segment in path.split("."):
            if not isinstance(current, Mapping) or segment not in current:
                return _MISSING
            current = current[segment]
        return FieldLookup(True, copy.deepcopy(current))

    def _lookup_metadata(self, rest: str) -> FieldLookup:
        for prefix, attr in _METADATA_MAPS.items():
            if rest == prefix:
                return FieldLookup(True, dict(getattr(self, attr)))
            if rest.startswith(prefix + "."):
                key = rest[len(prefix) + 1:]
                values = getattr(self, attr)
                if key in values:
                    return FieldLookup(True, values[key])
                return _MISSING

        attr = _METADATA_SCALARS.get(rest)
        if attr is None:
            return _MISSING
        value = getattr(self, attr)
        if attr == "creation_timestamp":
            if value is None:
                return _MISSING
            return FieldLookup(True, _format_timestamp(value))
        if attr == "finalizers":
            return FieldLookup(True, list(value))
        if value == "" and attr in ("namespace", "uid"):
            return _MISSING
        return FieldLookup(True, value)

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "ResourceRecord":
        """Build a record from its nested document form.

        Raises
        ------
        NilRecordError
            If ``document`` is None.
        InvalidRecordError
            If the document is not a mapping, lacks ``kind`` or
            ``metadata.name``, or carries malformed metadata.
        """
        if document is None:
            raise NilRecordError()
        if not isinstance(document, Mapping):
            raise InvalidRecordError(
                f"Record document must be a mapping, got {type(document).__name__}"
            )
        metadata = document.get("metadata") or {}
        if not isinstance(metadata, Mapping):
            raise InvalidRecordError("Record metadata must be a mapping")
        if not document.get("kind"):
            raise InvalidRecordError("Record document is missing 'kind'")
        if not metadata.get("name"):
            raise InvalidRecordError(
                f"Record document of kind {document['kind']!r} is missing 'metadata.name'"
            )

        extra = {
            key: value for key, value in document.items()
            if key not in ("apiVersion", "kind", "metadata")
        }
        try:
            return cls(
                api_version=document.get("apiVersion", ""),
                kind=document["kind"],
                name=metadata["name"],
                namespace=metadata.get("namespace") or "",
                uid=metadata.get("uid") or "",
                creation_timestamp=metadata.get("creationTimestamp"),
                labels=metadata.get("labels") or {},
                annotations=metadata.get("annotations") or {},
                finalizers=tuple(metadata.get("finalizers") or ()),
                fields=extra,
            )
        except ValidationError as exc:
            raise InvalidRecordError(
                f"Malformed record {metadata.get('name')!r}: {exc}"
            ) from exc

    def to_document(self) -> dict[str, Any]:
        """Render the nested document form, omitting empty metadata."""
        metadata: dict[str, Any] = {"name": self.name}
        if self.namespace:
            metadata["namespace"] = self.namespace
        if self.uid:
            metadata["uid"] = self.uid
        if self.creation_timestamp is not None:
            metadata["creationTimestamp"] = _format_timestamp(self.creation_timestamp)
        if self.labels:
            metadata["labels"] = dict(self.labels)
        if self.annotations:
            metadata["annotations"] = dict(self.annotations)
        if self.finalizers:
            metadata["finalizers"] = list(self.finalizers)

        document: dict[str, Any] = {}
        if self.api_version:
            document["apiVersion"] = self.api_version
        document["kind"] = self.kind
        document["metadata"] = metadata
        for key, value in self.fields.items():
            document[key] = copy.deepcopy(value)
        return document


@dataclass(frozen=True)
class PlanNode:
    """One entry of a node plan."""
    name: str
    uid: str = ""

    @classmethod
    def from_record(cls, record: ResourceRecord) -> "PlanNode":
        return cls(name=record.name, uid=record.uid)

    @classmethod
    def from_dict(cls, data: Union[Mapping[str, Any], "PlanNode"]) -> "PlanNode":
        if isinstance(data, PlanNode):
            return data
        if not isinstance(data, Mapping) or not data.get("name"):
            raise InvalidRecordError(f"Invalid plan entry: {data!r}")
        return cls(name=data["name"], uid=data.get("uid") or "")

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "uid": self.uid}

    def matches(self, record: ResourceRecord) -> bool:
        return self.name == record.name and self.uid == record.uid
