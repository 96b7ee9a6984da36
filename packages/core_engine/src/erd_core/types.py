"""Canonical entity-relationship model produced by a conversion."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class ScalarKind(str, Enum):
    TEXT = "Text"
    INTEGER = "Integer"
    BIG_INTEGER = "BigInteger"
    FLOAT = "Float"
    DECIMAL = "Decimal"
    BOOLEAN = "Boolean"
    DATETIME = "DateTime"
    JSON = "Json"
    BYTES = "Bytes"
    MODEL_REFERENCE = "ModelReference"
    ENUM_REFERENCE = "EnumReference"

    @property
    def is_reference(self) -> bool:
        return self in (ScalarKind.MODEL_REFERENCE, ScalarKind.ENUM_REFERENCE)


class DefaultKind(str, Enum):
    NONE = "none"
    LITERAL = "literal"
    NOW = "now"
    AUTOINCREMENT = "autoincrement"
    UUID = "uuid"


class Cardinality(str, Enum):
    ONE_TO_ONE = "OneToOne"
    ONE_TO_MANY = "OneToMany"
    MANY_TO_ONE = "ManyToOne"
    MANY_TO_MANY = "ManyToMany"


@dataclass(frozen=True)
class CanonicalField:
    name: str
    canonical_type: ScalarKind
    type_name: str
    is_list: bool = False
    is_nullable: bool = False
    is_primary_key: bool = False
    is_unique: bool = False
    is_foreign_key: bool = False
    is_relation_field: bool = False
    has_connections: bool = False
    default_kind: DefaultKind = DefaultKind.NONE
    default_value: Optional[str] = None
    has_relation_attribute: bool = False
    relation_columns: Tuple[str, ...] = ()
    relation_references: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "canonical_type": self.canonical_type.value,
            "type_name": self.type_name,
            "is_list": self.is_list,
            "is_nullable": self.is_nullable,
            "is_primary_key": self.is_primary_key,
            "is_unique": self.is_unique,
            "is_foreign_key": self.is_foreign_key,
            "is_relation_field": self.is_relation_field,
            "has_connections": self.has_connections,
            "default_kind": self.default_kind.value,
            "default_value": self.default_value,
            "has_relation_attribute": self.has_relation_attribute,
            "relation_columns": list(self.relation_columns),
            "relation_references": list(self.relation_references),
        }


@dataclass(frozen=True)
class CanonicalModel:
    name: str
    fields: Tuple[CanonicalField, ...] = ()

    def field(self, name: str) -> Optional[CanonicalField]:
        return next((f for f in self.fields if f.name == name), None)

    @property
    def is_child(self) -> bool:
        """True when the model holds a connected ``...Id`` field."""
        return any(f.has_connections and f.name.endswith("Id") for f in self.fields)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "fields": [f.to_dict() for f in self.fields]}


@dataclass(frozen=True)
class CanonicalEnum:
    name: str
    values: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "values": list(self.values)}


@dataclass(frozen=True)
class Relationship:
    """One directional edge, emitted per relation-bearing field.

    A relation declared on both models shows up as two records; consumers that
    want a symmetric graph pair them by ``(source_model, target_model)``.
    """

    source_model: str
    source_field: str
    target_model: str
    cardinality: Cardinality
    foreign_key_columns: Tuple[str, ...] = ()
    referenced_columns: Tuple[str, ...] = ()
    display_label: str = ""

    @property
    def source_handle(self) -> str:
        return f"{self.source_model}-{self.source_field}-source"

    @property
    def target_handle(self) -> str:
        return f"{self.target_model}-target"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_model": self.source_model,
            "source_field": self.source_field,
            "target_model": self.target_model,
            "cardinality": self.cardinality.value,
            "foreign_key_columns": list(self.foreign_key_columns),
            "referenced_columns": list(self.referenced_columns),
            "display_label": self.display_label,
            "source_handle": self.source_handle,
            "target_handle": self.target_handle,
        }


@dataclass(frozen=True)
class CanonicalSchema:
    models: Tuple[CanonicalModel, ...] = ()
    enums: Tuple[CanonicalEnum, ...] = ()
    relationships: Tuple[Relationship, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.models and not self.enums

    def model(self, name: str) -> Optional[CanonicalModel]:
        return next((m for m in self.models if m.name == name), None)

    def enum(self, name: str) -> Optional[CanonicalEnum]:
        return next((e for e in self.enums if e.name == name), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "models": [m.to_dict() for m in self.models],
            "enums": [e.to_dict() for e in self.enums],
            "relationships": [r.to_dict() for r in self.relationships],
        }
