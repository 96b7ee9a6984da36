import logging
import re
from collections import Counter
from typing import Iterable, Optional, Set, Tuple

from erd_core.config import ConversionConfig
from erd_core.dsl import has_relation, relation_columns
from erd_core.errors import MalformedSourceError
from erd_core.raw import RawColumn, RawDocument, RawTable
from erd_core.type_mapper import is_dsl_scalar, map_type
from erd_core.types import CanonicalEnum, CanonicalField, CanonicalModel, DefaultKind, ScalarKind

logger = logging.getLogger(__name__)

_DEFAULT_FUNCTIONS = {
    "now()": DefaultKind.NOW,
    "autoincrement()": DefaultKind.AUTOINCREMENT,
    "uuid()": DefaultKind.UUID,
}


def _check_name_collisions(document: RawDocument) -> None:
    model_counts = Counter(table.name for table in document.tables)
    enum_counts = Counter(raw_enum.name for raw_enum in document.enums)

    duplicates = sorted(name for name, count in model_counts.items() if count > 1)
    if duplicates:
        raise MalformedSourceError(f"Duplicate model names: {', '.join(duplicates)}")
    duplicates = sorted(name for name, count in enum_counts.items() if count > 1)
    if duplicates:
        raise MalformedSourceError(f"Duplicate enum names: {', '.join(duplicates)}")
    shared = sorted(set(model_counts) & set(enum_counts))
    if shared:
        raise MalformedSourceError(f"Names used by both a model and an enum: {', '.join(shared)}")


def _classify_default(column: RawColumn) -> Tuple[DefaultKind, Optional[str]]:
    if column.default is None:
        return DefaultKind.NONE, None
    text = re.sub(r"\s+", "", column.default)
    kind = _DEFAULT_FUNCTIONS.get(text)
    if kind is not None:
        return kind, None
    return DefaultKind.LITERAL, column.default


def _relation_bound_columns(table: RawTable) -> Set[str]:
    """Scalar columns named in some ``@relation(fields: [...])`` of the model."""
    bound: Set[str] = set()
    for column in table.columns:
        fields, _ = relation_columns(column.constraints)
        bound.update(fields)
    return bound


def _canonical_type(column: RawColumn, enum_names: Set[str]) -> ScalarKind:
    if is_dsl_scalar(column.type_token):
        return map_type("dsl", column.type_token)
    if column.type_token in enum_names:
        return ScalarKind.ENUM_REFERENCE
    return ScalarKind.MODEL_REFERENCE


def _is_primary_key(column: RawColumn, scalar: bool) -> bool:
    if column.primary_key:
        return True
    if column.name == "id" and scalar:
        return True
    return "id" in column.name.lower() and column.unique


def _is_foreign_key(column: RawColumn, scalar: bool, suffixes: Iterable[str]) -> bool:
    return scalar and any(column.name.endswith(suffix) for suffix in suffixes)


def build_field(
    column: RawColumn,
    enum_names: Set[str],
    relation_bound: Set[str],
    config: ConversionConfig,
) -> CanonicalField:
    scalar = is_dsl_scalar(column.type_token)
    canonical_type = _canonical_type(column, enum_names)
    is_relation_field = not scalar or column.name in relation_bound
    default_kind, default_value = _classify_default(column)
    fk_columns, references = relation_columns(column.constraints)

    return CanonicalField(
        name=column.name,
        canonical_type=canonical_type,
        type_name=column.type_token,
        is_list=column.is_list,
        is_nullable=column.nullable,
        is_primary_key=_is_primary_key(column, scalar),
        is_unique=column.unique,
        is_foreign_key=_is_foreign_key(column, scalar, config.foreign_key_suffixes),
        is_relation_field=is_relation_field,
        has_connections=is_relation_field or canonical_type == ScalarKind.MODEL_REFERENCE,
        default_kind=default_kind,
        default_value=default_value,
        has_relation_attribute=has_relation(column.constraints),
        relation_columns=tuple(fk_columns),
        relation_references=tuple(references),
    )


def build_model(table: RawTable, enum_names: Set[str], config: ConversionConfig) -> CanonicalModel:
    relation_bound = _relation_bound_columns(table)
    fields = tuple(build_field(column, enum_names, relation_bound, config) for column in table.columns)
    return CanonicalModel(name=table.name, fields=fields)


def build_canonical(
    document: RawDocument,
    config: Optional[ConversionConfig] = None,
) -> Tuple[Tuple[CanonicalModel, ...], Tuple[CanonicalEnum, ...]]:
    """Classify a parsed DSL document into canonical models and enums.

    Field and declaration order are kept exactly as in the source.
    """
    config = config or ConversionConfig()
    if config.reject_name_collisions:
        _check_name_collisions(document)

    enum_names = {raw_enum.name for raw_enum in document.enums}
    enums = tuple(CanonicalEnum(name=e.name, values=tuple(e.values)) for e in document.enums)
    models = tuple(build_model(table, enum_names, config) for table in document.tables)

    logger.debug("Built %d canonical models and %d enums", len(models), len(enums))
    return models, enums

