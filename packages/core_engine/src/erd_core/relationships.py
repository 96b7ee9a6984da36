"""Relationship cardinality inference over canonical models.

The first pass walks every model in declaration order and emits one directional
``Relationship`` per relation-bearing field. The second pass detects junction
models and upgrades the relationships that run through them to many-to-many.
"""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from erd_core.types import Cardinality, CanonicalField, CanonicalModel, Relationship

logger = logging.getLogger(__name__)


def _pass_one(model: CanonicalModel, field: CanonicalField) -> Relationship:
    if field.is_list:
        cardinality = Cardinality.ONE_TO_MANY
        label = f"{field.name} (1:N)"
    elif field.relation_columns:
        cardinality = Cardinality.MANY_TO_ONE
        label = f"{', '.join(field.relation_columns)} → {', '.join(field.relation_references)} (N:1)"
    elif field.has_relation_attribute:
        cardinality = Cardinality.ONE_TO_ONE
        label = f"{field.name} (1:1)"
    else:
        cardinality = Cardinality.ONE_TO_ONE
        label = field.name

    return Relationship(
        source_model=model.name,
        source_field=field.name,
        target_model=field.type_name,
        cardinality=cardinality,
        foreign_key_columns=field.relation_columns,
        referenced_columns=field.relation_references,
        display_label=label,
    )


def junction_targets(model: CanonicalModel) -> Optional[Tuple[str, ...]]:
    """Distinct models a junction links, or ``None`` when ``model`` is not one.

    A junction carries at least two foreign-key scalars and at least two
    relation fields with explicit ``fields:`` pointing at distinct other models.
    """
    if sum(1 for f in model.fields if f.is_foreign_key) < 2:
        return None

    targets: List[str] = []
    for f in model.fields:
        if not f.relation_columns or not f.canonical_type.is_reference:
            continue
        if f.type_name != model.name and f.type_name not in targets:
            targets.append(f.type_name)

    if len(targets) < 2:
        return None
    return tuple(targets)


def find_junctions(models: Iterable[CanonicalModel]) -> Dict[str, Tuple[str, ...]]:
    junctions: Dict[str, Tuple[str, ...]] = {}
    for model in models:
        targets = junction_targets(model)
        if targets is not None:
            junctions[model.name] = targets
    return junctions


def _upgrade(rel: Relationship, junctions: Dict[str, Tuple[str, ...]]) -> Relationship:
    linked = junctions.get(rel.source_model)
    if linked is not None and rel.target_model in linked:
        return replace(
            rel,
            cardinality=Cardinality.MANY_TO_MANY,
            display_label=f"{rel.source_field} (M:N via {rel.source_model})",
        )

    if rel.cardinality != Cardinality.ONE_TO_MANY:
        return rel

    linked = junctions.get(rel.target_model)
    if linked is None:
        return rel
    if rel.source_model in linked:
        label = f"{rel.source_field} (M:N via {rel.target_model})"
    else:
        label = f"{rel.source_field} (M:N)"
    return replace(rel, cardinality=Cardinality.MANY_TO_MANY, display_label=label)


def infer_relationships(models: Sequence[CanonicalModel]) -> Tuple[Relationship, ...]:
    """Infer directional relationships for ``models``.

    Output order follows model declaration order, then field order, so the
    result is fully determined by the input. Enum-typed fields are already
    classified as references and need no enum lookup.
    """
    relationships = [
        _pass_one(model, field)
        for model in models
        for field in model.fields
        if field.canonical_type.is_reference
    ]

    junctions = find_junctions(models)
    if not junctions:
        return tuple(relationships)

    logger.debug("Junction models detected: %s", ", ".join(junctions))
    upgraded = [_upgrade(rel, junctions) for rel in relationships]
    changed = sum(1 for before, after in zip(relationships, upgraded) if before is not after)
    logger.debug("Upgraded %d relationships to ManyToMany", changed)
    return tuple(upgraded)
