from typing import List, Set

from erd_core.issues import Issue
from erd_core.types import CanonicalSchema


def lint_issues(schema: CanonicalSchema) -> List[Issue]:
    """Advisory checks on a converted schema.

    Conversion never fails on these; they surface shapes a diagram consumer
    will likely trip over.
    """
    issues: List[Issue] = []

    for model in schema.models:
        field_names: Set[str] = set()
        has_pk = False

        for field in model.fields:
            if field.name in field_names:
                issues.append(
                    Issue(
                        severity="warn",
                        code="DUPLICATE_FIELD",
                        message=f"Duplicate field '{field.name}' in model '{model.name}'.",
                        path=f"/models/{model.name}/fields",
                    )
                )
            else:
                field_names.add(field.name)

            if field.is_primary_key:
                has_pk = True

        if not has_pk:
            issues.append(
                Issue(
                    severity="warn",
                    code="MISSING_PRIMARY_KEY",
                    message=f"Model '{model.name}' has no primary key.",
                    path=f"/models/{model.name}",
                )
            )

    for enum in schema.enums:
        if not enum.values:
            issues.append(
                Issue(
                    severity="warn",
                    code="EMPTY_ENUM",
                    message=f"Enum '{enum.name}' declares no values.",
                    path=f"/enums/{enum.name}",
                )
            )

    known = {model.name for model in schema.models} | {enum.name for enum in schema.enums}
    for index, rel in enumerate(schema.relationships):
        if rel.target_model not in known:
            issues.append(
                Issue(
                    severity="error",
                    code="UNKNOWN_RELATIONSHIP_TARGET",
                    message=(
                        f"Relationship '{rel.source_model}.{rel.source_field}' targets "
                        f"unknown type '{rel.target_model}'."
                    ),
                    path=f"/relationships/{index}",
                )
            )

    return issues
