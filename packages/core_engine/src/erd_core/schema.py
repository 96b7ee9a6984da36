"""JSON Schema validation of canonical output.

Issue paths name models, fields and enums the way lint does
(``/models/User/fields/email``); relationships have no name and keep their index.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from jsonschema import Draft202012Validator

from erd_core.issues import Issue
from erd_core.types import CanonicalSchema

BUNDLED_SCHEMA = Path(__file__).resolve().parent / "schemas" / "canonical.schema.json"


def load_schema(schema_path: Optional[str] = None) -> Dict[str, Any]:
    """Load a JSON schema, defaulting to the canonical schema shipped with the package."""
    path = Path(schema_path) if schema_path else BUNDLED_SCHEMA
    if not path.exists():
        raise FileNotFoundError(f"Schema file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


@lru_cache(maxsize=1)
def _bundled_validator() -> Draft202012Validator:
    return Draft202012Validator(load_schema())


def _named_path(payload: Any, parts: Sequence[Any]) -> str:
    segments: List[str] = []
    node = payload
    for part in parts:
        child = None
        if isinstance(node, list) and isinstance(part, int) and 0 <= part < len(node):
            child = node[part]
            name = child.get("name") if isinstance(child, dict) else None
            segments.append(name if isinstance(name, str) and name else str(part))
        else:
            if isinstance(node, dict):
                child = node.get(part)
            segments.append(str(part))
        node = child
    return "/" + "/".join(segments)


def schema_issues(
    payload: Union[CanonicalSchema, Dict[str, Any]],
    schema: Optional[Dict[str, Any]] = None,
) -> List[Issue]:
    """Validate a canonical schema (or its ``to_dict()`` payload) against ``schema``."""
    if isinstance(payload, CanonicalSchema):
        payload = payload.to_dict()
    validator = Draft202012Validator(schema) if schema is not None else _bundled_validator()

    errors = sorted(validator.iter_errors(payload), key=lambda e: [str(p) for p in e.absolute_path])
    return [
        Issue(
            severity="error",
            code="SCHEMA_VALIDATION_FAILED",
            message=error.message,
            path=_named_path(payload, list(error.absolute_path)),
        )
        for error in errors
    ]
