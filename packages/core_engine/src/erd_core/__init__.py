from erd_core.canonical import build_canonical
from erd_core.config import ConversionConfig, load_config
from erd_core.converter import ConversionResult, convert, detect_format, is_supported_file, supported_extensions
from erd_core.dsl import parse_dsl
from erd_core.errors import (
    ConversionError,
    ConversionInternalError,
    EmptyInputError,
    ErrorKind,
    MalformedSourceError,
    NoDefinitionsFoundError,
    UnsupportedFormatError,
)
from erd_core.generators import generate_dsl
from erd_core.importers import parse_json_schema, parse_sql_ddl
from erd_core.issues import Issue, has_errors, to_lines
from erd_core.loader import load_source
from erd_core.relationships import find_junctions, infer_relationships
from erd_core.schema import load_schema, schema_issues
from erd_core.semantic import lint_issues
from erd_core.type_mapper import map_type
from erd_core.types import (
    Cardinality,
    CanonicalEnum,
    CanonicalField,
    CanonicalModel,
    CanonicalSchema,
    DefaultKind,
    Relationship,
    ScalarKind,
)

__all__ = [
    "build_canonical",
    "Cardinality",
    "CanonicalEnum",
    "CanonicalField",
    "CanonicalModel",
    "CanonicalSchema",
    "convert",
    "ConversionConfig",
    "ConversionError",
    "ConversionInternalError",
    "ConversionResult",
    "DefaultKind",
    "detect_format",
    "EmptyInputError",
    "ErrorKind",
    "find_junctions",
    "generate_dsl",
    "has_errors",
    "infer_relationships",
    "is_supported_file",
    "Issue",
    "lint_issues",
    "load_config",
    "load_schema",
    "load_source",
    "MalformedSourceError",
    "map_type",
    "NoDefinitionsFoundError",
    "parse_dsl",
    "parse_json_schema",
    "parse_sql_ddl",
    "Relationship",
    "ScalarKind",
    "schema_issues",
    "supported_extensions",
    "to_lines",
    "UnsupportedFormatError",
]
