from typing import Dict, Optional

from erd_core.types import ScalarKind

_DSL_TYPE_MAP: Dict[str, ScalarKind] = {
    "string": ScalarKind.TEXT,
    "int": ScalarKind.INTEGER,
    "bigint": ScalarKind.BIG_INTEGER,
    "float": ScalarKind.FLOAT,
    "decimal": ScalarKind.DECIMAL,
    "boolean": ScalarKind.BOOLEAN,
    "datetime": ScalarKind.DATETIME,
    "json": ScalarKind.JSON,
    "bytes": ScalarKind.BYTES,
}

DSL_SCALARS = ("String", "Int", "BigInt", "Float", "Decimal", "Boolean", "DateTime", "Json", "Bytes")

_SQL_TYPE_MAP: Dict[str, ScalarKind] = {
    # integers
    "int": ScalarKind.INTEGER,
    "integer": ScalarKind.INTEGER,
    "int2": ScalarKind.INTEGER,
    "int4": ScalarKind.INTEGER,
    "smallint": ScalarKind.INTEGER,
    "tinyint": ScalarKind.INTEGER,
    "mediumint": ScalarKind.INTEGER,
    "serial": ScalarKind.INTEGER,
    "smallserial": ScalarKind.INTEGER,
    "bigint": ScalarKind.BIG_INTEGER,
    "int8": ScalarKind.BIG_INTEGER,
    "bigserial": ScalarKind.BIG_INTEGER,
    # strings
    "varchar": ScalarKind.TEXT,
    "char": ScalarKind.TEXT,
    "character": ScalarKind.TEXT,
    "nvarchar": ScalarKind.TEXT,
    "nchar": ScalarKind.TEXT,
    "text": ScalarKind.TEXT,
    "tinytext": ScalarKind.TEXT,
    "mediumtext": ScalarKind.TEXT,
    "longtext": ScalarKind.TEXT,
    "citext": ScalarKind.TEXT,
    "uuid": ScalarKind.TEXT,
    # exact numerics
    "decimal": ScalarKind.DECIMAL,
    "numeric": ScalarKind.DECIMAL,
    "money": ScalarKind.DECIMAL,
    # approximate numerics
    "float": ScalarKind.FLOAT,
    "float4": ScalarKind.FLOAT,
    "float8": ScalarKind.FLOAT,
    "double": ScalarKind.FLOAT,
    "real": ScalarKind.FLOAT,
    # date/time
    "date": ScalarKind.DATETIME,
    "datetime": ScalarKind.DATETIME,
    "datetime2": ScalarKind.DATETIME,
    "timestamp": ScalarKind.DATETIME,
    "timestamptz": ScalarKind.DATETIME,
    "time": ScalarKind.DATETIME,
    "timetz": ScalarKind.DATETIME,
    # booleans
    "boolean": ScalarKind.BOOLEAN,
    "bool": ScalarKind.BOOLEAN,
    "bit": ScalarKind.BOOLEAN,
    # documents
    "json": ScalarKind.JSON,
    "jsonb": ScalarKind.JSON,
    # binary
    "blob": ScalarKind.BYTES,
    "longblob": ScalarKind.BYTES,
    "bytea": ScalarKind.BYTES,
    "binary": ScalarKind.BYTES,
    "varbinary": ScalarKind.BYTES,
}

_JSON_TYPE_MAP: Dict[str, ScalarKind] = {
    "string": ScalarKind.TEXT,
    "text": ScalarKind.TEXT,
    "varchar": ScalarKind.TEXT,
    "char": ScalarKind.TEXT,
    "int": ScalarKind.INTEGER,
    "integer": ScalarKind.INTEGER,
    "number": ScalarKind.INTEGER,
    "smallint": ScalarKind.INTEGER,
    "bigint": ScalarKind.BIG_INTEGER,
    "long": ScalarKind.BIG_INTEGER,
    "float": ScalarKind.FLOAT,
    "double": ScalarKind.FLOAT,
    "real": ScalarKind.FLOAT,
    "decimal": ScalarKind.DECIMAL,
    "numeric": ScalarKind.DECIMAL,
    "boolean": ScalarKind.BOOLEAN,
    "bool": ScalarKind.BOOLEAN,
    "date": ScalarKind.DATETIME,
    "datetime": ScalarKind.DATETIME,
    "timestamp": ScalarKind.DATETIME,
    "json": ScalarKind.JSON,
    "jsonb": ScalarKind.JSON,
    "object": ScalarKind.JSON,
    "bytes": ScalarKind.BYTES,
    "binary": ScalarKind.BYTES,
    "blob": ScalarKind.BYTES,
}

# JSON-schema ``format`` values that refine the base type.
_JSON_FORMAT_MAP: Dict[str, ScalarKind] = {
    "date": ScalarKind.DATETIME,
    "date-time": ScalarKind.DATETIME,
    "time": ScalarKind.DATETIME,
    "int32": ScalarKind.INTEGER,
    "int64": ScalarKind.BIG_INTEGER,
    "float": ScalarKind.FLOAT,
    "double": ScalarKind.FLOAT,
    "byte": ScalarKind.BYTES,
    "binary": ScalarKind.BYTES,
}

_TYPE_MAPS = {
    "dsl": _DSL_TYPE_MAP,
    "sql": _SQL_TYPE_MAP,
    "json": _JSON_TYPE_MAP,
}

_DSL_NAMES: Dict[ScalarKind, str] = {
    ScalarKind.TEXT: "String",
    ScalarKind.INTEGER: "Int",
    ScalarKind.BIG_INTEGER: "BigInt",
    ScalarKind.FLOAT: "Float",
    ScalarKind.DECIMAL: "Decimal",
    ScalarKind.BOOLEAN: "Boolean",
    ScalarKind.DATETIME: "DateTime",
    ScalarKind.JSON: "Json",
    ScalarKind.BYTES: "Bytes",
}


def _base_token(raw_type_token: str) -> str:
    # VARCHAR(255) -> varchar, "double precision" -> double
    token = str(raw_type_token or "").strip().lower()
    token = token.split("(", 1)[0].strip()
    return token.split()[0] if token else ""


def map_type(source_format: str, raw_type_token: str, type_format: Optional[str] = None) -> ScalarKind:
    """Map a source type token to its canonical scalar kind.

    Unknown formats and tokens fall back to ``ScalarKind.TEXT``.
    """
    fmt = str(source_format or "").lower()
    mapping = _TYPE_MAPS.get(fmt, {})
    if fmt == "json" and type_format:
        refined = _JSON_FORMAT_MAP.get(str(type_format).strip().lower())
        if refined is not None:
            return refined
    return mapping.get(_base_token(raw_type_token), ScalarKind.TEXT)


def is_known_type(source_format: str, raw_type_token: str) -> bool:
    return _base_token(raw_type_token) in _TYPE_MAPS.get(str(source_format or "").lower(), {})


def is_dsl_scalar(type_token: str) -> bool:
    return type_token in DSL_SCALARS


def dsl_type_name(kind: ScalarKind) -> str:
    return _DSL_NAMES.get(kind, "String")
