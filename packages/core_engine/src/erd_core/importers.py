import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from erd_core.errors import MalformedSourceError
from erd_core.raw import RawColumn, RawDocument, RawEnum, RawForeignKey, RawTable
from erd_core.type_mapper import is_known_type

logger = logging.getLogger(__name__)

LINE_COMMENT_RE = re.compile(r"--.*$", flags=re.MULTILINE)
BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", flags=re.DOTALL)
# plain, schema-qualified or quoted identifiers: users, public.users, "order items"
QUALIFIED_NAME = r"(?:\"[^\"]+\"|`[^`]+`|[\w\.])+"
CREATE_TABLE_RE = re.compile(
    r"create\s+(?:temporary\s+|temp\s+)?table\s+(?:if\s+not\s+exists\s+)?(" + QUALIFIED_NAME + r")\s*\(",
    flags=re.IGNORECASE,
)
CREATE_ENUM_RE = re.compile(
    r"create\s+type\s+(" + QUALIFIED_NAME + r")\s+as\s+enum\s*\(([^)]*)\)",
    flags=re.IGNORECASE,
)
FOREIGN_KEY_RE = re.compile(
    r"foreign\s+key\s*\(([^)]*)\)\s*references\s+(" + QUALIFIED_NAME + r")\s*(?:\(([^)]*)\))?",
    flags=re.IGNORECASE,
)
INLINE_REFERENCES_RE = re.compile(
    r"references\s+(" + QUALIFIED_NAME + r")\s*(?:\(([^)]*)\))?",
    flags=re.IGNORECASE,
)
COLUMN_RE = re.compile(
    r"^(?:[\"`]([^\"`]+)[\"`]|(\w+))\s+([A-Za-z][A-Za-z0-9_]*(?:\s*\([^)]*\))?(?:\[\])?)\s*(.*)$",
    flags=re.DOTALL,
)
TABLE_CONSTRAINT_RE = re.compile(
    r"^(?:constraint\b|primary\s+key\b|check\s*\(|unique\s*(?:key\b|index\b|\())",
    flags=re.IGNORECASE,
)
INDEX_KEYWORDS = {"key", "index", "fulltext"}
NOT_NULL_RE = re.compile(r"not\s+null", flags=re.IGNORECASE)
PRIMARY_KEY_RE = re.compile(r"primary\s+key", flags=re.IGNORECASE)
UNIQUE_RE = re.compile(r"\bunique\b", flags=re.IGNORECASE)
DEFAULT_RE = re.compile(
    r"default\s+('(?:[^']|'')*'|\"[^\"]*\"|\((?:[^()']|'[^']*'|\([^()]*\))*\)|[\w\.]+\s*\([^)]*\)|[^\s,]+)",
    flags=re.IGNORECASE,
)


def _strip_identifier(token: str) -> str:
    """Drop quoting and schema qualification: ``"public"."users"`` -> ``users``."""
    cleaned = re.sub(r"[\"'`]", "", token.strip())
    return cleaned.split(".")[-1]


def to_pascal(name: str, separators: str = "_") -> str:
    parts = re.split(f"[{re.escape(separators)}]", name)
    return "".join(part[:1].upper() + part[1:].lower() for part in parts if part)


def _split_identifiers(text: str) -> Tuple[str, ...]:
    return tuple(_strip_identifier(part) for part in text.split(",") if part.strip())


def _split_top_level(body: str) -> List[str]:
    parts: List[str] = []
    current: List[str] = []
    depth = 0
    in_single = False
    in_double = False

    for char in body:
        if char == "'" and not in_double:
            in_single = not in_single
        elif char == '"' and not in_single:
            in_double = not in_double
        elif not in_single and not in_double:
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
            elif char == "," and depth == 0:
                parts.append("".join(current).strip())
                current = []
                continue
        current.append(char)

    if current:
        parts.append("".join(current).strip())
    return [part for part in parts if part]


def _balanced_body(sql: str, open_index: int, table_name: str) -> Tuple[str, int]:
    depth = 0
    in_single = False
    for idx in range(open_index, len(sql)):
        char = sql[idx]
        if char == "'":
            in_single = not in_single
        elif in_single:
            continue
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return sql[open_index + 1:idx], idx + 1
    raise MalformedSourceError(f"Unbalanced parentheses in CREATE TABLE {table_name}")


def strip_sql_comments(sql: str) -> str:
    return BLOCK_COMMENT_RE.sub("", LINE_COMMENT_RE.sub("", sql))


def _parse_default_value(rest: str) -> Optional[str]:
    m = DEFAULT_RE.search(rest)
    if m:
        return m.group(1).strip()
    return None


def _is_table_constraint(definition: str) -> bool:
    if TABLE_CONSTRAINT_RE.match(definition):
        return True
    # MySQL "KEY idx_name (col)" vs. a column that happens to be called "key"
    words = definition.split()
    if len(words) > 1 and words[0].lower() in INDEX_KEYWORDS:
        return not is_known_type("sql", words[1])
    return False


def _parse_create_table(table_name: str, body: str) -> RawTable:
    table = RawTable(name=table_name)
    for definition in _split_top_level(body):
        # (a) explicit foreign keys, possibly named through CONSTRAINT
        fk_match = FOREIGN_KEY_RE.search(definition)
        if fk_match:
            table.foreign_keys.append(
                RawForeignKey(
                    columns=_split_identifiers(fk_match.group(1)),
                    ref_table=_strip_identifier(fk_match.group(2)),
                    ref_columns=_split_identifiers(fk_match.group(3) or "") or ("id",),
                )
            )
            continue
        if re.search(r"foreign\s+key", definition, flags=re.IGNORECASE):
            logger.debug("Skipping unrecognized foreign key clause in %s: %s", table_name, definition)
            continue

        # (b) table-level PRIMARY KEY / UNIQUE / CHECK / CONSTRAINT clauses
        if _is_table_constraint(definition):
            continue

        # (c) column definitions
        col_match = COLUMN_RE.match(definition)
        if not col_match:
            continue
        col_name = col_match.group(1) or col_match.group(2)
        col_type, rest = col_match.group(3), col_match.group(4) or ""

        primary_key = bool(PRIMARY_KEY_RE.search(rest))
        table.columns.append(
            RawColumn(
                name=col_name,
                type_token=re.sub(r"\s+", "", col_type),
                constraints=rest.strip(),
                nullable=not primary_key and not NOT_NULL_RE.search(rest),
                primary_key=primary_key,
                unique=bool(UNIQUE_RE.search(rest)),
                default=_parse_default_value(rest),
            )
        )

        ref_match = INLINE_REFERENCES_RE.search(rest)
        if ref_match:
            table.foreign_keys.append(
                RawForeignKey(
                    columns=(col_name,),
                    ref_table=_strip_identifier(ref_match.group(1)),
                    ref_columns=_split_identifiers(ref_match.group(2) or "") or ("id",),
                )
            )
    return table


def parse_sql_ddl(ddl_text: str) -> RawDocument:
    """Parse ``CREATE TABLE`` (and PostgreSQL ``CREATE TYPE ... AS ENUM``) statements."""
    document = RawDocument(source_format="sql")
    cleaned = strip_sql_comments(ddl_text)

    for m in CREATE_ENUM_RE.finditer(cleaned):
        values = [value.strip().strip("'") for value in _split_top_level(m.group(2))]
        document.enums.append(RawEnum(name=_strip_identifier(m.group(1)), values=values))

    pos = 0
    while True:
        match = CREATE_TABLE_RE.search(cleaned, pos)
        if not match:
            break
        table_name = _strip_identifier(match.group(1))
        body, pos = _balanced_body(cleaned, match.end() - 1, table_name)
        document.tables.append(_parse_create_table(table_name, body))

    logger.debug("Parsed SQL DDL: %d tables, %d enums", len(document.tables), len(document.enums))
    return document


# ---------------------------------------------------------------------------
# JSON schema importer
# ---------------------------------------------------------------------------

def _first(item: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """First truthy value among ``keys``."""
    for key in keys:
        value = item.get(key)
        if value:
            return value
    return default


def _is_export_format(data: Any) -> bool:
    if isinstance(data, dict):
        return "models" in data or "enums" in data
    if isinstance(data, list) and data and isinstance(data[0], dict):
        return bool(data[0].get("name")) and bool(data[0].get("fields"))
    return False


def _is_custom_format(data: Any) -> bool:
    return isinstance(data, dict) and any(key in data for key in ("tables", "schemas", "entities"))


def _literal_default(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return json.dumps(value)
    return str(value)


def _export_default(raw_field: Dict[str, Any]) -> Optional[str]:
    default = raw_field.get("default")
    if isinstance(default, dict):
        name = str(default.get("name") or "")
        if name in ("now", "autoincrement", "uuid"):
            return f"{name}()"
        return None
    if default is not None and not isinstance(default, (list, dict)):
        return _literal_default(default)
    if (raw_field.get("isId") or raw_field.get("isPrimaryKey")) and raw_field.get("hasDefaultValue"):
        return "autoincrement()"
    return None


def _export_table(raw_model: Dict[str, Any]) -> RawTable:
    table = RawTable(name=str(raw_model.get("name", "")))
    for raw_field in raw_model.get("fields") or []:
        if not isinstance(raw_field, dict) or not raw_field.get("name"):
            continue
        column = RawColumn(
            name=str(raw_field["name"]),
            type_token=str(raw_field.get("type") or "String"),
            nullable=raw_field.get("isRequired") is False or bool(raw_field.get("optional")),
            primary_key=bool(raw_field.get("isId") or raw_field.get("isPrimaryKey")),
            unique=bool(raw_field.get("isUnique")),
            is_list=bool(raw_field.get("isList")),
            default=_export_default(raw_field),
        )
        table.columns.append(column)

        from_fields = raw_field.get("relationFromFields") or []
        to_fields = raw_field.get("relationToFields") or []
        if raw_field.get("relationName") and from_fields and to_fields:
            table.foreign_keys.append(
                RawForeignKey(
                    columns=tuple(str(f) for f in from_fields),
                    ref_table=column.type_token,
                    ref_columns=tuple(str(f) for f in to_fields),
                    field_name=column.name,
                )
            )
    return table


def _export_enum(raw_enum: Dict[str, Any]) -> RawEnum:
    values: List[str] = []
    for value in raw_enum.get("values") or []:
        if isinstance(value, dict):
            value = value.get("name", "")
        if value:
            values.append(str(value))
    return RawEnum(name=str(raw_enum.get("name", "")), values=values)


def _parse_export_format(data: Any) -> RawDocument:
    document = RawDocument(source_format="dsl")
    models = (data.get("models") or []) if isinstance(data, dict) else data
    enums = (data.get("enums") or []) if isinstance(data, dict) else []
    for raw_enum in enums:
        if isinstance(raw_enum, dict) and raw_enum.get("name"):
            document.enums.append(_export_enum(raw_enum))
    for raw_model in models:
        if isinstance(raw_model, dict) and raw_model.get("name"):
            document.tables.append(_export_table(raw_model))
    return document


def _custom_columns(table_def: Dict[str, Any]) -> List[Dict[str, Any]]:
    columns = _first(table_def, "fields", "columns", "properties", default=[])
    if isinstance(columns, dict):
        # JSON-schema style mapping of property name -> definition
        return [{"name": name, **(spec if isinstance(spec, dict) else {})} for name, spec in columns.items()]
    return [c for c in columns if isinstance(c, dict)] if isinstance(columns, list) else []


def _custom_table(table_def: Dict[str, Any]) -> RawTable:
    raw_name = str(_first(table_def, "name", "tableName", "entityName", default=""))
    table = RawTable(name=to_pascal(raw_name, "_-"))

    for col in _custom_columns(table_def):
        col_name = _first(col, "name", "columnName", "propertyName")
        if not col_name:
            continue
        default = col.get("default", col.get("defaultValue"))
        if default in ("now", "CURRENT_TIMESTAMP"):
            default = "now()"
        elif default is not None:
            default = _literal_default(default)
        table.columns.append(
            RawColumn(
                name=str(col_name),
                type_token=str(_first(col, "type", "dataType", default="")),
                nullable=bool(col.get("nullable") or col.get("optional") or col.get("required") is False),
                primary_key=bool(_first(col, "primaryKey", "isPrimaryKey", "primary")),
                unique=bool(_first(col, "unique", "isUnique")),
                default=default,
                type_format=col.get("format"),
            )
        )

        inline_fk = _first(col, "foreignKey", "foreign_key", "references")
        if isinstance(inline_fk, dict) and inline_fk.get("table"):
            ref_table = to_pascal(str(inline_fk["table"]), "_-")
            table.foreign_keys.append(
                RawForeignKey(
                    columns=(str(col_name),),
                    ref_table=ref_table,
                    ref_columns=(str(inline_fk.get("column") or "id"),),
                    field_name=ref_table.lower(),
                )
            )

    for rel in _first(table_def, "relations", "foreignKeys", default=[]) or []:
        if not isinstance(rel, dict):
            continue
        ref_raw = _first(rel, "references", "referencedTable", "toTable", default="")
        ref_table = to_pascal(str(ref_raw), "_-")
        column = _first(rel, "field", "column")
        if not ref_table or not column:
            continue
        table.foreign_keys.append(
            RawForeignKey(
                columns=(str(column),),
                ref_table=ref_table,
                ref_columns=(str(_first(rel, "referencesField", "referencedColumn", default="id")),),
                field_name=str(rel.get("name") or ref_table.lower()),
            )
        )
    return table


def _parse_custom_format(data: Dict[str, Any]) -> RawDocument:
    document = RawDocument(source_format="json")
    tables = _first(data, "tables", "schemas", "entities", default=[])
    if isinstance(tables, list):
        for table_def in tables:
            if isinstance(table_def, dict):
                document.tables.append(_custom_table(table_def))
    return document


def parse_json_schema(json_text: str) -> RawDocument:
    """Parse a JSON schema description.

    Supports:
    - DSL export format: ``{models: [...], enums: [...]}`` or a bare model array
    - Custom table format: ``{tables|schemas|entities: [...]}``
    """
    try:
        data = json.loads(json_text)
    except json.JSONDecodeError as exc:
        raise MalformedSourceError(
            f"Invalid JSON format: {exc.msg} (line {exc.lineno}, column {exc.colno})",
            line=exc.lineno,
            column=exc.colno,
        ) from exc

    if _is_export_format(data):
        document = _parse_export_format(data)
    elif _is_custom_format(data):
        document = _parse_custom_format(data)
    else:
        raise MalformedSourceError("Unsupported JSON schema format")

    logger.debug("Parsed JSON schema: %d tables, %d enums", len(document.tables), len(document.enums))
    return document
