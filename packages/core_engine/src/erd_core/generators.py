"""Render raw SQL/JSON descriptors as DSL text.

The generated text is re-parsed by :func:`erd_core.dsl.parse_dsl`, so every
source format goes through the same field classification. Names that are not
DSL identifiers are rewritten and the source name is kept in ``@map``/``@@map``.
"""

import json
import re
from typing import Callable, Dict, List, Optional, Sequence

from erd_core.importers import to_pascal
from erd_core.raw import RawColumn, RawDocument, RawEnum, RawForeignKey, RawTable
from erd_core.type_mapper import dsl_type_name, map_type
from erd_core.types import ScalarKind

SERIAL_TYPES = {"serial", "bigserial", "smallserial"}
NOW_DEFAULTS = {"now()", "current_timestamp", "current_timestamp()", "localtimestamp", "getdate()", "now"}
UUID_DEFAULTS = {"uuid()", "gen_random_uuid()", "uuid_generate_v4()", "newid()"}
INTEGER_KINDS = {ScalarKind.INTEGER, ScalarKind.BIG_INTEGER}
NUMBER_RE = re.compile(r"^-?\d+(?:\.\d+)?$")
FUNCTION_RE = re.compile(r"^[A-Za-z_][\w\.]*\s*\(.*\)$")
IDENTIFIER_RE = re.compile(r"^[^\W\d]\w*$")


def _identity(name: str) -> str:
    return name


def _sql_naming(name: str) -> str:
    return to_pascal(name, separators="_ -")


def dsl_identifier(name: str) -> str:
    """``name`` if it is a DSL identifier, else a sanitized stand-in.

    ``"first name"`` -> ``first_name``, ``"2fa"`` -> ``_2fa``.
    """
    if IDENTIFIER_RE.match(name):
        return name
    cleaned = re.sub(r"\W+", "_", name).strip("_") or "_"
    if cleaned[0].isdigit():
        cleaned = "_" + cleaned
    return cleaned


def _map_attribute(source_name: str, prefix: str = "@") -> str:
    return f"{prefix}map({json.dumps(source_name, ensure_ascii=False)})"


def _unquote(value: str) -> Optional[str]:
    if len(value) < 2 or value[0] != value[-1] or value[0] not in ("'", '"'):
        return None
    if value[0] == "'":
        return value[1:-1].replace("''", "'")
    try:
        decoded = json.loads(value)
    except ValueError:
        return value[1:-1]
    return decoded if isinstance(decoded, str) else value[1:-1]


def _strip_outer_parens(text: str) -> str:
    """``(now())`` -> ``now()``; ``(a) + (b)`` is left alone."""
    if not (text.startswith("(") and text.endswith(")")):
        return text
    depth = 0
    in_single = False
    for idx, char in enumerate(text):
        if char == "'":
            in_single = not in_single
        elif in_single:
            continue
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0 and idx != len(text) - 1:
                return text
    return text[1:-1].strip()


def _format_default(value: str) -> Optional[str]:
    """Translate a raw default expression into a DSL ``@default(...)`` argument."""
    text = _strip_outer_parens(value.strip())
    lowered = text.lower()
    if lowered in NOW_DEFAULTS:
        return "now()"
    if lowered in UUID_DEFAULTS:
        return "uuid()"
    if lowered in ("autoincrement()", "autoincrement") or lowered.startswith("nextval("):
        return "autoincrement()"
    if lowered in ("true", "false"):
        return lowered
    if lowered == "null":
        return None
    if NUMBER_RE.match(text):
        return text
    unquoted = _unquote(text)
    if unquoted is not None:
        return json.dumps(unquoted, ensure_ascii=False)
    if FUNCTION_RE.match(text):
        return f"dbgenerated({json.dumps(text, ensure_ascii=False)})"
    return json.dumps(text, ensure_ascii=False)


def _names(names: Sequence[str]) -> str:
    return ", ".join(dsl_identifier(name) for name in names)


def _relation_attribute(fk: RawForeignKey) -> str:
    return f"@relation(fields: [{_names(fk.columns)}], references: [{_names(fk.ref_columns)}])"


class _Renderer:
    def __init__(self, document: RawDocument) -> None:
        self.document = document
        self.source_naming: Callable[[str], str] = _sql_naming if document.source_format == "sql" else _identity
        self.enum_names: Dict[str, str] = {
            raw_enum.name.lower(): self.naming(raw_enum.name) for raw_enum in document.enums
        }

    def naming(self, name: str) -> str:
        return dsl_identifier(self.source_naming(name))

    def column_type(self, column: RawColumn) -> str:
        enum_name = self.enum_names.get(column.type_token.lower())
        if enum_name:
            return enum_name
        if self.document.source_format == "dsl":
            return dsl_identifier(column.type_token)
        return dsl_type_name(map_type(self.document.source_format, column.type_token, column.type_format))

    def column_attributes(self, column: RawColumn, fk: Optional[RawForeignKey] = None) -> List[str]:
        attributes: List[str] = []
        base = column.type_token.lower().split("(", 1)[0]
        kind = map_type(self.document.source_format, column.type_token, column.type_format)

        default = _format_default(column.default) if column.default else None
        if base in SERIAL_TYPES:
            default = "autoincrement()"
        elif (
            column.primary_key
            and default is None
            and kind in INTEGER_KINDS
            and self.document.source_format != "dsl"
        ):
            default = "autoincrement()"

        if column.primary_key:
            attributes.append("@id")
        if column.unique and not column.primary_key:
            attributes.append("@unique")
        if default is not None:
            attributes.append(f"@default({default})")
        if fk is not None:
            attributes.append(_relation_attribute(fk))
        if dsl_identifier(column.name) != column.name:
            attributes.append(_map_attribute(column.name))
        return attributes

    def column_line(self, column: RawColumn, fk: Optional[RawForeignKey] = None) -> str:
        modifier = ""
        if column.is_list:
            modifier = "[]"
        elif column.nullable and not column.primary_key:
            modifier = "?"
        line = f"  {dsl_identifier(column.name)} {self.column_type(column)}{modifier}"
        attributes = self.column_attributes(column, fk)
        if attributes:
            line += " " + " ".join(attributes)
        return line

    def relation_line(self, fk: RawForeignKey) -> str:
        field_name = dsl_identifier(fk.field_name or fk.ref_table)
        return f"  {field_name} {self.naming(fk.ref_table)} {_relation_attribute(fk)}"

    def model_block(self, table: RawTable) -> str:
        # DSL-export relation fields are columns already; they carry the attribute inline
        inline: Dict[str, RawForeignKey] = {}
        if self.document.source_format == "dsl":
            declared = {column.name for column in table.columns}
            inline = {fk.field_name: fk for fk in table.foreign_keys if fk.field_name in declared}

        model_name = self.naming(table.name)
        lines = [f"model {model_name} {{"]
        lines.extend(self.column_line(column, inline.get(column.name)) for column in table.columns)
        lines.extend(self.relation_line(fk) for fk in table.foreign_keys if fk.field_name not in inline)
        if model_name != self.source_naming(table.name):
            lines.append("")
            lines.append(f"  {_map_attribute(table.name, '@@')}")
        lines.append("}")
        return "\n".join(lines)

    def enum_block(self, raw_enum: RawEnum) -> str:
        lines = [f"enum {self.naming(raw_enum.name)} {{"]
        for value in raw_enum.values:
            identifier = dsl_identifier(value)
            if identifier == value:
                lines.append(f"  {value}")
            else:
                lines.append(f"  {identifier} {_map_attribute(value)}")
        lines.append("}")
        return "\n".join(lines)


def generate_dsl(
    document: RawDocument,
    header_comment: str = "Auto-generated schema",
    origin: Optional[str] = None,
) -> str:
    renderer = _Renderer(document)
    blocks: List[str] = [f"// {header_comment} from {(origin or document.source_format).upper()}"]
    blocks.extend(renderer.enum_block(raw_enum) for raw_enum in document.enums)
    blocks.extend(renderer.model_block(table) for table in document.tables)
    return "\n\n".join(blocks) + "\n"
