"""Structural parser for the Prisma-style schema DSL.

Only ``model`` and ``enum`` blocks are read; ``generator``, ``datasource`` and
anything else outside those blocks is ignored.
"""

import logging
import re
from typing import List, Optional, Tuple

from erd_core.errors import MalformedSourceError
from erd_core.raw import RawColumn, RawDocument, RawEnum, RawTable

logger = logging.getLogger(__name__)

BLOCK_RE = re.compile(r"^[ \t]*(model|enum)\s+(\w+)\s*\{", flags=re.MULTILINE)
FIELD_RE = re.compile(r"^(\w+)\s+(\w+)(\[\]|\?)?(?:\s+(.*))?$")
ID_ATTR_RE = re.compile(r"@id\b")
UNIQUE_ATTR_RE = re.compile(r"@unique\b")
RELATION_ATTR_RE = re.compile(r"@relation\b")
RELATION_FIELDS_RE = re.compile(r"fields\s*:\s*\[([^\]]*)\]")
RELATION_REFERENCES_RE = re.compile(r"references\s*:\s*\[([^\]]*)\]")


def _block_body(text: str, open_index: int, block_name: str) -> Tuple[str, int]:
    """Return the text between the brace at ``open_index`` and its match."""
    depth = 0
    in_string = False
    idx = open_index
    while idx < len(text):
        char = text[idx]
        if in_string:
            if char == "\\":
                idx += 2
                continue
            if char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif text.startswith("//", idx):
            newline = text.find("\n", idx)
            if newline == -1:
                break
            idx = newline
            continue
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[open_index + 1:idx], idx + 1
        idx += 1
    raise MalformedSourceError(f"Unbalanced braces in block '{block_name}'")


def _body_lines(body: str) -> List[str]:
    return [line.strip() for line in body.splitlines() if line.strip()]


def _split_names(text: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in text.split(",") if part.strip())


def attribute_argument(attributes: str, attribute: str) -> Optional[str]:
    """Return the raw argument text of ``@attribute(...)``, parentheses balanced."""
    match = re.search(re.escape(attribute) + r"\s*\(", attributes)
    if not match:
        return None
    depth = 0
    in_string = False
    start = match.end() - 1
    for idx in range(start, len(attributes)):
        char = attributes[idx]
        if char == '"' and (idx == 0 or attributes[idx - 1] != "\\"):
            in_string = not in_string
        elif in_string:
            continue
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return attributes[start + 1:idx].strip()
    return attributes[start + 1:].strip()


def has_relation(attributes: str) -> bool:
    return bool(RELATION_ATTR_RE.search(attributes))


def relation_columns(attributes: str) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    """``(fields, references)`` declared by a ``@relation`` attribute."""
    if not has_relation(attributes):
        return (), ()
    fields_match = RELATION_FIELDS_RE.search(attributes)
    refs_match = RELATION_REFERENCES_RE.search(attributes)
    fields = _split_names(fields_match.group(1)) if fields_match else ()
    references = _split_names(refs_match.group(1)) if refs_match else ()
    return fields, references


def is_primary_key_attribute(attributes: str) -> bool:
    return bool(ID_ATTR_RE.search(attributes))


def is_unique_attribute(attributes: str) -> bool:
    return bool(UNIQUE_ATTR_RE.search(attributes))


def _parse_model_body(name: str, body: str) -> RawTable:
    table = RawTable(name=name)
    for line in _body_lines(body):
        if line.startswith("//") or line.startswith("@@"):
            continue
        field_match = FIELD_RE.match(line)
        if not field_match:
            continue
        field_name, type_token, modifier, attributes = field_match.groups()
        attributes = attributes or ""
        table.columns.append(
            RawColumn(
                name=field_name,
                type_token=type_token,
                constraints=attributes,
                nullable=modifier == "?",
                primary_key=is_primary_key_attribute(attributes),
                unique=is_unique_attribute(attributes),
                is_list=modifier == "[]",
                default=attribute_argument(attributes, "@default"),
            )
        )
    return table


def _parse_enum_body(name: str, body: str) -> RawEnum:
    values = [
        line.split()[0]
        for line in _body_lines(body)
        if not line.startswith("//") and not line.startswith("@@")
    ]
    return RawEnum(name=name, values=values)


def parse_dsl(dsl_text: str) -> RawDocument:
    document = RawDocument(source_format="dsl")
    pos = 0
    while True:
        match = BLOCK_RE.search(dsl_text, pos)
        if not match:
            break
        kind, name = match.group(1), match.group(2)
        body, pos = _block_body(dsl_text, match.end() - 1, name)
        if kind == "model":
            document.tables.append(_parse_model_body(name, body))
        else:
            document.enums.append(_parse_enum_body(name, body))

    logger.debug("Parsed DSL: %d models, %d enums", len(document.tables), len(document.enums))
    return document
