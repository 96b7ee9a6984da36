"""Format dispatch and the public ``convert`` entry point."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from erd_core.canonical import build_canonical
from erd_core.config import ConversionConfig
from erd_core.dsl import parse_dsl
from erd_core.errors import (
    ConversionError,
    ConversionInternalError,
    EmptyInputError,
    ErrorKind,
    NoDefinitionsFoundError,
    UnsupportedFormatError,
)
from erd_core.generators import generate_dsl
from erd_core.importers import parse_json_schema, parse_sql_ddl
from erd_core.relationships import infer_relationships
from erd_core.types import CanonicalSchema

logger = logging.getLogger(__name__)

_SOURCE_PARSERS = {
    "sql": parse_sql_ddl,
    "json": parse_json_schema,
}
_ERROR_PREFIXES = {
    "sql": "SQL conversion error",
    "json": "JSON conversion error",
}


@dataclass(frozen=True)
class ConversionResult:
    success: bool
    schema: Optional[CanonicalSchema] = None
    error_kind: Optional[ErrorKind] = None
    message: str = ""
    file_type: str = ""
    dsl_text: str = ""

    def to_dict(self) -> Dict[str, Any]:
        if self.success and self.schema is not None:
            return {"success": True, "file_type": self.file_type, "schema": self.schema.to_dict()}
        return {
            "success": False,
            "error_kind": self.error_kind.value if self.error_kind else ErrorKind.CONVERSION_INTERNAL.value,
            "message": self.message,
        }


def _extension(file_name: str) -> str:
    if "." not in file_name:
        return ""
    return file_name.rsplit(".", 1)[1].lower()


def detect_format(file_name: str, config: Optional[ConversionConfig] = None) -> str:
    """Source format for ``file_name`` (``dsl``, ``sql`` or ``json``), or ``""``."""
    config = config or ConversionConfig()
    return config.format_for(_extension(file_name))


def is_supported_file(file_name: str, config: Optional[ConversionConfig] = None) -> bool:
    return bool(detect_format(file_name, config))


def supported_extensions(config: Optional[ConversionConfig] = None) -> Tuple[str, ...]:
    config = config or ConversionConfig()
    return tuple(f".{ext}" for ext in config.extensions)


def _to_dsl(source_format: str, source_text: str, file_name: str, config: ConversionConfig) -> str:
    parser = _SOURCE_PARSERS[source_format]
    prefix = _ERROR_PREFIXES[source_format]
    try:
        document = parser(source_text)
        return generate_dsl(document, header_comment=config.header_comment, origin=source_format)
    except ConversionError as exc:
        exc.message = f"{prefix}: {exc.message}"
        exc.args = (exc.message,)
        raise
    except Exception as exc:
        logger.exception("Unexpected failure converting %s", file_name)
        raise ConversionInternalError(f"{prefix}: {exc}") from exc


def _convert(source_text: str, file_name: str, config: ConversionConfig) -> Tuple[CanonicalSchema, str, str]:
    source_format = detect_format(file_name, config)
    if not source_format:
        raise UnsupportedFormatError(
            f"Unsupported file type: {file_name}. Supported: {', '.join(supported_extensions(config))}"
        )

    if not source_text.strip():
        raise EmptyInputError("File is empty")

    if source_format == "dsl":
        dsl_text = source_text
    else:
        dsl_text = _to_dsl(source_format, source_text, file_name, config)

    document = parse_dsl(dsl_text)
    models, enums = build_canonical(document, config)
    schema = CanonicalSchema(
        models=models,
        enums=enums,
        relationships=infer_relationships(models),
    )

    if schema.is_empty:
        raise NoDefinitionsFoundError("Schema must contain at least one model or enum definition")

    return schema, source_format, dsl_text


def convert(
    source_text: str,
    file_name: str,
    config: Optional[ConversionConfig] = None,
) -> ConversionResult:
    """Convert a DSL, SQL or JSON schema into a ``CanonicalSchema``.

    Failures come back as an unsuccessful ``ConversionResult``; nothing is
    raised to the caller.
    """
    config = config or ConversionConfig()
    try:
        schema, file_type, dsl_text = _convert(source_text, file_name, config)
    except ConversionError as exc:
        logger.debug("Conversion of %s failed: %s: %s", file_name, exc.kind.value, exc.message)
        return ConversionResult(success=False, error_kind=exc.kind, message=exc.message)
    except Exception as exc:
        logger.exception("Unexpected failure converting %s", file_name)
        return ConversionResult(
            success=False,
            error_kind=ErrorKind.CONVERSION_INTERNAL,
            message=f"Conversion failed: {exc}",
        )

    logger.debug(
        "Converted %s: %d models, %d enums, %d relationships",
        file_name,
        len(schema.models),
        len(schema.enums),
        len(schema.relationships),
    )
    return ConversionResult(success=True, schema=schema, file_type=file_type, dsl_text=dsl_text)
