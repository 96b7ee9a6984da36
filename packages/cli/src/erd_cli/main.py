import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from erd_core import (
    ConversionConfig,
    ConversionResult,
    convert,
    detect_format,
    lint_issues,
    load_config,
    load_schema,
    load_source,
    schema_issues,
    supported_extensions,
)
from erd_core.issues import Issue, has_errors, severity_counts, to_lines


def _print_issues(issues: List[Issue]) -> None:
    if not issues:
        print("No issues found.")
        return
    for line in to_lines(issues):
        print(line)


def _write_yaml(path: str, payload: Dict[str, Any]) -> None:
    output = yaml.safe_dump(payload, sort_keys=False, allow_unicode=True)
    Path(path).write_text(output, encoding="utf-8")


def _load_config(args: argparse.Namespace) -> ConversionConfig:
    if getattr(args, "config", None):
        return load_config(args.config)
    return ConversionConfig()


def _convert_file(args: argparse.Namespace) -> ConversionResult:
    config = _load_config(args)
    text, file_name = load_source(args.input)
    return convert(text, file_name, config)


def _report_failure(result: ConversionResult) -> int:
    kind = result.error_kind.value if result.error_kind else "ConversionInternal"
    print(f"[{kind}] {result.message}", file=sys.stderr)
    return 1


def cmd_convert(args: argparse.Namespace) -> int:
    result = _convert_file(args)
    if not result.success:
        return _report_failure(result)

    payload = result.schema.to_dict()
    if args.format == "yaml":
        if args.out:
            _write_yaml(args.out, payload)
            print(f"Wrote canonical schema: {args.out}")
        else:
            print(yaml.safe_dump(payload, sort_keys=False, allow_unicode=True))
        return 0

    output = json.dumps(payload, indent=2, sort_keys=False, ensure_ascii=False)
    if args.out:
        Path(args.out).write_text(output + "\n", encoding="utf-8")
        print(f"Wrote canonical schema: {args.out}")
    else:
        print(output)
    return 0


def cmd_dsl(args: argparse.Namespace) -> int:
    result = _convert_file(args)
    if not result.success:
        return _report_failure(result)

    if args.out:
        Path(args.out).write_text(result.dsl_text, encoding="utf-8")
        print(f"Wrote schema DSL: {args.out}")
    else:
        print(result.dsl_text, end="" if result.dsl_text.endswith("\n") else "\n")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    result = _convert_file(args)
    if not result.success:
        return _report_failure(result)

    issues = schema_issues(result.schema.to_dict(), load_schema(args.schema))
    issues.extend(lint_issues(result.schema))
    if args.output_json:
        print(json.dumps([issue.to_dict() for issue in issues], indent=2))
    else:
        _print_issues(issues)
        if issues:
            counts = severity_counts(issues)
            print(f"{counts['error']} error(s), {counts['warn']} warning(s)")
    return 1 if has_errors(issues) else 0


def cmd_formats(args: argparse.Namespace) -> int:
    config = _load_config(args)
    for extension in supported_extensions(config):
        print(f"{extension}\t{detect_format('schema' + extension, config)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="erd", description="Normalize Prisma, SQL and JSON schemas into one ER model")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    convert_parser = sub.add_parser("convert", help="Convert a schema file to the canonical model")
    convert_parser.add_argument("input", help="Path to a .prisma, .sql, .psql or .json schema")
    convert_parser.add_argument("--format", choices=["json", "yaml"], default="json", help="Output format")
    convert_parser.add_argument("--out", help="Output file for the canonical schema")
    convert_parser.add_argument("--config", help="Path to a conversion config YAML")
    convert_parser.set_defaults(func=cmd_convert)

    dsl_parser = sub.add_parser("dsl", help="Print the normalized schema DSL")
    dsl_parser.add_argument("input", help="Path to a schema file")
    dsl_parser.add_argument("--out", help="Output file for the DSL text")
    dsl_parser.add_argument("--config", help="Path to a conversion config YAML")
    dsl_parser.set_defaults(func=cmd_dsl)

    validate_parser = sub.add_parser("validate", help="Convert, then check the result with schema + lint rules")
    validate_parser.add_argument("input", help="Path to a schema file")
    validate_parser.add_argument("--schema", help="Path to JSON schema (defaults to the bundled one)")
    validate_parser.add_argument("--config", help="Path to a conversion config YAML")
    validate_parser.add_argument("--output-json", action="store_true", help="Print issues as JSON")
    validate_parser.set_defaults(func=cmd_validate)

    formats_parser = sub.add_parser("formats", help="List supported file extensions")
    formats_parser.add_argument("--config", help="Path to a conversion config YAML")
    formats_parser.set_defaults(func=cmd_formats)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
