"""Command-line entry point: ``fieldforge reduce|generate|compile``."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .core.config import ForgeConfig
from .core.exceptions import FieldForgeError
from .data.documents import load_document
from .data.fields import CATEGORIES, FieldManager
from .generation.generator import FieldGenerator
from .text import reduce_document
from .utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fieldforge",
        description="Salesforce custom field metadata from specifications",
    )
    parser.add_argument('--env-file', help='.env file with FIELDFORGE_* settings')
    parser.add_argument('--log-level', help='Override FIELDFORGE_LOG_LEVEL')
    sub = parser.add_subparsers(dest="command", required=True)

    reduce_cmd = sub.add_parser("reduce", help="Print the reduced text sent for generation")
    reduce_cmd.add_argument('document', help='.txt, .md or .docx specification')

    generate_cmd = sub.add_parser("generate", help="Generate a fields JSON document")
    generate_cmd.add_argument('document', help='.txt, .md or .docx specification')
    generate_cmd.add_argument('-o', '--output', help='Write JSON here instead of stdout')
    generate_cmd.add_argument('--prune', action='store_true',
                              help='Drop attributes the field type does not use')

    compile_cmd = sub.add_parser("compile", help="Write .field-meta.xml files from fields JSON")
    compile_cmd.add_argument('fields_json', help='{"objectName"?, "fields": [...]} document')
    compile_cmd.add_argument('-o', '--output-dir', default='fields', help='Output directory')
    compile_cmd.add_argument('--category', choices=CATEGORIES, help='Only export one category')
    compile_cmd.add_argument('--strict', action='store_true',
                             help='Reject fields carrying attributes their type does not use')

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    config = ForgeConfig.from_env(args.env_file)
    configure_logging(args.log_level or config.log_level, config.log_dir)

    try:
        if args.command == "reduce":
            return _reduce(args, config)
        if args.command == "generate":
            return _generate(args, config)
        return _compile(args, config)
    except FieldForgeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


def _reduce(args: argparse.Namespace, config: ForgeConfig) -> int:
    text = load_document(args.document, max_bytes=config.max_document_bytes)
    print(reduce_document(
        text,
        grace_lines=config.cutoff_grace_lines,
        threshold=config.extraction_threshold,
        min_length=config.min_extraction_length,
    ))
    return 0


def _generate(args: argparse.Namespace, config: ForgeConfig) -> int:
    text = load_document(args.document, max_bytes=config.max_document_bytes)
    result = FieldGenerator(config=config).run(text)
    if not result.ok:
        print(f"Generation failed ({result.error_kind}): {result.error}", file=sys.stderr)
        return 1

    for warning in result.warnings:
        print(f"Warning: {warning.message}", file=sys.stderr)

    manager = FieldManager(result.fields, object_name=result.object_name, config=config)
    output = json.dumps(manager.to_import(prune=args.prune).to_dict(), indent=2, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(output + "\n", encoding="utf-8")
        print(f"Wrote {len(manager)} fields to {args.output}")
    else:
        print(output)
    return 0


def _compile(args: argparse.Namespace, config: ForgeConfig) -> int:
    manager = FieldManager(config=config)
    manager.import_json(Path(args.fields_json).read_text(encoding="utf-8"), strict=args.strict)
    for field in manager:
        for message in manager.validate_field(field):
            logger.warning("%s: %s", field.api_name or field.label, message)
    written = manager.export(args.output_dir, category=args.category)
    print(f"Wrote {len(written)} field documents to {args.output_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
