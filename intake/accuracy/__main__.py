"""
CLI interface for reviewed accuracy metrics.

Usage:
    python -m intake.accuracy report --documents exports/documents.json
    python -m intake.accuracy report --documents docs.jsonl --schemas schemas/ --by-type
    python -m intake.accuracy report --documents docs.json --json --output accuracy.json
    python -m intake.accuracy document --documents docs.json --id 42
    python -m intake.accuracy --config configs/accuracy.yaml config
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .aggregator import aggregate_by_doc_type, aggregate_reviewed_accuracy
from .config import CONFIG_ENV_VAR, AccuracyConfig, load_config, validate_config
from .evaluator import compute_reviewed_accuracy_metrics, is_eligible, is_reclassified
from .loader import load_documents, load_schema_map
from .report import format_accuracy_report

# Load environment variables from .env file
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def _resolve_config(config_path: Optional[str]) -> AccuracyConfig:
    config_path = config_path or os.environ.get(CONFIG_ENV_VAR)
    if not config_path:
        return AccuracyConfig()

    config = load_config(config_path)
    for warning in validate_config(config):
        logger.warning(f"Config warning: {warning}")
    return config


def _resolve_schemas(schemas_path: Optional[str], config: AccuracyConfig):
    path = schemas_path or config.schemas_path
    if not path:
        logger.info("No schemas given, evaluating observed fields only")
        return None
    return load_schema_map(path)


def _write_or_print(text: str, output: Optional[str]) -> None:
    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text, encoding="utf-8")
        logger.info(f"Saved to {output_path}")
    else:
        print(text)


def cmd_report(args):
    """Report reviewed accuracy across a document set."""
    config = _resolve_config(args.config)
    schema_map = _resolve_schemas(args.schemas, config)
    documents = load_documents(args.documents)

    aggregate = aggregate_reviewed_accuracy(documents, schema_map, config=config)
    by_type = aggregate_by_doc_type(documents, schema_map, config=config) if args.by_type else None

    if aggregate.reviewed_doc_count == 0:
        logger.warning("No reviewed documents found, rates are undefined")

    if args.json:
        payload = aggregate.to_dict()
        if by_type:
            payload["byDocType"] = {k: v.to_dict() for k, v in by_type.items()}
        _write_or_print(json.dumps(payload, indent=2), args.output)
    else:
        report = format_accuracy_report(aggregate, title=args.title, by_type=by_type)
        _write_or_print(report, args.output)


def cmd_document(args):
    """Show reviewed accuracy for a single document."""
    config = _resolve_config(args.config)
    schema_map = _resolve_schemas(args.schemas, config)
    documents = load_documents(args.documents)

    matches = [doc for doc in documents if doc.id == args.id]
    if not matches:
        logger.error(f"Document not found: {args.id}")
        sys.exit(1)

    doc = matches[0]
    result = compute_reviewed_accuracy_metrics(doc, schema_map, config=config)
    if result is None:
        if not is_eligible(doc, config):
            reason = "not reviewed"
        elif is_reclassified(doc):
            reason = "reclassified to another document type"
        else:
            reason = "excluded"
        print(json.dumps({"docId": doc.id, "excluded": reason}, indent=2))
        return

    payload = result.to_dict()
    payload["fieldOutcomes"] = {
        name: outcome.value for name, outcome in result.field_outcomes.items()
    }
    payload["editedFields"] = result.edited_fields
    payload["fieldLikelihoods"] = result.field_likelihoods
    print(json.dumps(payload, indent=2))


def cmd_config(args):
    """Show the resolved configuration and any warnings."""
    config = _resolve_config(args.config)

    print(f"Config hash: {config.config_hash()}")
    print(f"Reviewed status: {config.reviewed_status}")
    print(f"Metadata prefixes: {', '.join(config.metadata_prefixes)}")
    print(f"Schemas path: {config.schemas_path or '-'}")
    print(f"Critical fields ({len(config.critical_fields)} doc types):")
    for doc_type, fields in sorted(config.critical_fields.items()):
        print(f"  {doc_type:30} {', '.join(fields)}")

    warnings = validate_config(config)
    if warnings:
        print("\nWarnings:")
        for warning in warnings:
            print(f"  - {warning}")


def main():
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        description="Reviewed Accuracy Metrics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--config",
        help=f"Path to accuracy config YAML (default: ${CONFIG_ENV_VAR} or built-in)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Report command
    report_parser = subparsers.add_parser("report", help="Corpus-wide reviewed accuracy")
    report_parser.add_argument(
        "--documents",
        required=True,
        help="Path to documents file (.json or .jsonl)",
    )
    report_parser.add_argument(
        "--schemas",
        help="Schema map file or directory of JSON schemas (default: from config)",
    )
    report_parser.add_argument(
        "--by-type",
        action="store_true",
        help="Break metrics down by document type",
    )
    report_parser.add_argument(
        "--json",
        action="store_true",
        help="Emit JSON instead of the text report",
    )
    report_parser.add_argument(
        "--title",
        default="REVIEWED ACCURACY REPORT",
        help="Report title",
    )
    report_parser.add_argument(
        "--output",
        help="Path to save the report",
    )

    # Document command
    document_parser = subparsers.add_parser("document", help="Reviewed accuracy for one document")
    document_parser.add_argument(
        "--documents",
        required=True,
        help="Path to documents file (.json or .jsonl)",
    )
    document_parser.add_argument(
        "--id",
        required=True,
        help="Document id",
    )
    document_parser.add_argument(
        "--schemas",
        help="Schema map file or directory of JSON schemas",
    )

    # Config command
    subparsers.add_parser("config", help="Show resolved configuration")

    args = parser.parse_args()

    if args.command == "report":
        cmd_report(args)
    elif args.command == "document":
        cmd_document(args)
    elif args.command == "config":
        cmd_config(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
