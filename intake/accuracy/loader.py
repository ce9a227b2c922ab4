"""
Loading of reviewed documents and schema maps from disk.

Document files may be a JSON array, a JSON object with a ``documents`` key,
or JSON Lines. Rows exported straight from the intake database use
snake_case columns and JSON-encoded strings; they are hydrated into the
shape the review UI works with before validation.
"""

import json
import logging
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import ValidationError

from .schemas import ReviewDocument, SchemaMap

logger = logging.getLogger(__name__)


def _decode(value: Any) -> Any:
    """Decode a JSON-encoded column, leaving other values untouched."""
    if isinstance(value, str) and value.strip()[:1] in ("{", "["):
        return json.loads(value)
    return value


def _first_present(record: dict, *keys: str) -> Any:
    for key in keys:
        if record.get(key) is not None:
            return record[key]
    return None


def hydrate_record(record: dict[str, Any]) -> dict[str, Any]:
    """
    Map a database row onto the document shape.

    Builds an ``extraction`` payload from ``extraction_data`` when the row
    has none, and a ``classification`` from ``document_type``.
    """
    doc = dict(record)

    extracted = _decode(_first_present(record, "extraction_data", "extracted_data", "extractionData"))
    likelihoods = _decode(record.get("likelihoods"))
    if doc.get("extraction") is None and extracted:
        doc["extraction"] = {"data": extracted, "likelihoods": likelihoods or {}}
    else:
        doc["extraction"] = _decode(doc.get("extraction"))

    edited = _first_present(record, "editedFields", "edited_fields")
    doc.pop("edited_fields", None)
    doc["editedFields"] = _decode(edited)

    override = _first_present(record, "categoryOverride", "category_override")
    doc.pop("category_override", None)
    doc["categoryOverride"] = _decode(override)

    classification = _decode(record.get("classification"))
    if not classification and record.get("document_type"):
        classification = {
            "category": record["document_type"],
            "confidence": record.get("classification_confidence"),
        }
    doc["classification"] = classification

    return doc


def _read_records(path: Path) -> list[Any]:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".jsonl", ".ndjson"):
        return [json.loads(line) for line in text.splitlines() if line.strip()]

    payload = json.loads(text) if text.strip() else []
    if isinstance(payload, dict):
        payload = payload.get("documents", [])
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of documents in {path}")
    return payload


def load_documents(path: Union[str, Path]) -> list[ReviewDocument]:
    """
    Load reviewed documents from a JSON or JSON Lines file.

    Args:
        path: Path to the documents file

    Returns:
        List of ReviewDocument; rows that cannot be validated are skipped
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Documents file not found: {path}")

    try:
        records = _read_records(path)
    except json.JSONDecodeError as e:
        raise ValueError(f"Could not parse documents file {path}: {e}") from e

    documents = []
    for i, record in enumerate(records):
        if not isinstance(record, dict):
            logger.warning(f"Skipping row {i} in {path.name}: not an object")
            continue
        try:
            documents.append(ReviewDocument.model_validate(hydrate_record(record)))
        except (ValidationError, json.JSONDecodeError) as e:
            logger.warning(f"Skipping row {i} in {path.name}: {e}")

    logger.info(f"Loaded {len(documents)} documents from {path}")
    return documents


def load_schema_map(path: Union[str, Path]) -> SchemaMap:
    """
    Load a schema map.

    Accepts a JSON/YAML file already keyed by document type, or a directory
    of ``<doc_type>.json`` JSON schemas.

    Args:
        path: File or directory

    Returns:
        Mapping of doc type id -> {"schema": <json schema>}
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Schemas path not found: {path}")

    if path.is_dir():
        schema_map = {}
        for schema_path in sorted(path.glob("*.json")):
            with open(schema_path, "r", encoding="utf-8") as f:
                schema = json.load(f)
            # Accept files that are already wrapped as {"schema": ...}
            if isinstance(schema, dict) and "properties" not in schema and "schema" in schema:
                schema = schema["schema"]
            schema_map[schema_path.stem] = {"schema": schema}
    else:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                schema_map = yaml.safe_load(f) or {}
            else:
                schema_map = json.load(f)
        if not isinstance(schema_map, dict):
            raise ValueError(f"Expected a mapping of doc types in {path}")

    logger.info(f"Loaded {len(schema_map)} schemas from {path}")
    return schema_map
