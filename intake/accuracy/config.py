"""
Configuration for reviewed accuracy metrics.

Supports:
- Built-in critical field table per document type
- Loading overrides from YAML
- Config validation with Pydantic
- Config hashing for reproducibility
"""

import hashlib
import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Environment variable naming a default config file for the CLI
CONFIG_ENV_VAR = "INTAKE_ACCURACY_CONFIG"

# Annotation fields emitted next to data fields by the extraction service
DEFAULT_METADATA_PREFIXES = ["reasoning___", "source___"]


# =============================================================================
# Critical Fields
# =============================================================================

# High-stakes fields per document type
CRITICAL_FIELDS: dict[str, list[str]] = {
    # Admin
    "cover_sheet": ["order_number", "property_address"],
    "transaction_summary": ["buyer_name", "seller_name", "property_address"],
    # Deeds
    "recorded_transfer_deed": [
        "recording_date", "grantor_name", "grantee_name",
        "grantor_signature_present", "notary_signature_present",
    ],
    "deed_of_trust_mortgage": ["recording_date", "loan_amount", "trustor_or_borrower_name"],
    "mortgage_child_docs": ["recording_date", "document_type"],
    # Liens
    "tax_lien": ["recording_date", "taxpayer_name", "total_amount_owed"],
    "mechanics_lien": ["recording_date", "claimant_name", "claim_amount"],
    "hoa_lien": ["recording_date", "association_name", "amount_owed"],
    "judgment_lien": ["recording_date", "creditor_name", "debtor_name", "judgment_amount"],
    "ucc_filing": ["filing_date", "secured_party", "debtor_name"],
    # Encumbrances and court records
    "easement": ["recording_date", "easement_type"],
    "ccr_restrictions": ["recording_date", "declarant_name"],
    "lis_pendens": ["recording_date", "plaintiff_name", "defendant_name", "case_number"],
    "court_order": ["order_date", "case_number"],
    "probate_document": ["decedent_name", "case_number"],
    "bankruptcy_document": ["debtor_name", "case_number", "chapter"],
    "foreclosure_notice": ["recording_date", "borrower_name"],
    # Property
    "tax_reports": ["parcel_identification_number", "tax_year"],
    "prior_policy": ["policy_number"],
    "survey_plat": [
        "surveyor_name", "survey_date", "surveyor_signature_present",
        "surveyor_seal_present", "requires_visual_verification",
    ],
    "property_details": ["legal_description"],
    # Authority and identity
    "power_of_attorney": [
        "principal_name", "agent_name",
        "principal_signature_present", "notary_signature_present",
    ],
    "affidavit": ["affiant_name", "affidavit_type"],
    "entity_authority": ["entity_name", "entity_type"],
    "trust_certification": ["trust_name", "trustee_name"],
    # Closing
    "settlement_statement": ["closing_date", "buyer_name", "seller_name"],
    "lease_document": ["landlord_name", "tenant_name", "lease_term"],
    # Catch-all types
    "other_recorded": ["document_title", "document_summary"],
    "notices_agreements": ["notice_date", "issuing_party_name"],
}


# =============================================================================
# Pydantic Config Model
# =============================================================================


class AccuracyConfig(BaseModel):
    """Reviewed accuracy settings."""

    critical_fields: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in CRITICAL_FIELDS.items()}
    )
    metadata_prefixes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_METADATA_PREFIXES)
    )
    reviewed_status: str = "reviewed"
    schemas_path: Optional[str] = None  # Schema map file or directory of JSON schemas

    def critical_set(self, doc_type: Optional[str]) -> frozenset[str]:
        """Critical fields for a document type (empty when unregistered)."""
        if not doc_type:
            return frozenset()
        return frozenset(self.critical_fields.get(doc_type) or ())

    def is_metadata_field(self, field_name: str) -> bool:
        return any(field_name.startswith(prefix) for prefix in self.metadata_prefixes)

    def config_hash(self) -> str:
        """
        Generate hash of config for reproducibility tracking.

        Returns:
            SHA256 hash of serialized config (first 12 chars)
        """
        config_json = self.model_dump_json()
        return hashlib.sha256(config_json.encode()).hexdigest()[:12]


DEFAULT_CONFIG = AccuracyConfig()


# =============================================================================
# Config Loading Functions
# =============================================================================


def load_yaml(path: Union[str, Path]) -> dict[str, Any]:
    """Load YAML file and return as dict."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Override values take precedence. Nested dicts are merged recursively.
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_config(config_path: Union[str, Path]) -> AccuracyConfig:
    """
    Load accuracy configuration from YAML.

    ``critical_fields`` entries in the file are merged over the built-in
    table per document type. Set ``replace_critical_fields: true`` to use
    the file's table alone.

    Args:
        config_path: Path to YAML config

    Returns:
        AccuracyConfig with all settings resolved
    """
    config_dict = load_yaml(config_path)

    replace = bool(config_dict.pop("replace_critical_fields", False))
    if not replace:
        config_dict = deep_merge(
            {"critical_fields": DEFAULT_CONFIG.model_dump()["critical_fields"]},
            config_dict,
        )

    config = AccuracyConfig.model_validate(config_dict)

    logger.info(
        f"Loaded accuracy config from {config_path} "
        f"({len(config.critical_fields)} doc types, hash: {config.config_hash()})"
    )
    return config


def save_config(config: AccuracyConfig, output_path: Union[str, Path]) -> Path:
    """Save resolved config to YAML file."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8") as f:
        yaml.dump(
            {"replace_critical_fields": True, **config.model_dump()},
            f,
            default_flow_style=False,
            sort_keys=False,
        )

    logger.info(f"Saved accuracy config to {output_path}")
    return output_path


# =============================================================================
# Config Validation
# =============================================================================


def validate_config(config: AccuracyConfig) -> list[str]:
    """
    Validate config and return list of warnings/issues.

    Args:
        config: AccuracyConfig to validate

    Returns:
        List of warning messages (empty if all good)
    """
    warnings = []

    for doc_type, fields in config.critical_fields.items():
        if not fields:
            warnings.append(f"No critical fields listed for doc type: {doc_type}")
            continue
        duplicates = sorted({f for f in fields if fields.count(f) > 1})
        if duplicates:
            warnings.append(
                f"Duplicate critical fields for {doc_type}: {', '.join(duplicates)}"
            )

    for prefix in config.metadata_prefixes:
        if not prefix.endswith("_"):
            warnings.append(
                f"Metadata prefix '{prefix}' has no separator, "
                "may exclude ordinary data fields"
            )

    if config.schemas_path and not Path(config.schemas_path).exists():
        warnings.append(f"Schemas path not found: {config.schemas_path}")

    return warnings
