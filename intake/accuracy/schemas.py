"""
Pydantic schemas for reviewed intake documents.

Documents are owned by the intake application; this package only reads them.
Field names accept both the camelCase keys the review UI produces and the
snake_case columns stored by the database.
"""

import json
from typing import Any, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class CategoryOverride(BaseModel):
    """Document type assigned by a reviewer in place of the automatic one."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = None
    is_custom: bool = Field(
        False,
        validation_alias=AliasChoices("isCustom", "is_custom"),
        description="Free-form type with no registered schema",
    )

    @field_validator("is_custom", mode="before")
    @classmethod
    def coerce_custom(cls, v: Any) -> bool:
        return bool(v)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)


class Classification(BaseModel):
    """Automatic document classification."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    category: Optional[str] = None
    confidence: Optional[float] = None

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @field_validator("confidence", mode="before")
    @classmethod
    def parse_confidence(cls, v: Any) -> Optional[float]:
        """Unparseable confidences are dropped rather than rejected."""
        if v is None or isinstance(v, bool):
            return None
        try:
            return float(v)
        except (TypeError, ValueError):
            return None


class ReviewDocument(BaseModel):
    """
    A processed document as seen by the accuracy engine.

    Only the attributes the engine reads are declared; anything else the
    intake application stores on the document is kept as extra data.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    id: Optional[str] = None
    status: Optional[str] = None
    edited_fields: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("editedFields", "edited_fields"),
    )
    category_override: Optional[CategoryOverride] = Field(
        None,
        validation_alias=AliasChoices("categoryOverride", "category_override"),
    )
    classification: Optional[Classification] = None
    extraction: Optional[Any] = Field(
        None,
        description="Raw extraction payload as returned by the extraction service",
    )

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        return str(v)

    @field_validator("status", mode="before")
    @classmethod
    def coerce_status(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @field_validator("edited_fields", mode="before")
    @classmethod
    def parse_edited_fields(cls, v: Any) -> Any:
        """Treat null as no edits; decode JSON-encoded columns."""
        if v is None:
            return {}
        if isinstance(v, str):
            return json.loads(v) if v.strip() else {}
        return v

    @field_validator("category_override", "classification", mode="before")
    @classmethod
    def parse_json_column(cls, v: Any) -> Any:
        if isinstance(v, str):
            return json.loads(v) if v.strip() else None
        return v


SchemaMap = dict[str, Any]
DocumentLike = Union[ReviewDocument, dict[str, Any]]


def as_document(doc: Optional[DocumentLike]) -> Optional[ReviewDocument]:
    """Coerce a plain mapping into a ReviewDocument (None passes through)."""
    if doc is None or isinstance(doc, ReviewDocument):
        return doc
    return ReviewDocument.model_validate(doc)
