"""
Attendee Request/Response Models
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, Dict, List, Any

from badgeforge.engine.archetypes import Archetype
from badgeforge.engine.records import Record


class ImportRequest(BaseModel):
    """Raw spreadsheet text to turn into records"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "rawText": "Name,Org,Role\nAsha,Acme,Speaker\nRavi,,Attendee",
                "fileKind": "csv",
                "archetype": None,
                "customLabels": {"customText1": "T-Shirt Size"},
                "replace": True,
            }
        },
    )

    raw_text: str = Field(..., min_length=1, description="CSV/TSV text or a pasted sheet")
    file_kind: str = Field(default="csv", description="csv, tsv or excel")
    archetype: Optional[Archetype] = Field(default=None, description="Forces the archetype of every record")
    custom_labels: Dict[str, str] = Field(default_factory=dict, description="Element key -> custom label")
    replace: bool = Field(default=True, description="Replace the collection instead of merging")

    @field_validator("file_kind")
    @classmethod
    def normalize_kind(cls, value: str) -> str:
        return (value or "csv").strip().lower()


class ImportResponse(BaseModel):
    """Outcome of an import"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    imported: int
    total: int
    used_fallback: bool = False
    notice: Optional[str] = None
    records: List[Record]


class AttendeeListResponse(BaseModel):
    """Current record collection in source order"""
    total: int
    attendees: List[Record]


class BulkUpdateRequest(BaseModel):
    """Apply one patch to several records"""
    ids: List[str] = Field(..., min_length=1)
    data: Dict[str, Any] = Field(..., description="Field -> new value; extras are merged")


class BulkUpdateResponse(BaseModel):
    updated: int


class DeleteResponse(BaseModel):
    deleted: int


class FieldDeleteResponse(BaseModel):
    """Result of removing a column label from every record"""
    label: str
    updated: int


class PhotoUploadResponse(BaseModel):
    """Bulk photo matching outcome"""
    matched: int
    failed: int
    total: int
