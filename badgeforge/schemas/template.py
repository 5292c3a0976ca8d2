"""
Saved Template Request/Response Models
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, Dict, List
from datetime import datetime
import json

from badgeforge.engine.archetypes import Archetype, Theme
from badgeforge.engine.layout import ElementPosition, Layout


def _normalize_visibility(value) -> str:
    return "public" if value == "public" else "private"


class SaveTemplateRequest(BaseModel):
    """Request to save the current layout as a named template"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "name": "Agile India 2026",
                "icon": "star",
                "baseTemplate": "conference",
                "layout": {
                    "name": {"x": 50, "y": 52, "visible": True, "fontSize": 22, "textAlign": "center"},
                    "image": {"x": 50, "y": 30, "visible": True, "width": 30},
                    "customText1": {"x": 40, "y": 60, "visible": True, "fontSize": 18},
                },
                "elementCounters": {"text": 1, "photo": 0},
                "customLabels": {"customText1": "Workshop"},
                "visibility": "private",
            }
        },
    )

    name: str = Field(..., min_length=1, max_length=100, description="Template name")
    icon: str = Field(default="default", max_length=50)
    base_template: Archetype = Field(default=Archetype.CONFERENCE, description="Archetype the layout started from")
    layout: Dict[str, ElementPosition] = Field(..., description="Element key -> position")
    element_counters: Optional[Dict[str, int]] = Field(default=None, description="Custom element counters")
    theme: Optional[Theme] = None
    custom_labels: Optional[Dict[str, str]] = None
    visibility: str = Field(default="private", description="private or public")

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name cannot be blank")
        return value

    @field_validator("visibility", mode="before")
    @classmethod
    def normalize_visibility(cls, value) -> str:
        return _normalize_visibility(value)

    @classmethod
    def from_layout(cls, name: str, layout: Layout, **kwargs) -> "SaveTemplateRequest":
        return cls(
            name=name,
            layout=layout.elements,
            element_counters=layout.counters(),
            **kwargs,
        )


class UpdateTemplateRequest(BaseModel):
    """Partial update of an owned template"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    icon: Optional[str] = Field(default=None, max_length=50)
    layout: Optional[Dict[str, ElementPosition]] = None
    element_counters: Optional[Dict[str, int]] = None
    theme: Optional[Theme] = None
    custom_labels: Optional[Dict[str, str]] = None
    visibility: Optional[str] = None

    @field_validator("visibility", mode="before")
    @classmethod
    def normalize_visibility(cls, value) -> Optional[str]:
        if value is None:
            return None
        return _normalize_visibility(value)


class SavedTemplateResponse(BaseModel):
    """Saved template as listed for a user"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    name: str
    icon: str = "default"
    base_template: Archetype = Archetype.CONFERENCE
    layout: Dict[str, ElementPosition] = Field(default_factory=dict)
    element_counters: Optional[Dict[str, int]] = None
    theme: Optional[Theme] = None
    custom_labels: Dict[str, str] = Field(default_factory=dict)
    visibility: str = "private"
    owner_id: str
    is_owner: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def model_validate(cls, obj, **kwargs):
        """Parse JSON columns if they arrive as strings"""
        if isinstance(obj, dict):
            obj = dict(obj)
            for column in ("layout", "element_counters", "theme", "custom_labels"):
                if isinstance(obj.get(column), str):
                    try:
                        obj[column] = json.loads(obj[column])
                    except (json.JSONDecodeError, TypeError):
                        obj[column] = None
            if obj.get("custom_labels") is None:
                obj["custom_labels"] = {}
            if obj.get("layout") is None:
                obj["layout"] = {}
        return super().model_validate(obj, **kwargs)

    def to_layout(self) -> Layout:
        return Layout.from_element_map(self.layout, self.element_counters)


class TemplateListResponse(BaseModel):
    """Templates visible to a user: their own plus all public ones"""
    total: int
    templates: List[SavedTemplateResponse]
