"""
Layout Request/Response Models
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, Dict, List, Literal

from badgeforge.engine.archetypes import Archetype, Theme
from badgeforge.engine.filenames import DEFAULT_TEMPLATE
from badgeforge.engine.labels import ResolvedElement
from badgeforge.engine.layout import ElementPosition, Layout
from badgeforge.engine.records import Record
from badgeforge.engine.session import EditorSession


class LayoutPayload(BaseModel):
    """A card design as the editor holds it"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    layout: Dict[str, ElementPosition]
    custom_labels: Dict[str, str] = Field(default_factory=dict)
    theme: Optional[Theme] = None

    def to_layout(self) -> Layout:
        return Layout.from_element_map(self.layout)


class ResolveRequest(LayoutPayload):
    record: Optional[Record] = Field(default=None, description="Omit to resolve labels only")


class ResolveResponse(BaseModel):
    elements: List[ResolvedElement]


class PreviewRequest(LayoutPayload):
    record: Optional[Record] = None
    width: int = Field(default=640, ge=160, le=2000, description="Card width in pixels")


class ExportRequest(LayoutPayload):
    """Render stored records into a ZIP of card images"""
    record_ids: Optional[List[str]] = Field(default=None, description="Defaults to every record")
    filename_template: str = Field(default=DEFAULT_TEMPLATE)
    format: Literal["png", "jpg"] = "png"
    width: int = Field(default=640, ge=160, le=2000)


class DefaultLayoutResponse(BaseModel):
    """Factory layout for an archetype with its default labels"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    archetype: Archetype
    layout: Dict[str, ElementPosition]
    labels: Dict[str, str]
    themes: List[Theme]


class ElementDeleteRequest(LayoutPayload):
    """Editor state an element is deleted from"""
    archetype: Archetype = Archetype.CONFERENCE
    hidden_fields: List[str] = Field(default_factory=list)
    element_counters: Optional[Dict[str, int]] = None

    def to_session(self) -> EditorSession:
        session = EditorSession(
            archetype=self.archetype,
            layout=Layout.from_element_map(self.layout, self.element_counters),
            custom_labels=dict(self.custom_labels),
            hidden_fields=set(self.hidden_fields),
        )
        if self.theme is not None:
            session.theme = self.theme
        return session


class ElementDeleteResponse(BaseModel):
    """Editor state after the delete, plus the number of records changed"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    key: str
    layout: Dict[str, ElementPosition]
    element_counters: Dict[str, int]
    custom_labels: Dict[str, str]
    hidden_fields: List[str]
    updated: int
