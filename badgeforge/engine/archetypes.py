"""
Card Archetypes
Built-in card categories, their factory layouts and the preset themes
"""

import copy
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Archetype(str, Enum):
    """Fixed card categories"""
    CONFERENCE = "conference"
    SCHOOL = "school-classic"
    CORPORATE = "company-id"


def _text(x, y, font_size, visible=True):
    return {"x": x, "y": y, "visible": visible, "fontSize": font_size, "textAlign": "center"}


def _photo(x, y, width, visible=True):
    return {"x": x, "y": y, "visible": visible, "width": width}


# Factory layouts. Coordinates are percentages of a portrait card.
DEFAULT_LAYOUTS: Dict[Archetype, Dict[str, dict]] = {
    Archetype.CONFERENCE: {
        "image": _photo(50, 30, 30),
        "name": _text(50, 52, 22),
        "company": _text(50, 60, 14),
        "role": _text(50, 67, 12),
        "qrCode": _photo(50, 78, 18),
        "registrationId": _text(50, 90, 11),
    },
    Archetype.CORPORATE: {
        "company": _text(50, 10, 16),
        "image": _photo(50, 28, 30),
        "name": _text(50, 50, 22),
        "role": _text(50, 57, 13),
        "registrationId": _text(50, 64, 12),
        "contactNumber": _text(50, 70, 11),
        "address": _text(50, 76, 10),
        "qrCode": _photo(50, 88, 14),
    },
    Archetype.SCHOOL: {
        "company": _text(50, 8, 16),
        "image": _photo(50, 26, 28),
        "name": _text(50, 46, 20),
        "registrationId": _text(50, 52, 12),
        "className": _text(50, 58, 12),
        "fatherName": _text(50, 64, 11),
        "motherName": _text(50, 70, 11),
        "dateOfBirth": _text(50, 76, 11),
        "contactNumber": _text(50, 82, 11),
        "address": _text(50, 90, 10),
    },
}


def default_layout_data(archetype: Archetype) -> Dict[str, dict]:
    """Fresh copy of the factory element map for an archetype"""
    return copy.deepcopy(DEFAULT_LAYOUTS[Archetype(archetype)])


class Theme(BaseModel):
    """Cosmetic card styling, independent of positioning"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    gradient_from: str = Field(default="#4f46e5", description="Header gradient start color")
    gradient_to: str = Field(default="#7c3aed", description="Header gradient end color")
    text_color: str = Field(default="#0f172a")
    corner_radius: int = Field(default=24, ge=0, le=120, description="Corner radius in pixels")


DEFAULT_THEMES: List[Theme] = [
    Theme(id="indigo", name="Indigo Night", gradient_from="#4f46e5", gradient_to="#7c3aed"),
    Theme(id="ocean", name="Ocean", gradient_from="#0ea5e9", gradient_to="#0f766e"),
    Theme(id="sunset", name="Sunset", gradient_from="#f97316", gradient_to="#db2777"),
    Theme(id="mono", name="Mono Slim", gradient_from="#1e293b", gradient_to="#475569", corner_radius=8),
]
