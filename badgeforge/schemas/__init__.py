"""
Pydantic schemas for request/response validation
"""

from badgeforge.schemas.template import (
    SaveTemplateRequest,
    UpdateTemplateRequest,
    SavedTemplateResponse,
    TemplateListResponse,
)
from badgeforge.schemas.attendee import (
    ImportRequest,
    ImportResponse,
    AttendeeListResponse,
)

__all__ = [
    "SaveTemplateRequest",
    "UpdateTemplateRequest",
    "SavedTemplateResponse",
    "TemplateListResponse",
    "ImportRequest",
    "ImportResponse",
    "AttendeeListResponse",
]
