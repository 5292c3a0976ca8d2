"""
Database Models
Import all models here so table metadata is registered
"""

from badgeforge.models.attendee import Attendee
from badgeforge.models.template import SavedTemplate

__all__ = [
    "Attendee",
    "SavedTemplate",
]
