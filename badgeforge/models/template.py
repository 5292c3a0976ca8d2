"""
Saved Template Model
Named layout + label + theme bundles, private to an owner or public
"""

from sqlalchemy import Column, String, Text
from badgeforge.database import Base


class SavedTemplate(Base):
    __tablename__ = "saved_templates"
    
    id = Column(String(64), primary_key=True)
    owner_id = Column(String(64), nullable=False, index=True)
    
    # Template info
    name = Column(String(100), nullable=False)
    icon = Column(String(50), nullable=False, default="default")
    base_template = Column(String(32), nullable=False, default="conference")
    visibility = Column(String(10), nullable=False, default="private")
    
    # Serialized JSON
    layout = Column(Text, nullable=False)
    element_counters = Column(Text, nullable=True)
    theme = Column(Text, nullable=True)
    custom_labels = Column(Text, nullable=True)
    
    created_at = Column(String(40), nullable=True)  # ISO-8601 UTC
    updated_at = Column(String(40), nullable=True)  # ISO-8601 UTC
