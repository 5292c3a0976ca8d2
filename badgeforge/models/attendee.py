"""
Attendee Model
Imported card records (attendees, students, employees)
"""

from sqlalchemy import Column, String, Integer, Text
from badgeforge.database import Base


class Attendee(Base):
    __tablename__ = "attendees"
    
    id = Column(String(64), primary_key=True)
    owner_id = Column(String(64), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    archetype = Column(String(32), nullable=False, default="conference")
    
    # Common fields
    registration_id = Column(String(100), nullable=True, index=True)
    name = Column(String(200), nullable=True)
    company = Column(String(200), nullable=True)
    pass_type = Column(String(100), nullable=True)
    role = Column(String(50), nullable=True)
    tracks = Column(Text, nullable=True)  # JSON list
    
    # Conference / corporate
    job_title = Column(String(200), nullable=True)
    event_name = Column(String(200), nullable=True)
    event_subtitle = Column(String(200), nullable=True)
    event_start_date = Column(String(50), nullable=True)
    event_end_date = Column(String(50), nullable=True)
    valid_from = Column(String(50), nullable=True)
    valid_to = Column(String(50), nullable=True)
    sponsor = Column(String(200), nullable=True)
    barcode_value = Column(String(200), nullable=True)
    
    # School
    school_id = Column(String(100), nullable=True)
    school_name = Column(String(200), nullable=True)
    class_name = Column(String(50), nullable=True)
    section = Column(String(50), nullable=True)
    father_name = Column(String(200), nullable=True)
    mother_name = Column(String(200), nullable=True)
    date_of_birth = Column(String(50), nullable=True)
    blood_group = Column(String(10), nullable=True)
    emergency_contact = Column(String(100), nullable=True)
    
    contact_number = Column(String(100), nullable=True)
    address = Column(Text, nullable=True)
    
    # Label -> value bag from every source column (JSON object)
    extras = Column(Text, nullable=True)
    image = Column(Text, nullable=True)  # data URI
    
    updated_at = Column(String(40), nullable=True)  # ISO-8601 UTC
