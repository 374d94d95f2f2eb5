from sqlalchemy import Column, Integer, String, Text, Boolean, Date, DateTime, ForeignKey, JSON, func, false
from . import Base

class Artifact(Base):
    __tablename__ = 'artifacts'
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=False, index=True)
    period = Column(String(100), nullable=True)
    location = Column(String(255), nullable=True)
    image_urls = Column(JSON, nullable=False, default=list)
    video_url = Column(String(500), nullable=True)
    audio_url = Column(String(500), nullable=True)
    dimensions = Column(String(100), nullable=True)
    material = Column(String(100), nullable=True)
    condition_notes = Column(Text, nullable=True)
    donor_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), index=True, nullable=True)
    acquisition_date = Column(Date, nullable=True)
    is_featured = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
