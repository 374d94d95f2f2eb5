from datetime import date, datetime
from typing import List, Optional
from pydantic import Field
from .common import CamelModel, PageInfo
from .articles import UrlStr


class ArtifactIn(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    category: str = Field(min_length=1, max_length=100)
    period: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=255)
    image_urls: List[UrlStr] = Field(default_factory=list)
    video_url: Optional[UrlStr] = None
    audio_url: Optional[UrlStr] = None
    dimensions: Optional[str] = Field(None, max_length=100)
    material: Optional[str] = Field(None, max_length=100)
    condition_notes: Optional[str] = Field(None, max_length=2000)
    acquisition_date: Optional[date] = None


class ArtifactUpdateIn(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    period: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=255)
    image_urls: Optional[List[UrlStr]] = None
    video_url: Optional[UrlStr] = None
    audio_url: Optional[UrlStr] = None
    dimensions: Optional[str] = Field(None, max_length=100)
    material: Optional[str] = Field(None, max_length=100)
    condition_notes: Optional[str] = Field(None, max_length=2000)
    acquisition_date: Optional[date] = None
    is_featured: Optional[bool] = None


class ArtifactOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    category: str
    period: Optional[str] = None
    location: Optional[str] = None
    image_urls: List[str] = []
    video_url: Optional[str] = None
    audio_url: Optional[str] = None
    dimensions: Optional[str] = None
    material: Optional[str] = None
    condition_notes: Optional[str] = None
    donor_id: Optional[int] = None
    acquisition_date: Optional[date] = None
    is_featured: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ArtifactPagination(PageInfo):
    total_artifacts: int


class ArtifactListOut(CamelModel):
    artifacts: List[ArtifactOut]
    pagination: ArtifactPagination


class ValuesOut(CamelModel):
    values: List[str]
