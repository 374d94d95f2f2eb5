import math
from typing import Annotated
from fastapi import Path
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Primary keys are 32-bit INTEGER columns
MAX_ID = 2**31 - 1
# keeps (page - 1) * limit inside a 64-bit offset
MAX_PAGE = 10**6

ResourceId = Annotated[int, Path(ge=1, le=MAX_ID)]

class CamelModel(BaseModel):
    """Wire models use camelCase keys but accept snake_case on input too."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

class PageInfo(CamelModel):
    current_page: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool

class MessageOut(BaseModel):
    message: str

def page_info(page: int, limit: int, total: int) -> dict:
    return {
        'current_page': page,
        'total_pages': math.ceil(total / limit) if limit else 0,
        'has_next_page': page * limit < total,
        'has_prev_page': page > 1,
    }
