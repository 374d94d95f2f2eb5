from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field
from .common import CamelModel
from ..models.users import Role

class RegisterIn(CamelModel):
    username: str = Field(min_length=3, max_length=50, pattern=r'^[A-Za-z0-9_.-]+$')
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    locale: str = Field('en', min_length=2, max_length=10)

class LoginIn(BaseModel):
    # username or email
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)

class PasswordChangeIn(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=8, max_length=128)

class RoleUpdateIn(BaseModel):
    role: Role

class StatusUpdateIn(CamelModel):
    is_active: bool

class UserOut(CamelModel):
    id: int
    username: str
    email: str
    first_name: str
    last_name: str
    role: str
    is_active: bool
    locale: str
    bio: Optional[str] = None
    profile_image_url: Optional[str] = None
    created_at: Optional[datetime] = None

class TokenOut(BaseModel):
    access_token: str
    token_type: str = 'bearer'
    user: Optional[UserOut] = None
