import enum
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, CheckConstraint, func, true
from . import Base


class Role(str, enum.Enum):
    ADMIN = 'admin'
    CONTRIBUTOR = 'contributor'
    USER = 'user'


class User(Base):
    __tablename__ = 'users'
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False, default=Role.USER.value, server_default=Role.USER.value)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    locale = Column(String(10), nullable=False, default='en', server_default='en')
    profile_image_url = Column(String(500), nullable=True)
    bio = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("role IN ('user', 'contributor', 'admin')", name='ck_users_role'),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value
