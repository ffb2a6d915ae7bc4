from enum import Enum

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from sqlalchemy.types import Enum as SAEnum

from models.base_model import Base, BaseModel, SoftDeleteMixin


class Role(str, Enum):
    ADMIN = "ADMIN"
    NORMAL_USER = "NORMAL_USER"


class Client(SoftDeleteMixin, BaseModel, Base):
    """A registered principal: credentials, role and active flag."""
    __tablename__ = "clients"

    name = Column(String(100), nullable=False)
    # Matched exactly as stored; schemas normalize on the way in
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        SAEnum(Role, name="client_role", native_enum=False),
        nullable=False,
        default=Role.NORMAL_USER,
    )

    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="client",
        passive_deletes=True,
    )

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")
