"""
RefreshToken model: server-side record of an opaque refresh token.
Fields:
- token (unique, opaque random string)
- client_id (String(36)) - FK to clients.id
- revoked (bool)
- created_at, expires_at
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base, as_utc


class RefreshToken(BaseModel, Base):
    __tablename__ = "refresh_tokens"

    token = Column(String(128), nullable=False, unique=True, index=True)
    client_id = Column(String(36), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    revoked = Column(Boolean, default=False, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    client = relationship("Client", back_populates="refresh_tokens")

    def is_expired(self, now) -> bool:
        return now >= as_utc(self.expires_at)

    def __repr__(self):
        return f"<RefreshToken client={self.client_id} revoked={self.revoked}>"
