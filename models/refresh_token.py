"""
RefreshToken model: opaque refresh token values handed out at login.
Fields:
- id (String(36))
- user_id (String(36)) - FK to users.id, removed with the user
- token: URL-safe random value; indexed but not unique, collisions at
  64 bytes of entropy are not a practical concern
- created_at, updated_at
"""
from sqlalchemy import Column, String, ForeignKey
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class RefreshToken(BaseModel, Base):
    __tablename__ = "refresh_tokens"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(128), nullable=False, index=True)

    user = relationship("User", back_populates="refresh_tokens")

    def __repr__(self):
        return f"<RefreshToken user_id={self.user_id}>"
