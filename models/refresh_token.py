"""
RefreshToken model: one row per issued, not yet redeemed refresh token.
Fields:
- token (unique) - the exact signed string handed to the client
- user_id (String(36)) - FK to users.id
- expires_at - copied from the token's own `exp` claim
- created_at
A row is deleted the moment its token is redeemed; absence means redeemed,
revoked or never issued.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class RefreshToken(BaseModel, Base):
    __tablename__ = "refresh_tokens"

    token = Column(String(512), nullable=False, unique=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="refresh_tokens")
