import datetime
import enum
import typing
from sqlalchemy import Column, BigInteger, String, TIMESTAMP, text, ForeignKey
from sqlalchemy.orm import relationship
from tracker_auth.models.base import Base, utcnow


class TokenState(str, enum.Enum):
    ACTIVE = "active"
    ROTATED = "rotated"
    REVOKED = "revoked"
    EXPIRED = "expired"


class RefreshToken(Base):
    __tablename__ = "refresh_tokens"
    __table_args__ = {"schema": "auth"}

    token_id = Column(BigInteger, primary_key=True, autoincrement=True)
    user_id = Column(BigInteger, ForeignKey("auth.users.user_id", ondelete="CASCADE"), nullable=False)
    token_hash = Column(String(64), nullable=False, unique=True)
    expires_at = Column(TIMESTAMP(timezone=True), nullable=False)
    revoked_at = Column(TIMESTAMP(timezone=True))
    replaced_by_token_id = Column(BigInteger, ForeignKey("auth.refresh_tokens.token_id", ondelete="SET NULL"))
    created_by_ip = Column(String(45))
    user_agent = Column(String(512))
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=text("NOW()"))

    user = relationship("User", back_populates="refresh_tokens")

    def state(self, now: typing.Optional[datetime.datetime] = None) -> TokenState:
        # A rotated record is also revoked, so check the replacement link first.
        if self.replaced_by_token_id is not None:
            return TokenState.ROTATED
        if self.revoked_at is not None:
            return TokenState.REVOKED
        if self.expires_at <= (now or utcnow()):
            return TokenState.EXPIRED
        return TokenState.ACTIVE
