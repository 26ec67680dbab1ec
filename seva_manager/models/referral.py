import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from seva_manager.db.base_class import Base, utcnow


class Referral(Base):
    __tablename__ = "referrals"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    referrer_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    referred_user_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    referrer = relationship("Profile", foreign_keys=[referrer_id])
    referred_user = relationship("Profile", foreign_keys=[referred_user_id])
