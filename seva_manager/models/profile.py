from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid, Enum as SQLEnum
from sqlalchemy.orm import relationship

from seva_manager.db.base_class import Base, utcnow
from .enums import ProfileRole


class Profile(Base):
    __tablename__ = "profiles"

    # Issued by the auth provider, never generated here
    id = Column(Uuid, primary_key=True)
    full_name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    role = Column(SQLEnum(ProfileRole), nullable=False, default=ProfileRole.USER)
    referral_code = Column(String, unique=True, index=True, nullable=False)
    referred_by = Column(Uuid, ForeignKey("profiles.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    donors = relationship("Donor", back_populates="added_by_profile")
    referrer = relationship("Profile", remote_side=[id])

    def __repr__(self):
        return f"<Profile(id={self.id}, email='{self.email}', role={self.role})>"
