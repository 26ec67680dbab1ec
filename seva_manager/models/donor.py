import uuid

from sqlalchemy import (
    Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Numeric, String, Uuid,
    Enum as SQLEnum,
)
from sqlalchemy.orm import relationship

from seva_manager.db.base_class import Base, utcnow
from .enums import PaymentMode, PaymentStatus


class Donor(Base):
    __tablename__ = "donors"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    enrollment_number = Column(String, unique=True, index=True, nullable=False)
    seva_id = Column(Uuid, ForeignKey("sevas.id"), nullable=False, index=True)
    added_by = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    donor_name = Column(String, nullable=False)
    contact_phone = Column(String, nullable=True)
    contact_email = Column(String, nullable=True)
    payment_mode = Column(SQLEnum(PaymentMode), nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    paid_amount = Column(Numeric(12, 2), nullable=False, default=0)
    payment_date = Column(Date, nullable=True)
    payment_status = Column(SQLEnum(PaymentStatus), nullable=False, default=PaymentStatus.PENDING, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    seva = relationship("Seva", back_populates="donors")
    added_by_profile = relationship("Profile", back_populates="donors")
    payments = relationship("PaymentHistory", back_populates="donor")

    __table_args__ = (
        CheckConstraint("paid_amount >= 0", name="ck_donors_paid_non_negative"),
        CheckConstraint("paid_amount <= total_amount", name="ck_donors_paid_within_total"),
    )

    def __repr__(self):
        return f"<Donor(id={self.id}, enrollment_number='{self.enrollment_number}', status={self.payment_status})>"
