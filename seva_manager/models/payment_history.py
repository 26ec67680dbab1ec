import uuid

from sqlalchemy import (
    CheckConstraint, Column, Date, DateTime, ForeignKey, Numeric, Text, Uuid, Enum as SQLEnum
)
from sqlalchemy.orm import relationship

from seva_manager.db.base_class import Base, utcnow
from .enums import PaymentMode


class PaymentHistory(Base):
    """Append-only ledger of payments recorded against a donor."""
    __tablename__ = "payment_history"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    donor_id = Column(Uuid, ForeignKey("donors.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_mode = Column(SQLEnum(PaymentMode), nullable=True)
    payment_date = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    created_by = Column(Uuid, ForeignKey("profiles.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    donor = relationship("Donor", back_populates="payments")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payment_history_amount_positive"),
    )
