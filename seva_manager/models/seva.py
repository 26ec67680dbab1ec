import uuid

from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, JSON, String, Text, Uuid
)
from sqlalchemy.orm import relationship

from seva_manager.db.base_class import Base, utcnow


class Seva(Base):
    __tablename__ = "sevas"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    total_slots = Column(Integer, nullable=False)
    # Derived from the donors table, see services.slot_service
    booked_slots = Column(Integer, nullable=False, default=0)
    amount_options = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(Uuid, ForeignKey("profiles.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    donors = relationship("Donor", back_populates="seva")

    __table_args__ = (
        CheckConstraint("total_slots > 0", name="ck_sevas_total_slots_positive"),
        CheckConstraint("booked_slots >= 0", name="ck_sevas_booked_slots_non_negative"),
        CheckConstraint("booked_slots <= total_slots", name="ck_sevas_booked_within_total"),
    )

    @property
    def remaining_slots(self) -> int:
        return max(self.total_slots - (self.booked_slots or 0), 0)

    def __repr__(self):
        return f"<Seva(id={self.id}, name='{self.name}', booked={self.booked_slots}/{self.total_slots})>"
