import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship
from .database import Base


class DistributionRecord(Base):
    __tablename__ = "distribution_records"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    work_id = Column(Uuid(as_uuid=True), ForeignKey("works.id", ondelete="CASCADE"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    # Snapshot of the event name at registration time; no FK to events on purpose
    event_name = Column(String, nullable=True)
    memo = Column(Text, nullable=True)
    distributed_at = Column(DateTime(timezone=True), nullable=False, index=True)

    work = relationship("Work", back_populates="distribution_records")

    @property
    def to_snapshot(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "work_id": self.work_id,
            "quantity": self.quantity,
            "event_name": self.event_name,
            "memo": self.memo,
            "distributed_at": self.distributed_at,
        }
