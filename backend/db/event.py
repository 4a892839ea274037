import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship
from .database import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    location = Column(String, nullable=True)
    memo = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="events")

    @property
    def to_snapshot(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "date": self.date,
            "location": self.location,
            "memo": self.memo,
            "created_at": self.created_at,
        }
