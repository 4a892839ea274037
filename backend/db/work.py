import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import relationship
from .database import Base


class Work(Base):
    __tablename__ = "works"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    # High-water mark: raised by restocks together with current_stock
    initial_stock = Column(Integer, nullable=False, default=0)
    current_stock = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    memo = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="works")
    distribution_records = relationship(
        "DistributionRecord",
        back_populates="work",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def to_snapshot(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "initial_stock": self.initial_stock,
            "current_stock": self.current_stock,
            "price": self.price,
            "memo": self.memo,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
