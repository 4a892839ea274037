from sqlalchemy import Column, ForeignKey, Integer, Uuid
from .database import Base


class LedgerVersion(Base):
    """Per-user revision counter, bumped by every ledger save."""

    __tablename__ = "ledger_versions"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    version = Column(Integer, nullable=False, default=0)
