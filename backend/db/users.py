from fastapi_users.db import SQLAlchemyBaseUserTableUUID
from sqlalchemy.orm import relationship
from .database import Base


class User(SQLAlchemyBaseUserTableUUID, Base):
    __tablename__ = "users"

    works = relationship("Work", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    events = relationship("Event", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
