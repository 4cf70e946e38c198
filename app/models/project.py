from sqlalchemy import Column, String, DateTime
from app.db.session import Base
from app.models.base import utcnow


class Project(Base):
    __tablename__ = "projects"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    emoji = Column(String, nullable=True, default="📊")
    currency = Column(String, nullable=False, default="USD")
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
