from sqlalchemy import Column, String, ForeignKey, DateTime
from app.db.session import Base
from app.models.base import utcnow


class Member(Base):
    __tablename__ = "members"

    id = Column(String, primary_key=True, index=True)
    project_id = Column(String, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
