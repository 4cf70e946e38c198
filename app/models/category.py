from sqlalchemy import Column, String, ForeignKey, DateTime
from app.db.session import Base
from app.models.base import utcnow

DEFAULT_CATEGORY_COLOR = "#3b82f6"


class Category(Base):
    __tablename__ = "categories"

    id = Column(String, primary_key=True, index=True)
    project_id = Column(String, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    color = Column(String, nullable=False, default=DEFAULT_CATEGORY_COLOR)
    created_at = Column(DateTime(timezone=True), default=utcnow)
