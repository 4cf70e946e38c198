from sqlalchemy import Column, String, ForeignKey, DateTime
from app.db.session import Base
from app.models.base import utcnow

DEFAULT_PAYMENT_METHOD_ICON = "💳"


class PaymentMethod(Base):
    __tablename__ = "payment_methods"

    id = Column(String, primary_key=True, index=True)
    project_id = Column(String, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    icon = Column(String, nullable=False, default=DEFAULT_PAYMENT_METHOD_ICON)
    created_at = Column(DateTime(timezone=True), default=utcnow)
