from sqlalchemy import Column, String, ForeignKey, DateTime, Numeric
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.models.base import utcnow
from app.models.payment import Payment
from app.models.split import Split


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(String, primary_key=True, index=True)
    project_id = Column(String, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    # naive; aware inputs are converted to UTC before they get here
    date = Column(DateTime, nullable=False)
    split_type = Column(String, nullable=False)
    category_id = Column(String, ForeignKey("categories.id"), nullable=True)
    payment_method_id = Column(String, ForeignKey("payment_methods.id"), nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    payments = relationship(Payment, back_populates="expense", cascade="all, delete-orphan")
    splits = relationship(Split, back_populates="expense", cascade="all, delete-orphan")
