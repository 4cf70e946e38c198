from sqlalchemy import Column, String, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from app.db.session import Base


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String, primary_key=True, index=True)
    expense_id = Column(String, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    member_id = Column(String, ForeignKey("members.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)

    expense = relationship("Expense", back_populates="payments")
