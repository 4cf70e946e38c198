from sqlalchemy import Column, Integer, String, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from app.db.session import Base


class Split(Base):
    __tablename__ = "splits"

    id = Column(String, primary_key=True, index=True)
    expense_id = Column(String, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    member_id = Column(String, ForeignKey("members.id"), nullable=False, index=True)
    # raw allocation input, only the one matching the expense split type is set
    amount = Column(Numeric(12, 2), nullable=True)
    shares = Column(Integer, nullable=True)
    percent = Column(Numeric(9, 6), nullable=True)
    owed_amount = Column(Numeric(12, 2), nullable=False)

    expense = relationship("Expense", back_populates="splits")
