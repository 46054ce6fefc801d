# pocketledger/models/debt.py
import enum
import uuid
from sqlalchemy import Column, String, ForeignKey, DateTime, Enum, Numeric
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from pocketledger.core.database import Base
from pocketledger.utils.timeutils import utcnow

class DebtType(str, enum.Enum):
    lend = "lend"      # someone owes the user
    borrow = "borrow"  # the user owes someone

class DebtStatus(str, enum.Enum):
    pending = "pending"
    partial = "partial"
    completed = "completed"

class Debt(Base):
    __tablename__ = "debts"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(Enum(DebtType, name="debt_type"), nullable=False)
    person_name = Column(String(length=100), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    # amount - sum(payments.amount); maintained by pocketledger.services.debts
    remaining_amount = Column(Numeric(14, 2), nullable=False)
    status = Column(Enum(DebtStatus, name="debt_status"), nullable=False, default=DebtStatus.pending)
    description = Column(String(length=255), nullable=True)
    due_date = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Debt type={self.type} person={self.person_name} remaining={self.remaining_amount}>"

class DebtPayment(Base):
    __tablename__ = "debt_payments"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    debt_id = Column(PG_UUID(as_uuid=True), ForeignKey("debts.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    payment_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    note = Column(String(length=255), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    debt = relationship("Debt", lazy="joined")

    def __repr__(self):
        return f"<DebtPayment debt_id={self.debt_id} amount={self.amount}>"
